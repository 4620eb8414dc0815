"""Domain layer: entities and value objects. No dependencies on outer layers."""

from contactbook.domain.entities import Contact, sort_key

__all__ = ["Contact", "sort_key"]
