"""Errors raised by the application layer and its adapters."""


class ContactbookError(Exception):
    """Base class for contactbook errors."""


class StorageError(ContactbookError):
    """The underlying store could not complete a read or write."""


class PermissionDenied(ContactbookError):
    """The host declined a permission the contact service requires."""

    def __init__(self, permission: str) -> None:
        super().__init__(f"Permission denied: {permission}")
        self.permission = permission
