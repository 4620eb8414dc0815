"""Domain entity: Contact."""

from dataclasses import dataclass

# Contact ids are caller-assigned signed 64-bit integers.
ID_MIN = -(2**63)
ID_MAX = 2**63 - 1


@dataclass(frozen=True)
class Contact:
    """
    A person in the address book, keyed by a caller-assigned id.
    The phone number is stored as given; image_reference is an opaque string
    (e.g. a URI) or None when the contact has no image.
    """

    id: int
    name: str
    phone_number: str = ""
    image_reference: str | None = None

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise ValueError("Contact id must be an integer.")
        if not ID_MIN <= self.id <= ID_MAX:
            raise ValueError("Contact id must fit in a signed 64-bit integer.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Contact name must be non-empty.")
        if self.phone_number is None:
            object.__setattr__(self, "phone_number", "")


def sort_key(contact: Contact) -> tuple[str, int]:
    """Ordering of the contact list: name ascending (binary), then id."""
    return (contact.name, contact.id)
