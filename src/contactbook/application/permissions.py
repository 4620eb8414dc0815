"""One-shot permission gate checked before a contact session starts."""

import logging
import threading
from collections.abc import Callable

from contactbook.application.errors import PermissionDenied

logger = logging.getLogger(__name__)

READ_CONTACTS = "contacts.read"


class PermissionGate:
    """
    Confirms a permission is granted, asking the host at most once.
    check(permission) reports whether it is already granted; request(permission)
    prompts the user and returns the grant result. A denial is final for the
    lifetime of the gate.
    """

    def __init__(
        self,
        permission: str,
        *,
        check: Callable[[str], bool],
        request: Callable[[str], bool],
    ) -> None:
        self.permission = permission
        self._check = check
        self._request = request
        self._lock = threading.Lock()
        self._granted = False
        self._requested = False

    @property
    def granted(self) -> bool:
        return self._granted

    def require(self) -> None:
        """Return if the permission is granted, otherwise raise PermissionDenied."""
        with self._lock:
            if self._granted:
                return
            if self._check(self.permission):
                self._granted = True
                return
            if not self._requested:
                self._requested = True
                self._granted = bool(self._request(self.permission))
            if not self._granted:
                logger.warning("Permission %s denied", self.permission)
                raise PermissionDenied(self.permission)
