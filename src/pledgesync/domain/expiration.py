"""Per-user record of when derived access should lapse."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .timestamps import Clock, format_timestamp, parse_timestamp, utcnow

if TYPE_CHECKING:
    from datetime import datetime

    from .ports.access import AccessControl
    from .ports.persistence import KeyValueStore

log = getLogger(__name__)

EXPIRATIONS_BLOB: Final[str] = "expirations"


@dataclass(slots=True)
class ExpirationLedger:
    """Expiration timestamps keyed by local user id, stored as one blob.

    Every change is read-modify-write against the store and is mirrored to the
    access collaborator when one is configured.
    """

    store: KeyValueStore
    access: AccessControl | None = None
    clock: Clock = field(default=utcnow)

    def all(self) -> dict[str, str]:
        stored = self.store.get(EXPIRATIONS_BLOB) or {}
        return {str(user_id): str(value) for user_id, value in stored.items()}

    def get(self, user_id: str) -> str | None:
        return self.all().get(str(user_id))

    def set(self, user_id: str, expiration: datetime | str) -> None:
        moment = parse_timestamp(expiration) if isinstance(expiration, str) else expiration
        expirations = self.all()
        expirations[str(user_id)] = format_timestamp(moment)
        self.store.set(EXPIRATIONS_BLOB, expirations)
        log.info("Access for user %s now expires at %s", user_id, expirations[str(user_id)])
        if self.access is not None:
            self.access.grant_access_until(str(user_id), moment)

    def clear(self, user_id: str) -> None:
        expirations = self.all()
        if expirations.pop(str(user_id), None) is None:
            return
        self.store.set(EXPIRATIONS_BLOB, expirations)
        log.info("Cleared access expiration for user %s", user_id)
        if self.access is not None:
            self.access.revoke_access_tracking(str(user_id))

    def is_expired(self, user_id: str) -> bool:
        """Absent and unreadable expirations both count as expired."""

        expiration = self.get(user_id)
        if expiration is None:
            return True
        try:
            expires_at = parse_timestamp(expiration)
        except ValueError:
            log.warning("Unreadable expiration %r for user %s", expiration, user_id)
            return True
        return self.clock() >= expires_at
