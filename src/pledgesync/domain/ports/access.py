"""Port for the timed-access side effect driven by the expiration ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime


@runtime_checkable
class AccessControl(Protocol):
    def grant_access_until(self, user_id: str, expiration: datetime) -> None: ...

    def revoke_access_tracking(self, user_id: str) -> None: ...
