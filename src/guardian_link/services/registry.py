"""In-memory registry of guardian presence records."""

import logging
from dataclasses import dataclass, field, replace

from guardian_link.domain.guardians import GuardianRecord
from guardian_link.services.clock import Clock, utc_now

_logger = logging.getLogger(__name__)


@dataclass
class GuardianRegistry:
    """Maps session ids to guardian presence records.

    Iteration order is registration order. Re-registering an existing
    session replaces its record in place and keeps its position.
    """

    clock: Clock = utc_now
    _records: dict[str, GuardianRecord] = field(default_factory=dict)

    def register(
        self,
        session_id: str,
        alias: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> GuardianRecord:
        """Insert or replace the record for a session."""
        record = GuardianRecord(
            session_id=session_id,
            alias=alias,
            lat=lat,
            lng=lng,
            updated_at=self.clock(),
        )
        self._records[session_id] = record
        _logger.info("Guardian registered", extra={"session_id": session_id})
        return record

    def update_location(self, session_id: str, lat: float, lng: float) -> bool:
        """Move a registered guardian; return False for unknown sessions."""
        current = self._records.get(session_id)
        if current is None:
            _logger.debug(
                "Ignoring location update from unregistered session",
                extra={"session_id": session_id},
            )
            return False
        self._records[session_id] = replace(
            current, lat=lat, lng=lng, updated_at=self.clock()
        )
        return True

    def remove(self, session_id: str) -> GuardianRecord | None:
        """Delete a record if present and return it."""
        return self._records.pop(session_id, None)

    def get(self, session_id: str) -> GuardianRecord | None:
        """Return the record for a session, if registered."""
        return self._records.get(session_id)

    def snapshot(self) -> list[GuardianRecord]:
        """Return the current records in registration order."""
        return list(self._records.values())
