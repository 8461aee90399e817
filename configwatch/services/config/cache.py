"""
Configuration Cache

In-memory holder for the current configuration snapshot.
Safe for concurrent readers alongside a single writer.
"""

import threading
from datetime import datetime, timezone

from configwatch.common.logging_setup import get_service_logger

from .snapshot import DEFAULT_SNAPSHOT, ConfigSnapshot

logger = get_service_logger("config.cache")


class ConfigCache:
    """
    Holds exactly one current ConfigSnapshot.

    Snapshots are immutable, so the lock only guards the reference swap and
    the reference read. A reader that already holds a snapshot keeps it
    across later updates.
    """

    def __init__(self, default: ConfigSnapshot = DEFAULT_SNAPSHOT):
        self._default = default
        self._snapshot: ConfigSnapshot | None = None
        self._version = 0
        self._updated_at: datetime | None = None
        self._lock = threading.Lock()

    def update(self, snapshot: ConfigSnapshot) -> None:
        """Replace the current snapshot"""
        now = datetime.now(timezone.utc)
        with self._lock:
            self._snapshot = snapshot
            self._version += 1
            self._updated_at = now
            version = self._version

        logger.debug(
            f"Snapshot replaced (version {version}, model {snapshot.model_name})",
            extra={"version": version, "model_name": snapshot.model_name},
        )

    def read(self) -> ConfigSnapshot:
        """Get the current snapshot, or the default if none has been set"""
        with self._lock:
            snapshot = self._snapshot
        return snapshot if snapshot is not None else self._default

    @property
    def has_snapshot(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    @property
    def version(self) -> int:
        """Number of updates applied so far"""
        with self._lock:
            return self._version

    @property
    def updated_at(self) -> datetime | None:
        """Time of the last update (UTC)"""
        with self._lock:
            return self._updated_at
