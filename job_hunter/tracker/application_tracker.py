"""
Application Tracker - Persists the application history and reports on it.

The history lives under a single store key. Every read-modify-write of
that key happens under a per-key lock so concurrent writers cannot lose
each other's updates or record two applications for one listing.
"""

from collections import Counter
from contextlib import contextmanager
from datetime import date, timezone
from typing import Iterator, Optional
import logging
import threading

from job_hunter.core.models import Application, ApplicationStatus
from job_hunter.utils.storage import KeyValueStore

APPLICATIONS_KEY = "applications"
EVICTED_IDS_KEY = "applied-listing-ids"

_key_locks: dict[tuple[int, str], threading.RLock] = {}
_key_locks_guard = threading.Lock()


def _lock_for(store: KeyValueStore, key: str) -> threading.RLock:
    """One lock per (store, key) shared by every tracker using that store."""
    with _key_locks_guard:
        return _key_locks.setdefault((id(store), key), threading.RLock())


class ApplicationTracker:
    """Tracks job applications in a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        max_stored: int = 1000,
        key: str = APPLICATIONS_KEY,
        evicted_key: str = EVICTED_IDS_KEY,
    ):
        """
        Initialize the application tracker.

        Args:
            store: Persistent store holding the history
            max_stored: Oldest applications beyond this count are dropped
            key: Store key for the history
            evicted_key: Store key for listing ids whose records were dropped
                by the cap; they still count as applied
        """
        self.store = store
        self.max_stored = max_stored
        self.key = key
        self.evicted_key = evicted_key
        self.logger = logging.getLogger(self.__class__.__name__)
        self._lock = _lock_for(store, key)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the history lock across a check-then-write sequence."""
        with self._lock:
            yield

    def get_all_applications(self) -> list[Application]:
        """Get all tracked applications, oldest first."""
        raw = self.store.get(self.key) or []
        if not isinstance(raw, list):
            self.logger.error(f"Application history under {self.key!r} is not a list, ignoring it")
            return []

        applications = []
        for item in raw:
            if not isinstance(item, dict):
                self.logger.error(f"Skipping unreadable application record: {item!r}")
                continue
            try:
                applications.append(Application.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                self.logger.error(f"Skipping unreadable application record: {e}")
        return applications

    def evicted_listing_ids(self) -> set[str]:
        """Listing ids whose application records were dropped by the history cap."""
        raw = self.store.get(self.evicted_key) or []
        if not isinstance(raw, list):
            self.logger.error(f"Evicted listing ids under {self.evicted_key!r} are not a list, ignoring them")
            return set()
        return {str(listing_id) for listing_id in raw if isinstance(listing_id, (str, int))}

    def get_application(self, application_id: str) -> Optional[Application]:
        """Get an application by ID."""
        for app in self.get_all_applications():
            if app.id == application_id:
                return app
        return None

    def find_by_listing(self, listing_id: str) -> Optional[Application]:
        for app in self.get_all_applications():
            if app.listing_id == listing_id:
                return app
        return None

    def has_applied(self, listing_id: str) -> bool:
        return listing_id in self.applied_listing_ids()

    def applied_listing_ids(self) -> set[str]:
        """Every listing id ever applied to, including evicted records."""
        ids = {app.listing_id for app in self.get_all_applications()}
        return ids | self.evicted_listing_ids()

    def add_application(self, application: Application) -> bool:
        """
        Append an application to the history.

        When the history exceeds max_stored the oldest records are
        dropped, but their listing ids are kept so those listings are
        never applied to again.

        Returns:
            False if the listing already has an application or the
            history could not be written
        """
        with self._lock:
            applications = self.get_all_applications()
            evicted = self.evicted_listing_ids()
            known = {app.listing_id for app in applications} | evicted
            if application.listing_id in known:
                self.logger.warning(f"Listing {application.listing_id} already has an application")
                return False

            applications.append(application)
            if self.max_stored and len(applications) > self.max_stored:
                dropped = applications[:-self.max_stored]
                applications = applications[-self.max_stored:]
                evicted |= {app.listing_id for app in dropped}
                # Persisted before the trimmed history
                if not self.store.set(self.evicted_key, sorted(evicted)):
                    self.logger.error("Failed to persist evicted listing ids")
                    return False

            if not self._save(applications):
                return False

        title = application.listing.title if application.listing else application.listing_id
        self.logger.info(f"Added application: {title}")
        return True

    def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
    ) -> Optional[Application]:
        """
        Set the status of an application.

        Used by the external tracking process; no transition rules are
        enforced here.

        Returns:
            Updated Application, or None if not found or not saved
        """
        with self._lock:
            applications = self.get_all_applications()
            for app in applications:
                if app.id == application_id:
                    old_status = app.status
                    app.status = status
                    if not self._save(applications):
                        return None
                    self.logger.info(f"Updated {application_id}: {old_status.value} -> {status.value}")
                    return app

        self.logger.warning(f"Application not found: {application_id}")
        return None

    def count_auto_applied_on(self, day: date) -> int:
        """Count automated applications made on a UTC calendar day."""
        count = 0
        for app in self.get_all_applications():
            if not app.auto_applied:
                continue
            applied = app.applied_date
            if applied.tzinfo is not None:
                applied = applied.astimezone(timezone.utc)
            if applied.date() == day:
                count += 1
        return count

    def get_applications_by_status(self, status: ApplicationStatus) -> list[Application]:
        """Get all applications with a specific status."""
        return [app for app in self.get_all_applications() if app.status == status]

    def get_statistics(self) -> dict:
        """Get statistics about tracked applications."""
        applications = self.get_all_applications()
        total = len(applications)

        by_status = Counter(app.status for app in applications)
        by_source = Counter(
            (app.listing.source if app.listing and app.listing.source else "Unknown")
            for app in applications
        )
        screening = by_status.get(ApplicationStatus.SCREENING, 0)

        return {
            "total": total,
            "by_status": {status.value: by_status.get(status, 0) for status in ApplicationStatus},
            "response_rate": round(screening / total * 100, 1) if total else 0.0,
            "sources": [{"name": name, "count": count} for name, count in by_source.items()],
            "auto_applied": sum(1 for app in applications if app.auto_applied),
        }

    def _save(self, applications: list[Application]) -> bool:
        saved = self.store.set(self.key, [app.to_dict() for app in applications])
        if not saved:
            self.logger.error("Failed to persist application history")
        return saved
