"""
Auto Apply Module - Idempotent job applications with rate limiting.

Safeguards:
1. One application per listing id, ever
2. Only listings at or above the score threshold are auto-applied
3. At most a fixed batch per run and a daily cap across runs
4. Applications are made one at a time with a pause between them
5. A cancel event stops the run between applications

Which listings qualify is decided by select_auto_apply_candidates(), a
pure function. AutoApplicant.run_auto_apply() only executes that plan.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Collection, Iterable, Optional
import logging
import threading
import time

from job_hunter.core.models import Application, ApplicationStatus, Listing, MatchResult, Profile
from job_hunter.generators.cover_letter_generator import CoverLetterGenerator
from job_hunter.tracker.application_tracker import ApplicationTracker
from job_hunter.utils.config import Config


class ApplyStatus(Enum):
    """Outcome of a single apply attempt."""
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass
class ApplyResult:
    """Result of applying to one listing."""
    status: ApplyStatus
    listing: Listing
    application: Optional[Application] = None

    @property
    def message(self) -> str:
        target = f"{self.listing.title} at {self.listing.company}"
        if self.status == ApplyStatus.APPLIED:
            return f"Successfully applied to {target}!"
        if self.status == ApplyStatus.ALREADY_APPLIED:
            return f"You have already applied to {target}."
        return f"Applied to {target}, but the application could not be saved."


@dataclass
class AutoApplyReport:
    """Summary of one auto-apply run."""
    results: list[ApplyResult] = field(default_factory=list)
    cancelled: bool = False
    daily_remaining: Optional[int] = None

    @property
    def applied(self) -> list[Application]:
        """Applications that were created and saved."""
        return [r.application for r in self.results if r.status == ApplyStatus.APPLIED]

    @property
    def unsaved(self) -> list[Application]:
        """Applications that were created but could not be persisted."""
        return [r.application for r in self.results if r.status == ApplyStatus.PERSISTENCE_FAILED]


def select_auto_apply_candidates(
    ranked: Iterable[MatchResult],
    threshold: int = 85,
    batch_size: int = 5,
    already_applied: Collection[str] = (),
    remaining_daily: Optional[int] = None,
) -> list[Listing]:
    """
    Pick the listings an auto-apply run should apply to.

    Args:
        ranked: Match results, best first
        threshold: Minimum overall score
        batch_size: Maximum applications in one run
        already_applied: Listing ids that already have an application
        remaining_daily: Applications left under the daily cap (None = no cap)

    Returns:
        Listings in ranked order, at most min(batch_size, remaining_daily)
    """
    limit = batch_size if remaining_daily is None else min(batch_size, remaining_daily)
    if limit <= 0:
        return []

    selected: list[Listing] = []
    seen: set[str] = set(already_applied)
    for result in ranked:
        if result.overall_score < threshold:
            continue
        listing_id = result.listing.id
        if listing_id in seen:
            continue
        seen.add(listing_id)
        selected.append(result.listing)
        if len(selected) >= limit:
            break
    return selected


class AutoApplicant:
    """
    Creates applications for listings, manually or automatically.

    Cover letters and persistence are shared, rate-sensitive resources,
    so applications are never made concurrently by this class.
    """

    def __init__(
        self,
        profile: Profile,
        tracker: ApplicationTracker,
        cover_letters: CoverLetterGenerator,
        config: Optional[Config] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the auto applicant.

        Args:
            profile: Candidate profile used for cover letters
            tracker: Application history
            cover_letters: Cover letter collaborator
            config: Thresholds, batch size, delay and daily cap
            sleep: Replaces the pause between applications (tests)
            clock: Returns the current time (tests)
        """
        config = config or Config()
        self.profile = profile
        self.tracker = tracker
        self.cover_letters = cover_letters
        self.threshold = config.get_int("application.auto_apply_threshold")
        self.batch_size = config.get_int("application.auto_apply_batch_size")
        self.delay_seconds = config.get_int("application.application_delay_ms") / 1000.0
        self.max_per_day = config.get_int("application.max_auto_apply_per_day")
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logging.getLogger(self.__class__.__name__)

    def apply(self, listing: Listing, is_auto: bool = False) -> ApplyResult:
        """
        Apply to a listing unless an application for it already exists.

        Args:
            listing: Listing to apply to
            is_auto: Whether this is an automated application

        Returns:
            ApplyResult; ALREADY_APPLIED means nothing was written
        """
        if self.tracker.has_applied(listing.id):
            self.logger.info(f"Already applied to {listing.title} at {listing.company}")
            return ApplyResult(status=ApplyStatus.ALREADY_APPLIED, listing=listing)

        # Generated outside the history lock
        cover_letter = self.cover_letters.generate(self.profile, listing)

        with self.tracker.locked():
            if self.tracker.has_applied(listing.id):
                self.logger.info(f"Already applied to {listing.title} at {listing.company}")
                return ApplyResult(status=ApplyStatus.ALREADY_APPLIED, listing=listing)

            application = Application(
                listing_id=listing.id,
                listing=listing,
                status=ApplicationStatus.APPLIED,
                applied_date=self._clock(),
                cover_letter=cover_letter,
                auto_applied=is_auto,
            )

            if not self.tracker.add_application(application):
                return ApplyResult(
                    status=ApplyStatus.PERSISTENCE_FAILED,
                    listing=listing,
                    application=application,
                )

        mode = "Auto-applied" if is_auto else "Applied"
        self.logger.info(f"{mode} to {listing.title} at {listing.company}")
        return ApplyResult(status=ApplyStatus.APPLIED, listing=listing, application=application)

    def remaining_daily_quota(self) -> int:
        """Automated applications still allowed today (UTC)."""
        used = self.tracker.count_auto_applied_on(self._clock().astimezone(timezone.utc).date())
        return max(self.max_per_day - used, 0)

    def plan(self, ranked: Iterable[MatchResult]) -> list[Listing]:
        """Listings the next auto-apply run would apply to."""
        return select_auto_apply_candidates(
            ranked,
            threshold=self.threshold,
            batch_size=self.batch_size,
            already_applied=self.tracker.applied_listing_ids(),
            remaining_daily=self.remaining_daily_quota(),
        )

    def run_auto_apply(
        self,
        ranked: Iterable[MatchResult],
        cancel_event: Optional[threading.Event] = None,
    ) -> AutoApplyReport:
        """
        Apply to the qualifying listings one at a time.

        Args:
            ranked: Match results, best first
            cancel_event: Checked before every application

        Returns:
            AutoApplyReport with one result per attempted listing
        """
        candidates = self.plan(ranked)
        report = AutoApplyReport()

        for index, listing in enumerate(candidates):
            if index > 0:
                self._wait(cancel_event)
            if cancel_event is not None and cancel_event.is_set():
                self.logger.info("Auto-apply cancelled")
                report.cancelled = True
                break
            report.results.append(self.apply(listing, is_auto=True))

        report.daily_remaining = self.remaining_daily_quota()
        self.logger.info(
            f"Auto-apply finished: {len(report.applied)} applied, "
            f"{len(report.unsaved)} unsaved, "
            f"{report.daily_remaining} left today"
        )
        return report

    def _wait(self, cancel_event: Optional[threading.Event]) -> None:
        if self._sleep is not None:
            self._sleep(self.delay_seconds)
        elif cancel_event is not None:
            cancel_event.wait(self.delay_seconds)
        else:
            time.sleep(self.delay_seconds)
