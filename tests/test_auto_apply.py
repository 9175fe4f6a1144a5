"""Tests for idempotent, rate-limited applications."""

from datetime import timedelta
import threading

import pytest

from job_hunter.core.models import Application, MatchResult
from job_hunter.generators.cover_letter_generator import CoverLetterGenerator
from job_hunter.tracker.application_tracker import ApplicationTracker
from job_hunter.utils.auto_apply import (
    ApplyStatus,
    AutoApplicant,
    select_auto_apply_candidates,
)
from job_hunter.utils.storage import MemoryStore

from conftest import make_listing


def ranked(*scores):
    return [
        MatchResult(listing=make_listing(id=str(i), title=f"Role {i}"), overall_score=score)
        for i, score in enumerate(scores)
    ]


class FailingStore(MemoryStore):
    def set(self, key, value):
        return False


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def applicant(profile, store, config, sleeps, fixed_clock):
    return AutoApplicant(
        profile=profile,
        tracker=ApplicationTracker(store),
        cover_letters=CoverLetterGenerator(use_ai=False),
        config=config,
        sleep=sleeps.append,
        clock=fixed_clock,
    )


class TestSelectCandidates:
    def test_threshold_is_inclusive(self):
        selected = select_auto_apply_candidates(ranked(90, 85, 84))
        assert [l.id for l in selected] == ["0", "1"]

    def test_batch_size_limits_selection(self):
        assert len(select_auto_apply_candidates(ranked(*[95] * 10))) == 5

    def test_skips_already_applied_and_repeated_ids(self):
        results = ranked(95, 95, 95)
        results.append(MatchResult(listing=make_listing(id="1"), overall_score=95))
        selected = select_auto_apply_candidates(results, already_applied={"0"})
        assert [l.id for l in selected] == ["1", "2"]

    def test_daily_remaining_limits_selection(self):
        assert len(select_auto_apply_candidates(ranked(*[95] * 10), remaining_daily=2)) == 2
        assert select_auto_apply_candidates(ranked(95), remaining_daily=0) == []

    def test_keeps_ranked_order(self):
        selected = select_auto_apply_candidates(ranked(99, 70, 88, 91), batch_size=2)
        assert [l.id for l in selected] == ["0", "2"]


class TestApply:
    def test_creates_applied_application(self, applicant, fixed_clock):
        result = applicant.apply(make_listing(), is_auto=False)

        assert result.status == ApplyStatus.APPLIED
        app = result.application
        assert app.listing_id == "1"
        assert app.status.value == "Applied"
        assert app.applied_date == fixed_clock()
        assert app.auto_applied is False
        assert app.cover_letter.startswith("Dear Hiring Manager,")

    def test_second_apply_is_a_noop(self, applicant, store):
        listing = make_listing()
        applicant.apply(listing)

        second = applicant.apply(listing)

        assert second.status == ApplyStatus.ALREADY_APPLIED
        assert second.application is None
        assert "already applied" in second.message
        assert len(store.get("applications")) == 1

    def test_persistence_failure_is_reported(self, profile, config):
        applicant = AutoApplicant(
            profile,
            ApplicationTracker(FailingStore()),
            CoverLetterGenerator(use_ai=False),
            config,
        )
        result = applicant.apply(make_listing())
        assert result.status == ApplyStatus.PERSISTENCE_FAILED
        assert result.application is not None


class TestRunAutoApply:
    def test_ten_qualifying_listings_apply_five_with_delays(self, applicant, store, sleeps):
        report = applicant.run_auto_apply(ranked(*[95] * 10))

        assert [r.status for r in report.results] == [ApplyStatus.APPLIED] * 5
        assert len(report.applied) == 5
        assert sleeps == [2.0] * 4
        stored = store.get("applications")
        assert len({a["job_id"] for a in stored}) == len(stored) == 5
        assert all(a["auto_applied"] for a in stored)

    def test_second_run_takes_the_next_batch(self, applicant):
        results = ranked(*[95] * 7)
        applicant.run_auto_apply(results)

        report = applicant.run_auto_apply(results)

        assert [r.listing.id for r in report.results] == ["5", "6"]

    def test_nothing_qualifies(self, applicant, sleeps):
        report = applicant.run_auto_apply(ranked(80, 60))
        assert report.results == []
        assert sleeps == []

    def test_daily_cap_counts_earlier_runs(self, applicant, config, fixed_clock):
        applicant.max_per_day = 3
        applicant.tracker.add_application(
            Application(listing_id="earlier", applied_date=fixed_clock(), auto_applied=True)
        )
        applicant.tracker.add_application(
            Application(listing_id="yesterday", applied_date=fixed_clock() - timedelta(days=1), auto_applied=True)
        )

        report = applicant.run_auto_apply(ranked(*[95] * 10))

        assert len(report.applied) == 2
        assert report.daily_remaining == 0

    def test_manual_applications_do_not_count_toward_cap(self, applicant, fixed_clock):
        applicant.tracker.add_application(Application(listing_id="manual", applied_date=fixed_clock()))
        assert applicant.remaining_daily_quota() == 20

    def test_cancel_between_applications(self, applicant):
        cancel = threading.Event()
        applicant._sleep = lambda seconds: cancel.set()

        report = applicant.run_auto_apply(ranked(*[95] * 5), cancel_event=cancel)

        assert report.cancelled is True
        assert len(report.results) == 1

    def test_cancel_before_start(self, applicant, store):
        cancel = threading.Event()
        cancel.set()

        report = applicant.run_auto_apply(ranked(95), cancel_event=cancel)

        assert report.cancelled is True
        assert store.get("applications") is None

    def test_settings_come_from_config(self, profile, store, config):
        config.set("application.auto_apply_threshold", 70)
        config.set("application.auto_apply_batch_size", 2)
        config.set("application.application_delay_ms", 500)
        waits = []
        applicant = AutoApplicant(
            profile,
            ApplicationTracker(store),
            CoverLetterGenerator(use_ai=False),
            config,
            sleep=waits.append,
        )

        report = applicant.run_auto_apply(ranked(75, 72, 71))

        assert len(report.results) == 2
        assert waits == [0.5]


class TestAppliedOnceEver:
    def test_listing_dropped_from_history_is_not_applied_again(self, profile, store, config):
        applicant = AutoApplicant(
            profile,
            ApplicationTracker(store, max_stored=2),
            CoverLetterGenerator(use_ai=False),
            config,
        )
        for listing_id in ("1", "2", "3"):
            applicant.apply(make_listing(id=listing_id, title=f"Role {listing_id}"))

        again = applicant.apply(make_listing(id="1", title="Role 1"))

        assert again.status == ApplyStatus.ALREADY_APPLIED

    def test_corrupted_history_does_not_stop_the_run(self, profile, config, sleeps):
        store = MemoryStore({"applications": ["garbage", {"job_id": "x", "status": 7}]})
        applicant = AutoApplicant(
            profile,
            ApplicationTracker(store),
            CoverLetterGenerator(use_ai=False),
            config,
            sleep=sleeps.append,
        )

        report = applicant.run_auto_apply(ranked(95, 95))

        assert len(report.applied) == 2


class TestReportCounts:
    def test_unsaved_applications_are_not_counted_as_applied(self, profile, config, sleeps):
        applicant = AutoApplicant(
            profile,
            ApplicationTracker(FailingStore()),
            CoverLetterGenerator(use_ai=False),
            config,
            sleep=sleeps.append,
        )

        report = applicant.run_auto_apply(ranked(95, 95))

        assert report.applied == []
        assert len(report.unsaved) == 2


class LockCheckingLetters:
    """Cover letter stub recording whether another thread can take the history lock."""

    def __init__(self, tracker):
        self.tracker = tracker
        self.lock_was_free = []

    def generate(self, profile, listing):
        def try_lock():
            acquired = self.tracker._lock.acquire(blocking=False)
            if acquired:
                self.tracker._lock.release()
            self.lock_was_free.append(acquired)

        worker = threading.Thread(target=try_lock)
        worker.start()
        worker.join()
        return "letter"


class TestCoverLetterOutsideLock:
    def test_history_lock_is_free_while_letter_is_written(self, profile, store, config):
        tracker = ApplicationTracker(store)
        letters = LockCheckingLetters(tracker)
        applicant = AutoApplicant(profile, tracker, letters, config)

        result = applicant.apply(make_listing())

        assert result.status == ApplyStatus.APPLIED
        assert result.application.cover_letter == "letter"
        assert letters.lock_was_free == [True]

    def test_application_written_while_letter_is_generated_wins(self, profile, store, config):
        tracker = ApplicationTracker(store)

        class RacingLetters:
            def generate(self, profile, listing):
                tracker.add_application(Application(listing_id=listing.id))
                return "letter"

        applicant = AutoApplicant(profile, tracker, RacingLetters(), config)

        result = applicant.apply(make_listing())

        assert result.status == ApplyStatus.ALREADY_APPLIED
        assert len(tracker.get_all_applications()) == 1
