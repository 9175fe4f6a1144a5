"""Tests for multi-source aggregation."""

import threading

from job_hunter.integrations.aggregator import JobAggregator, deduplicate_listings, settle_all
from job_hunter.integrations.adzuna import AdzunaProvider
from job_hunter.integrations.themuse import TheMuseProvider

from conftest import FakeProvider, make_listing


class TestDeduplicate:
    def test_first_seen_wins_across_case(self):
        first = make_listing(id="a", title="Backend Developer", company="Acme")
        dup = make_listing(id="b", title="BACKEND developer", company="acme")
        other = make_listing(id="c", title="Backend Developer", company="Globex")

        assert [l.id for l in deduplicate_listings([first, dup, other])] == ["a", "c"]


class TestSettleAll:
    def test_results_are_tagged_in_task_order(self):
        def boom():
            raise RuntimeError("down")

        results = settle_all([
            ("one", lambda: [make_listing(id="1")]),
            ("two", boom),
        ])

        assert [r.source for r in results] == ["one", "two"]
        assert results[0].ok and len(results[0].listings) == 1
        assert isinstance(results[1].error, RuntimeError)
        assert not results[1].ok

    def test_cancelled_before_start_skips_everything(self):
        cancel = threading.Event()
        cancel.set()
        called = []

        results = settle_all([("one", lambda: called.append(1) or [])], cancel_event=cancel)

        assert results[0].skipped
        assert called == []

    def test_cancel_skips_tasks_not_yet_started(self):
        cancel = threading.Event()

        def first():
            cancel.set()
            return [make_listing(id="1")]

        results = settle_all(
            [("one", first), ("two", lambda: [make_listing(id="2")])],
            max_workers=1,
            cancel_event=cancel,
        )

        assert results[0].ok
        assert results[1].skipped

    def test_no_tasks(self):
        assert settle_all([]) == []


class TestJobAggregator:
    def test_merges_and_dedups_in_provider_order(self, config):
        a = FakeProvider("A", [make_listing(id="a1"), make_listing(id="a2", title="Frontend")])
        b = FakeProvider("B", [make_listing(id="b1", title="backend developer", company="ACME")])

        listings = JobAggregator(config, providers=[a, b]).search_all_sources("dev", "Stockholm")

        assert [l.id for l in listings] == ["a1", "a2"]
        assert a.calls == [("dev", "Stockholm")]

    def test_failing_provider_does_not_lose_others(self, config):
        broken = FakeProvider("Broken", error=RuntimeError("timeout"))
        working = FakeProvider("Working", [make_listing(id="w1")])
        aggregator = JobAggregator(config, providers=[broken, working])

        listings = aggregator.search_all_sources("dev", "")

        assert [l.id for l in listings] == ["w1"]
        stats = aggregator.get_stats()["last_search"]
        assert stats["Broken"]["ok"] is False
        assert stats["Working"] == {"ok": True, "listings": 1, "skipped": False}

    def test_unavailable_providers_are_not_queried(self, config):
        offline = FakeProvider("Offline", [make_listing()], available=False)
        aggregator = JobAggregator(config, providers=[offline])

        assert aggregator.search_all_sources("dev", "") == []
        assert offline.calls == []

    def test_sequential_mode(self, config):
        config.set("search.parallel_search", False)
        provider = FakeProvider("A", [make_listing()])
        aggregator = JobAggregator(config, providers=[provider])

        assert aggregator.parallel is False
        assert len(aggregator.search_all_sources("dev", "")) == 1

    def test_builds_providers_from_config(self, config):
        config.set("api_keys.adzuna_app_id", "app")
        config.set("api_keys.adzuna", "key")
        config.set("search.providers", ["Adzuna", "themuse", "monster"])

        aggregator = JobAggregator(config)

        assert [type(p) for p in aggregator.providers] == [AdzunaProvider, TheMuseProvider]
        assert aggregator.get_available_providers() == ["Adzuna", "TheMuse"]
        assert all(p.max_requests_per_minute == 10 for p in aggregator.providers)

    def test_add_and_remove_provider(self, config):
        aggregator = JobAggregator(config, providers=[])
        aggregator.add_provider(FakeProvider("Custom"))

        assert aggregator.remove_provider("custom") is True
        assert aggregator.remove_provider("custom") is False
