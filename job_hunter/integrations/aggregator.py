"""
Job Aggregator - Combines results from multiple job board providers.

Providers are queried concurrently and the aggregator waits for all of
them to settle. One provider failing never discards another's results.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional
import logging
import threading

from .base import JobSearchProvider
from .adzuna import AdzunaProvider
from .jsearch import JSearchProvider
from .themuse import TheMuseProvider
from job_hunter.core.models import Listing
from job_hunter.utils.config import Config

_CANCELLED = object()


@dataclass
class SourceResult:
    """Outcome of one provider's search."""
    source: str
    listings: list[Listing] = field(default_factory=list)
    error: Optional[BaseException] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped


def settle_all(
    tasks: list[tuple[str, Callable[[], list[Listing]]]],
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> list[SourceResult]:
    """
    Run tasks concurrently and wait for every one of them to finish.

    Returns one SourceResult per task, in task order. A task that raises
    is reported through SourceResult.error. Tasks that have not started
    running when cancel_event is set are marked skipped.
    """
    if not tasks:
        return []

    workers = max_workers or len(tasks)

    def guarded(task):
        if cancel_event is not None and cancel_event.is_set():
            return _CANCELLED
        return task()

    pending: list[tuple[str, Optional[Future]]] = []

    with ThreadPoolExecutor(max_workers=workers) as executor:
        for source, task in tasks:
            if cancel_event is not None and cancel_event.is_set():
                pending.append((source, None))
                continue
            pending.append((source, executor.submit(guarded, task)))

        results = []
        for source, future in pending:
            if future is None:
                results.append(SourceResult(source=source, skipped=True))
                continue
            try:
                value = future.result()
            except Exception as e:
                results.append(SourceResult(source=source, error=e))
                continue
            if value is _CANCELLED:
                results.append(SourceResult(source=source, skipped=True))
            else:
                results.append(SourceResult(source=source, listings=list(value)))

    return results


def deduplicate_listings(listings: Iterable[Listing]) -> list[Listing]:
    """Keep the first listing seen for each title/company pair."""
    seen = set()
    unique = []
    for listing in listings:
        key = listing.dedup_key
        if key not in seen:
            seen.add(key)
            unique.append(listing)
    return unique


class JobAggregator:
    """Aggregates job listings from multiple providers."""

    def __init__(
        self,
        config: Optional[Config] = None,
        providers: Optional[list[JobSearchProvider]] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            config: Application configuration holding provider credentials
            providers: Explicit providers; built from config when omitted
        """
        self.config = config or Config()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.parallel = bool(self.config.get("search.parallel_search", True))
        self.last_results: list[SourceResult] = []

        if providers is None:
            providers = self._build_providers()
        self.providers: list[JobSearchProvider] = list(providers)

    def _build_providers(self) -> list[JobSearchProvider]:
        settings = self.config.get_providers_config()
        request_options = {
            "timeout": settings["timeout"],
            "retry_attempts": settings["retry_attempts"],
            "retry_delay": settings["retry_delay"],
            "max_requests_per_minute": settings["max_requests_per_minute"],
        }

        available = {
            "adzuna": lambda: AdzunaProvider(
                app_id=settings["adzuna_app_id"],
                api_key=settings["adzuna_api_key"],
                country=settings["adzuna_country"],
                results_per_page=settings["results_per_page"],
                **request_options,
            ),
            "jsearch": lambda: JSearchProvider(api_key=settings["rapidapi_key"], **request_options),
            "themuse": lambda: TheMuseProvider(api_key=settings["themuse_api_key"], **request_options),
        }

        providers = []
        for name in self.config.get_enabled_providers():
            factory = available.get(name)
            if factory is None:
                self.logger.warning(f"Unknown provider in config: {name}")
                continue
            providers.append(factory())
        return providers

    def add_provider(self, provider: JobSearchProvider) -> None:
        """Add a custom job board provider."""
        self.providers.append(provider)

    def remove_provider(self, name: str) -> bool:
        """Remove a provider by name."""
        for i, provider in enumerate(self.providers):
            if provider.name.lower() == name.lower():
                self.providers.pop(i)
                return True
        return False

    def get_available_providers(self) -> list[str]:
        """Get list of available (properly configured) providers."""
        return [p.name for p in self.providers if p.is_available()]

    def search_all_sources(
        self,
        query: str,
        location: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[Listing]:
        """
        Search every available provider and merge the results.

        Args:
            query: Search keywords
            location: Location filter
            cancel_event: When set, providers not yet started are skipped

        Returns:
            Unique listings, first-seen wins, in provider order
        """
        active = [p for p in self.providers if p.is_available()]
        if not active:
            self.logger.warning("No active providers available")
            self.last_results = []
            return []

        tasks = [
            (provider.name, lambda p=provider: p.search(query, location))
            for provider in active
        ]
        self.last_results = settle_all(
            tasks,
            max_workers=len(tasks) if self.parallel else 1,
            cancel_event=cancel_event,
        )

        merged: list[Listing] = []
        for result in self.last_results:
            if result.error is not None:
                self.logger.error(f"{result.source} search failed: {result.error}")
            elif result.skipped:
                self.logger.info(f"{result.source} skipped (cancelled)")
            else:
                self.logger.debug(f"{result.source}: Found {len(result.listings)} listings")
                merged.extend(result.listings)

        unique = deduplicate_listings(merged)
        self.logger.info(
            f"Found {len(unique)} unique listings from {len(active)} providers "
            f"({len(merged) - len(unique)} duplicates removed)"
        )
        return unique

    def get_stats(self) -> dict:
        """Get statistics about providers and the last search."""
        return {
            "total_providers": len(self.providers),
            "available_providers": len(self.get_available_providers()),
            "providers": {
                p.name: {
                    "available": p.is_available(),
                    "requires_api_key": p.requires_api_key,
                }
                for p in self.providers
            },
            "last_search": {
                r.source: {"ok": r.ok, "listings": len(r.listings), "skipped": r.skipped}
                for r in self.last_results
            },
        }
