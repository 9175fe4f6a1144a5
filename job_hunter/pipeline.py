"""
Search pipeline: profile + preferences -> listings -> ranking -> applications.

State that outlives a run (profile, preferences, the last ranked
listings and the application history) is kept in a KeyValueStore.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional
import logging
import threading

from job_hunter.core.matcher import JobMatcher
from job_hunter.core.models import Listing, MatchResult, Preferences, Profile
from job_hunter.exceptions import MissingProfileError
from job_hunter.generators.cover_letter_generator import CoverLetterGenerator
from job_hunter.integrations.aggregator import JobAggregator
from job_hunter.tracker.application_tracker import ApplicationTracker
from job_hunter.utils.auto_apply import ApplyResult, AutoApplicant, AutoApplyReport
from job_hunter.utils.config import Config
from job_hunter.utils.storage import KeyValueStore

PROFILE_KEY = "resume-data"
PREFERENCES_KEY = "preferences"
JOBS_KEY = "jobs"


@dataclass
class PipelineResult:
    """Everything one search run produced."""
    query: str
    location: str
    ranked: list[MatchResult] = field(default_factory=list)
    listings_saved: bool = False
    auto_apply: Optional[AutoApplyReport] = None

    @property
    def listings(self) -> list[Listing]:
        return [r.listing for r in self.ranked]


class JobSearchPipeline:
    """Runs searches and applications against persisted state."""

    def __init__(
        self,
        config: Config,
        store: KeyValueStore,
        aggregator: Optional[JobAggregator] = None,
        cover_letters: Optional[CoverLetterGenerator] = None,
        tracker: Optional[ApplicationTracker] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.store = store
        self.aggregator = aggregator or JobAggregator(config)
        self.cover_letters = cover_letters or CoverLetterGenerator(
            ai_api_key=config.get_api_key("anthropic") or None,
            model=config.get("generation.model", CoverLetterGenerator.DEFAULT_MODEL),
            use_ai=bool(config.get("generation.enable_cover_letter_ai", True)),
        )
        self.tracker = tracker or ApplicationTracker(
            store,
            max_stored=config.get_int("application.max_stored_applications"),
        )
        self._sleep = sleep
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_profile(self) -> Profile:
        data = self.store.get(PROFILE_KEY)
        if not data:
            raise MissingProfileError("No profile stored; parse or load a resume first")
        return Profile.from_dict(data)

    def save_profile(self, profile: Profile) -> bool:
        return self.store.set(PROFILE_KEY, profile.to_dict())

    def load_preferences(self) -> Preferences:
        data = self.store.get(PREFERENCES_KEY)
        return Preferences.from_dict(data) if data else Preferences()

    def save_preferences(self, preferences: Preferences) -> bool:
        return self.store.set(PREFERENCES_KEY, preferences.to_dict())

    def build_query(self, preferences: Preferences) -> tuple[str, str]:
        """Search keywords and location for a set of preferences."""
        query = " OR ".join(t for t in preferences.job_titles if t)
        query = query or self.config.get("search.default_query", "software engineer")
        location = preferences.location or self.config.get("search.default_location", "")
        return query, location

    def make_applicant(self, profile: Profile) -> AutoApplicant:
        return AutoApplicant(
            profile=profile,
            tracker=self.tracker,
            cover_letters=self.cover_letters,
            config=self.config,
            sleep=self._sleep,
        )

    def run(
        self,
        query: Optional[str] = None,
        location: Optional[str] = None,
        auto_apply: Optional[bool] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PipelineResult:
        """
        Search all sources, rank the results and optionally auto-apply.

        Args:
            query: Overrides the query built from preferences
            location: Overrides the preferred location
            auto_apply: Overrides application.enable_auto_apply
            cancel_event: Stops outstanding searches and applications

        Raises:
            MissingProfileError: No profile has been stored
        """
        profile = self.load_profile()
        preferences = self.load_preferences()

        default_query, default_location = self.build_query(preferences)
        query = query or default_query
        location = location or default_location

        self.logger.info(f"Searching for {query!r} in {location!r}")
        listings = self.aggregator.search_all_sources(query, location, cancel_event=cancel_event)

        ranked = JobMatcher(profile, preferences).rank_listings(listings)
        result = PipelineResult(query=query, location=location, ranked=ranked)

        result.listings_saved = self.store.set(JOBS_KEY, [r.to_dict() for r in ranked])
        if not result.listings_saved:
            self.logger.error("Could not save ranked listings")

        if auto_apply is None:
            auto_apply = self.config.is_auto_apply_enabled()
        if auto_apply:
            result.auto_apply = self.make_applicant(profile).run_auto_apply(
                ranked, cancel_event=cancel_event
            )

        return result

    def load_ranked_listings(self) -> list[dict]:
        """Listings from the last run, with their match scores."""
        return self.store.get(JOBS_KEY) or []

    def find_listing(self, listing_id: str) -> Optional[Listing]:
        for item in self.load_ranked_listings():
            if str(item.get("id")) == listing_id:
                return Listing.from_dict(item)
        return None

    def apply_to(self, listing_id: str) -> Optional[ApplyResult]:
        """Manually apply to a listing from the last run."""
        listing = self.find_listing(listing_id)
        if listing is None:
            self.logger.warning(f"Listing not found: {listing_id}")
            return None
        return self.make_applicant(self.load_profile()).apply(listing, is_auto=False)
