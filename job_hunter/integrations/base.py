"""
Base class for job board providers.

Every provider maps its board's response into the canonical Listing
inside its own parsing code; board field names never leave the provider.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional
import logging
import threading
import time

import requests

from job_hunter.core.models import Listing
from job_hunter.utils.retry import retry


SKILL_VOCABULARY = (
    "JavaScript", "Python", "Java", "React", "Node.js", "TypeScript",
    "AWS", "Docker", "Kubernetes", "SQL", "PostgreSQL", "MongoDB",
    "Git", "CI/CD", "Agile", "Scrum", "REST API", "GraphQL",
    "HTML", "CSS", "Vue", "Angular", "Spring", "Django", "Flask",
)

GENERAL_SKILL = "General"


def extract_skills(description: str) -> list[str]:
    """
    Find known skill tokens mentioned in a job description.

    Matching is a case-insensitive substring test, so "Java" is also
    found inside "JavaScript". Returns ["General"] when nothing matches.
    """
    text = (description or "").lower()
    found = [skill for skill in SKILL_VOCABULARY if skill.lower() in text]
    return found or [GENERAL_SKILL]


def parse_posted_date(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or a unix timestamp in seconds."""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def format_salary(salary_min: Optional[float], salary_max: Optional[float]) -> str:
    if not salary_min:
        return "Not specified"
    if salary_max and salary_max != salary_min:
        return f"{salary_min:,.0f} - {salary_max:,.0f}"
    return f"{salary_min:,.0f}"


class JobSearchProvider(ABC):
    """Abstract base class for job board providers."""

    USER_AGENT = "JobHunter/1.0"

    # Errors that mean the board or its payload is unusable for this run
    SOURCE_ERRORS = (requests.RequestException, ValueError, KeyError, TypeError, AttributeError)

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        max_requests_per_minute: int = 0,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.max_requests_per_minute = max_requests_per_minute
        self.logger = logging.getLogger(self.__class__.__name__)

        # Request times inside the last minute, for rate limiting (0 = no limit)
        self._request_times: list[float] = []
        self._rate_lock = threading.Lock()
        self._clock = time.monotonic
        self._sleep = time.sleep

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name, also used as the listing source tag."""
        pass

    @property
    @abstractmethod
    def requires_api_key(self) -> bool:
        """Whether this provider requires credentials."""
        pass

    @abstractmethod
    def search_jobs(self, query: str, location: str, page: int = 1) -> list[Listing]:
        """
        Query the board and return canonical listings.

        May raise on transport or parse errors; search() isolates them.
        """
        pass

    def search(self, query: str, location: str) -> list[Listing]:
        """
        Search the board, returning an empty list if it is unavailable.

        Args:
            query: Keywords, e.g. "python developer"
            location: Free-text location, e.g. "Stockholm"

        Returns:
            Listings from this board, possibly empty
        """
        if not self.is_available():
            self.logger.info(f"{self.name} is not configured, skipping")
            return []

        try:
            listings = self.search_jobs(query, location)
        except self.SOURCE_ERRORS as e:
            self.logger.warning(f"{self.name} search failed: {e}")
            return []

        self.logger.debug(f"{self.name}: {len(listings)} listings for {query!r} in {location!r}")
        return listings

    def is_available(self) -> bool:
        """Check if the provider is properly configured."""
        if self.requires_api_key and not self.api_key:
            return False
        return True

    def _get_json(
        self,
        url: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        """GET a JSON document, retrying transient request errors."""
        request_headers = {"User-Agent": self.USER_AGENT, "Accept": "application/json"}
        request_headers.update(headers or {})

        @retry(
            max_attempts=self.retry_attempts,
            base_delay=self.retry_delay,
            retryable=(requests.RequestException,),
        )
        def fetch():
            self._wait_for_rate_limit()
            response = requests.get(url, params=params, headers=request_headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        return fetch()

    def _parse_each(self, items: list, parser) -> list[Listing]:
        """Apply a record parser, dropping records that cannot be mapped."""
        listings = []
        for item in items or []:
            try:
                listing = parser(item)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                self.logger.debug(f"Skipping malformed {self.name} record: {e}")
                continue
            if listing is not None:
                listings.append(listing)
        return listings

    def _wait_for_rate_limit(self) -> None:
        """Block until another request fits in the per-minute budget."""
        if self.max_requests_per_minute <= 0:
            return

        with self._rate_lock:
            now = self._clock()
            self._request_times = [t for t in self._request_times if now - t < 60]

            if len(self._request_times) >= self.max_requests_per_minute:
                wait = 60 - (now - self._request_times[0])
                self.logger.debug(f"{self.name} rate limit reached, waiting {wait:.1f}s")
                self._sleep(wait)
                now = self._clock()
                self._request_times = [t for t in self._request_times if now - t < 60]

            self._request_times.append(now)
