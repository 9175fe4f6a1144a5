"""
The Muse job board integration.

The public API works without a key (a key raises the hourly quota) but
has no keyword search, so results are filtered by query locally.
Descriptions arrive as HTML and are flattened to text.
"""

from bs4 import BeautifulSoup

from .base import JobSearchProvider, extract_skills, parse_posted_date
from job_hunter.core.models import Listing


class TheMuseProvider(JobSearchProvider):
    """The Muse job board provider."""

    API_URL = "https://www.themuse.com/api/public/jobs"

    REMOTE_MARKERS = ("remote", "flexible")

    @property
    def name(self) -> str:
        return "TheMuse"

    @property
    def requires_api_key(self) -> bool:
        return False

    def search_jobs(self, query: str, location: str, page: int = 1) -> list[Listing]:
        """Fetch a page of postings for a location and filter by query."""
        params = {"page": page, "descending": "true"}
        if location:
            params["location"] = location
        if self.api_key:
            params["api_key"] = self.api_key

        data = self._get_json(self.API_URL, params=params)
        listings = self._parse_each(data.get("results") or [], self._parse_result)
        return self._filter_listings(listings, query)

    def _parse_result(self, result: dict) -> Listing:
        """Parse a Muse posting into a Listing."""
        locations = [loc.get("name", "") for loc in result.get("locations") or []]
        location = ", ".join(name for name in locations if name)
        description = self._html_to_text(result.get("contents") or "")

        return Listing(
            id=str(result["id"]),
            title=result.get("name") or "",
            company=(result.get("company") or {}).get("name", ""),
            location=location,
            description=description,
            source=self.name,
            required_skills=tuple(extract_skills(description)),
            posted_date=parse_posted_date(result.get("publication_date")),
            remote=any(marker in location.lower() for marker in self.REMOTE_MARKERS),
            url=(result.get("refs") or {}).get("landing_page", ""),
            employment_type=result.get("type") or "",
        )

    @staticmethod
    def _html_to_text(html: str) -> str:
        if not html:
            return ""
        return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)

    @staticmethod
    def _filter_listings(listings: list[Listing], query: str) -> list[Listing]:
        """Keep listings whose title or description mentions any query term."""
        terms = [t.strip().lower() for t in query.split(" OR ") if t.strip()]
        if not terms:
            return listings

        filtered = []
        for listing in listings:
            text = f"{listing.title} {listing.description}".lower()
            if any(term in text for term in terms):
                filtered.append(listing)
        return filtered
