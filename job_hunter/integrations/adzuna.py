"""
Adzuna job search integration.

Adzuna aggregates listings per country and requires an app id and key.
Sign up at https://developer.adzuna.com/ (free tier: 100 requests/day).
"""

from typing import Optional

from .base import JobSearchProvider, extract_skills, format_salary, parse_posted_date
from job_hunter.core.models import Listing


class AdzunaProvider(JobSearchProvider):
    """Adzuna job search provider."""

    API_URL = "https://api.adzuna.com/v1/api/jobs"

    def __init__(
        self,
        app_id: Optional[str] = None,
        api_key: Optional[str] = None,
        country: str = "se",
        results_per_page: int = 20,
        **kwargs,
    ):
        super().__init__(api_key=api_key, **kwargs)
        self.app_id = app_id
        self.country = country
        self.results_per_page = results_per_page

    @property
    def name(self) -> str:
        return "Adzuna"

    @property
    def requires_api_key(self) -> bool:
        return True

    def is_available(self) -> bool:
        return bool(self.app_id and self.api_key)

    def search_jobs(self, query: str, location: str, page: int = 1) -> list[Listing]:
        """Search Adzuna for jobs."""
        url = f"{self.API_URL}/{self.country}/search/{page}"
        params = {
            "app_id": self.app_id,
            "app_key": self.api_key,
            "results_per_page": self.results_per_page,
            "what": query,
            "where": location or "",
            "content-type": "application/json",
        }

        data = self._get_json(url, params=params)
        return self._parse_each(data["results"], self._parse_result)

    def _parse_result(self, result: dict) -> Listing:
        """Parse an Adzuna result into a Listing."""
        location = (result.get("location") or {}).get("display_name", "")
        description = result.get("description") or ""
        salary_min = result.get("salary_min")
        salary_max = result.get("salary_max")

        return Listing(
            id=str(result["id"]),
            title=result.get("title") or "",
            company=(result.get("company") or {}).get("display_name", ""),
            location=location,
            salary_min=float(salary_min) if salary_min else None,
            salary_max=float(salary_max) if salary_max else None,
            salary_text=format_salary(salary_min, salary_max),
            description=description,
            source=self.name,
            required_skills=tuple(extract_skills(description)),
            posted_date=parse_posted_date(result.get("created")),
            remote="remote" in location.lower(),
            url=result.get("redirect_url") or "",
            employment_type=result.get("contract_time") or "Full-time",
        )
