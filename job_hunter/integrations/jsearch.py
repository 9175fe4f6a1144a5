"""
JSearch (RapidAPI) integration.

JSearch aggregates Google for Jobs results from many boards.
Subscribe at https://rapidapi.com/letscrape-6bRBa3QguO5/api/jsearch
"""

from .base import JobSearchProvider, extract_skills, format_salary, parse_posted_date
from job_hunter.core.models import Listing


class JSearchProvider(JobSearchProvider):
    """JSearch job search provider."""

    API_URL = "https://jsearch.p.rapidapi.com/search"
    API_HOST = "jsearch.p.rapidapi.com"

    @property
    def name(self) -> str:
        return "JSearch"

    @property
    def requires_api_key(self) -> bool:
        return True

    def search_jobs(self, query: str, location: str, page: int = 1) -> list[Listing]:
        """Search JSearch for jobs."""
        search_text = f"{query} in {location}" if location else query
        params = {
            "query": search_text,
            "page": page,
            "num_pages": 1,
        }
        headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.API_HOST,
        }

        data = self._get_json(self.API_URL, params=params, headers=headers)
        return self._parse_each(data.get("data") or [], self._parse_result)

    def _parse_result(self, result: dict) -> Listing:
        """Parse a JSearch result into a Listing."""
        description = result.get("job_description") or ""
        location = ", ".join(
            part for part in (result.get("job_city"), result.get("job_country")) if part
        )
        salary_min = result.get("job_min_salary")
        salary_max = result.get("job_max_salary")
        salary_text = result.get("job_salary") or format_salary(salary_min, salary_max)

        return Listing(
            id=str(result["job_id"]),
            title=result.get("job_title") or "",
            company=result.get("employer_name") or "",
            location=location,
            salary_min=float(salary_min) if salary_min else None,
            salary_max=float(salary_max) if salary_max else None,
            salary_text=str(salary_text),
            description=description,
            source=self.name,
            required_skills=tuple(extract_skills(description)),
            posted_date=parse_posted_date(result.get("job_posted_at_timestamp")),
            remote=bool(result.get("job_is_remote")),
            url=result.get("job_apply_link") or "",
            employment_type=result.get("job_employment_type") or "",
        )
