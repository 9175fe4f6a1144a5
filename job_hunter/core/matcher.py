"""
Job Matcher - Scoring algorithm for matching listings to a candidate.

The overall score (0-100) is the sum of weighted factors:
- Skills: share of required skills the candidate covers (40)
- Experience: number of prior positions (20)
- Location: listing location or remote compatibility (15)
- Salary: listing minimum against the desired minimum (10)
- Title: listing title against the desired titles (15)

A factor whose inputs are missing is left out of the breakdown and adds
nothing to the total. Its weight is not handed to the other factors.
"""

from typing import Iterable, Optional
import logging
import math

from .models import (
    Listing,
    MatchFactor,
    MatchResult,
    Preferences,
    Profile,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class JobMatcher:
    """Matches a candidate profile and preferences to job listings."""

    WEIGHTS = {
        "skills": 40,
        "experience": 20,
        "location": 15,
        "salary": 10,
        "title": 15,
    }

    POINTS_PER_POSITION = 4

    # Score given to the location, salary and title factors when they miss
    PARTIAL_CREDIT = 5

    def __init__(self, profile: Profile, preferences: Optional[Preferences] = None):
        self.profile = profile
        self.preferences = preferences or Preferences()
        self.logger = logging.getLogger(self.__class__.__name__)

    def score(self, listing: Listing) -> MatchResult:
        """Calculate the match score and factor breakdown for a listing."""
        raw_total = 0.0
        factors: list[MatchFactor] = []

        for calculate in (
            self._skills_factor,
            self._experience_factor,
            self._location_factor,
            self._salary_factor,
            self._title_factor,
        ):
            outcome = calculate(listing)
            if outcome is None:
                continue
            contribution, factor = outcome
            raw_total += contribution
            factors.append(factor)

        overall = max(0, min(round_half_up(raw_total), 100))
        return MatchResult(listing=listing, overall_score=overall, factors=factors)

    def rank_listings(self, listings: Iterable[Listing]) -> list[MatchResult]:
        """
        Score listings and order them best first.

        The sort is stable, so listings with equal scores keep their
        incoming order.
        """
        results = [self.score(listing) for listing in listings]
        results.sort(key=lambda r: r.overall_score, reverse=True)
        self.logger.debug(f"Ranked {len(results)} listings")
        return results

    def _skills_factor(self, listing: Listing) -> Optional[tuple[float, MatchFactor]]:
        candidate = [s.lower() for s in self.profile.skills if s and s.strip()]
        required = [s.lower() for s in listing.required_skills if s and s.strip()]
        if not required:
            return None

        matched = [r for r in required if any(self._skills_match(r, c) for c in candidate)]
        contribution = len(matched) / len(required) * self.WEIGHTS["skills"]

        return contribution, MatchFactor(
            name="Skills Match",
            score=round_half_up(contribution),
            detail=f"{len(matched)}/{len(required)} skills matched",
        )

    @staticmethod
    def _skills_match(required: str, candidate: str) -> bool:
        return required in candidate or candidate in required

    def _experience_factor(self, listing: Listing) -> Optional[tuple[float, MatchFactor]]:
        positions = len(self.profile.positions)
        if positions == 0:
            return None

        contribution = min(positions * self.POINTS_PER_POSITION, self.WEIGHTS["experience"])
        return contribution, MatchFactor(
            name="Experience Level",
            score=round_half_up(contribution),
            detail=f"{positions} relevant positions",
        )

    def _location_factor(self, listing: Listing) -> Optional[tuple[float, MatchFactor]]:
        if not listing.location or not self.profile.location:
            return None

        matches = (
            self.profile.location.lower() in listing.location.lower()
            or listing.remote
            or self.preferences.remote
        )
        contribution = self.WEIGHTS["location"] if matches else self.PARTIAL_CREDIT
        return contribution, MatchFactor(
            name="Location",
            score=contribution,
            detail="Perfect match" if matches else "Relocation needed",
        )

    def _salary_factor(self, listing: Listing) -> Optional[tuple[float, MatchFactor]]:
        # Zero is treated as "not stated", same as a missing value
        if not listing.salary_min or not self.preferences.salary_min:
            return None

        meets = listing.salary_min >= self.preferences.salary_min
        contribution = self.WEIGHTS["salary"] if meets else self.PARTIAL_CREDIT
        return contribution, MatchFactor(
            name="Salary Range",
            score=contribution,
            detail="Meets expectations" if meets else "Below expectations",
        )

    def _title_factor(self, listing: Listing) -> Optional[tuple[float, MatchFactor]]:
        titles = [t for t in self.preferences.job_titles if t]
        if not titles:
            return None

        listing_title = listing.title.lower()
        matches = any(t.lower() in listing_title for t in titles)
        contribution = self.WEIGHTS["title"] if matches else self.PARTIAL_CREDIT
        return contribution, MatchFactor(
            name="Job Title",
            score=contribution,
            detail="Matches preferences" if matches else "Different role",
        )


def score_listing(
    profile: Profile,
    listing: Listing,
    preferences: Optional[Preferences] = None,
) -> MatchResult:
    """Score a single listing without keeping a matcher around."""
    return JobMatcher(profile, preferences).score(listing)
