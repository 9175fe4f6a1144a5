"""Core models, scoring and profile parsing."""

from .models import (
    Application,
    ApplicationStatus,
    Education,
    Listing,
    MatchFactor,
    MatchResult,
    Position,
    Preferences,
    Profile,
)
from .matcher import JobMatcher, score_listing
from .profile_parser import ProfileParser

__all__ = [
    "Application",
    "ApplicationStatus",
    "Education",
    "Listing",
    "MatchFactor",
    "MatchResult",
    "Position",
    "Preferences",
    "Profile",
    "JobMatcher",
    "score_listing",
    "ProfileParser",
]
