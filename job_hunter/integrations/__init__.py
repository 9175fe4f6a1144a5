"""
Job search integrations for various job boards and APIs.
"""

from .base import JobSearchProvider, extract_skills
from .adzuna import AdzunaProvider
from .jsearch import JSearchProvider
from .themuse import TheMuseProvider
from .aggregator import JobAggregator, SourceResult, deduplicate_listings, settle_all

__all__ = [
    "JobSearchProvider",
    "extract_skills",
    "AdzunaProvider",
    "JSearchProvider",
    "TheMuseProvider",
    "JobAggregator",
    "SourceResult",
    "deduplicate_listings",
    "settle_all",
]
