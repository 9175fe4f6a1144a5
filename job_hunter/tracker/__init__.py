"""
Application Tracker - Track and manage job applications.
"""

from .application_tracker import ApplicationTracker

__all__ = [
    "ApplicationTracker",
]
