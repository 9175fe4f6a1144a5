"""
Exceptions raised by the job hunter package.

Source, cover letter and persistence failures are recovered where they
happen and are not represented here.
"""


class JobHunterError(Exception):
    """Base class for job hunter errors."""


class ProfileParseError(JobHunterError):
    """The resume could not be turned into a profile."""


class MissingProfileError(JobHunterError):
    """No candidate profile is available to score against."""


class ConfigError(JobHunterError):
    """Configuration file is unreadable or holds an invalid value."""
