"""
Document generators for job applications.
"""

from .cover_letter_generator import CoverLetterGenerator

__all__ = [
    "CoverLetterGenerator",
]
