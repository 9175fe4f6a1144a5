"""
Job Hunter - Job listing aggregation, scoring and automated applications

This application:
1. Parses your resume into a structured profile
2. Searches several job boards in parallel and merges the results
3. Scores and ranks every listing against your profile and preferences
4. Generates cover letters with an AI service or a plain template
5. Tracks applications and their status
6. Optionally auto-applies to the best matches, idempotently and rate limited
"""

__version__ = "1.0.0"
__author__ = "Job Hunter"
