"""
Main entry point for the job_hunter package.

Usage:
    python -m job_hunter [command] [options]

See 'python -m job_hunter --help' for available commands.
"""

from job_hunter.cli import main

if __name__ == "__main__":
    main()
