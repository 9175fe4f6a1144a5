"""
Job Hunter CLI - Command line interface for the job hunting pipeline.

Usage:
    python -m job_hunter [command] [options]

Commands:
    profile      Parse, load or show the candidate profile
    preferences  Set or show search preferences
    search       Search all job boards, rank results, optionally auto-apply
    apply        Apply to a listing from the last search
    track        View and update tracked applications
    config       Manage configuration

Examples:
    python -m job_hunter profile --parse resume.pdf
    python -m job_hunter preferences --titles "Backend Developer" --location Stockholm --remote
    python -m job_hunter search --auto-apply
    python -m job_hunter track --update <application-id> --new-status Interview
"""

import argparse
import json
import logging
import sys

from job_hunter.core import ProfileParser
from job_hunter.core.models import ApplicationStatus, Preferences
from job_hunter.exceptions import JobHunterError
from job_hunter.pipeline import JobSearchPipeline
from job_hunter.utils import Config, JsonFileStore
from job_hunter.utils.auto_apply import ApplyStatus


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Job Hunter - Aggregate, score and apply to job listings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Profile command
    profile_parser = subparsers.add_parser("profile", help="Manage profile")
    profile_parser.add_argument("--parse", help="Parse a resume (PDF/DOCX) into the profile")
    profile_parser.add_argument("--load", help="Load a profile from a JSON file")
    profile_parser.add_argument("--show", action="store_true", help="Show the stored profile")

    # Preferences command
    prefs_parser = subparsers.add_parser("preferences", help="Set search preferences")
    prefs_parser.add_argument("--titles", nargs="+", help="Desired job titles")
    prefs_parser.add_argument("--location", "-l", help="Preferred location")
    prefs_parser.add_argument("--remote", action="store_true", help="Open to remote work")
    prefs_parser.add_argument("--salary-min", type=float, help="Minimum salary")
    prefs_parser.add_argument("--salary-max", type=float, help="Maximum salary")
    prefs_parser.add_argument("--languages", nargs="+", help="Working languages")
    prefs_parser.add_argument("--show", action="store_true", help="Show stored preferences")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for jobs")
    search_parser.add_argument("--query", "-q", help="Override the query built from preferences")
    search_parser.add_argument("--location", "-l", help="Override the preferred location")
    search_parser.add_argument("--top", "-t", type=int, default=20, help="Show top N matches")
    search_parser.add_argument("--auto-apply", action="store_true", help="Auto-apply to top matches")
    search_parser.add_argument("--no-auto-apply", action="store_true", help="Never auto-apply")

    # Apply command
    apply_parser = subparsers.add_parser("apply", help="Apply to a listing")
    apply_parser.add_argument("--job-id", "-j", required=True, help="Listing ID from the last search")

    # Track command
    track_parser = subparsers.add_parser("track", help="Track applications")
    track_parser.add_argument("--list", "-l", action="store_true", help="List all applications")
    track_parser.add_argument("--status", "-s", help="Filter by status")
    track_parser.add_argument("--update", "-u", help="Application ID to update")
    track_parser.add_argument("--new-status", help="New status for update")
    track_parser.add_argument("--stats", action="store_true", help="Show statistics")

    # Config command
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("--show", action="store_true", help="Show current config")
    config_parser.add_argument("--set", nargs=2, metavar=("KEY", "VALUE"), help="Set a config value")
    config_parser.add_argument("--set-api-key", nargs=2, metavar=("PROVIDER", "KEY"), help="Set API key")
    config_parser.add_argument("--init", action="store_true", help="Initialize default config")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "profile": cmd_profile,
        "preferences": cmd_preferences,
        "search": cmd_search,
        "apply": cmd_apply,
        "track": cmd_track,
        "config": cmd_config,
    }

    try:
        config = Config(args.config)
        commands[args.command](args, config)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled.")
        sys.exit(1)
    except JobHunterError as e:
        print(f"\nError: {e}")
        sys.exit(1)


def _pipeline(config: Config) -> JobSearchPipeline:
    return JobSearchPipeline(config, JsonFileStore(config.get_data_dir()))


def cmd_profile(args, config: Config):
    """Execute profile command."""
    pipeline = _pipeline(config)

    if args.parse or args.load:
        parser = ProfileParser(
            ai_api_key=config.get_api_key("anthropic") or None,
            model=config.get("generation.model", ProfileParser.DEFAULT_MODEL),
        )
        profile = parser.parse_file(args.parse or args.load)
        if not pipeline.save_profile(profile):
            print("❌ Could not save profile")
            return

        # Seed preferences with the resume location when none are stored yet
        preferences = pipeline.load_preferences()
        if not preferences.location and profile.location:
            pipeline.save_preferences(Preferences.from_dict({
                **preferences.to_dict(),
                "location": profile.location,
            }))

        print(f"✅ Profile saved: {profile.name}")
        print(f"   Skills: {len(profile.skills)} | Positions: {len(profile.positions)}")

    elif args.show:
        profile = pipeline.load_profile()
        print(json.dumps(profile.to_dict(), indent=2))

    else:
        print("Use --parse, --load, or --show")


def cmd_preferences(args, config: Config):
    """Execute preferences command."""
    pipeline = _pipeline(config)
    current = pipeline.load_preferences().to_dict()

    if args.show:
        print(json.dumps(current, indent=2))
        return

    updates = {
        "job_titles": args.titles,
        "location": args.location,
        "salary_min": args.salary_min,
        "salary_max": args.salary_max,
        "languages": args.languages,
    }
    current.update({k: v for k, v in updates.items() if v is not None})
    if args.remote:
        current["remote"] = True

    preferences = Preferences.from_dict(current)
    if pipeline.save_preferences(preferences):
        print("✅ Preferences saved")
    else:
        print("❌ Could not save preferences")


def cmd_search(args, config: Config):
    """Execute search command."""
    print("🔍 Searching for jobs...")

    auto_apply = None
    if args.auto_apply:
        auto_apply = True
    elif args.no_auto_apply:
        auto_apply = False

    result = _pipeline(config).run(query=args.query, location=args.location, auto_apply=auto_apply)

    print(f"\n✅ Found {len(result.ranked)} jobs for {result.query!r} in {result.location!r}\n")

    for i, match in enumerate(result.ranked[:args.top], 1):
        listing = match.listing
        print(f"{i:2}. [{match.overall_score:3}%] {listing.title}")
        print(f"    {listing.company} | {listing.location} | {listing.salary_text}")
        print(f"    Source: {listing.source} | ID: {listing.id}")
        for factor in match.factors:
            print(f"      - {factor.name}: {factor.score} ({factor.detail})")
        print()

    if result.auto_apply is not None:
        report = result.auto_apply
        print(f"🤖 Auto-applied to {len(report.applied)} jobs "
              f"({report.daily_remaining} automated applications left today)")
        if report.unsaved:
            print(f"⚠️  {len(report.unsaved)} applications could not be saved")
        for outcome in report.results:
            print(f"   {outcome.message}")


def cmd_apply(args, config: Config):
    """Execute apply command."""
    result = _pipeline(config).apply_to(args.job_id)

    if result is None:
        print(f"❌ Listing {args.job_id} not found. Run 'search' first.")
    elif result.status == ApplyStatus.APPLIED:
        print(f"✅ {result.message}")
    else:
        print(f"⚠️  {result.message}")


def cmd_track(args, config: Config):
    """Execute track command."""
    tracker = _pipeline(config).tracker

    if args.stats:
        stats = tracker.get_statistics()
        print("\n📊 Application Statistics")
        print("=" * 40)
        print(f"Total Applications: {stats['total']}")
        print(f"Auto-applied: {stats['auto_applied']}")
        print(f"Response Rate: {stats['response_rate']:.1f}%")
        print("\nBy Status:")
        for status, count in stats['by_status'].items():
            print(f"  {status}: {count}")
        print("\nBy Source:")
        for source in stats['sources']:
            print(f"  {source['name']}: {source['count']}")

    elif args.update and args.new_status:
        try:
            status = ApplicationStatus(args.new_status)
        except ValueError:
            print(f"❌ Invalid status: {args.new_status}")
            print(f"   Valid statuses: {[s.value for s in ApplicationStatus]}")
            return

        app = tracker.update_status(args.update, status)
        if app:
            print(f"✅ Updated {app.id} to '{status.value}'")
        else:
            print(f"❌ Application {args.update} not found")

    elif args.list or args.status:
        if args.status:
            try:
                applications = tracker.get_applications_by_status(ApplicationStatus(args.status))
            except ValueError:
                print(f"Invalid status: {args.status}")
                return
        else:
            applications = tracker.get_all_applications()

        print(f"\n📋 Applications ({len(applications)} total)\n")
        print("-" * 80)

        for app in applications:
            listing = app.listing
            title = f"{listing.company} - {listing.title}" if listing else app.listing_id
            print(f"\n{title}")
            print(f"   Status: {app.status.value} | Applied: {app.applied_date:%Y-%m-%d}"
                  f"{' (auto)' if app.auto_applied else ''}")
            print(f"   ID: {app.id}")

    else:
        stats = tracker.get_statistics()
        print(f"\n📋 Tracking {stats['total']} applications")
        print("   Run 'track --list' to see all")
        print("   Run 'track --stats' for statistics")


def cmd_config(args, config: Config):
    """Execute config command."""
    if args.init:
        config.save()
        print(f"✅ Created config at: {config.config_path}")

    elif args.show:
        print("\n📋 Current Configuration\n")
        config.print_config()

    elif args.set:
        key, value = args.set
        # Try to parse as JSON for numbers, booleans and lists
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            pass

        config.set(key, value)
        config.save()
        print(f"✅ Set {key} = {value}")

    elif args.set_api_key:
        provider, key = args.set_api_key
        config.set_api_key(provider, key)
        print(f"✅ Set API key for {provider}")

    else:
        print("Use --show, --set, --set-api-key, or --init")


if __name__ == "__main__":
    main()
