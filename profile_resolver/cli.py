"""
Command line tool for resolving player names and UUIDs.

Usage:
    profile-resolver names Notch jeb_
    profile-resolver uuids 069a79f444e94726a5befca90e38aaf5 --json
    profile-resolver names Notch --cache ~/.cache/profiles.db --debug

Resolved profiles are printed to stdout as "uuid name" lines (or a JSON list
with --json). Keys that could not be resolved are listed on stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from .core.models import Profile
from .errors import ResolverError
from .factory import ProfilePipeline
from .logging_config import configure_logging, get_logger, resolve_level
from .settings import Settings
from .shared import parse_uuid

logger = get_logger(__name__)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="profile-resolver",
        description="Resolve player names to UUIDs and UUIDs to current names",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    names_parser = subparsers.add_parser("names", help="Resolve names to profiles")
    names_parser.add_argument("keys", nargs="+", metavar="NAME", help="Player names")

    uuids_parser = subparsers.add_parser("uuids", help="Resolve UUIDs to profiles")
    uuids_parser.add_argument(
        "keys",
        nargs="+",
        metavar="UUID",
        type=parse_uuid,
        help="Player UUIDs, with or without dashes",
    )

    for subparser in (names_parser, uuids_parser):
        subparser.add_argument("--json", action="store_true", help="Print results as a JSON list")
        subparser.add_argument("--cache", type=Path, help="SQLite cache file (overrides PROFILE_RESOLVER_CACHE_PATH)")
        subparser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser.parse_args(args)


def format_profiles(profiles: list[Profile], as_json: bool) -> str:
    """Render profiles for stdout."""
    ordered = sorted(profiles, key=lambda profile: profile.name.casefold())
    if as_json:
        return json.dumps(
            [{"id": str(profile.unique_id), "name": profile.name} for profile in ordered],
            indent=2,
        )
    return "\n".join(str(profile) for profile in ordered)


def find_unresolved(command: str, keys: list, profiles: list[Profile], case_sensitive: bool) -> list[str]:
    """Keys of the request that no profile answered."""
    if command == "uuids":
        found_ids = {profile.unique_id for profile in profiles}
        return [str(key) for key in keys if key not in found_ids]

    if case_sensitive:
        found_names = {profile.name for profile in profiles}
        return [key for key in keys if key not in found_names]
    found_names = {profile.name.casefold() for profile in profiles}
    return [key for key in keys if key.casefold() not in found_names]


def run(args: argparse.Namespace, settings: Settings) -> list[str]:
    """Resolve the requested keys and print them.

    Returns:
        Keys that could not be resolved
    """
    with ProfilePipeline.from_settings(settings) as pipeline:
        if args.command == "names":
            profiles = pipeline.service.find_all_by_name(args.keys)
        else:
            profiles = pipeline.service.find_all_by_uuid(args.keys)

    if profiles:
        print(format_profiles(profiles, args.json))
    elif args.json:
        print("[]")

    return find_unresolved(args.command, args.keys, profiles, settings.case_sensitive_names)


def main(args: list[str] | None = None) -> None:
    """Main entry point."""
    parsed = parse_args(args)

    load_dotenv()
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    if parsed.cache is not None:
        settings = settings.model_copy(update={"cache_path": parsed.cache})

    configure_logging("cli", resolve_level(settings.log_level, parsed.debug))

    try:
        unresolved = run(parsed, settings)
    except OSError as e:
        # requests.RequestException is an OSError
        logger.error(f"Lookup failed: {e}")
        sys.exit(1)
    except ResolverError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    if unresolved:
        print(f"Could not resolve {len(unresolved)} keys: {', '.join(unresolved)}", file=sys.stderr)


if __name__ == "__main__":
    main()
