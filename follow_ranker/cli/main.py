"""
Follow Ranker CLI.

Ranks the people you follow who do not follow back, and the followers you
do not follow, by impact score. Relations are cached for an hour, profiles
indefinitely.
"""

import argparse
import asyncio
import sys
import time

from pydantic import ValidationError

from follow_ranker.api import GitHubClient
from follow_ranker.cache import CacheKeys, JsonFileStore, read_snapshot
from follow_ranker.cli.formatters import format_output
from follow_ranker.config import Settings, get_settings
from follow_ranker.exceptions import MissingCredentialError, RemoteFetchError
from follow_ranker.logging import configure_logging, get_logger
from follow_ranker.services import create_follow_graph_service

logger = get_logger("cli")

COMMANDS = ("rank", "cache-status", "cache-clear")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


async def _rank(args, settings: Settings, token: str) -> str:
    async with GitHubClient(
        token,
        base_url=settings.github_api_base,
        max_concurrent=settings.max_concurrent_requests,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    ) as client:
        service = create_follow_graph_service(settings, client)
        report = await service.build_report(
            force_refresh=args.refresh, include_mutuals=args.mutuals
        )
    return format_output(report, args.format, args.limit)


def cmd_rank(args, settings: Settings) -> int:
    """Rank watching users and one-sided followers."""
    try:
        token = settings.require_token()
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        output = asyncio.run(_rank(args, settings, token))
    except RemoteFetchError as e:
        logger.error("rank_failed", error=str(e), url=e.url, status=e.status)
        print(f"Error: could not refresh relations from GitHub: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error("rank_failed", error=str(e), path=e.filename)
        print(f"Error: could not write cache: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


async def _cache_status(settings: Settings) -> list[str]:
    relations_store = JsonFileStore(settings.relations_cache_path)
    users_store = JsonFileStore(settings.user_cache_path)

    lines = [f"cache dir: {settings.resolved_cache_dir}"]
    snapshot = await read_snapshot(relations_store)
    if snapshot is None:
        lines.append("relations: empty")
    else:
        age = time.time() - snapshot.last_update
        state = "stale" if age > settings.relations_ttl_seconds else "fresh"
        lines.append(
            f"relations: {len(snapshot.followers)} followers, {len(snapshot.followees)} followings "
            f"({state}, updated {snapshot.updated_at.isoformat(timespec='seconds')})"
        )
    profiles = await users_store.keys()
    lines.append(f"profiles: {len(profiles)} cached")
    return lines


def cmd_cache_status(args, settings: Settings) -> int:
    """Show what is cached and how old it is."""
    for line in asyncio.run(_cache_status(settings)):
        print(line)
    return 0


async def _cache_clear(settings: Settings, relations: bool, profiles: bool) -> list[str]:
    lines = []
    if relations:
        removed = await JsonFileStore(settings.relations_cache_path).delete(CacheKeys.RELATIONS)
        lines.append("relations cleared" if removed else "relations already empty")
    if profiles:
        count = await JsonFileStore(settings.user_cache_path).clear()
        lines.append(f"{count} profile(s) cleared")
    return lines


def cmd_cache_clear(args, settings: Settings) -> int:
    """Clear cached relations and/or profiles."""
    relations = args.relations or args.all
    profiles = args.profiles or args.all
    if not (relations or profiles):
        # Relations only by default; profiles are meant to be kept
        relations = True
    for line in asyncio.run(_cache_clear(settings, relations, profiles)):
        print(line)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="follow-ranker",
        description="Follow Ranker - Rank your GitHub followers and followings by impact",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Rank command (default)
    rank_parser = subparsers.add_parser("rank", help="Rank watching users and one-sided followers")
    rank_parser.add_argument("--refresh", action="store_true", help="Ignore the relations TTL")
    rank_parser.add_argument("--mutuals", action="store_true", help="Also rank mutual follows")
    rank_parser.add_argument("--format", choices=["table", "json"], default="table")
    rank_parser.add_argument("--limit", type=_positive_int, help="Maximum rows per table")
    rank_parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # Cache commands
    status_parser = subparsers.add_parser("cache-status", help="Show cache status")
    status_parser.add_argument("--verbose", "-v", action="store_true")

    clear_parser = subparsers.add_parser("cache-clear", help="Clear cache")
    clear_parser.add_argument("--relations", action="store_true", help="Clear cached relations")
    clear_parser.add_argument("--profiles", action="store_true", help="Clear cached profiles")
    clear_parser.add_argument("--all", action="store_true", help="Clear all cache")
    clear_parser.add_argument("--verbose", "-v", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point with CLI interface."""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)
    # Bare options belong to the default rank command
    if not argv or argv[0] not in COMMANDS + ("-h", "--help"):
        argv = ["rank", *argv]
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 1

    configure_logging("DEBUG" if args.verbose or settings.debug else settings.log_level)

    commands = {
        "rank": cmd_rank,
        "cache-status": cmd_cache_status,
        "cache-clear": cmd_cache_clear,
    }
    return commands[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())
