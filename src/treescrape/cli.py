"""Command-line interface for treescrape."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from rich.console import Console

from . import __version__
from .core.scraper import Scraper
from .errors import TreescrapeError
from .logging_config import setup_logging
from .models.config import ScraperConfig
from .models.profile import ScrapeResult


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="treescrape",
        description="Extract profile data and links from a linktr.ee page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape by username
  treescrape alice

  # Scrape by URL
  treescrape https://linktr.ee/alice

  # JSON output including the raw page payload
  treescrape alice --json --raw

  # Through a proxy with a shorter timeout
  treescrape alice --proxy http://127.0.0.1:8080 --timeout 10
        """,
    )

    parser.add_argument(
        "target",
        help="Username or profile URL",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML configuration file",
    )

    # Network settings
    network_group = parser.add_argument_group("network settings")
    network_group.add_argument(
        "--proxy",
        type=str,
        metavar="URL",
        help="Proxy URL",
    )
    network_group.add_argument(
        "--user-agent",
        type=str,
        help="Custom User-Agent string for the page fetch",
    )
    network_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Request timeout in seconds",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the profile as JSON",
    )
    output_group.add_argument(
        "--raw",
        action="store_true",
        help="Include the raw page payload in JSON output",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only print errors and links",
    )

    return parser


def build_config(args: argparse.Namespace) -> ScraperConfig:
    """Build configuration from an optional YAML file and CLI overrides."""
    config = ScraperConfig.from_yaml_file(args.config) if args.config else ScraperConfig()

    network_kwargs: dict[str, Any] = {}
    if args.proxy:
        network_kwargs["proxy"] = args.proxy
    if args.user_agent:
        network_kwargs["user_agent"] = args.user_agent
    if args.timeout is not None:
        network_kwargs["timeout"] = args.timeout

    updates: dict[str, Any] = {}
    if network_kwargs:
        updates["network"] = config.network.model_copy(update=network_kwargs)
    if args.verbose:
        updates["log_level"] = "DEBUG"
    elif args.quiet:
        updates["log_level"] = "ERROR"

    merged = config.model_copy(update=updates)
    # Re-validate so CLI values get the same checks as file values
    return ScraperConfig.model_validate(merged.model_dump())


def split_target(target: str, host: str) -> tuple[str, str]:
    """
    Return (url, username) for a CLI target, exactly one of them non-empty.

    The target is a URL when its host name is ``host`` or a subdomain of it;
    a bare ``linktr.ee/alice`` gets an ``https://`` scheme.
    """
    url = target if "://" in target else f"https://{target}"
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        hostname = ""

    host = host.lower()
    if hostname == host or hostname.endswith("." + host):
        return url, ""
    return "", target


def print_profile(console: Console, result: ScrapeResult, quiet: bool = False) -> None:
    """Print a scrape result in human-readable form."""
    profile = result.profile
    if not quiet:
        console.print(f"[bold]username:[/bold] {profile.username}")
        console.print(f"[bold]url:[/bold] {profile.source_url}")
        console.print(f"[bold]avatar image:[/bold] {profile.avatar_image_url}")
        console.print(f"[bold]id:[/bold] {profile.account_id}")
        console.print(f"[bold]tier:[/bold] {profile.tier}")
        console.print(f"[bold]isActive:[/bold] {profile.is_active}")
        console.print(f"[bold]description:[/bold] {profile.description}")
        console.print(f"[bold]createdAt:[/bold] {profile.created_at}")
        console.print(f"[bold]updatedAt:[/bold] {profile.updated_at}")
        console.print()
        console.print("[bold]Links:[/bold]")

    for link in profile.links:
        console.print(link.url, highlight=False, soft_wrap=True)

    if result.link_error is not None:
        console.print(f"[yellow]Warning:[/yellow] some links unavailable: {result.link_error}")


def run_scraper(args: argparse.Namespace) -> int:
    """Run the scraper with given arguments."""
    console = Console()
    err_console = Console(stderr=True)

    try:
        config = build_config(args)
    except Exception as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
    )

    url, username = split_target(args.target, config.host)

    async def run() -> ScrapeResult:
        async with Scraper(config) as scraper:
            return await scraper.get_profile(url, username)

    try:
        result = asyncio.run(run())
    except TreescrapeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        if e.raw is not None:
            err_console.print_json(data=e.raw)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    if args.as_json:
        payload: dict[str, Any] = result.profile.to_dict()
        if result.link_error is not None:
            payload["link_error"] = str(result.link_error)
        if args.raw:
            payload["raw"] = result.raw
        console.print_json(data=payload)
    else:
        print_profile(console, result, quiet=args.quiet)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_scraper(args)


if __name__ == "__main__":
    sys.exit(main())
