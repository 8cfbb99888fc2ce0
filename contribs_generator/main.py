#!/usr/bin/env python3
"""
Main driver script for the contributions generator.

This script provides the command-line interface and coordinates all modules
to render the repositories a user has contributed to and splice them into a
README between the contribution markers.

Usage (example):
    GITHUB_TOKEN=... python -m contribs_generator --user octocat --mode sprite
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .config import Settings, load_environment, load_settings
from .errors import ConfigurationError
from .fetcher import ContributionFetcher
from .models import RenderMode
from .renderer import get_renderer, write_artifacts
from .splicer import ReadmeSplicer
from .staging import stage_files

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

logger = logging.getLogger("contribs-generator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render repositories a user contributed to into a README gallery."
    )
    parser.add_argument("--user", "-u", help="GitHub username (default: TARGET_USER, then GITHUB_ACTOR)")
    parser.add_argument("--limit", "-n", help="Maximum number of repositories (default: MAX_REPOS or 24)")
    parser.add_argument(
        "--mode", "-m",
        choices=[m.value for m in RenderMode],
        help="Renderer: inline anchors, combined sprite or per-repository files (default: RENDER_MODE or inline)",
    )
    parser.add_argument("--types", help="Comma-separated contribution types (default: PULL_REQUEST)")
    parser.add_argument("--readme", "-r", help="README to rewrite (default: README.md)")
    parser.add_argument("--sprite-path", help="Sprite file written in sprite mode")
    parser.add_argument("--output-dir", help="Directory for per-repository SVG files")
    parser.add_argument("--include-own", action="store_true", help="Keep repositories owned by the user")
    parser.add_argument("--stage", action="store_true", help="git add the generated files afterwards")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    return parser


def run(settings: Settings, fetcher: Optional[ContributionFetcher] = None) -> int:
    """
    Fetch, render and splice once.

    Args:
        settings: Resolved configuration
        fetcher: Optional fetcher; one is built from the settings otherwise

    Returns:
        Process exit code (0 when done or when there is nothing to do)
    """
    if fetcher is None:
        fetcher = ContributionFetcher(token=settings.token)

    repos = fetcher.fetch_contributions(
        settings.username,
        settings.limit,
        contribution_types=settings.contribution_types,
        exclude_own=settings.exclude_own,
    )
    if not repos:
        logger.info("No contributed repositories found%s.", " (excluding own repos)" if settings.exclude_own else "")
        return 0

    logger.info("Rendering %d repositories in %s mode", len(repos), settings.mode.value)
    renderer = get_renderer(settings)
    written: List[str] = write_artifacts(renderer.artifacts(repos))
    if written:
        logger.info("Wrote %d image file(s)", len(written))

    fragment = renderer.fragment(repos)
    if ReadmeSplicer(settings.readme_path).inject(fragment):
        written.append(settings.readme_path)

    if settings.stage:
        stage_files(written)

    logger.info("Done.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the contributions generator.

    Parses command line arguments, resolves configuration and runs the
    pipeline. Every fatal error is logged and turned into exit code 1.
    """
    args = build_parser().parse_args(argv)
    load_environment()

    try:
        settings = load_settings(overrides=args)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("%s", e)
        return 1

    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=LOG_FORMAT)

    try:
        return run(settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    except Exception as e:
        logger.error("Error: %s", e)
        logger.debug("Traceback", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
