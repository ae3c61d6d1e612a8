"""CLI entry point for the book generator."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List

from .book.book import Book
from .book.page import Page
from .config.config_loader import DEFAULT_CONFIG_PATH, load_config
from .config.config_schema import AppConfig
from .errors import InvariantViolation
from .notion.client import NotionClient
from .notion.models import LoadProgress
from .notion.source import (
    CachingPageSource,
    DirectoryPageSource,
    NotionPageSource,
    PageSource,
)
from .site.generator import SiteGenerator
from .site.models import BuildStats
from .utils.logging import setup_logging

MAX_ERRORS_SHOWN = 10


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Generate a static website from books written in Notion",
        prog="bookgen",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)",
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Include draft pages, marked as drafts",
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Render all pages, ignoring cached output",
    )

    parser.add_argument(
        "--book",
        action="append",
        metavar="DIR",
        help="Only build the book with this dir (can be repeated)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load books and print their page trees without generating anything",
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Number of pages rendered at the same time",
    )

    return parser


def create_source(config: AppConfig) -> PageSource:
    """
    Create the page source described by the configuration.

    Args:
        config: Application configuration

    Returns:
        PageSource instance
    """
    if config.source.kind == "directory":
        return DirectoryPageSource(config.source.path)

    client = NotionClient(
        api_key=config.notion.api_key,
        rate_limit_delay=config.notion.rate_limit_delay,
    )
    source: PageSource = NotionPageSource(client)
    if config.notion.cache_pages:
        source = CachingPageSource(source, str(Path(config.build.cache_dir) / "notion"))
    return source


def print_progress(progress: LoadProgress) -> None:
    """Print load progress on a single line."""
    status = f"\rPages: {progress.pages_loaded} loaded"
    if progress.pages_failed > 0:
        status += f", {progress.pages_failed} failed"
    if progress.current_page_title:
        title = progress.current_page_title
        if len(title) > 40:
            title = title[:37] + "..."
        status += f" | Current: {title}"
    print(status, end="", flush=True)


def print_tree(page: Page, depth: int = 0) -> None:
    marker = " [draft]" if page.is_draft else ""
    print(f"{'  ' * depth}- {page.title} ({page.notion_id}){marker}")
    for sub_page in page.pages:
        print_tree(sub_page, depth + 1)


def print_summary(books: List[Book], stats: BuildStats, verbosity: int) -> None:
    print("\n" + "=" * 40)
    print("SUMMARY")
    print("=" * 40)
    for book in books:
        print(f"{book.title_long}: {book.chapters_count} chapters, {book.pages_count} pages")
    print(f"Pages rendered: {stats.pages_rendered} ({stats.pages_from_cache} from cache)")
    print(f"Pages failed: {stats.pages_failed}")

    if stats.errors:
        print("Errors:")
        shown = stats.errors if verbosity >= 2 else stats.errors[:MAX_ERRORS_SHOWN]
        for error in shown:
            print(f"  - {error}")
        if len(shown) < len(stats.errors):
            print(f"  ... and {len(stats.errors) - len(shown)} more")


async def run_build(args: argparse.Namespace) -> int:
    """
    Run a build with given arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.preview:
        config.build.preview = True
        config.build.minify = False
    if args.force:
        config.build.use_output_cache = False
    if args.workers:
        config.build.max_workers = args.workers

    if args.book:
        selected = [b for b in config.books if b.dir in args.book]
        if not selected:
            print(f"Error: No book matches {', '.join(args.book)}", file=sys.stderr)
            print("Available books:", file=sys.stderr)
            for b in config.books:
                print(f"  - {b.dir}", file=sys.stderr)
            return 1
        config.books = selected

    generator = SiteGenerator(config, create_source(config))
    progress_callback = print_progress if args.verbose >= 1 else None

    try:
        books = generator.load_books(progress_callback=progress_callback)
    except InvariantViolation as e:
        if progress_callback:
            print()
        logger.error(f"Structural error in page {e.page_id}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if progress_callback:
        print()

    if args.dry_run:
        print("DRY RUN - No files will be written\n")
        for book in books:
            print(f"Book: {book.title_long} ({book.dir})")
            print_tree(book.root_page)
            print()
        return 0

    stats = await generator.generate(books)
    print_summary(books, stats, args.verbose)
    return 0 if stats.ok else 1


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)

    try:
        exit_code = asyncio.run(run_build(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nBuild cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
