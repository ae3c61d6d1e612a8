"""Site-wide files: Netlify headers and redirects, sitemap."""

import logging
from pathlib import Path
from typing import List

from ..book.book import Book

logger = logging.getLogger(__name__)

# https://docs.netlify.com/routing/headers/
NETLIFY_HEADERS = """
# long-lived caching
/s/*
  Cache-Control: max-age=31536000
/*
  X-Content-Type-Options: nosniff
  X-Frame-Options: DENY
  X-XSS-Protection: 1; mode=block
"""


def gen_netlify_headers(output_dir: str) -> Path:
    path = Path(output_dir) / "_headers"
    path.write_text(NETLIFY_HEADERS, encoding="utf-8")
    return path


def gen_netlify_redirects_for_book(book: Book) -> List[str]:
    """
    Redirect rules for one book.

    Missing pages under a chapter and anywhere else in the book go to the
    book's 404 page.
    """
    base = book.url.rstrip("/")
    lines = []
    for chapter in book.chapters:
        lines.append(f"{base}/{chapter.notion_id}* {base}/404.html 404")
    lines.append(f"{base}/* {base}/404.html 404")
    return lines


def gen_netlify_redirects(books: List[Book], output_dir: str) -> Path:
    lines: List[str] = []
    for book in books:
        lines.extend(gen_netlify_redirects_for_book(book))
        lines.append("")
    path = Path(output_dir) / "_redirects"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def gen_sitemap(books: List[Book], output_dir: str, base_url: str) -> Path:
    """
    Write sitemap.txt with the canonical URL of every page.

    Args:
        books: Built books
        output_dir: Site root directory
        base_url: Site URL like "https://www.programming-books.io"

    Returns:
        Path of the written file
    """
    base_url = base_url.rstrip("/")
    urls = []
    for book in books:
        urls.append(base_url + book.url)
        for page in book.all_pages():
            if page is book.root_page:
                continue
            urls.append(base_url + page.url)
    path = Path(output_dir) / "sitemap.txt"
    path.write_text("\n".join(urls) + "\n", encoding="utf-8")
    logger.info(f"Wrote {len(urls)} urls to {path}")
    return path
