"""Jinja2 templates for page files."""

import logging
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, PackageLoader, select_autoescape
from markupsafe import Markup

from ..book.book import Book
from ..book.page import Page

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders whole HTML files around already rendered page bodies."""

    def __init__(self, template_dir: Optional[str] = None):
        """
        Initialize template renderer.

        Args:
            template_dir: Directory overriding the bundled templates
        """
        if template_dir:
            loader = FileSystemLoader(template_dir)
        else:
            loader = PackageLoader("bookgen", "templates")
        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )

    def render_page(
        self,
        book: Book,
        page: Page,
        assets: Dict[str, str],
        preview: bool = False,
    ) -> str:
        """
        Render the HTML file of a page.

        Args:
            book: Book the page belongs to
            page: Page with body_html filled in
            assets: Static asset name to URL, e.g. {"main.css": "/s/main-ab12cd34.css"}
            preview: Whether drafts are shown

        Returns:
            Full HTML document
        """
        template = self.env.get_template("page.html")
        return template.render(
            book=book,
            page=page,
            body=Markup(page.body_html),
            assets=assets,
            preview=preview,
            is_root=page is book.root_page,
        )

    def render_index(self, books: List[Book], assets: Dict[str, str]) -> str:
        """Render the top-level index listing all books."""
        template = self.env.get_template("index.html")
        return template.render(books=books, assets=assets)

    def render_template(self, name: str, **context: Any) -> str:
        return self.env.get_template(name).render(**context)
