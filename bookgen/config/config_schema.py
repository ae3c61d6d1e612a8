"""Pydantic models for configuration validation."""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..notion.models import normalize_id

_BOOK_DIR_RE = re.compile(r"^[a-z0-9][a-z0-9._-]*$")


class SourceConfig(BaseModel):
    """Where pages come from."""

    kind: str = Field(default="notion", description="Source: 'notion' or 'directory'")
    path: Optional[str] = Field(
        default=None, description="Directory of <id>.json page files (kind 'directory')"
    )

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: str) -> str:
        v = v.lower()
        if v not in ("notion", "directory"):
            raise ValueError(f"Invalid source kind: '{v}'. Must be 'notion' or 'directory'")
        return v


class NotionConfig(BaseModel):
    """Notion API configuration."""

    api_key: str = Field(..., description="Notion integration API key")
    rate_limit_delay: float = Field(
        default=0.35, ge=0.0, description="Delay between API calls (seconds)"
    )
    cache_pages: bool = Field(
        default=True, description="Save fetched pages under <cache_dir>/notion"
    )


class BookConfig(BaseModel):
    """A single book."""

    title: str = Field(..., description="Short title, e.g. 'Go'")
    dir: str = Field(..., description="Output directory and URL name, e.g. 'go'")
    start_page_id: str = Field(..., description="Id of the book's root page")
    title_long: Optional[str] = Field(
        default=None, description="Long title (default: root page title)"
    )
    cover_image: Optional[str] = Field(default=None, description="Cover image file name")
    default_lang: Optional[str] = Field(
        default=None, description="Language of code blocks without one (default: title)"
    )

    @field_validator("start_page_id")
    @classmethod
    def validate_start_page_id(cls, v: str) -> str:
        v = normalize_id(v)
        if not v:
            raise ValueError("start_page_id must not be empty")
        return v

    @field_validator("dir")
    @classmethod
    def validate_dir(cls, v: str) -> str:
        if not _BOOK_DIR_RE.match(v):
            raise ValueError(
                f"Invalid book dir: '{v}'. Use lower-case letters, digits, '.', '_' and '-'"
            )
        return v


class BuildConfig(BaseModel):
    """Build settings."""

    output_dir: str = Field(default="www", description="Generated site directory")
    cache_dir: str = Field(default="cache", description="Persistent cache directory")
    template_dir: Optional[str] = Field(
        default=None, description="Directory overriding the bundled templates"
    )
    static_dir: Optional[str] = Field(
        default=None, description="Directory with main.css, app.js, favicon.svg"
    )
    preview: bool = Field(default=False, description="Include draft pages")
    minify: bool = Field(default=True, description="Write compact toc data")
    max_workers: Optional[int] = Field(
        default=None, gt=0, description="Render concurrency (default: CPUs - worker_reserve)"
    )
    worker_reserve: int = Field(default=2, ge=0, description="CPUs left for other programs")
    use_output_cache: bool = Field(default=True, description="Reuse cached page renders")


class SiteConfig(BaseModel):
    """Site-wide settings."""

    base_url: str = Field(
        default="https://www.programming-books.io", description="Site URL, used in sitemap"
    )
    url_prefix: str = Field(default="/essential", description="URL path books live under")

    @field_validator("url_prefix")
    @classmethod
    def validate_url_prefix(cls, v: str) -> str:
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("url_prefix must not be empty")
        return v


class AppConfig(BaseModel):
    """Main application configuration."""

    source: SourceConfig = Field(default_factory=SourceConfig, description="Page source")
    notion: Optional[NotionConfig] = Field(default=None, description="Notion configuration")
    books: List[BookConfig] = Field(default_factory=list, description="Books to build")
    build: BuildConfig = Field(default_factory=BuildConfig, description="Build settings")
    site: SiteConfig = Field(default_factory=SiteConfig, description="Site settings")

    def validate(self) -> None:
        """Validate configuration consistency."""
        if not self.books:
            raise ValueError("At least one book must be configured")

        seen = set()
        for book in self.books:
            if book.dir in seen:
                raise ValueError(f"Duplicate book dir: '{book.dir}'")
            seen.add(book.dir)

        if self.source.kind == "notion" and not self.notion:
            raise ValueError("notion configuration is required when source kind is 'notion'")

        if self.source.kind == "directory" and not self.source.path:
            raise ValueError("source.path is required when source kind is 'directory'")
