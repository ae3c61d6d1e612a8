"""Page tree node and the metadata attached to it."""

import re
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..notion.models import NotionBlock


class MetaKey(str, Enum):
    """Recognized metadata keys."""

    ID = "id"  # legacy article id, used for redirects
    SOID = "soid"  # legacy Stack Overflow id
    SEARCH = "search"  # comma-separated search synonyms
    SCORE = "score"  # Stack Overflow score
    DRAFT = "draft"  # hidden from public builds
    TODO = "todo"
    NOTE = "note"  # notes to the author, never rendered
    DESC = "desc"  # SEO description
    DESCRIPTION = "description"
    CLEANUP = "cleanup"
    NEEDS = "needs"

    @classmethod
    def lookup(cls, key: str) -> Optional["MetaKey"]:
        try:
            return cls(key)
        except ValueError:
            return None


@dataclass
class MetaValue:
    """A single key/value pair extracted from a directive block."""

    key: str
    value: str = ""

    @property
    def kind(self) -> Optional[MetaKey]:
        """The recognized key, or None for the unrecognized bucket."""
        return MetaKey.lookup(self.key)

    @property
    def is_known(self) -> bool:
        return self.kind is not None


@dataclass
class HeadingInfo:
    """A heading inside a rendered page."""

    text: str
    id: str


_NON_URL_CHARS = re.compile(r"[^a-z0-9]+")


def urlify(title: str) -> str:
    """
    Make a URL-safe slug out of a title.

    Args:
        title: Page title

    Returns:
        Lower-case slug like "getting-started"
    """
    return _NON_URL_CHARS.sub("-", title.lower()).strip("-")


@dataclass(eq=False)
class Page:
    """
    A node in a book's navigation tree.

    Children are owned through ``pages``. The parent is held as a weak
    reference; the book's id index keeps every node alive for the build.
    """

    notion_id: str
    title: str = ""
    blocks: List[NotionBlock] = field(default_factory=list)
    metadata: List[MetaValue] = field(default_factory=list)
    pages: List["Page"] = field(default_factory=list)
    book_dir: str = ""
    url_prefix: str = "/essential"
    is_loaded: bool = False  # source content attached

    # filled by the render step
    body_html: str = ""
    headings: List[HeadingInfo] = field(default_factory=list)

    _parent_ref: Optional["weakref.ReferenceType[Page]"] = field(
        default=None, repr=False
    )

    @property
    def parent(self) -> Optional["Page"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, page: Optional["Page"]) -> None:
        self._parent_ref = weakref.ref(page) if page is not None else None

    def find_meta(self, key: str) -> str:
        for mv in self.metadata:
            if mv.key == key:
                return mv.value
        return ""

    def has_meta(self, key: str) -> bool:
        return any(mv.key == key for mv in self.metadata)

    @property
    def unrecognized_metadata(self) -> List[MetaValue]:
        return [mv for mv in self.metadata if not mv.is_known]

    @property
    def legacy_id(self) -> str:
        return self.find_meta(MetaKey.ID.value)

    @property
    def description(self) -> str:
        return self.find_meta(MetaKey.DESC.value) or self.find_meta(
            MetaKey.DESCRIPTION.value
        )

    @property
    def search_synonyms(self) -> List[str]:
        s = self.find_meta(MetaKey.SEARCH.value)
        if not s:
            return []
        return [part.strip() for part in s.split(",") if part.strip()]

    @property
    def is_draft(self) -> bool:
        return self.has_meta(MetaKey.DRAFT.value)

    @property
    def siblings(self) -> List["Page"]:
        """Pages sharing this page's parent, including this one."""
        parent = self.parent
        if parent is None:
            return []
        return parent.pages

    @property
    def url_last_path(self) -> str:
        return f"{self.notion_id}-{urlify(self.title)}"

    @property
    def url(self) -> str:
        return f"{self.url_prefix}/{self.book_dir}/{self.url_last_path}"

    @property
    def file_name(self) -> str:
        return self.url_last_path + ".html"

    @property
    def page_title(self) -> str:
        """
        Breadcrumb title like "Essential Go / Basic Types / Integers".

        Unique per page, which search engines like.
        """
        titles = []
        page: Optional[Page] = self
        while page is not None:
            if page.title:
                titles.append(page.title)
            page = page.parent
        return " / ".join(reversed(titles))
