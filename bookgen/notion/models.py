"""Dataclasses for raw page content fetched from a page source."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

# Block types the rest of the pipeline cares about
BLOCK_PARAGRAPH = "paragraph"
BLOCK_CHILD_PAGE = "child_page"
BLOCK_CODE = "code"


@dataclass
class NotionBlock:
    """Represents a Notion block of content."""

    block_id: str
    block_type: str
    content: str
    has_children: bool = False
    is_plain: bool = True  # a single rich-text run without annotations or links
    language: str = ""  # only set for code blocks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.block_id,
            "type": self.block_type,
            "content": self.content,
            "has_children": self.has_children,
            "is_plain": self.is_plain,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotionBlock":
        return cls(
            block_id=data["id"],
            block_type=data["type"],
            content=data.get("content", ""),
            has_children=data.get("has_children", False),
            is_plain=data.get("is_plain", True),
            language=data.get("language", ""),
        )


@dataclass
class SourcePage:
    """A page as delivered by a page source, before any processing."""

    page_id: str
    title: str
    blocks: List[NotionBlock] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.page_id,
            "title": self.title,
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourcePage":
        return cls(
            page_id=data["id"],
            title=data.get("title", ""),
            blocks=[NotionBlock.from_dict(b) for b in data.get("blocks", [])],
        )


@dataclass
class LoadProgress:
    """Progress tracking for loading a book from a page source."""

    total_pages_found: int = 0
    pages_loaded: int = 0
    pages_failed: int = 0
    current_page_title: str = ""
    current_depth: int = 0


def normalize_id(page_id: str) -> str:
    """
    Normalize a Notion id so that dashed and undashed forms compare equal.

    Args:
        page_id: Id as found in the API, a URL or a config file

    Returns:
        Lower-cased id without dashes
    """
    return page_id.strip().replace("-", "").lower()
