"""Dataclasses describing the outcome of a build."""

from dataclasses import dataclass, field
from typing import List

from ..errors import PageRenderError


@dataclass
class BuildStats:
    """Statistics from a build run."""

    books_built: int = 0
    pages_rendered: int = 0
    pages_from_cache: int = 0
    pages_failed: int = 0
    errors: List[PageRenderError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.pages_failed == 0
