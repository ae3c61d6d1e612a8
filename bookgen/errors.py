"""Exceptions raised while building books."""

from typing import Optional


class BookgenError(Exception):
    """Base class for all bookgen errors."""


class InvariantViolation(BookgenError):
    """The source page graph is structurally broken. Aborts the build."""

    def __init__(self, message: str, page_id: Optional[str] = None):
        super().__init__(message)
        self.page_id = page_id


class DanglingReferenceError(InvariantViolation):
    """A sub-page reference points at a page that was never loaded."""


class CyclicReferenceError(InvariantViolation):
    """A page is reachable from itself through sub-page references."""


class MissingTitleError(InvariantViolation):
    """A page has no title."""


class PageNotFoundError(BookgenError):
    """The page source has no page with the requested id."""

    def __init__(self, page_id: str):
        super().__init__(f"Page not found: {page_id}")
        self.page_id = page_id


class PageRenderError(BookgenError):
    """Rendering a single page failed."""

    def __init__(self, page_id: str, path: str, cause: Exception):
        super().__init__(f"{path} ({page_id}): {cause}")
        self.page_id = page_id
        self.path = path
        self.cause = cause
