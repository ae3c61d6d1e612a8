"""
Extraction of page metadata from directive blocks.

A directive is a plain, single-line text block at the very start of a page:

    $id: 59
    @draft
    @search goroutine, channel

The leading run of such blocks is removed from the page and turned into
key/value pairs. The sigil is one of ``$ @ # %``; the key ends at the first
``:``, or at the first space when there is no ``:``.
"""

import logging
from typing import List, Optional

from ..notion.models import BLOCK_PARAGRAPH, NotionBlock
from .page import MetaValue

logger = logging.getLogger(__name__)

DIRECTIVE_SIGILS = "$@#%"
MIN_DIRECTIVE_LENGTH = 4  # characters after the sigil

NOTION_BASE_URL = "https://notion.so/"


def is_directive_block(block: NotionBlock) -> bool:
    """
    Check whether a block is shaped like a directive.

    Args:
        block: Content block

    Returns:
        True for a plain single-line paragraph starting with a sigil
    """
    if block.block_type != BLOCK_PARAGRAPH or not block.is_plain:
        return False
    s = block.content.strip()
    if len(s) - 1 < MIN_DIRECTIVE_LENGTH or "\n" in s:
        return False
    return s[0] in DIRECTIVE_SIGILS


def parse_directive(block: NotionBlock) -> Optional[MetaValue]:
    """
    Parse a directive block into a key/value pair.

    Args:
        block: Content block

    Returns:
        MetaValue, or None if the block is not a directive
    """
    if not is_directive_block(block):
        return None
    s = block.content.strip()[1:].strip()
    key_end = s.find(":")
    if key_end == -1:
        key_end = s.find(" ")
    if key_end == -1:
        return MetaValue(key=s.lower(), value="")
    return MetaValue(key=s[:key_end].strip().lower(), value=s[key_end + 1 :].strip())


def extract_metadata(blocks: List[NotionBlock], page_id: str = "") -> List[MetaValue]:
    """
    Consume the leading directive blocks of a page.

    The consumed blocks are deleted from ``blocks`` in place. Scanning stops
    at the first block that is not a directive, so running this again on the
    same list is a no-op.

    Args:
        blocks: Page content, modified in place
        page_id: Page id, for log messages

    Returns:
        Metadata in source order
    """
    metadata: List[MetaValue] = []
    n_consumed = 0
    for block in blocks:
        mv = parse_directive(block)
        if mv is None:
            break
        n_consumed += 1
        if not mv.key:
            logger.warning(
                f"Dropping directive without a key '{block.content.strip()}' "
                f"in page {NOTION_BASE_URL}{page_id}"
            )
            continue
        if not mv.is_known:
            logger.warning(
                f"Unknown meta value '{mv.key}' = '{mv.value}' "
                f"in page {NOTION_BASE_URL}{page_id}"
            )
        metadata.append(mv)

    del blocks[:n_consumed]
    return metadata
