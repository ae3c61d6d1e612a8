"""
Content-addressed caching.

Two stores share one idea: a key derived from content. Static assets are
written under a name embedding the sha1 of their bytes, so an existing file
with that name is always correct. Rendered pages are kept on disk keyed by
page id and a fingerprint of the page's source, so unchanged pages are not
rendered again on the next build.

Neither store is needed for correctness. A cold cache gives the same output.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .page import Page

logger = logging.getLogger(__name__)

SHA1_NAME_LENGTH = 8


def sha1_hex(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def name_to_sha1_name(name: str, sha1: str) -> str:
    """
    Embed a hash in a file name.

    Args:
        name: File name like "main.css"
        sha1: Hex digest of the file content

    Returns:
        Name like "main-0beec7b5.css"
    """
    stem, ext = os.path.splitext(name)
    return f"{stem}-{sha1[:SHA1_NAME_LENGTH]}{ext}"


class AssetStore:
    """Writes static files under content-addressed names."""

    def __init__(self, static_dir: str, url_prefix: str = "/s"):
        """
        Initialize asset store.

        Args:
            static_dir: Directory files are written to, e.g. "www/s"
            url_prefix: URL path the directory is served under
        """
        self.static_dir = Path(static_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.logger = logging.getLogger(__name__)

    def write(self, name: str, data: bytes) -> str:
        """
        Store data under a hash-derived name.

        The write is skipped when a file with that name already exists.

        Args:
            name: Logical file name, e.g. "app.js"
            data: File content

        Returns:
            URL of the stored file, e.g. "/s/app-0beec7b5.js"
        """
        hashed_name = name_to_sha1_name(name, sha1_hex(data))
        dst = self.static_dir / hashed_name
        if dst.exists():
            self.logger.debug(f"Asset {dst} already exists")
        else:
            self.static_dir.mkdir(parents=True, exist_ok=True)
            _atomic_write(dst, data)
            self.logger.info(f"Created {dst}")
        return f"{self.url_prefix}/{hashed_name}"

    def copy(self, src_path: Path) -> str:
        """Store the content of a file under its hash-derived name."""
        return self.write(src_path.name, Path(src_path).read_bytes())


@dataclass
class CacheEntry:
    """A cached render."""

    key: str
    payload: bytes
    produced_at: datetime


def page_fingerprint(page: Page, default_lang: str, renderer_version: str) -> str:
    """
    Fingerprint of everything a page's rendered body depends on.

    Args:
        page: Page after metadata and sub-page extraction
        default_lang: Book's default code language
        renderer_version: Version of the renderer

    Returns:
        Hex digest
    """
    source = {
        "renderer": renderer_version,
        "lang": default_lang,
        "title": page.title,
        "blocks": [b.to_dict() for b in page.blocks],
    }
    data = json.dumps(source, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return sha1_hex(data)


class OutputCache:
    """
    Rendered pages persisted across builds, one JSON file per page id.

    Safe to use from several threads as long as each page id is used by one
    thread at a time. Any I/O or decoding problem is logged and treated as
    a miss.
    """

    def __init__(self, cache_dir: str, enabled: bool = True):
        """
        Initialize output cache.

        Args:
            cache_dir: Directory holding cache files
            enabled: When False, lookups always miss; stores still happen so
                the next build starts warm
        """
        self.cache_dir = Path(cache_dir)
        self.enabled = enabled
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def _path(self, page_id: str) -> Path:
        return self.cache_dir / f"{page_id}.json"

    @staticmethod
    def make_key(page_id: str, fingerprint: str) -> str:
        return f"{page_id}-{fingerprint}"

    def _count(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1

    def get(self, page_id: str, fingerprint: str) -> Optional[CacheEntry]:
        """
        Look up a previous render.

        Args:
            page_id: Page id
            fingerprint: Fingerprint of the page's current source

        Returns:
            CacheEntry on hit, None on miss
        """
        if not self.enabled:
            self._count(False)
            return None
        path = self._path(page_id)
        key = self.make_key(page_id, fingerprint)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            self._count(False)
            return None
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable cache file {path}: {e}")
            self._count(False)
            return None

        if not isinstance(data, dict) or data.get("key") != key:
            self._count(False)
            return None
        try:
            entry = CacheEntry(
                key=key,
                payload=data["payload"].encode("utf-8"),
                produced_at=datetime.fromisoformat(data["produced_at"]),
            )
        except (KeyError, AttributeError, TypeError, ValueError) as e:
            self.logger.warning(f"Ignoring malformed cache file {path}: {e}")
            self._count(False)
            return None
        self._count(True)
        return entry

    def put(self, page_id: str, fingerprint: str, payload: bytes) -> None:
        """
        Store a render. Failures are logged, never raised.

        Args:
            page_id: Page id
            fingerprint: Fingerprint of the source that was rendered
            payload: UTF-8 encoded render output
        """
        entry = {
            "key": self.make_key(page_id, fingerprint),
            "produced_at": datetime.now(timezone.utc).isoformat(),
            "payload": payload.decode("utf-8"),
        }
        path = self._path(page_id)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            _atomic_write(path, json.dumps(entry, ensure_ascii=False).encode("utf-8"))
        except OSError as e:
            self.logger.warning(f"Failed to write cache file {path}: {e}")


def _atomic_write(path: Path, data: bytes) -> None:
    """Write to a temporary file next to path, then rename over it."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
