"""Persistent JSON cache for package metadata lookups."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .models import PackageMetadata, parse_package_id
from .registry import MetadataProvider

logger = logging.getLogger(__name__)


def cache_key(package_id: str, network: str) -> str:
    pid = parse_package_id(package_id)
    return f"{network}::{pid.address}::{pid.name}"


class MetadataCache:
    """Map of ``<network>::<address>::<name>`` to registry entries, stored as JSON."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.entries: Dict[str, dict] = {}
        self.dirty = False

    def load(self) -> "MetadataCache":
        if not self.path.exists():
            return self
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Discarding unreadable metadata cache %s: %s", self.path, exc)
            return self
        if isinstance(payload, dict):
            self.entries = payload
        return self

    def get(self, package_id: str, network: str) -> Optional[PackageMetadata]:
        entry = self.entries.get(cache_key(package_id, network))
        if entry is None:
            return None
        try:
            return PackageMetadata.from_dict(entry["address"], entry)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Dropping malformed cache entry for %s on %s: %r", package_id, network, exc)
            del self.entries[cache_key(package_id, network)]
            self.dirty = True
            return None

    def put(self, package_id: str, network: str, metadata: PackageMetadata) -> None:
        self.entries[cache_key(package_id, network)] = metadata.to_dict()
        self.dirty = True

    def save(self) -> None:
        if not self.dirty:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.entries, indent=2), encoding="utf-8")
        self.dirty = False

    def clear(self) -> int:
        """Drop all entries and the backing file. Returns how many were removed."""
        removed = len(self.entries)
        self.entries = {}
        self.dirty = False
        if self.path.exists():
            self.path.unlink()
        return removed

    def __len__(self) -> int:
        return len(self.entries)


class CachingProvider:
    """Wrap a provider so each identifier is fetched at most once per network."""

    def __init__(self, inner: MetadataProvider, cache: MetadataCache) -> None:
        self.inner = inner
        self.cache = cache
        self.hits = 0
        self.misses = 0

    def fetch(self, package_id: str, network: str) -> PackageMetadata:
        cached = self.cache.get(package_id, network)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        metadata = self.inner.fetch(package_id, network)
        self.cache.put(package_id, network, metadata)
        return metadata
