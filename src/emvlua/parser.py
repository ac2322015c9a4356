"""parser.py - source text in, Document out.

looks for each known top-level table on its own and hands it to the right
decoder. a table that is not there is empty, never an error. the only
thing that raises is being handed something that is not text.

in the world: the dispatcher. reads the call, sends the right unit.
"""

import copy
import hashlib
import threading
from dataclasses import dataclass
from typing import Optional

from emvlua import log
from emvlua.decode import (
    decode_auto, decode_indicators, decode_lamps, decode_lamps_meta,
    decode_patterns, decode_sections, decode_selections, decode_sequences,
    is_lamps_dict,
)
from emvlua.scan import extract_block_after
from emvlua.types import Document


TABLES = (
    "EMV.Auto", "EMV.Selections", "EMV.Lamps", "EMV.Sequences",
    "EMV.Sections", "EMV.Patterns",
)


def parse(text: str) -> Document:
    """parse a lighting file into a Document."""
    if not isinstance(text, str):
        raise TypeError(f"parse expects text, got {type(text).__name__}")

    with log.span("parse", subsystem="parser", chars=len(text)):
        blocks = {name: extract_block_after(text, name) for name in TABLES}
        doc = Document()

        if blocks["EMV.Auto"] is not None:
            doc.auto = decode_auto(blocks["EMV.Auto"])
        if blocks["EMV.Selections"] is not None:
            doc.selections = decode_selections(blocks["EMV.Selections"])

        lamps = blocks["EMV.Lamps"]
        if lamps:
            # the dictionary check has to run before either decoder
            if is_lamps_dict(lamps):
                doc.lamps_meta = decode_lamps_meta(lamps)
            else:
                doc.lamps = decode_lamps(lamps)

        if blocks["EMV.Sequences"]:
            doc.sequences = decode_sequences(blocks["EMV.Sequences"])
        if blocks["EMV.Sections"]:
            doc.sections = decode_sections(blocks["EMV.Sections"])
        if blocks["EMV.Patterns"]:
            doc.patterns = decode_patterns(blocks["EMV.Patterns"])

        doc.indicators = decode_indicators(text)

        found = [name for name, block in blocks.items() if block is not None]
        log.debug("parser", f"parsed {len(doc.auto)} components, "
                            f"{len(doc.selections)} groups from {', '.join(found) or 'nothing'}")
    return doc


# ============================================================
# CACHE
# ============================================================

@dataclass
class CacheEntry:
    """a cached parse."""
    key: str
    value: Document
    size: int = 0
    hits: int = 0


def _text_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


class ParseCache:
    """memoised parse() keyed by content hash.

    parse is pure, so this only saves time. callers get a deep copy, so
    editing a returned Document never touches the cached one. safe to share
    between threads; parsing itself runs outside the lock.
    """

    def __init__(self, max_entries: int = 32):
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._total_hits = 0
        self._total_misses = 0
        self._lock = threading.Lock()

    def get(self, text: str) -> Optional[Document]:
        key = _text_hash(text)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._total_misses += 1
                return None
            entry.hits += 1
            self._total_hits += 1
            value = entry.value
        return copy.deepcopy(value)

    def put(self, text: str, doc: Document):
        if self._max_entries <= 0:
            return
        key = _text_hash(text)
        entry = CacheEntry(key=key, value=copy.deepcopy(doc), size=len(text))
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._evict_lru()
            self._entries[key] = entry

    def parse(self, text: str) -> Document:
        cached = self.get(text)
        if cached is not None:
            return cached
        doc = parse(text)
        self.put(text, doc)
        return doc

    def invalidate_all(self):
        with self._lock:
            self._entries.clear()

    def _evict_lru(self):
        """evict the least used entry (fewest hits). caller holds the lock."""
        if not self._entries:
            return
        least_used = min(self._entries.values(), key=lambda e: e.hits)
        self._entries.pop(least_used.key, None)

    def stats(self) -> dict:
        with self._lock:
            hits, misses = self._total_hits, self._total_misses
            entries = len(self._entries)
            size_chars = sum(e.size for e in self._entries.values())
        total_requests = hits + misses
        return {
            "entries": entries,
            "size_chars": size_chars,
            "hits": hits,
            "misses": misses,
            "hit_rate": hits / total_requests if total_requests > 0 else 0.0,
        }

    def __contains__(self, text: str) -> bool:
        key = _text_hash(text)
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_default_cache: Optional[ParseCache] = None
_default_lock = threading.Lock()


def parse_cached(text: str, cache: Optional[ParseCache] = None) -> Document:
    """parse through a cache; the module-wide one when none is given."""
    global _default_cache
    if cache is None:
        with _default_lock:
            if _default_cache is None:
                _default_cache = ParseCache()
            cache = _default_cache
    if not isinstance(text, str):
        raise TypeError(f"parse expects text, got {type(text).__name__}")
    return cache.parse(text)
