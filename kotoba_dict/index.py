"""
Lookup index for entries.

Maps every written form and reading of a list of entries to the entry
positions in that list. Keys are stored in a marisa_trie.RecordTrie, which
gives exact and prefix lookups directly; a second trie over reversed keys
handles suffix lookups.
"""

import logging
import unicodedata
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import marisa_trie

from kotoba_dict.entry import Entry

logger = logging.getLogger(__name__)

# ============================================================================
# Record Schema
# ============================================================================
# Each key stores one record per entry it belongs to:
#   - pos: uint32 (4 bytes) - entry position in the indexed list

RECORD_FORMAT = "<I"

FORWARD_FILE = "index.trie"
REVERSE_FILE = "index_rev.trie"


class SearchMode(str, Enum):
    """How a query is matched against the index keys."""
    EXACT = "exact"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    CONTAINS = "contains"


def normalize_key(text: str) -> str:
    """Index key for a form or reading."""
    return unicodedata.normalize("NFC", text).strip().lower()


def index_keys(entry: Entry) -> Iterator[str]:
    """Distinct, non-empty keys for every form and reading of an entry."""
    seen = set()
    for form, reading in entry.forms():
        for text in (form, reading):
            key = normalize_key(text)
            if key and key not in seen:
                seen.add(key)
                yield key


class EntryIndex:
    """
    Form/reading index over a list of entries.

    Search results are entry positions, ascending and without duplicates.
    """

    def __init__(self, forward: marisa_trie.RecordTrie, reverse: marisa_trie.RecordTrie):
        self._forward = forward
        self._reverse = reverse

    @classmethod
    def build(cls, entries: Iterable[Entry]) -> "EntryIndex":
        items: List[Tuple[str, Tuple[int]]] = []
        for pos, entry in enumerate(entries):
            for key in index_keys(entry):
                items.append((key, (pos,)))

        forward = marisa_trie.RecordTrie(RECORD_FORMAT, items)
        reverse = marisa_trie.RecordTrie(RECORD_FORMAT, ((key[::-1], rec) for key, rec in items))
        logger.debug(f"Built entry index with {len(forward)} keys")
        return cls(forward, reverse)

    def __len__(self) -> int:
        """Number of (key, entry) pairs in the index."""
        return len(self._forward)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(set(self._forward.keys(prefix)))

    def search(self, text: str, mode: Union[SearchMode, str] = SearchMode.EXACT) -> List[int]:
        """
        Find entry positions for `text`.

        Args:
            text: Form or reading to look up (case-insensitive)
            mode: How to match the index keys

        Returns:
            Sorted entry positions
        """
        mode = SearchMode(mode)
        query = normalize_key(text)
        if not query:
            return []

        if mode is SearchMode.EXACT:
            records = self._forward.get(query, [])
        elif mode is SearchMode.PREFIX:
            records = [rec for _, rec in self._forward.items(query)]
        elif mode is SearchMode.SUFFIX:
            records = [rec for _, rec in self._reverse.items(query[::-1])]
        else:
            records = []
            for key in set(self._forward.keys()):
                if query in key:
                    records.extend(self._forward[key])

        return sorted({pos for (pos,) in records})

    def save(self, directory: Union[str, Path]):
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        self._forward.save(str(directory / FORWARD_FILE))
        self._reverse.save(str(directory / REVERSE_FILE))

    @classmethod
    def load(cls, directory: Union[str, Path]) -> "EntryIndex":
        """
        Load a saved index. The trie files are memory-mapped.

        Raises:
            FileNotFoundError: If the index files do not exist
        """
        directory = Path(directory)
        tries = []
        for name in (FORWARD_FILE, REVERSE_FILE):
            path = directory / name
            if not path.exists():
                raise FileNotFoundError(f"Index not found at {path}")
            trie = marisa_trie.RecordTrie(RECORD_FORMAT)
            trie.mmap(str(path))
            tries.append(trie)
        return cls(*tries)


def lookup(
    entries: List[Entry],
    index: EntryIndex,
    text: str,
    mode: Union[SearchMode, str] = SearchMode.EXACT,
    limit: Optional[int] = None,
) -> List[Entry]:
    """Entries matching `text`, in index order."""
    found = [entries[pos] for pos in index.search(text, mode)]
    return found[:limit] if limit is not None else found
