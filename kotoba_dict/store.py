"""
On-disk entry store.

A store directory holds:
- entries.json: entries in the compact array form (see `codec`)
- names.json: the name map needed to decode them
- index.trie / index_rev.trie: the lookup index
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from kotoba_dict.codec import NameMap, deserialize_entries, serialize_entries
from kotoba_dict.entry import Entry
from kotoba_dict.index import EntryIndex, SearchMode, lookup

logger = logging.getLogger(__name__)

ENTRIES_FILE = "entries.json"
NAMES_FILE = "names.json"


@dataclass
class EntryStore:
    """Entries loaded from a store directory, with their index."""
    entries: List[Entry]
    name_map: NameMap
    index: EntryIndex

    def lookup(
        self,
        text: str,
        mode: Union[SearchMode, str] = SearchMode.EXACT,
        limit: Optional[int] = None,
    ) -> List[Entry]:
        return lookup(self.entries, self.index, text, mode=mode, limit=limit)

    def __len__(self) -> int:
        return len(self.entries)


def save_store(
    directory: Union[str, Path],
    entries: Iterable[Entry],
    name_map: Optional[NameMap] = None,
) -> NameMap:
    """
    Write entries, name map and index to a store directory.

    Args:
        directory: Store directory, created if needed
        entries: Entries to store
        name_map: Shared name map to extend. It is left open so later
            batches can keep adding names. A fresh one is used if None.

    Returns:
        The name map. A fresh map is returned frozen.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    entries = list(entries)
    owned = name_map is None
    if owned:
        name_map = NameMap()
    data = serialize_entries(entries, name_map)
    if owned:
        name_map.freeze()

    with open(directory / ENTRIES_FILE, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, separators=(",", ":"))
    with open(directory / NAMES_FILE, "w", encoding="utf-8") as f:
        json.dump(name_map.to_dict(), f, ensure_ascii=False, indent=1)

    EntryIndex.build(entries).save(directory)

    size = (directory / ENTRIES_FILE).stat().st_size / (1024 * 1024)
    logger.info(f"Saved {len(entries)} entries ({len(name_map)} names) to {directory} ({size:.1f} MB)")
    return name_map


def load_store(directory: Union[str, Path]) -> EntryStore:
    """
    Load a store written by `save_store`.

    Raises:
        FileNotFoundError: If the directory or one of its files is missing
        EncodingInconsistency: If entries and name map do not match
    """
    directory = Path(directory)
    for name in (ENTRIES_FILE, NAMES_FILE):
        if not (directory / name).exists():
            raise FileNotFoundError(
                f"Store file not found at {directory / name}. "
                "Run 'kotoba-dict import' to build it."
            )

    with open(directory / NAMES_FILE, "r", encoding="utf-8") as f:
        name_map = NameMap.from_dict(json.load(f)).freeze()
    with open(directory / ENTRIES_FILE, "r", encoding="utf-8") as f:
        entries = deserialize_entries(json.load(f), name_map)

    index = EntryIndex.load(directory)
    logger.debug(f"Loaded {len(entries)} entries from {directory}")
    return EntryStore(entries=entries, name_map=name_map, index=index)
