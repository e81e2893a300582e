"""
Adapters for external dictionary services.

Each adapter maps rows already fetched and extracted from a service into
`Entry` objects. Fetching, scraping and retries are not handled here.
"""

from kotoba_dict.sources.japanese_pod import (
    JapanesePodEntry,
    entries_from_japanese_pod,
    entry_from_japanese_pod,
)
from kotoba_dict.sources.jisho import (
    JishoEntry,
    JishoJapanese,
    JishoLink,
    JishoSense,
    entries_from_jisho,
    entry_from_jisho,
    parse_jisho_response,
)

__all__ = [
    "JapanesePodEntry",
    "entries_from_japanese_pod",
    "entry_from_japanese_pod",
    "JishoEntry",
    "JishoJapanese",
    "JishoLink",
    "JishoSense",
    "entries_from_jisho",
    "entry_from_jisho",
    "parse_jisho_response",
]
