"""
Adapter for japanesepod101.com dictionary results.

Rows are extracted from the result page by the scraper. Each row has a
single English definition; audio URLs stay out of the entry and are looked
up by (term, kana) instead.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from kotoba_dict.entry import Entry, EntryEnglish, EntrySource
from kotoba_dict.errors import InvalidResponse


@dataclass
class JapanesePodEntry:
    """
    A japanesepod101.com result row.

    Attributes:
        term: Main Japanese term
        kana: Kana reading of the term
        audio: Audio URLs
        english: English definition
        english_info: Notes shown after the definition (grey italic text)
        order: 0-based position in the results
    """
    term: str
    kana: str
    audio: List[str] = field(default_factory=list)
    english: str = ""
    english_info: List[str] = field(default_factory=list)
    order: int = 0


def entry_from_japanese_pod(row: JapanesePodEntry) -> Entry:
    """Create an `Entry` from a japanesepod101.com row."""
    return Entry(
        source=EntrySource.JAPANESE_POD,
        origin="",
        expression=row.term,
        reading=row.kana,
        english=[
            EntryEnglish(glossary=[row.english], info=row.english_info),
        ],
        score=-row.order,
    )


def entries_from_japanese_pod(rows: Iterable[JapanesePodEntry]) -> List[Entry]:
    return [entry_from_japanese_pod(row) for row in rows]


def rows_with_order(items: Iterable[Mapping[str, Any]]) -> List[JapanesePodEntry]:
    """
    Build rows from scraped result dicts, numbering them in result order.

    Results without term and kana are skipped and do not take an order
    number. A missing term is replaced by the kana.

    Raises:
        InvalidResponse: If a result lacks one of the expected keys
    """
    rows = []
    for pos, item in enumerate(items):
        try:
            term = (item["term"] or "").strip()
            kana = (item["kana"] or "").strip()
            audio = list(item.get("audio") or [])
            english = (item["english"] or "").strip()
            english_info = list(item.get("english_info") or [])
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidResponse(f"invalid JapanesePod result {pos}: {e!r}") from e

        if not term and not kana:
            continue

        rows.append(JapanesePodEntry(
            term=term or kana,
            kana=kana,
            audio=audio,
            english=english,
            english_info=english_info,
            order=len(rows),
        ))
    return rows


def audio_keys(rows: Iterable[JapanesePodEntry]) -> Dict[Tuple[str, str], List[str]]:
    """Audio URLs by (term, kana), in row order and without duplicates."""
    out: Dict[Tuple[str, str], List[str]] = {}
    for row in rows:
        urls = out.setdefault((row.term, row.kana), [])
        for url in row.audio:
            if url not in urls:
                urls.append(url)
    return out
