"""
Adapter for jisho.org search results.

The HTTP query and the page scraping for audio are done elsewhere; this
module works on the decoded API response. `parse_jisho_response` turns the
response body into typed rows (or raises `InvalidResponse`), and
`entry_from_jisho` maps a row into an `Entry`.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from kotoba_dict.entry import Entry, EntryEnglish, EntrySource, Link
from kotoba_dict.errors import InvalidResponse

# Entry tag added to common words.
COMMON_TAG = "P"


# ============================================================================
# Rows
# ============================================================================

@dataclass
class JishoJapanese:
    """
    A Japanese form for a result. The first form of a result is the main one.

    Attributes:
        word: Written form. For kana-only terms this is the reading.
        reading: Kana reading
        audio: Audio URLs, only filled when audio was requested
    """
    word: str
    reading: str
    audio: List[str] = field(default_factory=list)


@dataclass
class JishoLink:
    """Related link for a sense (e.g. Wikipedia)."""
    text: str
    url: str


@dataclass
class JishoSense:
    """
    One English sense for a result.

    Attributes:
        english_definitions: English glosses
        tags: Human readable tags (e.g. "Usually written using kana alone")
        parts_of_speech: Human readable parts of speech (e.g. "Noun")
        see_also: Related dictionary terms
        info: Extra information (e.g. "from 〜のうち")
        links: Related links
    """
    english_definitions: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    parts_of_speech: List[str] = field(default_factory=list)
    see_also: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)
    links: List[JishoLink] = field(default_factory=list)


@dataclass
class JishoEntry:
    """
    A jisho.org search result.

    Attributes:
        slug: Japanese word, possibly with a counter (e.g. "家-1")
        is_common: True for common words
        japanese: Japanese forms, main form first
        senses: English senses
        jlpt: JLPT tags (e.g. "jlpt-n5")
        tags: Other tags (e.g. "wanikani8")
        order: 0-based position in the results
    """
    slug: str
    is_common: bool
    japanese: List[JishoJapanese]
    senses: List[JishoSense]
    jlpt: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    order: int = 0


# ============================================================================
# Mapping
# ============================================================================

def entry_from_jisho(row: JishoEntry) -> Entry:
    """
    Create an `Entry` from a jisho.org result.

    The first Japanese form is the entry expression, the others become extra
    forms. Earlier results get a higher score.
    """
    main, *extra = row.japanese

    tags = list(row.jlpt) + list(row.tags)
    if row.is_common:
        tags.append(COMMON_TAG)

    english = []
    for sense in row.senses:
        links = [Link.see_also(term) for term in sense.see_also]
        links.extend(Link(uri=link.url, text=link.text) for link in sense.links)
        english.append(EntryEnglish(
            glossary=sense.english_definitions,
            tags=list(sense.parts_of_speech) + list(sense.tags),
            info=sense.info,
            links=links,
        ))

    return Entry(
        source=EntrySource.JISHO,
        origin="",
        expression=main.word,
        reading=main.reading,
        extra_forms=[it.word for it in extra],
        extra_readings=[it.reading for it in extra],
        english=english,
        tags=tags,
        score=-row.order,
    )


def entries_from_jisho(rows: Iterable[JishoEntry]) -> List[Entry]:
    return [entry_from_jisho(row) for row in rows]


# ============================================================================
# Response parsing
# ============================================================================

def _field(obj: Dict[str, Any], key: str, kind: type, default: Any = None) -> Any:
    value = obj.get(key, default)
    if value is None:
        value = default
    if not isinstance(value, kind):
        raise InvalidResponse(f"invalid Jisho response: '{key}' must be {kind.__name__}")
    return value


def _strings(obj: Dict[str, Any], key: str) -> List[str]:
    items = _field(obj, key, list, [])
    return [str(it) for it in items]


def _parse_japanese(obj: Any) -> JishoJapanese:
    if not isinstance(obj, dict):
        raise InvalidResponse("invalid Jisho response: japanese form must be an object")
    reading = _field(obj, "reading", str, "")
    # Word is missing for kana-only terms.
    word = _field(obj, "word", str, "") or reading
    if not word:
        raise InvalidResponse("invalid Jisho response: japanese form without word or reading")
    return JishoJapanese(word=word, reading=reading, audio=[])


def _parse_sense(obj: Any) -> JishoSense:
    if not isinstance(obj, dict):
        raise InvalidResponse("invalid Jisho response: sense must be an object")
    links = []
    for link in _field(obj, "links", list, []):
        if not isinstance(link, dict):
            raise InvalidResponse("invalid Jisho response: link must be an object")
        links.append(JishoLink(text=_field(link, "text", str, ""), url=_field(link, "url", str, "")))
    return JishoSense(
        english_definitions=_strings(obj, "english_definitions"),
        tags=_strings(obj, "tags"),
        parts_of_speech=_strings(obj, "parts_of_speech"),
        see_also=_strings(obj, "see_also"),
        info=_strings(obj, "info"),
        links=links,
    )


def parse_jisho_response(body: Any) -> List[JishoEntry]:
    """
    Decode a jisho.org API response body into result rows.

    Rows get their `order` from their position in the response.

    Raises:
        InvalidResponse: If the status is not 200 or the data is malformed
    """
    if not isinstance(body, dict):
        raise InvalidResponse("invalid Jisho response: body must be an object")
    meta = body.get("meta")
    if not isinstance(meta, dict) or meta.get("status") != 200:
        raise InvalidResponse("invalid Jisho response: bad status")

    rows = []
    for order, item in enumerate(_field(body, "data", list, [])):
        if not isinstance(item, dict):
            raise InvalidResponse("invalid Jisho response: result must be an object")
        japanese = [_parse_japanese(it) for it in _field(item, "japanese", list, [])]
        if not japanese:
            raise InvalidResponse(f"invalid Jisho response: result {order} has no japanese forms")
        rows.append(JishoEntry(
            slug=_field(item, "slug", str, ""),
            is_common=_field(item, "is_common", bool, False),
            japanese=japanese,
            senses=[_parse_sense(it) for it in _field(item, "senses", list, [])],
            jlpt=_strings(item, "jlpt"),
            tags=_strings(item, "tags"),
            order=order,
        ))
    return rows


def attach_audio(
    rows: Iterable[JishoEntry],
    word: str,
    reading: str,
    urls: Iterable[str],
) -> List[JishoEntry]:
    """
    Return copies of `rows` with audio URLs added to matching forms.

    A form matches when both its word and reading are equal to the given
    ones. Rows are not modified.
    """
    urls = list(urls)
    out = []
    for row in rows:
        japanese = []
        for jp in row.japanese:
            if jp.word == word and jp.reading == reading:
                jp = replace(jp, audio=jp.audio + urls)
            else:
                jp = replace(jp, audio=list(jp.audio))
            japanese.append(jp)
        out.append(replace(row, japanese=japanese))
    return out


def find_audio(rows: Iterable[JishoEntry], word: str, reading: Optional[str] = None) -> List[str]:
    """Audio URLs for a form, optionally restricted to a reading."""
    out = []
    for row in rows:
        for jp in row.japanese:
            if jp.word == word and (reading is None or jp.reading == reading):
                out.extend(jp.audio)
    return out
