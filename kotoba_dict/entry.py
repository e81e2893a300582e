"""
Canonical dictionary entry model.

Every source (imported dictionaries, jisho.org results, japanesepod101
results) is normalized into `Entry` objects. Entries are immutable: adapters
build them in one go and never modify them afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Tuple

# Scheme used for "see also" cross-references stored as a `Link`.
SEE_ALSO_SCHEME = "see://"


class EntrySource(str, Enum):
    """Origin for a dictionary entry. Values are the serialized codes."""
    IMPORT = "I"
    JISHO = "J"
    JAPANESE_POD = "P"


def _as_tuple(items: Iterable[Any]) -> tuple:
    return tuple(items) if items is not None else ()


@dataclass(frozen=True, slots=True)
class Link:
    """
    Link to a related resource.

    Attributes:
        uri: Resource locator. Cross-references use `see://<term>`.
        text: Display text for the link.
    """
    uri: str
    text: str

    @classmethod
    def see_also(cls, term: str) -> "Link":
        """Cross-reference to another dictionary term."""
        return cls(uri=SEE_ALSO_SCHEME + term, text=term)

    @property
    def is_see_also(self) -> bool:
        return self.uri.startswith(SEE_ALSO_SCHEME)


@dataclass(frozen=True, slots=True)
class EntryEnglish:
    """
    One English sense for an entry.

    Attributes:
        glossary: Definition text, one item per gloss
        tags: Sense tags (parts of speech, usage, field...). May repeat.
        info: Free-text clarifications (e.g. "from 〜のうち")
        links: Related links and cross-references
    """
    glossary: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    info: Tuple[str, ...] = ()
    links: Tuple[Link, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "glossary", _as_tuple(self.glossary))
        object.__setattr__(self, "tags", _as_tuple(self.tags))
        object.__setattr__(self, "info", _as_tuple(self.info))
        object.__setattr__(self, "links", _as_tuple(self.links))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "glossary": list(self.glossary),
            "tags": list(self.tags),
            "info": list(self.info),
            "links": [{"uri": link.uri, "text": link.text} for link in self.links],
        }


@dataclass(frozen=True, slots=True)
class Entry:
    """
    A normalized dictionary entry, independent of its source.

    Attributes:
        source: Where the entry came from
        origin: Human readable provenance (imported dictionary title), empty
            for scraped sources
        expression: Main Japanese form, never empty
        reading: Kana reading for `expression`. Empty if the expression is
            already kana or the reading is not applicable.
        extra_forms: Additional written forms
        extra_readings: Readings for each of `extra_forms` (same length)
        english: English senses, in display order
        tags: Entry level tags (JLPT level, common word, inflection rules...)
        score: Higher sorts first. Only comparable between entries of the
            same batch.
    """
    source: EntrySource
    origin: str
    expression: str
    reading: str = ""
    extra_forms: Tuple[str, ...] = ()
    extra_readings: Tuple[str, ...] = ()
    english: Tuple[EntryEnglish, ...] = ()
    tags: Tuple[str, ...] = ()
    score: int = 0

    def __post_init__(self):
        object.__setattr__(self, "source", EntrySource(self.source))
        object.__setattr__(self, "origin", self.origin or "")
        object.__setattr__(self, "reading", self.reading or "")
        object.__setattr__(self, "extra_forms", _as_tuple(self.extra_forms))
        object.__setattr__(self, "extra_readings", _as_tuple(self.extra_readings))
        object.__setattr__(self, "english", _as_tuple(self.english))
        object.__setattr__(self, "tags", _as_tuple(self.tags))

        if not self.expression:
            raise ValueError("entry expression must be non-empty")
        if len(self.extra_forms) != len(self.extra_readings):
            raise ValueError(
                f"entry {self.expression!r} has {len(self.extra_forms)} extra forms "
                f"but {len(self.extra_readings)} extra readings"
            )

    def forms(self) -> Iterator[Tuple[str, str]]:
        """Yield (form, reading) for the main form and every extra form."""
        yield self.expression, self.reading
        yield from zip(self.extra_forms, self.extra_readings)

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-friendly representation."""
        return {
            "source": self.source.value,
            "origin": self.origin,
            "expression": self.expression,
            "reading": self.reading,
            "extra_forms": list(self.extra_forms),
            "extra_readings": list(self.extra_readings),
            "english": [eng.to_dict() for eng in self.english],
            "tags": list(self.tags),
            "score": self.score,
        }

    def __repr__(self) -> str:
        return f"Entry({self.source.value}, {self.expression!r}, reading={self.reading!r}, score={self.score})"
