"""
Compact serialization for entries.

Entries are stored as fixed-position arrays:

    [source, origin, expression, reading, extra_forms, extra_readings,
     tags, score, english]

with each English sense as:

    [glossary, tags, info, [[uri, text], ...]]

Origins, tags and info strings repeat a lot, so they are replaced by integer
codes from a `NameMap`. Code 0 means "no value". The same name map must be
given to `deserialize_entries` to decode, and a single name map can be
shared by several batches so that equal names get equal codes everywhere.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from kotoba_dict.entry import Entry, EntryEnglish, EntrySource, Link
from kotoba_dict.errors import EncodingInconsistency

ENTRY_FIELDS = 9
ENGLISH_FIELDS = 4


# ============================================================================
# Name map
# ============================================================================

class NameMap:
    """
    Interning table for names, filled while serializing.

    Attributes:
        names: Distinct names in first-seen order. The code for `names[i]`
            is `i + 1`.
        index: Name to code
    """

    __slots__ = ("names", "index", "_frozen")

    def __init__(self, names: Optional[Iterable[str]] = None):
        self.names: List[str] = []
        self.index: Dict[str, int] = {}
        self._frozen = False
        for name in names or ():
            if not name or name in self.index:
                raise EncodingInconsistency(f"invalid or duplicated name in name map: {name!r}")
            self.names.append(name)
            self.index[name] = len(self.names)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "NameMap":
        """
        Stop accepting new names.

        Call once every batch sharing this map has been serialized. Known
        names can still be encoded.
        """
        self._frozen = True
        return self

    def code(self, name: str) -> int:
        """Code for `name`, adding it if needed. Empty names map to 0."""
        if not name:
            return 0
        code = self.index.get(name)
        if code is None:
            if self._frozen:
                raise RuntimeError(f"name map is frozen, cannot add {name!r}")
            self.names.append(name)
            code = len(self.names)
            self.index[name] = code
        return code

    def codes(self, names: Iterable[str]) -> List[int]:
        return [self.code(name) for name in names]

    def name(self, code: int) -> str:
        """
        Name for `code`. Code 0 gives the empty string.

        Raises:
            EncodingInconsistency: If the code is not in the map
        """
        if isinstance(code, bool) or not isinstance(code, int):
            raise EncodingInconsistency(f"name code must be an integer, got {code!r}")
        if code == 0:
            return ""
        if code < 0 or code > len(self.names):
            raise EncodingInconsistency(f"name code {code} not in name map ({len(self.names)} names)")
        return self.names[code - 1]

    def to_dict(self) -> Dict[str, Any]:
        return {"names": list(self.names)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NameMap":
        names = data.get("names") if isinstance(data, dict) else None
        if not isinstance(names, list):
            raise EncodingInconsistency("name map data must have a 'names' array")
        return cls(names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: str) -> bool:
        return name in self.index

    def __repr__(self) -> str:
        state = ", frozen" if self._frozen else ""
        return f"<NameMap({len(self.names)} names{state})>"


# ============================================================================
# Serialization
# ============================================================================

def serialize_entry(entry: Entry, name_map: NameMap) -> list:
    return [
        entry.source.value,
        name_map.code(entry.origin),
        entry.expression,
        entry.reading,
        list(entry.extra_forms),
        list(entry.extra_readings),
        name_map.codes(entry.tags),
        entry.score,
        [
            [
                list(eng.glossary),
                name_map.codes(eng.tags),
                name_map.codes(eng.info),
                [[link.uri, link.text] for link in eng.links],
            ]
            for eng in entry.english
        ],
    ]


def serialize_entries(entries: Iterable[Entry], name_map: NameMap) -> List[list]:
    """
    Convert entries to the compact array form.

    `name_map` is updated in place with any new origin, tag or info name.
    Pass a fresh `NameMap` for an independent table.
    """
    return [serialize_entry(entry, name_map) for entry in entries]


def _check_array(value: Any, size: int, what: str) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)) or len(value) != size:
        raise EncodingInconsistency(f"{what} must be an array of {size} items, got {value!r}")
    return value


def _check_list(value: Any, what: str) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)):
        raise EncodingInconsistency(f"{what} must be an array, got {value!r}")
    return value


def _check_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise EncodingInconsistency(f"{what} must be a string, got {value!r}")
    return value


def _check_strings(value: Any, what: str) -> List[str]:
    return [_check_str(item, f"{what} item") for item in _check_list(value, what)]


def _names(codes: Any, name_map: NameMap, what: str) -> List[str]:
    return [name_map.name(code) for code in _check_list(codes, what)]


def deserialize_entry(data: Any, name_map: NameMap) -> Entry:
    (source, origin, expression, reading, extra_forms, extra_readings,
     tags, score, english) = _check_array(data, ENTRY_FIELDS, "entry")

    try:
        source = EntrySource(source)
    except ValueError:
        raise EncodingInconsistency(f"unknown entry source {source!r}") from None
    if isinstance(score, bool) or not isinstance(score, int):
        raise EncodingInconsistency(f"entry score must be an integer, got {score!r}")

    senses = []
    for item in _check_list(english, "english"):
        glossary, eng_tags, info, links = _check_array(item, ENGLISH_FIELDS, "english sense")
        senses.append(EntryEnglish(
            glossary=_check_strings(glossary, "glossary"),
            tags=_names(eng_tags, name_map, "sense tags"),
            info=_names(info, name_map, "sense info"),
            links=[
                Link(*(_check_str(part, "link") for part in _check_array(link, 2, "link")))
                for link in _check_list(links, "links")
            ],
        ))

    try:
        return Entry(
            source=source,
            origin=name_map.name(origin),
            expression=_check_str(expression, "expression"),
            reading=_check_str(reading, "reading"),
            extra_forms=_check_strings(extra_forms, "extra forms"),
            extra_readings=_check_strings(extra_readings, "extra readings"),
            english=senses,
            tags=_names(tags, name_map, "entry tags"),
            score=score,
        )
    except ValueError as e:
        if isinstance(e, EncodingInconsistency):
            raise
        raise EncodingInconsistency(f"invalid entry data: {e}") from e


def deserialize_entries(data: Iterable[Any], name_map: NameMap) -> List[Entry]:
    """
    Decode entries produced by `serialize_entries` with the same name map.

    Raises:
        EncodingInconsistency: If the data references an unknown code or is
            not in the compact form
    """
    return [deserialize_entry(item, name_map) for item in data]
