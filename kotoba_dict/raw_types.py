"""
Row records for Yomichan-style dictionary exports.

Bank files store rows as positional JSON arrays. Each record below names the
columns and validates a row with `from_row`, so that a format change shows
up as a `ParseError` instead of misplaced values.
"""

import re
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from kotoba_dict.errors import ParseError


# ============================================================================
# Bank kinds
# ============================================================================

class BankKind(Enum):
    """Known kinds of bank files."""
    TERM = "term"
    KANJI = "kanji"
    TAG = "tag"
    TERM_META = "term_meta"
    KANJI_META = "kanji_meta"


MANIFEST_NAME = "index.json"

# `term_bank_1.json` -> `term`, `tag_bank.json` -> `tag`
_BANK_SUFFIX = re.compile(r"(_bank(_\d+)?)?\.json$", re.IGNORECASE)


class BankFile(NamedTuple):
    """
    A bank file name resolved to its kind.

    `kind` is None for unrecognized banks; `kind_name` always holds the raw
    kind string taken from the file name.
    """
    name: str
    kind: Optional[BankKind]
    kind_name: str

    @property
    def is_known(self) -> bool:
        return self.kind is not None

    @classmethod
    def parse(cls, name: str) -> Optional["BankFile"]:
        """
        Resolve a file name inside a dictionary export.

        Returns None for files that are not bank files at all (the manifest
        and anything without a `.json` extension).
        """
        base = name.replace("\\", "/").rsplit("/", 1)[-1]
        if base.lower() == MANIFEST_NAME or not base.lower().endswith(".json"):
            return None
        kind_name = _BANK_SUFFIX.sub("", base).lower()
        try:
            kind = BankKind(kind_name)
        except ValueError:
            kind = None
        return cls(name=name, kind=kind, kind_name=kind_name)


# ============================================================================
# Field helpers
# ============================================================================

def split_tags(value: Any) -> Tuple[str, ...]:
    """Split a space separated tag list. Empty or missing gives ()."""
    if not value:
        return ()
    if not isinstance(value, str):
        raise TypeError(f"expected a space separated string, got {type(value).__name__}")
    return tuple(value.split())


def _check_row(row: Any, arity: int, record: str) -> List[Any]:
    if not isinstance(row, list):
        raise TypeError(f"{record} row must be an array, got {type(row).__name__}")
    if len(row) < arity:
        raise TypeError(f"{record} row needs {arity} columns, got {len(row)}")
    return row


def _str(value: Any, column: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{column} must be a string, got {type(value).__name__}")
    return value


def _required_str(value: Any, column: str) -> str:
    value = _str(value, column)
    if not value:
        raise TypeError(f"{column} must not be empty")
    return value


def _int(value: Any, column: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        # Some exporters write integral floats (e.g. `10.0`).
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise TypeError(f"{column} must be an integer, got {value!r}")
    return value


def _str_list(value: Any, column: str) -> Tuple[str, ...]:
    if not isinstance(value, list):
        raise TypeError(f"{column} must be an array, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"{column} items must be strings, got {type(item).__name__}")
    return tuple(value)


# ============================================================================
# Records
# ============================================================================

class ImportedTerm(NamedTuple):
    """
    Term bank row: a single definition for `expression`.

    `rules` are inflection classes (`adj-i`, `v1`, `v5`, `vk`, `vs`) and are
    also used as entry tags.
    """
    expression: str
    reading: str
    definition_tags: Tuple[str, ...]
    rules: Tuple[str, ...]
    score: int
    glossary: Tuple[str, ...]
    sequence: int
    term_tags: Tuple[str, ...]

    @classmethod
    def from_row(cls, row: Any) -> "ImportedTerm":
        row = _check_row(row, 8, "term")
        return cls(
            expression=_required_str(row[0], "expression"),
            reading=_str(row[1], "reading"),
            definition_tags=split_tags(row[2]),
            rules=split_tags(row[3]),
            score=_int(row[4], "score"),
            glossary=_str_list(row[5], "glossary"),
            sequence=_int(row[6], "sequence"),
            term_tags=split_tags(row[7]),
        )


class ImportedKanji(NamedTuple):
    """Kanji bank row. `stats` keys are described by the tag bank."""
    character: str
    onyomi: Tuple[str, ...]
    kunyomi: Tuple[str, ...]
    tags: Tuple[str, ...]
    meanings: Tuple[str, ...]
    stats: Dict[str, str]

    @classmethod
    def from_row(cls, row: Any) -> "ImportedKanji":
        row = _check_row(row, 6, "kanji")
        stats = row[5]
        if not isinstance(stats, dict):
            raise TypeError(f"stats must be an object, got {type(stats).__name__}")
        return cls(
            character=_required_str(row[0], "character"),
            onyomi=split_tags(row[1]),
            kunyomi=split_tags(row[2]),
            tags=split_tags(row[3]),
            meanings=_str_list(row[4], "meanings"),
            stats={str(key): str(value) for key, value in stats.items()},
        )


class ImportedTag(NamedTuple):
    """Tag bank row. Lower `order` sorts first."""
    name: str
    category: str
    order: int
    notes: str
    score: int

    @classmethod
    def from_row(cls, row: Any) -> "ImportedTag":
        row = _check_row(row, 5, "tag")
        return cls(
            name=_str(row[0], "name"),
            category=_str(row[1], "category"),
            order=_int(row[2], "order"),
            notes=_str(row[3], "notes"),
            score=_int(row[4], "score"),
        )


class ImportedMeta(NamedTuple):
    """Frequency metadata row for a term or kanji. `data` is kept verbatim."""
    expression: str
    mode: str
    data: Any

    @classmethod
    def from_row(cls, row: Any) -> "ImportedMeta":
        row = _check_row(row, 3, "meta")
        return cls(
            expression=_str(row[0], "expression"),
            mode=_str(row[1], "mode"),
            data=row[2],
        )


ROW_RECORDS = {
    BankKind.TERM: ImportedTerm,
    BankKind.KANJI: ImportedKanji,
    BankKind.TAG: ImportedTag,
    BankKind.TERM_META: ImportedMeta,
    BankKind.KANJI_META: ImportedMeta,
}


def parse_rows(kind: BankKind, rows: Any, filename: str, path: Optional[str] = None) -> list:
    """
    Decode every row of a bank file into its record type.

    Raises:
        ParseError: If the bank is not an array or a row does not match
    """
    if not isinstance(rows, list):
        raise ParseError("bank must be a JSON array", path=path, filename=filename)

    record = ROW_RECORDS[kind]
    out = []
    for pos, row in enumerate(rows):
        try:
            out.append(record.from_row(row))
        except (TypeError, ValueError) as e:
            raise ParseError(str(e), path=path, filename=filename, row=pos) from e
    return out
