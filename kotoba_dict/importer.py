"""
Importer for Yomichan-style dictionary exports.

An export is either a directory or a `.zip` archive holding an `index.json`
manifest plus any number of bank files (`term_bank_1.json`,
`kanji_bank_1.json`, `tag_bank_1.json`, `term_meta_bank_1.json`...).

Bank files are read and decoded on a thread pool. Each file is parsed
completely before its rows are merged, and merging happens on the calling
thread in file name order, so the result does not depend on scheduling.
"""

import json
import logging
import os
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from kotoba_dict import settings
from kotoba_dict.entry import Entry, EntryEnglish, EntrySource
from kotoba_dict.errors import BankReadError, DictionaryImportError, MissingManifest, ParseError
from kotoba_dict.raw_types import (
    MANIFEST_NAME,
    BankFile,
    BankKind,
    ImportedKanji,
    ImportedMeta,
    ImportedTag,
    ImportedTerm,
    parse_rows,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


# ============================================================================
# Imported dictionary
# ============================================================================

@dataclass(frozen=True)
class BankCounts:
    """Number of rows per collection. Counts can be added together."""
    terms: int = 0
    kanjis: int = 0
    tags: int = 0
    term_meta: int = 0
    kanji_meta: int = 0

    def __add__(self, other: "BankCounts") -> "BankCounts":
        return BankCounts(
            terms=self.terms + other.terms,
            kanjis=self.kanjis + other.kanjis,
            tags=self.tags + other.tags,
            term_meta=self.term_meta + other.term_meta,
            kanji_meta=self.kanji_meta + other.kanji_meta,
        )

    def __str__(self) -> str:
        return " ".join([
            f"terms:{self.terms}",
            f"kanjis:{self.kanjis}",
            f"tags:{self.tags}",
            f"meta-terms:{self.term_meta}",
            f"meta-kanjis:{self.kanji_meta}",
        ])


@dataclass
class ImportedDict:
    """
    Raw data imported from one dictionary export.

    Built once by `import_dict`, converted to entries with `entries()` and
    then discarded.
    """
    title: str
    format: int
    revision: str
    sequenced: bool
    path: str
    terms: List[ImportedTerm] = field(default_factory=list)
    kanjis: List[ImportedKanji] = field(default_factory=list)
    tags: List[ImportedTag] = field(default_factory=list)
    term_meta: List[ImportedMeta] = field(default_factory=list)
    kanji_meta: List[ImportedMeta] = field(default_factory=list)

    def entries(self) -> List[Entry]:
        """Return all terms in the dictionary as entries."""
        return [entry_from_imported_term(self.title, term) for term in self.terms]

    def counts(self) -> BankCounts:
        return BankCounts(
            terms=len(self.terms),
            kanjis=len(self.kanjis),
            tags=len(self.tags),
            term_meta=len(self.term_meta),
            kanji_meta=len(self.kanji_meta),
        )

    def banks(self) -> str:
        """One line summary of the loaded banks."""
        return str(self.counts())

    def tag_map(self) -> Dict[str, ImportedTag]:
        """Declared tags by name. Later declarations win."""
        return {tag.name: tag for tag in self.tags}

    def undefined_tags(self) -> Dict[str, List[str]]:
        """
        Tags used by terms or kanji but not declared in a tag bank.

        Returns:
            Mapping of usage ("term", "definition", "kanji") to sorted tag names.
            Usages without undefined tags are omitted.
        """
        declared = self.tag_map()
        used = {
            "term": {tag for term in self.terms for tag in term.term_tags},
            "definition": {tag for term in self.terms for tag in term.definition_tags},
            "kanji": {tag for kanji in self.kanjis for tag in kanji.tags},
        }
        out = {}
        for usage, names in used.items():
            missing = sorted(name for name in names if name not in declared)
            if missing:
                out[usage] = missing
        return out

    def __repr__(self) -> str:
        return f"<ImportedDict({self.title!r} rev={self.revision!r}, {self.banks()})>"


def unique_strings(items: Iterable[str]) -> List[str]:
    """Remove duplicates, keeping the first occurrence."""
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def entry_from_imported_term(origin: str, term: ImportedTerm) -> Entry:
    """
    Create an `Entry` from a term bank row.

    Entry tags are the term tags followed by the inflection rules, without
    duplicates. The definition tags go to the single English sense.
    """
    return Entry(
        source=EntrySource.IMPORT,
        origin=origin,
        expression=term.expression,
        reading=term.reading,
        score=term.score,
        tags=unique_strings(term.term_tags + term.rules),
        english=[
            EntryEnglish(glossary=term.glossary, tags=term.definition_tags),
        ],
    )


# ============================================================================
# Export readers
# ============================================================================

@dataclass
class BankContents:
    """Fully parsed rows of a single bank file."""
    bank: BankFile
    rows: list


class _ExportReader:
    """Access to the files of a dictionary export."""

    def __init__(self, path: str):
        self.path = path

    def names(self) -> List[str]:
        raise NotImplementedError

    def read_text(self, name: str) -> str:
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class _DirectoryReader(_ExportReader):

    def names(self) -> List[str]:
        try:
            return sorted(
                entry.name for entry in os.scandir(self.path)
                if entry.is_file()
            )
        except OSError as e:
            raise BankReadError(f"cannot read directory {self.path}: {e}", path=self.path) from e

    def read_text(self, name: str) -> str:
        with open(os.path.join(self.path, name), "r", encoding="utf-8") as f:
            return f.read()


class _ZipReader(_ExportReader):

    def __init__(self, path: str):
        super().__init__(path)
        try:
            self._zip = zipfile.ZipFile(path)
        except (OSError, zipfile.BadZipFile) as e:
            raise BankReadError(f"cannot open archive {path}: {e}", path=path) from e
        # Banks may be stored under a top level folder.
        self._members = {}
        for info in self._zip.infolist():
            if info.is_dir():
                continue
            base = info.filename.rsplit("/", 1)[-1]
            self._members.setdefault(base, info.filename)

    def names(self) -> List[str]:
        return sorted(self._members)

    def read_text(self, name: str) -> str:
        try:
            return self._zip.read(self._members[name]).decode("utf-8")
        except (zipfile.BadZipFile, KeyError) as e:
            raise OSError(f"cannot read {name} from archive: {e}") from e

    def close(self):
        self._zip.close()


def is_archive(path: PathLike) -> bool:
    return Path(path).suffix.lower() == ".zip"


def _open_export(path: str) -> _ExportReader:
    if is_archive(path):
        return _ZipReader(path)
    if not os.path.isdir(path):
        raise BankReadError(f"not a dictionary directory or archive: {path}", path=path)
    return _DirectoryReader(path)


def _load_json(reader: _ExportReader, name: str) -> Any:
    try:
        text = reader.read_text(name)
    except UnicodeDecodeError as e:
        raise ParseError(f"invalid UTF-8: {e}", path=reader.path, filename=name) from e
    except OSError as e:
        raise BankReadError(f"cannot read {name}: {e}", path=reader.path) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e}", path=reader.path, filename=name) from e


# ============================================================================
# Import
# ============================================================================

def _read_manifest(reader: _ExportReader) -> Dict[str, Any]:
    if MANIFEST_NAME not in reader.names():
        raise MissingManifest(f"'{MANIFEST_NAME}' not found in {reader.path}", path=reader.path)

    summary = _load_json(reader, MANIFEST_NAME)
    if not isinstance(summary, dict):
        raise ParseError("manifest must be a JSON object", path=reader.path, filename=MANIFEST_NAME)
    if not isinstance(summary.get("title"), str):
        raise ParseError("manifest has no title", path=reader.path, filename=MANIFEST_NAME)
    return summary


def _read_bank(reader: _ExportReader, bank: BankFile) -> BankContents:
    data = _load_json(reader, bank.name)
    return BankContents(bank=bank, rows=parse_rows(bank.kind, data, bank.name, path=reader.path))


def _merge(out: ImportedDict, contents: BankContents):
    kind = contents.bank.kind
    if kind is BankKind.TERM:
        out.terms.extend(contents.rows)
    elif kind is BankKind.KANJI:
        out.kanjis.extend(contents.rows)
    elif kind is BankKind.TAG:
        out.tags.extend(contents.rows)
    elif kind is BankKind.TERM_META:
        out.term_meta.extend(contents.rows)
    elif kind is BankKind.KANJI_META:
        out.kanji_meta.extend(contents.rows)


def import_dict(path: PathLike, max_workers: Optional[int] = None) -> ImportedDict:
    """
    Load a dictionary export from a directory or a `.zip` archive.

    Args:
        path: Export directory (containing `index.json`) or archive
        max_workers: Threads used to read bank files. Defaults to
            `settings.IMPORT_WORKERS`.

    Returns:
        The populated ImportedDict, with terms sorted by sequence

    Raises:
        MissingManifest: If there is no `index.json`
        ParseError: If the manifest or a bank file is malformed
        BankReadError: If the export cannot be read
    """
    path = os.fspath(path)
    workers = max_workers or settings.IMPORT_WORKERS

    with _open_export(path) as reader:
        summary = _read_manifest(reader)

        out = ImportedDict(
            title=summary["title"],
            format=summary.get("format", summary.get("version", 0)),
            revision=str(summary.get("revision", "")),
            sequenced=bool(summary.get("sequenced", False)),
            path=path,
        )

        banks = []
        flagged = set()
        for name in reader.names():
            bank = BankFile.parse(name)
            if bank is None:
                continue
            if not bank.is_known:
                if bank.kind_name not in flagged:
                    logger.warning(f"Unrecognized bank kind '{bank.kind_name}' in {path}")
                    flagged.add(bank.kind_name)
                continue
            banks.append(bank)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kotoba-import") as executor:
            futures = [executor.submit(_read_bank, reader, bank) for bank in banks]
            # Merge in file name order; any failure aborts the import.
            for future in futures:
                _merge(out, future.result())

    out.terms.sort(key=lambda term: term.sequence)

    logger.debug(f"Imported {out.title} from {path}: {out.banks()}")
    return out


# ============================================================================
# Batch import
# ============================================================================

@dataclass
class ImportBatch:
    """Result of importing several dictionaries independently."""
    dicts: List[ImportedDict] = field(default_factory=list)
    failures: Dict[str, DictionaryImportError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def entries(self) -> List[Entry]:
        out = []
        for imported in self.dicts:
            out.extend(imported.entries())
        return out

    def counts(self) -> BankCounts:
        total = BankCounts()
        for imported in self.dicts:
            total = total + imported.counts()
        return total


def import_dicts(
    paths: Iterable[PathLike],
    max_workers: Optional[int] = None,
) -> ImportBatch:
    """
    Import several dictionaries, isolating failures.

    A dictionary that fails with a `DictionaryImportError` is logged and
    recorded in `failures`; the remaining dictionaries are still imported.
    Any other exception propagates.
    """
    batch = ImportBatch()
    for path in paths:
        path = os.fspath(path)
        try:
            imported = import_dict(path, max_workers=max_workers)
        except DictionaryImportError as e:
            logger.error(f"Failed to import {path}: {e}")
            batch.failures[path] = e
            continue
        logger.info(f"==> {imported.title} ({imported.revision})")
        logger.info(f"    In {imported.path}")
        logger.info(f"    Banks: {imported.banks()}")
        batch.dicts.append(imported)

    if batch.dicts:
        logger.info(f"Loaded {batch.counts()}")
    return batch


def discover_dicts(base_dir: PathLike) -> List[Path]:
    """List dictionary exports (sub-directories and `.zip` files) in a directory."""
    base = Path(base_dir)
    if not base.is_dir():
        return []
    return sorted(
        child for child in base.iterdir()
        if child.is_dir() or (child.is_file() and is_archive(child))
    )

