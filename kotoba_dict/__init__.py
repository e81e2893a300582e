"""
kotoba-dict: Japanese dictionary aggregation and normalization

Imports Yomichan-style dictionary exports and results from jisho.org and
japanesepod101.com into one canonical entry model, and stores entries in a
compact, tag-deduplicated form.

Basic Usage:
    import kotoba_dict

    imported = kotoba_dict.import_dict("dicts/jmdict_english.zip")
    entries = imported.entries()

    names = kotoba_dict.NameMap()
    data = kotoba_dict.serialize_entries(entries, names)
    assert kotoba_dict.deserialize_entries(data, names) == entries
"""

from typing import Optional

from kotoba_dict import settings
from kotoba_dict.codec import NameMap, deserialize_entries, serialize_entries
from kotoba_dict.entry import Entry, EntryEnglish, EntrySource, Link
from kotoba_dict.errors import (
    BankReadError,
    DictionaryImportError,
    EncodingInconsistency,
    InvalidResponse,
    KotobaDictError,
    MissingManifest,
    ParseError,
    SourceError,
    SourceUnavailable,
)
from kotoba_dict.importer import ImportBatch, ImportedDict, import_dict, import_dicts
from kotoba_dict.index import EntryIndex, SearchMode
from kotoba_dict.sources import (
    JapanesePodEntry,
    JishoEntry,
    entries_from_japanese_pod,
    entries_from_jisho,
    entry_from_japanese_pod,
    entry_from_jisho,
    parse_jisho_response,
)
from kotoba_dict.store import EntryStore, load_store, save_store

__version__ = "0.1.0"


def get_version() -> str:
    """Get the library version."""
    return __version__


# =============================================================================
# Async API
# =============================================================================

# Thread pool for async imports
_executor = None
_executor_lock = None


def _get_executor():
    """Get or create the thread pool executor."""
    global _executor, _executor_lock
    import threading
    from concurrent.futures import ThreadPoolExecutor

    if _executor_lock is None:
        _executor_lock = threading.Lock()

    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="kotoba")

    return _executor


class ImportTimeoutError(KotobaDictError):
    """Raised when an async import times out."""
    pass


async def import_dict_async(
    path,
    timeout: Optional[float] = None,
) -> ImportedDict:
    """
    Import a dictionary export without blocking the event loop.

    Args:
        path: Export directory or `.zip` archive
        timeout: Maximum time in seconds (default `settings.IMPORT_TIMEOUT`)

    Returns:
        The ImportedDict

    Raises:
        ImportTimeoutError: If the import exceeds the timeout
        DictionaryImportError: If the import fails

    Example:
        >>> import asyncio
        >>> imported = asyncio.run(kotoba_dict.import_dict_async("dicts/kanjidic.zip"))
    """
    import asyncio

    timeout = settings.IMPORT_TIMEOUT if timeout is None else timeout
    loop = asyncio.get_running_loop()
    executor = _get_executor()

    try:
        future = loop.run_in_executor(executor, import_dict, path)
        return await asyncio.wait_for(future, timeout=timeout)
    except asyncio.TimeoutError:
        raise ImportTimeoutError(f"Import of {path} timed out after {timeout}s")


def shutdown():
    """
    Shutdown the thread pool executor.

    Call this when your application is shutting down to cleanly
    release resources.
    """
    global _executor
    if _executor is not None:
        _executor.shutdown(wait=True)
        _executor = None


# =============================================================================
# Module-level exports
# =============================================================================

__all__ = [
    # Entry model
    "Entry",
    "EntryEnglish",
    "EntrySource",
    "Link",
    # Structured dictionary import
    "ImportedDict",
    "ImportBatch",
    "import_dict",
    "import_dicts",
    "import_dict_async",
    "shutdown",
    # External sources
    "JishoEntry",
    "JapanesePodEntry",
    "entry_from_jisho",
    "entries_from_jisho",
    "parse_jisho_response",
    "entry_from_japanese_pod",
    "entries_from_japanese_pod",
    # Serialization and storage
    "NameMap",
    "serialize_entries",
    "deserialize_entries",
    "EntryIndex",
    "SearchMode",
    "EntryStore",
    "save_store",
    "load_store",
    # Exceptions
    "KotobaDictError",
    "DictionaryImportError",
    "MissingManifest",
    "ParseError",
    "BankReadError",
    "SourceError",
    "SourceUnavailable",
    "InvalidResponse",
    "EncodingInconsistency",
    "ImportTimeoutError",
    # Version
    "get_version",
    "__version__",
]
