"""
Settings for kotoba-dict.

Defaults can be overridden with environment variables; command line flags
override both.
"""

import os
from pathlib import Path


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    return Path(value).expanduser() if value else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return max(1, int(value))
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


# ============================================================================
# Paths
# ============================================================================

DATA_DIR = _env_path("KOTOBA_DATA_DIR", Path.home() / ".kotoba")

# Dictionary exports (directories or .zip files) to import
IMPORT_DIR = _env_path("KOTOBA_IMPORT_DIR", DATA_DIR / "import")

# Saved entry store (compact entries, name map, lookup index)
STORE_DIR = _env_path("KOTOBA_STORE_DIR", DATA_DIR / "store")


# ============================================================================
# Import
# ============================================================================

# Threads used to read the bank files of one dictionary
IMPORT_WORKERS = _env_int("KOTOBA_IMPORT_WORKERS", 4)

# Timeout for `import_dict_async`, in seconds
IMPORT_TIMEOUT = 300.0
