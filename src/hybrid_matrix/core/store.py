"""
hybrid_matrix.core.store - Read and write the link store document.

The store is written wholesale as indented JSON with a stable key order.
Writes go through a temporary file in the same directory followed by
os.replace, so readers never observe a half-written store.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from hybrid_matrix.core.models import Store
from hybrid_matrix.exceptions import StoreFormatError


def load_store(path: Path) -> Store:
    """Load the store at path, or an empty store if the file does not exist.

    Raises:
        StoreFormatError: If the file exists but is not a valid store
    """
    path = Path(path)
    if not path.exists():
        return Store()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StoreFormatError(f"Cannot read store {path}: {e}") from e
    return Store.from_dict(data)


def dump_store(store: Store) -> str:
    """Serialize a store to its on-disk text form."""
    return json.dumps(store.to_dict(), indent=2, ensure_ascii=False) + "\n"


def save_store(store: Store, path: Path) -> None:
    """Write the store to path, replacing any previous content."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Write via NamedTemporaryFile in target directory to avoid cross-device issues
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.stem}.",
        suffix=".tmp",
    ) as fh:
        tmp_path = Path(fh.name)
        fh.write(dump_store(store))

    os.replace(tmp_path, path)
