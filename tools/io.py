#!/usr/bin/env python3
"""tools/io.py

Single source of truth for tiny filesystem helpers.

The Bridge input file, the run summary and the artifact manifest are all
JSON; keeping one writer avoids two helpers slowly drifting apart (different
indentation, different newline handling, non-atomic writes).
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def write_json(path: Path, data: Any) -> None:
    """Write pretty JSON to disk (UTF-8), atomically.

    The document is written to a temp file in the same directory and then
    moved into place, so a crashed run never leaves a half-written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def read_json(path: Path) -> Any:
    """Read JSON from disk (UTF-8)."""
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)
