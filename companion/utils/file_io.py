# companion/utils/file_io.py
# -*- coding: utf-8 -*-
"""
Companion Server — file_io utilities
------------------------------------
Helpers for the single JSON document that backs the datastore.

Goals:
- One place that knows how the document is read and written.
- Atomic writes (temp file + fsync + rename) so a crash never leaves a
  half-written document behind.
- Reads tell the caller *why* they failed (missing vs. corrupt), so the
  store can decide how loudly to recover.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from companion.core.errors import StorageError

logger = logging.getLogger(__name__)


def read_json_document(path: Path) -> Dict[str, Any]:
    """
    Read a JSON object from `path`.

    Raises
    ------
    FileNotFoundError
        If the file does not exist yet.
    StorageError
        If the file cannot be read, is not valid JSON, or is not an object.
    """
    if not path.is_file():
        raise FileNotFoundError(str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"failed to read {path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StorageError(f"invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise StorageError(f"{path} does not contain a JSON object")
    return data


def write_json_atomic(path: Path, data: Dict[str, Any]) -> None:
    """
    Replace `path` with `data` serialized as JSON.

    The document is written to a unique temp file in the same directory,
    flushed to disk and then renamed over the target, so readers only ever
    see the old or the new document.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("write_json_atomic: failed to create dir %s: %s", path.parent, exc)
        raise StorageError(f"cannot create {path.parent}: {exc}") from exc

    json_text = json.dumps(data, ensure_ascii=False, indent=2)
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=path.name + ".", suffix=".tmp", dir=str(path.parent)
        )
    except OSError as exc:
        logger.error("write_json_atomic: cannot create temp file in %s: %s", path.parent, exc)
        raise StorageError(f"cannot write to {path.parent}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(json_text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        logger.error("write_json_atomic: failed to write %s: %s", path, exc)
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise StorageError(f"failed to write {path}: {exc}") from exc
