# ==============================================
# FileVolatileBackend
# ==============================================
#
# PURPOSE:
#   Keep the volatile tier in a single JSON document inside the
#   application's data directory, so that removing the application
#   (and its directory) removes the tier with it.
#
# FILE STRUCTURE:
# ---------------
#   <path>  (default "data/volatile_store.json")
#   {
#     "user.name":  {"kind": "str",   "value": "Ada"},
#     "launches":   {"kind": "int",   "value": 3},
#     "profile":    {"kind": "bytes", "value": "<base64>"}
#   }
#
# CLASS: FileVolatileBackend
# --------------------------
#   Constructor:
#   ------------
#   - __init__(path: str = "data/volatile_store.json")
#       Create the parent directory if it doesn't exist.
#
#   Every write rewrites the whole document through a temp file and
#   os.replace(), so a crash mid-write leaves the previous document.
#
# ==============================================

import base64
import json
import os
from pathlib import Path
from typing import Any, Dict

from .base import VolatileBackend

_NATIVE_KINDS = {"bool": bool, "int": int, "float": float, "str": str}


class FileVolatileBackend(VolatileBackend):
    name = "file-volatile"
    backend_errors = (OSError, ValueError, KeyError)

    def __init__(self, path: str = "data/volatile_store.json"):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load_document(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            document = json.load(f)
        if not isinstance(document, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return document

    def _save_document(self, document: Dict[str, Dict[str, Any]]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    @staticmethod
    def _pack(value: Any) -> Dict[str, Any]:
        if isinstance(value, (bytes, bytearray)):
            return {"kind": "bytes", "value": base64.b64encode(bytes(value)).decode("ascii")}
        return {"kind": type(value).__name__, "value": value}

    @staticmethod
    def _unpack(entry: Dict[str, Any]) -> Any:
        kind = entry.get("kind")
        if kind == "bytes":
            return base64.b64decode(entry["value"])
        if kind in _NATIVE_KINDS:
            return _NATIVE_KINDS[kind](entry["value"])
        raise ValueError(f"unknown entry kind: {kind}")

    def _fetch(self, key):
        entry = self._load_document().get(key)
        if entry is None:
            return None
        return self._unpack(entry)

    def _put(self, key, value):
        document = self._load_document()
        document[key] = self._pack(value)
        self._save_document(document)

    def _discard(self, key):
        document = self._load_document()
        if document.pop(key, None) is not None:
            self._save_document(document)

    def keys(self):
        return list(self._load_document())

    def wipe(self) -> None:
        """Delete the backing file (for testing or reset)."""
        if self.path.exists():
            self.path.unlink()
