"""JSON file-per-record storage adapter, implements RecordStorePort."""

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import List


def _log(msg: str):
    print(msg, file=sys.stderr)


class JsonRecordStore:
    """Directory of JSON files, one record per file."""

    def __init__(self, storage_dir: str = "data/pairings"):
        self._storage_dir = Path(storage_dir)

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _path(self, name: str) -> Path:
        return self._storage_dir / f"{name}.json"

    def load_all(self) -> List[dict]:
        """Read every record; unreadable files are logged and skipped."""
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        records = []
        for path in sorted(self._storage_dir.glob("*.json")):
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                _log(f"[JsonRecordStore] skipping unreadable {path.name}: {e}")
                continue
            if not isinstance(raw, dict):
                _log(f"[JsonRecordStore] skipping {path.name}: not a JSON object")
                continue
            records.append(raw)
        return records

    def write(self, name: str, record: dict) -> None:
        """Replace the file for *name* in one rename; a failed write leaves the old record.

        The directory is created by load_all(), which runs at startup.
        """
        tmp = tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self._storage_dir,
            prefix=f".{name}.", suffix=".tmp", delete=False,
        )
        try:
            with tmp:
                json.dump(record, tmp, ensure_ascii=False, indent=2)
            os.replace(tmp.name, self._path(name))
        except BaseException:
            Path(tmp.name).unlink(missing_ok=True)
            raise
