from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Mapping

Record = dict[str, object]


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class TelemetryService:
    """JSON Lines journal of one game session.

    Every record is ``{"seq", "ts", "type", "payload"}``. `seq` counts the
    records this instance has written, starting at 1, so a file shared by
    several sessions can still be split by its restarts.
    """

    path: Path
    _seq: int = field(default=0, init=False, repr=False)

    def log(self, record_type: str, payload: Mapping[str, object]) -> Record:
        self._seq += 1
        record: Record = {
            "seq": self._seq,
            "ts": _utc_now(),
            "type": record_type,
            "payload": dict(payload),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as out:
            out.write(json.dumps(record, ensure_ascii=False))
            out.write("\n")
        return record

    def _records(self) -> Iterator[Record]:
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as src:
            for line in src:
                if line.strip():
                    yield json.loads(line)

    def read_all(self, record_type: str | None = None) -> list[Record]:
        """Records in file order, optionally only those of one type."""
        return [r for r in self._records() if record_type is None or r.get("type") == record_type]
