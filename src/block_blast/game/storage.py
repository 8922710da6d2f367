from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol


BEST_SCORE_KEY = "blockblast-highscore"


class BestScoreStore(Protocol):
    def load(self) -> int: ...

    def submit(self, score: int) -> bool: ...


class MemoryBestScoreStore:
    """In-process store, mostly for tests and headless agents."""

    def __init__(self, best: int = 0) -> None:
        self.best = max(0, int(best))
        self.writes = 0

    def load(self) -> int:
        return self.best

    def submit(self, score: int) -> bool:
        if score <= self.best:
            return False
        self.best = int(score)
        self.writes += 1
        return True


class JsonBestScoreStore:
    """Persists the best score in a small JSON file under a fixed key.

    Reading never fails: a missing or malformed file counts as a best of 0.
    Writes are best effort and only happen when the score beats the stored one.
    """

    def __init__(self, path: Path | str | None = None, key: str = BEST_SCORE_KEY) -> None:
        self.path = Path(path) if path is not None else self._default_path()
        self.key = key
        self._best: int | None = None

    @staticmethod
    def _default_path() -> Path:
        return Path.home() / ".block_blast" / "scores.json"

    def _read_payload(self) -> dict:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            # unreadable or not JSON
            return {}
        return payload if isinstance(payload, dict) else {}

    def _stored_best(self, payload: dict) -> int:
        try:
            return max(0, int(payload.get(self.key, 0)))
        except (TypeError, ValueError):
            return 0

    def load(self) -> int:
        self._best = self._stored_best(self._read_payload())
        return self._best

    def submit(self, score: int) -> bool:
        # Compare against the file as it is now; another session may have
        # raised it since we loaded.
        payload = self._read_payload()
        current = max(self._best or 0, self._stored_best(payload))
        self._best = current
        if score <= current:
            return False
        payload[self.key] = int(score)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            return False
        self._best = int(score)
        return True
