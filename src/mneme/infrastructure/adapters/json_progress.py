"""
JSON Progress Repository: Infrastructure adapter for a local JSON file.

Implements ProgressRepository by keeping every learner's progress in one
JSON document keyed by "<user_id>:<card_id>".
"""

import json
import logging
from pathlib import Path
from typing import Any

from mneme.domain.constants import PROGRESS_KEY_SEPARATOR
from mneme.domain.scheduling.models import Progress
from mneme.domain.scheduling.ports import ProgressRepository

logger = logging.getLogger(__name__)


class JsonProgressRepository(ProgressRepository):
    """
    Stores progress records in a single JSON file.

    The whole document is read and rewritten on every save, which is fine
    for a single learner's collection but not for shared use.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def get_progress(self, card_id: str, user_id: str) -> Progress | None:
        record = self._load().get(self._key(card_id, user_id))
        if record is None:
            return None
        return Progress.from_record(record)

    async def save_progress(self, card_id: str, user_id: str, progress: Progress) -> None:
        data = self._load()
        data[self._key(card_id, user_id)] = progress.to_record()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.parent / f"{self.path.name}.tmp"
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug(f"Saved progress for {self._key(card_id, user_id)} to {self.path}")

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        content = self.path.read_text(encoding="utf-8")
        if not content.strip():
            return {}
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Progress file {self.path} must contain a JSON object")
        return data

    @staticmethod
    def _key(card_id: str, user_id: str) -> str:
        return f"{user_id}{PROGRESS_KEY_SEPARATOR}{card_id}"
