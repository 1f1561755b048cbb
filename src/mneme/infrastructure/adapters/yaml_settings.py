"""
YAML Settings Repository: Infrastructure adapter for a settings file.

The file maps user ids to raw settings mappings. An optional "default"
entry applies to users without their own:

    default:
      learning_steps: [1, 10]
    alice:
      learning_steps: [1, 10, 60]
      leech_threshold: 5
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from mneme.domain.constants import DEFAULT_SETTINGS_KEY
from mneme.domain.scheduling.ports import SettingsRepository

logger = logging.getLogger(__name__)


class YamlSettingsRepository(SettingsRepository):
    """
    Reads per-user settings records from a YAML document.

    Returns raw mappings; validation and defaulting happen in the resolver.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def get_settings(self, user_id: str) -> dict[str, Any] | None:
        if not self.path.exists():
            return None

        data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} must contain a mapping")

        # YAML reads numeric user ids as ints
        entries = {str(key): value for key, value in data.items()}
        record = entries.get(str(user_id), entries.get(DEFAULT_SETTINGS_KEY))
        if record is not None and not isinstance(record, dict):
            logger.warning(f"Ignoring non-mapping settings entry for user={user_id}")
            return None
        return record
