# Infrastructure Adapters Package
from .json_progress import JsonProgressRepository
from .yaml_settings import YamlSettingsRepository

__all__ = ["JsonProgressRepository", "YamlSettingsRepository"]
