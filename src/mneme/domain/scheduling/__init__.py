# Domain Scheduling Package
from .models import CardPhase, LeechAction, Progress, Rating, Settings
from .ports import ProgressRepository, SettingsRepository

__all__ = [
    "CardPhase",
    "LeechAction",
    "Progress",
    "Rating",
    "Settings",
    "ProgressRepository",
    "SettingsRepository",
]
