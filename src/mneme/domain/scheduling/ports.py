"""
Ports (interfaces) for progress and settings storage.

These define the contract that infrastructure adapters must implement.
The scheduler itself never touches them; the review service does.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Progress


class ProgressRepository(ABC):
    """
    Port for reading and writing one learner's progress on one card.

    Implementations:
        - JsonProgressRepository: A single JSON document on disk.
    """

    @abstractmethod
    async def get_progress(self, card_id: str, user_id: str) -> Progress | None:
        """
        Fetch the stored progress for a card and learner.

        Returns:
            The stored Progress, or None if the card was never reviewed.
        """
        pass

    @abstractmethod
    async def save_progress(self, card_id: str, user_id: str, progress: Progress) -> None:
        """
        Persist the progress snapshot for a card and learner, replacing any previous one.
        """
        pass


class SettingsRepository(ABC):
    """
    Port for fetching a learner's raw scheduling settings record.

    Implementations:
        - YamlSettingsRepository: A YAML document keyed by user id.
    """

    @abstractmethod
    async def get_settings(self, user_id: str) -> dict[str, Any] | None:
        """
        Fetch the raw settings record for a learner.

        Returns:
            The raw mapping as stored, or None if the learner has none.
        """
        pass
