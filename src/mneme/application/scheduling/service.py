"""
Review Service: Application layer orchestrator.

Coordinates loading progress and settings, running the scheduler,
persisting the result and checking for leeches.
"""

import logging
from dataclasses import dataclass
from typing import Any

from mneme.domain.scheduling.models import LeechAction, Progress, Rating
from mneme.domain.scheduling.ports import ProgressRepository, SettingsRepository

from .formatting import format_next_review
from .leech import is_leech
from .scheduler import Scheduler
from .settings_resolver import load_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOutcome:
    """
    Result of submitting one answer.

    before and after are full Progress snapshots so callers can write an
    audit log without re-reading storage.
    """

    card_id: str
    user_id: str
    rating: Rating
    before: Progress
    after: Progress
    is_leech: bool
    became_leech: bool
    leech_action: LeechAction | None
    next_review: str


class ReviewService:
    """
    Application service for the review-submission workflow.

    Follows Dependency Inversion: depends on the storage ports, not on
    concrete adapters. One review per card and learner should be in flight
    at a time; the service does not lock.
    """

    def __init__(
        self,
        progress_repo: ProgressRepository,
        settings_repo: SettingsRepository,
        scheduler: Scheduler | None = None,
    ):
        """
        Args:
            progress_repo: The repository (port) for card progress.
            settings_repo: The repository (port) for per-user settings.
            scheduler: Optional custom scheduler; uses default if not provided.
        """
        self._progress = progress_repo
        self._settings = settings_repo
        self._scheduler = scheduler or Scheduler()

    async def submit_review(self, card_id: str, user_id: str, quality: Any) -> ReviewOutcome:
        """
        Schedule a card after an answer and persist the new state.

        Raises:
            InvalidQualityError: If quality cannot be banded. Nothing is saved.
        """
        rating = Rating.from_quality(quality)
        settings = await load_settings(self._settings, user_id)
        before = await self._progress.get_progress(card_id, user_id) or Progress.new()

        after = self._scheduler.schedule_next(before, quality, settings)
        await self._progress.save_progress(card_id, user_id, after)

        leech = is_leech(after, settings)
        outcome = ReviewOutcome(
            card_id=card_id,
            user_id=user_id,
            rating=rating,
            before=before,
            after=after,
            is_leech=leech,
            became_leech=leech and not is_leech(before, settings),
            leech_action=settings.leech_action if leech else None,
            next_review=format_next_review(after, after.last_attempt_at or after.next_review_at),
        )

        if outcome.became_leech:
            logger.warning(
                f"Card {card_id} for user={user_id} is a leech "
                f"({after.lapses} lapses), action={settings.leech_action.value}"
            )
        logger.info(
            f"Reviewed card {card_id} for user={user_id}: {rating.name} -> "
            f"{after.card_phase.value}, next in {outcome.next_review}"
        )
        return outcome

    async def check_leech(self, card_id: str, user_id: str) -> bool:
        """Whether a stored card is currently a leech. Unreviewed cards never are."""
        progress = await self._progress.get_progress(card_id, user_id)
        if progress is None:
            return False
        settings = await load_settings(self._settings, user_id)
        return is_leech(progress, settings)
