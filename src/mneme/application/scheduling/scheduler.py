"""
Scheduler: the spaced-repetition engine.

This is a pure computation module with no I/O. The only outside input is
the clock, which is injectable.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from mneme.domain.constants import EASE_STEP, MAX_EASE_FACTOR, MIN_EASE_FACTOR
from mneme.domain.scheduling.models import CardPhase, Progress, Rating, Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def round_days(value: Decimal) -> int:
    """Round a day count to the nearest whole day, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def clamp_ease(ease: Decimal) -> Decimal:
    return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, ease))


def clamp_interval(days: int, settings: Settings) -> int:
    return max(settings.minimum_interval, min(settings.maximum_interval, days))


class Scheduler:
    """
    Computes a card's next Progress from its current one and a quality rating.

    Stateless apart from the default settings and the clock, so one instance
    can be shared across threads. Input Progress objects are never mutated.
    """

    def __init__(
        self,
        default_settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        """
        Args:
            default_settings: Used when schedule_next is called without settings.
            clock: Returns the current time; defaults to timezone-aware UTC now.
        """
        self.default_settings = default_settings or Settings()
        self._clock = clock or utc_now

    def schedule_next(
        self,
        progress: Progress | None,
        quality: Any,
        settings: Settings | None = None,
    ) -> Progress:
        """
        Apply one answer to a card and return its next state.

        Args:
            progress: Current state, or None for a card never reviewed.
            quality: Non-negative integer or grade name; see Rating.from_quality.
            settings: Resolved settings; the scheduler defaults if omitted.

        Returns:
            A new Progress snapshot with every bound enforced.

        Raises:
            InvalidQualityError: If quality cannot be banded.
        """
        rating = Rating.from_quality(quality)
        settings = settings or self.default_settings
        current = progress or Progress.new()
        phase = CardPhase.parse(current.card_phase)
        now = self._clock()

        if phase is CardPhase.REVIEW:
            changes = self._handle_review(current, rating, settings, now)
        elif phase is CardPhase.RELEARNING:
            changes = self._handle_relearning(current, rating, settings, now)
        else:
            changes = self._handle_learning(current, rating, settings, now)

        changes.update(
            attempts=current.attempts + 1,
            last_attempt_at=now,
            quality=quality,
        )
        updated = self._enforce_bounds(replace(current, **changes), settings)

        logger.debug(
            f"{phase.value} -> {updated.card_phase.value} on {rating.name}: "
            f"interval={updated.interval_days}d ease={updated.ease_factor} "
            f"step={updated.step_index}"
        )
        return updated

    # ------------------------------------------------------------------
    # Phase handlers
    # ------------------------------------------------------------------

    def _handle_learning(
        self, progress: Progress, rating: Rating, settings: Settings, now: datetime
    ) -> dict[str, Any]:
        # Hard restarts the steps like Again outside the review phase
        if rating in (Rating.AGAIN, Rating.HARD):
            return self._restart_steps(CardPhase.LEARNING, settings, now)

        if rating is Rating.EASY:
            return self._graduate(settings.easy_interval, settings, now)

        step = self._current_step(progress, settings)
        if step < len(settings.learning_steps) - 1:
            return self._advance_step(CardPhase.LEARNING, step, settings, now)
        return self._graduate(settings.graduating_interval, settings, now)

    def _handle_review(
        self, progress: Progress, rating: Rating, settings: Settings, now: datetime
    ) -> dict[str, Any]:
        interval = Decimal(progress.interval_days or 1)
        ease = clamp_ease(progress.ease_factor or settings.starting_ease)

        if rating is Rating.AGAIN:
            # Keep a discounted interval for when the card graduates again
            relearn_interval = max(
                round_days(interval * settings.new_interval_percentage),
                settings.minimum_interval,
            )
            changes = self._restart_steps(CardPhase.RELEARNING, settings, now)
            changes.update(
                lapses=progress.lapses + 1,
                interval_days=clamp_interval(relearn_interval, settings),
                ease_factor=ease,
            )
            return changes

        if rating is Rating.HARD:
            ease = clamp_ease(ease - EASE_STEP)
            new_interval = max(
                round_days(interval * settings.hard_interval_multiplier),
                settings.minimum_interval,
            )
        elif rating is Rating.GOOD:
            new_interval = round_days(interval * ease * settings.interval_modifier)
        else:
            ease = clamp_ease(ease + EASE_STEP)
            new_interval = round_days(
                interval * ease * settings.interval_modifier * settings.easy_bonus
            )

        new_interval = clamp_interval(new_interval, settings)
        return {
            "card_phase": CardPhase.REVIEW,
            "step_index": 0,
            "interval_days": new_interval,
            "ease_factor": ease,
            "repetitions": progress.repetitions + 1,
            "next_review_at": now + timedelta(days=new_interval),
        }

    def _handle_relearning(
        self, progress: Progress, rating: Rating, settings: Settings, now: datetime
    ) -> dict[str, Any]:
        if rating in (Rating.AGAIN, Rating.HARD):
            return self._restart_steps(CardPhase.RELEARNING, settings, now)

        step = self._current_step(progress, settings)
        if rating is not Rating.EASY and step < len(settings.learning_steps) - 1:
            return self._advance_step(CardPhase.RELEARNING, step, settings, now)

        # Back to review on the interval kept at lapse time
        interval = clamp_interval(progress.interval_days or 1, settings)
        return {
            "card_phase": CardPhase.REVIEW,
            "step_index": 0,
            "interval_days": interval,
            "next_review_at": now + timedelta(days=interval),
        }

    # ------------------------------------------------------------------
    # Shared transitions
    # ------------------------------------------------------------------

    def _restart_steps(
        self, phase: CardPhase, settings: Settings, now: datetime
    ) -> dict[str, Any]:
        return {
            "card_phase": phase,
            "step_index": 0,
            "next_review_at": now + timedelta(minutes=settings.learning_steps[0]),
        }

    def _advance_step(
        self, phase: CardPhase, step: int, settings: Settings, now: datetime
    ) -> dict[str, Any]:
        next_step = step + 1
        return {
            "card_phase": phase,
            "step_index": next_step,
            "next_review_at": now + timedelta(minutes=settings.learning_steps[next_step]),
        }

    def _graduate(self, interval_days: int, settings: Settings, now: datetime) -> dict[str, Any]:
        interval = clamp_interval(interval_days, settings)
        return {
            "card_phase": CardPhase.REVIEW,
            "step_index": 0,
            "interval_days": interval,
            "repetitions": 1,
            "ease_factor": clamp_ease(settings.starting_ease),
            "graduated_at": now,
            "next_review_at": now + timedelta(days=interval),
        }

    def _current_step(self, progress: Progress, settings: Settings) -> int:
        # Settings may have shrunk since the step was stored
        return max(0, min(progress.step_index or 0, len(settings.learning_steps) - 1))

    def _enforce_bounds(self, progress: Progress, settings: Settings) -> Progress:
        phase = CardPhase.parse(progress.card_phase)
        if phase.is_stepped:
            step = self._current_step(progress, settings)
        else:
            step = 0
        return replace(
            progress,
            card_phase=phase,
            step_index=step,
            interval_days=clamp_interval(progress.interval_days or 1, settings),
            ease_factor=clamp_ease(progress.ease_factor or settings.starting_ease),
        )


_default_scheduler = Scheduler()


def schedule_next(
    progress: Progress | None,
    quality: Any,
    settings: Settings | None = None,
) -> Progress:
    """Schedule with the module-level default scheduler and the system clock."""
    return _default_scheduler.schedule_next(progress, quality, settings)
