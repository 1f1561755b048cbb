"""Human-readable descriptions of when a card is due next."""

from datetime import datetime

from mneme.domain.constants import SECONDS_PER_MINUTE
from mneme.domain.scheduling.models import CardPhase, Progress


def format_next_review(progress: Progress, now: datetime) -> str:
    """
    Describe the wait until the next review.

    Stepping cards are measured in minutes, review cards in days.
    """
    phase = CardPhase.parse(progress.card_phase)

    if phase is CardPhase.NEW or progress.next_review_at is None:
        return "now"

    if phase is CardPhase.REVIEW:
        return f"{progress.interval_days} days"

    seconds = (progress.next_review_at - now).total_seconds()
    minutes = max(0, round(seconds / SECONDS_PER_MINUTE))
    return f"{minutes} minutes"
