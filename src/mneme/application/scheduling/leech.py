"""Leech detection."""

from mneme.domain.scheduling.models import Progress, Settings


def is_leech(progress: Progress, settings: Settings) -> bool:
    """
    True once a card has lapsed at least leech_threshold times.

    Applies in any phase; what to do about it is up to the caller.
    """
    return (progress.lapses or 0) >= settings.leech_threshold
