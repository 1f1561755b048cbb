# Application Scheduling Package
from .formatting import format_next_review
from .leech import is_leech
from .scheduler import Scheduler, schedule_next
from .service import ReviewOutcome, ReviewService
from .settings_resolver import DEFAULT_SETTINGS, load_settings, resolve_settings

__all__ = [
    "Scheduler",
    "schedule_next",
    "resolve_settings",
    "load_settings",
    "DEFAULT_SETTINGS",
    "is_leech",
    "format_next_review",
    "ReviewService",
    "ReviewOutcome",
]
