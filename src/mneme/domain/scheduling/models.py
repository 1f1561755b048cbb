"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies
beyond pydantic validation for settings.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from mneme.domain.constants import (
    DEFAULT_INTERVAL_DAYS,
    MAX_EASE_FACTOR,
    MAX_LEARNING_STEP_MINUTES,
    MAX_LEARNING_STEPS,
    MAXIMUM_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
)
from mneme.domain.errors import InvalidQualityError

logger = logging.getLogger(__name__)


class CardPhase(str, Enum):
    """
    Lifecycle phase of a card's review state.

    NEW is the explicit initial state; the scheduler treats it like LEARNING
    and never returns a NEW card.
    """

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"

    @classmethod
    def parse(cls, value: Any) -> "CardPhase":
        """
        Map a stored phase value to a CardPhase.

        Absent values mean NEW. Unrecognized values fall back to LEARNING.
        """
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.NEW
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning(f"Unknown card phase {value!r}, treating as learning")
            return cls.LEARNING

    @property
    def is_stepped(self) -> bool:
        """True for phases that walk the learning steps."""
        return self in (CardPhase.NEW, CardPhase.LEARNING, CardPhase.RELEARNING)


class Rating(IntEnum):
    """
    Effective answer band derived from a submitted quality.

    0=Again, 1=Hard, 2=Good, 3 and above=Easy.
    """

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3

    @classmethod
    def from_quality(cls, quality: Any) -> "Rating":
        """
        Band a raw quality value.

        Accepts non-negative integers, digit strings and grade names
        ("again", "hard", "good", "easy").
        """
        if isinstance(quality, cls):
            return quality
        if isinstance(quality, bool):
            raise InvalidQualityError(quality)
        if isinstance(quality, str):
            text = quality.strip()
            if text.isdigit():
                return cls.from_quality(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                raise InvalidQualityError(quality) from None
        if not isinstance(quality, int) or quality < 0:
            raise InvalidQualityError(quality)
        return cls(min(quality, cls.EASY))


class LeechAction(str, Enum):
    """What the surrounding service should do with a leech."""

    SUSPEND = "suspend"
    TAG = "tag"
    BURY = "bury"


LearningStep = Annotated[int, Field(ge=1, le=MAX_LEARNING_STEP_MINUTES)]


class Settings(BaseModel):
    """
    Per-user scheduling settings.

    Learning steps are minutes; intervals are days. Legacy column names
    (hard_interval, new_interval) are accepted on input.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    learning_steps: tuple[LearningStep, ...] = Field(
        default=(1, 10), min_length=1, max_length=MAX_LEARNING_STEPS
    )
    graduating_interval: int = Field(default=1, ge=1)
    easy_interval: int = Field(default=4, ge=1)
    starting_ease: Decimal = Field(default=Decimal("2.50"), ge=MIN_EASE_FACTOR, le=MAX_EASE_FACTOR)
    easy_bonus: Decimal = Field(default=Decimal("1.30"), ge=1)
    interval_modifier: Decimal = Field(default=Decimal("1.00"), gt=0)
    hard_interval_multiplier: Decimal = Field(
        default=Decimal("1.20"),
        gt=0,
        validation_alias=AliasChoices("hard_interval_multiplier", "hard_interval"),
    )
    new_interval_percentage: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        le=1,
        validation_alias=AliasChoices("new_interval_percentage", "new_interval"),
    )
    minimum_interval: int = Field(default=1, ge=1)
    maximum_interval: int = Field(default=MAXIMUM_INTERVAL_DAYS, ge=1)
    leech_threshold: int = Field(default=8, ge=1)
    leech_action: LeechAction = LeechAction.SUSPEND

    @field_validator(
        "starting_ease",
        "easy_bonus",
        "interval_modifier",
        "hard_interval_multiplier",
        "new_interval_percentage",
        mode="before",
    )
    @classmethod
    def float_to_decimal(cls, v: Any) -> Any:
        # Go through str so 1.3 becomes Decimal("1.3"), not its binary expansion
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @model_validator(mode="after")
    def check_interval_bounds(self) -> "Settings":
        if self.maximum_interval < self.minimum_interval:
            raise ValueError("maximum_interval must be >= minimum_interval")
        return self


@dataclass(frozen=True)
class Progress:
    """
    Review state of one card for one learner.

    Attributes:
        card_phase: Current lifecycle phase.
        step_index: Index into learning_steps while learning/relearning, else 0.
        interval_days: Current review interval in days.
        ease_factor: Interval growth multiplier; None until first scheduled.
        repetitions: Successful review-phase repetitions.
        lapses: Again answers given while in review phase.
        attempts: Total scheduling calls across all phases.
        next_review_at: When the card becomes due.
        graduated_at: When the card first entered review.
        last_attempt_at: When the card was last scheduled.
        quality: Last submitted quality, kept for auditing.
    """

    card_phase: CardPhase = CardPhase.NEW
    step_index: int = 0
    interval_days: int = DEFAULT_INTERVAL_DAYS
    ease_factor: Decimal | None = None
    repetitions: int = 0
    lapses: int = 0
    attempts: int = 0
    next_review_at: datetime | None = None
    graduated_at: datetime | None = None
    last_attempt_at: datetime | None = None
    quality: int | str | None = None

    def __post_init__(self):
        # Same str route as Settings, so 2.5 becomes Decimal("2.5")
        if isinstance(self.ease_factor, (int, float)) and not isinstance(self.ease_factor, bool):
            object.__setattr__(self, "ease_factor", Decimal(str(self.ease_factor)))

    @classmethod
    def new(cls) -> "Progress":
        """The initial state of a card that has never been reviewed."""
        return cls()

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> "Progress":
        """
        Build a Progress from a storage record.

        Missing or null fields take their per-field defaults. The legacy
        key "card_type" is accepted for the phase.
        """
        if not record:
            return cls.new()

        phase = record.get("card_phase") or record.get("card_type")
        ease = record.get("ease_factor")

        return cls(
            card_phase=CardPhase.parse(phase),
            step_index=int(record.get("step_index") or 0),
            interval_days=int(record.get("interval_days") or DEFAULT_INTERVAL_DAYS),
            ease_factor=Decimal(str(ease)) if ease is not None else None,
            repetitions=int(record.get("repetitions") or 0),
            lapses=int(record.get("lapses") or 0),
            attempts=int(record.get("attempts") or 0),
            next_review_at=_parse_timestamp(record.get("next_review_at")),
            graduated_at=_parse_timestamp(record.get("graduated_at")),
            last_attempt_at=_parse_timestamp(record.get("last_attempt_at")),
            quality=record.get("quality"),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-safe storage record."""
        record = asdict(self)
        record["card_phase"] = CardPhase.parse(self.card_phase).value
        record["ease_factor"] = str(self.ease_factor) if self.ease_factor is not None else None
        for key in ("next_review_at", "graduated_at", "last_attempt_at"):
            value = record[key]
            record[key] = value.isoformat() if value is not None else None
        return record


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
