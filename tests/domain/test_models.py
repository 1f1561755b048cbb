"""Tests for scheduling domain models."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from mneme.domain.errors import InvalidQualityError
from mneme.domain.scheduling.models import CardPhase, LeechAction, Progress, Rating, Settings


# --- Rating ---


@pytest.mark.parametrize(
    "quality,expected",
    [
        (0, Rating.AGAIN),
        (1, Rating.HARD),
        (2, Rating.GOOD),
        (3, Rating.EASY),
        (5, Rating.EASY),
        ("2", Rating.GOOD),
        ("Again", Rating.AGAIN),
        (" easy ", Rating.EASY),
        (Rating.HARD, Rating.HARD),
    ],
)
def test_rating_from_quality(quality, expected):
    assert Rating.from_quality(quality) is expected


@pytest.mark.parametrize("quality", [-1, "-1", "great", False, 1.0, None])
def test_rating_rejects_unusable_quality(quality):
    with pytest.raises(InvalidQualityError) as exc_info:
        Rating.from_quality(quality)
    assert exc_info.value.quality == quality


def test_invalid_quality_is_a_value_error():
    assert issubclass(InvalidQualityError, ValueError)


# --- CardPhase ---


def test_card_phase_parse():
    assert CardPhase.parse(None) is CardPhase.NEW
    assert CardPhase.parse("") is CardPhase.NEW
    assert CardPhase.parse("new") is CardPhase.NEW
    assert CardPhase.parse("REVIEW") is CardPhase.REVIEW
    assert CardPhase.parse(CardPhase.RELEARNING) is CardPhase.RELEARNING


def test_card_phase_unknown_falls_back_to_learning(caplog):
    with caplog.at_level("WARNING"):
        assert CardPhase.parse("suspended") is CardPhase.LEARNING
    assert "suspended" in caplog.text


def test_card_phase_is_stepped():
    assert CardPhase.NEW.is_stepped
    assert CardPhase.LEARNING.is_stepped
    assert CardPhase.RELEARNING.is_stepped
    assert not CardPhase.REVIEW.is_stepped


# --- Progress ---


def test_progress_new_defaults():
    p = Progress.new()
    assert p.card_phase is CardPhase.NEW
    assert p.step_index == 0
    assert p.interval_days == 1
    assert p.ease_factor is None
    assert p.repetitions == 0
    assert p.lapses == 0
    assert p.attempts == 0
    assert p.next_review_at is None
    assert p.graduated_at is None
    assert p.last_attempt_at is None


def test_progress_is_immutable():
    p = Progress.new()
    with pytest.raises(AttributeError):
        p.lapses = 3


def test_progress_from_empty_record_is_new():
    assert Progress.from_record(None) == Progress.new()
    assert Progress.from_record({}) == Progress.new()


def test_progress_from_partial_legacy_record():
    p = Progress.from_record(
        {
            "card_type": "review",
            "interval_days": None,
            "ease_factor": 2.35,
            "lapses": 2,
            "next_review_at": "2026-03-02T09:30:00+00:00",
        }
    )
    assert p.card_phase is CardPhase.REVIEW
    assert p.interval_days == 1
    assert p.ease_factor == Decimal("2.35")
    assert p.lapses == 2
    assert p.step_index == 0
    assert p.next_review_at == datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def test_progress_numeric_ease_becomes_decimal():
    assert Progress(ease_factor=2.5).ease_factor == Decimal("2.5")
    assert Progress(ease_factor=2).ease_factor == Decimal("2")
    assert Progress(ease_factor=Decimal("2.35")).ease_factor == Decimal("2.35")


def test_progress_null_phase_falls_back_to_legacy_key():
    p = Progress.from_record({"card_phase": None, "card_type": "relearning"})
    assert p.card_phase is CardPhase.RELEARNING


def test_progress_record_survives_storage():
    now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    p = Progress(
        card_phase=CardPhase.RELEARNING,
        step_index=1,
        interval_days=4,
        ease_factor=Decimal("2.05"),
        repetitions=6,
        lapses=3,
        attempts=19,
        next_review_at=now,
        graduated_at=now,
        last_attempt_at=now,
        quality=0,
    )

    record = p.to_record()

    assert record["card_phase"] == "relearning"
    assert record["ease_factor"] == "2.05"
    assert record["next_review_at"] == "2026-03-01T09:30:00+00:00"
    assert Progress.from_record(record) == p


# --- Settings ---


def test_settings_defaults():
    s = Settings()
    assert s.learning_steps == (1, 10)
    assert s.graduating_interval == 1
    assert s.easy_interval == 4
    assert s.starting_ease == Decimal("2.50")
    assert s.easy_bonus == Decimal("1.30")
    assert s.interval_modifier == Decimal("1.00")
    assert s.hard_interval_multiplier == Decimal("1.20")
    assert s.new_interval_percentage == Decimal("0.00")
    assert s.minimum_interval == 1
    assert s.maximum_interval == 36500
    assert s.leech_threshold == 8
    assert s.leech_action is LeechAction.SUSPEND


def test_settings_floats_become_exact_decimals():
    s = Settings(starting_ease=1.3, easy_bonus=1.15)
    assert s.starting_ease == Decimal("1.3")
    assert s.easy_bonus == Decimal("1.15")


def test_settings_accepts_legacy_column_names():
    s = Settings.model_validate({"hard_interval": 1.1, "new_interval": 0.25})
    assert s.hard_interval_multiplier == Decimal("1.1")
    assert s.new_interval_percentage == Decimal("0.25")


@pytest.mark.parametrize(
    "field,value",
    [
        ("learning_steps", []),
        ("learning_steps", [0, 10]),
        ("learning_steps", [1, 2000]),
        ("learning_steps", list(range(1, 12))),
        ("graduating_interval", 0),
        ("starting_ease", 1.2),
        ("starting_ease", 3.5),
        ("easy_bonus", 0.9),
        ("interval_modifier", 0),
        ("new_interval_percentage", 1.5),
        ("minimum_interval", 0),
        ("leech_threshold", 0),
        ("leech_action", "delete"),
    ],
)
def test_settings_rejects_out_of_range_values(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_settings_rejects_maximum_below_minimum():
    with pytest.raises(ValidationError):
        Settings(minimum_interval=10, maximum_interval=5)


def test_settings_are_frozen():
    s = Settings()
    with pytest.raises(ValidationError):
        s.leech_threshold = 3
