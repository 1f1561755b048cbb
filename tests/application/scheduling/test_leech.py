import pytest

from mneme.application.scheduling.leech import is_leech
from mneme.domain.scheduling.models import CardPhase, Progress, Settings


@pytest.mark.parametrize("lapses,expected", [(0, False), (7, False), (8, True), (12, True)])
def test_is_leech_at_default_threshold(lapses, expected):
    assert is_leech(Progress(lapses=lapses), Settings()) is expected


@pytest.mark.parametrize("phase", list(CardPhase))
def test_is_leech_ignores_phase(phase):
    progress = Progress(card_phase=phase, lapses=3)
    assert is_leech(progress, Settings(leech_threshold=3))
