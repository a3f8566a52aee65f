from __future__ import annotations

import pytest

from fraction_quest.errors import UnknownLevelError
from fraction_quest.levels import LEVELS, get_level, level_ids
from fraction_quest.problems import PROBLEM_GENERATORS


def test_registry_has_five_ordered_levels() -> None:
    assert level_ids() == (1, 2, 3, 4, 5)
    assert [cfg.time_limit for cfg in LEVELS] == [90, 90, 75, 90, 120]
    assert all(cfg.problem_count == 5 for cfg in LEVELS)


def test_levels_use_their_generators() -> None:
    for cfg in LEVELS:
        assert cfg.problem_generator is PROBLEM_GENERATORS[cfg.id]
        assert cfg.problem_generator(42).level == cfg.id
        assert cfg.title
        assert cfg.objective


def test_get_level() -> None:
    assert get_level(3).title == "Equivalent Fractions & Simplification"
    with pytest.raises(UnknownLevelError) as exc_info:
        get_level(6)
    assert exc_info.value.level_id == 6
    with pytest.raises(LookupError):
        get_level(0)
