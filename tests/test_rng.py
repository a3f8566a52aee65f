from __future__ import annotations

import pytest

from fraction_quest.rng import LcgRandom, wall_clock_seed


def test_first_draws_from_seed_zero() -> None:
    rng = LcgRandom(0)
    assert rng.next_float() == 12345 / 0x7FFFFFFF
    assert rng.next_float() == 1406932606 / 0x7FFFFFFF


def test_same_seed_same_stream() -> None:
    a = LcgRandom(2024)
    b = LcgRandom(2024)
    assert [a.next_float() for _ in range(50)] == [b.next_float() for _ in range(50)]
    assert a.seed == 2024


def test_different_seeds_diverge() -> None:
    a = LcgRandom(1)
    b = LcgRandom(2)
    assert [a.next_float() for _ in range(5)] != [b.next_float() for _ in range(5)]


def test_large_seed_stays_in_unit_interval() -> None:
    rng = LcgRandom(1_700_000_000_000)
    for _ in range(1000):
        x = rng.next_float()
        assert 0.0 <= x <= 1.0


def test_random_int_is_inclusive_and_bounded() -> None:
    rng = LcgRandom(99)
    seen = {rng.random_int(2, 5) for _ in range(500)}
    assert seen == {2, 3, 4, 5}
    assert rng.random_int(7, 7) == 7


def test_random_int_rejects_empty_range() -> None:
    with pytest.raises(ValueError):
        LcgRandom(1).random_int(5, 4)


def test_draw_of_one_is_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    rng = LcgRandom(1)
    monkeypatch.setattr(rng, "next_float", lambda: 1.0)
    assert rng.random_int(1, 6) == 6
    assert rng.random_choice(["a", "b", "c"]) == "c"


def test_random_choice_covers_sequence() -> None:
    rng = LcgRandom(5)
    seen = {rng.random_choice(("x", "y")) for _ in range(100)}
    assert seen == {"x", "y"}
    with pytest.raises(ValueError):
        rng.random_choice([])


def test_wall_clock_seed_is_epoch_millis() -> None:
    seed = wall_clock_seed()
    # Later than 2020-01-01 in milliseconds.
    assert seed > 1_577_836_800_000
