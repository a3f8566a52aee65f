"""Headless simulations of the game engine driven by a fake clock."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest

from fraction_quest.analytics import AnalyticsEvent, MemoryAnalyticsSink
from fraction_quest.engine import EngineConfig, GameEngine
from fraction_quest.fraction_math import Fraction, MixedNumber, to_improper_fraction
from fraction_quest.ports import NotificationVariant
from fraction_quest.progression import Difficulty, GameState


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


@dataclass
class RecordingAudio:
    calls: list[str] = field(default_factory=list)
    enabled: bool = True

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        self.calls.append(f"set_enabled:{enabled}")

    def play_correct(self) -> None:
        self.calls.append("correct")

    def play_incorrect(self) -> None:
        self.calls.append("incorrect")

    def play_level_complete(self) -> None:
        self.calls.append("level_complete")

    def play_button_click(self) -> None:
        self.calls.append("click")

    def play_hint(self) -> None:
        self.calls.append("hint")

    def play_time_warning(self) -> None:
        self.calls.append("time_warning")

    def play_game_start(self) -> None:
        self.calls.append("game_start")

    def start_music(self) -> None:
        self.calls.append("start_music")

    def stop_music(self) -> None:
        self.calls.append("stop_music")


@dataclass
class RecordingNotifications:
    sent: list[tuple[str, str, NotificationVariant]] = field(default_factory=list)

    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> None:
        self.sent.append((title, description, variant))

    def titles(self) -> list[str]:
        return [t for t, _, _ in self.sent]


class FailingSink:
    def emit(self, event: AnalyticsEvent) -> None:
        raise RuntimeError("sink down")


@dataclass
class Harness:
    clock: FakeClock
    audio: RecordingAudio
    notes: RecordingNotifications
    sink: MemoryAnalyticsSink
    engine: GameEngine


def _counter_seeds(start: int = 1000):
    n = start

    def source() -> int:
        nonlocal n
        n += 1
        return n

    return source


def _harness(**kwargs) -> Harness:
    clock = FakeClock()
    audio = RecordingAudio()
    notes = RecordingNotifications()
    sink = MemoryAnalyticsSink()
    engine = GameEngine(
        clock=clock,
        audio=audio,
        notifications=notes,
        analytics=sink,
        seed_source=kwargs.pop("seed_source", _counter_seeds()),
        **kwargs,
    )
    return Harness(clock, audio, notes, sink, engine)


def _answer(engine: GameEngine) -> Fraction | MixedNumber:
    problem = engine.get_state().current_problem
    assert problem is not None
    return problem.correct_answer


def _wrong(engine: GameEngine) -> Fraction:
    correct = _answer(engine)
    f = to_improper_fraction(correct) if isinstance(correct, MixedNumber) else correct
    return Fraction(f.numerator + f.denominator, f.denominator)


def _solve(h: Harness, n: int) -> None:
    for _ in range(n):
        assert h.engine.submit_answer(_answer(h.engine)) is True
        h.engine.next_problem()


def test_full_level_run_completes_and_unlocks_next() -> None:
    h = _harness()
    e = h.engine

    e.start_game()
    assert e.get_state().is_playing
    assert e.get_state().current_level == 0
    assert h.audio.calls[-2:] == ["game_start", "start_music"]

    assert e.select_level(1) is True
    s = e.get_state()
    assert s.current_level == 1
    assert s.time_remaining == 90
    assert s.current_problem is not None
    assert e.timer_running()

    _solve(h, 5)
    assert e.completion_pending()
    assert not e.get_state().progress_for(1).completed

    h.clock.advance(1.0)
    e.update()

    s = e.get_state()
    assert s.progress_for(1).completed
    assert s.progress_for(1).time_spent == 1
    assert s.progress_for(2).unlocked
    assert s.score == 50
    assert "level_complete" in h.audio.calls
    assert "Level Complete!" in h.notes.titles()
    assert h.sink.types() == [
        "game_start",
        "level_start",
        "attempt_result",
        "attempt_result",
        "attempt_result",
        "attempt_result",
        "attempt_result",
        "level_complete",
    ]
    assert h.sink.events[-1].data == {"levelId": 1, "score": 50, "timeSpent": 1}

    assert e.select_level(2) is True
    assert e.get_state().current_level == 2


def test_locked_level_selection_returns_false() -> None:
    h = _harness()
    h.engine.start_game()
    assert h.engine.select_level(2) is False
    assert h.engine.select_level(42) is False
    assert h.engine.get_state().current_level == 0
    assert not h.engine.timer_running()


def test_sixth_correct_answer_does_not_retrigger_completion() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    _solve(h, 5)
    h.clock.advance(1.0)
    h.engine.update()

    _solve(h, 1)
    assert not h.engine.completion_pending()
    h.clock.advance(2.0)
    h.engine.update()
    assert h.sink.types().count("level_complete") == 1
    assert h.engine.get_state().progress_for(1).correct_answers == 6


def test_incorrect_answer_feedback() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)

    assert h.engine.submit_answer(_wrong(h.engine)) is False
    assert h.engine.get_state().score == -3
    assert h.audio.calls[-1] == "incorrect"
    assert h.notes.sent[-1] == ("Not quite right", "Try again or use a hint!", NotificationVariant.DESTRUCTIVE)
    last = h.sink.events[-1]
    assert last.type == "attempt_result"
    assert last.data["correct"] is False
    assert last.data["scoreDelta"] == -3
    assert last.data["timeRemaining"] == 90


def test_correct_answer_as_text() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    f = to_improper_fraction(_answer(h.engine))  # level 1 answers are mixed numbers
    assert h.engine.submit_answer(f"{f.numerator}/{f.denominator}") is True
    assert h.notes.sent[-1] == ("Correct!", "+10 points", NotificationVariant.DEFAULT)


def test_submit_without_problem_returns_none() -> None:
    h = _harness()
    assert h.engine.submit_answer("1/2") is None
    h.engine.start_game()
    assert h.engine.submit_answer("1/2") is None
    assert "attempt_result" not in h.sink.types()


def test_timer_ticks_warns_and_stops_at_zero() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)

    h.clock.advance(80.0)
    h.engine.update()
    assert h.engine.get_state().time_remaining == 10
    assert h.audio.calls.count("time_warning") == 1

    h.clock.advance(30.0)
    h.engine.update()
    assert h.engine.get_state().time_remaining == 0
    assert not h.engine.timer_running()
    assert h.notes.titles().count("Time's Up!") == 1
    assert h.audio.calls.count("time_warning") == 1


def test_end_game_cancels_pending_completion() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    _solve(h, 5)
    assert h.engine.completion_pending()

    h.engine.end_game()
    assert not h.engine.completion_pending()
    assert not h.engine.timer_running()
    h.clock.advance(5.0)
    h.engine.update()

    s = h.engine.get_state()
    assert not s.is_playing
    assert s.current_problem is None
    assert not s.progress_for(1).completed
    assert h.sink.types()[-1] == "game_end"
    assert h.sink.events[-1].data == {"finalScore": 50, "levelsCompleted": 0}
    assert h.audio.calls[-1] == "stop_music"


def test_leaving_level_cancels_pending_completion_and_timer() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    _solve(h, 5)

    assert h.engine.select_level(0) is True
    assert not h.engine.completion_pending()
    assert not h.engine.timer_running()
    h.clock.advance(3.0)
    h.engine.update()
    assert not h.engine.get_state().progress_for(1).completed
    assert h.engine.get_state().time_remaining == 90


def test_reentering_level_resets_session_counters() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    _solve(h, 3)
    h.clock.advance(5.0)
    h.engine.update()

    h.engine.select_level(1)
    s = h.engine.get_state()
    p = s.progress_for(1)
    assert (p.attempts, p.correct_answers) == (0, 0)
    assert p.score == 30
    assert s.time_remaining == 90


def test_hints_revealed_in_order() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    problem = h.engine.get_state().current_problem
    assert problem is not None

    assert [h.engine.use_hint() for _ in range(4)] == [*problem.hints, None]
    assert h.engine.revealed_hints() == problem.hints
    assert h.audio.calls.count("hint") == 3
    assert [e.data["hintIndex"] for e in h.sink.events if e.type == "hint_used"] == [0, 1, 2]

    h.engine.next_problem()
    assert h.engine.revealed_hints() == ()


def test_hints_disabled() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    h.engine.update_settings(hints_enabled=False)
    assert h.engine.use_hint() is None
    assert h.engine.get_state().hints_revealed == 0


def test_next_problem_requires_a_level() -> None:
    h = _harness(seed_source=lambda: 42)
    assert h.engine.next_problem() is None
    h.engine.start_game()
    h.engine.select_level(1)
    first = h.engine.get_state().current_problem
    second = h.engine.next_problem()
    assert first is not None and second is not None
    # A repeated seed is bumped so consecutive problems differ.
    assert (first.id, second.id) == ("l1_42", "l1_43")


def test_update_settings_drives_audio(caplog: pytest.LogCaptureFixture) -> None:
    h = _harness()
    caplog.set_level(logging.WARNING, logger="fraction_quest.engine")

    h.engine.update_settings(sound_enabled=False, music_enabled=False, difficulty="hard", volume=3)
    settings = h.engine.get_state().game_settings
    assert settings.sound_enabled is False
    assert settings.music_enabled is False
    assert settings.difficulty is Difficulty.HARD
    assert "set_enabled:False" in h.audio.calls
    assert "stop_music" in h.audio.calls
    assert h.audio.calls[-1] == "click"
    assert "volume" in caplog.text

    h.engine.start_game()
    assert "start_music" not in h.audio.calls
    assert h.sink.events[-1].data == {"difficulty": "hard"}


def test_subscribe_and_unsubscribe() -> None:
    h = _harness()
    seen: list[GameState] = []
    unsubscribe = h.engine.subscribe(seen.append)
    h.engine.start_game()
    assert seen and seen[-1] is h.engine.get_state()

    unsubscribe()
    count = len(seen)
    h.engine.select_level(1)
    assert len(seen) == count


def test_failing_analytics_sink_is_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="fraction_quest.engine")
    engine = GameEngine(clock=FakeClock(), analytics=FailingSink(), seed_source=_counter_seeds())
    engine.start_game()
    assert engine.select_level(1) is True
    assert engine.submit_answer(_answer(engine)) is True
    assert "Analytics sink failed" in caplog.text


def test_custom_config_and_validation() -> None:
    h = _harness(config=EngineConfig(tick_interval_s=0.5, completion_delay_s=0.0))
    h.engine.start_game()
    h.engine.select_level(1)
    h.clock.advance(1.0)
    h.engine.update()
    assert h.engine.get_state().time_remaining == 88

    with pytest.raises(ValueError):
        GameEngine(clock=FakeClock(), config=EngineConfig(tick_interval_s=0.0))
    with pytest.raises(ValueError):
        GameEngine(clock=FakeClock(), config=EngineConfig(completion_delay_s=-1.0))
    with pytest.raises(ValueError):
        GameEngine(clock=FakeClock(), levels=())


def test_wrong_answers_between_correct_ones_still_complete_level() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)

    for i in range(5):
        for _ in range(i % 3):
            assert h.engine.submit_answer(_wrong(h.engine)) is False
        assert h.engine.submit_answer("nonsense") is False
        assert h.engine.submit_answer(_answer(h.engine)) is True
        h.engine.next_problem()
        h.clock.advance(0.25)
        h.engine.update()

    assert h.engine.completion_pending()
    h.clock.advance(1.0)
    h.engine.update()

    s = h.engine.get_state()
    p = s.progress_for(1)
    assert p.completed
    assert p.correct_answers == 5
    assert p.attempts == 5 + 5 + (0 + 1 + 2 + 0 + 1)
    assert s.progress_for(2).unlocked
    assert h.sink.types().count("level_complete") == 1


def test_oversized_answer_text_is_graded_incorrect() -> None:
    h = _harness()
    h.engine.start_game()
    h.engine.select_level(1)
    assert h.engine.submit_answer("1" * 5000 + "/2") is False
    assert h.engine.get_state().progress_for(1).attempts == 1
