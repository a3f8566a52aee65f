"""Game engine: the single owner of ``GameState``.

The engine is constructed once and handed to whatever needs it.  Every public
operation funnels through ``reduce_state``; the engine adds only the side
effects around it:

* a periodic 1 s timer task that dispatches ``TickTimer`` while a level is
  being played, cancelled whenever play stops, the level changes or time runs
  out;
* a deferred ``LevelComplete`` scheduled shortly after the submission that
  reaches the level's threshold, so the correct/incorrect cue is perceived
  first; it is cancelled if the player navigates away before it fires;
* audio and notification intents through injected ports;
* best-effort analytics events.

Time is entirely via the injected ``Clock``; call ``update()`` regularly (the
pygame shell does it every frame) to run due timer tasks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from . import analytics as ev
from .analytics import AnalyticsSink, LoggingAnalyticsSink, make_event
from .clock import Clock
from .errors import LockedLevelError, UnknownLevelError
from .fraction_math import Answer
from .levels import LEVELS, LevelConfig, get_level
from .ports import AudioPort, NotificationPort, NotificationVariant, NullAudio, NullNotifications
from .problems import Problem
from .progression import (
    SETTING_NAMES,
    Action,
    EndGame,
    GameState,
    LevelComplete,
    LoadProblem,
    ResetLevel,
    RevealHint,
    SelectLevel,
    StartGame,
    SubmitAnswer,
    TickTimer,
    UpdateSettings,
    check_selectable,
    completion_reached,
    initial_state,
    reduce_state,
    score_delta,
)
from .rng import wall_clock_seed
from .scheduler import ClockScheduler, Scheduler, TaskHandle

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


@dataclass(frozen=True, slots=True)
class EngineConfig:
    tick_interval_s: float = 1.0
    completion_delay_s: float = 1.0
    # Seconds remaining at which the time-warning cue plays.
    time_warning_s: int = 10


class GameEngine:
    def __init__(
        self,
        *,
        clock: Clock,
        scheduler: Scheduler | None = None,
        audio: AudioPort | None = None,
        notifications: NotificationPort | None = None,
        analytics: AnalyticsSink | None = None,
        seed_source: Callable[[], int] = wall_clock_seed,
        levels: tuple[LevelConfig, ...] = LEVELS,
        config: EngineConfig | None = None,
    ) -> None:
        cfg = config or EngineConfig()
        if cfg.tick_interval_s <= 0:
            raise ValueError("tick_interval_s must be > 0")
        if cfg.completion_delay_s < 0:
            raise ValueError("completion_delay_s must be >= 0")
        if not levels:
            raise ValueError("levels must not be empty")

        self._clock = clock
        self._scheduler: Scheduler = scheduler or ClockScheduler(clock)
        self._audio: AudioPort = audio or NullAudio()
        self._notifications: NotificationPort = notifications or NullNotifications()
        self._analytics: AnalyticsSink = analytics or LoggingAnalyticsSink()
        self._seed_source = seed_source
        self._last_seed: int | None = None
        self._levels = levels
        self._config = cfg

        self._state = initial_state(levels)
        self._listeners: list[StateListener] = []
        self._timer: TaskHandle | None = None
        self._pending_completion: TaskHandle | None = None

        self._audio.set_enabled(self._state.game_settings.sound_enabled)

    # -- Read side ----------------------------------------------------------
    @property
    def levels(self) -> tuple[LevelConfig, ...]:
        return self._levels

    def get_state(self) -> GameState:
        return self._state

    def revealed_hints(self) -> tuple[str, ...]:
        problem = self._state.current_problem
        if problem is None:
            return ()
        return problem.hints[: self._state.hints_revealed]

    def completion_pending(self) -> bool:
        return self._pending_completion is not None and not self._pending_completion.cancelled

    def timer_running(self) -> bool:
        return self._timer is not None and not self._timer.cancelled

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state; returns an unsubscribe function."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self) -> None:
        self._scheduler.pump()

    # -- Public operations --------------------------------------------------
    def start_game(self) -> None:
        self._dispatch(StartGame())
        self._dispatch(SelectLevel(0))
        self._audio.play_game_start()
        if self._state.game_settings.music_enabled:
            self._audio.start_music()
        self._emit(ev.GAME_START, difficulty=self._state.game_settings.difficulty.value)

    def select_level(self, level_id: int) -> bool:
        """Enter a level (or the level-select screen for 0).

        Unknown and locked levels leave the state untouched and return False.
        """

        if level_id == 0:
            self._cancel_pending_completion()
            self._stop_timer()
            self._dispatch(SelectLevel(0))
            return True

        try:
            check_selectable(self._state, level_id, self._levels)
        except (UnknownLevelError, LockedLevelError) as e:
            logger.debug("select_level(%s) ignored: %s", level_id, e)
            return False

        self._cancel_pending_completion()
        self._stop_timer()
        self._dispatch(SelectLevel(level_id))
        self._dispatch(ResetLevel(level_id))
        problem = self._load_new_problem(level_id)
        self._timer = self._scheduler.call_every(self._config.tick_interval_s, self._on_tick)
        self._emit(ev.LEVEL_START, levelId=level_id, problemId=problem.id)
        return True

    def submit_answer(self, answer: Answer) -> bool | None:
        """Grade ``answer`` against the current problem.

        Returns True/False for a graded attempt, or None when there is no
        problem to answer.
        """

        before = self._state
        problem = before.current_problem
        level_id = before.current_level
        if problem is None or level_id == 0:
            return None

        after = self._dispatch(SubmitAnswer(answer))
        is_correct = (
            after.progress_for(level_id).correct_answers > before.progress_for(level_id).correct_answers
        )
        delta = score_delta(problem, is_correct)

        if is_correct:
            self._audio.play_correct()
            self._notifications.notify("Correct!", f"+{problem.max_score} points")
        else:
            self._audio.play_incorrect()
            self._notifications.notify(
                "Not quite right",
                "Try again or use a hint!",
                NotificationVariant.DESTRUCTIVE,
            )

        self._emit(
            ev.ATTEMPT_RESULT,
            problemId=problem.id,
            correct=is_correct,
            scoreDelta=delta,
            timeRemaining=after.time_remaining,
        )

        if completion_reached(before, after, level_id, self._levels):
            self._schedule_completion(level_id)
        return is_correct

    def use_hint(self) -> str | None:
        """Reveal the next hint of the current problem, if any."""

        before = self._state
        problem = before.current_problem
        if problem is None or not before.game_settings.hints_enabled:
            return None

        after = self._dispatch(RevealHint())
        if after.hints_revealed == before.hints_revealed:
            return None

        hint = problem.hints[after.hints_revealed - 1]
        self._audio.play_hint()
        self._emit(ev.HINT_USED, problemId=problem.id, hintIndex=after.hints_revealed - 1)
        return hint

    def next_problem(self) -> Problem | None:
        level_id = self._state.current_level
        if level_id == 0:
            return None
        return self._load_new_problem(level_id)

    def end_game(self) -> None:
        self._cancel_pending_completion()
        self._stop_timer()
        state = self._dispatch(EndGame())
        self._audio.stop_music()
        self._emit(
            ev.GAME_END,
            finalScore=state.score,
            levelsCompleted=sum(1 for p in state.level_progress if p.completed),
        )

    def update_settings(self, **changes: Any) -> None:
        unknown = sorted(set(changes) - SETTING_NAMES)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))

        before = self._state.game_settings
        after = self._dispatch(UpdateSettings(changes)).game_settings

        if after.sound_enabled != before.sound_enabled:
            self._audio.set_enabled(after.sound_enabled)
        if after.music_enabled != before.music_enabled:
            if after.music_enabled:
                self._audio.start_music()
            else:
                self._audio.stop_music()
        self._audio.play_button_click()

    # -- Internals ----------------------------------------------------------
    def _dispatch(self, action: Action) -> GameState:
        before = self._state
        self._state = reduce_state(before, action, levels=self._levels)
        if self._state is not before:
            logger.debug("%s applied", type(action).__name__)
            for listener in list(self._listeners):
                listener(self._state)
        return self._state

    def _fresh_seed(self) -> int:
        seed = int(self._seed_source())
        if self._last_seed is not None and seed <= self._last_seed:
            # Two problems in the same millisecond must still differ.
            seed = self._last_seed + 1
        self._last_seed = seed
        return seed

    def _load_new_problem(self, level_id: int) -> Problem:
        cfg = get_level(level_id, self._levels)
        problem = cfg.problem_generator(self._fresh_seed())
        self._dispatch(LoadProblem(problem))
        return problem

    def _on_tick(self) -> None:
        before = self._state
        if not before.is_playing or before.current_level == 0:
            self._stop_timer()
            return

        after = self._dispatch(TickTimer())
        remaining = after.time_remaining
        ticked = remaining < before.time_remaining
        if ticked and remaining == self._config.time_warning_s:
            self._audio.play_time_warning()
        if remaining == 0:
            self._stop_timer()
        if ticked and remaining == 0:
            self._notifications.notify(
                "Time's Up!",
                "The clock has run out for this level.",
                NotificationVariant.DESTRUCTIVE,
            )

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_completion(self, level_id: int) -> None:
        self._cancel_pending_completion()
        self._pending_completion = self._scheduler.call_later(
            self._config.completion_delay_s,
            lambda: self._complete_level(level_id),
        )

    def _cancel_pending_completion(self) -> None:
        if self._pending_completion is not None:
            self._pending_completion.cancel()
            self._pending_completion = None

    def _complete_level(self, level_id: int) -> None:
        self._pending_completion = None
        before = self._state
        after = self._dispatch(LevelComplete(level_id))
        if after is before:
            return

        progress = after.progress_for(level_id)
        has_next = any(cfg.id == level_id + 1 for cfg in self._levels)
        logger.info("Level %s complete (score %s, %ss)", level_id, progress.score, progress.time_spent)

        self._audio.play_level_complete()
        self._notifications.notify(
            "Level Complete!",
            "Great job! Next level unlocked!" if has_next else "Great job! You finished every level!",
        )
        self._emit(
            ev.LEVEL_COMPLETE,
            levelId=level_id,
            score=progress.score,
            timeSpent=progress.time_spent,
        )

    def _emit(self, event_type: str, **data: Any) -> None:
        try:
            self._analytics.emit(make_event(event_type, **data))
        except Exception:
            logger.warning("Analytics sink failed for %s", event_type, exc_info=True)
