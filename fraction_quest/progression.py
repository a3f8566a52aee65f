"""Game state and the pure progression reducer.

``reduce_state(state, action)`` is the only way a ``GameState`` changes.  It
never mutates its input and never raises for an illegal action: selecting an
unknown or locked level, submitting without a problem, or completing a level
twice all return the state unchanged.  Side effects (timers, deferred
completion, audio, analytics) belong to ``engine.GameEngine``.

States::

    not playing -> level select (current_level == 0) -> level n (1..5)

A level is complete once its ``correct_answers`` reach the level's
``problem_count`` within the current session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from typing import Any

from .errors import LockedLevelError, UnknownLevelError
from .fraction_math import Answer, validate_answer
from .levels import LEVELS, LevelConfig, get_level
from .problems import Problem

logger = logging.getLogger(__name__)

INCORRECT_PENALTY = 3


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True, slots=True)
class GameSettings:
    sound_enabled: bool = True
    music_enabled: bool = True
    difficulty: Difficulty = Difficulty.MEDIUM
    hints_enabled: bool = True


SETTING_NAMES = frozenset(f.name for f in fields(GameSettings))


@dataclass(frozen=True, slots=True)
class LevelProgress:
    level_id: int
    completed: bool = False
    score: int = 0
    attempts: int = 0
    correct_answers: int = 0
    time_spent: int = 0
    unlocked: bool = False


@dataclass(frozen=True, slots=True)
class GameState:
    current_level: int = 0
    score: int = 0
    time_remaining: int = 0
    is_playing: bool = False
    current_problem: Problem | None = None
    level_progress: tuple[LevelProgress, ...] = ()
    game_settings: GameSettings = field(default_factory=GameSettings)
    hints_revealed: int = 0

    def progress_for(self, level_id: int) -> LevelProgress:
        for p in self.level_progress:
            if p.level_id == level_id:
                return p
        raise UnknownLevelError(level_id)


@dataclass(frozen=True, slots=True)
class StartGame:
    pass


@dataclass(frozen=True, slots=True)
class SelectLevel:
    level_id: int


@dataclass(frozen=True, slots=True)
class LoadProblem:
    problem: Problem


@dataclass(frozen=True, slots=True)
class SubmitAnswer:
    answer: Answer


@dataclass(frozen=True, slots=True)
class RevealHint:
    pass


@dataclass(frozen=True, slots=True)
class LevelComplete:
    level_id: int


@dataclass(frozen=True, slots=True)
class TickTimer:
    pass


@dataclass(frozen=True, slots=True)
class ResetLevel:
    level_id: int


@dataclass(frozen=True, slots=True)
class UpdateSettings:
    changes: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class EndGame:
    pass


Action = (
    StartGame
    | SelectLevel
    | LoadProblem
    | SubmitAnswer
    | RevealHint
    | LevelComplete
    | TickTimer
    | ResetLevel
    | UpdateSettings
    | EndGame
)


def initial_state(levels: tuple[LevelConfig, ...] = LEVELS) -> GameState:
    progress = tuple(
        LevelProgress(level_id=cfg.id, unlocked=(idx == 0)) for idx, cfg in enumerate(levels)
    )
    return GameState(level_progress=progress)


def score_delta(problem: Problem, is_correct: bool) -> int:
    return problem.max_score if is_correct else -INCORRECT_PENALTY


def check_selectable(state: GameState, level_id: int, levels: tuple[LevelConfig, ...] = LEVELS) -> LevelConfig:
    """Return the level's config or raise ``UnknownLevelError``/``LockedLevelError``."""

    cfg = get_level(level_id, levels)
    if not state.progress_for(level_id).unlocked:
        raise LockedLevelError(level_id)
    return cfg


def completion_reached(
    before: GameState,
    after: GameState,
    level_id: int,
    levels: tuple[LevelConfig, ...] = LEVELS,
) -> bool:
    """True when a single transition pushed ``level_id`` across its threshold."""

    try:
        threshold = get_level(level_id, levels).problem_count
        old = before.progress_for(level_id)
        new = after.progress_for(level_id)
    except UnknownLevelError:
        return False
    return not new.completed and old.correct_answers < threshold <= new.correct_answers


def _update_progress(
    state: GameState,
    level_id: int,
    fn: Callable[[LevelProgress], LevelProgress],
) -> tuple[LevelProgress, ...]:
    return tuple(fn(p) if p.level_id == level_id else p for p in state.level_progress)


def _select_level(state: GameState, level_id: int, levels: tuple[LevelConfig, ...]) -> GameState:
    if level_id == 0:
        return replace(state, current_level=0, is_playing=True, current_problem=None, hints_revealed=0)
    try:
        cfg = check_selectable(state, level_id, levels)
    except (UnknownLevelError, LockedLevelError) as e:
        logger.debug("Ignoring level selection: %s", e)
        return state
    return replace(state, current_level=cfg.id, time_remaining=cfg.time_limit, is_playing=True)


def _submit_answer(state: GameState, answer: Answer) -> GameState:
    problem = state.current_problem
    if problem is None or state.current_level == 0:
        return state

    is_correct = validate_answer(answer, problem.correct_answer)
    delta = score_delta(problem, is_correct)

    def bump(p: LevelProgress) -> LevelProgress:
        return replace(
            p,
            attempts=p.attempts + 1,
            correct_answers=p.correct_answers + (1 if is_correct else 0),
            score=p.score + delta,
        )

    return replace(
        state,
        score=state.score + delta,
        level_progress=_update_progress(state, state.current_level, bump),
    )


def _level_complete(state: GameState, level_id: int, levels: tuple[LevelConfig, ...]) -> GameState:
    try:
        cfg = get_level(level_id, levels)
        progress = state.progress_for(level_id)
    except UnknownLevelError as e:
        logger.debug("Ignoring level completion: %s", e)
        return state
    if progress.completed:
        return state

    time_spent = cfg.time_limit - state.time_remaining if state.time_remaining > 0 else 0

    def complete(p: LevelProgress) -> LevelProgress:
        if p.level_id == level_id:
            return replace(p, completed=True, time_spent=time_spent)
        if p.level_id == level_id + 1:
            return replace(p, unlocked=True)
        return p

    return replace(state, level_progress=tuple(complete(p) for p in state.level_progress))


def _update_settings(state: GameState, changes: Mapping[str, Any]) -> GameState:
    known = {k: v for k, v in changes.items() if k in SETTING_NAMES}
    if "difficulty" in known:
        try:
            known["difficulty"] = Difficulty(known["difficulty"])
        except ValueError:
            logger.debug("Ignoring unknown difficulty %r", known["difficulty"])
            del known["difficulty"]
    return replace(state, game_settings=replace(state.game_settings, **known))


def reduce_state(state: GameState, action: Action, *, levels: tuple[LevelConfig, ...] = LEVELS) -> GameState:
    if isinstance(action, StartGame):
        return replace(state, is_playing=True, score=0)

    if isinstance(action, SelectLevel):
        return _select_level(state, action.level_id, levels)

    if isinstance(action, LoadProblem):
        if state.current_level == 0:
            return state
        return replace(state, current_problem=action.problem, hints_revealed=0)

    if isinstance(action, SubmitAnswer):
        return _submit_answer(state, action.answer)

    if isinstance(action, RevealHint):
        problem = state.current_problem
        if problem is None or state.hints_revealed >= len(problem.hints):
            return state
        return replace(state, hints_revealed=state.hints_revealed + 1)

    if isinstance(action, LevelComplete):
        return _level_complete(state, action.level_id, levels)

    if isinstance(action, TickTimer):
        if not state.is_playing or state.time_remaining <= 0:
            return state
        return replace(state, time_remaining=max(0, state.time_remaining - 1))

    if isinstance(action, ResetLevel):
        return replace(
            state,
            level_progress=_update_progress(
                state,
                action.level_id,
                lambda p: replace(p, completed=False, attempts=0, correct_answers=0),
            ),
        )

    if isinstance(action, UpdateSettings):
        return _update_settings(state, action.changes)

    if isinstance(action, EndGame):
        return replace(state, is_playing=False, current_problem=None, hints_revealed=0)

    raise TypeError(f"unknown action {action!r}")
