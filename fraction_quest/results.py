from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .levels import LEVELS, LevelConfig, get_level
from .progression import GameState, LevelProgress


class LevelStatus(StrEnum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class LevelSummary:
    """Read-only view of one level's progress for level-select and results screens."""

    level_id: int
    title: str
    status: LevelStatus
    attempts: int
    correct: int
    accuracy: float
    score: int
    passing_score: int
    passed: bool
    stars: int
    time_spent: int


def level_status(progress: LevelProgress) -> LevelStatus:
    if progress.completed:
        return LevelStatus.COMPLETED
    if progress.unlocked:
        return LevelStatus.AVAILABLE
    return LevelStatus.LOCKED


def accuracy(progress: LevelProgress) -> float:
    if progress.attempts == 0:
        return 0.0
    return progress.correct_answers / progress.attempts


def level_stars(progress: LevelProgress) -> int:
    if not progress.completed:
        return 0
    acc = accuracy(progress)
    if acc >= 0.9:
        return 3
    if acc >= 0.7:
        return 2
    return 1


def performance_rating(acc: float) -> tuple[str, int]:
    """Rating label and star count for an accuracy in [0.0, 1.0]."""

    if acc >= 0.9:
        return "Excellent!", 3
    if acc >= 0.7:
        return "Good Job!", 2
    return "Keep Practicing!", 1


def summarize_level(
    state: GameState,
    level_id: int,
    levels: tuple[LevelConfig, ...] = LEVELS,
) -> LevelSummary:
    cfg = get_level(level_id, levels)
    progress = state.progress_for(level_id)
    return LevelSummary(
        level_id=cfg.id,
        title=cfg.title,
        status=level_status(progress),
        attempts=progress.attempts,
        correct=progress.correct_answers,
        accuracy=accuracy(progress),
        score=progress.score,
        passing_score=cfg.passing_score,
        passed=progress.score >= cfg.passing_score,
        stars=level_stars(progress),
        time_spent=progress.time_spent,
    )


def summarize_game(state: GameState, levels: tuple[LevelConfig, ...] = LEVELS) -> list[LevelSummary]:
    return [summarize_level(state, cfg.id, levels) for cfg in levels]


def format_time(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60}m {seconds % 60}s"


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
