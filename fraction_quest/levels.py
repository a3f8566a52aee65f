from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .errors import UnknownLevelError
from .problems import (
    Problem,
    generate_level1,
    generate_level2,
    generate_level3,
    generate_level4,
    generate_level5,
)


@dataclass(frozen=True, slots=True)
class LevelConfig:
    id: int
    title: str
    description: str
    objective: str
    time_limit: int
    # Advisory pass mark for the level score; completion is driven by problem_count.
    passing_score: int
    # Correct answers needed in one session to complete the level.
    problem_count: int
    problem_generator: Callable[[int], Problem]


LEVELS: tuple[LevelConfig, ...] = (
    LevelConfig(
        id=1,
        title="Sharing & Improper Fractions",
        description="Learn to share items equally and understand mixed numbers",
        objective="Share items equally among friends and express as mixed numbers",
        time_limit=90,
        passing_score=40,
        problem_count=5,
        problem_generator=generate_level1,
    ),
    LevelConfig(
        id=2,
        title="Fraction Addition & Subtraction",
        description="Add and subtract fractions with visual models",
        objective="Add and subtract fractions using common denominators",
        time_limit=90,
        passing_score=50,
        problem_count=5,
        problem_generator=generate_level2,
    ),
    LevelConfig(
        id=3,
        title="Equivalent Fractions & Simplification",
        description="Recognize equivalent fractions and simplify",
        objective="Simplify fractions and identify equivalent forms",
        time_limit=75,
        passing_score=40,
        problem_count=5,
        problem_generator=generate_level3,
    ),
    LevelConfig(
        id=4,
        title="Mixed Numbers & Conversion",
        description="Convert between improper fractions and mixed numbers",
        objective="Master conversion between fraction forms",
        time_limit=90,
        passing_score=50,
        problem_count=5,
        problem_generator=generate_level4,
    ),
    LevelConfig(
        id=5,
        title="Applied Word Problems",
        description="Solve real-world problems using fractions",
        objective="Apply fraction skills to practical scenarios",
        time_limit=120,
        passing_score=60,
        problem_count=5,
        problem_generator=generate_level5,
    ),
)


def get_level(level_id: int, levels: tuple[LevelConfig, ...] = LEVELS) -> LevelConfig:
    for cfg in levels:
        if cfg.id == level_id:
            return cfg
    raise UnknownLevelError(level_id)


def level_ids(levels: tuple[LevelConfig, ...] = LEVELS) -> tuple[int, ...]:
    return tuple(cfg.id for cfg in levels)
