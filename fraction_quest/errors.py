from __future__ import annotations


class FractionQuestError(Exception):
    """Base class for domain errors raised by the core."""


class ParseError(FractionQuestError, ValueError):
    """Answer text matches neither accepted grammar."""


class InvalidFractionError(FractionQuestError, ZeroDivisionError):
    """A zero denominator reached an arithmetic operation."""


class UnknownLevelError(FractionQuestError, LookupError):
    def __init__(self, level_id: int) -> None:
        super().__init__(f"no level with id {level_id}")
        self.level_id = level_id


class LockedLevelError(FractionQuestError):
    def __init__(self, level_id: int) -> None:
        super().__init__(f"level {level_id} is locked")
        self.level_id = level_id
