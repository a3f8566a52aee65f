from __future__ import annotations

from enum import StrEnum
from typing import Protocol


class NotificationVariant(StrEnum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class AudioPort(Protocol):
    """Named audio intents. The engine asks; the implementation decides how to sound."""

    def set_enabled(self, enabled: bool) -> None: ...
    def play_correct(self) -> None: ...
    def play_incorrect(self) -> None: ...
    def play_level_complete(self) -> None: ...
    def play_button_click(self) -> None: ...
    def play_hint(self) -> None: ...
    def play_time_warning(self) -> None: ...
    def play_game_start(self) -> None: ...
    def start_music(self) -> None: ...
    def stop_music(self) -> None: ...


class NotificationPort(Protocol):
    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> None: ...


class NullAudio:
    def set_enabled(self, enabled: bool) -> None:
        pass

    def play_correct(self) -> None:
        pass

    def play_incorrect(self) -> None:
        pass

    def play_level_complete(self) -> None:
        pass

    def play_button_click(self) -> None:
        pass

    def play_hint(self) -> None:
        pass

    def play_time_warning(self) -> None:
        pass

    def play_game_start(self) -> None:
        pass

    def start_music(self) -> None:
        pass

    def stop_music(self) -> None:
        pass


class NullNotifications:
    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> None:
        pass
