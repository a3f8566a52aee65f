"""Pygame UI shell for Fraction Quest.

Screens: main menu -> level select -> play screen -> level results, plus a
settings menu.  All rules (problem generation, grading, scoring, timers,
unlocking) live in ``engine.GameEngine``; this module only renders the
engine's state snapshot and turns key presses into engine operations.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pygame

from .analytics import AnalyticsSink, LoggingAnalyticsSink, SqliteAnalyticsSink
from .audio import PygameAudio
from .clock import RealClock
from .engine import GameEngine
from .fraction_math import format_answer
from .levels import get_level
from .ports import AudioPort, NotificationVariant, NullAudio
from .progression import Difficulty
from .results import LevelStatus, format_clock, format_time, performance_rating, summarize_game, summarize_level

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

DISABLE_AUDIO_ENV = "FRACTION_QUEST_DISABLE_AUDIO"
ANALYTICS_DB_ENV = "FRACTION_QUEST_ANALYTICS_DB"

# Presentation pause between a graded answer and the next problem.
NEXT_PROBLEM_DELAY_MS = 1500
TOAST_MS = 1800

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
GOOD = (150, 225, 160)
BAD = (235, 150, 150)
ACCENT = (250, 210, 110)

_ANSWER_CHARS = set("0123456789/- ")


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


@dataclass(frozen=True, slots=True)
class _Toast:
    title: str
    description: str
    variant: NotificationVariant
    expires_at_ms: int


class ToastNotifications:
    """``NotificationPort`` that stacks short-lived toasts over the current screen."""

    def __init__(self) -> None:
        self._toasts: list[_Toast] = []

    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> None:
        expires = pygame.time.get_ticks() + TOAST_MS
        self._toasts.append(_Toast(title, description, variant, expires))
        del self._toasts[:-3]

    def render(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        now = pygame.time.get_ticks()
        self._toasts = [t for t in self._toasts if t.expires_at_ms > now]
        w, _ = surface.get_size()
        y = 16
        for toast in self._toasts:
            color = BAD if toast.variant is NotificationVariant.DESTRUCTIVE else GOOD
            text = font.render(f"{toast.title}  {toast.description}".strip(), True, (14, 26, 74))
            rect = pygame.Rect(0, 0, text.get_width() + 24, text.get_height() + 12)
            rect.topright = (w - 16, y)
            pygame.draw.rect(surface, color, rect)
            surface.blit(text, (rect.x + 12, rect.y + 6))
            y += rect.h + 8


class App:
    def __init__(
        self,
        surface: pygame.Surface,
        font: pygame.font.Font,
        *,
        engine: GameEngine,
        toasts: ToastNotifications,
    ) -> None:
        self._surface = surface
        self._font = font
        self._engine = engine
        self._toasts = toasts
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def engine(self) -> GameEngine:
        return self._engine

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        self._engine.update()
        if not self._screens:
            return
        self._screens[-1].render(self._surface)
        self._toasts.render(self._surface, self._font)


def _blit_lines(surface: pygame.Surface, font: pygame.font.Font, lines: list[tuple[str, tuple[int, int, int]]], *, x: int, y: int, gap: int = 8) -> int:
    for text, color in lines:
        if text:
            surf = font.render(text, True, color)
            surface.blit(surf, (x, y))
            y += surf.get_height() + gap
        else:
            y += font.get_height() // 2
    return y


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 48)
        self._item_font = pygame.font.Font(None, 34)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if self._items:
            self._selected = (self._selected + delta) % len(self._items)

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)
        title = self._title_font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, title.get_rect(center=(w // 2, 60)))

        y = 130
        for idx, item in enumerate(self._items):
            selected = idx == self._selected
            row = pygame.Rect(w // 2 - 220, y, 440, 42)
            pygame.draw.rect(surface, (244, 248, 255) if selected else PANEL_BG, row)
            color = (14, 26, 74) if selected else TEXT_MAIN
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))
            y += 52

        foot = self._hint_font.render("Up/Down: Move  |  Enter: Select  |  Esc: Back", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 14)))


class LevelSelectScreen:
    def __init__(self, app: App) -> None:
        self._app = app
        self._selected = 0
        self._title_font = pygame.font.Font(None, 48)
        self._small_font = pygame.font.Font(None, 24)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        engine = self._app.engine
        count = len(engine.levels)
        if event.key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % count
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % count
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            level_id = engine.levels[self._selected].id
            if engine.select_level(level_id):
                self._app.push(PlayScreen(self._app, level_id))
            else:
                self._app.push(_LockedNotice(self._app, level_id))
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            engine.end_game()
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)
        state = self._app.engine.get_state()
        title = self._title_font.render("Choose a Level", True, TEXT_MAIN)
        surface.blit(title, title.get_rect(center=(w // 2, 44)))

        score = self._small_font.render(f"Total score: {state.score}", True, TEXT_MUTED)
        surface.blit(score, (40, 28))

        y = 90
        for idx, summary in enumerate(summarize_game(state, self._app.engine.levels)):
            cfg = get_level(summary.level_id, self._app.engine.levels)
            selected = idx == self._selected
            row = pygame.Rect(40, y, w - 80, 72)
            pygame.draw.rect(surface, (244, 248, 255) if selected else PANEL_BG, row)
            main = (14, 26, 74) if selected else TEXT_MAIN
            muted = (70, 80, 120) if selected else TEXT_MUTED

            if summary.status is LevelStatus.LOCKED:
                badge = "LOCKED"
            elif summary.status is LevelStatus.COMPLETED:
                badge = "*" * summary.stars + "  Play Again"
            else:
                badge = "Start Level"
            head = self._app.font.render(f"{cfg.id}. {cfg.title}", True, main)
            surface.blit(head, (row.x + 14, row.y + 8))
            meta = self._small_font.render(
                f"{cfg.description}  |  {format_clock(cfg.time_limit)}  |  {cfg.problem_count} problems",
                True,
                muted,
            )
            surface.blit(meta, (row.x + 14, row.y + 44))
            tag = self._small_font.render(badge, True, main)
            surface.blit(tag, tag.get_rect(topright=(row.right - 14, row.y + 12)))
            y += 82

        foot = self._small_font.render("Enter: Play  |  Esc: End game", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))


class _LockedNotice:
    def __init__(self, app: App, level_id: int) -> None:
        self._app = app
        self._level_id = level_id

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        _blit_lines(
            surface,
            self._app.font,
            [
                (f"Level {self._level_id} is locked.", TEXT_MAIN),
                ("Complete the previous level to unlock it.", TEXT_MUTED),
                ("", TEXT_MUTED),
                ("Press any key to go back.", TEXT_MUTED),
            ],
            x=40,
            y=60,
        )


class PlayScreen:
    def __init__(self, app: App, level_id: int) -> None:
        self._app = app
        self._level_id = level_id
        self._input = ""
        self._feedback: tuple[str, tuple[int, int, int]] | None = None
        self._next_problem_at_ms: int | None = None
        self._big_font = pygame.font.Font(None, 44)
        self._small_font = pygame.font.Font(None, 26)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        engine = self._app.engine
        if event.key == pygame.K_ESCAPE:
            engine.select_level(0)
            self._app.pop()
            return
        if self._next_problem_at_ms is not None:
            return

        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit()
        elif event.key == pygame.K_BACKSPACE:
            self._input = self._input[:-1]
        elif event.key == pygame.K_TAB:
            engine.use_hint()
        elif event.key == pygame.K_F2:
            engine.next_problem()
            self._input = ""
        elif event.unicode and event.unicode in _ANSWER_CHARS and len(self._input) < 24:
            self._input += event.unicode

    def _submit(self) -> None:
        if not self._input.strip():
            return
        result = self._app.engine.submit_answer(self._input)
        if result is None:
            return
        problem = self._app.engine.get_state().current_problem
        if result:
            self._feedback = ("Correct!", GOOD)
        elif problem is not None:
            self._feedback = (f"Not quite. Answer: {format_answer(problem.correct_answer)}", BAD)
        self._next_problem_at_ms = pygame.time.get_ticks() + NEXT_PROBLEM_DELAY_MS

    def _advance(self) -> None:
        engine = self._app.engine
        if self._next_problem_at_ms is None or pygame.time.get_ticks() < self._next_problem_at_ms:
            return
        self._next_problem_at_ms = None
        self._feedback = None
        self._input = ""
        if engine.get_state().progress_for(self._level_id).completed:
            self._app.pop()
            self._app.push(LevelResultsScreen(self._app, self._level_id))
            return
        engine.next_problem()

    def render(self, surface: pygame.Surface) -> None:
        self._advance()
        engine = self._app.engine
        state = engine.get_state()
        cfg = get_level(self._level_id, engine.levels)
        progress = state.progress_for(self._level_id)
        w, h = surface.get_size()
        surface.fill(BG)

        header = self._small_font.render(
            f"Level {cfg.id}: {cfg.title}   Score {state.score}   "
            f"Correct {progress.correct_answers}/{cfg.problem_count}",
            True,
            TEXT_MUTED,
        )
        surface.blit(header, (30, 20))
        clock_color = BAD if state.time_remaining <= 10 else TEXT_MAIN
        timer = self._big_font.render(format_clock(state.time_remaining), True, clock_color)
        surface.blit(timer, timer.get_rect(topright=(w - 30, 14)))

        problem = state.current_problem
        if problem is None:
            _blit_lines(surface, self._app.font, [("Loading problem...", TEXT_MUTED)], x=30, y=90)
            return

        lines = _wrap(problem.question, self._app.font, w - 60)
        y = _blit_lines(surface, self._app.font, [(line, TEXT_MAIN) for line in lines], x=30, y=80)

        box = pygame.Rect(30, y + 16, 360, 52)
        pygame.draw.rect(surface, PANEL_BG, box)
        pygame.draw.rect(surface, TEXT_MUTED, box, 2)
        typed = self._big_font.render(self._input or " ", True, ACCENT)
        surface.blit(typed, (box.x + 12, box.y + 10))
        y = box.bottom + 14

        if self._feedback is not None:
            y = _blit_lines(surface, self._app.font, [self._feedback], x=30, y=y)

        hints = [(f"Hint {idx + 1}: {hint}", ACCENT) for idx, hint in enumerate(engine.revealed_hints())]
        if hints:
            _blit_lines(surface, self._small_font, hints, x=30, y=y + 10, gap=6)

        foot = self._small_font.render(
            "Type e.g. 3/4 or 1 1/2  |  Enter: Submit  |  Tab: Hint  |  F2: Skip  |  Esc: Levels",
            True,
            TEXT_MUTED,
        )
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))


class LevelResultsScreen:
    def __init__(self, app: App, level_id: int) -> None:
        self._app = app
        self._level_id = level_id

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (
            pygame.K_RETURN,
            pygame.K_KP_ENTER,
            pygame.K_SPACE,
            pygame.K_ESCAPE,
        ):
            self._app.engine.select_level(0)
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        engine = self._app.engine
        summary = summarize_level(engine.get_state(), self._level_id, engine.levels)
        rating, stars = performance_rating(summary.accuracy)
        pass_line = "Pass mark reached" if summary.passed else f"Pass mark is {summary.passing_score} points"
        _blit_lines(
            surface,
            self._app.font,
            [
                (f"Level {summary.level_id} Complete!", TEXT_MAIN),
                (f"{rating}  {'*' * stars}", ACCENT),
                ("", TEXT_MUTED),
                (f"Level score: {summary.score}", TEXT_MAIN),
                (f"Accuracy: {round(summary.accuracy * 100)}%", TEXT_MAIN),
                (f"Time: {format_time(summary.time_spent)}", TEXT_MAIN),
                (pass_line, TEXT_MUTED),
                ("", TEXT_MUTED),
                ("Press Enter to return to level select", TEXT_MUTED),
            ],
            x=40,
            y=50,
        )


def _wrap(text: str, font: pygame.font.Font, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _build_settings_menu(app: App) -> MenuScreen:
    engine = app.engine
    items: list[MenuItem] = []
    menu = MenuScreen(app, "Settings", items)

    def refresh() -> None:
        s = engine.get_state().game_settings
        items[:] = [
            MenuItem(f"Sound: {'On' if s.sound_enabled else 'Off'}", lambda: toggle("sound_enabled")),
            MenuItem(f"Music: {'On' if s.music_enabled else 'Off'}", lambda: toggle("music_enabled")),
            MenuItem(f"Hints: {'On' if s.hints_enabled else 'Off'}", lambda: toggle("hints_enabled")),
            MenuItem(f"Difficulty: {s.difficulty.value.title()}", cycle_difficulty),
            MenuItem("Back", app.pop),
        ]

    def toggle(name: str) -> None:
        current = getattr(engine.get_state().game_settings, name)
        engine.update_settings(**{name: not current})
        refresh()

    def cycle_difficulty() -> None:
        order = list(Difficulty)
        current = engine.get_state().game_settings.difficulty
        engine.update_settings(difficulty=order[(order.index(current) + 1) % len(order)])
        refresh()

    refresh()
    return menu


def _build_audio() -> AudioPort:
    if os.environ.get(DISABLE_AUDIO_ENV, "0") == "1":
        return NullAudio()
    if os.environ.get("SDL_AUDIODRIVER", "").strip().lower() == "dummy":
        # Keep automated/headless runs silent and stable.
        return NullAudio()
    return PygameAudio()


def _build_analytics() -> AnalyticsSink:
    db_path = os.environ.get(ANALYTICS_DB_ENV, "").strip()
    if not db_path:
        return LoggingAnalyticsSink()
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return SqliteAnalyticsSink(path)


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()

    pygame.display.set_caption("Fraction Quest")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 34)
    clock = pygame.time.Clock()

    toasts = ToastNotifications()
    analytics = _build_analytics()
    engine = GameEngine(
        clock=RealClock(),
        audio=_build_audio(),
        notifications=toasts,
        analytics=analytics,
    )
    app = App(surface=surface, font=font, engine=engine, toasts=toasts)

    def start_game() -> None:
        engine.start_game()
        app.push(LevelSelectScreen(app))

    main_items = [
        MenuItem("Start Game", start_game),
        MenuItem("Settings", lambda: app.push(_build_settings_menu(app))),
        MenuItem("Quit", app.quit),
    ]
    app.push(MenuScreen(app, "Fraction Quest", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        if engine.get_state().is_playing:
            engine.end_game()
        if isinstance(analytics, SqliteAnalyticsSink):
            analytics.close()
        pygame.quit()

    return 0
