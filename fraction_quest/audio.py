"""Pygame tone synthesizer implementing ``AudioPort``.

This stays outside the core. Every cue is a short procedurally rendered
sine/square melody built once at start-up; nothing is loaded from disk.  If
the mixer cannot be initialised (no audio device, dummy SDL driver) every
intent becomes a no-op.
"""

from __future__ import annotations

import logging
import math
from array import array

import pygame

logger = logging.getLogger(__name__)

# (frequency Hz, start offset s, duration s)
Note = tuple[float, float, float]

_CORRECT: tuple[Note, ...] = ((523.25, 0.0, 0.15), (659.25, 0.1, 0.15), (783.99, 0.2, 0.3))
_INCORRECT: tuple[Note, ...] = ((329.63, 0.0, 0.2), (293.66, 0.15, 0.3))
_LEVEL_COMPLETE: tuple[Note, ...] = tuple(
    (f, idx * 0.1, 0.4) for idx, f in enumerate((523.25, 659.25, 783.99, 1046.50))
)
_CLICK: tuple[Note, ...] = ((800.0, 0.0, 0.1),)
_HINT: tuple[Note, ...] = ((440.0, 0.0, 0.2),)
_TIME_WARNING: tuple[Note, ...] = ((1000.0, 0.0, 0.1), (1000.0, 0.2, 0.1))
_GAME_START: tuple[Note, ...] = ((261.63, 0.0, 0.5), (329.63, 0.0, 0.5), (392.00, 0.0, 0.5))
_AMBIENT: tuple[Note, ...] = tuple(
    (f, idx * 3.0, 2.0) for idx, f in enumerate((130.81, 146.83, 164.81, 174.61))
)


class PygameAudio:
    _default_rate = 22050
    _amp = 32767

    def __init__(self) -> None:
        self._available = False
        self._enabled = True
        self._rate = self._default_rate
        self._channels = 1
        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self._cue_channel: pygame.mixer.Channel | None = None
        self._music_channel: pygame.mixer.Channel | None = None

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._default_rate, size=-16, channels=1, buffer=512)
            # pygame.init() may already have opened the mixer with its own format.
            self._rate, _, self._channels = pygame.mixer.get_init()
            self._sounds = {
                "correct": self._build_melody(_CORRECT, gain=0.30),
                "incorrect": self._build_melody(_INCORRECT, gain=0.22, square=True),
                "level_complete": self._build_melody(_LEVEL_COMPLETE, gain=0.30),
                "click": self._build_melody(_CLICK, gain=0.18, square=True),
                "hint": self._build_melody(_HINT, gain=0.25),
                "time_warning": self._build_melody(_TIME_WARNING, gain=0.30),
                "game_start": self._build_melody(_GAME_START, gain=0.20),
                "ambient": self._build_melody(_AMBIENT, gain=0.08, tail_s=1.0),
            }
            self._cue_channel = pygame.mixer.Channel(0)
            self._music_channel = pygame.mixer.Channel(1)
            self._available = True
        except pygame.error as e:
            logger.info("Audio unavailable: %s", e)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        if not self._enabled:
            self.stop_music()
            if self._cue_channel is not None:
                self._cue_channel.stop()

    def play_correct(self) -> None:
        self._play("correct")

    def play_incorrect(self) -> None:
        self._play("incorrect")

    def play_level_complete(self) -> None:
        self._play("level_complete")

    def play_button_click(self) -> None:
        self._play("click")

    def play_hint(self) -> None:
        self._play("hint")

    def play_time_warning(self) -> None:
        self._play("time_warning")

    def play_game_start(self) -> None:
        self._play("game_start")

    def start_music(self) -> None:
        if not (self._available and self._enabled) or self._music_channel is None:
            return
        if self._music_channel.get_busy():
            return
        self._music_channel.play(self._sounds["ambient"], loops=-1)

    def stop_music(self) -> None:
        if self._music_channel is not None:
            self._music_channel.stop()

    def _play(self, name: str) -> None:
        if not (self._available and self._enabled) or self._cue_channel is None:
            return
        self._cue_channel.play(self._sounds[name])

    def _build_melody(
        self,
        notes: tuple[Note, ...],
        *,
        gain: float,
        square: bool = False,
        tail_s: float = 0.0,
    ) -> pygame.mixer.Sound:
        end_s = max(start + dur for _, start, dur in notes) + tail_s
        total = max(1, int(self._rate * end_s))
        mix = [0.0] * total
        for freq, start, dur in notes:
            offset = int(self._rate * start)
            for idx, sample in enumerate(self._render_tone(freq, dur, square=square)):
                if offset + idx < total:
                    mix[offset + idx] += sample
        pcm = array("h")
        for s in mix:
            value = int(max(-1.0, min(1.0, s * gain)) * self._amp)
            pcm.extend([value] * self._channels)
        return pygame.mixer.Sound(buffer=pcm.tobytes())

    def _render_tone(self, frequency_hz: float, duration_s: float, *, square: bool) -> list[float]:
        sample_count = max(1, int(self._rate * duration_s))
        fade_n = max(1, int(self._rate * 0.008))
        out: list[float] = []
        for idx in range(sample_count):
            envelope = 1.0
            if idx < fade_n:
                envelope = idx / float(fade_n)
            tail = sample_count - idx - 1
            if tail < fade_n:
                envelope = min(envelope, tail / float(fade_n))
            phase = (2.0 * math.pi * float(frequency_hz) * idx) / float(self._rate)
            wave = math.sin(phase)
            if square:
                wave = 1.0 if wave >= 0.0 else -1.0
            out.append(wave * max(0.0, envelope))
        return out
