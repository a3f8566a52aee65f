"""Exact fraction arithmetic for the Fraction Quest exercises.

Everything in this module is a pure function over two small immutable value
types:

* ``Fraction`` - a numerator/denominator pair.  Construction never
  normalizes; reduction is an explicit operation.  A zero denominator can be
  represented but every arithmetic helper rejects it with
  ``InvalidFractionError``.
* ``MixedNumber`` - a whole part plus a fraction part.  For negative values
  the sign lives on ``whole`` (or on the fraction numerator when the whole
  part is zero), so ``-7/3`` is ``MixedNumber(-2, Fraction(1, 3))``.

Player input arrives as text and is parsed with ``parse_from_string``, which
only knows two grammars (``"3/4"`` and ``"1 1/2"``).  ``validate_answer`` is
the single entry point used for grading and never raises: anything that
cannot be parsed or evaluated is simply not correct.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import FractionQuestError, InvalidFractionError, ParseError


@dataclass(frozen=True, slots=True)
class Fraction:
    numerator: int
    denominator: int


@dataclass(frozen=True, slots=True)
class MixedNumber:
    whole: int
    fraction: Fraction


Answer = Fraction | MixedNumber | str

_MIXED_RE = re.compile(r"(-?\d+)\s+(\d+)/(\d+)", re.ASCII)
_SIMPLE_RE = re.compile(r"(-?\d+)/(\d+)", re.ASCII)


def gcd(a: int, b: int) -> int:
    """Greatest common divisor of ``|a|`` and ``|b|``; ``gcd(0, 0) == 0``."""

    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def lcm(a: int, b: int) -> int:
    g = gcd(a, b)
    if g == 0:
        return 0
    return abs(a * b) // g


def _require_denominator(f: Fraction) -> None:
    if f.denominator == 0:
        raise InvalidFractionError(f"zero denominator in {f.numerator}/0")


def reduce(f: Fraction) -> Fraction:
    """Divide both parts by their GCD and keep the denominator positive."""

    _require_denominator(f)
    g = gcd(f.numerator, f.denominator)
    numerator = f.numerator // g
    denominator = f.denominator // g
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return Fraction(numerator, denominator)


def _combine(a: Fraction, b: Fraction, sign: int) -> Fraction:
    _require_denominator(a)
    _require_denominator(b)
    common = lcm(a.denominator, b.denominator)
    left = a.numerator * (common // a.denominator)
    right = b.numerator * (common // b.denominator)
    return reduce(Fraction(left + sign * right, common))


def add(a: Fraction, b: Fraction) -> Fraction:
    return _combine(a, b, 1)


def subtract(a: Fraction, b: Fraction) -> Fraction:
    return _combine(a, b, -1)


def are_equal(a: Fraction, b: Fraction) -> bool:
    # Cross-multiplication on the raw inputs; no reduction needed.
    _require_denominator(a)
    _require_denominator(b)
    return a.numerator * b.denominator == b.numerator * a.denominator


def to_mixed_number(f: Fraction) -> MixedNumber:
    r = reduce(f)
    if r.numerator >= 0:
        whole, rem = divmod(r.numerator, r.denominator)
        return MixedNumber(whole, Fraction(rem, r.denominator))

    whole, rem = divmod(-r.numerator, r.denominator)
    if whole == 0:
        return MixedNumber(0, Fraction(-rem, r.denominator))
    return MixedNumber(-whole, Fraction(rem, r.denominator))


def to_improper_fraction(m: MixedNumber) -> Fraction:
    d = m.fraction.denominator
    if m.whole < 0:
        return Fraction(m.whole * d - m.fraction.numerator, d)
    return Fraction(m.whole * d + m.fraction.numerator, d)


def to_decimal(f: Fraction) -> float:
    _require_denominator(f)
    return f.numerator / f.denominator


def is_improper(f: Fraction) -> bool:
    return abs(f.numerator) >= abs(f.denominator)


def parse_from_string(text: str) -> Fraction | MixedNumber | None:
    """Parse ``"a/b"`` or ``"w a/b"``; return None when neither grammar matches."""

    s = text.strip()

    m = _MIXED_RE.fullmatch(s) or _SIMPLE_RE.fullmatch(s)
    if m is None:
        return None
    try:
        parts = [int(g) for g in m.groups()]
    except ValueError:
        # Digit runs past the interpreter's int-string limit.
        return None

    if len(parts) == 2:
        return Fraction(parts[0], parts[1])

    whole, numerator, denominator = parts
    if whole == 0 and m.group(1).startswith("-"):
        # "-0 1/2" keeps its sign on the fraction part.
        return MixedNumber(0, Fraction(-numerator, denominator))
    return MixedNumber(whole, Fraction(numerator, denominator))


def format_fraction(f: Fraction) -> str:
    r = reduce(f)
    if r.denominator == 1:
        return str(r.numerator)
    return f"{r.numerator}/{r.denominator}"


def format_mixed_number(m: MixedNumber) -> str:
    if m.whole == 0:
        return format_fraction(m.fraction)
    if m.fraction.numerator == 0:
        return str(m.whole)
    return f"{m.whole} {format_fraction(m.fraction)}"


def format_answer(answer: Fraction | MixedNumber) -> str:
    if isinstance(answer, MixedNumber):
        return format_mixed_number(answer)
    return format_fraction(answer)


def generate_equivalents(f: Fraction, count: int = 3) -> list[Fraction]:
    r = reduce(f)
    return [Fraction(r.numerator * k, r.denominator * k) for k in range(2, count + 2)]


def coerce_answer(answer: object) -> Fraction:
    """Normalize any answer variant to a (possibly unreduced) ``Fraction``.

    Raises ``ParseError`` for text that matches neither grammar and for values
    that are not an answer at all.
    """

    if isinstance(answer, str):
        parsed = parse_from_string(answer)
        if parsed is None:
            raise ParseError(f"cannot parse answer {answer!r}")
        answer = parsed
    if isinstance(answer, MixedNumber):
        return to_improper_fraction(answer)
    if isinstance(answer, Fraction):
        return answer
    raise ParseError(f"unsupported answer type {type(answer).__name__}")


def validate_answer(player_answer: object, correct_answer: Fraction | MixedNumber) -> bool:
    try:
        return are_equal(coerce_answer(player_answer), coerce_answer(correct_answer))
    except FractionQuestError:
        return False

