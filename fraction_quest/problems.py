"""Seeded problem factories for the five Fraction Quest levels.

Each ``generate_levelN(seed)`` builds a fresh ``LcgRandom`` from the seed,
draws its parameters, computes the exact answer with ``fraction_math`` and
renders the question text.  The same seed always yields an identical
``Problem``; production code seeds with wall-clock milliseconds.

Hints are always three entries ordered from the conceptual nudge to the
near-complete computation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from . import fraction_math as fm
from .fraction_math import Fraction, MixedNumber
from .rng import LcgRandom


class ProblemType(StrEnum):
    SHARE = "share"
    ADD = "add"
    SUBTRACT = "subtract"
    SIMPLIFY = "simplify"
    CONVERT = "convert"
    WORD = "word"


class Asset(StrEnum):
    LADDUS = "laddus"
    CAKE = "cake"
    PIZZA = "pizza"


@dataclass(frozen=True, slots=True)
class ShareParams:
    items: int
    friends: int


@dataclass(frozen=True, slots=True)
class ArithmeticParams:
    first: Fraction
    second: Fraction
    operation: ProblemType  # ADD or SUBTRACT


@dataclass(frozen=True, slots=True)
class SimplifyParams:
    fraction: Fraction


@dataclass(frozen=True, slots=True)
class EquivalentParams:
    base: Fraction
    options: tuple[Fraction, ...]


@dataclass(frozen=True, slots=True)
class ImproperToMixedParams:
    fraction: Fraction


@dataclass(frozen=True, slots=True)
class MixedToImproperParams:
    mixed: MixedNumber


@dataclass(frozen=True, slots=True)
class RecipeParams:
    total: Fraction
    used: Fraction


@dataclass(frozen=True, slots=True)
class PizzaShareParams:
    pizzas: int
    guests: int
    slices_per_guest: int


@dataclass(frozen=True, slots=True)
class MultiStepParams:
    first: Fraction
    second: Fraction
    third: Fraction


ProblemParams = (
    ShareParams
    | ArithmeticParams
    | SimplifyParams
    | EquivalentParams
    | ImproperToMixedParams
    | MixedToImproperParams
    | RecipeParams
    | PizzaShareParams
    | MultiStepParams
)


@dataclass(frozen=True, slots=True)
class Problem:
    id: str
    type: ProblemType
    level: int
    assets: Asset
    params: ProblemParams
    question: str
    correct_answer: Fraction | MixedNumber
    hints: tuple[str, ...]
    time_limit: int
    max_score: int


SLICES_PER_PIZZA = 8


def generate_level1(seed: int) -> Problem:
    """Sharing: N items among F friends, answered as a mixed number."""

    rng = LcgRandom(seed)
    items = rng.random_int(5, 30)
    friends = rng.random_int(2, 8)
    asset = rng.random_choice([Asset.LADDUS, Asset.CAKE])

    return Problem(
        id=f"l1_{seed}",
        type=ProblemType.SHARE,
        level=1,
        assets=asset,
        params=ShareParams(items=items, friends=friends),
        question=(
            f"Share {items} {asset.value} equally among {friends} friends. "
            "How much does each friend get?"
        ),
        correct_answer=fm.to_mixed_number(Fraction(items, friends)),
        hints=(
            "Try grouping the items into equal piles",
            "Some items might be left over - that becomes the fractional part",
            f"Divide {items} by {friends} to find each friend's share",
        ),
        time_limit=90,
        max_score=10,
    )


def generate_level2(seed: int) -> Problem:
    rng = LcgRandom(seed)
    operation = rng.random_choice([ProblemType.ADD, ProblemType.SUBTRACT])

    denom1 = rng.random_int(2, 12)
    denom2 = rng.random_int(2, 12)
    num1 = rng.random_int(1, denom1 - 1)
    num2 = rng.random_int(1, denom2 - 1)

    first = Fraction(num1, denom1)
    second = Fraction(num2, denom2)

    if operation is ProblemType.ADD:
        answer = fm.add(first, second)
        symbol = "+"
    else:
        answer = fm.subtract(first, second)
        symbol = "-"

    return Problem(
        id=f"l2_{seed}",
        type=operation,
        level=2,
        assets=Asset.CAKE,
        params=ArithmeticParams(first=first, second=second, operation=operation),
        question=f"{fm.format_fraction(first)} {symbol} {fm.format_fraction(second)} = ?",
        correct_answer=answer,
        hints=(
            "Find a common denominator for both fractions",
            f"The LCM of {denom1} and {denom2} is {fm.lcm(denom1, denom2)}",
            "Convert both fractions, then add/subtract the numerators",
        ),
        time_limit=90,
        max_score=12,
    )


def generate_level3(seed: int) -> Problem:
    rng = LcgRandom(seed)
    mode = rng.random_choice(["simplify", "equivalent"])
    if mode == "simplify":
        return _level3_simplify(rng, seed)
    return _level3_equivalent(rng, seed)


def _level3_simplify(rng: LcgRandom, seed: int) -> Problem:
    base_denom = rng.random_int(3, 12)
    base_num = rng.random_int(2, base_denom - 1)
    multiplier = rng.random_int(2, 6)

    inflated = Fraction(base_num * multiplier, base_denom * multiplier)
    g = fm.gcd(inflated.numerator, inflated.denominator)

    return Problem(
        id=f"l3_{seed}",
        type=ProblemType.SIMPLIFY,
        level=3,
        assets=Asset.PIZZA,
        params=SimplifyParams(fraction=inflated),
        # format_fraction would reduce it, so render the raw pair.
        question=f"Simplify {inflated.numerator}/{inflated.denominator}",
        correct_answer=fm.reduce(inflated),
        hints=(
            f"Find the GCD of {inflated.numerator} and {inflated.denominator}",
            f"Both numbers are divisible by {g}",
            "Divide both numerator and denominator by their GCD",
        ),
        time_limit=75,
        max_score=10,
    )


def _level3_equivalent(rng: LcgRandom, seed: int) -> Problem:
    base = Fraction(rng.random_int(1, 8), rng.random_int(2, 9))
    options = tuple(fm.generate_equivalents(base, 4))
    answer = rng.random_choice(options)

    return Problem(
        id=f"l3_{seed}",
        type=ProblemType.SIMPLIFY,
        level=3,
        assets=Asset.CAKE,
        params=EquivalentParams(base=base, options=options),
        question=f"Which fraction is equivalent to {fm.format_fraction(base)}?",
        correct_answer=answer,
        hints=(
            "Equivalent fractions represent the same value",
            "Multiply or divide both parts by the same number",
            f"Try multiplying {base.numerator} and {base.denominator} by the same number",
        ),
        time_limit=75,
        max_score=10,
    )


def generate_level4(seed: int) -> Problem:
    rng = LcgRandom(seed)
    mode = rng.random_choice(["improper_to_mixed", "mixed_to_improper"])

    if mode == "improper_to_mixed":
        denominator = rng.random_int(2, 8)
        numerator = rng.random_int(denominator + 1, denominator * 6)
        improper = Fraction(numerator, denominator)
        return Problem(
            id=f"l4_{seed}",
            type=ProblemType.CONVERT,
            level=4,
            assets=Asset.LADDUS,
            params=ImproperToMixedParams(fraction=improper),
            question=f"Convert {fm.format_fraction(improper)} to a mixed number",
            correct_answer=fm.to_mixed_number(improper),
            hints=(
                f"Divide {numerator} by {denominator}",
                "The quotient becomes the whole number part",
                "The remainder becomes the new numerator",
            ),
            time_limit=90,
            max_score=12,
        )

    whole = rng.random_int(1, 8)
    denominator = rng.random_int(2, 8)
    numerator = rng.random_int(1, denominator - 1)
    mixed = MixedNumber(whole, Fraction(numerator, denominator))
    return Problem(
        id=f"l4_{seed}",
        type=ProblemType.CONVERT,
        level=4,
        assets=Asset.CAKE,
        params=MixedToImproperParams(mixed=mixed),
        question=f"Convert {fm.format_mixed_number(mixed)} to an improper fraction",
        correct_answer=fm.to_improper_fraction(mixed),
        hints=(
            f"Multiply the whole number by the denominator: {whole} × {denominator}",
            f"Add the numerator: ({whole} × {denominator}) + {numerator}",
            "Keep the same denominator",
        ),
        time_limit=90,
        max_score=12,
    )


def generate_level5(seed: int) -> Problem:
    rng = LcgRandom(seed)
    mode = rng.random_choice(["recipe", "sharing", "multi_step"])
    if mode == "recipe":
        return _level5_recipe(rng, seed)
    if mode == "sharing":
        return _level5_pizza_share(rng, seed)
    return _level5_multi_step(rng, seed)


def _level5_recipe(rng: LcgRandom, seed: int) -> Problem:
    total_quarters = rng.random_int(3, 8)
    used_quarters = rng.random_int(1, total_quarters - 1)
    total = Fraction(total_quarters, 4)
    used = Fraction(used_quarters, 4)
    total_s = fm.format_fraction(total)
    used_s = fm.format_fraction(used)

    return Problem(
        id=f"l5_{seed}",
        type=ProblemType.WORD,
        level=5,
        assets=Asset.CAKE,
        params=RecipeParams(total=total, used=used),
        question=(
            f"A recipe requires {total_s} cups of sugar. You have already used "
            f"{used_s} cups. How much more sugar do you need?"
        ),
        correct_answer=fm.subtract(total, used),
        hints=(
            "This is a subtraction problem",
            f"Subtract {used_s} from {total_s}",
            "Find a common denominator if needed",
        ),
        time_limit=120,
        max_score=15,
    )


def _level5_pizza_share(rng: LcgRandom, seed: int) -> Problem:
    pizzas = rng.random_int(2, 4)
    guests = rng.random_int(3, 6)
    total_slices = pizzas * SLICES_PER_PIZZA
    # Cap the portion so the guests never eat more than there is.
    slices_per_guest = rng.random_int(2, min(4, total_slices // guests))

    used_slices = guests * slices_per_guest
    remaining = total_slices - used_slices

    return Problem(
        id=f"l5_{seed}",
        type=ProblemType.WORD,
        level=5,
        assets=Asset.PIZZA,
        params=PizzaShareParams(pizzas=pizzas, guests=guests, slices_per_guest=slices_per_guest),
        question=(
            f"You have {pizzas} pizzas cut into eighths. You give {slices_per_guest}/8 of a "
            f"pizza to each of {guests} guests. How much pizza remains? "
            "(Express as a fraction of one whole pizza)"
        ),
        correct_answer=Fraction(remaining, SLICES_PER_PIZZA),
        hints=(
            f"Total slices: {pizzas} × 8 = {total_slices}",
            f"Slices given away: {guests} × {slices_per_guest} = {used_slices}",
            f"Remaining slices: {total_slices} - {used_slices} = {remaining}",
        ),
        time_limit=120,
        max_score=15,
    )


def _level5_multi_step(rng: LcgRandom, seed: int) -> Problem:
    first = Fraction(rng.random_int(1, 5), 6)
    second = Fraction(rng.random_int(1, 7), 8)
    third = Fraction(1, 4)

    step1 = fm.add(first, second)
    first_s = fm.format_fraction(first)
    second_s = fm.format_fraction(second)
    third_s = fm.format_fraction(third)
    step1_s = fm.format_fraction(step1)

    return Problem(
        id=f"l5_{seed}",
        type=ProblemType.WORD,
        level=5,
        assets=Asset.CAKE,
        params=MultiStepParams(first=first, second=second, third=third),
        question=f"Calculate: ({first_s} + {second_s}) - {third_s}",
        correct_answer=fm.subtract(step1, third),
        hints=(
            "Solve step by step: first add the fractions in parentheses",
            f"{first_s} + {second_s} = {step1_s}",
            f"Then subtract: {step1_s} - {third_s}",
        ),
        time_limit=120,
        max_score=15,
    )


PROBLEM_GENERATORS: dict[int, Callable[[int], Problem]] = {
    1: generate_level1,
    2: generate_level2,
    3: generate_level3,
    4: generate_level4,
    5: generate_level5,
}
