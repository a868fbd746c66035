"""
Dice primitives for attack and defense pools.

Attack dice are eight-sided and come in three colors (white, black, red)
with progressively better faces; defense dice are six-sided and come in
white and red. Every die is drawn independently from its color's face
table in ``swl.data``, using whatever ``random.Random`` stream the caller
supplies so that a resolution is reproducible for a fixed seed.
"""

from __future__ import annotations

from random import Random

from swl.data import ATTACK_FACES, DEFENSE_FACES
from swl.records import RolledDie
from swl.types import ATTACK_COLORS, AttackColor, Color, DefenseColor, Face


def faces(color: Color, defense: bool = False) -> tuple[Face, ...]:
    """Return the face table for a die color."""
    return DEFENSE_FACES[color] if defense else ATTACK_FACES[color]


def draw(color: Color, rng: Random, defense: bool = False) -> Face:
    """Roll a single die of the given color and return its face."""
    return rng.choice(faces(color, defense))


def probability(color: Color, wanted: tuple[Face, ...], defense: bool = False) -> float:
    """Chance that a single die of this color shows one of the wanted faces."""
    table = faces(color, defense)
    return sum(table.count(f) for f in wanted) / len(table)


def rank(color: AttackColor) -> int:
    """Color rank of an attack die: white 0, black 1, red 2."""
    return ATTACK_COLORS.index(color)


def form_pool(red: int, black: int, white: int, multiplier: int = 1) -> list[AttackColor]:
    """List the colors of an attack pool, best dice first.

    The multiplier scales every count before anything else happens (Spray
    multiplies a weapon's dice by the miniatures the attacker can see).
    """
    return (
        ["red"] * (red * multiplier)
        + ["black"] * (black * multiplier)
        + ["white"] * (white * multiplier)
    )


def shift_colors(colors: list[AttackColor], upgrade: int = 0, downgrade: int = 0) -> list[AttackColor]:
    """Apply upgrades and downgrades to an attack pool.

    Each upgrade moves the lowest die that can still improve one step up
    (white→black→red); each downgrade moves the highest die that can still
    drop one step down. Once every die is red, further upgrades do
    nothing, and likewise for downgrades once every die is white.
    """
    ranks = [rank(c) for c in colors]
    top = len(ATTACK_COLORS) - 1
    for _ in range(upgrade):
        eligible = [i for i, r in enumerate(ranks) if r < top]
        if not eligible:
            break
        i = min(eligible, key=lambda i: ranks[i])
        ranks[i] += 1
    for _ in range(downgrade):
        eligible = [i for i, r in enumerate(ranks) if r > 0]
        if not eligible:
            break
        i = max(eligible, key=lambda i: ranks[i])
        ranks[i] -= 1
    return [ATTACK_COLORS[r] for r in ranks]


def roll_attack(colors: list[AttackColor], rng: Random) -> list[RolledDie]:
    """Roll one attack die per color, preserving the color on each die."""
    return [RolledDie(color=c, face=draw(c, rng)) for c in colors]


def roll_defense(n: int, color: DefenseColor, rng: Random) -> list[RolledDie]:
    """Roll n defense dice of a single color."""
    return [RolledDie(color=color, face=draw(color, rng, defense=True)) for _ in range(max(0, n))]


def reroll(die: RolledDie, rng: Random, defense: bool = False) -> RolledDie:
    """Reroll a die in place using its own color's table."""
    die.face = draw(die.color, rng, defense)
    die.rerolled = True
    return die
