"""
Domain-specific type aliases for the attack resolution engine.

These aren't used for runtime type checking; they exist to make function
signatures and profile fields self-documenting. When you see a field typed
as AttackFace instead of str, you immediately know it's one of the four
faces an attack die can show, not an arbitrary string.
"""

from typing import Literal, TypeAlias

# Attack dice, ordered by color rank. Upgrading moves a die one step to the
# right, downgrading one step to the left.
AttackColor: TypeAlias = Literal["white", "black", "red"]

# Defense dice only come in two colors.
DefenseColor: TypeAlias = Literal["white", "red"]

Color: TypeAlias = AttackColor | DefenseColor

AttackFace: TypeAlias = Literal["blank", "hit", "crit", "surge"]

DefenseFace: TypeAlias = Literal["blank", "block", "surge"]

Face: TypeAlias = AttackFace | DefenseFace

# What the attacker's surge chart turns every surge into. "none" leaves
# surges for tokens and keywords to convert.
AttackSurge: TypeAlias = Literal["none", "hit", "crit"]

DefenseSurge: TypeAlias = Literal["none", "block"]

# The kind of attack being made. Determines which context-restricted
# keywords are live: "unrestricted" enables everything, "overrun" enables
# neither the ranged-only nor the melee-only rules.
Context: TypeAlias = Literal["unrestricted", "ranged", "melee", "overrun"]

# How the attacker decides between rerolling with an aim token now and
# holding it for a guaranteed Marksman conversion later.
Strategy: TypeAlias = Literal["deterministic", "expected_value"]

ATTACK_COLORS: tuple[AttackColor, ...] = ("white", "black", "red")
DEFENSE_COLORS: tuple[DefenseColor, ...] = ("white", "red")
CONTEXTS: tuple[Context, ...] = ("unrestricted", "ranged", "melee", "overrun")


def ranged(context: Context) -> bool:
    """Whether ranged-only rules (cover, Deflect, Shielded, ...) are live."""
    return context in ("unrestricted", "ranged")


def melee(context: Context) -> bool:
    """Whether melee-only rules (Duelist, Jar'Kai, Djem So, ...) are live."""
    return context in ("unrestricted", "melee")
