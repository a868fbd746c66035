"""Structured resolution records for the attack engine.

These dataclasses capture the full context of one attack: the dice after
every stage, how tokens were spent, the defense rolls of the target and any
Guardian. That way the text renderer (and any caller aggregating many
outcomes) can see exactly why a result came out the way it did.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from swl.types import Color, Context, Face


@dataclass
class RolledDie:
    """A single die in a pool.

    Rerolls and conversions only ever change ``face``; the color stays
    put so that a reroll draws from the right table.
    """

    color: Color
    face: Face

    rerolled: bool = False
    """Whether this die has already been rerolled during the current
    roll. A die rerolled once can't be rerolled again."""


@dataclass
class StageRecord:
    """Snapshot of the attack pool at the end of one pipeline stage."""

    stage: int
    """1-9, in pipeline order."""

    name: str
    dice: list[RolledDie] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    """Human-readable descriptions of what happened: 'aim: rerolled 2',
    'cover 2: cancelled 1 hit', etc."""


@dataclass
class DefenseRecord:
    """Record of one defense roll, for the main target or the Guardian."""

    target: str
    """'defender' or 'guardian'."""

    dice: list[RolledDie] = field(default_factory=list)
    reroll: str = ""
    """Which effect rerolled dice, if any: 'Soresu Mastery', 'Uncanny Luck 2'."""

    surges: int = 0
    """Surges showing after rerolls but before any were converted."""

    blocks: int = 0
    reflected: int = 0


@dataclass
class ResolutionRecord:
    """Top-level record of an attack resolution."""

    context: Context
    stages: list[StageRecord] = field(default_factory=list)
    defense: DefenseRecord | None = None
    guardian: DefenseRecord | None = None

    aims_rerolled: int = 0
    aims_reserved: int = 0
    aims_converted: int = 0
    observations_spent: int = 0

    cover: int = 0
    """Effective cover rank used for the cover roll."""

    dodge_spent: int = 0
    guardian_hits: int = 0

    pierce: int = 0
    """Total Pierce before immunity: keyword + Lethal + Duelist."""

    lethal_pierce: int = 0
    duelist_pierce: int = 0
    applied_pierce: int = 0


@dataclass
class Outcome:
    """Result of one attack.

    The three wound numbers are deliberately independent: the engine can't
    decide how a player would split Pierce between the target and a
    Guardian, so it reports each at zero Pierce alongside the combined
    total with Pierce applied once to all blocks.
    """

    guardian_wounds: int = 0
    main_wounds: int = 0
    total_wounds: int = 0
    reflected_wounds: int = 0
    """Wounds the attacker suffers from the defender's Deflect / Djem So."""

    guardian_reflected_wounds: int = 0
    suppression: int = 0
    applied_pierce: int = 0
    record: ResolutionRecord | None = None


def count(dice: list[RolledDie], face: Face) -> int:
    """How many dice in the pool show the given face."""
    return sum(1 for d in dice if d.face == face)


def snapshot(dice: list[RolledDie]) -> list[RolledDie]:
    """Copy a pool so later stages can keep mutating the original."""
    return [RolledDie(d.color, d.face, d.rerolled) for d in dice]
