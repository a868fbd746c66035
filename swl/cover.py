"""
Cover: the terrain-derived roll that cancels hits before dodge tokens.

A defender in cover rolls one white defense die per hit. Each block cancels
a hit; in heavy cover (rank 2) surges cancel hits too. Cover only ever
cancels hits, never crits, and only protects against ranged attacks.
"""

from __future__ import annotations

from random import Random

from swl.dice import probability, roll_defense
from swl.profiles import AttackerProfile, DefenderProfile
from swl.records import RolledDie, count
from swl.types import Context, ranged

HEAVY = 2
"""Highest cover rank; also the rank at which surges cancel hits."""


def cover_rank(attacker: AttackerProfile, defender: DefenderProfile, context: Context) -> int:
    """Effective cover rank for this attack, 0-2.

    Terrain cover is improved by 1 if the defender is suppressed, by 1 if
    it has a smoke token, and by its Cover X keyword; the attacker's
    Sharpshooter X then reduces it. Blast ignores cover entirely.
    """
    if not ranged(context) or attacker.blast:
        return 0
    rank = defender.cover + defender.cover_x
    if defender.suppression:
        rank += 1
    if defender.smoke:
        rank += 1
    rank -= attacker.sharpshooter
    return max(0, min(HEAVY, rank))


def expected_cancels(hits: int, rank: int, low_profile: bool = False) -> float:
    """Average number of hits the cover roll cancels. Used by the decision
    engine to value conversions without rolling anything."""
    if not rank or not hits:
        return 0.0
    wanted = ("block", "surge") if rank >= HEAVY else ("block",)
    p = probability("white", wanted, defense=True)
    if low_profile:
        return min(hits, 1 + (hits - 1) * p)
    return hits * p


def roll_cover(hits: int, rank: int, rng: Random, low_profile: bool = False) -> tuple[int, list[RolledDie]]:
    """Roll cover against the current hits.

    Returns (cancelled, dice): the number of hits cancelled (never more
    than ``hits``) and the cover dice as rolled. Low Profile rolls one die
    fewer and adds an automatic block.
    """
    if not rank or not hits:
        return 0, []
    n = hits - 1 if low_profile else hits
    dice = roll_defense(n, "white", rng)
    blocks = count(dice, "block")
    if rank >= HEAVY:
        blocks += count(dice, "surge")
    if low_profile:
        blocks += 1
    return min(hits, blocks), dice
