"""
Defense rolls for the target of an attack and for a Guardian.

Once the attack pool has been mitigated and modified, the defender rolls
one die per surviving hit and crit, plus bonus dice from Danger Sense and
Impervious. A Guardian that absorbed hits makes its own, smaller roll with
its own dice and none of those bonuses. Pierce is deliberately not applied
here: the engine applies it once, to the combined blocks of both rolls.
"""

from __future__ import annotations

from math import inf
from random import Random

from swl.dice import reroll, roll_defense
from swl.profiles import AttackerProfile, DefenderProfile, GuardianProfile
from swl.records import DefenseRecord, RolledDie, count
from swl.types import Context, ranged


def danger_sense_bonus(defender: DefenderProfile) -> int:
    """Extra dice from Danger Sense X: one per suppression token, up to X."""
    if not defender.suppression:
        return 0
    return min(defender.suppression, defender.danger_sense)


def impervious_bonus(attacker: AttackerProfile, defender: DefenderProfile, pierce: int, makashi: bool) -> int:
    """Extra dice from Impervious: as many as the attack's total Pierce.

    Switched off when the attacker ignores it, when Pierce can't matter
    because the defender is immune to it, and by Makashi Mastery.
    """
    if not defender.impervious or attacker.ignore_impervious or makashi:
        return 0
    if defender.immune_pierce:
        return 0
    return pierce


def deflecting(attacker: AttackerProfile, defender: DefenderProfile, context: Context) -> bool:
    """Whether Deflect is live: ranged attacks only, and nothing at all if
    the attacker ignores Deflect."""
    return defender.deflect and ranged(context) and not attacker.ignore_deflect


def surge_capacity(attacker: AttackerProfile, defender: DefenderProfile, context: Context, dodge_spent: bool) -> float:
    """How many defense surges the defender can turn into blocks."""
    if defender.surge == "block" or deflecting(attacker, defender, context):
        return inf
    if (defender.block and dodge_spent) or defender.engaged_block:
        return inf
    return defender.surge_tokens


def _convert(dice: list[RolledDie], limit: float) -> int:
    """Turn up to ``limit`` surges into blocks; return how many changed."""
    converted = 0
    for d in dice:
        if converted >= limit:
            break
        if d.face == "surge":
            d.face = "block"
            converted += 1
    return converted


def roll_defender(n: int, attacker: AttackerProfile, defender: DefenderProfile, context: Context,
                  dodge_spent: bool, rng: Random) -> DefenseRecord:
    """Roll the main target's defense dice.

    Soresu Mastery rerolls the whole pool against ranged attacks; failing
    that, Uncanny Luck X rerolls up to X dice, blanks first and then any
    surges that won't convert. Never both, since a die can only be rerolled
    once. Surges are counted before conversion because Deflect's reflected
    wounds depend on them.
    """
    dice = roll_defense(n, defender.die, rng)
    rec = DefenseRecord(target="defender", dice=dice)
    capacity = surge_capacity(attacker, defender, context, dodge_spent)

    if defender.soresu_mastery and ranged(context) and dice:
        for d in dice:
            reroll(d, rng, defense=True)
        rec.reroll = "Soresu Mastery"
    elif defender.uncanny_luck:
        blanks = [d for d in dice if d.face == "blank"]
        surges = [d for d in dice if d.face == "surge"]
        excess = [] if capacity >= len(surges) else surges[int(capacity):]
        chosen = (blanks + excess)[:defender.uncanny_luck]
        for d in chosen:
            reroll(d, rng, defense=True)
        if chosen:
            rec.reroll = f"Uncanny Luck {defender.uncanny_luck}"

    rec.surges = count(dice, "surge")
    _convert(dice, capacity)
    rec.blocks = count(dice, "block")

    if deflecting(attacker, defender, context) and not attacker.immune_deflect and rec.surges:
        rec.reflected = rec.surges if defender.deflect_each_surge else 1
    return rec


def roll_guardian(hits: int, attacker: AttackerProfile, guardian: GuardianProfile, rng: Random) -> DefenseRecord:
    """Resolve the Guardian's own defense roll against the hits it absorbed.

    The Guardian gets no suppression or Impervious dice. With Soresu
    Mastery it spends one of its dodge tokens to reroll everything when
    the roll has a die that won't block. Its Deflect reflects exactly one
    wound if any surge came up, checked before surges convert.
    """
    dice = roll_defense(hits, guardian.die, rng)
    rec = DefenseRecord(target="guardian", dice=dice)
    deflect = guardian.deflect and not attacker.ignore_deflect
    capacity = inf if guardian.surge == "block" or deflect else 0

    wasted = any(d.face == "blank" or (d.face == "surge" and not capacity) for d in dice)
    if guardian.soresu_mastery and guardian.dodge and wasted:
        for d in dice:
            reroll(d, rng, defense=True)
        rec.reroll = "Soresu Mastery"

    rec.surges = count(dice, "surge")
    if deflect and not attacker.immune_deflect and rec.surges:
        rec.reflected = 1
    _convert(dice, capacity)
    rec.blocks = count(dice, "block")
    return rec
