"""
Heuristics for spending the attacker's limited resources.

The attacker has to decide, one aim token at a time, whether to reroll
now or hold the token for Marksman, which turns a blank into a hit or a
hit into a crit after surges are converted. A conversion is guaranteed but
worth nothing if the defender would cancel the new result anyway, while a
reroll is a gamble whose odds depend on the die's color. These functions
put numbers on both sides so the engine can pick.

None of these functions roll dice or mutate the pool; the engine applies
whatever they decide.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import inf

from swl.cover import cover_rank, expected_cancels
from swl.dice import probability, rank
from swl.profiles import AttackerProfile, DefenderProfile
from swl.records import RolledDie, count
from swl.types import AttackFace, Context, melee, ranged

AIM_REROLLS: int = 2
"""Dice rerolled per aim token, before Precise X."""

CRIT_BYPASS_SCALE: float = 1.5
"""How much more a crit is worth than a hit when the crit gets past Armor
or dodge tokens that would have cancelled the hit. Tuning this changes how
eagerly the expected-value strategy holds aims for Marksman."""

BACKUP_CANCELS: int = 2


@dataclass
class Conversion:
    """One guaranteed single-die conversion the attacker could make."""

    index: int
    """Position of the die in the pool."""

    face: AttackFace
    """What the die becomes: 'hit' (from a blank) or 'crit' (from a hit)."""

    value: float
    """Estimated extra defense dice the conversion forces."""


def surge_capacity(attacker: AttackerProfile, context: Context) -> float:
    """How many surges the attacker can still convert after rerolls.

    A surge chart or an unconditional keyword converts them all; otherwise
    only surge tokens and Critical X can, one surge each.
    """
    if attacker.surge != "none" or attacker.jedi_hunter:
        return inf
    if attacker.melee_surge_crit and melee(context):
        return inf
    return attacker.surge_tokens + attacker.critical


def reroll_candidates(dice: list[RolledDie], attacker: AttackerProfile, context: Context) -> list[int]:
    """Indices of dice worth rerolling, best reroll odds first.

    Every blank qualifies, plus any surge beyond what the attacker can
    convert. When some surges are excess, the lowest-ranked ones are the
    ones kept for conversion so that the red and black dice get rerolled.
    """
    blanks = [i for i, d in enumerate(dice) if d.face == "blank"]
    surges = sorted((i for i, d in enumerate(dice) if d.face == "surge"), key=lambda i: rank(dice[i].color))
    capacity = surge_capacity(attacker, context)
    excess = [] if capacity >= len(surges) else surges[int(capacity):]
    return sorted(blanks + excess, key=lambda i: -rank(dice[i].color))


def reroll_ev(die: RolledDie, dice: list[RolledDie], attacker: AttackerProfile, context: Context) -> float:
    """Chance that rerolling this die produces something useful.

    A surge only counts as useful if there is still conversion capacity
    left over after the surges already showing.
    """
    wanted: tuple[AttackFace, ...] = ("hit", "crit")
    if surge_capacity(attacker, context) > count(dice, "surge"):
        wanted += ("surge",)
    return probability(die.color, wanted)


def resolved_faces(dice: list[RolledDie], attacker: AttackerProfile, context: Context) -> tuple[int, int, int]:
    """Count (hits, crits, blanks) as they will stand once surges convert.

    Mirrors the surge conversion stage without touching the dice, so it
    can be used to value decisions made before surges are converted.
    """
    hits, crits, blanks = count(dice, "hit"), count(dice, "crit"), count(dice, "blank")
    surges = count(dice, "surge")
    if attacker.surge == "hit":
        return hits + surges, crits, blanks
    if attacker.surge == "crit":
        return hits, crits + surges, blanks

    tokens = min(attacker.surge_tokens, surges)
    surges -= tokens
    critical = min(attacker.critical, surges)
    surges -= critical
    hits += tokens
    crits += critical
    if attacker.jedi_hunter or (attacker.melee_surge_crit and melee(context)):
        crits += surges
        surges = 0
    return hits, crits, blanks + surges


def projected_dice(hits: float, crits: float, blanks: float, attacker: AttackerProfile,
                   defender: DefenderProfile, context: Context) -> float:
    """Estimate how many defense dice the defender will have to roll.

    Walks the mitigation and modification stages on bare counts: expected
    cover cancels, dodge tokens, Ram, Impact, Armor, Shielded and Backup.
    Hits a Guardian absorbs still have to be rolled by somebody, so they
    stay in the total.
    """
    hits -= expected_cancels(round(hits), cover_rank(attacker, defender, context), defender.low_profile)

    dodge = 0 if attacker.high_velocity else defender.dodge
    spent = min(dodge, hits)
    hits -= spent
    dodge -= spent
    if defender.outmaneuver:
        crits -= min(dodge, crits)

    rammed = min(attacker.ram, blanks)
    crits += rammed
    rammed = min(attacker.ram - rammed, hits)
    hits -= rammed
    crits += rammed

    if defender.armor or defender.armor_x:
        impacted = min(attacker.impact, hits)
        hits -= impacted
        crits += impacted
    hits -= hits if defender.armor else min(defender.armor_x, hits)

    if ranged(context):
        shielded = min(defender.shielded, crits)
        crits -= shielded
        hits -= min(defender.shielded - shielded, hits)
        if defender.backup:
            hits -= min(BACKUP_CANCELS, hits)

    return max(0.0, hits) + max(0.0, crits)


def conversion_value(dice: list[RolledDie], face: AttackFace, attacker: AttackerProfile,
                     defender: DefenderProfile, context: Context) -> float:
    """Value of turning one blank into a hit (face='hit') or one hit into
    a crit (face='crit').

    The baseline is the extra defense dice the conversion forces: 1.0 for a
    result that gets through, less if cover might cancel it, nothing if
    Armor or dodge tokens would cancel it anyway. A crit that gets past
    something which would have cancelled the hit is scaled up.
    """
    hits, crits, blanks = resolved_faces(dice, attacker, context)
    before = projected_dice(hits, crits, blanks, attacker, defender, context)
    if face == "hit":
        after = projected_dice(hits + 1, crits, blanks - 1, attacker, defender, context)
    else:
        after = projected_dice(hits - 1, crits + 1, blanks, attacker, defender, context)
    value = max(0.0, after - before)
    if face == "crit" and value:
        value *= CRIT_BYPASS_SCALE
    return value


def _lowest(dice: list[RolledDie], face: AttackFace) -> int | None:
    eligible = [i for i, d in enumerate(dice) if d.face == face]
    return min(eligible, key=lambda i: rank(dice[i].color)) if eligible else None


def best_conversion(dice: list[RolledDie], attacker: AttackerProfile, defender: DefenderProfile,
                    context: Context, *, require_value: bool = True) -> Conversion | None:
    """Pick the single conversion worth making, or None.

    Hit→crit is preferred over blank→hit whenever it has any value, and the
    lowest-ranked eligible die is always the one spent on. With
    ``require_value`` False (tokens that must be spent regardless) a
    worthless conversion is still returned if any die can be converted.
    """
    hit = _lowest(dice, "hit")
    blank = _lowest(dice, "blank")
    if hit is None and blank is None:
        return None

    options = []
    if hit is not None:
        options.append(Conversion(hit, "crit", conversion_value(dice, "crit", attacker, defender, context)))
    if blank is not None:
        options.append(Conversion(blank, "hit", conversion_value(dice, "hit", attacker, defender, context)))

    for option in options:
        if option.value > 0:
            return option
    if require_value:
        return None
    return options[-1]


def should_reserve(dice: list[RolledDie], attacker: AttackerProfile, defender: DefenderProfile,
                   context: Context) -> bool:
    """Decide whether the next aim token is held for Marksman rather than
    spent rerolling.

    Without Marksman, or with no conversion worth anything, the token
    always rerolls. If there is nothing left to reroll, a worthwhile
    conversion wins by default. Otherwise the deterministic strategy always
    takes the guaranteed conversion and the expected-value strategy only
    does so when it beats the odds of rerolling the best candidate.
    """
    if not attacker.marksman:
        return False
    conversion = best_conversion(dice, attacker, defender, context)
    if conversion is None:
        return False
    candidates = reroll_candidates(dice, attacker, context)
    if not candidates or attacker.aim_strategy == "deterministic":
        return True
    return conversion.value > reroll_ev(dice[candidates[0]], dice, attacker, context)
