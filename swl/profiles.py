"""
Attacker, defender and Guardian profiles.

A profile is a flat record: every keyword is a flag or a small integer,
and every token pool is a count. The engine reads them but never mutates
them, so the same profile can be reused across any number of resolutions.

``validate`` is the input layer's range check. Callers building profiles
by hand (the command-line tools, tests) get a ValueError for impossible
values instead of a silently nonsensical result.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from swl.types import (
    CONTEXTS, DEFENSE_COLORS, AttackSurge, Context, DefenseColor,
    DefenseSurge, Strategy,
)

MAX_DICE = 12
"""Most dice of one color an attacker may field (before Spray)."""

MAX_TOKENS = 12

MAX_X = 5
"""Upper bound for keyword values like Pierce X or Armor X."""


@dataclass
class AttackerProfile:
    """Everything about the attacking unit that matters for one attack."""

    red: int = 0
    black: int = 0
    white: int = 0

    surge: AttackSurge = "none"
    """The unit's surge chart: convert every surge to a hit, a crit, or
    leave them for tokens and keywords."""

    # --- Tokens ---

    aim: int = 0
    """Aim tokens. Each one rerolls up to 2 dice (plus Precise X), or is
    held for Marksman, and unspent ones fuel Lethal."""

    surge_tokens: int = 0
    observation: int = 0
    """Observation tokens on the defender that the attacker may spend to
    reroll 1 die each."""

    dodge: int = 0
    """The attacker's own dodge tokens, only spent by Jar'Kai Mastery."""

    # --- Dice modifiers ---

    upgrade: int = 0
    downgrade: int = 0
    spray: bool = False
    """Multiply the weapon's dice by the defender's miniatures in sight."""

    # --- Keywords ---

    pierce: int = 0
    impact: int = 0
    """Convert up to X hits to crits, only against a defender with Armor."""

    critical: int = 0
    """Convert up to X surges to crits."""

    precise: int = 0
    """Extra dice rerolled per aim token."""

    ram: int = 0
    """Convert up to X dice to crits, blanks first."""

    sharpshooter: int = 0
    lethal: int = 0
    """Spend up to X unspent aim tokens for Pierce 1 each."""

    blast: bool = False
    """Ignore cover."""

    marksman: bool = False
    """After converting surges, spend aim tokens to turn a blank into a hit
    or a hit into a crit."""

    duelist: bool = False
    """Melee: gain Pierce 1 if any aim token was spent rerolling."""

    makashi_mastery: bool = False
    """Melee: reduce Pierce by 1 so the defender can't use Immune: Pierce or
    Impervious."""

    jar_kai_mastery: bool = False
    """Melee: spend every dodge token to turn a blank into a hit or a hit
    into a crit."""

    high_velocity: bool = False
    """The defender can't spend dodge tokens."""

    ignore_deflect: bool = False
    """The defender's Deflect does nothing, neither conversion nor reflection."""

    immune_deflect: bool = False
    """The attacker never suffers wounds from Deflect."""

    ignore_impervious: bool = False
    suppressive: bool = False
    jedi_hunter: bool = False
    """Convert every remaining surge to a crit (the input layer only sets
    this when the target qualifies)."""

    melee_surge_crit: bool = False
    """Melee: convert every remaining surge to a crit."""

    aim_strategy: Strategy = "expected_value"
    """How to choose between rerolling now and holding aims for Marksman."""


@dataclass
class GuardianProfile:
    """The unit intercepting hits with Guardian X. Only a handful of
    keywords matter for its reduced defense roll."""

    die: DefenseColor = "white"
    surge: DefenseSurge = "none"
    dodge: int = 0
    soresu_mastery: bool = False
    """Spend 1 dodge token to reroll all of the Guardian's dice."""

    deflect: bool = False


@dataclass
class DefenderProfile:
    """Everything about the defending unit that matters for one attack."""

    die: DefenseColor = "white"
    surge: DefenseSurge = "none"
    cover: int = 0
    """Terrain cover: 0 none, 1 light, 2 heavy."""

    minis: int = 1
    """Defending miniatures the attacker can see; only used by Spray."""

    # --- Tokens ---

    dodge: int = 0
    surge_tokens: int = 0
    suppression: int = 0
    smoke: int = 0

    # --- Keywords ---

    armor: bool = False
    """Cancel every hit."""

    armor_x: int = 0
    """Cancel up to X hits. Ignored when ``armor`` is set."""

    cover_x: int = 0
    low_profile: bool = False
    outmaneuver: bool = False
    """Dodge tokens may cancel crits as well as hits."""

    impervious: bool = False
    """Roll extra defense dice equal to the attack's total Pierce."""

    immune_pierce: bool = False
    danger_sense: int = 0
    """Roll 1 extra die per suppression token, up to X."""

    uncanny_luck: int = 0
    """Reroll up to X defense dice."""

    soresu_mastery: bool = False
    """Ranged: reroll the whole defense pool."""

    deflect: bool = False
    """Ranged: surges become blocks, and the attacker suffers 1 wound if
    any surge was rolled."""

    deflect_each_surge: bool = False
    """Upgrade to Deflect: 1 reflected wound per rolled surge."""

    block: bool = False
    """If a dodge token was spent, surges become blocks."""

    engaged_block: bool = False
    """Surges become blocks while the unit is engaged."""

    shielded: int = 0
    """Ranged: cancel up to X results, crits first."""

    backup: bool = False
    """Ranged: cancel up to 2 hits."""

    guardian: int = 0
    """A friendly unit absorbs up to X hits (ranged) and defends them itself."""

    guardian_profile: GuardianProfile = field(default_factory=GuardianProfile)

    duelist: bool = False
    """Melee: Immune: Pierce if a dodge token was spent."""

    djem_so_mastery: bool = False
    """Melee: the attacker suffers 1 wound if the attack roll has a blank."""

    steadfast: bool = False
    """Gain no suppression from an attack that deals no wounds."""


def _check_range(profile: object, name: str, low: int, high: int) -> None:
    value = getattr(profile, name)
    if not low <= value <= high:
        raise ValueError(f"{type(profile).__name__}.{name} must be between {low} and {high}, got {value}")


def _check_ints(profile: object, limits: dict[str, int]) -> None:
    """Range-check every int field, using ``limits`` for the upper bound
    and MAX_X for anything not listed."""
    for f in fields(profile):
        value = getattr(profile, f.name)
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        _check_range(profile, f.name, 1 if f.name == "minis" else 0, limits.get(f.name, MAX_X))


def validate(attacker: AttackerProfile, defender: DefenderProfile, context: Context) -> None:
    """Raise ValueError if any profile value is outside what the game allows."""
    if context not in CONTEXTS:
        raise ValueError(f"unknown attack context {context!r}")

    dice_limits = {"red": MAX_DICE, "black": MAX_DICE, "white": MAX_DICE, "upgrade": MAX_DICE, "downgrade": MAX_DICE}
    token_limits = {t: MAX_TOKENS for t in ("aim", "surge_tokens", "observation", "dodge", "suppression", "smoke")}

    _check_ints(attacker, {**dice_limits, **token_limits})
    if attacker.surge not in ("none", "hit", "crit"):
        raise ValueError(f"unknown attack surge chart {attacker.surge!r}")
    if attacker.aim_strategy not in ("deterministic", "expected_value"):
        raise ValueError(f"unknown aim strategy {attacker.aim_strategy!r}")

    _check_ints(defender, {**token_limits, "cover": 2, "minis": MAX_DICE})
    if defender.die not in DEFENSE_COLORS:
        raise ValueError(f"unknown defense die {defender.die!r}")
    if defender.surge not in ("none", "block"):
        raise ValueError(f"unknown defense surge chart {defender.surge!r}")

    guardian = defender.guardian_profile
    _check_ints(guardian, token_limits)
    if guardian.die not in DEFENSE_COLORS:
        raise ValueError(f"unknown guardian defense die {guardian.die!r}")
    if guardian.surge not in ("none", "block"):
        raise ValueError(f"unknown guardian surge chart {guardian.surge!r}")
