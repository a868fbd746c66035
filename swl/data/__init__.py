"""
Every decision the engine makes about rerolling or converting a die needs to
know what the die could show next. The physical dice are fixed, so we store
each one as the tuple of its faces:

    ATTACK_FACES = {
        "red": ("crit", "surge", "hit", "hit", "hit", "hit", "hit", "blank"),
        ...
    }

Attack dice are eight-sided, defense dice six-sided. Drawing a face is then
just ``rng.choice(ATTACK_FACES[color])``, and the probability of a face is
its count divided by the length of the tuple:

    ATTACK_FACES["black"].count("hit") / 8   # 0.375

The tables are tuples inside MappingProxyType so nothing can mutate them at
runtime; they are shared by every resolution.
"""

from types import MappingProxyType

ATTACK_FACES = MappingProxyType({
    "white": ("crit", "surge", "hit", "blank", "blank", "blank", "blank", "blank"),
    "black": ("crit", "surge", "hit", "hit", "hit", "blank", "blank", "blank"),
    "red": ("crit", "surge", "hit", "hit", "hit", "hit", "hit", "blank"),
})

DEFENSE_FACES = MappingProxyType({
    "white": ("surge", "block", "blank", "blank", "blank", "blank"),
    "red": ("surge", "block", "block", "block", "blank", "blank"),
})
