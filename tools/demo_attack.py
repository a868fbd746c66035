#!/usr/bin/env python3
"""Run a quick demo attack: a rifle squad shooting at a Jedi in cover."""

from random import Random

from swl.engine import resolve
from swl.profiles import AttackerProfile, DefenderProfile
from swl.renderers import TextRenderer

troopers = AttackerProfile(
    black=4, white=2, surge="hit", aim=1,
    pierce=1, critical=1, marksman=True,
)
jedi = DefenderProfile(
    die="red", surge="block", cover=1, dodge=1,
    deflect=True, immune_pierce=True,
)
outcome = resolve(troopers, jedi, "ranged", Random())
print("\n".join(TextRenderer().render_outcome(outcome)))
