#!/usr/bin/env python3
"""Estimate the wound distribution of an attack by repeated resolution.

Resolves the same attack many times and prints the average and the
chance of each total wound count, which is handy for sanity-checking the
engine against hand-computed odds.

Usage:
    python tools/expected_wounds.py [red] [black] [white] [defense die] [trials]

Defaults to 5 red dice against a white defense die, 100000 trials.
"""

import sys
from collections import Counter
from random import Random

from swl.engine import resolve
from swl.profiles import AttackerProfile, DefenderProfile

TRIALS = 100000


def main() -> None:
    args = sys.argv[1:]
    red, black, white = (int(a) for a in (args[0:3] + ["5", "0", "0"][len(args[0:3]):]))
    die = args[3] if len(args) > 3 else "white"
    trials = int(args[4]) if len(args) > 4 else TRIALS

    attacker = AttackerProfile(red=red, black=black, white=white)
    defender = DefenderProfile(die=die)
    rng = Random()
    wounds: Counter[int] = Counter()
    for _ in range(trials):
        wounds[resolve(attacker, defender, "ranged", rng).total_wounds] += 1

    average = sum(w * n for w, n in wounds.items()) / trials
    print(f"{red} red, {black} black, {white} white vs {die}: {average:.3f} wounds on average")
    for w in sorted(wounds):
        print(f"  {w:2d}: {wounds[w] / trials:.4f}")


if __name__ == "__main__":
    main()
