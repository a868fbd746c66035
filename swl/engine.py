"""
Attack engine: resolves one attack through the nine-stage pipeline.

The order of the stages encodes the rules' precedence, so it is fixed:

1. Pool formation: dice by color, scaled by Spray
2. Upgrade / downgrade: color shifts
3. Initial roll
4. Rerolls: observation tokens, then aim tokens
5. Surge conversion: chart, tokens and Critical, keywords
6. Guaranteed conversion: Marksman, then Jar'Kai Mastery
7. Mitigation: cover roll, dodge tokens
8. Modification: Ram, Impact, Armor, Shielded, Backup, Guardian, Lethal
9. Comparison: defense rolls, Pierce, reflection, suppression

Three values cross stage boundaries: the aim tokens reserved in stage 4 for
stage 6, the pool as it stood before stage 6 (which Djem So Mastery
checks), and the defense surges before conversion (which Deflect checks).
"""

from __future__ import annotations

from random import Random

from swl.cover import cover_rank, roll_cover
from swl.decisions import AIM_REROLLS, BACKUP_CANCELS, best_conversion, reroll_candidates, should_reserve
from swl.defense import danger_sense_bonus, impervious_bonus, roll_defender, roll_guardian
from swl.dice import form_pool, reroll, roll_attack, shift_colors
from swl.profiles import AttackerProfile, DefenderProfile, validate
from swl.records import Outcome, ResolutionRecord, RolledDie, StageRecord, count, snapshot
from swl.types import AttackColor, AttackFace, Context, melee, ranged


class AttackResolution:
    """Runs a single attack from pool formation to the final comparison.

    Owns the working pool and the resolution record; the profiles are only
    ever read. One instance resolves one attack, so nothing leaks from one
    resolution into the next.
    """

    def __init__(self, attacker: AttackerProfile, defender: DefenderProfile, context: Context, rng: Random) -> None:
        self.attacker = attacker
        self.defender = defender
        self.context = context
        self.rng = rng

        self.colors: list[AttackColor] = []
        self.dice: list[RolledDie] = []
        self.record = ResolutionRecord(context=context)

        self.rerolled = 0
        """Aim tokens spent rerolling."""

        self.reserved = 0
        """Aim tokens held back in stage 4 for Marksman in stage 6."""

        self.pristine: list[RolledDie] = []
        """The pool as it stood going into stage 6, before any guaranteed
        conversion. Djem So Mastery looks for blanks here rather than in
        the final pool."""

        self.dodge_spent = 0
        self.guardian_hits = 0
        self.duelist_pierce = 0
        self.lethal_pierce = 0

    @property
    def hits(self) -> int:
        return count(self.dice, "hit")

    @property
    def crits(self) -> int:
        return count(self.dice, "crit")

    def log(self, stage: int, name: str, *notes: str) -> None:
        """Record the pool as it stands at the end of a stage."""
        self.record.stages.append(StageRecord(stage=stage, name=name, dice=snapshot(self.dice), notes=list(notes)))

    def stages(self) -> list:
        """The pipeline, in rules order. Comparison is not included; it
        produces the Outcome rather than transforming the pool."""
        return [
            self.form_pool,
            self.shift_colors,
            self.roll,
            self.rerolls,
            self.convert_surges,
            self.guaranteed_conversions,
            self.mitigate,
            self.modify,
        ]

    def resolve(self) -> Outcome:
        for stage in self.stages():
            stage()
        return self.compare()

    # --- Pool helpers ---

    def _change(self, old: AttackFace, new: AttackFace, limit: int | None = None) -> int:
        """Change up to ``limit`` dice showing ``old`` to ``new`` (all of
        them if no limit). Returns how many changed."""
        changed = 0
        for d in self.dice:
            if limit is not None and changed >= limit:
                break
            if d.face == old:
                d.face = new
                changed += 1
        return changed

    def _cancel(self, face: AttackFace, n: int) -> int:
        """Remove up to n dice showing ``face`` from the pool."""
        removed = 0
        for d in list(self.dice):
            if removed >= n:
                break
            if d.face == face:
                self.dice.remove(d)
                removed += 1
        return removed

    # --- Stages 1-3 ---

    def form_pool(self) -> None:
        """Stage 1: one die per color and count, multiplied by the visible
        defending miniatures under Spray."""
        a = self.attacker
        multiplier = self.defender.minis if a.spray else 1
        self.colors = form_pool(a.red, a.black, a.white, multiplier)
        self.log(1, "pool", f"{len(self.colors)} dice" + (f" (spray x{multiplier})" if a.spray else ""))

    def shift_colors(self) -> None:
        """Stage 2: upgrades then downgrades."""
        self.colors = shift_colors(self.colors, self.attacker.upgrade, self.attacker.downgrade)
        self.log(2, "upgrade/downgrade", f"{self.attacker.upgrade} up, {self.attacker.downgrade} down")

    def roll(self) -> None:
        """Stage 3: draw a face for every die."""
        self.dice = roll_attack(self.colors, self.rng)
        self.log(3, "roll")

    # --- Stage 4 ---

    def rerolls(self) -> None:
        """Stage 4: spend observation tokens, then aim tokens.

        Observation tokens go first, one die each, so the aim decisions see
        their results. Each aim token is then either held for Marksman or
        spent immediately rerolling up to 2 + Precise X dice. Once one token
        is held, all the rest are held too: a reroll never gets more
        attractive as the pool improves. Tokens with nothing to reroll and
        nothing to hold for stay unspent, and Lethal may use them later.
        """
        a = self.attacker
        notes = []

        observed = 0
        for _ in range(a.observation):
            candidates = reroll_candidates(self.dice, a, self.context)
            if not candidates:
                break
            reroll(self.dice[candidates[0]], self.rng)
            observed += 1
        self.record.observations_spent = observed
        if observed:
            notes.append(f"observation: rerolled {observed}")

        for _ in range(a.aim):
            if self.reserved or should_reserve(self.dice, a, self.defender, self.context):
                self.reserved += 1
                continue
            candidates = reroll_candidates(self.dice, a, self.context)
            if not candidates:
                break
            chosen = candidates[:AIM_REROLLS + a.precise]
            for i in chosen:
                reroll(self.dice[i], self.rng)
            self.rerolled += 1
            notes.append(f"aim: rerolled {len(chosen)}")

        if self.reserved:
            notes.append(f"aim: {self.reserved} held for Marksman")
        if a.duelist and melee(self.context) and self.rerolled:
            self.duelist_pierce = 1
            notes.append("Duelist: +1 Pierce")

        self.record.aims_rerolled = self.rerolled
        self.record.aims_reserved = self.reserved
        self.log(4, "rerolls", *notes)

    # --- Stage 5 ---

    def convert_surges(self) -> None:
        """Stage 5: convert surges.

        The chart converts every surge; then surge tokens and Critical X
        convert one each; then unconditional keywords take whatever is
        left. Anything still showing a surge is a blank from here on.
        """
        a = self.attacker
        steps: list[tuple[str, AttackFace, int | None]] = []
        if a.surge != "none":
            steps.append(("chart", a.surge, None))
        steps.append(("surge tokens", "hit", a.surge_tokens))
        steps.append((f"Critical {a.critical}", "crit", a.critical))
        if a.jedi_hunter:
            steps.append(("Jedi Hunter", "crit", None))
        if a.melee_surge_crit and melee(self.context):
            steps.append(("melee surge", "crit", None))
        steps.append(("unconverted", "blank", None))

        notes = []
        for source, face, limit in steps:
            n = self._change("surge", face, limit)
            if n:
                notes.append(f"{source}: {n} to {face}")
        self.log(5, "surges", *notes)

    # --- Stage 6 ---

    def guaranteed_conversions(self) -> None:
        """Stage 6: Marksman with the held aim tokens, then Jar'Kai Mastery.

        Held aims are spent one at a time while a conversion still forces
        more defense dice. Jar'Kai spends every dodge token the attacker
        has, worthwhile or not, using the same choice of die.
        """
        a = self.attacker
        notes = []
        self.pristine = snapshot(self.dice)

        converted = 0
        for _ in range(self.reserved):
            conversion = best_conversion(self.dice, a, self.defender, self.context)
            if conversion is None:
                break
            self.dice[conversion.index].face = conversion.face
            converted += 1
        self.record.aims_converted = converted
        if converted:
            notes.append(f"Marksman: {converted} converted")

        if a.jar_kai_mastery and melee(self.context):
            spent = 0
            for _ in range(a.dodge):
                conversion = best_conversion(self.dice, a, self.defender, self.context, require_value=False)
                if conversion is None:
                    break
                self.dice[conversion.index].face = conversion.face
                spent += 1
            if spent:
                notes.append(f"Jar'Kai Mastery: {spent} converted")
        self.log(6, "conversions", *notes)

    # --- Stage 7 ---

    def mitigate(self) -> None:
        """Stage 7: cover, then dodge tokens.

        Dodge tokens cancel hits, and crits too with Outmaneuver. A dodge
        token is worth spending even with nothing to cancel when Block or
        melee Duelist is waiting on it, so that case counts as spent too.
        """
        d = self.defender
        notes = []

        rank = cover_rank(self.attacker, d, self.context)
        self.record.cover = rank
        if rank:
            cancelled, _ = roll_cover(self.hits, rank, self.rng, d.low_profile)
            self._cancel("hit", cancelled)
            notes.append(f"cover {rank}: cancelled {cancelled}")

        dodge = 0 if self.attacker.high_velocity else d.dodge
        spent = self._cancel("hit", dodge)
        if d.outmaneuver:
            spent += self._cancel("crit", dodge - spent)
        if not spent and dodge and (d.block or (d.duelist and melee(self.context))):
            spent = 1
        self.dodge_spent = spent
        self.record.dodge_spent = spent
        if spent:
            notes.append(f"dodge: {spent} spent")
        self.log(7, "mitigation", *notes)

    # --- Stage 8 ---

    def modify(self) -> None:
        """Stage 8: Ram, Impact, Armor, Shielded, Backup, Guardian, Lethal."""
        a, d = self.attacker, self.defender
        notes = []

        if a.ram:
            n = self._change("blank", "crit", a.ram)
            n += self._change("hit", "crit", a.ram - n)
            notes.append(f"Ram {a.ram}: {n} to crit")

        armored = d.armor or d.armor_x > 0
        if armored and a.impact:
            notes.append(f"Impact {a.impact}: {self._change('hit', 'crit', a.impact)} to crit")
        if armored:
            n = self._cancel("hit", self.hits if d.armor else d.armor_x)
            notes.append(f"Armor: cancelled {n}")

        if ranged(self.context):
            if d.shielded:
                n = self._cancel("crit", d.shielded)
                n += self._cancel("hit", d.shielded - n)
                notes.append(f"Shielded {d.shielded}: cancelled {n}")
            if d.backup:
                notes.append(f"Backup: cancelled {self._cancel('hit', BACKUP_CANCELS)}")
            if d.guardian:
                self.guardian_hits = self._cancel("hit", d.guardian)
                self.record.guardian_hits = self.guardian_hits
                notes.append(f"Guardian {d.guardian}: absorbed {self.guardian_hits}")

        unspent = a.aim - self.rerolled - self.reserved
        self.lethal_pierce = min(a.lethal, max(0, unspent))
        if self.lethal_pierce:
            notes.append(f"Lethal: +{self.lethal_pierce} Pierce")
        self.log(8, "modification", *notes)

    # --- Stage 9 ---

    def pierce(self) -> int:
        """Total Pierce the attack will eventually have, before immunity."""
        return self.attacker.pierce + self.lethal_pierce + self.duelist_pierce

    def applied_pierce(self) -> int:
        """Pierce actually applied to the combined blocks.

        Makashi Mastery costs 1 Pierce and in exchange overrides Immune:
        Pierce. Melee Duelist with a spent dodge token zeroes Pierce
        whatever else happened; it has to be applied here, before the
        blocks-minus-Pierce subtraction.
        """
        pierce = self.pierce()
        immune = self.defender.immune_pierce
        if self.attacker.makashi_mastery and melee(self.context):
            pierce = max(0, pierce - 1)
            immune = False
        if immune:
            pierce = 0
        if self.defender.duelist and melee(self.context) and self.dodge_spent:
            pierce = 0
        return pierce

    def suppression(self, wounds: int) -> int:
        if self.context in ("melee", "overrun"):
            return 0
        if self.defender.steadfast and not wounds:
            return 0
        return 2 if self.attacker.suppressive else 1

    def compare(self) -> Outcome:
        """Stage 9: roll defense for the target and any Guardian, then
        work out wounds, reflected wounds and suppression.

        The target's and the Guardian's wounds are each reported at zero
        Pierce; the combined total applies Pierce once, to all blocks.
        """
        a, d = self.attacker, self.defender
        makashi = a.makashi_mastery and melee(self.context)
        dice = self.hits + self.crits
        pool = dice + danger_sense_bonus(d) + impervious_bonus(a, d, self.pierce(), makashi)

        defense = roll_defender(pool, a, d, self.context, bool(self.dodge_spent), self.rng)
        self.record.defense = defense

        guardian_blocks = guardian_reflected = guardian_wounds = 0
        if self.guardian_hits:
            guardian = roll_guardian(self.guardian_hits, a, d.guardian_profile, self.rng)
            self.record.guardian = guardian
            guardian_blocks = guardian.blocks
            guardian_reflected = guardian.reflected
            guardian_wounds = max(0, self.guardian_hits - guardian.blocks)

        pierce = self.applied_pierce()
        blocks = max(0, defense.blocks + guardian_blocks - pierce)
        total = max(0, dice + self.guardian_hits - blocks)

        reflected = defense.reflected
        if d.djem_so_mastery and melee(self.context) and count(self.pristine, "blank"):
            reflected += 1

        self.record.pierce = self.pierce()
        self.record.lethal_pierce = self.lethal_pierce
        self.record.duelist_pierce = self.duelist_pierce
        self.record.applied_pierce = pierce
        self.log(9, "comparison", f"{pool} defense dice, {defense.blocks} blocks, Pierce {pierce}")

        return Outcome(
            guardian_wounds=guardian_wounds,
            main_wounds=max(0, dice - defense.blocks),
            total_wounds=total,
            reflected_wounds=reflected,
            guardian_reflected_wounds=guardian_reflected,
            suppression=self.suppression(total),
            applied_pierce=pierce,
            record=self.record,
        )


def resolve(attacker: AttackerProfile, defender: DefenderProfile, context: Context, rng: Random) -> Outcome:
    """Resolve one attack and return its Outcome.

    This is the engine's only entry point. Profiles are validated first;
    the rng is the only source of randomness, so the same seed always
    produces the same Outcome.
    """
    validate(attacker, defender, context)
    return AttackResolution(attacker, defender, context, rng).resolve()
