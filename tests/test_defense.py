"""Tests for the defense roll and the Guardian sub-resolver."""

from math import inf
from random import Random
from unittest.mock import Mock

from swl.defense import (
    danger_sense_bonus, deflecting, impervious_bonus, roll_defender,
    roll_guardian, surge_capacity,
)
from swl.profiles import AttackerProfile, DefenderProfile, GuardianProfile


def scripted(*faces: str) -> Mock:
    rng = Mock(spec=Random)
    rng.choice.side_effect = list(faces)
    return rng


class TestBonusDice:
    def test_danger_sense_needs_suppression(self) -> None:
        assert danger_sense_bonus(DefenderProfile(danger_sense=3)) == 0

    def test_danger_sense_capped(self) -> None:
        assert danger_sense_bonus(DefenderProfile(danger_sense=2, suppression=3)) == 2
        assert danger_sense_bonus(DefenderProfile(danger_sense=3, suppression=1)) == 1

    def test_impervious_mirrors_pierce(self) -> None:
        assert impervious_bonus(AttackerProfile(), DefenderProfile(impervious=True), 2, False) == 2

    def test_impervious_switched_off(self) -> None:
        d = DefenderProfile(impervious=True)
        assert impervious_bonus(AttackerProfile(ignore_impervious=True), d, 2, False) == 0
        assert impervious_bonus(AttackerProfile(), d, 2, True) == 0
        assert impervious_bonus(AttackerProfile(), DefenderProfile(impervious=True, immune_pierce=True), 2, False) == 0
        assert impervious_bonus(AttackerProfile(), DefenderProfile(), 2, False) == 0


class TestSurgeCapacity:
    def test_chart(self) -> None:
        assert surge_capacity(AttackerProfile(), DefenderProfile(surge="block"), "melee", False) == inf

    def test_deflect_only_ranged(self) -> None:
        d = DefenderProfile(deflect=True)
        assert deflecting(AttackerProfile(), d, "ranged")
        assert not deflecting(AttackerProfile(), d, "melee")
        assert not deflecting(AttackerProfile(ignore_deflect=True), d, "ranged")

    def test_block_needs_a_spent_dodge(self) -> None:
        d = DefenderProfile(block=True, surge_tokens=1)
        assert surge_capacity(AttackerProfile(), d, "ranged", True) == inf
        assert surge_capacity(AttackerProfile(), d, "ranged", False) == 1

    def test_engaged_block_is_unconditional(self) -> None:
        d = DefenderProfile(engaged_block=True)
        assert surge_capacity(AttackerProfile(), d, "ranged", False) == inf


class TestRollDefender:
    def test_plain_roll(self) -> None:
        rec = roll_defender(3, AttackerProfile(), DefenderProfile(), "ranged", False, scripted("surge", "block", "blank"))
        assert (rec.surges, rec.blocks, rec.reflected) == (1, 1, 0)
        assert rec.reroll == ""

    def test_rolls_defenders_color(self) -> None:
        rec = roll_defender(1, AttackerProfile(), DefenderProfile(die="red"), "ranged", False, scripted("block"))
        assert rec.dice[0].color == "red"

    def test_surge_tokens(self) -> None:
        d = DefenderProfile(surge_tokens=1)
        rec = roll_defender(2, AttackerProfile(), d, "ranged", False, scripted("surge", "surge"))
        assert rec.blocks == 1

    def test_deflect_converts_and_reflects(self) -> None:
        d = DefenderProfile(deflect=True)
        rec = roll_defender(3, AttackerProfile(), d, "ranged", False, scripted("surge", "block", "blank"))
        assert (rec.blocks, rec.reflected) == (2, 1)

    def test_deflect_each_surge(self) -> None:
        d = DefenderProfile(deflect=True, deflect_each_surge=True)
        rec = roll_defender(3, AttackerProfile(), d, "ranged", False, scripted("surge", "surge", "blank"))
        assert (rec.blocks, rec.reflected) == (2, 2)

    def test_immune_deflect_still_converts(self) -> None:
        d = DefenderProfile(deflect=True)
        a = AttackerProfile(immune_deflect=True)
        rec = roll_defender(3, a, d, "ranged", False, scripted("surge", "surge", "blank"))
        assert (rec.blocks, rec.reflected) == (2, 0)

    def test_ignore_deflect_disables_everything(self) -> None:
        d = DefenderProfile(deflect=True)
        a = AttackerProfile(ignore_deflect=True)
        rec = roll_defender(3, a, d, "ranged", False, scripted("surge", "surge", "blank"))
        assert (rec.surges, rec.blocks, rec.reflected) == (2, 0, 0)

    def test_deflect_does_nothing_in_melee(self) -> None:
        d = DefenderProfile(deflect=True)
        rec = roll_defender(2, AttackerProfile(), d, "melee", False, scripted("surge", "blank"))
        assert (rec.blocks, rec.reflected) == (0, 0)

    def test_soresu_rerolls_everything(self) -> None:
        d = DefenderProfile(soresu_mastery=True)
        rng = scripted("block", "blank", "block", "block")
        rec = roll_defender(2, AttackerProfile(), d, "ranged", False, rng)
        assert rec.blocks == 2
        assert rec.reroll == "Soresu Mastery"
        assert all(die.rerolled for die in rec.dice)

    def test_soresu_only_ranged(self) -> None:
        d = DefenderProfile(soresu_mastery=True)
        rng = scripted("blank", "blank")
        rec = roll_defender(2, AttackerProfile(), d, "melee", False, rng)
        assert rec.reroll == ""
        assert rng.choice.call_count == 2

    def test_uncanny_luck_blanks_first(self) -> None:
        d = DefenderProfile(uncanny_luck=1)
        rec = roll_defender(3, AttackerProfile(), d, "ranged", False, scripted("block", "blank", "surge", "block"))
        assert [die.face for die in rec.dice] == ["block", "block", "surge"]
        assert rec.reroll == "Uncanny Luck 1"

    def test_uncanny_luck_rerolls_unconvertible_surges(self) -> None:
        d = DefenderProfile(uncanny_luck=2)
        rng = scripted("block", "blank", "surge", "block", "block")
        rec = roll_defender(3, AttackerProfile(), d, "ranged", False, rng)
        assert rec.blocks == 3

    def test_uncanny_luck_keeps_convertible_surges(self) -> None:
        d = DefenderProfile(uncanny_luck=2, surge="block")
        rng = scripted("surge", "blank", "block", "blank")
        rec = roll_defender(3, AttackerProfile(), d, "ranged", False, rng)
        assert rng.choice.call_count == 4
        assert rec.blocks == 2

    def test_never_rerolled_twice(self) -> None:
        """Soresu Mastery takes priority and Uncanny Luck doesn't add a
        second reroll."""
        d = DefenderProfile(soresu_mastery=True, uncanny_luck=1)
        rng = scripted("blank", "blank")
        rec = roll_defender(1, AttackerProfile(), d, "ranged", False, rng)
        assert rec.reroll == "Soresu Mastery"
        assert rng.choice.call_count == 2

    def test_surges_counted_before_conversion(self) -> None:
        rec = roll_defender(2, AttackerProfile(), DefenderProfile(surge="block"), "ranged", False, scripted("surge", "surge"))
        assert (rec.surges, rec.blocks) == (2, 2)


class TestRollGuardian:
    def test_own_chart(self) -> None:
        g = GuardianProfile(surge="block")
        rec = roll_guardian(3, AttackerProfile(), g, scripted("surge", "block", "blank"))
        assert (rec.target, rec.blocks, rec.reflected) == ("guardian", 2, 0)

    def test_own_die(self) -> None:
        rec = roll_guardian(1, AttackerProfile(), GuardianProfile(die="red"), scripted("blank"))
        assert rec.dice[0].color == "red"

    def test_deflect_reflects_exactly_one(self) -> None:
        g = GuardianProfile(deflect=True)
        rec = roll_guardian(3, AttackerProfile(), g, scripted("surge", "surge", "blank"))
        assert (rec.blocks, rec.reflected) == (2, 1)

    def test_reflection_immunity(self) -> None:
        g = GuardianProfile(deflect=True)
        rec = roll_guardian(2, AttackerProfile(immune_deflect=True), g, scripted("surge", "blank"))
        assert rec.reflected == 0

    def test_soresu_spends_a_dodge(self) -> None:
        g = GuardianProfile(soresu_mastery=True, dodge=1)
        rng = scripted("blank", "blank", "blank", "block", "block", "block")
        rec = roll_guardian(3, AttackerProfile(), g, rng)
        assert rec.blocks == 3
        assert rec.reroll == "Soresu Mastery"

    def test_soresu_needs_a_dodge(self) -> None:
        g = GuardianProfile(soresu_mastery=True)
        rng = scripted("blank", "blank")
        rec = roll_guardian(2, AttackerProfile(), g, rng)
        assert rec.reroll == ""
        assert rng.choice.call_count == 2

    def test_soresu_skipped_when_everything_blocks(self) -> None:
        g = GuardianProfile(soresu_mastery=True, dodge=1, surge="block")
        rng = scripted("block", "surge")
        rec = roll_guardian(2, AttackerProfile(), g, rng)
        assert rec.reroll == ""
        assert rec.blocks == 2
