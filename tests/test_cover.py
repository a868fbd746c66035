"""Tests for the cover resolver."""

from random import Random
from unittest.mock import Mock

import pytest

from swl.cover import cover_rank, expected_cancels, roll_cover
from swl.profiles import AttackerProfile, DefenderProfile


def scripted(*faces: str) -> Mock:
    rng = Mock(spec=Random)
    rng.choice.side_effect = list(faces)
    return rng


class TestCoverRank:
    def test_terrain_cover(self) -> None:
        assert cover_rank(AttackerProfile(), DefenderProfile(cover=1), "ranged") == 1

    def test_no_cover_in_melee(self) -> None:
        assert cover_rank(AttackerProfile(), DefenderProfile(cover=2), "melee") == 0
        assert cover_rank(AttackerProfile(), DefenderProfile(cover=2), "overrun") == 0

    def test_unrestricted_counts_as_ranged(self) -> None:
        assert cover_rank(AttackerProfile(), DefenderProfile(cover=1), "unrestricted") == 1

    def test_suppression_improves_cover(self) -> None:
        assert cover_rank(AttackerProfile(), DefenderProfile(cover=1, suppression=1), "ranged") == 2

    def test_smoke_and_cover_x(self) -> None:
        assert cover_rank(AttackerProfile(), DefenderProfile(smoke=1), "ranged") == 1
        assert cover_rank(AttackerProfile(), DefenderProfile(cover_x=1), "ranged") == 1

    def test_capped_at_heavy(self) -> None:
        d = DefenderProfile(cover=2, smoke=1, suppression=2, cover_x=1)
        assert cover_rank(AttackerProfile(), d, "ranged") == 2

    def test_sharpshooter_reduces(self) -> None:
        assert cover_rank(AttackerProfile(sharpshooter=1), DefenderProfile(cover=2), "ranged") == 1

    def test_never_negative(self) -> None:
        assert cover_rank(AttackerProfile(sharpshooter=3), DefenderProfile(cover=1), "ranged") == 0

    def test_blast_ignores_cover(self) -> None:
        d = DefenderProfile(cover=2, smoke=1)
        assert cover_rank(AttackerProfile(blast=True), d, "ranged") == 0


class TestRollCover:
    def test_light_cover_only_blocks_cancel(self) -> None:
        cancelled, dice = roll_cover(3, 1, scripted("block", "surge", "blank"))
        assert cancelled == 1
        assert len(dice) == 3

    def test_heavy_cover_surges_cancel(self) -> None:
        cancelled, _ = roll_cover(3, 2, scripted("block", "surge", "blank"))
        assert cancelled == 2

    def test_rolls_white_dice(self) -> None:
        _, dice = roll_cover(2, 1, scripted("blank", "blank"))
        assert all(d.color == "white" for d in dice)

    def test_low_profile_rolls_one_fewer_and_adds_a_block(self) -> None:
        cancelled, dice = roll_cover(2, 1, scripted("block"), low_profile=True)
        assert len(dice) == 1
        assert cancelled == 2

    def test_low_profile_single_hit(self) -> None:
        rng = scripted()
        cancelled, dice = roll_cover(1, 1, rng, low_profile=True)
        assert (cancelled, dice) == (1, [])
        rng.choice.assert_not_called()

    def test_low_profile_in_heavy_cover(self) -> None:
        cancelled, _ = roll_cover(2, 2, scripted("surge"), low_profile=True)
        assert cancelled == 2

    def test_no_roll_without_cover_or_hits(self) -> None:
        rng = scripted()
        assert roll_cover(0, 2, rng) == (0, [])
        assert roll_cover(3, 0, rng) == (0, [])
        rng.choice.assert_not_called()


class TestExpectedCancels:
    def test_light(self) -> None:
        assert expected_cancels(6, 1) == pytest.approx(1.0)

    def test_heavy(self) -> None:
        assert expected_cancels(6, 2) == pytest.approx(2.0)

    def test_none(self) -> None:
        assert expected_cancels(0, 2) == 0.0
        assert expected_cancels(4, 0) == 0.0

    def test_low_profile(self) -> None:
        assert expected_cancels(3, 1, low_profile=True) == pytest.approx(1 + 2 / 6)
