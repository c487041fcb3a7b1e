"""Tests for dice rolling, tallying and wild-aware counting."""

import random

from liars_dice.utils.dice import Die, count_matching, roll_dice, roll_die, tally


class TestRollDie:
    def test_value_in_range(self):
        rng = random.Random(1)
        for _ in range(200):
            die = roll_die(rng=rng)
            assert 1 <= die.value <= 6

    def test_fresh_die_is_hidden(self):
        assert roll_die(7, random.Random(0)).revealed is False

    def test_keeps_id(self):
        assert roll_die(13, random.Random(0)).id == 13

    def test_every_face_appears(self):
        rng = random.Random(42)
        faces = {roll_die(rng=rng).value for _ in range(500)}
        assert faces == {1, 2, 3, 4, 5, 6}


class TestRollDice:
    def test_count(self):
        assert len(roll_dice(5, 1, random.Random(0))) == 5

    def test_zero_dice(self):
        assert roll_dice(0, 1, random.Random(0)) == ()

    def test_ids_are_owner_scoped(self):
        first = roll_dice(3, 1, random.Random(0))
        second = roll_dice(3, 2, random.Random(0))
        assert [d.id for d in first] == [1000, 1001, 1002]
        assert [d.id for d in second] == [2000, 2001, 2002]

    def test_large_hands_do_not_collide(self):
        first = roll_dice(12, 1, random.Random(0))
        second = roll_dice(12, 2, random.Random(0))
        ids = [d.id for d in first + second]
        assert len(set(ids)) == 24

    def test_seeded_rolls_repeat(self):
        a = roll_dice(5, 1, random.Random(9))
        b = roll_dice(5, 1, random.Random(9))
        assert a == b


class TestReveal:
    def test_reveal_returns_copy(self):
        die = Die(id=1, value=4)
        shown = die.reveal()
        assert shown.revealed is True
        assert shown.value == 4
        assert die.revealed is False


class TestTally:
    def test_empty_has_every_face(self):
        assert tally([]) == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0}

    def test_counts_faces(self):
        dice = [Die(0, 4), Die(1, 4), Die(2, 1), Die(3, 2)]
        assert tally(dice) == {1: 1, 2: 1, 3: 0, 4: 2, 5: 0, 6: 0}

    def test_sum_equals_dice_count(self):
        dice = roll_dice(10, 1, random.Random(3))
        assert sum(tally(dice).values()) == 10


class TestCountMatching:
    def test_wilds_count_for_other_faces(self):
        dice = [Die(0, 4), Die(1, 4), Die(2, 1), Die(3, 2)]
        assert count_matching(dice, 4) == 3

    def test_ones_count_once(self):
        assert count_matching([1, 1, 3], 1) == 2

    def test_accepts_plain_values(self):
        assert count_matching([1, 1, 3], 3) == 3

    def test_no_matches(self):
        assert count_matching([2, 3, 4], 6) == 0
