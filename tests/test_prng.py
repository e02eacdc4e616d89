import pytest

from inventory_optimizer import (
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    LinearCongruentialGenerator,
    derive_seed,
    round_half_up,
)


def test_generator_constants_are_fixed():
    assert (LCG_MULTIPLIER, LCG_INCREMENT, LCG_MODULUS) == (9301, 49297, 233280)


def test_generator_sequence_for_seed_42():
    rng = LinearCongruentialGenerator(42)

    assert rng.next() == 206659 / 233280
    assert rng.next() == 190736 / 233280
    assert rng.next() == 223713 / 233280
    assert rng.state == 223713


def test_generators_with_same_seed_agree():
    first = LinearCongruentialGenerator(1234)
    second = LinearCongruentialGenerator(1234)

    assert [first.next() for _ in range(100)] == [second.next() for _ in range(100)]


def test_generator_values_are_unit_interval():
    rng = LinearCongruentialGenerator(0)
    values = [rng.next() for _ in range(5000)]

    assert values[0] == 49297 / 233280
    assert all(0.0 <= value < 1.0 for value in values)


def test_randrange_stays_below_bound():
    rng = LinearCongruentialGenerator(7)

    draws = [rng.randrange(3) for _ in range(300)]

    assert set(draws) == {0, 1, 2}
    with pytest.raises(ValueError):
        rng.randrange(0)


def test_derive_seed_separates_streams():
    assert derive_seed(42, 3, 7) == 30049
    assert derive_seed(42, 3, 7, "lead_time") == 80049
    with pytest.raises(ValueError, match="Unknown seed purpose"):
        derive_seed(42, 0, 0, "other")


def test_round_half_up_rounds_ties_upward():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(2.49) == 2
