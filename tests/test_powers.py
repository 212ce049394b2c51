"""Tests for exponentiation and roots."""

from __future__ import annotations

import pytest

from bigint import Integer
from numerrors import DivisionByZeroError, InvalidExponentError, NegativeSquareRootError


class TestPowers:

    def test_pow(self):
        assert Integer(3).pow(4) == 81
        assert Integer(-2).pow(3) == -8
        assert Integer(0).pow(0) == 1

    def test_pow_negative_exponent(self):
        with pytest.raises(InvalidExponentError):
            Integer(2).pow(-1)

    def test_power_classmethod(self):
        assert Integer.power(10, 30) == 10**30
        assert Integer.power(Integer(-3), 3) == -27

    def test_operator(self):
        assert Integer(2) ** 10 == 1024
        assert 2 ** Integer(10) == 1024
        assert pow(Integer(3), 4, 5) == 1

    def test_operator_negative_exponent(self):
        with pytest.raises(InvalidExponentError):
            Integer(2) ** -1


class TestModularPowers:

    def test_pow_mod(self):
        assert Integer(4).pow_mod(13, 497) == 445
        assert Integer(-2).pow_mod(3, 5) == 2
        assert Integer(4).pow_mod(13, -497) == 445

    def test_pow_mod_negative_exponent_uses_inverse(self):
        assert Integer(3).pow_mod(-1, 11) == 4
        assert Integer(3).pow_mod(-2, 11) == 5

    def test_pow_mod_negative_exponent_without_inverse(self):
        with pytest.raises(DivisionByZeroError):
            Integer(4).pow_mod(-1, 8)

    def test_pow_mod_zero_modulus(self):
        with pytest.raises(DivisionByZeroError):
            Integer(4).pow_mod(2, 0)

    def test_pow_mod_secure(self):
        assert Integer(4).pow_mod_secure(13, 497) == 445

    def test_pow_mod_secure_preconditions(self):
        with pytest.raises(ValueError):
            Integer(4).pow_mod_secure(0, 497)
        with pytest.raises(ValueError):
            Integer(4).pow_mod_secure(3, 496)


class TestRoots:

    def test_sqrt(self, big):
        assert Integer(17).sqrt() == 4
        assert Integer(big * big).sqrt() == big

    def test_sqrt_rem(self):
        s, r = Integer(17).sqrt_rem()
        assert (s, r) == (4, 1)

    def test_sqrt_negative(self):
        with pytest.raises(NegativeSquareRootError):
            Integer(-4).sqrt()
        with pytest.raises(ValueError):
            Integer(-4).sqrt_rem()

    def test_root(self):
        assert Integer(27).root(3) == (3, True)
        r, exact = Integer(30).root(3)
        assert (r, exact) == (3, False)

    def test_odd_root_of_negative(self):
        r, exact = Integer(-30).root(3)
        assert (r, exact) == (-3, False)
        assert Integer(-27).root(3) == (-3, True)

    def test_even_root_of_negative(self):
        with pytest.raises(NegativeSquareRootError):
            Integer(-16).root(4)

    def test_root_degree(self):
        with pytest.raises(InvalidExponentError):
            Integer(8).root(0)

    def test_root_rem(self):
        r, rem = Integer(30).root_rem(3)
        assert (r, rem) == (3, 3)
        r, rem = Integer(-30).root_rem(3)
        assert (r, rem) == (-3, -3)
        assert r ** 3 + rem == -30

    def test_perfect_square(self):
        assert Integer(144).is_perfect_square()
        assert Integer(0).is_perfect_square()
        assert not Integer(145).is_perfect_square()
        assert not Integer(-4).is_perfect_square()

    def test_perfect_power(self):
        assert Integer(32).is_perfect_power()
        assert Integer(1).is_perfect_power()
        assert not Integer(12).is_perfect_power()

    def test_perfect_power_negative(self):
        assert Integer(-8).is_perfect_power()
        assert Integer(-1).is_perfect_power()
        assert not Integer(-4).is_perfect_power()
        assert not Integer(-64 * 3).is_perfect_power()
