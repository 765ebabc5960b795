import pytest
from fractions import Fraction
from abcscore import *
from abcscore.syntax import Rhythm


def test_rational_basic():
    r = Rational(6, 8)
    assert r.numerator == 6 and r.denominator == 8
    assert repr(r) == 'Rational(6, 8)'
    assert str(r) == '6/8'
    assert r == Rational(3, 4)
    assert hash(r) == hash(Rational(3, 4))
    assert r.reduced().denominator == 4
    assert r.to_dict() == {'numerator': 6, 'denominator': 8}
    assert float(r) == 0.75
    assert r.to_fraction() == Fraction(3, 4)


def test_rational_arithmetic():
    a = Rational(3, 8)
    assert a * Rational(1, 1) == a
    assert (a * Rational(1, 1)).denominator == 8
    assert a * 2 == Rational(3, 4)
    assert 2 * a == Rational(3, 4)
    assert a + Rational(1, 8) == Rational(1, 2)
    assert a + Rational(1, 4) == Rational(5, 8)
    assert a + 1 == Rational(11, 8)
    assert Rational(1, 4) < Rational(1, 2) <= Rational(2, 4)
    assert Rational(4, 4) == 1
    assert Rational(3, 4) <= 1
    assert Rational(5, 4) > 1
    assert Rational(1, 4) >= Fraction(1, 4)


def test_rational_errors():
    with pytest.raises(ValueError):
        Rational(1, 0)
    with pytest.raises(ValueError):
        Rational.from_string('abc')
    with pytest.raises(TypeError):
        Rational.from_value(0.5)


def test_rational_conversion():
    assert Rational.from_string('3/4') == Rational(3, 4)
    assert Rational.from_string('/4') == Rational(1, 4)
    assert Rational.from_string('3') == Rational(3, 1)
    assert Rational.from_value((1, 8)) == Rational(1, 8)
    assert Rational.from_value(Fraction(2, 3)) == Rational(2, 3)
    assert Rational.from_value(5) == Rational(5, 1)


@pytest.mark.parametrize('symbol', ['>', '>>', '>>>', '<', '<<', '<<<'])
def test_broken_rhythm_sum(symbol):
    current, following = broken_rhythm_multipliers(symbol)
    assert current + following == 2


def test_broken_rhythm_values():
    assert broken_rhythm_multipliers('>') == (Rational(3, 2), Rational(1, 2))
    assert broken_rhythm_multipliers('>>') == (Rational(7, 4),
                                               Rational(1, 4))
    assert broken_rhythm_multipliers('>>>') == (Rational(15, 8),
                                                Rational(1, 8))
    assert broken_rhythm_multipliers('<') == (Rational(1, 2), Rational(3, 2))


@pytest.mark.parametrize('num, sep, den, expected', [
    (None, None, None, Rational(1, 1)),
    ('3', None, None, Rational(3, 1)),
    ('3', '/', '2', Rational(3, 2)),
    (None, '/', None, Rational(1, 2)),
    (None, '//', None, Rational(1, 4)),
    (None, '///', None, Rational(1, 8)),
    (None, '/', '4', Rational(1, 4)),
])
def test_rhythm_fraction(num, sep, den, expected):
    rhythm = Rhythm(0, (0, 0), (0, 0), num, sep, den)
    assert rhythm_fraction(rhythm) == expected


def test_rhythm_fraction_ignores_broken():
    rhythm = Rhythm(0, (0, 0), (0, 0), '2', None, None, '>')
    assert rhythm_fraction(rhythm) == Rational(2, 1)
    assert rhythm_fraction(None) == Rational(1, 1)
