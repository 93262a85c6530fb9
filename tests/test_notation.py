# test_notation.py
import pytest

from Rollmark.metrics import get_counter
from Rollmark.rules.errors import DiceError, InvalidNotationError
from Rollmark.rules.notation import MAX_DICE, canonicalize, format_modifier, parse
from Rollmark.rules.types import KeepMode, KeepRule, NotationDescriptor


def test_dice_with_modifier():
    assert parse("2d6+3") == NotationDescriptor(
        count=2, sides=6, modifier=3, keep=None, canonical="2d6+3"
    )


def test_implicit_one_die():
    d = parse("d20")
    assert (d.count, d.sides, d.modifier, d.keep) == (1, 20, 0, None)
    assert d.canonical == "d20"
    assert d.is_single_d20


def test_negative_modifier():
    d = parse("3d10-2")
    assert (d.count, d.sides, d.modifier) == (3, 10, -2)


def test_keep_highest():
    d = parse("4d6kh3")
    assert d.keep == KeepRule(mode=KeepMode.HIGHEST, count=3)
    assert (d.count, d.sides, d.modifier) == (4, 6, 0)
    assert not d.is_single_d20


def test_keep_lowest_with_modifier():
    d = parse("2d20kl1-2")
    assert d.keep == KeepRule(mode=KeepMode.LOWEST, count=1)
    assert d.modifier == -2


@pytest.mark.parametrize("raw,mod", [("+5", 5), ("-3", -3), ("7", 7), ("+0", 0)])
def test_flat_modifier(raw, mod):
    d = parse(raw)
    assert (d.count, d.sides, d.modifier, d.keep) == (0, 0, mod, None)
    assert d.is_flat


def test_case_and_whitespace_insensitive():
    d = parse(" 4 D6 KH3 + 2 ")
    assert d.canonical == "4d6kh3+2"
    assert d.keep == KeepRule(mode=KeepMode.HIGHEST, count=3)
    assert d.modifier == 2


def test_zero_dice_is_allowed():
    d = parse("0d6")
    assert (d.count, d.sides) == (0, 6)


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "roll some dice", "d", "2d", "2d6+", "2d6kh", "2d6++3", "1d20+5+2", "2x6", "kh3"],
)
def test_invalid_notation(raw):
    with pytest.raises(InvalidNotationError) as ei:
        parse(raw)
    assert ei.value.notation == raw


def test_zero_sides_rejected():
    with pytest.raises(InvalidNotationError, match="at least one side"):
        parse("2d0")


def test_zero_keep_rejected():
    with pytest.raises(InvalidNotationError, match="keep count"):
        parse("4d6kh0")


def test_error_is_value_error():
    with pytest.raises(ValueError):
        parse("bad notation")
    assert issubclass(InvalidNotationError, DiceError)


@pytest.mark.parametrize(
    "raw", ["2d6+3", "D20", " 4d6 kh3 ", "2d20KL1 - 1", "+5", "-0", "d8", "10d100+50"]
)
def test_canonical_form_is_stable(raw):
    first = parse(raw)
    again = parse(first.canonical)
    assert again.canonical == first.canonical
    assert again == first


def test_parse_counters():
    parse("1d4")
    with pytest.raises(InvalidNotationError):
        parse("nope")
    assert get_counter("dice.parse.ok") == 1
    assert get_counter("dice.parse.invalid") == 1


def test_helpers():
    assert canonicalize(" 2D6 + 1 ") == "2d6+1"
    assert format_modifier(4) == "+4"
    assert format_modifier(-1) == "-1"
    assert format_modifier(0) == "+0"


@pytest.mark.parametrize("raw", ["٢d6", "1d٦", "+٥", "4d6kh٣"])
def test_non_ascii_digits_rejected(raw):
    with pytest.raises(InvalidNotationError):
        parse(raw)


def test_dice_count_limit():
    assert parse(f"{MAX_DICE}d6").count == MAX_DICE
    with pytest.raises(InvalidNotationError, match="too many dice"):
        parse(f"{MAX_DICE + 1}d6")
    with pytest.raises(InvalidNotationError, match="too many dice"):
        parse("99999999999d6")


def test_dice_count_limit_is_configurable():
    assert parse("5d6", max_dice=5).count == 5
    with pytest.raises(InvalidNotationError):
        parse("6d6", max_dice=5)


def test_oversized_numbers_are_invalid_notation():
    with pytest.raises(InvalidNotationError, match="number too large"):
        parse("1d" + "9" * 5000)
