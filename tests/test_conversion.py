"""
Tests for the conversion engine.
"""
import pytest

from shared.conversion import ConversionEngine, is_base64
from shared.dictionary import WordDictionary
from shared.errors import (
    BarcodeLengthError,
    IndexOutOfRangeError,
    IndexOverflowError,
    LayoutNotValidatedError,
    LayoutValidationError,
    SegmentMismatchError,
    UnknownWordError,
    WordCountError,
)
from shared.layout import Layout
from shared.segment_rule import SegmentKind, SegmentRule

DEFAULT_BARCODE = "0000T0001E0002AA0003T"
FIRST_FOUR = ["apple", "banana", "cherry", "date"]


@pytest.fixture
def spaced_layout():
    """Word segments separated by a two-character static and a three-character Base64 field."""
    layout = Layout("spaced", [
        SegmentRule.numeric(0, 4, maps_to_word=True),
        SegmentRule.static(1, "XX"),
        SegmentRule.numeric(2, 4, maps_to_word=True),
        SegmentRule.base64(3, 3),
        SegmentRule.numeric(4, 4, maps_to_word=True),
        SegmentRule.static(5, "Y"),
        SegmentRule.numeric(6, 4, maps_to_word=True),
    ])
    layout.validate()
    return layout


def test_encode_default_layout(engine, layout):
    assert engine.encode(FIRST_FOUR, layout) == DEFAULT_BARCODE


def test_decode_default_layout(engine, layout):
    assert engine.decode(DEFAULT_BARCODE, layout) == FIRST_FOUR


def test_encode_uses_placeholders_for_free_segments(engine, spaced_layout):
    assert engine.encode(FIRST_FOUR, spaced_layout) == "0000XX0001AAA0002Y0003"


def test_encode_emits_first_static_or_value(engine):
    layout = Layout("static-or", [
        SegmentRule.numeric(0, 4, maps_to_word=True),
        SegmentRule.static_or(1, 2, ["AA", "BB", "CC"]),
        SegmentRule.numeric(2, 4, maps_to_word=True),
        SegmentRule.numeric(3, 3),
        SegmentRule.numeric(4, 4, maps_to_word=True),
        SegmentRule.numeric(5, 4, maps_to_word=True),
    ])
    layout.validate()

    assert engine.encode(FIRST_FOUR, layout) == "0000AA000100000020003"


def test_encode_output_matches_total_length(engine, layout, spaced_layout):
    words = ["raspberry", "kiwi", "apple", "mango"]
    for candidate in (layout, spaced_layout):
        assert len(engine.encode(words, candidate)) == candidate.total_length


def test_round_trip_preserves_words(engine, layout, spaced_layout):
    words = ["raspberry", "kiwi", "kiwi", "fig"]
    for candidate in (layout, spaced_layout):
        assert engine.decode(engine.encode(words, candidate), candidate) == words


def test_word_count_is_checked(engine, layout):
    with pytest.raises(WordCountError, match="Exactly 4 words are required"):
        engine.encode(["apple", "banana"], layout)
    with pytest.raises(WordCountError):
        engine.encode(FIRST_FOUR + ["fig"], layout)
    with pytest.raises(WordCountError):
        engine.encode("abcd", layout)


def test_unknown_word_is_named(engine, layout):
    with pytest.raises(UnknownWordError, match="Word not found in dictionary: durian") as excinfo:
        engine.encode(["apple", "banana", "durian", "date"], layout)
    assert excinfo.value.word == "durian"


def test_unvalidated_layout_is_rejected(engine):
    layout = Layout("unvalidated", [SegmentRule.numeric(order, 4, maps_to_word=True) for order in range(4)])

    with pytest.raises(LayoutNotValidatedError):
        engine.encode(FIRST_FOUR, layout)
    with pytest.raises(LayoutNotValidatedError):
        engine.decode("0000000100020003", layout)
    assert layout.validated is False


def test_index_wider_than_segment_is_rejected():
    engine = ConversionEngine(WordDictionary(f"word{i}" for i in range(12)))
    layout = Layout("narrow", [SegmentRule.numeric(order, 1, maps_to_word=True) for order in range(4)])
    layout.validate()

    assert engine.encode(["word0", "word1", "word2", "word9"], layout) == "0129"
    with pytest.raises(IndexOverflowError, match="Word index 11"):
        engine.encode(["word0", "word1", "word2", "word11"], layout)


@pytest.mark.parametrize("barcode", ["", None])
def test_empty_barcode_is_rejected(engine, layout, barcode):
    with pytest.raises(BarcodeLengthError, match="cannot be null or empty"):
        engine.decode(barcode, layout)


@pytest.mark.parametrize("barcode", [DEFAULT_BARCODE[:-1], DEFAULT_BARCODE + "T", "123"])
def test_barcode_length_must_match(engine, layout, barcode):
    with pytest.raises(BarcodeLengthError, match="does not match expected length"):
        engine.decode(barcode, layout)


def test_index_past_dictionary_end_is_rejected(engine, layout):
    with pytest.raises(IndexOutOfRangeError, match="Out of bounds for word list size 16") as excinfo:
        engine.decode("0000T0001E0016AA0003T", layout)
    assert excinfo.value.index == 16
    assert excinfo.value.size == 16


def test_word_segment_must_be_digits(engine, layout):
    with pytest.raises(SegmentMismatchError, match="does not contain a valid number: 00a1"):
        engine.decode("0000T00a1E0002AA0003T", layout)
    with pytest.raises(SegmentMismatchError):
        engine.decode("0000T-001E0002AA0003T", layout)


def test_static_mismatch_names_expected_and_actual(engine, spaced_layout):
    with pytest.raises(SegmentMismatchError, match="Expected 'XX' but got 'ZZ'") as excinfo:
        engine.decode("0000ZZ0001AAA0002Y0003", spaced_layout)
    assert excinfo.value.order == 1


def test_static_or_accepts_any_allowed_value(engine, layout):
    assert engine.decode("0000T0001Y0002AA0003T", layout) == FIRST_FOUR


def test_static_or_mismatch_lists_allowed_values(engine, layout):
    with pytest.raises(SegmentMismatchError, match=r"allowed values: \['E', 'X', 'Y'\]"):
        engine.decode("0000T0001Q0002AA0003T", layout)


def test_free_numeric_segment_must_be_digits(engine):
    layout = Layout("free-numeric", [
        SegmentRule.numeric(0, 4, maps_to_word=True),
        SegmentRule.numeric(1, 2),
        SegmentRule.numeric(2, 4, maps_to_word=True),
        SegmentRule.numeric(3, 4, maps_to_word=True),
        SegmentRule.numeric(4, 4, maps_to_word=True),
    ])
    layout.validate()

    assert engine.decode("000042000100020003", layout) == FIRST_FOUR
    with pytest.raises(SegmentMismatchError, match="contains non-numeric characters: '4x'"):
        engine.decode("00004x000100020003", layout)


def test_base64_segment_accepts_real_content(engine, spaced_layout):
    assert engine.decode("0000XX0001Zm90002Y0003", spaced_layout) == FIRST_FOUR


def test_base64_segment_rejects_invalid_characters(engine, layout):
    with pytest.raises(SegmentMismatchError, match="invalid Base64 characters: '\\*\\*'"):
        engine.decode("0000T0001E0002**0003T", layout)


@pytest.mark.parametrize("value,expected", [
    ("AA", True),
    ("AAA", True),
    ("QQ==", True),
    ("Zm9v", True),
    ("a+/9", True),
    ("A", False),
    ("A===", False),
    ("A-_B", False),
    ("A=A=", False),
    ("AA=", False),
])
def test_is_base64(value, expected):
    assert is_base64(value) is expected


def test_engine_keeps_no_state_between_calls(engine, layout, spaced_layout):
    first = engine.encode(FIRST_FOUR, layout)
    engine.encode(["fig", "fig", "fig", "fig"], spaced_layout)

    assert engine.encode(FIRST_FOUR, layout) == first


def test_word_mapped_segment_must_be_numeric(engine):
    rules = [SegmentRule.numeric(order, 4, maps_to_word=True) for order in range(4)]
    object.__setattr__(rules[2], "kind", SegmentKind.BASE64)
    layout = Layout("tampered", rules)
    layout.validate()

    with pytest.raises(LayoutValidationError, match="segment 2 maps to word but is not NUMERIC") as excinfo:
        engine.decode("0000000100020003", layout)
    assert excinfo.value.invariant == LayoutValidationError.WORD_MAPPING
    assert excinfo.value.value == 2
