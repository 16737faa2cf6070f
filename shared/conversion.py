"""
Conversion between four dictionary words and a fixed-layout barcode string.
"""
import base64
import binascii
import re
from typing import List, Sequence

from shared.dictionary import WordDictionary
from shared.errors import (
    BarcodeLengthError,
    ConversionError,
    IndexOutOfRangeError,
    IndexOverflowError,
    LayoutNotValidatedError,
    LayoutValidationError,
    SegmentMismatchError,
    UnknownWordError,
    WordCountError,
)
from shared.layout import EXPECTED_WORD_MAPPED_RULES, Layout
from shared.segment_rule import SegmentKind, SegmentRule

_DIGITS = re.compile(r'[0-9]+')
_BASE64 = re.compile(r'[A-Za-z0-9+/]*={0,2}')

# Emitted for Base64 segments that have no data source when encoding
BASE64_FILLER = 'A'


def is_base64(value: str) -> bool:
    """
    Check whether a segment can be decoded as standard Base64.

    Padding is optional, so 'AA' and 'AA==' are both accepted, but a partial
    padding run such as 'AA=' is not.
    """
    if not _BASE64.fullmatch(value):
        return False
    if '=' not in value:
        value += '=' * (-len(value) % 4)
    try:
        base64.b64decode(value, validate=True)
    except binascii.Error:
        return False
    return True


class ConversionEngine:
    """
    Transcodes between words and barcodes for any validated layout.

    The engine holds only the dictionary; layouts are passed per call and
    nothing is kept between calls.
    """

    def __init__(self, dictionary: WordDictionary):
        self.dictionary = dictionary

    def encode(self, words: Sequence[str], layout: Layout) -> str:
        """
        Encode four words as a barcode.

        Args:
            words: Exactly four dictionary words, in layout order
            layout: Validated layout

        Returns:
            Barcode string of layout.total_length characters

        Raises:
            ConversionError: On a wrong word count, an unvalidated layout, an
                unknown word or an index too wide for its segment
            LayoutValidationError: If the layout lacks four word-mapped rules
        """
        if words is None or isinstance(words, str) or len(words) != EXPECTED_WORD_MAPPED_RULES:
            raise WordCountError(f"Exactly {EXPECTED_WORD_MAPPED_RULES} words are required.")
        if not layout.validated:
            raise LayoutNotValidatedError(f"Layout '{layout.name}' has not been validated.")

        word_rules = layout.word_rules
        if len(word_rules) != EXPECTED_WORD_MAPPED_RULES:
            raise LayoutValidationError(
                f"Layout '{layout.name}' is not configured for {EXPECTED_WORD_MAPPED_RULES} word mappings.",
                LayoutValidationError.WORD_COUNT,
                len(word_rules)
            )

        word_segments = {}
        for rule, word in zip(word_rules, words):
            word_segments[rule.order] = self._format_index(rule, word)

        parts = []
        for rule in layout.rules:
            if rule.maps_to_word:
                parts.append(word_segments[rule.order])
            else:
                parts.append(self._placeholder(rule))
        return ''.join(parts)

    def decode(self, barcode: str, layout: Layout) -> List[str]:
        """
        Decode a barcode into its four words.

        Every segment is checked against its rule, not only the word-mapped ones.

        Args:
            barcode: Barcode string
            layout: Validated layout

        Returns:
            The four words in layout order

        Raises:
            ConversionError: On an empty or wrongly sized barcode, an
                unvalidated layout, an out-of-range index or any segment
                that does not match its rule
        """
        if not barcode or not isinstance(barcode, str):
            raise BarcodeLengthError("Barcode cannot be null or empty.")
        if not layout.validated:
            raise LayoutNotValidatedError(f"Layout '{layout.name}' has not been validated.")
        if len(barcode) != layout.total_length:
            raise BarcodeLengthError(
                f"Barcode length ({len(barcode)}) does not match expected length "
                f"from layout ({layout.total_length})."
            )

        words = []
        position = 0
        for rule in layout.rules:
            if position + rule.length > len(barcode):
                raise BarcodeLengthError(
                    f"Barcode is too short to process rule (order {rule.order}). Current position: {position}"
                )
            segment = barcode[position:position + rule.length]
            position += rule.length

            if rule.maps_to_word:
                words.append(self._resolve_word(rule, segment))
            else:
                self._check_segment(rule, segment)

        if len(words) != EXPECTED_WORD_MAPPED_RULES:
            raise LayoutValidationError(
                f"Extracted {len(words)} words, but layout '{layout.name}' must yield {EXPECTED_WORD_MAPPED_RULES}.",
                LayoutValidationError.WORD_COUNT,
                len(words)
            )
        return words

    def _format_index(self, rule: SegmentRule, word: str) -> str:
        if not isinstance(word, str) or word not in self.dictionary:
            raise UnknownWordError(f"Word not found in dictionary: {word}", word)

        index = self.dictionary.index_of(word)
        value = f"{index:0{rule.length}d}"
        if len(value) > rule.length:
            raise IndexOverflowError(
                f"Word index {index} for word '{word}' is too long for segment "
                f"(order {rule.order}, length {rule.length})."
            )
        return value

    def _placeholder(self, rule: SegmentRule) -> str:
        if rule.kind is SegmentKind.STATIC:
            return rule.static_value
        if rule.kind is SegmentKind.STATIC_OR:
            return rule.static_or_values[0]
        if rule.kind is SegmentKind.NUMERIC:
            return '0' * rule.length
        if rule.kind is SegmentKind.BASE64:
            return BASE64_FILLER * rule.length
        raise ConversionError(f"Unhandled segment type {rule.kind} at order {rule.order}")

    def _resolve_word(self, rule: SegmentRule, segment: str) -> str:
        if rule.kind is not SegmentKind.NUMERIC:
            raise LayoutValidationError(
                f"Rule misconfiguration: segment {rule.order} maps to word but is not NUMERIC.",
                LayoutValidationError.WORD_MAPPING,
                rule.order
            )
        if not _DIGITS.fullmatch(segment):
            raise SegmentMismatchError(
                f"Segment (order {rule.order}) marked for word mapping does not contain a valid number: {segment}",
                rule.order
            )

        index = int(segment)
        size = len(self.dictionary)
        if index >= size:
            raise IndexOutOfRangeError(
                f"Invalid word index {index} extracted from segment (order {rule.order}). "
                f"Out of bounds for word list size {size}",
                index,
                size
            )
        return self.dictionary.word_at(index)

    def _check_segment(self, rule: SegmentRule, segment: str) -> None:
        if rule.kind is SegmentKind.STATIC:
            if segment != rule.static_value:
                raise SegmentMismatchError(
                    f"Static segment mismatch for rule (order {rule.order}). "
                    f"Expected '{rule.static_value}' but got '{segment}'.",
                    rule.order
                )
        elif rule.kind is SegmentKind.STATIC_OR:
            if segment not in rule.static_or_values:
                raise SegmentMismatchError(
                    f"Segment value '{segment}' for STATIC_OR rule (order {rule.order}) does not match "
                    f"any of the allowed values: {list(rule.static_or_values)}",
                    rule.order
                )
        elif rule.kind is SegmentKind.NUMERIC:
            if not _DIGITS.fullmatch(segment):
                raise SegmentMismatchError(
                    f"Numeric segment (order {rule.order}) contains non-numeric characters: '{segment}'.",
                    rule.order
                )
        elif rule.kind is SegmentKind.BASE64:
            if not is_base64(segment):
                raise SegmentMismatchError(
                    f"Base64 segment (order {rule.order}) contains invalid Base64 characters: '{segment}'.",
                    rule.order
                )
        else:
            raise ConversionError(f"Unhandled segment type {rule.kind} at order {rule.order}")
