"""
Error types raised by the barcode/word converter.

Everything a caller can fix by correcting its input derives from
BarcodeConverterError, which is a ValueError so the Lambda handlers map it to
a 400 response. Readiness and storage failures are RuntimeErrors.
"""
from typing import Any, Optional


class BarcodeConverterError(ValueError):
    """Base class for client-correctable errors."""


class SegmentRuleError(BarcodeConverterError):
    """A segment rule could not be constructed."""

    def __init__(self, message: str, order: Optional[int] = None):
        super().__init__(message)
        self.order = order


class LayoutError(BarcodeConverterError):
    """A layout could not be constructed."""


class LayoutValidationError(BarcodeConverterError):
    """A layout violates one of its structural invariants."""

    DUPLICATE_ORDER = 'duplicate_order'
    NON_SEQUENTIAL_ORDER = 'non_sequential_order'
    WORD_COUNT = 'word_count'
    WORD_MAPPING = 'word_mapping'
    TOTAL_LENGTH = 'total_length'

    def __init__(self, message: str, invariant: str, value: Any = None):
        super().__init__(message)
        self.invariant = invariant
        self.value = value


class LayoutNotFoundError(BarcodeConverterError):
    """No layout with the requested name is loaded."""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class ConversionError(BarcodeConverterError):
    """Encoding or decoding failed."""


class WordCountError(ConversionError):
    """The number of input words is not the layout's word count."""


class LayoutNotValidatedError(ConversionError):
    """A conversion was attempted against a layout that was never validated."""


class UnknownWordError(ConversionError):
    """An input word is not in the dictionary."""

    def __init__(self, message: str, word: str):
        super().__init__(message)
        self.word = word


class IndexOverflowError(ConversionError):
    """A word index has more digits than its segment can hold."""


class BarcodeLengthError(ConversionError):
    """The barcode is empty or its length differs from the layout's."""


class IndexOutOfRangeError(ConversionError):
    """A decoded word index does not address a dictionary entry."""

    def __init__(self, message: str, index: int, size: int):
        super().__init__(message)
        self.index = index
        self.size = size


class SegmentMismatchError(ConversionError):
    """A barcode slice does not satisfy its segment rule."""

    def __init__(self, message: str, order: int):
        super().__init__(message)
        self.order = order


class DictionaryLoadError(RuntimeError):
    """The word dictionary could not be loaded."""


class LayoutStoreError(RuntimeError):
    """The layout store file could not be read or written."""
