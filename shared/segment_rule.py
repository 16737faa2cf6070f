"""
Segment rules: one fixed-width slice of a barcode layout.

A rule is validated entirely at construction; an instance that exists is a
well-formed rule.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, Sequence, Tuple

from shared.errors import SegmentRuleError


class SegmentKind(str, Enum):
    """Kind of data a segment holds."""
    NUMERIC = 'NUMERIC'
    BASE64 = 'BASE64'
    STATIC = 'STATIC'
    STATIC_OR = 'STATIC_OR'


def _require_int(value: Any, name: str, order: Any) -> int:
    # bool is an int subclass but never a valid order or length
    if isinstance(value, bool) or not isinstance(value, int):
        raise SegmentRuleError(
            f"Segment {name} must be an integer, got {value!r}. Rule order: {order}",
            order=order if isinstance(order, int) else None
        )
    return value


@dataclass(frozen=True)
class SegmentRule:
    """
    Immutable description of one positional barcode segment.

    Attributes:
        order: Position among the layout's rules
        length: Exact number of characters the segment occupies
        kind: Kind of data held by the segment
        static_value: Fixed value, STATIC rules only
        static_or_values: Allowed values, STATIC_OR rules only; the first is
            the default emitted when encoding
        maps_to_word: Whether the segment holds a dictionary index
    """
    order: int
    length: int
    kind: SegmentKind
    static_value: Optional[str] = None
    static_or_values: Optional[Tuple[str, ...]] = None
    maps_to_word: bool = field(default=False)

    def __post_init__(self):
        order = _require_int(self.order, 'order', self.order)
        length = _require_int(self.length, 'length', order)
        if length <= 0:
            raise SegmentRuleError(
                f"Segment length must be positive, got {length}. Rule order: {order}",
                order=order
            )

        try:
            kind = SegmentKind(self.kind)
        except ValueError:
            raise SegmentRuleError(f"Unknown segment type: {self.kind!r}. Rule order: {order}", order=order)
        object.__setattr__(self, 'kind', kind)
        object.__setattr__(self, 'maps_to_word', bool(self.maps_to_word))

        if self.maps_to_word and kind is not SegmentKind.NUMERIC:
            raise SegmentRuleError(
                f"Only NUMERIC segments can be mapped to a word. Rule order: {order}",
                order=order
            )

        static_value = None
        static_or_values = None
        if kind is SegmentKind.STATIC:
            static_value = self.static_value
            if not static_value or not isinstance(static_value, str):
                raise SegmentRuleError(
                    f"Static value cannot be null or empty for STATIC segment type. Rule order: {order}",
                    order=order
                )
            if len(static_value) != length:
                raise SegmentRuleError(
                    f"Length of staticValue ('{static_value}', length {len(static_value)}) must match "
                    f"the segment length ({length}) for STATIC type. Rule order: {order}",
                    order=order
                )
        elif kind is SegmentKind.STATIC_OR:
            if not self.static_or_values or isinstance(self.static_or_values, str):
                raise SegmentRuleError(
                    f"staticOrValues cannot be null or empty for STATIC_OR segment type. Rule order: {order}",
                    order=order
                )
            for value in self.static_or_values:
                if not value or not isinstance(value, str):
                    raise SegmentRuleError(
                        f"Values in staticOrValues cannot be null or empty. Rule order: {order}",
                        order=order
                    )
                if len(value) != length:
                    raise SegmentRuleError(
                        f"Length of each value in staticOrValues ('{value}', length {len(value)}) must match "
                        f"the segment length ({length}) for STATIC_OR type. Rule order: {order}",
                        order=order
                    )
            static_or_values = tuple(self.static_or_values)

        object.__setattr__(self, 'static_value', static_value)
        object.__setattr__(self, 'static_or_values', static_or_values)

    @classmethod
    def numeric(cls, order: int, length: int, maps_to_word: bool = False) -> 'SegmentRule':
        return cls(order, length, SegmentKind.NUMERIC, maps_to_word=maps_to_word)

    @classmethod
    def base64(cls, order: int, length: int) -> 'SegmentRule':
        return cls(order, length, SegmentKind.BASE64)

    @classmethod
    def static(cls, order: int, value: str) -> 'SegmentRule':
        return cls(order, len(value or ''), SegmentKind.STATIC, static_value=value)

    @classmethod
    def static_or(cls, order: int, length: int, values: Sequence[str]) -> 'SegmentRule':
        return cls(order, length, SegmentKind.STATIC_OR, static_or_values=values)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'SegmentRule':
        """
        Build a rule from a layout store record.

        Args:
            record: Dict with order, length, type and the kind-specific
                staticValue / staticOrValues fields plus mapsToWord

        Returns:
            Constructed SegmentRule

        Raises:
            SegmentRuleError: If the record is malformed or the rule is invalid
        """
        if not isinstance(record, dict):
            raise SegmentRuleError(f"Segment rule record must be an object, got {type(record).__name__}")
        missing = [key for key in ('order', 'length', 'type') if record.get(key) is None]
        if missing:
            raise SegmentRuleError(
                f"Segment rule record is missing required fields: {', '.join(missing)}",
                order=record.get('order') if isinstance(record.get('order'), int) else None
            )

        static_or_values = record.get('staticOrValues')
        if static_or_values is not None and not isinstance(static_or_values, (list, tuple)):
            raise SegmentRuleError(
                f"staticOrValues must be a list. Rule order: {record.get('order')}",
                order=record.get('order') if isinstance(record.get('order'), int) else None
            )

        maps_to_word = record.get('mapsToWord', False)
        if not isinstance(maps_to_word, bool):
            raise SegmentRuleError(
                f"mapsToWord must be a boolean, got {maps_to_word!r}. Rule order: {record.get('order')}",
                order=record.get('order') if isinstance(record.get('order'), int) else None
            )

        return cls(
            order=record['order'],
            length=record['length'],
            kind=record['type'],
            static_value=record.get('staticValue'),
            static_or_values=static_or_values,
            maps_to_word=maps_to_word
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the layout store record shape."""
        return {
            'order': self.order,
            'length': self.length,
            'type': self.kind.value,
            'staticValue': self.static_value,
            'staticOrValues': list(self.static_or_values) if self.static_or_values is not None else None,
            'mapsToWord': self.maps_to_word,
        }
