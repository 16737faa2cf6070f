"""
Barcode layouts: a named, ordered set of segment rules.

Construction only checks shape; validate() checks the cross-rule invariants
and must succeed before a layout is used for conversion.
"""
from typing import Dict, Any, List, Optional, Sequence, Tuple

from shared.errors import LayoutError, LayoutValidationError, SegmentRuleError
from shared.segment_rule import SegmentRule

# Every barcode reconciles to exactly this many words
EXPECTED_WORD_MAPPED_RULES = 4


class Layout:
    """
    Named barcode format.

    A Layout is never edited in place. To change one, build a new instance,
    validate it and replace the old one by name.
    """

    def __init__(self, name: str, rules: Sequence[SegmentRule]):
        if not isinstance(name, str) or not name.strip():
            raise LayoutError("Layout name cannot be null or empty.")
        rules = list(rules or ())
        if not rules:
            raise LayoutError("Layout must contain at least one rule.")
        if any(rule is None for rule in rules):
            raise LayoutError("Rule list cannot contain null segment rules.")
        if not all(isinstance(rule, SegmentRule) for rule in rules):
            raise LayoutError("Rule list may only contain SegmentRule objects.")

        self._name = name
        # sorted() is stable, so duplicate orders keep their input order
        self._rules: Tuple[SegmentRule, ...] = tuple(sorted(rules, key=lambda rule: rule.order))
        self._validated = False
        self._total_length: Optional[int] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def rules(self) -> Tuple[SegmentRule, ...]:
        return self._rules

    @property
    def validated(self) -> bool:
        return self._validated

    @property
    def total_length(self) -> int:
        """Sum of all rule lengths; cached once the layout is validated."""
        if self._validated and self._total_length is not None:
            return self._total_length
        return sum(rule.length for rule in self._rules)

    @property
    def word_rules(self) -> List[SegmentRule]:
        """Word-mapped rules in ascending order."""
        return [rule for rule in self._rules if rule.maps_to_word]

    def validate(self) -> None:
        """
        Check the layout invariants, stopping at the first violation.

        Checks run in this order: unique orders, contiguous orders starting at
        the lowest one, exactly four word-mapped rules, positive total length.
        Once validation succeeds further calls do nothing.

        Raises:
            LayoutValidationError: Naming the failed invariant and the offending value
        """
        if self._validated:
            return

        seen = set()
        expected_order = self._rules[0].order
        word_mapped = 0
        for rule in self._rules:
            if rule.order in seen:
                raise LayoutValidationError(
                    f"Duplicate order number found: {rule.order} in layout '{self._name}'.",
                    LayoutValidationError.DUPLICATE_ORDER,
                    rule.order
                )
            seen.add(rule.order)

            if rule.order != expected_order:
                raise LayoutValidationError(
                    f"Non-sequential order number found. Expected {expected_order}, "
                    f"but got {rule.order} in layout '{self._name}'.",
                    LayoutValidationError.NON_SEQUENTIAL_ORDER,
                    expected_order
                )
            expected_order += 1

            if rule.maps_to_word:
                word_mapped += 1

        if word_mapped != EXPECTED_WORD_MAPPED_RULES:
            raise LayoutValidationError(
                f"Layout '{self._name}' must have exactly {EXPECTED_WORD_MAPPED_RULES} rules that map "
                f"to a word (mapsToWord=true). Found {word_mapped}.",
                LayoutValidationError.WORD_COUNT,
                word_mapped
            )

        total_length = sum(rule.length for rule in self._rules)
        if total_length <= 0:
            raise LayoutValidationError(
                f"Total barcode length must be positive for layout '{self._name}'.",
                LayoutValidationError.TOTAL_LENGTH,
                total_length
            )

        self._total_length = total_length
        self._validated = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Layout':
        """
        Build an unvalidated layout from a layout store record.

        Args:
            record: Dict with a name and a list of rule records

        Returns:
            Constructed Layout

        Raises:
            LayoutError: If the record shape is wrong
            SegmentRuleError: If any rule record is invalid
        """
        if not isinstance(record, dict):
            raise LayoutError(f"Layout record must be an object, got {type(record).__name__}")
        name = record.get('name')
        raw_rules = record.get('rules')
        if not isinstance(raw_rules, list):
            raise LayoutError(f"Layout '{name}' must define a list of rules.")

        rules = []
        for raw_rule in raw_rules:
            try:
                rules.append(SegmentRule.from_record(raw_rule))
            except SegmentRuleError as e:
                raise SegmentRuleError(f"Invalid rule in layout '{name}': {e}", order=e.order) from e
        return cls(name, rules)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the layout store record shape."""
        return {
            'name': self._name,
            'rules': [rule.to_record() for rule in self._rules],
        }

    def __eq__(self, other):
        if not isinstance(other, Layout):
            return NotImplemented
        return self._name == other._name and self._rules == other._rules

    def __hash__(self):
        return hash((self._name, self._rules))

    def __repr__(self):
        return (
            f"Layout(name={self._name!r}, rules={len(self._rules)}, "
            f"validated={self._validated}, total_length={self.total_length})"
        )


def default_layout() -> Layout:
    """
    Built-in layout used when no layouts are configured.

    Four 4-digit word indexes separated by a static 'T', a one-of 'E'/'X'/'Y'
    marker and a 2-character Base64 field: 21 characters in total.
    """
    layout = Layout('default-21char', [
        SegmentRule.numeric(0, 4, maps_to_word=True),
        SegmentRule.static(1, 'T'),
        SegmentRule.numeric(2, 4, maps_to_word=True),
        SegmentRule.static_or(3, 1, ['E', 'X', 'Y']),
        SegmentRule.numeric(4, 4, maps_to_word=True),
        SegmentRule.base64(5, 2),
        SegmentRule.numeric(6, 4, maps_to_word=True),
        SegmentRule.static(7, 'T'),
    ])
    layout.validate()
    return layout
