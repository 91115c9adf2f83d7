"""Ordered matcher strategies for locating field values in lines.

A matcher takes the candidate lines (in scan order) and returns the first
Match it can produce, or None. Fields are located by trying an ordered
list of independent matchers, label-anchored ones first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Pattern, Sequence, Tuple

from ..config.profile_loader import ExtractionProfile
from ..models.extracted_field import ExtractedField, FieldProvenance
from ..models.line import Line
from ..models.parse_result import ParseResult
from ..models.token import TextToken
from .confidence_scoring import score_tokens

# Finds a value in text: (parse result, start, end) relative to the text
ValueFinder = Callable[[str], Optional[Tuple[ParseResult, int, int]]]


@dataclass(frozen=True)
class Match:
    """A located value with the line tokens that carry it.

    Attributes:
        result: Parsed value (or parse failure)
        line: Line holding the value
        positions: Positions of the value tokens within the line
        rule: "label" or "positional"
    """

    result: ParseResult
    line: Line
    positions: Tuple[int, ...]
    rule: str

    @property
    def ok(self) -> bool:
        return self.result.ok

    @property
    def tokens(self) -> List[TextToken]:
        return [self.line.tokens[p] for p in self.positions]

    @property
    def provenance(self) -> FieldProvenance:
        return FieldProvenance(
            region_index=self.line.region_index,
            token_indices=tuple(self.line.token_indices[p] for p in self.positions),
        )

    def to_field(self, profile: ExtractionProfile, value: Any = None) -> ExtractedField:
        """Build the ExtractedField for a successful match."""
        return ExtractedField(
            value=self.result.value if value is None else value,
            confidence=score_tokens(self.tokens, self.rule, profile),
            provenance=self.provenance,
            rule=self.rule,
        )


Matcher = Callable[[Sequence[Line]], Optional[Match]]


def _match_in_line(line: Line, offset: int, finder: ValueFinder, rule: str) -> Optional[Match]:
    found = finder(line.text[offset:])
    if found is None:
        return None
    result, start, end = found
    positions = line.positions_in_span(offset + start, offset + end)
    if not positions:
        return None
    return Match(result=result, line=line, positions=tuple(positions), rule=rule)


def label_matcher(label: Pattern, finder: ValueFinder, look_below: int = 1) -> Matcher:
    """Value right of a label on the same line, else on the line(s) below it.

    Lines below are only considered within the same region.
    """

    def match(lines: Sequence[Line]) -> Optional[Match]:
        for i, line in enumerate(lines):
            for label_match in label.finditer(line.text):
                found = _match_in_line(line, label_match.end(), finder, "label")
                if found is not None:
                    return found
                for below in lines[i + 1:i + 1 + look_below]:
                    if below.region_index != line.region_index:
                        break
                    found = _match_in_line(below, 0, finder, "label")
                    if found is not None:
                        return found
        return None

    return match


def positional_matcher(finder: ValueFinder, exclude: Optional[Pattern] = None) -> Matcher:
    """First value anywhere in the lines, without a label.

    Lines matching exclude (e.g. labels of other fields) are skipped.
    """

    def match(lines: Sequence[Line]) -> Optional[Match]:
        for line in lines:
            if exclude is not None and exclude.search(line.text):
                continue
            found = _match_in_line(line, 0, finder, "positional")
            if found is not None:
                return found
        return None

    return match


def first_match(
    matchers: Sequence[Matcher],
    lines: Sequence[Line],
    rejected: Optional[List[Match]] = None,
) -> Optional[Match]:
    """Return the first successful match of the ordered matchers.

    Matches whose value failed to parse are appended to rejected (when
    given) and the next matcher is tried.
    """
    for matcher in matchers:
        found = matcher(lines)
        if found is None:
            continue
        if found.ok:
            return found
        if rejected is not None:
            rejected.append(found)
    return None


def regex_finder(pattern: Pattern, group: int = 0, parse: Optional[Callable[[str], ParseResult]] = None) -> ValueFinder:
    """Finder returning the first regex hit, optionally parsed."""

    def find(text: str) -> Optional[Tuple[ParseResult, int, int]]:
        hit = pattern.search(text)
        if hit is None:
            return None
        raw = hit.group(group)
        result = parse(raw) if parse else ParseResult.success(raw)
        return result, hit.start(group), hit.end(group)

    return find
