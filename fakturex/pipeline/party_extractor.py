"""Party block extraction: issuer (seller) and receiver (buyer)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from ..config.profile_loader import ExtractionProfile
from ..models.extracted_field import ExtractedField, FieldProvenance
from ..models.layout import NormalizedLayout
from ..models.line import Line
from ..models.parse_result import ParseResult
from ..models.party import Address, Party
from .confidence_scoring import score_tokens
from .identifiers import normalize_iban, normalize_nip
from .matchers import Match, first_match, label_matcher, regex_finder
from .patterns import (
    BANK_DETAIL_LINE,
    BANK_LABEL,
    BLOCK_STOP,
    BUYER_LABEL,
    EMAIL_VALUE,
    IBAN_VALUE,
    NIP_BARE,
    NIP_LABELLED,
    PHONE_LABELLED,
    POSTAL_CODE,
    REGON_LABELLED,
    SELLER_LABEL,
)

logger = logging.getLogger(__name__)

PARTY_REGION_KINDS = ("title", "text", "unknown")
MAX_BLOCK_LINES = 8


@dataclass
class PartyBlock:
    """Lines belonging to one party, label tokens removed."""

    label_line: Line
    lines: List[Line] = field(default_factory=list)


def _tokens_after(line: Line, end: int, until: Optional[int] = None) -> Optional[Line]:
    """Sub-line of tokens starting at/after character offset end (and before until)."""
    positions = [
        pos for pos, (start, _) in enumerate(line.token_spans)
        if start >= end and (until is None or start < until)
    ]
    return line.subset(positions) if positions else None


def _split_at(line: Line, split_x: float) -> Tuple[Optional[Line], Optional[Line]]:
    left = [pos for pos, t in enumerate(line.tokens) if t.x_min < split_x]
    right = [pos for pos, t in enumerate(line.tokens) if t.x_min >= split_x]
    return (
        line.subset(left) if left else None,
        line.subset(right) if right else None,
    )


def _following_lines(lines: List[Line], index: int) -> List[Line]:
    """Lines below a label line in the same region, up to the next label or stop word."""
    anchor = lines[index]
    block: List[Line] = []
    for line in lines[index + 1:]:
        if line.region_index != anchor.region_index or len(block) >= MAX_BLOCK_LINES:
            break
        if SELLER_LABEL.search(line.text) or BUYER_LABEL.search(line.text):
            break
        if BLOCK_STOP.search(line.text):
            break
        block.append(line)
    return block


def find_party_blocks(lines: List[Line]) -> Tuple[Optional[PartyBlock], Optional[PartyBlock]]:
    """Locate seller and buyer blocks by their labels.

    When both labels share one line (side-by-side layout), every following
    line is split at the x-position of the right-hand label.

    Returns:
        (seller_block, buyer_block), either may be None
    """
    seller: Optional[PartyBlock] = None
    buyer: Optional[PartyBlock] = None

    for i, line in enumerate(lines):
        seller_hit = SELLER_LABEL.search(line.text) if seller is None else None
        buyer_hit = BUYER_LABEL.search(line.text) if buyer is None else None

        if seller_hit and buyer_hit:
            left_hit, right_hit = sorted((seller_hit, buyer_hit), key=lambda m: m.start())
            right_pos = line.positions_in_span(right_hit.start(), right_hit.end())[0]
            split_x = line.tokens[right_pos].x_min
            left_block = PartyBlock(label_line=line)
            right_block = PartyBlock(label_line=line)
            first_left = _tokens_after(line, left_hit.end(), until=right_hit.start())
            first_right = _tokens_after(line, right_hit.end())
            if first_left:
                left_block.lines.append(first_left)
            if first_right:
                right_block.lines.append(first_right)
            for below in _following_lines(lines, i):
                left_part, right_part = _split_at(below, split_x)
                if left_part:
                    left_block.lines.append(left_part)
                if right_part:
                    right_block.lines.append(right_part)
            if left_hit is seller_hit:
                seller, buyer = left_block, right_block
            else:
                seller, buyer = right_block, left_block
            continue

        for hit, is_seller in ((seller_hit, True), (buyer_hit, False)):
            if not hit:
                continue
            block = PartyBlock(label_line=line)
            first = _tokens_after(line, hit.end())
            if first:
                block.lines.append(first)
            block.lines.extend(_following_lines(lines, i))
            if is_seller:
                seller = block
            else:
                buyer = block

        if seller is not None and buyer is not None:
            break

    return seller, buyer


def _value_match(line: Line, pattern: Pattern, group: int, rule: str) -> Optional[Match]:
    hit = pattern.search(line.text)
    if hit is None:
        return None
    positions = line.positions_in_span(hit.start(group), hit.end(group))
    if not positions:
        return None
    return Match(
        result=ParseResult.success(hit.group(group)),
        line=line,
        positions=tuple(positions),
        rule=rule,
    )


def _lines_field(lines: List[Line], value, profile: ExtractionProfile, rule: str = "label") -> ExtractedField:
    tokens = [t for line in lines for t in line.tokens]
    return ExtractedField(
        value=value,
        confidence=score_tokens(tokens, rule, profile),
        provenance=FieldProvenance(
            region_index=lines[0].region_index,
            token_indices=tuple(i for line in lines for i in line.token_indices),
        ),
        rule=rule,
    )


def split_address(raw: str) -> Address:
    """Split joined address text on the postal code: street before, city after."""
    hit = POSTAL_CODE.search(raw)
    if hit is None:
        return Address(raw=raw)
    street = raw[:hit.start()].strip(" ,;")
    city = raw[hit.end():].strip(" ,;")
    return Address(
        street=street or None,
        postal_code=hit.group(1),
        city=city or None,
        raw=raw,
    )


def party_from_block(block: PartyBlock, profile: ExtractionProfile) -> Party:
    """Build a Party from block lines.

    Identifier lines (NIP, REGON, IBAN, e-mail, phone) and bare bank detail
    lines ("Bank: ...", "Nr konta:") are consumed first;
    of the remaining lines the first is the name and the rest form the address.
    """
    nip = regon = iban = email = phone = None
    free_lines: List[Line] = []

    for line in block.lines:
        consumed = False
        found = _value_match(line, NIP_LABELLED, 1, "label")
        if found and nip is None:
            nip, consumed = found, True
        found = _value_match(line, REGON_LABELLED, 1, "label")
        if found and regon is None:
            regon, consumed = found, True
        found = _value_match(line, IBAN_VALUE, 1, "label" if BANK_LABEL.search(line.text) else "positional")
        if found and iban is None:
            iban, consumed = found, True
        found = _value_match(line, EMAIL_VALUE, 0, "label")
        if found and email is None:
            email, consumed = found, True
        found = _value_match(line, PHONE_LABELLED, 1, "label")
        if found and phone is None:
            phone, consumed = found, True
        if not consumed and BANK_DETAIL_LINE.search(line.text):
            consumed = True
        if not consumed:
            free_lines.append(line)

    if nip is None:
        for line in free_lines:
            found = _value_match(line, NIP_BARE, 1, "positional")
            if found:
                nip = found
                free_lines.remove(line)
                break

    party_fields = {}
    if free_lines:
        name_line = free_lines[0]
        party_fields["name"] = _lines_field([name_line], name_line.text.strip(" ,;:"), profile)
        address_lines = free_lines[1:]
        if address_lines:
            raw = ", ".join(line.text.strip(" ,;") for line in address_lines)
            party_fields["address"] = _lines_field(address_lines, split_address(raw), profile)

    if nip is not None:
        party_fields["nip"] = nip.to_field(profile, value=normalize_nip(nip.result.value))
    if regon is not None:
        party_fields["regon"] = regon.to_field(profile)
    if iban is not None:
        party_fields["bank_account"] = iban.to_field(profile, value=normalize_iban(iban.result.value))
    if email is not None:
        party_fields["email"] = email.to_field(profile)
    if phone is not None:
        party_fields["phone"] = phone.to_field(profile, value=" ".join(phone.result.value.split()))

    return Party(**party_fields)


def _with_field(party: Party, name: str, extracted: ExtractedField) -> Party:
    values = party.fields()
    values[name] = extracted
    return Party(**values)


ISSUER_BANK_MATCHERS = (
    label_matcher(BANK_LABEL, regex_finder(IBAN_VALUE, group=1)),
)


def extract_parties(
    layout: NormalizedLayout,
    profile: ExtractionProfile,
    warnings: List[str],
) -> Tuple[Party, Party]:
    """Extract issuer and receiver blocks.

    Blocks are anchored on seller/buyer labels. Without labels, the first
    and second NIP found in the document are assigned to issuer and
    receiver by position. An issuer bank account outside the seller block
    is taken from a labelled account line anywhere in the document.

    Returns:
        (issuer, receiver)
    """
    lines = layout.lines(*PARTY_REGION_KINDS)
    seller_block, buyer_block = find_party_blocks(lines)

    issuer = party_from_block(seller_block, profile) if seller_block else Party()
    receiver = party_from_block(buyer_block, profile) if buyer_block else Party()

    if seller_block is None and buyer_block is None:
        warnings.append("parties: no seller/buyer labels found, using positional identifiers")
        nips = []
        for line in lines:
            for pattern in (NIP_LABELLED, NIP_BARE):
                found = _value_match(line, pattern, 1, "positional")
                if found:
                    nips.append(found)
                    break
            if len(nips) == 2:
                break
        if nips:
            issuer = Party(nip=nips[0].to_field(profile, value=normalize_nip(nips[0].result.value)))
        if len(nips) > 1:
            receiver = Party(nip=nips[1].to_field(profile, value=normalize_nip(nips[1].result.value)))

    if not issuer.bank_account.is_set:
        found = first_match(ISSUER_BANK_MATCHERS, layout.lines())
        if found is not None:
            issuer = _with_field(
                issuer,
                "bank_account",
                found.to_field(profile, value=normalize_iban(found.result.value)),
            )

    logger.debug(
        "Parties: issuer nip=%r, receiver nip=%r",
        issuer.nip.value,
        receiver.nip.value,
    )
    return issuer, receiver
