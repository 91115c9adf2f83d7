"""Tests for issuer/receiver block extraction."""

import pytest

from conftest import region, words
from fakturex.models.document import Document
from fakturex.pipeline.layout_normalizer import normalize_layout
from fakturex.pipeline.party_extractor import extract_parties, find_party_blocks, split_address


def _layout(rows, profile):
    tokens = []
    for i, text in enumerate(rows):
        tokens += words(text, 40, 80 + 15 * i)
    document = Document(
        document_id="parties",
        tokens=tuple(tokens),
        regions=(region("text", 30, 75, 520, 20 + 15 * len(rows)),),
    )
    return normalize_layout(document, profile)


STACKED_ROWS = [
    "Sprzedawca: ACME Sp. z o.o.",
    "ul. Długa 1",
    "00-001 Warszawa",
    "NIP: 521-301-72-28",
    "REGON: 123456785",
    "tel. +48 22 123 45 67",
    "biuro@acme.pl",
    "Konto: 61 1090 1014 0000 0712 1981 2874",
    "Nabywca:",
    "Beta S.A.",
    "NIP: PL 1234563218",
]


class TestSideBySideBlocks:
    def test_invoice_parties(self, invoice_document, profile):
        warnings = []
        issuer, receiver = extract_parties(normalize_layout(invoice_document, profile), profile, warnings)

        assert issuer.name.value == "ACME Sp. z o.o."
        assert issuer.nip.value == "5213017228"
        assert issuer.nip.rule == "label"
        assert issuer.address.value.street == "ul. Długa 1"
        assert issuer.address.value.postal_code == "00-001"
        assert issuer.address.value.city == "Warszawa"

        assert receiver.name.value == "Beta S.A."
        assert receiver.nip.value == "1234563218"
        assert receiver.address.value.city == "Kraków"
        assert warnings == []

    def test_issuer_bank_account_from_labelled_line(self, invoice_document, profile):
        issuer, receiver = extract_parties(normalize_layout(invoice_document, profile), profile, [])
        assert issuer.bank_account.value == "PL61109010140000071219812874"
        assert issuer.bank_account.rule == "label"
        assert len(issuer.bank_account.provenance.token_indices) == 7
        assert not receiver.bank_account.is_set

    def test_blocks_split_at_right_label(self, invoice_document, profile):
        lines = normalize_layout(invoice_document, profile).lines("text")
        seller, buyer = find_party_blocks(lines)
        assert [line.text for line in seller.lines] == [
            "ACME Sp. z o.o.",
            "ul. Długa 1",
            "00-001 Warszawa",
            "NIP: 5213017228",
        ]
        assert [line.text for line in buyer.lines][0] == "Beta S.A."


class TestStackedBlocks:
    def test_identifiers_and_contacts(self, profile):
        issuer, receiver = extract_parties(_layout(STACKED_ROWS, profile), profile, [])

        assert issuer.name.value == "ACME Sp. z o.o."
        assert issuer.nip.value == "5213017228"
        assert issuer.regon.value == "123456785"
        assert issuer.phone.value == "+48 22 123 45 67"
        assert issuer.email.value == "biuro@acme.pl"
        assert issuer.bank_account.value == "PL61109010140000071219812874"
        assert issuer.bank_account.rule == "label"
        assert issuer.address.value.format() == "ul. Długa 1, 00-001 Warszawa"

        assert receiver.name.value == "Beta S.A."
        assert receiver.nip.value == "1234563218"
        assert receiver.address.value is None

    def test_label_token_is_not_part_of_name(self, profile):
        issuer, _ = extract_parties(_layout(STACKED_ROWS, profile), profile, [])
        assert 0 not in issuer.name.provenance.token_indices

    def test_bare_nip_is_positional(self, profile):
        rows = ["Sprzedawca:", "ACME Sp. z o.o.", "5213017228"]
        issuer, _ = extract_parties(_layout(rows, profile), profile, [])
        assert issuer.nip.value == "5213017228"
        assert issuer.nip.rule == "positional"
        assert issuer.nip.confidence == pytest.approx(0.7)
        assert not issuer.address.is_set

    def test_block_stops_at_stop_line(self, profile):
        rows = ["Nabywca: Beta S.A.", "30-002 Kraków", "Forma płatności: przelew"]
        _, receiver = extract_parties(_layout(rows, profile), profile, [])
        assert receiver.address.value.raw == "30-002 Kraków"

    def test_bank_in_party_name_is_kept(self, profile):
        rows = [
            "Sprzedawca:",
            "PKO Bank Polski S.A.",
            "ul. Puławska 15",
            "02-515 Warszawa",
            "NIP: 5213017228",
            "Bank: Millennium",
        ]
        issuer, _ = extract_parties(_layout(rows, profile), profile, [])

        assert issuer.name.value == "PKO Bank Polski S.A."
        assert issuer.address.value.format() == "ul. Puławska 15, 02-515 Warszawa"
        assert issuer.nip.value == "5213017228"
        assert not issuer.bank_account.is_set


class TestWithoutLabels:
    def test_positional_identifiers(self, profile):
        warnings = []
        rows = ["ACME Sp. z o.o. NIP 5213017228", "Beta S.A. NIP: 1234563218"]
        issuer, receiver = extract_parties(_layout(rows, profile), profile, warnings)

        assert issuer.nip.value == "5213017228"
        assert issuer.nip.rule == "positional"
        assert receiver.nip.value == "1234563218"
        assert not issuer.name.is_set
        assert any("no seller/buyer labels" in w for w in warnings)


class TestSplitAddress:
    def test_postal_code_split(self):
        address = split_address("ul. Długa 1, 00-001 Warszawa")
        assert (address.street, address.postal_code, address.city) == (
            "ul. Długa 1",
            "00-001",
            "Warszawa",
        )

    def test_without_postal_code(self):
        address = split_address("Skrytka pocztowa 12")
        assert address.raw == "Skrytka pocztowa 12"
        assert address.postal_code is None
