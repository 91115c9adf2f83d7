"""Tests for header field extraction."""

from datetime import date

import pytest

from conftest import region, words
from fakturex.models.document import Document
from fakturex.pipeline.header_extractor import extract_header, header_lines
from fakturex.pipeline.layout_normalizer import normalize_layout


def _layout(rows, profile, title=None):
    """Layout with an optional title region and one text region holding rows."""
    tokens = []
    regions = []
    if title is not None:
        tokens += words(title, 40, 40)
        regions.append(region("title", 30, 30, 520, 30))
    for i, text in enumerate(rows):
        tokens += words(text, 40, 80 + 15 * i)
    regions.append(region("text", 30, 75, 520, 20 + 15 * len(rows)))
    document = Document(document_id="header", tokens=tuple(tokens), regions=tuple(regions))
    return normalize_layout(document, profile)


class TestInvoiceHeader:
    def test_full_header(self, invoice_document, profile):
        warnings = []
        header = extract_header(normalize_layout(invoice_document, profile), profile, warnings)

        assert header.invoice_number.value == "FV/001/2024"
        assert header.invoice_number.rule == "label"
        assert header.invoice_number.confidence == pytest.approx(1.0)
        assert header.invoice_number.provenance.region_index == 0
        assert header.invoice_number.provenance.token_indices == (2,)
        assert header.issue_date.value == date(2024, 1, 15)
        assert header.sale_date.value == date(2024, 1, 15)
        assert header.due_date.value == date(2024, 1, 29)
        assert header.currency.value == "PLN"
        assert header.currency.rule == "label"
        assert header.invoice_type.value == "standard"
        assert warnings == []

    def test_confidence_is_token_confidence_times_label_factor(self, make_invoice, profile):
        document = make_invoice(number_confidence=0.9)
        header = extract_header(normalize_layout(document, profile), profile, [])
        assert header.invoice_number.confidence == pytest.approx(0.9)

    def test_header_zone_lines_come_first(self, invoice_document, profile):
        lines = header_lines(normalize_layout(invoice_document, profile), profile)
        zone_limit = 430 * 0.4
        in_zone = [line.y_min < zone_limit for line in lines]
        assert in_zone == sorted(in_zone, reverse=True)
        assert lines[0].text == "Faktura nr FV/001/2024"


class TestInvoiceNumber:
    def test_value_on_line_below_label(self, profile):
        layout = _layout(["Numer faktury:", "2024/01/0042", "Data wystawienia: 2024-01-15"], profile)
        header = extract_header(layout, profile, [])
        assert header.invoice_number.value == "2024/01/0042"
        assert header.invoice_number.rule == "label"

    def test_standalone_number_is_positional(self, profile):
        layout = _layout(["Dokument FV/12/01/2024", "Data wystawienia: 2024-01-15"], profile)
        header = extract_header(layout, profile, [])
        assert header.invoice_number.value == "FV/12/01/2024"
        assert header.invoice_number.rule == "positional"
        assert header.invoice_number.confidence == pytest.approx(0.7)

    def test_missing_number(self, profile):
        layout = _layout(["Data wystawienia: 2024-01-15"], profile)
        header = extract_header(layout, profile, [])
        assert not header.invoice_number.is_set
        assert header.invoice_number.confidence == 0.0


class TestDates:
    def test_positional_issue_date(self, profile):
        layout = _layout(
            ["Warszawa, 15.01.2024", "Termin płatności: 29.01.2024"],
            profile,
            title="Faktura nr FV/1/2024",
        )
        header = extract_header(layout, profile, [])
        assert header.issue_date.value == date(2024, 1, 15)
        assert header.issue_date.rule == "positional"
        assert header.due_date.value == date(2024, 1, 29)
        assert header.due_date.rule == "label"

    def test_positional_issue_date_skips_other_date_labels(self, profile):
        layout = _layout(
            ["Data sprzedaży: 10.01.2024", "Warszawa, 15.01.2024"],
            profile,
            title="Faktura nr FV/1/2024",
        )
        header = extract_header(layout, profile, [])
        assert header.issue_date.value == date(2024, 1, 15)
        assert header.sale_date.value == date(2024, 1, 10)

    def test_malformed_date_becomes_warning(self, profile):
        warnings = []
        layout = _layout(["Data wystawienia: 31.02.2024"], profile, title="Faktura nr FV/1/2024")
        header = extract_header(layout, profile, warnings)

        assert not header.issue_date.is_set
        assert len(warnings) == 1
        assert warnings[0].startswith("header.issue_date: MalformedDate")

    def test_long_form_date(self, profile):
        layout = _layout(["Data wystawienia: 5 marca 2024 r."], profile)
        header = extract_header(layout, profile, [])
        assert header.issue_date.value == date(2024, 3, 5)


class TestCurrencyAndType:
    def test_default_currency_is_pln(self, profile):
        layout = _layout(["Data wystawienia: 2024-01-15"], profile, title="Faktura nr FV/1/2024")
        header = extract_header(layout, profile, [])
        assert header.currency.value == "PLN"
        assert header.currency.rule == "default"
        assert header.currency.confidence == pytest.approx(0.7)

    def test_explicit_currency(self, profile):
        layout = _layout(["Waluta: EUR"], profile, title="Faktura nr FV/1/2024")
        header = extract_header(layout, profile, [])
        assert header.currency.value == "EUR"
        assert header.currency.rule == "label"

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Faktura korygująca nr FK/1/2024", "correction"),
            ("Faktura zaliczkowa nr FZ/1/2024", "advance"),
            ("Faktura końcowa nr FV/9/2024", "final"),
            ("Faktura pro forma nr PF/1/2024", "proforma"),
            ("Faktura VAT marża nr MAR/1/2024", "margin"),
            ("Faktura VAT nr FV/1/2024", "standard"),
        ],
    )
    def test_invoice_type(self, profile, title, expected):
        layout = _layout(["Data wystawienia: 2024-01-15"], profile, title=title)
        header = extract_header(layout, profile, [])
        assert header.invoice_type.value == expected
        assert header.invoice_type.rule == "label"

    def test_correction_number(self, profile):
        layout = _layout([], profile, title="Faktura korygująca nr FK/1/2024")
        header = extract_header(layout, profile, [])
        assert header.invoice_number.value == "FK/1/2024"

    def test_margin_invoice_number(self, profile):
        layout = _layout([], profile, title="Faktura VAT marża nr MAR/1/2024")
        header = extract_header(layout, profile, [])
        assert header.invoice_number.value == "MAR/1/2024"
        assert header.invoice_number.rule == "label"

    def test_corrected_invoice_reference(self, profile):
        rows = ["Do faktury nr FV/7/2023 z dnia 2023-12-01", "Data wystawienia: 2024-01-15"]
        layout = _layout(rows, profile, title="Faktura korygująca nr FK/1/2024")
        header = extract_header(layout, profile, [])

        assert header.invoice_number.value == "FK/1/2024"
        assert header.correction_of.value == "FV/7/2023"
        assert header.correction_of.rule == "label"
        assert header.issue_date.value == date(2024, 1, 15)

    def test_reference_on_title_line(self, profile):
        layout = _layout([], profile, title="Faktura korygująca do faktury nr FV/7/2023")
        header = extract_header(layout, profile, [])
        assert header.correction_of.value == "FV/7/2023"

    def test_reference_ignored_on_standard_invoice(self, profile):
        layout = _layout(["Załącznik do faktury nr FV/7/2023"], profile, title="Faktura nr FV/8/2024")
        header = extract_header(layout, profile, [])
        assert header.invoice_type.value == "standard"
        assert not header.correction_of.is_set

    def test_series_prefix_separated_by_space(self, profile):
        layout = _layout([], profile, title="Faktura nr: FV 001/2024")
        header = extract_header(layout, profile, [])
        assert header.invoice_number.value == "FV 001/2024"
        assert len(header.invoice_number.provenance.token_indices) == 2
