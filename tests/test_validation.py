"""Tests for the validation stage."""

from decimal import Decimal

from fakturex.models.extracted_field import ExtractedField
from fakturex.models.invoice_header import InvoiceHeader
from fakturex.models.invoice_line import InvoiceLine
from fakturex.models.invoice_summary import InvoiceSummary, VatBucket
from fakturex.models.party import Party
from fakturex.pipeline.field_extraction import ExtractionResult, extract_fields
from fakturex.pipeline.layout_normalizer import normalize_layout
from fakturex.pipeline.validation import (
    bucket_is_consistent,
    validate_extraction,
)


def _field(value, confidence=1.0):
    return ExtractedField(value=value, confidence=confidence, rule="label")


def _bucket(rate, net, vat, gross):
    return VatBucket(rate=rate, net=Decimal(net), vat=Decimal(vat), gross=Decimal(gross), confidence=1.0)


def _header():
    return InvoiceHeader(invoice_number=_field("FV/1/2024"), issue_date=_field("2024-01-15"))


class TestInvoiceValidation:
    def test_clean_invoice(self, invoice_document, profile):
        extraction = extract_fields(normalize_layout(invoice_document, profile), profile)
        validated = validate_extraction(extraction, profile)

        assert validated.issuer.nip.validation.is_valid
        assert validated.issuer.bank_account.validation.is_valid
        assert validated.receiver.nip.validation.is_valid
        assert [b.consistent for b in validated.summary.buckets] == [True, True]
        assert validated.missing_fields == ()
        assert validated.warnings == ()

    def test_does_not_modify_input(self, invoice_document, profile):
        extraction = extract_fields(normalize_layout(invoice_document, profile), profile)
        validate_extraction(extraction, profile)
        assert extraction.issuer.nip.validation.status == "unchecked"
        assert extraction.summary.buckets[0].consistent is None


class TestIdentifiers:
    def test_invalid_nip_is_annotated_and_warned(self, profile):
        result = ExtractionResult(header=_header(), issuer=Party(nip=_field("5213017229")))
        validated = validate_extraction(result, profile)

        assert validated.issuer.nip.validation.reason == "ChecksumMismatch"
        assert validated.issuer.nip.value == "5213017229"
        assert "issuer.nip: ChecksumMismatch (5213017229)" in validated.warnings

    def test_unset_identifiers_stay_unchecked(self, profile):
        validated = validate_extraction(ExtractionResult(header=_header()), profile)
        assert validated.issuer.nip.validation.status == "unchecked"
        assert validated.receiver.regon.validation.status == "unchecked"

    def test_regon_and_iban(self, profile):
        receiver = Party(regon=_field("123456785"), bank_account=_field("PL61109010140000071219812875"))
        validated = validate_extraction(ExtractionResult(header=_header(), receiver=receiver), profile)
        assert validated.receiver.regon.validation.is_valid
        assert validated.receiver.bank_account.validation.reason == "ChecksumMismatch"


class TestSummaryConsistency:
    def test_tolerance(self):
        tolerance = Decimal("0.01")
        assert bucket_is_consistent(_bucket("23", "1000.00", "230.00", "1230.00"), tolerance)
        assert not bucket_is_consistent(_bucket("23", "1000.00", "230.00", "1230.01"), tolerance)
        assert not bucket_is_consistent(_bucket("23", "1000.00", "230.00", "1229.99"), tolerance)

    def test_zero_tolerance_accepts_exact_match(self):
        assert bucket_is_consistent(_bucket("8", "100.00", "8.00", "108.00"), Decimal("0"))

    def test_inconsistent_bucket_is_flagged_not_fixed(self, profile):
        summary = InvoiceSummary(
            buckets=(_bucket("23", "100.00", "23.00", "124.00"), _bucket("8", "100.00", "8.00", "108.00"))
        )
        validated = validate_extraction(ExtractionResult(header=_header(), summary=summary), profile)

        first, second = validated.summary.buckets
        assert first.consistent is False
        assert first.gross == Decimal("124.00")
        assert second.consistent is True
        assert validated.summary.inconsistent_rates == ("23",)
        assert any(w.startswith("summary.23:") for w in validated.warnings)

    def test_total_gross_mismatch_warning(self, profile):
        summary = InvoiceSummary(
            buckets=(_bucket("23", "100.00", "23.00", "123.00"),),
            total_gross=_field(Decimal("150.00")),
        )
        validated = validate_extraction(ExtractionResult(header=_header(), summary=summary), profile)
        assert any(w.startswith("summary.total_gross:") for w in validated.warnings)

    def test_line_item_mismatch_warning(self, profile):
        line = InvoiceLine(
            line_number=3,
            description="Usługa",
            net=Decimal("10.00"),
            vat=Decimal("2.30"),
            gross=Decimal("12.00"),
        )
        validated = validate_extraction(ExtractionResult(header=_header(), line_items=(line,)), profile)
        assert "line_items[3]: gross 12.00 != net 10.00 + vat 2.30" in validated.warnings


class TestLineTotals:
    def _lines(self):
        return (
            InvoiceLine(
                line_number=1,
                description="Usługa",
                net=Decimal("10.00"),
                vat=Decimal("2.30"),
                gross=Decimal("12.30"),
            ),
            InvoiceLine(
                line_number=2,
                description="Licencja",
                net=Decimal("20.00"),
                vat=Decimal("4.60"),
                gross=Decimal("24.60"),
            ),
        )

    def test_gross_sum_differs_from_summary(self, profile):
        summary = InvoiceSummary(total_net=_field(Decimal("30.00")), total_gross=_field(Decimal("37.00")))
        result = ExtractionResult(header=_header(), summary=summary, line_items=self._lines())
        validated = validate_extraction(result, profile)

        assert "line_items: gross sum 36.90 != summary.total_gross 37.00" in validated.warnings
        assert not any(w.startswith("line_items: net") for w in validated.warnings)

    def test_matching_sums(self, profile):
        summary = InvoiceSummary(total_net=_field(Decimal("30.00")), total_gross=_field(Decimal("36.90")))
        result = ExtractionResult(header=_header(), summary=summary, line_items=self._lines())
        validated = validate_extraction(result, profile)
        assert not any(w.startswith("line_items") for w in validated.warnings)

    def test_partial_amounts_are_not_summed(self, profile):
        lines = self._lines() + (InvoiceLine(line_number=3, description="Rabat", net=Decimal("-5.00")),)
        summary = InvoiceSummary(total_net=_field(Decimal("25.00")), total_gross=_field(Decimal("99.00")))
        validated = validate_extraction(
            ExtractionResult(header=_header(), summary=summary, line_items=lines), profile
        )
        assert not any(w.startswith("line_items") for w in validated.warnings)

    def test_without_summary_totals(self, profile):
        result = ExtractionResult(header=_header(), line_items=self._lines())
        validated = validate_extraction(result, profile)
        assert not any(w.startswith("line_items") for w in validated.warnings)


class TestPartyCompleteness:
    def test_missing_parties(self, profile):
        validated = validate_extraction(ExtractionResult(header=_header()), profile)
        assert validated.warnings == (
            "issuer.name: missing issuer name",
            "issuer.nip: missing issuer NIP",
            "receiver: missing receiver name and NIP",
        )

    def test_complete_parties(self, profile):
        issuer = Party(name=_field("ACME Sp. z o.o."), nip=_field("5213017228"))
        receiver = Party(name=_field("Beta S.A."))
        validated = validate_extraction(
            ExtractionResult(header=_header(), issuer=issuer, receiver=receiver), profile
        )
        assert validated.warnings == ()

    def test_receiver_nip_is_enough(self, profile):
        issuer = Party(name=_field("ACME Sp. z o.o."), nip=_field("5213017228"))
        receiver = Party(nip=_field("1234563218"))
        validated = validate_extraction(
            ExtractionResult(header=_header(), issuer=issuer, receiver=receiver), profile
        )
        assert validated.warnings == ()


class TestRequiredFields:
    def test_missing_required_fields(self, profile):
        validated = validate_extraction(ExtractionResult(), profile)
        assert validated.missing_fields == ("header.invoice_number", "header.issue_date")
        assert "header.invoice_number: required field not found" in validated.warnings
