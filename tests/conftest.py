"""Shared fixtures: synthetic recognition output (no model needed)."""

import pytest

from fakturex.config.profile_loader import ExtractionProfile
from fakturex.config.profile_manager import reset_profile
from fakturex.models.document import Document
from fakturex.models.layout_region import Box, LayoutRegion
from fakturex.models.token import TextToken

CHAR_WIDTH = 6.0
WORD_GAP = 4.0
TOKEN_HEIGHT = 10.0


def words(text, x, y, confidence=1.0, page=0):
    """Lay out the words of text left-to-right as tokens starting at (x, y)."""
    tokens = []
    cursor = x
    for word in text.split():
        width = CHAR_WIDTH * len(word)
        tokens.append(
            TextToken.from_box(word, cursor, y, width, TOKEN_HEIGHT, confidence=confidence, page=page)
        )
        cursor += width + WORD_GAP
    return tokens


def region(kind, x, y, width, height, page=0):
    return LayoutRegion(box=Box(x, y, width, height), kind=kind, page=page)


def invoice_tokens(gross_23="1 230,00", gross_8="108,00", number_confidence=1.0):
    """Tokens of a complete two-rate invoice with side-by-side party blocks."""
    tokens = []
    tokens += words("Faktura nr", 40, 40)
    tokens += words("FV/001/2024", 40 + 10 * CHAR_WIDTH + 2 * WORD_GAP + 2, 40, confidence=number_confidence)
    tokens += words("Data wystawienia: 2024-01-15", 40, 85)
    tokens += words("Data sprzedaży: 15.01.2024", 40, 100)
    tokens += words("Termin płatności: 29.01.2024", 40, 115)

    for left, right, y in (
        ("Sprzedawca:", "Nabywca:", 145),
        ("ACME Sp. z o.o.", "Beta S.A.", 160),
        ("ul. Długa 1", "ul. Krótka 2", 175),
        ("00-001 Warszawa", "30-002 Kraków", 190),
        ("NIP: 5213017228", "NIP: 1234563218", 205),
    ):
        tokens += words(left, 40, y)
        tokens += words(right, 300, y)

    for cells, y in (
        (("Stawka VAT", "Wartość netto", "Kwota VAT", "Wartość brutto"), 305),
        (("23%", "1 000,00", "230,00", gross_23), 320),
        (("8%", "100,00", "8,00", gross_8), 335),
        (("Razem", "1 100,00", "238,00", "1 338,00"), 350),
    ):
        for cell, x in zip(cells, (40, 150, 260, 370)):
            tokens += words(cell, x, y)

    tokens += words("Do zapłaty: 1 338,00 PLN", 40, 385)
    tokens += words("Forma płatności: przelew", 40, 400)
    tokens += words("Nr konta: PL61 1090 1014 0000 0712 1981 2874", 40, 415)
    return tokens


INVOICE_REGIONS = (
    region("title", 30, 30, 520, 30),
    region("text", 30, 80, 520, 50),
    region("text", 30, 140, 520, 80),
    region("table", 30, 300, 520, 65),
    region("text", 30, 380, 520, 50),
)


@pytest.fixture
def profile():
    """Built-in default profile (independent of YAML files)."""
    return ExtractionProfile(name="test")


@pytest.fixture(autouse=True)
def _reset_active_profile():
    reset_profile()
    yield
    reset_profile()


@pytest.fixture
def invoice_document():
    """Complete, consistent invoice."""
    return Document(
        document_id="invoice-1",
        tokens=tuple(invoice_tokens()),
        regions=INVOICE_REGIONS,
        source_type="text_pdf",
    )


@pytest.fixture
def make_invoice():
    """Factory for invoice documents with adjustable amounts/confidence."""

    def make(document_id="invoice", **kwargs):
        return Document(
            document_id=document_id,
            tokens=tuple(invoice_tokens(**kwargs)),
            regions=INVOICE_REGIONS,
        )

    return make
