"""Field extraction and validation for Polish VAT invoices."""

__version__ = "0.1.0"
