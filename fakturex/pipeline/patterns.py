"""Label and value patterns for Polish invoices.

Label patterns are matched case-insensitively against a line's
concatenated text; diacritic-free spellings are accepted because
recognition frequently drops Polish marks.
"""

import re

# Header labels
INVOICE_NUMBER_LABEL = re.compile(
    r"(?i)\b(?:faktura\s+(?:vat\s+)?(?:(?:korygująca|korygujaca|zaliczkowa|końcowa|koncowa|pro\s*forma|marża|marza)\s+)?"
    r"(?:nr|numer)|nr\s+faktury|numer\s+faktury|faktura\s*:)\.?\s*:?"
)
# Optional series prefix separated by one space ("FV 001/2024")
INVOICE_NUMBER_VALUE = re.compile(r"(?:[A-Z]{1,5} (?=\d))?(?=[A-Za-z/\-_.]*\d)[A-Za-z0-9][A-Za-z0-9/\-_.]*")
INVOICE_NUMBER_STANDALONE = re.compile(
    r"(?i)(?<![\w/])(?:FVS|FV|FA|F)[\s/-]?\d{1,6}(?:[/-]\d{1,4})?[/-]\d{2,4}(?![\w/])"
)

ISSUE_DATE_LABEL = re.compile(
    r"(?i)\b(?:data\s+wystawienia|data\s+faktury|wystawion[ao]\s+dnia)\b"
)
SALE_DATE_LABEL = re.compile(
    r"(?i)\b(?:data\s+(?:sprzedaży|sprzedazy|dostawy|wykonania(?:\s+usługi|\s+uslugi)?)|data\s+zakończenia\s+dostawy)\b"
)
DUE_DATE_LABEL = re.compile(
    r"(?i)\b(?:termin\s+(?:płatności|platnosci|zapłaty|zaplaty)|płatne\s+do|platne\s+do)\b"
)
CORRECTION_OF_LABEL = re.compile(
    r"(?i)\b(?:(?:do|dotyczy)\s+faktury(?:\s+vat)?(?:\s+(?:nr|numer))?|korygując[aą]\s+do|korygujac[aą]\s+do"
    r"|faktura\s+korygowana(?:\s+(?:nr|numer))?)\.?\s*:?"
)

CURRENCY_CODE = re.compile(r"(?<![A-Za-z])(PLN|EUR|USD|GBP)(?![A-Za-z])")

INVOICE_TYPE_KEYWORDS = (
    ("correction", re.compile(r"(?i)\b(?:korygując\w*|korygujac\w*|korekt\w*)")),
    ("margin", re.compile(r"(?i)\bmar[żz][aąy]\b")),
    ("advance", re.compile(r"(?i)\bzaliczkow\w*")),
    ("final", re.compile(r"(?i)\b(?:końcow\w*|koncow\w*|rozliczeniow\w*)")),
    ("proforma", re.compile(r"(?i)\bpro[\s-]?forma\b")),
)
INVOICE_TITLE = re.compile(r"(?i)\bfaktura\b")

# Party labels
SELLER_LABEL = re.compile(r"(?i)\b(?:sprzedawca|wystawca|dostawca|sprzedający|sprzedajacy)\b\s*:?")
BUYER_LABEL = re.compile(
    r"(?i)\b(?:nabywca|kupujący|kupujacy|odbiorca|zamawiający|zamawiajacy)\b\s*:?"
)

NIP_LABELLED = re.compile(r"(?i)\bNIP\b\s*:?\s*((?:PL\s?)?\d(?:[\s-]?\d){9})(?!\d)")
NIP_BARE = re.compile(r"(?<![\d-])(\d{3}-\d{3}-\d{2}-\d{2}|\d{3}-\d{2}-\d{2}-\d{3}|\d{10})(?![\d-])")
REGON_LABELLED = re.compile(r"(?i)\bREGON\b\s*:?\s*(\d{14}|\d{9})(?!\d)")
IBAN_VALUE = re.compile(r"(?i)(?<![A-Z\d])((?:PL\s?)?\d{2}(?:\s?\d{4}){6})(?!\d)")
BANK_LABEL = re.compile(
    r"(?i)\b(?:nr\s+konta|numer\s+konta|nr\s+rachunku|numer\s+rachunku|konto|rachunek|bank|iban)\b"
)
# Bank detail line without an account number ("Bank: PKO BP", "Nr konta:")
BANK_DETAIL_LINE = re.compile(
    r"(?i)^\W*(?:(?:nr|numer)\s+(?:konta|rachunku)(?:\s+bankowego)?|konto|rachunek(?:\s+bankowy)?|iban|bank)\b\s*(?::|$)"
)
EMAIL_VALUE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PHONE_LABELLED = re.compile(r"(?i)\b(?:tel\.?|telefon|tel\./fax|mobile|kom\.?)\s*:?\s*(\+?\d[\d\s()-]{7,}\d)")
POSTAL_CODE = re.compile(r"(?<!\d)(\d{2}-\d{3})(?!\d)")

# Summary and payment labels
TOTALS_LABEL = re.compile(r"(?i)\b(?:razem|suma|ogółem|ogolem|łącznie|lacznie)\b")
AMOUNT_DUE_LABEL = re.compile(
    r"(?i)\b(?:(?:razem\s+)?do\s+(?:zapłaty|zaplaty)|kwota\s+do\s+(?:zapłaty|zaplaty)|pozostało\s+do\s+zapłaty)\b\s*:?"
)
PAYMENT_LABEL = re.compile(
    r"(?i)\b(?:forma|sposób|sposob|metoda|rodzaj)\s+(?:płatności|platnosci|zapłaty|zaplaty)\b\s*:?"
)
PAYMENT_KEYWORDS = (
    ("transfer", re.compile(r"(?i)\bprzelew\w*")),
    ("cash", re.compile(r"(?i)\bgotówk\w*|\bgotowk\w*")),
    ("card", re.compile(r"(?i)\bkart\w*")),
    ("compensation", re.compile(r"(?i)\bkompensat\w*")),
)

# Lines that close a party block
BLOCK_STOP = re.compile(
    r"(?i)\b(?:faktura|data\s+(?:wystawienia|sprzedaży|sprzedazy)|termin\s+(?:płatności|platnosci)"
    r"|forma\s+(?:płatności|platnosci)|sposób\s+(?:płatności|platnosci)|razem|do\s+(?:zapłaty|zaplaty)"
    r"|lp\.?|l\.p\.)(?=\W|$)"
)

# Table header keywords (matched diacritic-insensitively)
SUMMARY_COLUMNS = {
    "rate": ["stawka vat", "stawka", "stawka %", "%", "vat %"],
    "net": ["wartość netto", "kwota netto", "netto"],
    "vat": ["kwota vat", "wartość vat", "podatek vat", "vat", "podatek"],
    "gross": ["wartość brutto", "kwota brutto", "brutto"],
}

ITEM_COLUMNS = {
    "lp": ["lp", "lp.", "l.p.", "nr"],
    "description": ["nazwa towaru lub usługi", "nazwa towaru", "nazwa usługi", "nazwa", "opis", "towar", "usługa"],
    "quantity": ["ilość", "ilosc", "il.", "ilość jedn."],
    "unit": ["j.m.", "jm", "jm.", "jedn.", "jednostka"],
    "unit_price": ["cena jedn. netto", "cena netto", "cena jednostkowa", "cena jedn.", "cena"],
    **SUMMARY_COLUMNS,
}
