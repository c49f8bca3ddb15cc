"""Konstanter för Norrsken."""

APP_TITLE = "Norrsken"
DEFAULT_COMPANY_NAME = "Okänd"
DEFAULT_CURRENCY = "SEK"
DAYS_PER_YEAR = 365
MONTHS_PER_YEAR = 12

# Perioder inom detta intervall räknas som helår och annualiseras inte.
FULL_YEAR_MIN_DAYS = 350
FULL_YEAR_MAX_DAYS = 380

MONTH_LABELS = (
    "jan",
    "feb",
    "mar",
    "apr",
    "maj",
    "jun",
    "jul",
    "aug",
    "sep",
    "okt",
    "nov",
    "dec",
)
