"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_HOURS_WORKED = Decimal("8")
MAX_HOURS_WORKED = Decimal("24")

DEFAULT_PAYMENT_DAY = "Sunday"
# On the payment day itself, requests before this hour still see the week being paid out.
PAYMENT_DAY_CUTOFF_HOUR = 12
PAY_WEEK_DAYS = 7

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

DEFAULT_TOKEN_TTL_HOURS = 24 * 7

MONEY_QUANT = Decimal("0.01")
# Largest value a DECIMAL(12,2) column holds.
MAX_MONEY = Decimal("9999999999.99")
