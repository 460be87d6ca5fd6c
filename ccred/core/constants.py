"""
Carbon registry constants.
"""

# Identifier prefixes per entity type
PROJECT_ID_PREFIX = "PRJ"
STAKEHOLDER_ID_PREFIX = "STK"
UPLOAD_ID_PREFIX = "UPL"
SUBMISSION_ID_PREFIX = "SUB"
CREDIT_ID_PREFIX = "CRD"
LISTING_ID_PREFIX = "LST"

# Verra methodology applied when none is given
DEFAULT_METHODOLOGY = "VM0033"
DEFAULT_CURRENCY = "USD"

# Marketplace
DEFAULT_MINIMUM_QUANTITY = 1
PRICE_LOW_UPPER_BOUND = 10.0  # low: price < 10
PRICE_HIGH_LOWER_BOUND = 20.0  # high: price >= 20, medium in between

# Certificates are rendered elsewhere; only the URL is derived here
CERTIFICATE_PATH_TEMPLATE = "/certificates/{credit_id}.pdf"
UNKNOWN_PROJECT_NAME = "Unknown Project"
