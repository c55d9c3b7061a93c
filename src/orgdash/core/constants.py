"""Console-wide constants.

This module defines constants used throughout the package
to avoid magic numbers and ensure consistency.
"""

# Organization list fetch
DEFAULT_PAGE_SIZE = 500
MAX_PAGE_SIZE = 1000
ORGANIZATION_SORT_FIELD = "createdAt"
ORGANIZATION_SORT_ORDER = "DESC"

# "New organizations" trailing window
NEW_ORGANIZATION_WINDOW_DAYS = 30

# User search
DEFAULT_USER_SEARCH_LIMIT = 10

# Transport
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
GRAPHQL_FALLBACK_ERROR = "GraphQL request failed"

# String field lengths
MAX_NAME_LENGTH = 255
MAX_DOMAIN_LENGTH = 253
MAX_URL_LENGTH = 2048
