"""
Shared utilities for the Artist Calendar API.

Request validators and rate limiting used by every endpoint module.
"""

from .security import check_rate_limit, get_client_ip
from .validators import (
    validate_date_list,
    validate_date_string,
    validate_docname,
    validate_positive_int,
    validate_time_string,
)

__all__ = [
    "check_rate_limit",
    "get_client_ip",
    "validate_date_list",
    "validate_date_string",
    "validate_docname",
    "validate_positive_int",
    "validate_time_string",
]
