"""Authorization token exports"""

from .models import UNSET, AuthorizationToken, ScanMetadata
from .service import TokenAuthority

__all__ = [
    "UNSET",
    "AuthorizationToken",
    "ScanMetadata",
    "TokenAuthority",
]
