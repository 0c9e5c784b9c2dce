"""Security primitives: trusted ranges, address checks, signatures."""

from ghwebhook.security.address import AddressValidator as AddressValidator
from ghwebhook.security.signature import validate_signature as validate_signature
from ghwebhook.security.trust import TrustStore as TrustStore
from ghwebhook.security.trust import TrustedRanges as TrustedRanges

__all__ = [
    "AddressValidator",
    "TrustStore",
    "TrustedRanges",
    "validate_signature",
]
