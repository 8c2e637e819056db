"""
rdap-lookup

Look up registration data for domain names and IP addresses over RDAP.
"""

__version__ = "0.2.0"

from .errors import (
    DomainParseError,
    ErrorKind,
    NoDomainError,
    RDAPError,
    RDAPLookupError,
    RDAPResponseEmpty,
    UnknownTLD,
)
from .models import RdapData, RdapResponse
from .rdap_bootstrap import Registry, TLDEntry, get_default_registry, load_registry
from .rdap_client import AsyncRDAPClient, rdap_client
from .resolver import build_rdap_request_url, find_rdap_server
from .validation import is_fully_qualified_domain_name, is_ip_address

__all__ = [
    "AsyncRDAPClient",
    "DomainParseError",
    "ErrorKind",
    "NoDomainError",
    "RDAPError",
    "RDAPLookupError",
    "RDAPResponseEmpty",
    "RdapData",
    "RdapResponse",
    "Registry",
    "TLDEntry",
    "UnknownTLD",
    "build_rdap_request_url",
    "find_rdap_server",
    "get_default_registry",
    "is_fully_qualified_domain_name",
    "is_ip_address",
    "load_registry",
    "rdap_client",
]


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    from .cli import run

    return run(argv)
