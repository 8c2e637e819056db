"""
RDAP server resolution and request URL construction for domain queries.
"""

import logging

import httpx

from .errors import DomainParseError, NoDomainError, UnknownTLD
from .rdap_bootstrap import Registry, get_default_registry
from .validation import get_top_level_domain

logger = logging.getLogger(__name__)


def parse_url(value: str) -> httpx.URL:
    """
    Parse a URL or a bare host name.

    Anything without a ``//`` separator is treated as a host and gets an
    ``https://`` scheme. The check is purely syntactic.

    Raises:
        DomainParseError: The value cannot be parsed as a URL.
    """
    if "//" not in value:
        value = f"https://{value}"
    try:
        return httpx.URL(value)
    except httpx.InvalidURL as e:
        raise DomainParseError() from e


def _hostname(url: httpx.URL) -> str:
    # ASCII form, so IDN queries resolve against "xn--" registry entries
    return url.raw_host.decode("ascii")


def find_rdap_server(domain: str, registry: Registry | None = None) -> httpx.URL:
    """
    Find the RDAP server for a domain.

    Args:
        domain: Host name to resolve, e.g. "example.com"
        registry: Registry to search. Defaults to the process-wide registry.

    Returns:
        Base URL of the first server registered for the domain's TLD.

    Raises:
        NoDomainError: The domain is empty.
        DomainParseError: The domain is not a fully qualified domain name.
        UnknownTLD: The registry has no entry for the TLD.
    """
    if not domain:
        raise NoDomainError()

    tld = get_top_level_domain(domain)
    if not tld:
        raise DomainParseError()

    if registry is None:
        registry = get_default_registry()

    entry = registry.find(tld)
    if entry is None:
        logger.debug("No RDAP server for .%s", tld)
        raise UnknownTLD()

    return parse_url(entry.servers[0])


def build_rdap_request_url(domain_to_query: str, registry: Registry | None = None) -> str:
    """
    Build the RDAP domain lookup URL for a domain or URL.

    "example.com" and "https://example.com" give the same result, e.g.
    "https://rdap.verisign.com/com/v1/domain/example.com".
    """
    query = parse_url(domain_to_query)
    hostname = _hostname(query)
    server = find_rdap_server(hostname, registry)

    server_url = f"{server.scheme}://{server.netloc.decode('ascii')}{server.path}"
    if server_url.endswith("/"):
        server_url = server_url[:-1]

    request_url = f"{server_url}/domain/{hostname}"
    logger.debug("Resolved %s to %s", domain_to_query, request_url)
    return request_url
