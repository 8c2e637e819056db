"""
Async RDAP Client

Looks up registration data for domain names and IP addresses. Domains are
sent to the authoritative server from the bootstrap registry; IP addresses
go to the rdap.org redirector.
"""

import asyncio
import json
import logging

import httpx

from .config import Settings, get_settings
from .errors import NoDomainError, RDAPError, RDAPLookupError, RDAPResponseEmpty
from .models import RdapResponse
from .rdap_bootstrap import Registry, load_registry
from .resolver import build_rdap_request_url
from .validation import is_ip_address

logger = logging.getLogger(__name__)

# Bodies some servers send instead of an empty response
EMPTY_BODIES = ("", "''")


class AsyncRDAPClient:
    """
    Async RDAP client with connection pooling.

    Usage:
        async with AsyncRDAPClient() as client:
            data = await client.lookup("example.com")

    Requests are never retried. A timeout, if given, is passed to httpx as-is.
    Timeout and IP base URL default to `config.get_settings()`.
    """

    def __init__(
        self,
        registry: Registry | None = None,
        timeout: float | None = None,
        ip_base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if timeout is None or ip_base_url is None:
            settings = get_settings()
            if timeout is None:
                timeout = settings.timeout
            if ip_base_url is None:
                ip_base_url = settings.ip_base_url

        self._registry = registry
        self._timeout = timeout
        self._ip_base_url = ip_base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "AsyncRDAPClient":
        """Create a client configured from `config.get_settings()`."""
        if settings.registry_path is not None:
            kwargs.setdefault("registry", load_registry(settings.registry_path))
        kwargs.setdefault("timeout", settings.timeout)
        kwargs.setdefault("ip_base_url", settings.ip_base_url)
        return cls(**kwargs)

    async def __aenter__(self) -> "AsyncRDAPClient":
        options = {}
        if self._timeout is not None:
            options["timeout"] = self._timeout
        if self._transport is not None:
            options["transport"] = self._transport

        self._client = httpx.AsyncClient(
            headers={"Accept": "application/rdap+json"},
            follow_redirects=True,
            **options,
        )
        return self

    async def __aexit__(self, *args) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def request_url(self, query: str) -> str:
        """
        Get the URL a lookup of `query` would fetch.

        Raises:
            NoDomainError: The query is empty.
            DomainParseError: The query is not an IP address or a valid domain.
            UnknownTLD: No RDAP server is known for the domain's TLD.
        """
        if query.strip() == "":
            raise NoDomainError()

        if is_ip_address(query):
            return f"{self._ip_base_url}/ip/{query}"

        return build_rdap_request_url(query, self._registry)

    async def _fetch(self, url: str) -> RdapResponse:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        try:
            response = await self._client.get(url)
            body = response.text
        except Exception as e:
            logger.warning("RDAP request to %s failed: %s", url, e)
            raise RDAPError(cause=e) from e

        if not response.is_success:
            logger.warning("RDAP request to %s returned status %d", url, response.status_code)
            raise RDAPError(status_code=response.status_code)

        if body in EMPTY_BODIES:
            raise RDAPResponseEmpty()

        try:
            return json.loads(body)
        except Exception as e:
            logger.warning("RDAP response from %s is not JSON: %s", url, e)
            raise RDAPError(cause=e, status_code=response.status_code) from e

    async def lookup(self, query: str) -> RdapResponse:
        """
        Look up a domain name, URL or IP address.

        Args:
            query: "example.com", "https://example.com", "192.0.2.1" or "2001:db8::1"

        Returns:
            The parsed RDAP JSON response.

        Raises:
            NoDomainError, DomainParseError, UnknownTLD: The query could not be
                resolved to an RDAP server. No request was made.
            RDAPError: The request failed, returned an error status or a body
                that is not JSON.
            RDAPResponseEmpty: The server returned an empty body.
        """
        url = self.request_url(query)
        logger.debug("Querying %s", url)
        return await self._fetch(url)

    async def lookup_many(
        self, queries: list[str]
    ) -> list[RdapResponse | RDAPLookupError]:
        """
        Look up several queries concurrently.

        Returns one item per query, in order: the response, or the
        RDAPLookupError that lookup raised for it.
        """
        if not queries:
            return []

        async def _lookup(query: str) -> RdapResponse | RDAPLookupError:
            try:
                return await self.lookup(query)
            except RDAPLookupError as e:
                return e

        results = await asyncio.gather(*[_lookup(q) for q in queries])
        return list(results)


async def rdap_client(
    query: str,
    registry: Registry | None = None,
    **kwargs,
) -> RdapResponse:
    """
    Look up a single domain name, URL or IP address.

    Convenience function for callers that don't manage a client lifecycle.
    Extra keyword arguments are passed to `AsyncRDAPClient`.
    """
    async with AsyncRDAPClient(registry=registry, **kwargs) as client:
        return await client.lookup(query)
