"""
Error types raised by rdap-lookup.

Every error carries one of a fixed set of kinds. The message of an error is
always the message of its kind, so callers can dispatch either on the class
or on ``error.kind``.
"""

from enum import Enum


class ErrorKind(Enum):
    """Fixed error kinds and their messages."""

    NO_DOMAIN = "No domain was provided"
    DOMAIN_PARSE = "Unable to parse domain name"
    UNKNOWN_TLD = "Unknown top level domain"
    RDAP_ERROR = "RDAP request failed"
    RDAP_RESPONSE_EMPTY = "RDAP response was empty"


class RDAPLookupError(Exception):
    """Base class for all rdap-lookup errors."""

    kind: ErrorKind = ErrorKind.RDAP_ERROR

    def __init__(self) -> None:
        super().__init__(self.kind.value)

    @property
    def message(self) -> str:
        return self.kind.value


class NoDomainError(RDAPLookupError):
    """The query, or the hostname parsed from it, is empty."""

    kind = ErrorKind.NO_DOMAIN


class DomainParseError(RDAPLookupError):
    """No top level domain could be extracted from the query."""

    kind = ErrorKind.DOMAIN_PARSE


class UnknownTLD(RDAPLookupError):
    """The top level domain has no entry in the registry."""

    kind = ErrorKind.UNKNOWN_TLD


class RDAPError(RDAPLookupError):
    """
    The RDAP request failed.

    Covers transport failures, non-success HTTP statuses and unparseable
    bodies. The underlying exception, if any, is kept in ``cause``.
    """

    kind = ErrorKind.RDAP_ERROR

    def __init__(
        self,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__()
        self.cause = cause
        self.status_code = status_code


class RDAPResponseEmpty(RDAPLookupError):
    """The RDAP server answered successfully with an empty body."""

    kind = ErrorKind.RDAP_RESPONSE_EMPTY
