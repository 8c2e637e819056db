"""
Domain name validation and IP literal classification.

All functions here are pure and never raise for string input.
"""

import re

MAX_LABEL_LENGTH = 63

# Letters (ASCII and the usual IDN code point blocks), or an ACE "xn--" label
_TLD_PATTERN = re.compile(
    "([a-z\u00a1-\u00a8\u00aa-\ud7ff\uf900-\ufdcf\ufdf0-\uffef]{2,}|xn[a-z0-9-]{2,})",
    re.IGNORECASE,
)
_WHITESPACE_PATTERN = re.compile(r"\s")
_ALL_DIGITS_PATTERN = re.compile(r"[0-9]+")
_LABEL_PATTERN = re.compile("[a-z_\u00a1-\uffff0-9-]+", re.IGNORECASE)
_FULLWIDTH_PATTERN = re.compile("[\uff01-\uff5e]")

_IPV4_OCTET = r"(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
IPV4_PATTERN = re.compile(r"\.".join([_IPV4_OCTET] * 4))

_IPV4_EMBEDDED = (
    r"((25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])\.){3,3}"
    r"(25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])"
)
IPV6_PATTERN = re.compile(
    "("
    r"([0-9a-f]{1,4}:){7,7}[0-9a-f]{1,4}"
    r"|([0-9a-f]{1,4}:){1,7}:"
    r"|([0-9a-f]{1,4}:){1,6}:[0-9a-f]{1,4}"
    r"|([0-9a-f]{1,4}:){1,5}(:[0-9a-f]{1,4}){1,2}"
    r"|([0-9a-f]{1,4}:){1,4}(:[0-9a-f]{1,4}){1,3}"
    r"|([0-9a-f]{1,4}:){1,3}(:[0-9a-f]{1,4}){1,4}"
    r"|([0-9a-f]{1,4}:){1,2}(:[0-9a-f]{1,4}){1,5}"
    r"|[0-9a-f]{1,4}:((:[0-9a-f]{1,4}){1,6})"
    r"|:((:[0-9a-f]{1,4}){1,7}|:)"
    r"|fe80:(:[0-9a-f]{0,4}){0,4}%[0-9a-z]{1,}"
    r"|::(ffff(:0{1,4}){0,1}:){0,1}" + _IPV4_EMBEDDED +
    r"|([0-9a-f]{1,4}:){1,4}:" + _IPV4_EMBEDDED +
    ")",
    re.IGNORECASE,
)


def _is_valid_tld(tld: str) -> bool:
    if not _TLD_PATTERN.fullmatch(tld):
        return False
    if _WHITESPACE_PATTERN.search(tld):
        return False
    if _ALL_DIGITS_PATTERN.fullmatch(tld):
        return False
    return True


def _is_valid_label(label: str) -> bool:
    if len(label) > MAX_LABEL_LENGTH:
        return False
    if not _LABEL_PATTERN.fullmatch(label):
        return False
    if _FULLWIDTH_PATTERN.search(label):
        return False
    if label.startswith("-") or label.endswith("-"):
        return False
    # Accepted by the character class above, but never valid in a hostname
    if "_" in label:
        return False
    return True


def is_fully_qualified_domain_name(value: str) -> bool:
    """
    Check whether a string is a fully qualified domain name.

    The name needs at least two labels, a top level domain made of letters
    (or an ACE ``xn--`` label), and labels of at most 63 characters without
    underscores or leading/trailing hyphens.
    """
    labels = value.split(".")
    if len(labels) < 2:
        return False

    if not _is_valid_tld(labels[-1]):
        return False

    return all(_is_valid_label(label) for label in labels)


def get_top_level_domain(value: str) -> str | None:
    """Return the last label of a valid FQDN, or None if it is not one."""
    if not is_fully_qualified_domain_name(value):
        return None
    return value.split(".")[-1]


def is_ipv4_address(value: str) -> bool:
    return IPV4_PATTERN.fullmatch(value) is not None


def is_ipv6_address(value: str) -> bool:
    # Substring match: an address embedded in a longer string still counts
    return IPV6_PATTERN.search(value) is not None


def is_ip_address(value: str) -> bool:
    """Check whether a query should be treated as an IP address literal."""
    return is_ipv4_address(value) or is_ipv6_address(value)
