"""
Command line interface for rdap-lookup.

Usage:
    rdap-lookup example.com
    rdap-lookup https://example.com 1.1.1.1 2001:4860:4860::8888
    rdap-lookup --summary example.com
    rdap-lookup --url example.com
    rdap-lookup --update-registry
    rdap-lookup --show-config
"""

import argparse
import asyncio
import json
import logging
import sys

import httpx

from . import __version__
from .config import (
    ENV_AUTO_UPDATE,
    ENV_DEBUG,
    ENV_IP_BASE_URL,
    ENV_REGISTRY,
    ENV_TIMEOUT,
    Settings,
    get_config_file,
    get_setting_source,
    get_settings,
    get_user_registry_file,
)
from .errors import RDAPLookupError
from .models import RdapData
from .rdap_bootstrap import IANA_BOOTSTRAP_URL, fetch_iana_registry, load_registry, save_registry
from .rdap_client import AsyncRDAPClient

logger = logging.getLogger(__name__)


def setup_logging(debug: bool) -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO; keep it quiet unless debugging
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def show_config(settings: Settings) -> None:
    """Show current configuration."""
    print("Configuration")
    print("=" * 50)
    print()

    config_file = get_config_file()
    print(f"Config file: {config_file}")
    print(f"  Exists: {config_file.exists()}")
    print()

    if settings.registry_path:
        print(f"Registry: {settings.registry_path}")
        print(f"  Source: {get_setting_source(ENV_REGISTRY, 'registry')}")
    elif settings.auto_update:
        print("Registry: IANA bootstrap file, downloaded on first lookup")
        print(f"  Saved to: {get_user_registry_file()}")
        print("  Fallback: packaged")
    else:
        print("Registry: packaged")
    try:
        registry = load_registry(settings.registry_path)
        print(f"  Entries: {len(registry)} ({len(registry.tlds())} TLDs)")
    except (OSError, ValueError) as e:
        print(f"  ✗ Unable to load: {e}")
    print()

    print(f"IP lookups: {settings.ip_base_url}/ip/")
    print(f"  Source: {get_setting_source(ENV_IP_BASE_URL, 'ip_base_url')}")
    timeout = f"{settings.timeout}s" if settings.timeout else "httpx default"
    print(f"Timeout: {timeout}")
    print(f"  Source: {get_setting_source(ENV_TIMEOUT, 'timeout')}")
    print(f"Debug logging: {settings.debug}")
    print(f"  Source: {get_setting_source(ENV_DEBUG, 'debug')}")
    print(f"Auto update registry: {settings.auto_update}")
    print(f"  Source: {get_setting_source(ENV_AUTO_UPDATE, 'auto_update')}")


def update_registry(url: str = IANA_BOOTSTRAP_URL, output: str | None = None) -> bool:
    """Download the IANA bootstrap file into the user registry, or `output`."""
    print(f"Fetching {url}...")
    try:
        registry = fetch_iana_registry(url)
    except (httpx.HTTPError, ValueError) as e:
        print(f"✗ Failed to update registry: {e}", file=sys.stderr)
        return False

    try:
        path = save_registry(registry, output or get_user_registry_file())
    except OSError as e:
        print(f"✗ Failed to save registry: {e}", file=sys.stderr)
        return False
    print(f"✓ Saved {len(registry)} entries ({len(registry.tlds())} TLDs) to {path}")
    return True


async def lookup_all(
    queries: list[str],
    settings: Settings,
    summary: bool = False,
) -> bool:
    """Look up each query and print the result. Returns True if all succeeded."""
    async with AsyncRDAPClient.from_settings(settings) as client:
        results = await client.lookup_many(queries)

    success = True
    for query, result in zip(queries, results):
        if isinstance(result, RDAPLookupError):
            print(f"Error: {query}: {result}", file=sys.stderr)
            success = False
            continue

        output = RdapData.from_response(result).summary() if summary else result
        if len(queries) > 1:
            output = {"query": query, "result": output}
        print(json.dumps(output, indent=2, ensure_ascii=False))

    return success


def print_urls(queries: list[str], settings: Settings) -> bool:
    """Print the request URL for each query without fetching it."""
    client = AsyncRDAPClient.from_settings(settings)
    success = True
    for query in queries:
        try:
            print(client.request_url(query))
        except RDAPLookupError as e:
            print(f"Error: {query}: {e}", file=sys.stderr)
            success = False
    return success


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rdap-lookup",
        description="Look up domain names and IP addresses over RDAP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s example.com                 Full RDAP response as JSON
    %(prog)s --summary 1.1.1.1           Common fields only
    %(prog)s --url https://example.com   Show the request URL
    %(prog)s --update-registry           Refresh TLD servers from IANA
        """
    )

    parser.add_argument(
        "queries",
        nargs="*",
        metavar="QUERY",
        help="Domain name, URL, IPv4 or IPv6 address"
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print common fields instead of the full response"
    )
    parser.add_argument(
        "--url",
        action="store_true",
        help="Print the request URL instead of fetching it"
    )
    parser.add_argument(
        "--update-registry",
        action="store_true",
        help="Download the IANA RDAP bootstrap file into the user registry"
    )
    parser.add_argument(
        "--output",
        metavar="PATH",
        help="With --update-registry, write the registry to PATH instead"
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Enable debug logging (or set {ENV_DEBUG}=1)"
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"rdap-lookup {__version__}"
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(args.debug or settings.debug)

    if args.show_config:
        show_config(settings)
        return 0

    if args.update_registry:
        return 0 if update_registry(output=args.output) else 1

    if not args.queries:
        parser.print_usage(sys.stderr)
        print("Error: No query provided", file=sys.stderr)
        return 1

    try:
        if args.url:
            success = print_urls(args.queries, settings)
        else:
            success = asyncio.run(lookup_all(args.queries, settings, summary=args.summary))
    except (OSError, ValueError) as e:
        # Unreadable or malformed registry file
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(run())
