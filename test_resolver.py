#!/usr/bin/env python3
"""
Test suite for the bootstrap registry and RDAP server resolution

Usage:
    source .venv/bin/activate
    python test_resolver.py
"""

import sys

# Check Python version and dependencies early
if sys.version_info < (3, 10):
    print("Error: Python 3.10+ required")
    print()
    print("Activate the virtual environment:")
    print("    source .venv/bin/activate")
    print("    python test_resolver.py")
    sys.exit(1)

try:
    import httpx
except ImportError as e:
    print(f"Error: {e}")
    print()
    print("Activate the virtual environment first:")
    print("    source .venv/bin/activate")
    print("    python test_resolver.py")
    sys.exit(1)

import contextlib
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

import httpx

from rdap_lookup import rdap_bootstrap
from rdap_lookup.config import ENV_AUTO_UPDATE, ENV_REGISTRY, get_registry_path, get_user_registry_file
from rdap_lookup.errors import DomainParseError, NoDomainError, RDAPLookupError, UnknownTLD
from rdap_lookup.rdap_bootstrap import (
    Registry,
    TLDEntry,
    get_default_registry,
    load_registry,
    reset_default_registry,
    save_registry,
)
from rdap_lookup.resolver import build_rdap_request_url, find_rdap_server, parse_url

TEST_REGISTRY_DATA = [
    [["com"], ["https://rdap.verisign.com/com/v1/"]],
    [["br"], ["rdap.registro.br"]],
    [["net", "com"], ["https://rdap.duplicate.test/"]],
    [["xn--p1ai"], ["https://rdap.tld.test:8443/rdap", "https://backup.tld.test/"]],
    [["co.uk"], ["https://rdap.multilabel.test/"]],
]


@dataclass
class TestResult:
    """Result of a single test."""

    __test__ = False

    name: str
    passed: bool
    message: str = ""


class TestRunner:
    """Runs tests and collects results."""

    __test__ = False

    def __init__(self):
        self.results: list[TestResult] = []
        self.current_section: str = ""

    def section(self, name: str):
        """Start a new test section."""
        self.current_section = name
        print(f"\n{'=' * 60}")
        print(f"  {name}")
        print(f"{'=' * 60}")

    def test(self, name: str, condition: bool, message: str = ""):
        """Record a test result."""
        result = TestResult(
            name=f"{self.current_section}: {name}", passed=condition, message=message
        )
        self.results.append(result)

        if condition:
            print(f"  ✓ {name}")
        else:
            print(f"  ✗ {name}")
            if message:
                print(f"    → {message}")

    def summary(self) -> bool:
        """Print summary and return True if all tests passed."""
        passed = sum(1 for r in self.results if r.passed)
        failed = sum(1 for r in self.results if not r.passed)
        total = len(self.results)

        print(f"\n{'=' * 60}")
        print(f"  SUMMARY: {passed}/{total} passed, {failed} failed")
        print(f"{'=' * 60}")

        if failed > 0:
            print("\nFailed tests:")
            for r in self.results:
                if not r.passed:
                    print(f"  ✗ {r.name}")
                    if r.message:
                        print(f"    → {r.message}")

        return failed == 0


def raises(func, *args) -> type | None:
    """Call func and return the type of RDAPLookupError raised, if any."""
    try:
        func(*args)
    except RDAPLookupError as e:
        return type(e)
    return None


def run_registry_tests(runner: TestRunner):
    """Test TLDEntry and Registry."""

    # =========================================================================
    # TLDEntry
    # =========================================================================
    runner.section("TLDEntry")

    entry = TLDEntry.from_pair([["com", "net"], ["https://rdap.example.test/"]])
    runner.test("builds from pair", entry.extensions == frozenset({"com", "net"}))
    runner.test("keeps servers in order", entry.servers == ("https://rdap.example.test/",))
    runner.test(
        "round-trips to pair",
        entry.to_pair() == [["com", "net"], ["https://rdap.example.test/"]],
    )

    for name, pair in [
        ("rejects empty extensions", [[], ["https://rdap.example.test/"]]),
        ("rejects empty servers", [["com"], []]),
        ("rejects upper-case extension", [["COM"], ["https://rdap.example.test/"]]),
        ("rejects empty extension", [[""], ["https://rdap.example.test/"]]),
        ("rejects string instead of list", ["com", ["https://rdap.example.test/"]]),
        ("rejects short pair", [["com"]]),
    ]:
        try:
            TLDEntry.from_pair(pair)
            runner.test(name, False, "no ValueError raised")
        except ValueError:
            runner.test(name, True)

    # =========================================================================
    # Registry
    # =========================================================================
    runner.section("Registry")

    registry = Registry.from_json(TEST_REGISTRY_DATA)
    runner.test("loads all entries", len(registry) == 5, f"got {len(registry)}")

    found = registry.find("net")
    runner.test("finds entry by extension", found is not None and "net" in found.extensions)

    found = registry.find("com")
    runner.test(
        "first matching entry wins",
        found is not None and found.servers[0] == "https://rdap.verisign.com/com/v1/",
    )
    runner.test("returns None for unknown TLD", registry.find("invalid") is None)
    runner.test("lookup is case-sensitive", registry.find("COM") is None)
    runner.test(
        "lists TLDs sorted and unique",
        registry.tlds() == ["br", "co.uk", "com", "net", "xn--p1ai"],
        f"got {registry.tlds()}",
    )
    runner.test("empty registry has no entries", len(Registry()) == 0)

    iana = Registry.from_json({
        "version": "1.0",
        "services": [
            [["COM", "Net"], ["https://rdap.verisign.com/com/v1/"]],
            [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
        ],
    })
    runner.test("loads IANA bootstrap format", len(iana) == 2)
    runner.test("lower-cases IANA extensions", iana.find("com") is not None and iana.find("net") is not None)

    try:
        Registry.from_json("not a registry")
        runner.test("rejects unsupported format", False, "no ValueError raised")
    except ValueError:
        runner.test("rejects unsupported format", True)

    # =========================================================================
    # Packaged registry
    # =========================================================================
    runner.section("Packaged registry")

    packaged = Registry.packaged()
    runner.test("packaged registry is not empty", len(packaged) > 0)

    com = packaged.find("com")
    runner.test(
        ".com is served by Verisign",
        com is not None and com.servers[0] == "https://rdap.verisign.com/com/v1/",
    )
    runner.test(".br is present", packaged.find("br") is not None)

    for tld in ["cloud", "shop", "top", "online"]:
        entry = packaged.find(tld)
        runner.test(
            f".{tld} is not routed to another registry",
            entry is None or "identitydigital" not in entry.servers[0],
        )

    extensions = [ext for entry in packaged for ext in entry.extensions]
    runner.test(
        "no extension is listed twice",
        len(extensions) == len(set(extensions)),
    )

    # =========================================================================
    # Loading from disk
    # =========================================================================
    runner.section("Registry files")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "registry.json"
        path.write_text(json.dumps(TEST_REGISTRY_DATA))

        loaded = load_registry(path)
        runner.test("loads registry from explicit path", len(loaded) == 5)

        saved = save_registry(loaded, Path(tmp) / "nested" / "saved.json")
        runner.test("save creates parent directories", saved.exists())

        reloaded = Registry.from_file(saved)
        runner.test(
            "saved registry keeps entry order",
            [e.servers for e in reloaded] == [e.servers for e in loaded],
        )

        # Process-wide default registry honors RDAP_LOOKUP_REGISTRY
        old_value = os.environ.get(ENV_REGISTRY)
        os.environ[ENV_REGISTRY] = str(path)
        reset_default_registry()
        try:
            first = get_default_registry()
            second = get_default_registry()
            runner.test("default registry uses configured file", len(first) == 5)
            runner.test("default registry is loaded once", first is second)

            path.write_text("[]")
            runner.test(
                "default registry is not reloaded after the file changes",
                len(get_default_registry()) == 5,
            )
        finally:
            if old_value is None:
                os.environ.pop(ENV_REGISTRY, None)
            else:
                os.environ[ENV_REGISTRY] = old_value
            reset_default_registry()

        runner.test("reset forgets the default registry", rdap_bootstrap._default_registry is None)


@contextlib.contextmanager
def isolated_config():
    """Point the config directory at a temp dir with no registry configured."""
    names = [ENV_REGISTRY, ENV_AUTO_UPDATE, "XDG_CONFIG_HOME"]
    saved = {name: os.environ.get(name) for name in names}
    original_fetch = rdap_bootstrap.fetch_iana_registry
    with tempfile.TemporaryDirectory() as tmp:
        for name in names:
            os.environ.pop(name, None)
        os.environ["XDG_CONFIG_HOME"] = tmp
        reset_default_registry()
        try:
            yield Path(tmp)
        finally:
            rdap_bootstrap.fetch_iana_registry = original_fetch
            reset_default_registry()
            for name, value in saved.items():
                if value is None:
                    os.environ.pop(name, None)
                else:
                    os.environ[name] = value


def iana_bootstrap_data() -> dict:
    """An IANA dns.json shaped document covering more than a thousand TLDs."""
    services = [
        [["shop"], ["https://rdap.shop.test/"]],
        [["top"], ["https://rdap.top.test/"]],
        [["online"], ["https://rdap.online.test/"]],
        [["us"], ["https://rdap.us.test/"]],
        [["au"], ["https://rdap.au.test/"]],
        [["in"], ["https://rdap.in.test/"]],
        [["cloud"], ["https://rdap.registry.cloud/rdap/"]],
        [["COM"], ["https://rdap.verisign.com/com/v1/"]],
    ]
    services += [[[f"xn--tld{i}"], [f"https://rdap{i}.test/"]] for i in range(1200)]
    return {"version": "1.0", "services": services}


def run_default_registry_tests(runner: TestRunner):
    """Test how the default registry is loaded when none is configured."""

    # =========================================================================
    # Download on first use
    # =========================================================================
    runner.section("Default registry - IANA download")

    fetches = []

    def fake_fetch(url=rdap_bootstrap.IANA_BOOTSTRAP_URL, timeout=30):
        fetches.append(url)
        return Registry.from_json(iana_bootstrap_data())

    with isolated_config():
        rdap_bootstrap.fetch_iana_registry = fake_fetch

        registry = get_default_registry()
        runner.test("downloads the IANA registry", fetches == [rdap_bootstrap.IANA_BOOTSTRAP_URL], f"got {fetches}")
        runner.test("covers more than a thousand TLDs", len(registry.tlds()) > 1000, f"got {len(registry.tlds())}")

        for tld in ["shop", "top", "online", "us", "au", "in"]:
            runner.test(f".{tld} is routed", raises(find_rdap_server, f"example.{tld}") is None)

        url = build_rdap_request_url("example.cloud")
        runner.test(
            ".cloud goes to its own registry",
            url == "https://rdap.registry.cloud/rdap/domain/example.cloud",
            f"got {url}",
        )

        user_registry = get_user_registry_file()
        runner.test("download is saved to the user registry", user_registry.exists())
        runner.test("saved registry becomes the configured one", get_registry_path() == user_registry)

        reset_default_registry()
        reloaded = get_default_registry()
        runner.test("next load reads the saved registry", len(fetches) == 1 and len(reloaded) == len(registry))

    # =========================================================================
    # Fallback to the packaged registry
    # =========================================================================
    runner.section("Default registry - packaged fallback")

    def failing_fetch(url=rdap_bootstrap.IANA_BOOTSTRAP_URL, timeout=30):
        fetches.append(url)
        raise httpx.ConnectError("no network")

    with isolated_config():
        rdap_bootstrap.fetch_iana_registry = failing_fetch
        fetches.clear()

        registry = get_default_registry()
        runner.test("failed download uses packaged registry", len(registry) == len(Registry.packaged()))
        runner.test("failed download saves nothing", not get_user_registry_file().exists())
        runner.test("packaged registry still resolves .com", registry.find("com") is not None)

        os.environ[ENV_AUTO_UPDATE] = "0"
        reset_default_registry()
        fetches.clear()
        registry = get_default_registry()
        runner.test("auto update off skips the download", fetches == [])
        runner.test("auto update off uses packaged registry", len(registry) == len(Registry.packaged()))


def run_resolver_tests(runner: TestRunner):
    """Test find_rdap_server and build_rdap_request_url."""

    registry = Registry.from_json(TEST_REGISTRY_DATA)

    # =========================================================================
    # parse_url
    # =========================================================================
    runner.section("parse_url")

    url = parse_url("example.com")
    runner.test("adds https scheme to bare host", url.scheme == "https")
    runner.test("keeps bare host", url.host == "example.com", f"got {url.host}")

    url = parse_url("http://example.com/path")
    runner.test("keeps explicit scheme", url.scheme == "http")

    url = parse_url("Example.COM")
    runner.test("lower-cases host", url.host == "example.com", f"got {url.host}")

    # =========================================================================
    # find_rdap_server
    # =========================================================================
    runner.section("find_rdap_server")

    server = find_rdap_server("google.com", registry)
    runner.test("returns httpx.URL", isinstance(server, httpx.URL))
    runner.test(
        "returns first server of first matching entry",
        server.host == "rdap.verisign.com" and server.path == "/com/v1/",
        f"got {server}",
    )

    server = find_rdap_server("example.net", registry)
    runner.test("resolves later entries", server.host == "rdap.duplicate.test")

    server = find_rdap_server("likker.com.br", registry)
    runner.test(
        "adds https to server without scheme",
        server.scheme == "https" and server.host == "rdap.registro.br",
        f"got {server}",
    )

    server = find_rdap_server("example.xn--p1ai", registry)
    runner.test(
        "uses the first of several servers",
        server.host == "rdap.tld.test" and server.port == 8443,
        f"got {server}",
    )

    runner.test(
        "same domain always resolves to the same server",
        find_rdap_server("google.com", registry) == find_rdap_server("google.com", registry),
    )

    runner.test("empty domain raises NoDomainError", raises(find_rdap_server, "", registry) is NoDomainError)
    runner.test(
        "single label raises DomainParseError",
        raises(find_rdap_server, "localhost", registry) is DomainParseError,
    )
    runner.test(
        "invalid name raises DomainParseError",
        raises(find_rdap_server, "exa_mple.com", registry) is DomainParseError,
    )
    runner.test(
        "unknown TLD raises UnknownTLD",
        raises(find_rdap_server, "domain.invalidtopleveldomain", registry) is UnknownTLD,
    )
    runner.test(
        "multi-label extensions never match a single TLD",
        raises(find_rdap_server, "example.co.uk", registry) is UnknownTLD,
    )

    # =========================================================================
    # build_rdap_request_url
    # =========================================================================
    runner.section("build_rdap_request_url")

    result = build_rdap_request_url("google.com", registry)
    expected = "https://rdap.verisign.com/com/v1/domain/google.com"
    runner.test("builds domain URL", result == expected, f"got {result}")

    bare = build_rdap_request_url("example.com", registry)
    full = build_rdap_request_url("https://example.com", registry)
    runner.test("bare host and URL give the same result", bare == full, f"{bare} != {full}")

    result = build_rdap_request_url("http://Example.COM/some/path?q=1", registry)
    runner.test(
        "uses only the host of a URL",
        result == "https://rdap.verisign.com/com/v1/domain/example.com",
        f"got {result}",
    )

    result = build_rdap_request_url("likker.com.br", registry)
    runner.test(
        "server without path or trailing slash",
        result == "https://rdap.registro.br/domain/likker.com.br",
        f"got {result}",
    )
    runner.test(
        "scheme prefix gives the same .br URL",
        build_rdap_request_url("https://likker.com.br", registry) == result,
    )

    result = build_rdap_request_url("example.xn--p1ai", registry)
    runner.test(
        "keeps port and path of server",
        result == "https://rdap.tld.test:8443/rdap/domain/example.xn--p1ai",
        f"got {result}",
    )

    hostname = "пример.рф".encode("idna").decode("ascii")
    result = build_rdap_request_url("пример.рф", registry)
    runner.test(
        "queries internationalized names in ACE form",
        result == f"https://rdap.tld.test:8443/rdap/domain/{hostname}",
        f"got {result}",
    )

    runner.test(
        "unknown TLD raises UnknownTLD",
        raises(build_rdap_request_url, "domain.invalidTopLevelDomain", registry) is UnknownTLD,
    )
    runner.test(
        "space in host raises DomainParseError",
        raises(build_rdap_request_url, "exa mple.com", registry) is DomainParseError,
    )
    runner.test(
        "single label raises DomainParseError",
        raises(build_rdap_request_url, "localhost", registry) is DomainParseError,
    )


def test_registry():
    runner = TestRunner()
    run_registry_tests(runner)
    run_default_registry_tests(runner)
    assert runner.summary()


def test_resolver():
    runner = TestRunner()
    run_resolver_tests(runner)
    assert runner.summary()


def main():
    runner = TestRunner()

    print("\n" + "=" * 60)
    print("  REGISTRY & RESOLVER - TEST SUITE")
    print("=" * 60)

    run_registry_tests(runner)
    run_default_registry_tests(runner)
    run_resolver_tests(runner)

    all_passed = runner.summary()
    sys.exit(0 if all_passed else 1)


if __name__ == "__main__":
    main()
