"""
RDAP Bootstrap Registry Module

Maps top level domains to their authoritative RDAP servers.

The default registry is the IANA bootstrap file, downloaded into the user
registry on first use. A subset ships with the package as ``rdap-servers.json``
for when the download fails. A registry is loaded once and never mutated;
pass a `Registry` explicitly to the resolver, or let it use the process-wide
default from `get_default_registry()`.
"""

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

import httpx

from .config import get_registry_path, get_settings, get_user_registry_file

logger = logging.getLogger(__name__)

# IANA bootstrap URL
IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"

PACKAGED_REGISTRY = "rdap-servers.json"


@dataclass(frozen=True)
class TLDEntry:
    """A set of domain extensions served by the same RDAP server(s)."""

    extensions: frozenset[str]
    servers: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.extensions:
            raise ValueError("TLD entry has no extensions")
        for ext in self.extensions:
            if not ext or ext != ext.lower():
                raise ValueError(f"Invalid domain extension: {ext!r}")
        if not self.servers:
            raise ValueError(f"TLD entry {sorted(self.extensions)} has no servers")

    @classmethod
    def from_pair(cls, pair) -> "TLDEntry":
        """Build an entry from a ``[extensions, servers]`` pair."""
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            raise ValueError(f"Invalid registry entry: {pair!r}")
        extensions, servers = pair[0], pair[1]
        if isinstance(extensions, str) or isinstance(servers, str):
            raise ValueError(f"Invalid registry entry: {pair!r}")
        return cls(
            extensions=frozenset(str(ext) for ext in extensions),
            servers=tuple(str(server) for server in servers),
        )

    def to_pair(self) -> list[list[str]]:
        return [sorted(self.extensions), list(self.servers)]


class Registry:
    """Ordered, read-only sequence of TLD entries."""

    def __init__(self, entries=()) -> None:
        self._entries: tuple[TLDEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Registry({len(self._entries)} entries)"

    @property
    def entries(self) -> tuple[TLDEntry, ...]:
        return self._entries

    def find(self, tld: str) -> TLDEntry | None:
        """
        Find the entry serving a top level domain.

        Entries are scanned in order and the first match wins, so a registry
        listing the same extension twice resolves to the earlier entry.
        """
        for entry in self._entries:
            if tld in entry.extensions:
                return entry
        return None

    def tlds(self) -> list[str]:
        """List of all extensions in the registry, sorted alphabetically."""
        return sorted({ext for entry in self._entries for ext in entry.extensions})

    @classmethod
    def from_json(cls, data) -> "Registry":
        """
        Build a registry from parsed JSON.

        Accepts the registry file format:
            [[["com"], ["https://rdap.verisign.com/com/v1/"]], ...]

        or the IANA bootstrap format:
            {"services": [[["com"], ["https://rdap.verisign.com/com/v1/"]], ...]}
        """
        if isinstance(data, dict):
            # IANA publishes extensions in lower case, but don't rely on it
            services = data.get("services", [])
            pairs = [
                [[ext.lower() for ext in entry[0]], entry[1]]
                for entry in services
                if isinstance(entry, list) and len(entry) >= 2
            ]
        elif isinstance(data, list):
            pairs = data
        else:
            raise ValueError(f"Unsupported registry format: {type(data).__name__}")

        return cls(TLDEntry.from_pair(pair) for pair in pairs)

    @classmethod
    def from_file(cls, path: Path | str) -> "Registry":
        """Load a registry from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            registry = cls.from_json(json.load(f))
        logger.debug("Loaded %d registry entries from %s", len(registry), path)
        return registry

    @classmethod
    def packaged(cls) -> "Registry":
        """Load the registry shipped with the package."""
        data = resources.files(__package__).joinpath(PACKAGED_REGISTRY).read_text(
            encoding="utf-8"
        )
        return cls.from_json(json.loads(data))


def load_registry(path: Path | str | None = None) -> Registry:
    """
    Load a registry.

    Args:
        path: Registry file to load. Defaults to the configured registry
            (see `config.get_registry_path`), falling back to the packaged one.
    """
    if path is None:
        path = get_registry_path()
    if path is None:
        return Registry.packaged()
    return Registry.from_file(path)


_default_registry: Registry | None = None


def _load_default_registry() -> Registry:
    """
    Load the registry used when none is passed explicitly.

    With no registry file configured, the IANA bootstrap file is downloaded
    into the user registry (unless auto update is off). The packaged registry
    is the fallback when that download fails.
    """
    settings = get_settings()
    if settings.registry_path is not None:
        return Registry.from_file(settings.registry_path)

    if settings.auto_update:
        try:
            registry = fetch_iana_registry()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Unable to download the IANA registry, using packaged registry: %s", e)
        else:
            try:
                save_registry(registry, get_user_registry_file())
            except OSError as e:
                logger.warning("Unable to save the user registry: %s", e)
            return registry

    return Registry.packaged()


def get_default_registry() -> Registry:
    """Get the process-wide registry, loading it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = _load_default_registry()
    return _default_registry


def reset_default_registry() -> None:
    """Forget the process-wide registry so the next use reloads it."""
    global _default_registry
    _default_registry = None


def fetch_iana_registry(url: str = IANA_BOOTSTRAP_URL, timeout: float = 30) -> Registry:
    """
    Download the IANA RDAP bootstrap file.

    Raises:
        httpx.HTTPError: The download failed or returned an error status.
        ValueError: The file is not valid bootstrap data.
    """
    headers = {
        "Accept": "application/json",
        "User-Agent": "rdap-lookup (RDAP Bootstrap)",
    }
    response = httpx.get(url, headers=headers, timeout=timeout, follow_redirects=True)
    response.raise_for_status()

    registry = Registry.from_json(response.json())
    if not len(registry):
        raise ValueError(f"No services in bootstrap file at {url}")

    logger.info("Fetched %d registry entries from %s", len(registry), url)
    return registry


def save_registry(registry: Registry, path: Path | str) -> Path:
    """Write a registry to disk in the registry file format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([entry.to_pair() for entry in registry], f, indent=2)
    return path
