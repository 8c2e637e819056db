"""
Typed view over raw RDAP responses.

`rdap_client` returns the JSON body as-is. `RdapData` picks out the fields
most callers want from domain and IP network objects without validating the
response shape: missing fields are None (or empty lists).
"""

from dataclasses import dataclass, field
from typing import Any

RdapResponse = dict[str, Any]


def _vcard_property(entity: dict, name: str) -> str | None:
    """Get the first value of a vCard property (jCard format) from an entity."""
    vcard = entity.get("vcardArray")
    if isinstance(vcard, list) and len(vcard) > 1 and isinstance(vcard[1], list):
        for item in vcard[1]:
            if isinstance(item, list) and len(item) > 3 and item[0] == name:
                value = item[3]
                return value if isinstance(value, str) else None
    return None


def _objects(data: dict, key: str) -> list[dict]:
    """Get the objects in a list field, skipping anything that is not an object."""
    items = data.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass
class RdapData:
    """Common fields of an RDAP domain or IP network response."""

    handle: str | None = None
    ldh_name: str | None = None
    unicode_name: str | None = None
    name: str | None = None
    object_class_name: str | None = None
    start_address: str | None = None
    end_address: str | None = None
    ip_version: str | None = None
    country: str | None = None
    registrar: str | None = None
    status: list[str] = field(default_factory=list)
    events: dict[str, str] = field(default_factory=dict)
    nameservers: list[str] = field(default_factory=list)
    raw: RdapResponse = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, data: RdapResponse) -> "RdapData":
        """Build a view from a parsed RDAP response."""
        fields = data if isinstance(data, dict) else {}

        events = {}
        for event in _objects(fields, "events"):
            action = _string(event.get("eventAction"))
            date = _string(event.get("eventDate"))
            # Keep the first occurrence of each action
            if action and date and action not in events:
                events[action] = date

        nameservers = [
            ns["ldhName"].lower()
            for ns in _objects(fields, "nameservers")
            if _string(ns.get("ldhName"))
        ]

        registrar = None
        for entity in _objects(fields, "entities"):
            roles = entity.get("roles")
            if isinstance(roles, list) and "registrar" in roles:
                registrar = _vcard_property(entity, "fn") or _string(entity.get("handle"))
                break

        status = fields.get("status")
        status = [s for s in status if isinstance(s, str)] if isinstance(status, list) else []

        return cls(
            handle=fields.get("handle"),
            ldh_name=fields.get("ldhName"),
            unicode_name=fields.get("unicodeName"),
            name=fields.get("name"),
            object_class_name=fields.get("objectClassName"),
            start_address=fields.get("startAddress"),
            end_address=fields.get("endAddress"),
            ip_version=fields.get("ipVersion"),
            country=fields.get("country"),
            registrar=registrar,
            status=status,
            events=events,
            nameservers=nameservers,
            raw=data,
        )

    @property
    def registration_date(self) -> str | None:
        return self.events.get("registration")

    @property
    def expiration_date(self) -> str | None:
        return self.events.get("expiration")

    @property
    def last_changed_date(self) -> str | None:
        return self.events.get("last changed")

    def summary(self) -> dict[str, Any]:
        """Non-empty fields as a plain dict, for display."""
        fields = {
            "handle": self.handle,
            "ldhName": self.ldh_name,
            "unicodeName": self.unicode_name,
            "name": self.name,
            "objectClassName": self.object_class_name,
            "startAddress": self.start_address,
            "endAddress": self.end_address,
            "ipVersion": self.ip_version,
            "country": self.country,
            "registrar": self.registrar,
            "status": self.status,
            "registration": self.registration_date,
            "expiration": self.expiration_date,
            "lastChanged": self.last_changed_date,
            "nameservers": self.nameservers,
        }
        return {k: v for k, v in fields.items() if v}
