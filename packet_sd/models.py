from dataclasses import dataclass, field


@dataclass(frozen=True)
class NetworkInfo:
    private_ipv4: str = ""
    public_ipv4: str = ""
    public_ipv6: str = ""


@dataclass(frozen=True)
class Device:
    """A Packet device as returned by the devices endpoint."""
    id: str
    hostname: str = ""
    state: str = ""
    billing_cycle: str = ""
    plan: str = ""
    facility: str = ""
    tags: tuple = ()
    project_id: str = ""
    network: NetworkInfo = field(default_factory=NetworkInfo)

    @classmethod
    def from_api(cls, payload: dict):
        return cls(
            id=_text(payload.get("id")),
            hostname=_text(payload.get("hostname")),
            state=_text(payload.get("state")),
            billing_cycle=_text(payload.get("billing_cycle")),
            plan=_text((payload.get("plan") or {}).get("slug")),
            facility=_text((payload.get("facility") or {}).get("code")),
            tags=tuple(_text(t) for t in payload.get("tags") or ()),
            project_id=_project_id(payload.get("project")),
            network=network_info(payload.get("ip_addresses") or ()),
        )


def _text(value):
    return "" if value is None else str(value)


def _project_id(project):
    if not project:
        return ""
    if project.get("id"):
        return _text(project["id"])
    # Devices usually reference their project by href only: /projects/<id>
    href = _text(project.get("href")).rstrip("/")
    return href.rsplit("/", 1)[-1] if href else ""


def network_info(addresses):
    """Classify a device's ip_addresses into private/public v4 and public v6."""
    found = {}
    for addr in addresses:
        family = addr.get("address_family")
        public = bool(addr.get("public"))
        if family == 4:
            key = "public_ipv4" if public else "private_ipv4"
        elif family == 6 and public:
            key = "public_ipv6"
        else:
            continue
        found.setdefault(key, _text(addr.get("address")))
    return NetworkInfo(**found)
