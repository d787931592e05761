"""YAML configuration loader for the peering renderer."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from bird_peering.config import Config, Peer, VRRPInstance

DEFAULT_BOGON_ASNS = (0, 23456, 65535, 4294967295)

_PEER_KEYS = frozenset(
    {
        "asn",
        "neighbors",
        "description",
        "tags",
        "disabled",
        "local-asn",
        "local-pref",
        "multihop",
        "password",
        "passive",
        "next-hop-self",
        "bfd",
        "prepends",
        "import-limit4",
        "import-limit6",
        "prefixes",
        "origin-asns",
        "filter-aspa",
        "filter-transit-asns",
        "announce-originated",
        "announce-default",
        "communities",
    }
)


class ConfigError(ValueError):
    """The configuration file is malformed or inconsistent."""


def sanitize_name(name: str) -> str:
    """Turn an operator supplied peer name into a BIRD-safe identifier."""

    cleaned = re.sub(r"[^A-Za-z0-9]", "_", name).upper()
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"PEER_{cleaned}"
    return cleaned


def _asn(value: Any, where: str) -> int:
    try:
        asn = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: invalid ASN {value!r}") from None
    if not 0 <= asn <= 0xFFFFFFFF:
        raise ConfigError(f"{where}: ASN {asn} out of range")
    return asn


def _int(value: Any, where: str) -> int:
    # YAML booleans are ints to Python, but never a valid count or limit
    if isinstance(value, bool):
        raise ConfigError(f"{where}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: expected an integer, got {value!r}") from None


def _optional_int(entry: Mapping[str, Any], key: str, where: str) -> Optional[int]:
    value = entry.get(key)
    return None if value is None else _int(value, f"{where} '{key}'")


def _bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: expected true or false, got {value!r}")
    return value


def _optional_bool(entry: Mapping[str, Any], key: str, where: str) -> Optional[bool]:
    value = entry.get(key)
    return None if value is None else _bool(value, f"{where} '{key}'")


def _flag(entry: Mapping[str, Any], key: str, default: bool, where: str) -> bool:
    value = _optional_bool(entry, key, where)
    return default if value is None else value


def _str_list(entry: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    values = entry.get(key) or []
    if not isinstance(values, list):
        raise ConfigError(f"'{key}' must be a list")
    return tuple(str(v) for v in values)


def _asn_list(entry: Mapping[str, Any], key: str) -> Tuple[int, ...]:
    values = entry.get(key) or []
    if not isinstance(values, list):
        raise ConfigError(f"'{key}' must be a list")
    return tuple(_asn(v, key) for v in values)


def _parse_peer(name: str, entry: Dict[str, Any]) -> Peer:
    if not isinstance(entry, dict):
        raise ConfigError(f"peer '{name}' must be a mapping")
    unknown = sorted(set(entry) - _PEER_KEYS)
    if unknown:
        raise ConfigError(f"peer '{name}': unknown keys {', '.join(unknown)}")
    if "asn" not in entry:
        raise ConfigError(f"peer '{name}' missing 'asn'")

    where = f"peer '{name}'"
    communities = entry.get("communities")
    return Peer(
        name=name,
        protocol_name=sanitize_name(name),
        asn=_asn(entry["asn"], where),
        neighbors=_str_list(entry, "neighbors"),
        description=entry.get("description"),
        tags=_str_list(entry, "tags"),
        disabled=_flag(entry, "disabled", False, where),
        local_asn=_optional_int(entry, "local-asn", where),
        local_pref=_optional_int(entry, "local-pref", where),
        multihop=_optional_int(entry, "multihop", where),
        password=entry.get("password"),
        passive=_optional_bool(entry, "passive", where),
        next_hop_self=_optional_bool(entry, "next-hop-self", where),
        bfd=_optional_bool(entry, "bfd", where),
        prepends=_optional_int(entry, "prepends", where),
        import_limit4=_optional_int(entry, "import-limit4", where),
        import_limit6=_optional_int(entry, "import-limit6", where),
        prefixes=_str_list(entry, "prefixes"),
        origin_asns=_asn_list(entry, "origin-asns"),
        filter_aspa=_flag(entry, "filter-aspa", False, where),
        filter_transit_asns=_flag(entry, "filter-transit-asns", False, where),
        announce_originated=_flag(entry, "announce-originated", True, where),
        announce_default=_flag(entry, "announce-default", False, where),
        communities=None if communities is None else _str_list(entry, "communities"),
    )


def _parse_aspa(section: Any) -> Dict[int, Tuple[int, ...]]:
    if not isinstance(section, dict):
        raise ConfigError("'aspa' section must be a mapping")
    aspa: Dict[int, Tuple[int, ...]] = {}
    for customer, providers in section.items():
        if not isinstance(providers, list):
            raise ConfigError(f"aspa providers for AS{customer} must be a list")
        aspa[_asn(customer, "aspa")] = tuple(_asn(p, f"aspa AS{customer}") for p in providers)
    return aspa


def _parse_vrrp(section: Any) -> Dict[str, VRRPInstance]:
    if not isinstance(section, dict):
        raise ConfigError("'vrrp' section must be a mapping")
    instances: Dict[str, VRRPInstance] = {}
    for name, entry in section.items():
        try:
            instances[str(name)] = VRRPInstance(
                state=str(entry["state"]),
                interface=str(entry["interface"]),
                vrid=_int(entry["vrid"], f"vrrp instance '{name}' 'vrid'"),
                priority=_int(
                    entry.get("priority", 100), f"vrrp instance '{name}' 'priority'"
                ),
                vips=_str_list(entry, "vips"),
            )
        except (KeyError, TypeError) as exc:
            raise ConfigError(f"vrrp instance '{name}' is invalid: {exc}") from exc
    return instances


def _validate_aspa(peers: Mapping[str, Peer], aspa: Mapping[int, Tuple[int, ...]]) -> None:
    missing: List[str] = [
        f"{name} (AS{peer.asn})"
        for name, peer in peers.items()
        if peer.filter_aspa and peer.asn not in aspa
    ]
    if missing:
        raise ConfigError(
            "filter-aspa enabled but ASN missing from 'aspa' map: " + ", ".join(missing)
        )


def _validate_unique_bases(peers: Mapping[str, Peer]) -> None:
    # peers sharing an ASN and sanitised name would write the same output file
    seen: Dict[Tuple[int, str], str] = {}
    for name, peer in peers.items():
        key = (peer.asn, peer.protocol_name)
        if key in seen:
            raise ConfigError(
                f"peers '{seen[key]}' and '{name}' both map to "
                f"AS{peer.asn}_{peer.protocol_name}; rename one of them"
            )
        seen[key] = name


def parse_config(data: Any) -> Config:
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")
    for key in ("asn", "router-id"):
        if key not in data:
            raise ConfigError(f"configuration missing '{key}'")

    peers_section = data.get("peers") or {}
    if not isinstance(peers_section, dict):
        raise ConfigError("'peers' section must be a mapping")
    peers = {str(name): _parse_peer(str(name), entry) for name, entry in peers_section.items()}
    _validate_unique_bases(peers)

    aspa = _parse_aspa(data.get("aspa") or {})
    _validate_aspa(peers, aspa)

    bogons = data.get("bogon-asns")
    return Config(
        asn=_asn(data["asn"], "asn"),
        router_id=str(data["router-id"]),
        hostname=data.get("hostname"),
        prefixes=_str_list(data, "prefixes"),
        peers=peers,
        aspa=aspa,
        transit_asns=_asn_list(data, "transit-asns"),
        bogon_asns=DEFAULT_BOGON_ASNS if bogons is None else _asn_list(data, "bogon-asns"),
        bird_directory=str(data.get("bird-directory", "/etc/bird")),
        web_ui_file=data.get("web-ui-file"),
        keepalived_config=data.get("keepalived-config"),
        vrrp=_parse_vrrp(data.get("vrrp") or {}),
    )


def load_config(path: Path) -> Config:
    try:
        data = yaml.safe_load(Path(path).read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    return parse_config(data)
