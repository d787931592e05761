"""Configuration data structures consumed by the templates.

These dataclasses describe the peering intent after it has been loaded and
validated (see :mod:`peering_agent.config`).  The rendering core only reads
them.  Optional scalars are ``None`` when the operator did not set them; the
templates resolve them through the ``*_deref`` helpers in
:mod:`bird_peering.formatting`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple


def _split_families(values: Sequence[str]) -> Tuple[List[str], List[str]]:
    v4 = [v for v in values if ":" not in v]
    v6 = [v for v in values if ":" in v]
    return v4, v6


@dataclass(frozen=True)
class Peer:
    """A BGP peer as declared by the operator.

    Attributes
    ----------
    name:
        Operator supplied name, shown in the status UI.
    protocol_name:
        BIRD-safe base used to build protocol identifiers.
    asn:
        Remote Autonomous System Number.
    neighbors:
        Neighbor addresses; one BGP session is rendered per address.
    prefixes:
        Prefixes the peer may announce.  Empty means no prefix filter.
    origin_asns:
        Origin ASNs the peer may announce.  Empty means no origin filter.
    filter_aspa:
        Validate received paths against ``Config.aspa``.
    """

    name: str
    protocol_name: str
    asn: int
    neighbors: Sequence[str] = ()
    description: Optional[str] = None
    tags: Sequence[str] = ()
    disabled: bool = False
    local_asn: Optional[int] = None
    local_pref: Optional[int] = None
    multihop: Optional[int] = None
    password: Optional[str] = None
    passive: Optional[bool] = None
    next_hop_self: Optional[bool] = None
    bfd: Optional[bool] = None
    prepends: Optional[int] = None
    import_limit4: Optional[int] = None
    import_limit6: Optional[int] = None
    prefixes: Sequence[str] = ()
    origin_asns: Sequence[int] = ()
    filter_aspa: bool = False
    filter_transit_asns: bool = False
    announce_originated: bool = True
    announce_default: bool = False
    communities: Optional[Sequence[str]] = None

    @property
    def prefixes4(self) -> List[str]:
        return _split_families(self.prefixes)[0]

    @property
    def prefixes6(self) -> List[str]:
        return _split_families(self.prefixes)[1]


@dataclass(frozen=True)
class VRRPInstance:
    """A keepalived VRRP instance."""

    state: str
    interface: str
    vrid: int
    priority: int
    vips: Sequence[str] = ()

    @property
    def vips4(self) -> List[str]:
        return _split_families(self.vips)[0]

    @property
    def vips6(self) -> List[str]:
        return _split_families(self.vips)[1]


@dataclass(frozen=True)
class Config:
    """Global configuration plus every declared peer."""

    asn: int
    router_id: str
    hostname: Optional[str] = None
    prefixes: Sequence[str] = ()
    peers: Mapping[str, Peer] = field(default_factory=dict)
    aspa: Mapping[int, Sequence[int]] = field(default_factory=dict)
    transit_asns: Sequence[int] = ()
    bogon_asns: Sequence[int] = ()
    bird_directory: str = "/etc/bird"
    web_ui_file: Optional[str] = None
    keepalived_config: Optional[str] = None
    vrrp: Mapping[str, VRRPInstance] = field(default_factory=dict)

    @property
    def prefixes4(self) -> List[str]:
        return _split_families(self.prefixes)[0]

    @property
    def prefixes6(self) -> List[str]:
        return _split_families(self.prefixes)[1]

    def peer_for(self, name: str) -> Optional[Peer]:
        """Return the peer declared as ``name`` if present."""

        return self.peers.get(name)
