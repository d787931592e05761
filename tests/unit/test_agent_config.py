from pathlib import Path

import pytest

from peering_agent.config import DEFAULT_BOGON_ASNS, ConfigError, load_config, sanitize_name

CONFIG_YAML = """
asn: 64500
router-id: 192.0.2.254
hostname: rtr1.example.net
prefixes:
  - 203.0.113.0/24
  - 2001:db8::/32
web-ui-file: /var/www/html/index.html
keepalived-config: /etc/keepalived/keepalived.conf
aspa:
  "64510": [64520, 64521]
peers:
  Example Transit:
    asn: 64510
    neighbors:
      - 192.0.2.1
      - 2001:db8::1
    tags: [transit]
    filter-aspa: true
    import-limit4: 1000000
    communities: ["64500:1:1"]
  Route Server:
    asn: 64530
    neighbors: [192.0.2.2]
    passive: false
vrrp:
  VI_1:
    state: primary
    interface: eth0
    vrid: 1
    priority: 255
    vips: [192.0.2.253/24]
"""


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "bird-peering.yml"
    path.write_text(text)
    return path


def test_load_config(tmp_path: Path):
    cfg = load_config(write_config(tmp_path, CONFIG_YAML))

    assert cfg.asn == 64500
    assert cfg.router_id == "192.0.2.254"
    assert cfg.prefixes4 == ["203.0.113.0/24"]
    assert cfg.prefixes6 == ["2001:db8::/32"]
    assert cfg.aspa == {64510: (64520, 64521)}
    assert cfg.bogon_asns == DEFAULT_BOGON_ASNS
    assert list(cfg.peers) == ["Example Transit", "Route Server"]

    peer = cfg.peer_for("Example Transit")
    assert peer is not None
    assert peer.protocol_name == "EXAMPLE_TRANSIT"
    assert peer.neighbors == ("192.0.2.1", "2001:db8::1")
    assert peer.tags == ("transit",)
    assert peer.filter_aspa is True
    assert peer.import_limit4 == 1000000
    assert peer.import_limit6 is None
    assert peer.passive is None
    assert peer.communities == ("64500:1:1",)

    server = cfg.peers["Route Server"]
    assert server.passive is False
    assert server.communities is None

    instance = cfg.vrrp["VI_1"]
    assert instance.vrid == 1
    assert instance.vips4 == ["192.0.2.253/24"]


def test_sanitize_name():
    assert sanitize_name("Example Transit") == "EXAMPLE_TRANSIT"
    assert sanitize_name("he.net-v6") == "HE_NET_V6"
    assert sanitize_name("6939") == "PEER_6939"


def test_aspa_filter_requires_map_entry(tmp_path: Path):
    path = write_config(
        tmp_path,
        """
asn: 64500
router-id: 192.0.2.254
peers:
  upstream:
    asn: 64510
    filter-aspa: true
""",
    )

    with pytest.raises(ConfigError, match="upstream"):
        load_config(path)


@pytest.mark.parametrize(
    "text",
    [
        "- not a mapping",
        "router-id: 192.0.2.254",
        "asn: 64500\nrouter-id: 192.0.2.254\npeers: [a, b]",
        "asn: 64500\nrouter-id: 192.0.2.254\npeers:\n  x:\n    neighbors: []",
        "asn: 64500\nrouter-id: 192.0.2.254\npeers:\n  x:\n    asn: 1\n    typo: true",
        "asn: 4294967296\nrouter-id: 192.0.2.254",
        "asn: 64500\nrouter-id: 192.0.2.254\nvrrp:\n  VI_1:\n    state: primary",
        "asn: [64500",
    ],
)
def test_invalid_config(tmp_path: Path, text: str):
    with pytest.raises(ConfigError):
        load_config(write_config(tmp_path, text))


def test_peers_sharing_output_file_are_rejected(tmp_path: Path):
    path = write_config(
        tmp_path,
        """
asn: 64500
router-id: 192.0.2.254
peers:
  foo-bar:
    asn: 64510
    neighbors: [192.0.2.1]
  foo.bar:
    asn: 64510
    neighbors: [192.0.2.2]
""",
    )

    with pytest.raises(ConfigError, match="foo-bar"):
        load_config(path)


def test_same_name_different_asn_is_allowed(tmp_path: Path):
    path = write_config(
        tmp_path,
        """
asn: 64500
router-id: 192.0.2.254
peers:
  foo-bar:
    asn: 64510
  foo.bar:
    asn: 64520
""",
    )

    cfg = load_config(path)

    assert [p.protocol_name for p in cfg.peers.values()] == ["FOO_BAR", "FOO_BAR"]


@pytest.mark.parametrize(
    "peer_body, message",
    [
        ("passive: \"false\"", "peer 'x' 'passive'"),
        ("filter-aspa: 1", "peer 'x' 'filter-aspa'"),
        ("local-pref: high", "peer 'x' 'local-pref'"),
        ("prepends: true", "peer 'x' 'prepends'"),
    ],
)
def test_peer_field_types_are_checked(tmp_path: Path, peer_body: str, message: str):
    path = write_config(
        tmp_path,
        f"asn: 64500\nrouter-id: 192.0.2.254\npeers:\n  x:\n    asn: 1\n    {peer_body}\n",
    )

    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_vrrp_integer_fields_are_checked(tmp_path: Path):
    path = write_config(
        tmp_path,
        """
asn: 64500
router-id: 192.0.2.254
vrrp:
  VI_1:
    state: primary
    interface: eth0
    vrid: one
""",
    )

    with pytest.raises(ConfigError, match="vrrp instance 'VI_1' 'vrid'"):
        load_config(path)
