import pytest

from bird_peering.aspa import MISSING_ASN_SENTINEL, aspa_filter
from bird_peering.exceptions import InvariantViolation


def test_filter_with_two_providers():
    assert aspa_filter(64500, {64500: [64501, 64502]}) == (
        "if !((bgp_path ~ [= 64500+ =]) || "
        "(bgp_path ~ [= * 64501 64500 * =] || bgp_path ~ [= * 64502 64500 * =])) "
        'then _reject("not in authorized providers list");'
    )


def test_filter_keeps_provider_order():
    forward = aspa_filter(64500, {64500: [1, 2, 3]})
    backward = aspa_filter(64500, {64500: [3, 2, 1]})

    assert forward.index("* 1 64500") < forward.index("* 3 64500")
    assert backward.index("* 3 64500") < backward.index("* 1 64500")


def test_filter_single_provider():
    assert aspa_filter(64500, {64500: [64510]}) == (
        "if !((bgp_path ~ [= 64500+ =]) || (bgp_path ~ [= * 64510 64500 * =])) "
        'then _reject("not in authorized providers list");'
    )


def test_missing_asn_returns_sentinel():
    rendered = aspa_filter(64500, {64999: [1]})

    assert rendered == MISSING_ASN_SENTINEL
    assert "_reject" not in rendered


def test_missing_asn_strict_raises():
    with pytest.raises(InvariantViolation):
        aspa_filter(64500, {}, strict=True)
