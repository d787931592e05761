"""ASPA (AS Provider Authorization) filter synthesis for BIRD."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .exceptions import InvariantViolation

LOG = logging.getLogger(__name__)

MISSING_ASN_SENTINEL = "# CODE ERROR: ASN not in ASPA map. This should never happen."


def provider_clause(provider: int, asn: int) -> str:
    """Path match for a route learned through ``provider`` from ``asn``."""

    return f"bgp_path ~ [= * {int(provider)} {int(asn)} * =]"


def aspa_filter(
    asn: int,
    providers_by_asn: Mapping[int, Sequence[int]],
    *,
    strict: bool = False,
) -> str:
    """Build a BIRD statement rejecting paths through unauthorised providers.

    A route is accepted when its path consists only of ``asn`` (direct
    origin) or when one of the declared providers sits immediately upstream
    of ``asn``.  Clauses keep the order of the provider list so output is
    stable between runs.

    The config loader checks that every ASPA-filtered peer has an entry in
    ``providers_by_asn``.  If that does not hold we emit a BIRD comment
    instead of a filter, or raise :class:`InvariantViolation` when
    ``strict`` is set.
    """

    asn = int(asn)
    providers = providers_by_asn.get(asn)
    if providers is None:
        if strict:
            raise InvariantViolation(f"AS{asn} missing from ASPA provider map")
        LOG.error("AS%d missing from ASPA provider map, no filter emitted", asn)
        return MISSING_ASN_SENTINEL

    clauses = " || ".join(provider_clause(p, asn) for p in providers)
    return (
        f"if !((bgp_path ~ [= {asn}+ =]) || ({clauses})) "
        'then _reject("not in authorized providers list");'
    )
