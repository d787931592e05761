"""Unique BIRD protocol name allocation."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Protocol:
    """Operator-facing identity behind a generated protocol name."""

    name: str
    tags: Tuple[str, ...] = ()


class ProtocolRegistry:
    """Hand out protocol names that are unique for the lifetime of the registry.

    Names are built as ``<base>_AS<asn>_v<af>``.  When that name is taken the
    registry probes ``_1``, ``_2``, ... in order until a free one is found, so
    a fixed sequence of calls always yields the same names.  Entries are never
    removed or overwritten.

    The membership check and the insert run under a single lock, which makes
    :meth:`allocate` safe to call from renders running on several threads.
    Which thread gets the unsuffixed name in a race is down to lock order;
    callers that need reproducible output across threads must allocate in a
    fixed order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # dicts keep insertion order, so this is both the set and the map
        self._protocols: Dict[str, Protocol] = {}

    def allocate(
        self,
        base: str,
        user_name: str,
        af: str,
        asn: int,
        tags: Optional[Sequence[str]] = None,
    ) -> str:
        stem = f"{base}_AS{int(asn)}_v{af}"
        protocol = Protocol(name=user_name, tags=tuple(tags or ()))

        with self._lock:
            candidate = stem
            suffix = 1
            while candidate in self._protocols:
                candidate = f"{stem}_{suffix}"
                suffix += 1
            self._protocols[candidate] = protocol

        if candidate != stem:
            LOG.debug("protocol name %s taken, allocated %s", stem, candidate)
        return candidate

    def lookup(self) -> Dict[str, Protocol]:
        """Return a snapshot of every allocated name and its origin."""

        with self._lock:
            return dict(self._protocols)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._protocols

    def __len__(self) -> int:
        with self._lock:
            return len(self._protocols)
