"""BIRD peering configuration renderer.

This package turns declarative peering intent (BGP peers, originated
prefixes, AS-number sets and ASPA authorized-provider maps) into the text
consumed by BIRD and keepalived.  It is organised around:

* :mod:`bird_peering.formatting`, the value formatters templates call to
  produce prefix lists, AS sets and optional-value fallbacks;
* :class:`bird_peering.allocator.ProtocolRegistry`, which hands out unique
  BIRD protocol names and remembers the peer behind each one;
* :func:`bird_peering.aspa.aspa_filter`, building ASPA path validation
  statements; and
* :class:`bird_peering.templating.TemplateEngine`, compiling the packaged
  peer/global/ui/vrrp templates with that function table bound in.

The package does no network I/O and speaks no routing protocol; loading the
operator's YAML lives in :mod:`peering_agent`.
"""

from .allocator import Protocol, ProtocolRegistry  # noqa: F401
from .exceptions import CompileError, RenderError  # noqa: F401
from .generator import ConfigGenerator  # noqa: F401
from .templating import TemplateEngine  # noqa: F401

__all__ = [
    "CompileError",
    "ConfigGenerator",
    "Protocol",
    "ProtocolRegistry",
    "RenderError",
    "TemplateEngine",
]
