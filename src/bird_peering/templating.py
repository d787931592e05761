"""Jinja2 template engine for BIRD and keepalived configuration."""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Set

from jinja2 import (
    BaseLoader,
    Environment,
    PackageLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    nodes,
)

from . import formatting
from .allocator import ProtocolRegistry
from .aspa import aspa_filter
from .exceptions import CompileError, EngineStateError, RenderError

LOG = logging.getLogger(__name__)

TEMPLATE_NAMES = ("peer", "global", "ui", "vrrp")
TEMPLATE_FILES = MappingProxyType({name: f"{name}.j2" for name in TEMPLATE_NAMES})

# Stateless functions callable from template text.  The registry-bound
# ``unique_protocol_name`` / ``protocol_names`` and the clock-bound
# ``timestamp`` are added per engine.
TEMPLATE_FUNCTIONS: Mapping[str, Callable[..., Any]] = MappingProxyType(
    {
        "bird_set": formatting.bird_set,
        "bird_as_set": formatting.bird_as_set,
        "as_set": formatting.as_set,
        "is_empty": formatting.is_empty,
        "str_deref": formatting.str_deref,
        "bool_deref": formatting.bool_deref,
        "int_deref": formatting.int_deref,
        "list_deref": formatting.list_deref,
        "map_deref": formatting.map_deref,
        "str_list_join": formatting.str_list_join,
        "bird_string": formatting.bird_string,
        "contains": formatting.contains,
        "split_first": formatting.split_first,
        "is_last": formatting.is_last,
        "iterate": formatting.iterate,
        "make_list": formatting.make_list,
        "int_cmp": formatting.int_cmp,
        "map_contains": formatting.map_contains,
        "aspa_filter": aspa_filter,
    }
)

# Names Jinja2 provides inside macros and blocks.
_IMPLICIT_CALLABLES = frozenset({"caller", "super"})

# Errors a template can trigger through bad context data.
_RENDER_FAILURES = (
    TemplateError,
    LookupError,
    AttributeError,
    TypeError,
    ValueError,
    ArithmeticError,
)


class EngineState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


def _undefined_calls(ast: nodes.Template, known: Set[str]) -> Set[str]:
    """Return names called in ``ast`` that are neither ``known`` nor local."""

    called = {
        call.node.name
        for call in ast.find_all(nodes.Call)
        if isinstance(call.node, nodes.Name)
    }
    local = set(_IMPLICIT_CALLABLES)
    local.update(macro.name for macro in ast.find_all(nodes.Macro))
    local.update(
        name.name for name in ast.find_all(nodes.Name) if name.ctx in ("store", "param")
    )
    for imported in ast.find_all(nodes.FromImport):
        for entry in imported.names:
            local.add(entry[1] if isinstance(entry, tuple) else entry)
    return called - known - local


class TemplateEngine:
    """Compile the peer/global/ui/vrrp templates once and render them.

    The engine moves from ``UNLOADED`` through ``LOADING`` to either
    ``READY`` or ``FAILED``.  A failed load is terminal: build a new engine.
    Rendering from ``READY`` may happen any number of times, from any number
    of threads; the only shared mutable state is the protocol registry, which
    carries its own lock.

    Parameters
    ----------
    registry:
        Protocol name registry used by ``unique_protocol_name``.  A fresh one
        is created when omitted.
    clock:
        Zero-argument callable returning the ``datetime`` used by
        ``timestamp``.  Defaults to the wall clock.
    """

    def __init__(
        self,
        registry: Optional[ProtocolRegistry] = None,
        clock: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._registry = registry if registry is not None else ProtocolRegistry()
        self._clock = clock
        self._state = EngineState.UNLOADED
        self._templates: Dict[str, Template] = {}

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def registry(self) -> ProtocolRegistry:
        return self._registry

    def functions(self) -> Dict[str, Callable[..., Any]]:
        """Return the full function table exposed to template authors."""

        table = dict(TEMPLATE_FUNCTIONS)
        table["unique_protocol_name"] = self._registry.allocate
        table["protocol_names"] = self._registry.lookup
        table["timestamp"] = self._timestamp
        return table

    def _timestamp(self, fmt: str) -> str:
        return formatting.timestamp(fmt, self._clock() if self._clock else None)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, loader: Optional[BaseLoader] = None) -> None:
        """Compile every template from ``loader`` (the packaged ones by default).

        Raises :class:`CompileError` naming the first template that fails;
        the engine is then unusable.
        """

        if self._state is not EngineState.UNLOADED:
            raise EngineStateError(f"cannot load templates in state {self._state.value}")

        self._state = EngineState.LOADING
        env = Environment(
            loader=loader or PackageLoader("bird_peering", "templates"),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.globals.update(self.functions())

        templates: Dict[str, Template] = {}
        try:
            for name in TEMPLATE_NAMES:
                templates[name] = self._compile(env, name)
        except CompileError as exc:
            self._state = EngineState.FAILED
            LOG.error("template load failed: %s", exc)
            raise

        self._templates = templates
        self._state = EngineState.READY
        LOG.debug("loaded templates: %s", ", ".join(TEMPLATE_NAMES))

    def _compile(self, env: Environment, name: str) -> Template:
        filename = TEMPLATE_FILES[name]
        try:
            source, _, _ = env.loader.get_source(env, filename)  # type: ignore[union-attr]
            template = env.get_template(filename)
            ast = env.parse(source, name=filename)
        except TemplateNotFound as exc:
            raise CompileError(name, f"{filename} not found") from exc
        except TemplateSyntaxError as exc:
            raise CompileError(name, f"line {exc.lineno}: {exc.message}") from exc

        unknown = _undefined_calls(ast, set(env.globals))
        if unknown:
            raise CompileError(name, "undefined function " + ", ".join(sorted(unknown)))
        return template

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render template ``name`` with ``context``.

        Raises :class:`RenderError` when the template cannot be executed
        against ``context``.  Protocol names allocated before the failure
        stay allocated.
        """

        if self._state is not EngineState.READY:
            raise EngineStateError(f"cannot render in state {self._state.value}")

        template = self._templates.get(name)
        if template is None:
            raise RenderError(name, "no such template")

        try:
            return template.render(dict(context))
        except _RENDER_FAILURES as exc:
            raise RenderError(name, str(exc)) from exc
