"""Render every artifact for a configuration and write it to disk.

The generator mirrors what an operator run does end to end: the global BIRD
configuration, one include file per peer, the status UI page and the
keepalived configuration when VRRP instances are declared.  Rendering goes
through :class:`bird_peering.templating.TemplateEngine`; this module only
decides what to render, in which order, and where the text ends up.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .config import Config, Peer
from .exceptions import RenderError
from .templating import TemplateEngine

LOG = logging.getLogger(__name__)

GLOBAL_FILENAME = "bird.conf"


@dataclass
class RenderResult:
    """One rendered artifact and where it belongs."""

    template: str
    config_text: str
    output_path: Path


@dataclass
class GenerateResult:
    rendered: List[RenderResult] = field(default_factory=list)
    errors: List[RenderError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def for_path(self, path: Path) -> Optional[RenderResult]:
        return next((r for r in self.rendered if r.output_path == path), None)


def peer_filename(peer: Peer) -> str:
    return f"AS{peer.asn}_{peer.protocol_name}.conf"


class ConfigGenerator:
    """Drive the template engine over a whole :class:`Config`.

    Parameters
    ----------
    engine:
        A loaded template engine.
    output_dir:
        Directory for ``bird.conf`` and the per-peer files.  Relative
        ``web_ui_file`` / ``keepalived_config`` paths are resolved against it.
    dry_run:
        Render everything but write nothing.
    workers:
        Number of threads used for peer renders.  With a single worker
        protocol names are allocated in peer declaration order, which keeps
        output reproducible between runs.
    keep_going:
        Log and collect render failures instead of raising the first one.
    """

    def __init__(
        self,
        engine: TemplateEngine,
        config: Config,
        output_dir: Path,
        *,
        dry_run: bool = False,
        workers: int = 1,
        keep_going: bool = False,
    ) -> None:
        self._engine = engine
        self._config = config
        self._output_dir = Path(output_dir)
        self._dry_run = dry_run
        self._workers = max(1, workers)
        self._keep_going = keep_going

    # ------------------------------------------------------------------
    # Individual artifacts
    # ------------------------------------------------------------------
    def render_global(self) -> RenderResult:
        text = self._engine.render("global", {"config": self._config})
        return self._write("global", text, self._output_dir / GLOBAL_FILENAME)

    def render_peer(self, name: str, peer: Peer) -> RenderResult:
        text = self._engine.render(
            "peer", {"name": name, "peer": peer, "config": self._config}
        )
        return self._write("peer", text, self._output_dir / peer_filename(peer))

    def render_ui(self) -> Optional[RenderResult]:
        if not self._config.web_ui_file:
            LOG.debug("no web UI file configured, skipping UI render")
            return None
        text = self._engine.render("ui", {"config": self._config})
        return self._write("ui", text, self._output_dir / self._config.web_ui_file)

    def render_vrrp(self) -> Optional[RenderResult]:
        if not self._config.vrrp:
            LOG.debug("no VRRP instances are defined, not writing config")
            return None
        if not self._config.keepalived_config:
            LOG.warning("VRRP instances defined but keepalived-config is not set")
            return None
        text = self._engine.render("vrrp", {"instances": self._config.vrrp})
        return self._write(
            "vrrp", text, self._output_dir / self._config.keepalived_config
        )

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------
    def generate(self) -> GenerateResult:
        self._check_peer_filenames()
        result = GenerateResult()

        self._collect(result, "global", self.render_global)
        self._render_peers(result)
        # UI last so it lists every protocol the peer renders allocated
        self._collect(result, "ui", self.render_ui)
        self._collect(result, "vrrp", self.render_vrrp)

        LOG.info(
            "rendered %d artifact(s), %d failure(s)",
            len(result.rendered),
            len(result.errors),
        )
        return result

    def _check_peer_filenames(self) -> None:
        owners: Dict[str, str] = {}
        for name, peer in self._config.peers.items():
            filename = peer_filename(peer)
            if filename in owners:
                raise ValueError(
                    f"peers '{owners[filename]}' and '{name}' "
                    f"would both be written to {filename}"
                )
            owners[filename] = name

    def _render_peers(self, result: GenerateResult) -> None:
        peers: List[Tuple[str, Peer]] = list(self._config.peers.items())
        if self._workers == 1 or len(peers) < 2:
            for name, peer in peers:
                self._collect(result, name, lambda n=name, p=peer: self.render_peer(n, p))
            return

        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            futures = [pool.submit(self.render_peer, name, peer) for name, peer in peers]
            for (name, _), future in zip(peers, futures):
                self._collect(result, name, future.result)

    def _collect(
        self,
        result: GenerateResult,
        label: str,
        render: Callable[[], Optional[RenderResult]],
    ) -> None:
        try:
            rendered = render()
        except RenderError as exc:
            if not self._keep_going:
                raise
            LOG.error("%s: %s", label, exc)
            result.errors.append(exc)
            return
        if rendered is not None:
            result.rendered.append(rendered)

    def _write(self, template: str, text: str, path: Path) -> RenderResult:
        if self._dry_run:
            LOG.debug("dry run, not writing %s", path)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            LOG.info("wrote %s config to %s", template, path)
        return RenderResult(template=template, config_text=text, output_path=path)
