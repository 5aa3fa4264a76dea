"""
Genesis head and validation code export through the collator image.
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class GenesisExportError(Exception):
    """The collator image could not export genesis state or wasm."""


@dataclass(frozen=True)
class GenesisExport:
    state: str
    wasm: str


class GenesisExporter:
    """
    Runs ``docker run --rm <image> export-genesis-{state,wasm} --chain <chain>``.

    Results are cached per (image, chain) so crowdloans sharing an image
    only export once. Any failed export is fatal.
    """

    def __init__(self, runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 docker: str = 'docker'):
        self._runner = runner
        self._docker = docker
        self._cache: Dict[Tuple[str, str], GenesisExport] = {}

    def _export(self, image: str, subcommand: str, chain: str) -> str:
        cmd: List[str] = [self._docker, 'run', '--rm', image, subcommand, '--chain', chain]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = self._runner(cmd, capture_output=True, text=True)
        except OSError as e:
            raise GenesisExportError(f"Cannot run {self._docker}: {e}") from e

        if result.returncode != 0:
            raise GenesisExportError(
                f"{subcommand} for {image} (chain {chain}) exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        output = result.stdout.strip()
        if not output:
            raise GenesisExportError(f"{subcommand} for {image} (chain {chain}) produced no output")
        return output

    def export(self, image: str, chain: str) -> GenesisExport:
        key = (image, chain)
        if key not in self._cache:
            logger.info(f"Exporting genesis state and wasm from {image} (chain {chain})")
            self._cache[key] = GenesisExport(
                state=self._export(image, 'export-genesis-state', chain),
                wasm=self._export(image, 'export-genesis-wasm', chain),
            )
        return self._cache[key]
