"""
Network configurations bundled with the tooling.

Each JSON file describes one network's genesis state; several network names
map onto the same file.
"""
from pathlib import Path
from typing import Optional

NETWORKS_DIR = Path(__file__).resolve().parent

NETWORK_FILES = {
    'vanilla-dev': 'heiko.json',
    'heiko-dev': 'heiko.json',
    'kerria-dev': 'parallel.json',
    'parallel-dev': 'parallel.json',
}

DEFAULT_NETWORK = 'heiko-dev'


def network_file(name: str) -> Optional[Path]:
    """Bundled file for a network name, or None when the name is unknown."""
    filename = NETWORK_FILES.get(name)
    if filename is None:
        return None
    return NETWORKS_DIR / filename
