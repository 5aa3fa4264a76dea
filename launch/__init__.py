from .orchestrator import Launcher
from .schema import ConfigError, NetworkConfig, load_network_config

__all__ = ['ConfigError', 'Launcher', 'NetworkConfig', 'load_network_config']
