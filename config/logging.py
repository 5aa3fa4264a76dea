import logging.config
import os
from typing import Optional

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'level': 'DEBUG',
        },
    },
    'loggers': {
        '': {  # Root logger
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': True,
        },
        'substrateinterface': {
            'handlers': ['console'],
            'level': 'WARNING',  # Don't log RPC payloads unless needed
            'propagate': False,
        },
        'websocket': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}


def build_logging_config(level: str = 'INFO', log_file: Optional[str] = None) -> dict:
    """LOGGING with the root level applied and an optional file handler attached."""
    cfg = {
        **LOGGING,
        'handlers': dict(LOGGING['handlers']),
        'loggers': {name: dict(logger) for name, logger in LOGGING['loggers'].items()},
    }
    cfg['loggers']['']['level'] = level.upper()

    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        cfg['handlers']['file'] = {
            'class': 'logging.FileHandler',
            'filename': log_file,
            'formatter': 'verbose',
            'level': 'DEBUG',
        }
        cfg['loggers']['']['handlers'] = ['console', 'file']
    return cfg


def configure_logging(level: str = 'INFO', log_file: Optional[str] = None) -> None:
    logging.config.dictConfig(build_logging_config(level, log_file))
