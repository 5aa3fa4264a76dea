from .calls import Call
from .exceptions import ChainConnectionError, ChainError, ChainTimeout, ExtrinsicFailed, OperationCancelled
from .substrate_client import ChainClient

__all__ = [
    'Call',
    'ChainClient',
    'ChainError',
    'ChainConnectionError',
    'ChainTimeout',
    'ExtrinsicFailed',
    'OperationCancelled',
]
