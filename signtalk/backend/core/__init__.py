"""
Shared configuration and logging for the backend and the trainer client.
"""
from signtalk.backend.core import config
from signtalk.backend.core.logging import configure_logging, get_logger

__all__ = [
    'config',
    'configure_logging',
    'get_logger'
]
