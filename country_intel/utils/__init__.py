"""Utility functions for the service."""
from .logging_security import SecureLogger, log_secure

__all__ = [
    'SecureLogger',
    'log_secure',
]
