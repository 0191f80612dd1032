"""
Shared utilities: seeded random stream and logging setup.
"""

from .random import AleaPRNG
from .logging import configure_logging

__all__ = ['AleaPRNG', 'configure_logging']
