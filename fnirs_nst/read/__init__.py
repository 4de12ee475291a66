"""
Data loading and input/output operations for fNIRS channel tables.
"""

from .loaders import (
    read_channel_table,      # Main public function
    _read_metadata,          # Internal but needed
    _read_data               # Internal but needed
)

# Explicit exports
__all__ = [
    'read_channel_table'
]

# Internal imports for cross-module use
__internals__ = [
    '_read_metadata',
    '_read_data'
]
