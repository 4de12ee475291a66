"""
fnirs_nst - fNIRS channel label codec, validation and IIR filtering
"""

from . import channels, preprocessing, processing, read, viz

__version__ = "0.1.0"
__all__ = ['channels', 'preprocessing', 'processing', 'read', 'viz']
