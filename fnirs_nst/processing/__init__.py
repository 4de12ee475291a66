"""
Processing module for fNIRS channel tables.
Contains classes for single-file and batch filtering.
"""

from .file_processor import FileProcessor
from .batch_processor import BatchProcessor
__all__ = ['FileProcessor', 'BatchProcessor']
