"""
Signal preprocessing for fNIRS channel tables.
"""

from .iir_filter import iir_filter, resolve_filter_type, format_comment, comment_tag
from .sci import calc_sci, pair_sci

__all__ = ['iir_filter', 'resolve_filter_type', 'format_comment', 'comment_tag',
           'calc_sci', 'pair_sci']
