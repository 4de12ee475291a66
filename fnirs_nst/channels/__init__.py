"""
Channel label codec: parse, format and validate fNIRS channel names.
"""

from .channel_types import ChannelType, HbTag
from .codec import (
    ChannelBatch,
    ChannelRecord,
    find_inconsistent_pairs,
    format_channel_label,
    group_by_pair,
    pair_label,
    parse_channel_label,
    validate_channel_batch,
)
from .errors import (
    ChannelError,
    ChannelParseError,
    DuplicateChannelError,
    HeterogeneousTypeError,
)

__all__ = [
    'ChannelType', 'HbTag', 'ChannelBatch', 'ChannelRecord',
    'parse_channel_label', 'format_channel_label', 'validate_channel_batch',
    'find_inconsistent_pairs', 'group_by_pair', 'pair_label',
    'ChannelError', 'ChannelParseError', 'DuplicateChannelError',
    'HeterogeneousTypeError',
]
