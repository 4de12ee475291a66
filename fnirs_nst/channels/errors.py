"""
Exceptions raised while decoding or validating fNIRS channel labels.
"""

from typing import List, Sequence


class ChannelError(ValueError):
    """Base class for all channel label problems."""


class ChannelParseError(ChannelError):
    """A label does not match the S<src>D<det>WL<wl> / S<src>D<det>Hb<tag> format."""

    def __init__(self, label):
        self.label = label
        super().__init__(f"Could not parse channel label: '{label}'")


class DuplicateChannelError(ChannelError):
    """Several labels in one batch describe the same channel."""

    def __init__(self, labels: Sequence[str], positions: Sequence[int]):
        self.labels: List[str] = list(labels)
        self.positions: List[int] = list(positions)
        super().__init__(
            f"Duplicated channels: \"{', '.join(self.labels)}\". "
            f"Indexes: {' '.join(str(p) for p in self.positions)}"
        )


class HeterogeneousTypeError(ChannelError):
    """A batch mixes wavelength and hemoglobin channels."""

    def __init__(self, channel_types):
        self.channel_types = sorted(channel_types)
        names = ', '.join(ct.name for ct in self.channel_types)
        super().__init__(f"Channel type is not homogeneous (found: {names})")
