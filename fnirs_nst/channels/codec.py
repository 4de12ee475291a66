"""
Encoding and decoding of fNIRS channel labels.

A channel label names one source-detector pair and one measure:
    - wavelength channels: 'S<src>D<det>WL<wavelength>', e.g. S1D2WL685
    - hemoglobin channels: 'S<src>D<det>Hb<tag>', e.g. S3D01HbR, with tag in
      O (oxy), R (deoxy), T (total).

Indices may carry leading zeros (S01D7WL830). Re-formatting a parsed label
gives its canonical form, which is what duplicate detection relies on.
"""

import logging
import numbers
import re
from collections import Counter
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .channel_types import ChannelType, HbTag, HB_TAGS
from .errors import ChannelParseError, DuplicateChannelError, HeterogeneousTypeError

logger = logging.getLogger(__name__)

_LABEL_PATTERN = re.compile(r'S([0-9]+)D([0-9]+)(?:WL([0-9]+)|Hb([ORT]))')

Measure = Union[int, str]
Pair = Tuple[int, int]


class ChannelRecord(NamedTuple):
    source_index: int
    detector_index: int
    measure: Measure
    channel_type: ChannelType


class ChannelBatch(NamedTuple):
    """
    Decoded content of a homogeneous list of channel labels.

    measures is an int array for wavelength channels and a list of
    hemoglobin tags ('O', 'R', 'T') for Hb channels. channel_type is None
    only for an empty batch.
    """
    sources: np.ndarray
    detectors: np.ndarray
    measures: Union[np.ndarray, List[str]]
    channel_type: Optional[ChannelType]


def pair_label(source_index: int, detector_index: int) -> str:
    return f"S{int(source_index)}D{int(detector_index)}"


def parse_channel_label(label: str) -> ChannelRecord:
    """
    Decode one channel label.

    :param label: e.g. 'S1D2WL685', 'S01D7WL830' or 'S3D1HbR'
    :return: ChannelRecord(source_index, detector_index, measure, channel_type)
    :raises ChannelParseError: if the label does not match any known format
    """
    if not isinstance(label, str):
        raise ChannelParseError(label)
    match = _LABEL_PATTERN.fullmatch(label)
    if match is None:
        raise ChannelParseError(label)

    src, det, wavelength, hb_tag = match.groups()
    if wavelength is not None:
        return ChannelRecord(int(src), int(det), int(wavelength), ChannelType.WAVELENGTH)
    return ChannelRecord(int(src), int(det), hb_tag, ChannelType.HB)


def _format_measure(measure) -> str:
    if isinstance(measure, HbTag):
        return f"Hb{measure.value}"
    if isinstance(measure, str):
        tag = measure[2:] if measure.startswith("Hb") else measure
        if tag in HB_TAGS:
            return f"Hb{tag}"
        raise ValueError(f"Unknown hemoglobin measure: '{measure}'")
    if isinstance(measure, bool):
        raise ValueError(f"Invalid measure: {measure!r}")
    if isinstance(measure, numbers.Integral):
        wavelength = int(measure)
    elif isinstance(measure, numbers.Real) and float(measure).is_integer():
        wavelength = int(measure)
    else:
        raise ValueError(f"Wavelength must be an integer, got {measure!r}")
    if wavelength < 0:
        raise ValueError(f"Wavelength must be non-negative, got {wavelength}")
    return f"WL{wavelength}"


def format_channel_label(source_index: int, detector_index: int, measure: Measure) -> str:
    """
    Build the canonical label of a channel.

    Numeric measures give 'S<src>D<det>WL<wavelength>', hemoglobin tags
    ('O', 'R', 'T', an HbTag, or 'HbO'/'HbR'/'HbT') give 'S<src>D<det>Hb<tag>'.
    Indices are written without leading zeros.
    """
    for name, value in (("source", source_index), ("detector", detector_index)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 0:
            raise ValueError(f"Invalid {name} index: {value!r}")
    return pair_label(source_index, detector_index) + _format_measure(measure)


def find_inconsistent_pairs(sources: Sequence[int], detectors: Sequence[int],
                            measures: Sequence[Measure]) -> List[Pair]:
    """
    Return the optode pairs whose measures do not cover the batch.

    A pair is consistent when it carries one entry for each distinct measure
    found anywhere in the batch. Pairs missing a measure, or holding more
    entries than there are distinct measures, are returned sorted by
    (source, detector).
    """
    measures = np.asarray(measures).tolist()
    pair_measures: Dict[Pair, set] = {}
    pair_counts: Counter = Counter()
    for src, det, meas in zip(sources, detectors, measures):
        pair = (int(src), int(det))
        pair_measures.setdefault(pair, set()).add(meas)
        pair_counts[pair] += 1

    n_measures = len(set(measures))
    return sorted(
        pair for pair, pair_meas in pair_measures.items()
        if len(pair_meas) != n_measures or pair_counts[pair] > n_measures
    )


def validate_channel_batch(labels: Sequence[str]) -> ChannelBatch:
    """
    Decode a list of channel labels sharing the same channel type.

    Checks that:
        - channels are unique (after canonical re-formatting)
        - channel type is homogeneous
    Logs a warning if the measures are not the same for every pair
    (e.g. one pair has only one wavelength).

    :param labels: channel labels, e.g. ['S1D2WL685', 'S1D2WL830']
    :return: ChannelBatch(sources, detectors, measures, channel_type)
    :raises ChannelParseError: on the first malformed label
    :raises DuplicateChannelError: if two labels describe the same channel
    :raises HeterogeneousTypeError: if wavelength and Hb channels are mixed
    """
    labels = list(labels)
    records = [parse_channel_label(label) for label in labels]
    canonical = [format_channel_label(r.source_index, r.detector_index, r.measure)
                 for r in records]

    counts = Counter(canonical)
    positions = [i + 1 for i, name in enumerate(canonical) if counts[name] > 1]
    if positions:
        raise DuplicateChannelError([labels[p - 1] for p in positions], positions)

    ctypes = {r.channel_type for r in records}
    if len(ctypes) > 1:
        raise HeterogeneousTypeError(ctypes)

    if not records:
        empty = np.array([], dtype=int)
        return ChannelBatch(empty, empty.copy(), empty.copy(), None)

    channel_type = ctypes.pop()
    sources = np.array([r.source_index for r in records], dtype=int)
    detectors = np.array([r.detector_index for r in records], dtype=int)
    if channel_type == ChannelType.WAVELENGTH:
        measures = np.array([r.measure for r in records], dtype=int)
    else:
        measures = [r.measure for r in records]

    inconsistent = find_inconsistent_pairs(sources, detectors, measures)
    if inconsistent:
        logger.warning(
            f"Inconsistent measure(s) for pair(s): "
            f"{', '.join(pair_label(src, det) for src, det in inconsistent)}"
        )

    return ChannelBatch(sources, detectors, measures, channel_type)


def group_by_pair(labels: Sequence[str],
                  batch: Optional[ChannelBatch] = None) -> Dict[Pair, Dict[Measure, str]]:
    """
    Map each optode pair to {measure: label}, in order of first appearance.

    If batch is given, it must be the result of validate_channel_batch(labels).
    """
    labels = list(labels)
    if batch is None:
        batch = validate_channel_batch(labels)
    measures = np.asarray(batch.measures).tolist()

    groups: Dict[Pair, Dict[Measure, str]] = {}
    for label, src, det, meas in zip(labels, batch.sources, batch.detectors, measures):
        groups.setdefault((int(src), int(det)), {})[meas] = label
    return groups
