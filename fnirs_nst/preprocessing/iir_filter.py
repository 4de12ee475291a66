import logging
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy.signal import butter, filtfilt

logger = logging.getLogger(__name__)

FILTER_TYPES = ('bandpass', 'lowpass', 'highpass', 'bandstop')
NON_DATA_COLUMNS = ('Time', 'Sample number', 'Event')

_FILE_TAGS = {
    'bandpass': '_IIR-band',
    'highpass': '_IIR-high',
    'lowpass': '_IIR-low',
    'bandstop': '_IIR-stop',
}


def resolve_filter_type(low_cutoff: Optional[float], high_cutoff: Optional[float],
                        filter_type: str = 'bandpass') -> Tuple[Optional[float], Optional[float], str]:
    """
    Turn user options into an effective filter.

    A lower cutoff of 0 (or filter_type='lowpass') disables the high-pass part,
    an upper cutoff of 0 (or filter_type='highpass') disables the low-pass part.

    :return: (low_cutoff or None, high_cutoff or None, effective filter type)
    """
    if filter_type not in FILTER_TYPES:
        raise ValueError(f"Unknown filter type '{filter_type}', expected one of {FILTER_TYPES}")

    if filter_type == 'bandstop':
        if not low_cutoff or not high_cutoff:
            raise ValueError("Band-stop filtering needs both a lower and an upper cutoff")
        return low_cutoff, high_cutoff, filter_type

    resolved = 'bandpass'
    if not low_cutoff or filter_type == 'lowpass':
        low_cutoff = None
        resolved = 'lowpass'
    if not high_cutoff or filter_type == 'highpass':
        high_cutoff = None
        resolved = 'highpass'

    if low_cutoff is None and high_cutoff is None:
        raise ValueError("Both cutoff frequencies are disabled, nothing to filter")
    return low_cutoff, high_cutoff, resolved


def format_comment(low_cutoff: Optional[float], high_cutoff: Optional[float],
                   filter_type: str = 'bandpass') -> Tuple[str, str]:
    """Return (human readable comment, output file tag) for the given filter options."""
    low, high, ftype = resolve_filter_type(low_cutoff, high_cutoff, filter_type)
    if ftype == 'bandpass':
        comment = f"Band-pass: {low:g}Hz-{high:g}Hz"
    elif ftype == 'highpass':
        comment = f"High-pass: {low:g}Hz"
    elif ftype == 'lowpass':
        comment = f"Low-pass: {high:g}Hz"
    else:
        comment = f"Band-stop: {low:g}Hz-{high:g}Hz"
    return comment, _FILE_TAGS[ftype]


def comment_tag(low_cutoff: Optional[float], high_cutoff: Optional[float],
                filter_type: str = 'bandpass') -> str:
    """Short history tag, e.g. 'band(0.01-0.5Hz)'."""
    low, high, ftype = resolve_filter_type(low_cutoff, high_cutoff, filter_type)
    if ftype == 'bandpass':
        return f"band({low:g}-{high:g}Hz)"
    if ftype == 'highpass':
        return f"high({low:g}Hz)"
    if ftype == 'lowpass':
        return f"low({high:g}Hz)"
    return f"stop({low:g}-{high:g}Hz)"


def _design(fs: float, filter_type: str, low_cutoff: Optional[float],
            high_cutoff: Optional[float], order: int):
    if fs is None or fs <= 0:
        raise ValueError(f"Sampling frequency must be positive, got {fs}")
    nyquist = fs / 2.0
    for cutoff in (low_cutoff, high_cutoff):
        if cutoff is not None and not 0 < cutoff < nyquist:
            raise ValueError(f"Cutoff {cutoff} Hz must lie in (0, {nyquist}) Hz for fs={fs} Hz")

    if filter_type == 'highpass':
        return butter(order, low_cutoff / nyquist, btype='highpass')
    if filter_type == 'lowpass':
        return butter(order, high_cutoff / nyquist, btype='lowpass')
    if low_cutoff >= high_cutoff:
        raise ValueError(f"Lower cutoff ({low_cutoff}) must be < upper cutoff ({high_cutoff})")
    return butter(order, [low_cutoff / nyquist, high_cutoff / nyquist], btype=filter_type)


def iir_filter(df: pd.DataFrame, fs: float, filter_type: str = 'bandpass',
               low_cutoff: Optional[float] = 0.01, high_cutoff: Optional[float] = 0.5,
               order: int = 3, keep_mean: bool = True) -> pd.DataFrame:
    """
    Zero-phase Butterworth filtering of every data column of df.

    Columns listed in NON_DATA_COLUMNS are copied unchanged. If keep_mean is
    True, each channel mean is removed before filtering and added back after.
    Missing samples (NaN) are linearly interpolated before filtering; a channel
    with no valid sample raises ValueError.
    """
    low, high, ftype = resolve_filter_type(low_cutoff, high_cutoff, filter_type)
    b, a = _design(fs, ftype, low, high, order)
    logger.debug(f"IIR {ftype} filter (order={order}, low={low}, high={high}, fs={fs})")

    filtered_df = df.copy()
    data_columns = [col for col in df.columns if col not in NON_DATA_COLUMNS]
    for ch in data_columns:
        ch_series = df[ch].astype('float64')
        n_missing = int(ch_series.isna().sum())
        if n_missing == len(ch_series):
            raise ValueError(f"Channel '{ch}' has no valid sample to filter")
        if n_missing:
            logger.warning(f"Interpolating {n_missing} missing sample(s) in channel '{ch}' before filtering")
            ch_series = ch_series.interpolate(limit_direction='both')
        ch_asarray = ch_series.to_numpy(dtype='float64')
        ch_mean = ch_asarray.mean() if keep_mean else 0.0
        ch_filtered = filtfilt(b, a, ch_asarray - ch_mean)
        filtered_df[ch] = ch_filtered + ch_mean
    return filtered_df
