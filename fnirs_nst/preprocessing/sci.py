import logging

import numpy as np
import pandas as pd

from fnirs_nst.channels import group_by_pair, pair_label
from .iir_filter import NON_DATA_COLUMNS, iir_filter

logger = logging.getLogger(__name__)


def calc_sci(signal1: np.ndarray, signal2: np.ndarray, fs=10.0, low_cutoff=0.5,
             high_cutoff=2.5, order=3, apply_filter=True) -> float:
    """
    Calculate the Scalp Coupling Index (SCI) between two signals of the same
    optode pair by computing their correlation coefficient.
    If apply_filter is True (default), signals are first band-passed around the
    cardiac frequency. If False, the signals are assumed already filtered.

    Parameters
    ----------
    signal1 : np.ndarray
        1D array, e.g. the first wavelength of a pair.
    signal2 : np.ndarray
        1D array, e.g. the second wavelength of the same pair.
    fs : float, optional
        Sampling rate in Hz.
    low_cutoff, high_cutoff : float, optional
        Cardiac band in Hz. Default is [0.5, 2.5].
    order : int, optional
        Butterworth filter order.
    apply_filter : bool, optional
        If True, band-pass the signals; if False, use them as is.

    Returns
    -------
    sci_value : float
        Correlation coefficient between the (optionally filtered) signals.
        NaN if either signal has missing samples.
    """
    if not (np.all(np.isfinite(signal1)) and np.all(np.isfinite(signal2))):
        return float('nan')

    if apply_filter:
        df = pd.DataFrame({'s1': signal1, 's2': signal2})
        filt_df = iir_filter(df, fs=fs, filter_type='bandpass', low_cutoff=low_cutoff,
                             high_cutoff=high_cutoff, order=order, keep_mean=False)
        filt1 = filt_df['s1'].to_numpy()
        filt2 = filt_df['s2'].to_numpy()
    else:
        filt1 = signal1
        filt2 = signal2

    corr_matrix = np.corrcoef(filt1, filt2)
    sci_value = corr_matrix[0, 1]
    return sci_value


def pair_sci(df: pd.DataFrame, fs: float, channels=None, **sci_kwargs) -> pd.DataFrame:
    """
    SCI of every optode pair having at least two measures.

    The first two measures of a pair (in sorted order) are correlated.
    channels is the validated ChannelBatch of the data columns of df, in
    column order; it is computed if not given.
    """
    labels = [col for col in df.columns if col not in NON_DATA_COLUMNS]
    groups = group_by_pair(labels, channels)

    rows = []
    for (src, det), measures in groups.items():
        if len(measures) < 2:
            logger.debug(f"Skipping SCI for {pair_label(src, det)}: only one measure")
            continue
        first, second = sorted(measures)[:2]
        sci_val = calc_sci(
            df[measures[first]].to_numpy(dtype=np.float64),
            df[measures[second]].to_numpy(dtype=np.float64),
            fs=fs, **sci_kwargs
        )
        rows.append({'pair': pair_label(src, det), 'source': src, 'detector': det, 'sci': sci_val})

    return pd.DataFrame(rows, columns=['pair', 'source', 'detector', 'sci'])
