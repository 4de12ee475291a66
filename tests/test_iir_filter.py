"""
Test zero-phase IIR (Butterworth) filtering of channel tables.
"""

import numpy as np
import pandas as pd
import pytest
from scipy import signal

from fnirs_nst.preprocessing.iir_filter import (
    comment_tag,
    format_comment,
    iir_filter,
    resolve_filter_type,
)


def _amplitude_at(x, fs, freq):
    """Amplitude of the spectral component closest to freq."""
    spectrum = np.abs(np.fft.rfft(x)) * 2 / len(x)
    freqs = np.fft.rfftfreq(len(x), d=1 / fs)
    return spectrum[np.argmin(np.abs(freqs - freq))]


@pytest.fixture
def synthetic_df():
    fs = 10.0
    t = np.arange(int(fs * 600)) / fs
    drift = 2.0 * np.sin(2 * np.pi * 0.002 * t)
    hrf = 5.0 * np.sin(2 * np.pi * 0.1 * t)
    cardiac = 1.0 * np.sin(2 * np.pi * 1.0 * t)
    return fs, pd.DataFrame({
        'Time': t,
        'S1D1WL685': 50.0 + drift + hrf + cardiac,
        'S1D1WL830': 30.0 - 0.5 * (drift + hrf + cardiac),
    })


def test_bandpass_preserves_hemodynamic_band(synthetic_df):
    fs, df = synthetic_df
    filtered = iir_filter(df, fs=fs, low_cutoff=0.01, high_cutoff=0.5, keep_mean=False)

    x = filtered['S1D1WL685'].to_numpy()
    assert _amplitude_at(x, fs, 0.1) == pytest.approx(5.0, rel=0.05)
    assert _amplitude_at(x, fs, 1.0) < 0.05
    assert _amplitude_at(x, fs, 0.002) < 0.5
    # High-pass component removes the offset when the mean is not kept
    assert abs(x.mean()) < 0.5


def test_keep_mean_restores_channel_mean(synthetic_df):
    fs, df = synthetic_df
    filtered = iir_filter(df, fs=fs, low_cutoff=0.01, high_cutoff=0.5, keep_mean=True)
    assert filtered['S1D1WL685'].mean() == pytest.approx(df['S1D1WL685'].mean(), abs=0.5)
    assert filtered['S1D1WL830'].mean() == pytest.approx(df['S1D1WL830'].mean(), abs=0.5)


def test_non_data_columns_untouched(synthetic_df):
    fs, df = synthetic_df
    original = df.copy()
    filtered = iir_filter(df, fs=fs)
    pd.testing.assert_series_equal(filtered['Time'], df['Time'])
    pd.testing.assert_frame_equal(df, original)
    assert list(filtered.columns) == list(df.columns)


def test_matches_scipy_filtfilt(synthetic_df):
    fs, df = synthetic_df
    b, a = signal.butter(3, 0.5 / (fs / 2), btype='lowpass')
    expected = signal.filtfilt(b, a, df['S1D1WL830'].to_numpy())
    filtered = iir_filter(df, fs=fs, filter_type='lowpass', high_cutoff=0.5, keep_mean=False)
    np.testing.assert_allclose(filtered['S1D1WL830'].to_numpy(), expected, rtol=1e-10, atol=1e-10)


def test_highpass_from_zero_upper_cutoff(synthetic_df):
    fs, df = synthetic_df
    filtered = iir_filter(df, fs=fs, low_cutoff=0.5, high_cutoff=0, keep_mean=False)
    x = filtered['S1D1WL685'].to_numpy()
    assert _amplitude_at(x, fs, 1.0) == pytest.approx(1.0, rel=0.05)
    assert _amplitude_at(x, fs, 0.1) < 0.05


def test_bandstop(synthetic_df):
    fs, df = synthetic_df
    filtered = iir_filter(df, fs=fs, filter_type='bandstop', low_cutoff=0.7,
                          high_cutoff=1.5, keep_mean=False)
    x = filtered['S1D1WL685'].to_numpy()
    assert _amplitude_at(x, fs, 1.0) < 0.05
    assert _amplitude_at(x, fs, 0.1) == pytest.approx(5.0, rel=0.05)


@pytest.mark.parametrize("low, high, ftype, expected", [
    (0.01, 0.5, 'bandpass', (0.01, 0.5, 'bandpass')),
    (0, 0.5, 'bandpass', (None, 0.5, 'lowpass')),
    (0.01, 0, 'bandpass', (0.01, None, 'highpass')),
    (0.01, 0.5, 'lowpass', (None, 0.5, 'lowpass')),
    (0.01, 0.5, 'highpass', (0.01, None, 'highpass')),
    (0.7, 1.5, 'bandstop', (0.7, 1.5, 'bandstop')),
])
def test_resolve_filter_type(low, high, ftype, expected):
    assert resolve_filter_type(low, high, ftype) == expected


@pytest.mark.parametrize("low, high, ftype", [
    (0, 0, 'bandpass'),
    (0.01, 0.5, 'notch'),
    (0, 1.5, 'bandstop'),
])
def test_resolve_filter_type_invalid(low, high, ftype):
    with pytest.raises(ValueError):
        resolve_filter_type(low, high, ftype)


def test_format_comment_and_tags():
    assert format_comment(0.01, 0.5) == ("Band-pass: 0.01Hz-0.5Hz", "_IIR-band")
    assert format_comment(0.01, 0) == ("High-pass: 0.01Hz", "_IIR-high")
    assert format_comment(0, 0.5) == ("Low-pass: 0.5Hz", "_IIR-low")
    assert format_comment(0.7, 1.5, 'bandstop') == ("Band-stop: 0.7Hz-1.5Hz", "_IIR-stop")
    assert comment_tag(0.01, 0.5) == "band(0.01-0.5Hz)"
    assert comment_tag(0.01, 0) == "high(0.01Hz)"
    assert comment_tag(0, 0.5) == "low(0.5Hz)"


@pytest.mark.parametrize("kwargs", [
    dict(fs=0),
    dict(fs=10.0, high_cutoff=5.0),
    dict(fs=10.0, low_cutoff=0.6, high_cutoff=0.5),
])
def test_invalid_filter_design(synthetic_df, kwargs):
    _, df = synthetic_df
    with pytest.raises(ValueError):
        iir_filter(df, **kwargs)


def test_missing_samples_interpolated(synthetic_df, caplog):
    fs, df = synthetic_df
    df.loc[[0, 1000, 1001], 'S1D1WL685'] = np.nan
    filtered = iir_filter(df, fs=fs)
    assert not filtered['S1D1WL685'].isna().any()
    assert "Interpolating 3 missing sample(s) in channel 'S1D1WL685'" in caplog.text
    # Input frame keeps its NaNs
    assert df['S1D1WL685'].isna().sum() == 3


def test_all_missing_channel_raises(synthetic_df):
    fs, df = synthetic_df
    df['S1D1WL830'] = np.nan
    with pytest.raises(ValueError, match="S1D1WL830"):
        iir_filter(df, fs=fs)
