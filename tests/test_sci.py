import numpy as np
import pandas as pd
import pytest

from fnirs_nst.preprocessing.sci import calc_sci, pair_sci

from conftest import synthetic_pair_signals


def test_calc_sci_coupled_signals():
    data = synthetic_pair_signals(1)
    assert calc_sci(data[:, 0], data[:, 1], fs=10.0) > 0.95


def test_calc_sci_uncoupled_signals():
    rng = np.random.default_rng(1)
    x = rng.standard_normal(600)
    y = rng.standard_normal(600)
    assert abs(calc_sci(x, y, fs=10.0)) < 0.3


def test_calc_sci_without_filter():
    x = np.arange(100, dtype=float)
    assert calc_sci(x, 2 * x + 1, apply_filter=False) == pytest.approx(1.0)


def test_pair_sci_per_pair():
    data = synthetic_pair_signals(2)
    rng = np.random.default_rng(2)
    df = pd.DataFrame({
        'Time': np.arange(data.shape[0]) / 10.0,
        'S1D1WL830': data[:, 1],
        'S1D1WL685': data[:, 0],
        'S2D1WL685': data[:, 2],
        'S2D1WL830': rng.standard_normal(data.shape[0]),
        'S3D2WL685': data[:, 3],
    })
    sci = pair_sci(df, fs=10.0)

    assert list(sci.columns) == ['pair', 'source', 'detector', 'sci']
    # S3D2 only has one wavelength
    assert sci['pair'].tolist() == ['S1D1', 'S2D1']
    assert sci.loc[0, 'sci'] > 0.95
    assert sci.loc[1, 'sci'] < 0.5


def test_pair_sci_no_pairs():
    df = pd.DataFrame({'Time': np.arange(50) / 10.0, 'S1D1WL685': np.ones(50)})
    sci = pair_sci(df, fs=10.0)
    assert sci.empty
    assert list(sci.columns) == ['pair', 'source', 'detector', 'sci']


def test_calc_sci_missing_samples_is_nan():
    data = synthetic_pair_signals(1)
    signal1 = data[:, 0].copy()
    signal1[10] = np.nan
    assert np.isnan(calc_sci(signal1, data[:, 1], fs=10.0))
