"""
Shared fixtures: synthetic channel tables written to disk.
"""

import numpy as np
import pytest


def write_channel_table(path, labels, data, fs=10.0, metadata=True):
    """Write a tab-separated channel table as read by read_channel_table."""
    n_samples = data.shape[0]
    times = np.arange(n_samples) / fs
    lines = []
    if metadata:
        lines.append("Subject:\tsub-01")
        lines.append(f"Sampling rate:\t{fs}")
        lines.append("")
    lines.append("\t".join(["Time"] + list(labels)))
    for i in range(n_samples):
        lines.append("\t".join([f"{times[i]:.4f}"] + [f"{v:.6f}" for v in data[i]]))
    path.write_text("\n".join(lines) + "\n")
    return path


def synthetic_pair_signals(n_pairs, fs=10.0, duration=60.0, seed=0):
    """Two coupled wavelengths per pair: shared cardiac + slow wave, independent noise."""
    rng = np.random.default_rng(seed)
    t = np.arange(int(fs * duration)) / fs
    columns = []
    for _ in range(n_pairs):
        shared = np.sin(2 * np.pi * 1.0 * t) + 0.5 * np.sin(2 * np.pi * 0.1 * t)
        columns.append(100.0 + shared + 0.05 * rng.standard_normal(t.size))
        columns.append(80.0 + 0.8 * shared + 0.05 * rng.standard_normal(t.size))
    return np.column_stack(columns)


@pytest.fixture
def wavelength_table(tmp_path):
    labels = ["S1D1WL685", "S1D1WL830", "S2D1WL685", "S2D1WL830"]
    data = synthetic_pair_signals(2)
    input_dir = tmp_path / "input" / "sub-01"
    input_dir.mkdir(parents=True)
    return write_channel_table(input_dir / "sub-01_task.txt", labels, data)
