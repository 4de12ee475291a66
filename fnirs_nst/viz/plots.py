import numpy as np
import matplotlib.pyplot as plt

from fnirs_nst.channels import group_by_pair, pair_label
from fnirs_nst.preprocessing.iir_filter import NON_DATA_COLUMNS


def plot_pairs_separately(data, fs, title="Channel Signals", channels=None,
                          subject=None, y_lim=None):
    """
    Plot each optode pair in its own subplot, one trace per measure.

    Parameters:
    ----------
    data : DataFrame
        Data to plot, one column per channel label ('Time' is ignored)
    fs : float
        Sampling frequency
    title : str
        Plot title
    channels : ChannelBatch, optional
        Decoded channel columns of data, computed if not given
    subject : str, optional
        Subject identifier
    y_lim : tuple, optional
        Y-axis limits as (min, max). If None, will use common auto-scaled limits.
    """
    labels = [col for col in data.columns if col not in NON_DATA_COLUMNS]
    groups = group_by_pair(labels, channels)
    pairs = sorted(groups.keys())

    fig, axes = plt.subplots(nrows=max(len(pairs), 1), ncols=1,
                             figsize=(10, 3 * max(len(pairs), 1)), sharex=True, squeeze=False)
    axes = axes[:, 0]
    title_parts = [title]
    if subject: title_parts.append(f"Subject: {subject}")
    fig.suptitle("\n".join(title_parts))

    # If y_lim is None, calculate global min and max across all channels
    if y_lim is None and labels:
        all_values = data[labels].to_numpy(dtype=np.float64)
        all_values = all_values[np.isfinite(all_values)]
        if all_values.size:
            min_val = all_values.min()
            max_val = all_values.max()
            # Add a small buffer (5% of range)
            buffer = 0.05 * (max_val - min_val) or abs(max_val) * 0.05 or 1.0
            y_lim = (min_val - buffer, max_val + buffer)

    if 'Time' in data.columns:
        time = data['Time'].to_numpy()
    else:
        time = np.arange(len(data)) / fs

    for ax, pair in zip(axes, pairs):
        for measure in sorted(groups[pair]):
            label = groups[pair][measure]
            ax.plot(time, data[label], label=label)

        if y_lim is not None:
            ax.set_ylim(y_lim)

        ax.set_ylabel(pair_label(*pair))
        ax.legend(loc='upper right')
    axes[-1].set_xlabel("Time (s)")
    plt.tight_layout(rect=[0, 0, 1, 0.95])

    return fig, axes, y_lim  # Return y_lim so it can be reused
