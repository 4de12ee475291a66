import os
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Optional, Dict, Callable
import logging

from fnirs_nst.channels import ChannelType
from fnirs_nst.preprocessing.iir_filter import iir_filter, format_comment, comment_tag
from fnirs_nst.preprocessing.sci import pair_sci
from fnirs_nst.read.loaders import read_channel_table
from fnirs_nst.viz.plots import plot_pairs_separately

logger = logging.getLogger(__name__)
plt.ioff()  # Non-interactive backend


class FileProcessor:
    """Handles processing of individual fNIRS channel tables: validation, IIR filtering, SCI."""

    def __init__(self, fs: Optional[float] = None, filter_type: str = 'bandpass',
                 low_cutoff: float = 0.01, high_cutoff: float = 0.5, order: int = 3,
                 keep_mean: bool = True, sci_threshold: float = 0.75, make_plots: bool = True):
        """
        Initialize processor with parameters.

        Args:
            fs: Sampling frequency in Hz. If None, taken from each file.
            filter_type: 'bandpass', 'lowpass', 'highpass' or 'bandstop'
            low_cutoff: Lower cutoff frequency in Hz (0 = disabled)
            high_cutoff: Upper cutoff frequency in Hz (0 = disabled)
            order: Butterworth filter order
            keep_mean: Restore each channel mean after filtering
            sci_threshold: Pairs with a lower SCI are reported as bad
            make_plots: Save a per-pair figure of the filtered signals
        """
        self.fs = fs
        self.filter_type = filter_type
        self.low_cutoff = low_cutoff
        self.high_cutoff = high_cutoff
        self.order = order
        self.keep_mean = keep_mean
        self.sci_threshold = sci_threshold
        self.make_plots = make_plots
        # Fails early on invalid filter options
        self.comment, self.file_tag = format_comment(low_cutoff, high_cutoff, filter_type)
        logger.info(f"Initialized FileProcessor ({self.comment}, order={order}, "
                    f"keep_mean={keep_mean}, SCI threshold={sci_threshold})")

    def process_file(self, file_path: str, output_base_dir: str, input_base_dir: str,
                     read_file_func: Callable = read_channel_table) -> Optional[Dict]:
        """
        Process single file through complete pipeline.

        Args:
            file_path: Path to input file
            output_base_dir: Base output directory
            input_base_dir: Base input directory
            read_file_func: Function to use for reading files

        Returns:
            Dictionary with 'data' (filtered DataFrame), 'channels' (ChannelBatch),
            'sci' (DataFrame, empty for Hb channels), 'bad_pairs' and 'output_file',
            or None if failed
        """
        try:
            output_dir = self._create_output_dir(output_base_dir, input_base_dir, file_path)
            file_name = os.path.splitext(os.path.basename(file_path))[0]

            # 1) Load data; channel labels are validated by the reader
            logger.info(f"Processing {file_path}")
            data_dict = read_file_func(file_path)
            data = data_dict['data']
            channels = data_dict['channels']
            fs = self._resolve_fs(data, data_dict.get('metadata', {}))

            # 2) Filter
            filtered = iir_filter(data, fs=fs, filter_type=self.filter_type,
                                  low_cutoff=self.low_cutoff, high_cutoff=self.high_cutoff,
                                  order=self.order, keep_mean=self.keep_mean)

            # 3) Scalp coupling, computed on the raw signals of wavelength channels only
            sci = self._calculate_sci(data, fs, channels)
            # NaN SCI (missing samples) counts as bad
            bad_pairs = sci.loc[~(sci['sci'].astype('float64') >= self.sci_threshold), 'pair'].tolist()
            if bad_pairs:
                self._write_bad_sci(sci[sci['pair'].isin(bad_pairs)], output_dir, file_name)

            # 4) Outputs
            output_file = os.path.join(output_dir, f"{file_name}{self.file_tag}.csv")
            filtered.to_csv(output_file, index=False)
            logger.info(f"Saved filtered data ({comment_tag(self.low_cutoff, self.high_cutoff, self.filter_type)}) "
                        f"to {output_file}")

            if self.make_plots and len(channels.sources):
                plot_pairs_separately(filtered, fs=fs, channels=channels,
                                      title=f"{file_name} - {self.comment}")
                self._save_figure(output_dir, f"{file_name}{self.file_tag}.png")

            return {
                'data': filtered,
                'channels': channels,
                'sci': sci,
                'bad_pairs': bad_pairs,
                'output_file': output_file,
            }

        except Exception as e:
            logger.error(f"Failed to process {file_path}: {str(e)}", exc_info=True)
            return None

    # Private helper methods ---------------------------------------------------

    @staticmethod
    def _create_output_dir(output_base: str, input_base: str, file_path: str) -> str:
        """Create output directory mirroring input structure."""
        relative_path = os.path.relpath(os.path.dirname(file_path), start=input_base)
        output_dir = os.path.normpath(os.path.join(output_base, relative_path))
        os.makedirs(output_dir, exist_ok=True)
        return output_dir

    def _resolve_fs(self, data: pd.DataFrame, metadata: Dict) -> float:
        """Sampling rate from constructor, then file metadata, then the time column."""
        if self.fs:
            return self.fs
        if metadata.get('Sampling rate'):
            return float(metadata['Sampling rate'])
        if 'Time' in data.columns and len(data) > 1:
            step = float(np.median(np.diff(data['Time'].to_numpy(dtype=np.float64))))
            if step > 0:
                return 1.0 / step
        raise ValueError("Could not determine sampling frequency (no fs, no metadata, no time column)")

    @staticmethod
    def _calculate_sci(data: pd.DataFrame, fs: float, channels) -> pd.DataFrame:
        if channels.channel_type != ChannelType.WAVELENGTH:
            return pd.DataFrame(columns=['pair', 'source', 'detector', 'sci'])
        return pair_sci(data, fs=fs, channels=channels)

    @staticmethod
    def _write_bad_sci(flagged: pd.DataFrame, output_dir: str, file_name: str) -> None:
        """Log bad pairs to '<file>_bad_SCI_channels.txt'."""
        sci_log = os.path.join(output_dir, f"{file_name}_bad_SCI_channels.txt")
        with open(sci_log, 'w') as f:
            f.write("Channel\tSCI\n")
            for _, row in flagged.iterrows():
                f.write(f"{row['pair']}\t{row['sci']:.3f}\n")
        logger.warning(f"{len(flagged)} pair(s) below SCI threshold, see {sci_log}")

    @staticmethod
    def _save_figure(output_dir: str, filename: str) -> None:
        """Save matplotlib figure with proper cleanup."""
        try:
            path = os.path.join(output_dir, filename)
            plt.savefig(path, dpi=150, bbox_inches='tight')
            logger.debug(f"Saved figure to {path}")
        except Exception as e:
            logger.error(f"Failed to save figure {filename}: {str(e)}")
        finally:
            plt.close('all')
