import os
import logging
from typing import List

import pandas as pd
from natsort import natsorted
from tqdm import tqdm

from fnirs_nst.processing.file_processor import FileProcessor
from fnirs_nst.read.loaders import read_channel_table
logger = logging.getLogger(__name__)

SUMMARY_FILE = 'processing_summary.csv'


class BatchProcessor:
    """Handles batch processing of multiple fNIRS channel tables."""

    def __init__(self, **processor_options):
        """
        Initialize batch processor.

        Args:
            **processor_options: forwarded to FileProcessor (fs, filter_type,
                low_cutoff, high_cutoff, order, keep_mean, sci_threshold, make_plots)
        """
        self.file_processor = FileProcessor(**processor_options)
        logger.info("Initialized BatchProcessor")

    def find_input_files(self, input_dir: str) -> List[str]:
        """Recursively find all .txt files in directory, in natural order (sub-2 before sub-10)."""
        txt_files = []
        for root, _, files in os.walk(input_dir):
            for file in files:
                if file.endswith('.txt'):
                    txt_files.append(os.path.join(root, file))
        return natsorted(txt_files)

    def run(self, input_dir: str, output_dir: str, show_progress: bool = True) -> dict:
        """
        Filter every file of input_dir and write a processing summary.

        Args:
            input_dir: Input directory containing .txt files
            output_dir: Output directory for processed data
            show_progress: Display a progress bar

        Returns:
            Dictionary containing:
            - summary: one row per processed file
            - processed_files: List of successfully processed files
            - skipped_files: List of skipped files
            - total_files: number of input files
        """
        os.makedirs(output_dir, exist_ok=True)
        txt_files = self.find_input_files(input_dir)
        logger.info(f"Found {len(txt_files)} input files")

        if not txt_files:
            raise ValueError(f"No .txt files found in input directory '{input_dir}'")

        processed = []
        skipped = []
        summary_rows = []
        for file_path in tqdm(txt_files, desc="Filtering", unit="file", disable=not show_progress):
            result = self.file_processor.process_file(
                file_path=file_path,
                output_base_dir=output_dir,
                input_base_dir=input_dir,
                read_file_func=read_channel_table
            )
            if result is None:
                skipped.append(file_path)
                continue
            processed.append(file_path)
            summary_rows.append(self._summarize(file_path, input_dir, result))

        summary = pd.DataFrame(summary_rows, columns=[
            'file', 'channel_type', 'n_channels', 'n_pairs', 'bad_sci_pairs', 'output_file'])
        summary_path = os.path.join(output_dir, SUMMARY_FILE)
        summary.to_csv(summary_path, index=False)
        logger.info(f"Saved processing summary to: {summary_path}")

        return {
            'summary': summary,
            'processed_files': processed,
            'skipped_files': skipped,
            'total_files': len(txt_files)
        }

    @staticmethod
    def _summarize(file_path: str, input_dir: str, result: dict) -> dict:
        channels = result['channels']
        pairs = set(zip(channels.sources.tolist(), channels.detectors.tolist()))
        return {
            'file': os.path.relpath(file_path, start=input_dir),
            'channel_type': channels.channel_type.name if channels.channel_type is not None else '',
            'n_channels': len(channels.sources),
            'n_pairs': len(pairs),
            'bad_sci_pairs': ' '.join(result['bad_pairs']),
            'output_file': result['output_file'],
        }
