#!/usr/bin/env python3
"""
fNIRS channel validation and IIR filtering - Command Line Interface
"""

import argparse
import logging
import os
from fnirs_nst.preprocessing.iir_filter import FILTER_TYPES
from fnirs_nst.processing.batch_processor import BatchProcessor, SUMMARY_FILE


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Validate channel labels and band-pass filter fNIRS channel tables",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("input_dir", help="Directory containing .txt channel tables")
    parser.add_argument("output_dir", help="Directory for processed outputs")
    parser.add_argument("--fs", type=float, default=None,
                        help="Sampling rate in Hz (default: read from each file)")
    parser.add_argument("--filter_type", default="bandpass", choices=FILTER_TYPES,
                        help="IIR filter type")
    parser.add_argument("--low_cutoff", type=float, default=0.01,
                        help="Lower cutoff frequency in Hz (0=disable)")
    parser.add_argument("--high_cutoff", type=float, default=0.5,
                        help="Upper cutoff frequency in Hz (0=disable)")
    parser.add_argument("--order", type=int, default=3, help="Butterworth filter order")
    parser.add_argument("--no_keep_mean", dest="keep_mean", action="store_false",
                        help="Do not restore channel means after filtering")
    parser.add_argument("--sci_thresh", type=float, default=0.75,
                        help="Scalp Coupling Index threshold")
    parser.add_argument("--no_plots", dest="make_plots", action="store_false",
                        help="Do not save per-pair figures")
    parser.add_argument("--log_level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity level")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=args.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler("fnirs_processing.log"),
            logging.StreamHandler()
        ]
    )

    try:
        processor = BatchProcessor(
            fs=args.fs,
            filter_type=args.filter_type,
            low_cutoff=args.low_cutoff,
            high_cutoff=args.high_cutoff,
            order=args.order,
            keep_mean=args.keep_mean,
            sci_threshold=args.sci_thresh,
            make_plots=args.make_plots,
        )
        results = processor.run(args.input_dir, args.output_dir)

        print("\nProcessing Complete!")
        print(f"Successfully processed {len(results['processed_files'])}/{results['total_files']} files")
        print(f"Summary saved to: {os.path.join(args.output_dir, SUMMARY_FILE)}")

    except Exception as e:
        logging.critical(f"Pipeline failed: {str(e)}", exc_info=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
