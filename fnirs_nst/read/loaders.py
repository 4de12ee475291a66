import logging

import numpy as np
import pandas as pd

from fnirs_nst.channels import validate_channel_batch
from fnirs_nst.preprocessing.iir_filter import NON_DATA_COLUMNS

# Create a logger for this module
logger = logging.getLogger(__name__)

TIME_COLUMN = 'Time'
EVENT_COLUMN = 'Event'


def read_channel_table(file_path: str) -> dict:
    """
    Parse a tab-separated export of fNIRS channel signals.

    Expected layout: optional 'Key:<TAB>Value' metadata lines, then a header
    row starting with 'Time' followed by channel labels (S1D1WL685, S1D1HbO, ...),
    then one row per sample. Optional 'Sample number' and 'Event' columns are
    kept but not decoded as channels.

    :param file_path: path to raw data file
    :return: dictionary of metadata, data and decoded channels:
        {
            'metadata': { ... },
            'data': pd.DataFrame,   # 'Time' column + one column per channel
            'channels': ChannelBatch  # decoded channel columns, in column order
        }
    :raises ChannelError: if the channel labels are malformed, duplicated or mixed
    """
    try:
        with open(file_path, 'r') as f:
            lines = f.read().split('\n')
    except Exception as e:
        logger.error(f"Failed to open/read file '{file_path}'. Error: {e}")
        raise

    if not any(line.strip() for line in lines):
        msg = f"File '{file_path}' is empty or could not be read properly."
        logger.error(msg)
        raise IOError(msg)

    rows = [line.rstrip('\r').split('\t') for line in lines]

    header_idx = _find_header(rows, file_path)
    metadata = _read_metadata(rows[:header_idx], file_path)
    df = _read_data(rows[header_idx:], file_path)

    channel_labels = [col for col in df.columns if col not in NON_DATA_COLUMNS]
    logger.debug(f"Channel columns in '{file_path}': {channel_labels}")
    channels = validate_channel_batch(channel_labels)

    return {'metadata': metadata, 'data': df, 'channels': channels}


def _find_header(rows: list, file_path: str) -> int:
    for idx, row in enumerate(rows):
        if row and row[0].strip() == TIME_COLUMN:
            return idx
    msg = f"Could not find a '{TIME_COLUMN}' header row in '{file_path}'."
    logger.error(msg)
    raise ValueError(msg)


def _read_metadata(rows: list, file_path: str) -> dict:
    """
    Internal helper function to parse the header lines and return metadata.
    'Sampling rate' is converted to float when present.
    """
    metadata = {}
    for i, row in enumerate(rows):
        if not row or not row[0].strip():
            continue
        if len(row) >= 2 and ':' in row[0]:
            key = row[0].split(':')[0].strip()
            metadata[key] = row[1].strip()
        else:
            logger.debug(f"Line {i} doesn't match expected metadata format. Row: {row}")

    if 'Sampling rate' in metadata:
        try:
            metadata['Sampling rate'] = float(metadata['Sampling rate'])
        except ValueError:
            logger.warning(
                f"Could not parse sampling rate '{metadata['Sampling rate']}' in '{file_path}'. Ignoring it."
            )
            del metadata['Sampling rate']

    metadata['Export file'] = file_path
    return metadata


def _read_data(rows: list, file_path: str) -> pd.DataFrame:
    """
    Internal helper function to parse the header row and the samples below it.
    """
    col_labels = [label.strip() for label in rows[0]]
    if col_labels and col_labels[-1] == '':
        col_labels.pop()

    data_rows = [row for row in rows[1:] if any(cell.strip() for cell in row)]
    if not data_rows:
        msg = f"No data rows found in file '{file_path}'. Check if the file is truncated."
        logger.error(msg)
        raise ValueError(msg)

    clean_data_rows = []
    for idx, row in enumerate(data_rows):
        if len(row) == len(col_labels) + 1 and row[-1] == '':
            row = row[:-1]
        if len(row) != len(col_labels):
            logger.error(
                f"Row {idx} has {len(row)} columns, expected {len(col_labels)}. Row content: {row}"
            )
            continue
        clean_data_rows.append(row)

    df = pd.DataFrame(data=clean_data_rows, columns=col_labels)
    numeric_cols = [col for col in df.columns if col != EVENT_COLUMN]
    df[numeric_cols] = df[numeric_cols].apply(pd.to_numeric, errors='coerce')

    n_missing = int(df[numeric_cols].isna().sum().sum())
    if n_missing:
        logger.warning(f"{n_missing} non-numeric value(s) replaced by NaN in '{file_path}'.")

    # Replace empty strings with NaN in the 'Event' column if it exists
    if EVENT_COLUMN in df.columns:
        df[EVENT_COLUMN] = df[EVENT_COLUMN].str.strip().replace('', np.nan)

    return df
