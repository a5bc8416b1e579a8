"""
Load raw storm events from the NOAA storm database CSV.

The file can be read plain or compressed (.bz2/.gz). Only the columns the
harm and damage rankings need are kept.
"""
import pandas as pd
from pathlib import Path

EVENT_TYPE = 'EVTYPE'
FATALITIES = 'FATALITIES'
INJURIES = 'INJURIES'
PROPERTY_AMOUNT = 'PROPDMG'
PROPERTY_EXPONENT = 'PROPDMGEXP'
CROP_AMOUNT = 'CROPDMG'
CROP_EXPONENT = 'CROPDMGEXP'

MEASURE_COLUMNS = [FATALITIES, INJURIES]
AMOUNT_COLUMNS = [PROPERTY_AMOUNT, CROP_AMOUNT]
EXPONENT_COLUMNS = [PROPERTY_EXPONENT, CROP_EXPONENT]
REQUIRED_COLUMNS = [EVENT_TYPE, *MEASURE_COLUMNS, *AMOUNT_COLUMNS, *EXPONENT_COLUMNS]

DEFAULT_DATA_PATH = 'data/raw/StormData.csv.bz2'


def check_columns(df, required=REQUIRED_COLUMNS):
    """Raise ValueError if any required column is absent."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Storm data is missing required columns: {missing}")


def clean_columns(df):
    """
    Type the required columns of a raw events table.

    Exponent codes and labels stay text, with blank codes kept as '' since a
    blank code means plain units. Amounts and measures become nullable floats;
    unparseable numbers become <NA> instead of 0.
    """
    check_columns(df)
    cleaned = df[REQUIRED_COLUMNS].copy()

    cleaned[EVENT_TYPE] = cleaned[EVENT_TYPE].astype('string')
    for col in EXPONENT_COLUMNS:
        cleaned[col] = cleaned[col].astype('string')
    for col in MEASURE_COLUMNS + AMOUNT_COLUMNS:
        cleaned[col] = pd.to_numeric(cleaned[col], errors='coerce').astype('Float64')

    return cleaned


def load_events(path=DEFAULT_DATA_PATH):
    """Read the storm data CSV and return the typed required columns.

    Args:
        path: CSV file, optionally compressed. Compression is inferred
            from the file extension.
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Storm data file not found: {path}")

    print(f"Reading {path.name}...")
    # keep_default_na=False so blank exponent codes load as '' not NaN;
    # absent required columns are reported by check_columns
    df = pd.read_csv(
        path,
        usecols=lambda col: col in REQUIRED_COLUMNS,
        dtype=str,
        keep_default_na=False,
        low_memory=False,
    )
    events = clean_columns(df)
    print(f"  Loaded {len(events):,} events")
    return events
