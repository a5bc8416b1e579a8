"""
Normalize storm event labels and damage exponent codes.

Event type labels are upper-cased and nothing else; near-duplicate
spellings ("TSTM WIND" vs "THUNDERSTORM WIND") are left as they are.
Exponent codes are upper-cased and checked against the allow-list, with
anything unrecognized turned into a missing value.
"""
import pandas as pd

from load_events import EVENT_TYPE, EXPONENT_COLUMNS

# Ordered by magnitude: "" = units, K = thousands, M = millions, B = billions
EXPONENT_CODES = ("", "K", "M", "B")


def normalize_label(label):
    """Upper-case a single event type label. Missing stays missing."""
    if label is None or label is pd.NA:
        return label
    return str(label).upper()


def normalize_labels(labels: pd.Series) -> pd.Series:
    """Upper-case a column of event type labels."""
    return labels.astype("string").str.upper()


def normalize_exponent_code(code):
    """Return the upper-cased exponent code, or None if it is not allowed."""
    if code is None or code is pd.NA:
        return None
    code = str(code).upper()
    return code if code in EXPONENT_CODES else None


def normalize_exponent_codes(codes: pd.Series) -> pd.Series:
    """
    Upper-case a column of exponent codes and blank out invalid ones.

    Codes such as '?', '+', '5' or 'H' show up in the raw data; they become
    <NA> rather than being read as units.
    """
    upper = codes.astype("string").str.upper()
    return upper.where(upper.isin(EXPONENT_CODES), pd.NA)


def normalize_events(events: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of the events with labels and exponent codes normalized."""
    missing = [col for col in [EVENT_TYPE, *EXPONENT_COLUMNS] if col not in events.columns]
    if missing:
        raise ValueError(f"Cannot normalize events, missing columns: {missing}")

    normalized = events.copy()
    normalized[EVENT_TYPE] = normalize_labels(events[EVENT_TYPE])
    for col in EXPONENT_COLUMNS:
        normalized[col] = normalize_exponent_codes(events[col])
    return normalized
