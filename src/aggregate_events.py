"""
Group resolved storm events by event type and rank the event types.

For a measure (FATALITIES, PROPERTY_DAMAGE, ...) and an optional row
filter, each event type gets:

- count:   rows of that type in the filtered subset
- present: rows where the measure is not missing
- total:   sum over present values
- mean:    total / present

Event types with no present values are left out. Rankings are sorted
descending with ties kept in first-seen order; truncating to a top N is
up to the caller.
"""
import pandas as pd
from typing import Callable, Dict, Optional

from load_events import EVENT_TYPE

STATISTICS = ('total', 'mean')

Predicate = Callable[[pd.DataFrame], pd.Series]


def any_positive(*columns: str) -> Predicate:
    """Build a row filter keeping events where at least one column is > 0.

    Missing values count as not positive.
    """
    if not columns:
        raise ValueError("any_positive needs at least one column")

    def predicate(events: pd.DataFrame) -> pd.Series:
        _check_columns(events, columns)
        mask = pd.Series(False, index=events.index)
        for col in columns:
            mask = mask | (events[col] > 0).fillna(False).astype(bool)
        return mask

    return predicate


def _check_columns(events, columns):
    missing = [col for col in columns if col not in events.columns]
    if missing:
        raise ValueError(f"Events table is missing columns: {missing}")


def aggregate_measure(
    events: pd.DataFrame,
    measure: str,
    predicate: Optional[Predicate] = None,
    category: str = EVENT_TYPE,
) -> pd.DataFrame:
    """
    Per-category count, present count, total and mean of a measure.

    Args:
        events: Resolved events table. Not modified.
        measure: Numeric column to aggregate.
        predicate: Optional row filter, called with the events table.
        category: Column to group by.

    Returns:
        DataFrame with columns [category, count, present, total, mean] in
        first-seen category order.
    """
    _check_columns(events, [category, measure])

    subset = events
    if predicate is not None:
        keep = pd.Series(predicate(events), index=events.index).fillna(False).astype(bool)
        subset = events[keep]

    values = pd.to_numeric(subset[measure], errors='coerce').astype('Float64')
    grouped = values.groupby(subset[category], sort=False, dropna=True)

    table = pd.DataFrame({
        'count': grouped.size(),
        'present': grouped.count(),
        'total': grouped.sum(min_count=1),
        'mean': grouped.mean(),
    })
    table = table[table['present'] > 0]
    table.index.name = category
    return table.reset_index()


def rank_by(table: pd.DataFrame, statistic: str, category: str = EVENT_TYPE) -> pd.DataFrame:
    """Sort an aggregate table descending by one statistic, ties in input order."""
    if statistic not in STATISTICS:
        raise ValueError(f"Unknown statistic '{statistic}', expected one of {STATISTICS}")
    ranked = table.sort_values(statistic, ascending=False, kind='mergesort')
    return ranked[[category, statistic, 'count']].reset_index(drop=True)


def rank_measure(
    events: pd.DataFrame,
    measure: str,
    predicate: Optional[Predicate] = None,
    category: str = EVENT_TYPE,
) -> Dict[str, pd.DataFrame]:
    """Full rankings of one measure by total and by mean."""
    table = aggregate_measure(events, measure, predicate=predicate, category=category)
    return {statistic: rank_by(table, statistic, category=category) for statistic in STATISTICS}
