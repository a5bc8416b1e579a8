"""
Rank storm event types by harm to population health and by economic damage.

Runs load -> normalize -> resolve damage -> aggregate and prints the top
event types for each measure, by total and by mean per event.

Usage: python src/summarize_events.py [csv_path] [--top N] [--save] [--missing-as-zero] [--download]
"""
import os
import sqlite3
import sys
from typing import Dict, List

import pandas as pd

from aggregate_events import STATISTICS, any_positive, rank_measure
from get_data import download_storm_data
from load_events import DEFAULT_DATA_PATH, EVENT_TYPE, FATALITIES, INJURIES, load_events
from normalize_events import normalize_events
from resolve_damage import CROP_DAMAGE, ECONOMIC_DAMAGE, PROPERTY_DAMAGE, resolve_damage

# measure -> columns of which at least one must be positive for an event to count
MEASURES = {
    FATALITIES: (FATALITIES, INJURIES),
    INJURIES: (FATALITIES, INJURIES),
    PROPERTY_DAMAGE: (PROPERTY_DAMAGE, CROP_DAMAGE),
    CROP_DAMAGE: (PROPERTY_DAMAGE, CROP_DAMAGE),
    ECONOMIC_DAMAGE: (PROPERTY_DAMAGE, CROP_DAMAGE),
}
DOLLAR_MEASURES = {PROPERTY_DAMAGE, CROP_DAMAGE, ECONOMIC_DAMAGE}

DEFAULT_TOP = 10
DEFAULT_DB_PATH = 'data/storm_rankings.db'
FLAGS = {'--top', '--save', '--missing-as-zero', '--download'}

Rankings = Dict[str, Dict[str, pd.DataFrame]]


def build_rankings(raw_events: pd.DataFrame, missing_as_zero: bool = False) -> Rankings:
    """
    Run the cleaning pipeline and rank every measure.

    Args:
        raw_events: Typed events as returned by load_events. Not modified.
        missing_as_zero: Count a missing property or crop side as 0 in
            ECONOMIC_DAMAGE.

    Returns:
        {measure: {'total': ranked, 'mean': ranked}}
    """
    normalized = normalize_events(raw_events)
    resolved = resolve_damage(normalized, missing_as_zero=missing_as_zero)

    rankings = {}
    for measure, filter_columns in MEASURES.items():
        rankings[measure] = rank_measure(resolved, measure, predicate=any_positive(*filter_columns))
    return rankings


def format_value(value, dollars=False):
    """Format a statistic for display, dollar amounts as $1.5M / $2.0K / $7."""
    if pd.isna(value):
        return "NA"
    if not dollars:
        return f"{value:,.2f}" if value != int(value) else f"{int(value):,}"
    if value >= 1_000_000_000:
        return f"${value/1_000_000_000:.1f}B"
    elif value >= 1_000_000:
        return f"${value/1_000_000:.1f}M"
    elif value >= 1_000:
        return f"${value/1_000:.1f}K"
    return f"${value:.0f}"


def format_ranking(table, measure, statistic, top=DEFAULT_TOP):
    """Render the top rows of a ranked table as fixed-width text."""
    dollars = measure in DOLLAR_MEASURES
    lines = [
        f"Top {top} event types by {statistic} {measure.lower().replace('_', ' ')}",
        f"{'Rank':<6} {'Event Type':<30} {statistic.title():>15} {'Events':>8}",
        "-" * 62,
    ]
    for rank, row in enumerate(table.head(top).itertuples(index=False), start=1):
        category, value, count = row
        lines.append(
            f"{rank:<6} {str(category)[:29]:<30} {format_value(value, dollars):>15} {count:>8,}"
        )
    return "\n".join(lines)


def print_rankings(rankings: Rankings, top=DEFAULT_TOP):
    for measure, by_statistic in rankings.items():
        for statistic in STATISTICS:
            print("\n" + format_ranking(by_statistic[statistic], measure, statistic, top=top))


def save_rankings(rankings: Rankings, db_path=DEFAULT_DB_PATH) -> List[str]:
    """Save every ranked table to SQLite, one table per measure and statistic."""
    os.makedirs(os.path.dirname(db_path) or '.', exist_ok=True)

    conn = sqlite3.connect(db_path)
    saved = []
    try:
        for measure, by_statistic in rankings.items():
            for statistic, table in by_statistic.items():
                name = f"{measure}_by_{statistic}".lower()
                db_table = table.rename(columns={EVENT_TYPE: 'event_type'})
                db_table[statistic] = db_table[statistic].astype(float)
                db_table.to_sql(name, conn, if_exists='replace', index=False)
                saved.append(name)
    finally:
        conn.close()

    print(f"Saved {len(saved)} ranked tables to {db_path}")
    return saved


def parse_args(argv):
    """Parse argv the simple way: an optional path plus a few flags."""
    unknown = [arg for arg in argv if arg.startswith('--') and arg not in FLAGS]
    if unknown:
        raise ValueError(f"Unknown option(s): {unknown}")

    options = {
        'path': DEFAULT_DATA_PATH,
        'top': DEFAULT_TOP,
        'save': '--save' in argv,
        'missing_as_zero': '--missing-as-zero' in argv,
        'download': '--download' in argv,
    }

    if '--top' in argv:
        idx = argv.index('--top')
        if idx + 1 >= len(argv):
            raise ValueError("--top needs a number")
        try:
            options['top'] = int(argv[idx + 1])
        except ValueError:
            raise ValueError(f"--top needs a number, got '{argv[idx + 1]}'")
        if options['top'] < 1:
            raise ValueError("--top must be at least 1")
        argv = argv[:idx] + argv[idx + 2:]

    positional = [arg for arg in argv if not arg.startswith('--')]
    if len(positional) > 1:
        raise ValueError(f"Expected at most one data file, got {positional}")
    if positional:
        options['path'] = positional[0]

    return options


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        options = parse_args(argv)
    except ValueError as e:
        print(f"Error: {e}")
        print(__doc__.strip().splitlines()[-1])
        return 1

    try:
        path = options['path']
        if options['download']:
            path = download_storm_data()

        rankings = build_rankings(load_events(path), missing_as_zero=options['missing_as_zero'])
        print_rankings(rankings, top=options['top'])

        if options['save']:
            save_rankings(rankings)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
