"""
Population history fetch: entry point.

Usage:
    # Italy and France, 2010-2012:
    python run_population_fetch.py it fr --from 2010 --to 2012

    # Full history, saved to parquet:
    python run_population_fetch.py it --output data/italy.parquet
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Allow running from repo root without installing the package
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import DEFAULT_END_YEAR, DEFAULT_START_YEAR
from population.fetchers.world_bank import WorldBankFetcher
from population.pipeline import PopulationPipeline


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch total population from the World Bank")
    parser.add_argument("countries", nargs="+", help="ISO alpha-2 country codes, e.g. it fr")
    parser.add_argument("--from", dest="start", type=int, default=DEFAULT_START_YEAR,
                        help="First year (inclusive)")
    parser.add_argument("--to", dest="end", type=int, default=DEFAULT_END_YEAR,
                        help="Last year (inclusive)")
    parser.add_argument("--output", type=Path, help="Write the history to this parquet file")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
    )

    pipeline = PopulationPipeline(
        WorldBankFetcher(),
        start=date(args.start, 1, 1),
        end=date(args.end, 1, 1),
    )
    df = asyncio.run(pipeline.run(args.countries))

    errors = pipeline.errors
    if not errors.is_empty():
        print("\nFailed:")
        print(errors.select(["country", "error"]))

    if df.is_empty():
        print("No population data available.")
        sys.exit(1)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        df.write_parquet(args.output, compression="zstd")
        print(f"Wrote {len(df)} rows to {args.output}")

    print("\nPopulation history:")
    print(df.select(["country", "year", "value"]))


if __name__ == "__main__":
    main()
