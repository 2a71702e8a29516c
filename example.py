#!/usr/bin/env python3

import argparse
import sys
from datetime import date

from colorama import Style

from candle_backfill import BackfillConfig, BackfillError, backfill_symbol, list_providers
from candle_backfill.logs import (
    COLOR_REQ, COLOR_TYPE, COLOR_VAR, ERROR, INFO,
    c_rows, c_var, fmt_range, log_error, log_success, log_warn,
)


def parse_args():
    """Parses command-line arguments with colorized help."""
    parser = argparse.ArgumentParser(
        description=f"""
{INFO} Backfill missing historical candles into a SQLite file. {Style.RESET_ALL}
  {COLOR_VAR}--db{Style.RESET_ALL}         {COLOR_TYPE}(str){Style.RESET_ALL} {COLOR_REQ} SQLite database file
  {COLOR_VAR}--ticker{Style.RESET_ALL}     {COLOR_TYPE}(str){Style.RESET_ALL} {COLOR_REQ} Symbol
  {COLOR_VAR}--from{Style.RESET_ALL}       {COLOR_TYPE}(str){Style.RESET_ALL} {COLOR_REQ} First date (YYYY-MM-DD)
  {COLOR_VAR}--to{Style.RESET_ALL}         {COLOR_TYPE}(str){Style.RESET_ALL} {COLOR_REQ} Last date, inclusive (YYYY-MM-DD)
  {COLOR_VAR}--timespan{Style.RESET_ALL}   {COLOR_TYPE}(str){Style.RESET_ALL} minute, hour or day (default: day)
  {COLOR_VAR}--multiplier{Style.RESET_ALL} {COLOR_TYPE}(int){Style.RESET_ALL} Bars per timespan unit (default: 1)

The API key is read from POLYGON_API_KEY (environment or .env).

{INFO} Examples:
  python example.py --db market.db --ticker AAPL --from 2023-01-02 --to 2023-03-31
  python example.py --db market.db --ticker AAPL --from 2023-01-02 --to 2023-01-13 --timespan hour
""", formatter_class=argparse.RawTextHelpFormatter)
    parser.add_argument("--db",         required=True, help="SQLite database file")
    parser.add_argument("--ticker",     required=True, help="Symbol, e.g. AAPL")
    parser.add_argument("--from",       required=True, dest="start", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--to",         required=True, dest="end", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--timespan",   default="day", choices=["minute", "hour", "day"])
    parser.add_argument("--multiplier", default=1, type=int)
    parser.add_argument("--provider",   default="POLYGON", type=str.upper, choices=list_providers())
    parser.add_argument("--max-passes", default=None, type=int, help="Resolver passes before giving up")
    parser.add_argument("--verbose",    action="store_true", help="More chatty logs")
    if len(sys.argv) == 1:
        print(f"\n{ERROR} No arguments provided! Please specify the required parameters.\n")
        parser.print_help()
        sys.exit(1)
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    config = BackfillConfig(max_passes=args.max_passes) if args.max_passes else None

    try:
        result = backfill_symbol(
            args.db,
            args.ticker,
            args.start,
            args.end,
            timespan=args.timespan,
            multiplier=args.multiplier,
            provider=args.provider,
            config=config,
            verbose=args.verbose,
        )
    except (BackfillError, ValueError) as e:
        log_error(f"Backfill failed: {e}")
        return 1

    window = fmt_range(args.start, args.end)
    if result.converged:
        log_success(f"Backfill complete for {c_var(args.ticker)} {window} ({c_rows(result.rows_inserted)} rows)")
    else:
        log_warn(f"Backfill for {c_var(args.ticker)} {window} left gaps after "
                 f"{c_var(result.passes)} passes ({c_rows(result.rows_inserted)} rows)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
