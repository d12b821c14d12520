import argparse
import sys

from config import OWED_FILE
from fixed_point import from_units
from report_operations import load_owed_balances
from settlement import owed_amount


def find_mismatches(rows, frozen_price, exchange_fee):
    """Addresses whose saved row disagrees with a fresh computation."""
    mismatches = []
    for row in rows.itertuples(index=False):
        address, balance, owed, readable_balance, readable_owed = row
        if (balance <= 0
                or owed != owed_amount(balance, frozen_price, exchange_fee)
                or readable_balance != from_units(balance)
                or readable_owed != from_units(owed)):
            mismatches.append(address)
    return mismatches


def main(argv=None):
    parser = argparse.ArgumentParser(description='Re-check a saved owed balances report')
    parser.add_argument('report', nargs='?', default=OWED_FILE, help=f'Report to check (default: {OWED_FILE})')
    args = parser.parse_args(argv)

    try:
        rows, frozen_price, exchange_fee = load_owed_balances(args.report)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Loaded {len(rows):,} records from {args.report}")
    print(f"    Price: {from_units(frozen_price)}")
    print(f"    Exchange Fee: {from_units(exchange_fee)}")
    print(f"{from_units(sum(rows['Staked Balance']))} staked in total.")
    print(f"{from_units(sum(rows['Owed sUSD']))} total sUSD owed.")

    mismatches = find_mismatches(rows, frozen_price, exchange_fee)
    if mismatches:
        print(f"{len(mismatches):,} records do not match:", file=sys.stderr)
        for address in mismatches:
            print(f"    {address}", file=sys.stderr)
        return 1

    print("All records match")
    return 0


if __name__ == "__main__":
    sys.exit(main())
