import argparse
import sys

from tqdm import tqdm

from config import BATCH_SIZE, DEFAULT_SYNTH, MAX_WORKERS, OWED_FILE, RPC_URL, SYNTH_CONFIG
from errors import ArithmeticContractViolation, ConfigurationError, LedgerQueryError
from fixed_point import from_units, multiply_decimal
from report_operations import save_owed_balances
from settlement import compute_owed_balances
from settlement_config import build_settlement_config
from stake_scanner import StakeScanner
from web3_operations import Web3Operations


class ProgressBar:
    """Adapts StakeScanner progress callbacks to a tqdm bar."""

    def __init__(self):
        self.bar = None

    def __call__(self, completed, total):
        if self.bar is None:
            self.bar = tqdm(total=total, desc="Querying balances", unit="account")
        self.bar.update(completed - self.bar.n)

    def close(self):
        if self.bar is not None:
            self.bar.close()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Compute the sUSD owed to stakers of a purged inverse synth')
    parser.add_argument('--synth', default=DEFAULT_SYNTH,
                        help=f'Synth to process (default: {DEFAULT_SYNTH})')
    parser.add_argument('--provider', default=RPC_URL,
                        help='RPC endpoint, preferably an archive node (default: $PROVIDER_URL)')
    parser.add_argument('--output', default=OWED_FILE, help=f'Output CSV (default: {OWED_FILE})')
    parser.add_argument('--price', help='Override the frozen price, e.g. 289.01')
    parser.add_argument('--fee', help='Override the exchange fee, e.g. 0.003')
    parser.add_argument('--deployment-block', type=int, help='Override the staking contract deployment block')
    parser.add_argument('--workers', default=MAX_WORKERS,
                        help=f'Concurrent balance lookups (default: {MAX_WORKERS})')
    return parser.parse_args(argv)


def load_config(args):
    if args.synth not in SYNTH_CONFIG:
        raise ConfigurationError(f"Synth {args.synth} not found in config")

    synth_data = SYNTH_CONFIG[args.synth]
    return build_settlement_config(
        rpc_url=args.provider,
        synth_address=synth_data['synth_address'],
        staking_address=synth_data['staking_address'],
        deployment_block=(args.deployment_block if args.deployment_block is not None
                          else synth_data['deployment_block']),
        frozen_price=args.price if args.price is not None else synth_data['frozen_price'],
        exchange_fee=args.fee if args.fee is not None else synth_data['exchange_fee'],
        output_file=args.output,
        batch_size=BATCH_SIZE,
        max_workers=args.workers
    )


def retrieve_owed_balances(config, ledger):
    scanner = StakeScanner(ledger, config)
    scanner.find_candidates()

    progress = ProgressBar()
    try:
        nonzero_balances = scanner.fetch_staked_balances(on_progress=progress)
    finally:
        progress.close()

    print("\nComputing owed sUSD balances for accounts using parameters:")
    print(f"    Price: {from_units(config.frozen_price)}")
    print(f"    Exchange Fee: {from_units(multiply_decimal(config.exchange_fee, '100'))}%")

    result = compute_owed_balances(nonzero_balances, config.frozen_price, config.exchange_fee)
    print(f"\n{from_units(result.total_staked)} staked in total.")
    print(f"{from_units(result.total_owed)} total sUSD owed.\n")

    save_owed_balances(result, config.frozen_price, config.exchange_fee, config.output_file)
    return result


def main(argv=None):
    args = parse_args(argv)
    try:
        config = load_config(args)
        retrieve_owed_balances(config, Web3Operations(config.rpc_url, config.batch_size))
    except (ConfigurationError, LedgerQueryError, ArithmeticContractViolation) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
