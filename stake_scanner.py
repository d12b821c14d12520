from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import NamedTuple


class AccountBalance(NamedTuple):
    address: str
    balance: int


def unique_senders(events):
    """`from` addresses of `events`, each once, in first-seen order."""
    return list(dict.fromkeys(event.from_address for event in events))


def format_timestamp(timestamp):
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime('%Y/%m/%d %H:%M:%S UTC')


class StakeScanner:
    """Finds accounts that staked the synth and their remaining staked balance.

    Candidates are every sender of a Transfer into the staking contract since
    its deployment. Balances are then read from the staking contract at the
    head block seen when the scan started, so events and balances describe
    the same chain state.
    """

    def __init__(self, ledger, config):
        self.ledger = ledger
        self.config = config
        self.head_block = None
        self.candidates = None

    def find_candidates(self):
        config = self.config
        self.head_block = self.ledger.get_block_number()
        deployed_at = self.ledger.get_block_timestamp(config.deployment_block)
        # Start one block early so the deployment block itself is covered
        start_block = config.deployment_block - 1

        print("Querying all transfers into the staking contract to find candidate stakers.\n")
        print(f"    Staking Contract: {config.staking_address}")
        print(f"    Synth: {config.synth_address}")
        print(f"    Starting Block: {config.deployment_block:,} "
              f"({self.head_block - config.deployment_block:,} blocks ago "
              f"at {format_timestamp(deployed_at)})\n")

        events = self.ledger.get_past_transfers(
            config.synth_address, config.staking_address, start_block, self.head_block)
        self.candidates = unique_senders(events)
        print(f"{len(self.candidates):,} candidate holders found. Querying their balances.\n")
        return self.candidates

    def _lookup(self, account):
        return AccountBalance(
            account,
            self.ledger.get_balance(self.config.staking_address, account, self.head_block))

    def _lookup_serial(self, candidates, on_progress):
        results = []
        for i, account in enumerate(candidates, 1):
            results.append(self._lookup(account))
            if on_progress:
                on_progress(i, len(candidates))
        return results

    def _lookup_parallel(self, candidates, on_progress):
        results = [None] * len(candidates)
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(self._lookup, account): i
                       for i, account in enumerate(candidates)}
            completed = 0
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
                    completed += 1
                    if on_progress:
                        on_progress(completed, len(candidates))
            except BaseException:
                executor.shutdown(cancel_futures=True)
                raise
        return results

    def fetch_staked_balances(self, on_progress=None):
        """Resolve staked balances of all candidates, dropping zero balances.

        `on_progress(completed, total)` is called after each lookup. Any
        failed lookup aborts the whole batch.
        """
        if self.candidates is None:
            self.find_candidates()

        if self.config.max_workers > 1 and len(self.candidates) > 1:
            balances = self._lookup_parallel(self.candidates, on_progress)
        else:
            balances = self._lookup_serial(self.candidates, on_progress)

        nonzero = [b for b in balances if b.balance != 0]
        print(f"\n\n{len(nonzero):,} active stakers found.")
        return nonzero
