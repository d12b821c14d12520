"""
conftest.py - Shared pytest fixtures

Provides a fake ledger client returning canned Transfer events and balances,
plus a valid settlement configuration pointing at fake contracts.
"""

import pytest
from web3 import Web3

from errors import LedgerQueryError
from fixed_point import UNIT
from settlement_config import build_settlement_config
from web3_operations import TransferEvent


def address(n):
    return Web3.to_checksum_address('0x' + format(n, '040x'))


SYNTH = address(0x5e)
STAKING = address(0x57)
ALICE = address(1)
BOB = address(2)
CAROL = address(3)
DAVE = address(4)


def transfer(sender, value=UNIT, block_number=100, log_index=0):
    return TransferEvent(block_number, '0x' + '00' * 32, log_index, sender, STAKING, value)


class FakeLedger:
    """Stands in for Web3Operations with canned data."""

    def __init__(self, events=(), balances=None, head_block=1000, failing=()):
        self.events = list(events)
        self.balances = dict(balances or {})
        self.head_block = head_block
        self.failing = set(failing)
        self.transfer_queries = []
        self.balance_queries = []

    def get_block_number(self):
        return self.head_block

    def get_block_timestamp(self, block_number):
        return 1606310000

    def get_past_transfers(self, token_address, to_address, from_block, to_block=None):
        self.transfer_queries.append((token_address, to_address, from_block, to_block))
        return [e for e in self.events if e.to_address == to_address]

    def get_balance(self, contract_address, account, block_identifier='latest'):
        self.balance_queries.append((contract_address, account, block_identifier))
        if account in self.failing:
            raise LedgerQueryError(f"balanceOf({account}) failed")
        return self.balances.get(account, 0)


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        settings = dict(
            rpc_url='http://localhost:8545',
            synth_address=SYNTH,
            staking_address=STAKING,
            deployment_block=500,
            frozen_price='289.01',
            exchange_fee='0.003',
            output_file=str(tmp_path / 'owedBalances.csv'),
        )
        settings.update(overrides)
        return build_settlement_config(**settings)
    return _make


@pytest.fixture
def config(make_config):
    return make_config()
