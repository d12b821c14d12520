"""
test_web3_operations.py - Unit tests for web3_operations.py

The node is replaced by a MagicMock, so no RPC endpoint is needed.
"""

from unittest.mock import MagicMock, PropertyMock

import pytest
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import BlockNotFound, ContractLogicError

from errors import LedgerQueryError
from web3_operations import TransferEvent, Web3Operations

from conftest import ALICE, BOB, STAKING, SYNTH

TRANSFER_TOPIC = Web3.keccak(text="Transfer(address,address,uint256)")


def padded(address):
    return HexBytes('0x' + address[2:].lower().rjust(64, '0'))


def raw_log(sender, value, block_number, log_index=0):
    return {
        'topics': [TRANSFER_TOPIC, padded(sender), padded(STAKING)],
        'data': HexBytes(value.to_bytes(32, byteorder='big')),
        'blockNumber': block_number,
        'transactionHash': HexBytes(b'\x01' * 32),
        'logIndex': log_index,
    }


@pytest.fixture
def ops():
    ops = Web3Operations('http://localhost:8545', batch_size=100)
    ops.w3 = MagicMock()
    return ops


class TestGetPastTransfers:

    def test_filters_on_indexed_recipient(self, ops):
        ops.w3.eth.get_logs.return_value = []
        ops.get_past_transfers(SYNTH, STAKING, 10, 50)

        params = ops.w3.eth.get_logs.call_args[0][0]
        assert params['address'] == SYNTH
        assert params['fromBlock'] == 10
        assert params['toBlock'] == 50
        assert params['topics'] == [Web3.to_hex(TRANSFER_TOPIC), None,
                                    '0x' + STAKING[2:].lower().rjust(64, '0')]

    def test_scans_in_inclusive_windows(self, ops):
        ops.w3.eth.get_logs.return_value = []
        ops.get_past_transfers(SYNTH, STAKING, 1, 250)

        windows = [(c[0][0]['fromBlock'], c[0][0]['toBlock'])
                   for c in ops.w3.eth.get_logs.call_args_list]
        assert windows == [(1, 100), (101, 200), (201, 250)]

    def test_defaults_to_chain_head(self, ops):
        ops.w3.eth.block_number = 42
        ops.w3.eth.get_logs.return_value = []
        ops.get_past_transfers(SYNTH, STAKING, 10)
        assert ops.w3.eth.get_logs.call_args[0][0]['toBlock'] == 42

    def test_decodes_events_in_order(self, ops):
        ops.w3.eth.get_logs.side_effect = [
            [raw_log(ALICE, 5, 20), raw_log(BOB, 7, 20, log_index=3)],
            [raw_log(ALICE, 11, 150)],
        ]
        events = ops.get_past_transfers(SYNTH, STAKING, 1, 200)

        assert [(e.from_address, e.value, e.block_number) for e in events] == [
            (ALICE, 5, 20), (BOB, 7, 20), (ALICE, 11, 150)]
        assert all(isinstance(e, TransferEvent) and e.to_address == STAKING for e in events)
        assert events[0].transaction_hash == '0x' + '01' * 32

    def test_rpc_failure_is_fatal(self, ops):
        ops.w3.eth.get_logs.side_effect = [[], ValueError({'code': -32005, 'message': 'limit exceeded'})]
        with pytest.raises(LedgerQueryError, match='101-200'):
            ops.get_past_transfers(SYNTH, STAKING, 1, 300)
        assert ops.w3.eth.get_logs.call_count == 2

    def test_connection_failure_is_fatal(self, ops):
        ops.w3.eth.get_logs.side_effect = ConnectionError('connection refused')
        with pytest.raises(LedgerQueryError):
            ops.get_past_transfers(SYNTH, STAKING, 1, 10)

    def test_malformed_log(self, ops):
        ops.w3.eth.get_logs.return_value = [{'topics': [TRANSFER_TOPIC], 'data': b''}]
        with pytest.raises(LedgerQueryError, match='Malformed'):
            ops.get_past_transfers(SYNTH, STAKING, 1, 10)


class TestGetBalance:

    def test_returns_balance_at_block(self, ops):
        call = ops.w3.eth.contract.return_value.functions.balanceOf.return_value.call
        call.return_value = 123
        assert ops.get_balance(STAKING, ALICE, 900) == 123
        call.assert_called_once_with(block_identifier=900)
        ops.w3.eth.contract.return_value.functions.balanceOf.assert_called_once_with(ALICE)

    def test_contract_built_for_checksummed_address(self, ops):
        ops.w3.eth.contract.return_value.functions.balanceOf.return_value.call.return_value = 0
        ops.get_balance(STAKING.lower(), ALICE)
        assert ops.w3.eth.contract.call_args.kwargs['address'] == STAKING

    def test_revert_is_fatal(self, ops):
        call = ops.w3.eth.contract.return_value.functions.balanceOf.return_value.call
        call.side_effect = ContractLogicError('execution reverted')
        with pytest.raises(LedgerQueryError, match=ALICE):
            ops.get_balance(STAKING, ALICE)

    def test_unexpected_result_is_fatal(self, ops):
        call = ops.w3.eth.contract.return_value.functions.balanceOf.return_value.call
        call.return_value = None
        with pytest.raises(LedgerQueryError):
            ops.get_balance(STAKING, ALICE)


def test_block_timestamp(ops):
    ops.w3.eth.get_block.return_value = {'timestamp': 1606310000}
    assert ops.get_block_timestamp(11311695) == 1606310000
    ops.w3.eth.get_block.assert_called_once_with(11311695)


def test_block_number_failure_is_fatal(ops):
    type(ops.w3.eth).block_number = PropertyMock(side_effect=ConnectionError('connection refused'))
    with pytest.raises(LedgerQueryError, match='current block number'):
        ops.get_block_number()


def test_missing_block_is_fatal(ops):
    ops.w3.eth.get_block.side_effect = BlockNotFound('Block with id: 11311695 not found.')
    with pytest.raises(LedgerQueryError, match='11,311,695'):
        ops.get_block_timestamp(11311695)
