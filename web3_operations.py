from typing import NamedTuple

from web3 import Web3
from web3.exceptions import Web3Exception

from errors import LedgerQueryError

# We only need the ERC20 members balanceOf and Transfer, so any ERC20 will do
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    }
]

# Provider, transport (requests errors are OSErrors) and RPC error responses
RPC_ERRORS = (Web3Exception, ValueError, OSError)


class TransferEvent(NamedTuple):
    block_number: int
    transaction_hash: str
    log_index: int
    from_address: str
    to_address: str
    value: int


class Web3Operations:
    def __init__(self, rpc_url, batch_size=100000):
        # Connect to Ethereum node
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        self.batch_size = batch_size
        self.transfer_topic = Web3.to_hex(self.w3.keccak(text="Transfer(address,address,uint256)"))

    def get_block_number(self):
        try:
            return self.w3.eth.block_number
        except RPC_ERRORS as e:
            raise LedgerQueryError(f"Could not read the current block number: {e}") from e

    def get_block_timestamp(self, block_number):
        try:
            return self.w3.eth.get_block(block_number)['timestamp']
        except RPC_ERRORS as e:
            raise LedgerQueryError(f"Could not fetch block {block_number:,}: {e}") from e

    def parse_transfer(self, log):
        try:
            from_address = Web3.to_checksum_address('0x' + log['topics'][1].hex()[-40:])
            to_address = Web3.to_checksum_address('0x' + log['topics'][2].hex()[-40:])
            return TransferEvent(
                log['blockNumber'],
                Web3.to_hex(log['transactionHash']),
                log['logIndex'],
                from_address,
                to_address,
                int.from_bytes(log['data'], byteorder='big')
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LedgerQueryError(f"Malformed Transfer log {log}: {e}") from e

    def get_past_transfers(self, token_address, to_address, from_block, to_block=None):
        """Return every Transfer from `token_address` into `to_address`.

        Scans `from_block` through `to_block` (chain head when None), both
        inclusive, in windows of `batch_size` blocks. Events come back in
        chain order. A failed window aborts the whole scan.
        """
        token_address = Web3.to_checksum_address(token_address)
        to_address = Web3.to_checksum_address(to_address)
        to_topic = '0x' + to_address[2:].lower().rjust(64, '0')
        if to_block is None:
            to_block = self.get_block_number()

        events = []
        current_block = from_block
        while current_block <= to_block:
            batch_end = min(current_block + self.batch_size - 1, to_block)
            try:
                logs = self.w3.eth.get_logs({
                    'fromBlock': current_block,
                    'toBlock': batch_end,
                    'address': token_address,
                    'topics': [self.transfer_topic, None, to_topic]
                })
            except RPC_ERRORS as e:
                raise LedgerQueryError(
                    f"Error fetching transfers for blocks {current_block:,}-{batch_end:,}: {e}") from e

            events.extend(self.parse_transfer(log) for log in logs)
            current_block = batch_end + 1

        return events

    def get_balance(self, contract_address, account, block_identifier='latest'):
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(contract_address), abi=ERC20_ABI)
        try:
            balance = contract.functions.balanceOf(
                Web3.to_checksum_address(account)).call(block_identifier=block_identifier)
        except RPC_ERRORS as e:
            raise LedgerQueryError(f"balanceOf({account}) failed on {contract.address}: {e}") from e

        if isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
            raise LedgerQueryError(f"balanceOf({account}) returned {balance!r}")
        return balance
