import os

# Inverse synths being purged
SYNTH_CONFIG = {
    'iETH': {
        # Proxy address, where Transfer events are emitted from
        'synth_address': '0xA9859874e1743A32409f75bB11549892138BBA1E',
        # Staking contract, source of staked balances
        'staking_address': '0x3fdbbbd81b0962fdf486d74f94a68c70ba87c6c7',
        'deployment_block': 11311695,
        'frozen_price': '289.01',
        'exchange_fee': '0.003'
    }
    # Add more synths as needed:
    # 'iBTC': {
    #     'synth_address': '0x...',
    #     'staking_address': '0x...',
    #     'deployment_block': 1000000,
    #     'frozen_price': '1.0',
    #     'exchange_fee': '0.003'
    # }
}

DEFAULT_SYNTH = 'iETH'

# RPC configuration, preferably an archive node
RPC_URL = os.getenv('PROVIDER_URL', '')

# Blocks per eth_getLogs request
BATCH_SIZE = os.getenv('BATCH_SIZE', '100000')

# Concurrent balanceOf lookups, 1 keeps them serial
MAX_WORKERS = os.getenv('MAX_WORKERS', '1')

OWED_FILE = 'owedBalances.csv'
