from typing import NamedTuple

from web3 import Web3

from errors import ConfigurationError
from fixed_point import UNIT, to_units


class SettlementConfig(NamedTuple):
    rpc_url: str
    synth_address: str
    staking_address: str
    deployment_block: int
    frozen_price: int
    exchange_fee: int
    output_file: str
    batch_size: int = 100000
    max_workers: int = 1


def _checksum(name, address):
    if not address or not Web3.is_address(address):
        raise ConfigurationError(f"{name} is not a valid address: {address!r}")
    return Web3.to_checksum_address(address)


def _amount(name, value):
    try:
        return to_units(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {e}") from None


def _positive_int(name, value):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {number}")
    return number


def build_settlement_config(rpc_url, synth_address, staking_address, deployment_block,
                            frozen_price, exchange_fee, output_file, batch_size=100000,
                            max_workers=1):
    """Validate raw settings and freeze them into a SettlementConfig.

    Prices and fees may be human decimal strings ('289.01', '0.003') or ints
    already scaled by 10**18. Raises ConfigurationError on the first bad value.
    """
    if not rpc_url:
        raise ConfigurationError("RPC URL is not set (export PROVIDER_URL or pass --provider)")

    price = _amount('frozen price', frozen_price)
    if price <= 0:
        raise ConfigurationError(f"Frozen price must be positive, got {frozen_price!r}")

    fee = _amount('exchange fee', exchange_fee)
    if not 0 <= fee < UNIT:
        raise ConfigurationError(f"Exchange fee must be in [0, 1), got {exchange_fee!r}")

    if not output_file:
        raise ConfigurationError("Output file is not set")

    return SettlementConfig(
        rpc_url=rpc_url,
        synth_address=_checksum('Synth address', synth_address),
        staking_address=_checksum('Staking address', staking_address),
        deployment_block=_positive_int('Deployment block', deployment_block),
        frozen_price=price,
        exchange_fee=fee,
        output_file=output_file,
        batch_size=_positive_int('Batch size', batch_size),
        max_workers=_positive_int('Workers', max_workers)
    )
