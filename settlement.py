from typing import List, NamedTuple

from errors import ArithmeticContractViolation
from fixed_point import UNIT, from_units, multiply_decimal


class SettlementRecord(NamedTuple):
    address: str
    balance: int
    owed: int
    readable_balance: str
    readable_owed: str


class SettlementResult(NamedTuple):
    records: List[SettlementRecord]
    total_staked: int
    total_owed: int


def fee_multiplier(exchange_fee):
    return UNIT - exchange_fee


def owed_amount(balance, frozen_price, exchange_fee):
    # balance * price first, then the fee; truncation makes the grouping matter
    return multiply_decimal(multiply_decimal(balance, frozen_price), fee_multiplier(exchange_fee))


def compute_owed_balances(balances, frozen_price, exchange_fee):
    """Compute the sUSD owed to every staker.

    `balances` is a sequence of AccountBalance with positive int balances in
    base units. Records keep the input order; totals are exact int sums.
    """
    records = []
    for address, balance in balances:
        if isinstance(balance, bool) or not isinstance(balance, int):
            raise ArithmeticContractViolation(
                f"Balance of {address} is not an integer: {balance!r}")
        if balance <= 0:
            raise ArithmeticContractViolation(
                f"Balance of {address} must be positive, got {balance}")

        owed = owed_amount(balance, frozen_price, exchange_fee)
        records.append(SettlementRecord(
            address=address,
            balance=balance,
            owed=owed,
            readable_balance=from_units(balance),
            readable_owed=from_units(owed)
        ))

    total_staked = sum(r.balance for r in records)
    total_owed = sum(r.owed for r in records)
    return SettlementResult(records, total_staked, total_owed)
