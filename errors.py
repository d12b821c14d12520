class ConfigurationError(Exception):
    """Missing or invalid run parameter, raised before any network activity."""


class LedgerQueryError(Exception):
    """A call against the RPC node failed or returned something unusable."""


class ArithmeticContractViolation(Exception):
    """A balance that cannot be settled reached the settlement calculator."""
