# surety_oracle/__init__.py
"""
FlightSurety Oracle Node
FSO v1

Registers simulated oracles with the FlightSuretyApp contract and answers
OracleRequest events with random flight status codes.
"""

__version__ = "1.0.0"


class SuretyOracleError(Exception):
    """Base class for oracle node errors."""


class ConfigError(SuretyOracleError):
    pass


class LedgerError(SuretyOracleError):
    """A call, transaction or event poll against the ledger failed."""
