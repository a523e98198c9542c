"""
Exception Hierarchy for the MAF Statistics Engine

Errors fall in two groups:

- Raised before any block is processed (fix the configuration and rerun):
    ConfigurationError, MissingTagError, InvalidTagError
- Raised while a block is processed (the caller may drop the block and go on):
    OutOfRangeError, DataInconsistencyError

None of them is retried or swallowed internally.
"""


class MafPipeError(Exception):
    """Base class for all errors raised by mafpipe."""


class ConfigurationError(MafPipeError, ValueError):
    """Invalid statistic setup: species counts, duplicated names, overlapping groups."""


class OutOfRangeError(MafPipeError, ValueError):
    """A value fell outside the bounds of a categorizer."""

    def __init__(self, message: str, value: float, lower: float, upper: float):
        super().__init__(f"{message} Value {value} not in [{lower}, {upper}[.")
        self.value = value
        self.lower = lower
        self.upper = upper


class MissingTagError(MafPipeError, LookupError):
    """No value stored for the requested tag."""


class InvalidTagError(MafPipeError, LookupError):
    """A single-value result was written under a tag other than its own."""


class DataInconsistencyError(MafPipeError):
    """A block does not have the shape a statistic requires (e.g. duplicated species rows)."""
