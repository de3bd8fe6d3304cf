"""
Error types raised by the subsidy calculation engine.

Only two kinds of failure exist in the core:
- ConfigurationError: a rate table or regional fee table is missing a key
  the calculation needs (stale or incomplete reference data)
- InvalidArgumentError: a caller passed a value outside the documented
  domain (e.g. 6 care days per week, zero hours per day)

Income edge cases (zero, negative, very high) are valid inputs and never
raise.
"""


class CalculationError(Exception):
    """Base class for all errors raised by ccs_model."""


class ConfigurationError(CalculationError, LookupError):
    """A required rate-cap, regional-average or rate-table key is absent."""


class InvalidArgumentError(CalculationError, ValueError):
    """A caller supplied a value outside the documented domain."""
