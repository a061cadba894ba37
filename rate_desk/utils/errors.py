"""
Rate Desk - Errors
Every failure the calculator reports to a user action.
"""


class RateCardError(Exception):
    """Base class for rate card errors."""


class ValidationError(RateCardError, ValueError):
    """Missing or invalid form input. Nothing is computed."""


class RoleNotFoundError(RateCardError, LookupError):
    """Role name is not present in the current rate table."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Role data not found: '{role}'")


class DataAcquisitionError(RateCardError):
    """Rate card could not be fetched or parsed from a source."""
