class PrythianError(Exception):
    """Base error for Prythian combat exceptions."""


class InvalidAction(PrythianError):
    """Raised when an action is attempted that the current encounter state does not allow."""


class ConfigurationError(PrythianError):
    """Raised when balance, roster or lookup-table data is invalid or incomplete."""
