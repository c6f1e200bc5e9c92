"""Custom exceptions for the portfolio dashboard."""


class PortfolioDashboardError(Exception):
    """Base exception."""
    pass


class RepositoryError(PortfolioDashboardError):
    """Accounts could not be read from storage."""
    pass


class MissingRateError(PortfolioDashboardError):
    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"No exchange rate available for {currency}")


class PersistenceError(PortfolioDashboardError):
    """History or config could not be saved, or stored data is malformed."""
    pass


class InvalidHoldingError(PortfolioDashboardError):
    pass
