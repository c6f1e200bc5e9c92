"""Contracts for the collaborators the dashboard core depends on."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from .models import Account, PortfolioHistory

if TYPE_CHECKING:
    from .config import PortfolioConfig


class AccountRepository(ABC):
    @abstractmethod
    def get_accounts(self) -> list[Account]:
        """Return all accounts with their holdings. Raises RepositoryError."""


class ExchangeRateProvider(ABC):
    @abstractmethod
    async def get_rates(self, currencies: Iterable[str], base: str) -> dict[str, Decimal]:
        """Return {currency: rate to base} for every currency that could be resolved.

        Currencies that cannot be quoted are left out of the result.
        """


class HistoryStore(ABC):
    @abstractmethod
    async def load(self) -> Optional[PortfolioHistory]: ...

    @abstractmethod
    async def save(self, history: PortfolioHistory) -> None: ...


class ConfigStore(ABC):
    @abstractmethod
    def load(self) -> "PortfolioConfig": ...

    @abstractmethod
    def save(self, config: "PortfolioConfig") -> None: ...
