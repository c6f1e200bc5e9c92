"""Repository for accounts; the dashboard's source of holdings."""

import logging
import sqlite3
from typing import Optional

from ...core.exceptions import RepositoryError
from ...core.interfaces import AccountRepository
from ...core.models import Account
from ..query import BaseRepository, RowMapper
from .holdings_repo import HoldingsRepository

logger = logging.getLogger(__name__)


class AccountsRepository(BaseRepository[Account], AccountRepository):
    _table = "accounts"
    _mapper = RowMapper(Account)
    _insert_skip = frozenset({"id", "holdings"})

    def __init__(self, holdings_repo: Optional[HoldingsRepository] = None):
        self.holdings_repo = holdings_repo or HoldingsRepository()

    def create(self, account: Account) -> Account:
        return self.get_by_id(self._insert(account))

    def get_by_name(self, name: str) -> Optional[Account]:
        found = self._map_rows(self._query().where("name = ?", name))
        return found[0] if found else None

    def get_accounts(self) -> list[Account]:
        """All accounts with their holdings attached, in creation order."""
        try:
            accounts = self.list_all()
            holdings = self.holdings_repo.list_all()
        except sqlite3.Error as e:
            logger.error("Could not read accounts from %s: %s", self._db().db_path, e)
            raise RepositoryError(f"Could not read accounts: {e}") from e
        by_id = {a.id: a for a in accounts}
        for h in holdings:
            account = by_id.get(h.account_id)
            if account is not None:
                account.holdings.append(h)
        return accounts
