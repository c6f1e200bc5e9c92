"""Repository for holdings and their region weights."""

import dataclasses
from decimal import Decimal
from typing import Optional

from ...core.exceptions import InvalidHoldingError
from ...core.models import Holding, RegionWeight
from ..query import BaseRepository, QueryBuilder, RowMapper


def validate_holding(holding: Holding) -> None:
    """Raise InvalidHoldingError for values the dashboard cannot aggregate."""
    if not holding.currency.strip():
        raise InvalidHoldingError("Currency is required")
    if holding.quantity < 0:
        raise InvalidHoldingError(f"Quantity must not be negative, got {holding.quantity}")
    if holding.price is not None and holding.price < 0:
        raise InvalidHoldingError(f"Price must not be negative, got {holding.price}")
    for w in holding.region_weights:
        if not 0 <= w.weight <= 1:
            raise InvalidHoldingError(f"Region weight for {w.region} must be between 0 and 1")
    if sum((w.weight for w in holding.region_weights), Decimal("0")) > 1:
        raise InvalidHoldingError("Region weights add up to more than 100%")


class HoldingsRepository(BaseRepository[Holding]):
    _table = "holdings"
    _mapper = RowMapper(Holding)
    _insert_skip = frozenset({"id", "region_weights"})
    _order = "account_id, asset_type, id"

    def create(self, holding: Holding) -> Holding:
        """Insert a holding with its region weights. Raises InvalidHoldingError."""
        holding = dataclasses.replace(
            holding, currency=holding.currency.strip().upper(), symbol=holding.symbol.upper()
        )
        validate_holding(holding)
        db = self._db()
        with db.transaction():
            holding_id = self._insert(holding)
            self._write_regions(holding_id, holding.region_weights)
        return self.get_by_id(holding_id)

    def get_by_id(self, id: int) -> Optional[Holding]:
        holding = super().get_by_id(id)
        if holding is not None:
            holding.region_weights = self._regions_by_holding([id]).get(id, ())
        return holding

    def list_by_account(self, account_id: int) -> list[Holding]:
        query = self._query().where("account_id = ?", account_id).order_by("asset_type, id")
        return self._with_regions(self._map_rows(query))

    def list_all(self) -> list[Holding]:
        return self._with_regions(super().list_all())

    def update_valuation(
        self, holding_id: int, quantity: Decimal, price: Optional[Decimal]
    ) -> Optional[Holding]:
        current = self.get_by_id(holding_id)
        if current is None:
            return None
        validate_holding(dataclasses.replace(current, quantity=quantity, price=price))
        db = self._db()
        db.conn.execute(
            """UPDATE holdings SET quantity = ?, price = ?, updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (str(quantity), str(price) if price is not None else None, holding_id),
        )
        self._commit(db)
        return self.get_by_id(holding_id)

    def set_regions(self, holding_id: int, weights: tuple[RegionWeight, ...]) -> None:
        current = self.get_by_id(holding_id)
        if current is not None:
            validate_holding(dataclasses.replace(current, region_weights=weights))
        db = self._db()
        with db.transaction():
            db.conn.execute("DELETE FROM holding_regions WHERE holding_id = ?", (holding_id,))
            self._write_regions(holding_id, weights)

    def _write_regions(self, holding_id: int, weights: tuple[RegionWeight, ...]) -> None:
        self._db().conn.executemany(
            "INSERT INTO holding_regions (holding_id, region, weight) VALUES (?, ?, ?)",
            [(holding_id, w.region, str(w.weight)) for w in weights],
        )

    def _regions_by_holding(self, holding_ids: list[int]) -> dict[int, tuple[RegionWeight, ...]]:
        rows = (
            QueryBuilder("holding_regions")
            .where_in("holding_id", holding_ids)
            .order_by("id")
            .fetch_all(self._db().conn)
        )
        result: dict[int, list[RegionWeight]] = {}
        for r in rows:
            result.setdefault(r["holding_id"], []).append(
                RegionWeight(region=r["region"], weight=Decimal(r["weight"]))
            )
        return {k: tuple(v) for k, v in result.items()}

    def _with_regions(self, holdings: list[Holding]) -> list[Holding]:
        regions = self._regions_by_holding([h.id for h in holdings])
        for h in holdings:
            h.region_weights = regions.get(h.id, ())
        return holdings
