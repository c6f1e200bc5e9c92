"""Rebalancing engine: target allocation per broad asset type.

Targets are fractions of the whole portfolio (0.6 = 60%). They do not have
to sum to 1; asset types without a target are treated as target 0, so they
show up as full sells. Cash-like types are never rebalanced, there is no
market to trade cash against itself.
"""

from decimal import Decimal

from .models import ASSET_TYPE_LABELS, AssetType, RebalanceStep

_ZERO = Decimal("0")


class Rebalancer:
    def __init__(
        self,
        asset_totals: dict[AssetType, Decimal],
        total_value: Decimal,
        targets: dict[AssetType, Decimal],
    ):
        self.asset_totals = asset_totals
        self.total_value = total_value
        self.targets = targets

    def current_fraction(self, asset_type: AssetType) -> Decimal:
        if self.total_value == 0:
            return _ZERO
        return self.asset_totals.get(asset_type, _ZERO) / self.total_value

    def check_deviation(self) -> dict[AssetType, dict]:
        """
        Returns current vs target fraction per asset type (held or targeted).
        """
        result = {}
        keys = list(self.asset_totals)
        keys += [t for t in self.targets if t not in self.asset_totals]
        for asset_type in keys:
            current = self.current_fraction(asset_type)
            target = self.targets.get(asset_type, _ZERO)
            result[asset_type] = {
                "current": current,
                "target": target,
                "deviation": current - target,
                "rebalanceable": not asset_type.is_cash_like,
            }
        return result

    def suggest_steps(self, include_unheld: bool = False) -> list[RebalanceStep]:
        """Buy/sell amounts that move each asset type onto its target.

        Sorted ascending by value: largest sells first, largest buys last.
        With include_unheld, targeted asset types that are not held yet are
        suggested as buys from zero (percentage None).
        """
        if self.total_value == 0:
            return []

        steps: list[RebalanceStep] = []
        for asset_type, held in self.asset_totals.items():
            if asset_type.is_cash_like:
                continue
            delta = self.targets.get(asset_type, _ZERO) - held / self.total_value
            if delta == 0:
                continue
            transaction_value = delta * self.total_value
            steps.append(
                RebalanceStep(
                    asset_type=asset_type,
                    asset_name=ASSET_TYPE_LABELS[asset_type],
                    value=transaction_value,
                    percentage=transaction_value / held if held else None,
                )
            )

        if include_unheld:
            for asset_type, target in self.targets.items():
                if asset_type in self.asset_totals or asset_type.is_cash_like or target <= 0:
                    continue
                steps.append(
                    RebalanceStep(
                        asset_type=asset_type,
                        asset_name=ASSET_TYPE_LABELS[asset_type],
                        value=target * self.total_value,
                        percentage=None,
                    )
                )

        steps.sort(key=lambda s: s.value)
        return steps
