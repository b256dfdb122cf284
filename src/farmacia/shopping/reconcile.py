"""Supplier cost reconciliation for a single shopping list."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from farmacia.models.catalog import SupplierCatalogItem
from farmacia.models.shopping import (
    COST_EPSILON,
    CostRefreshChange,
    CostRefreshResult,
    ShoppingList,
    ShoppingListItem,
)


def cost_lookup(catalog: Iterable[SupplierCatalogItem]) -> Dict[str, float]:
    """Map product id to last supplier cost; the first entry for a product wins."""

    lookup: Dict[str, float] = {}
    for entry in catalog:
        lookup.setdefault(entry.product_id, entry.last_cost)
    return lookup


def reconcile_costs(
    shopping_list: ShoppingList,
    catalog: Iterable[SupplierCatalogItem],
) -> Tuple[ShoppingList, CostRefreshResult]:
    """Overwrite unreceived item costs with the supplier's latest prices.

    Received items are left alone. Products missing from the catalog are
    counted in ``not_found_count``; they never fail the refresh.
    """

    lookup = cost_lookup(catalog)
    items: List[ShoppingListItem] = []
    changes: List[CostRefreshChange] = []
    not_found = 0

    for item in shopping_list.items:
        if item.is_received:
            items.append(item)
            continue
        new_cost = lookup.get(item.product_id)
        if new_cost is None:
            not_found += 1
            items.append(item)
            continue
        # Item costs are stored clamped at zero; compare against that.
        new_cost = max(0.0, new_cost)
        old_cost = item.unit_cost
        diff = new_cost - old_cost
        if abs(diff) <= COST_EPSILON:
            items.append(item)
            continue
        items.append(item.with_changes(previous_cost=old_cost, unit_cost=new_cost))
        changes.append(
            CostRefreshChange(
                product_name=item.product_name,
                old_cost=old_cost,
                new_cost=new_cost,
                percent_change=(diff / old_cost * 100) if old_cost > 0 else 0.0,
                is_increase=diff > 0,
            )
        )

    result = CostRefreshResult(
        updated_count=len(changes),
        not_found_count=not_found,
        changes=changes,
    )
    if not changes:
        return shopping_list, result
    return shopping_list.with_changes(items=items), result


__all__ = ["cost_lookup", "reconcile_costs"]
