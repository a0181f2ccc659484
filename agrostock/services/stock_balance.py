"""
Stock balance reconciliation.

Pure aggregation over a farm's movements, product roster and planned
consumption. No DB access here: loaders live in agrostock.services.inventory.

Rules:
    balance            = SUM(entries) - SUM(exits)
    average_price      = SUM(qty * unit_price) / SUM(qty)   (entries only)
    predicted_quantity = balance - planned

Dirty data never raises: unknown products get a placeholder row, unknown
movement kinds are skipped, missing prices count as 0.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Any

from pyuca import Collator

from agrostock.app.db.models.core_types import MovementKind

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT_NAME = "Produto não encontrado"
UNKNOWN_UNIT = "-"

TEXT_COLUMNS = ("product_name", "categories", "unit")
NUMERIC_COLUMNS = ("average_price", "balance", "predicted_quantity")
SORTABLE_COLUMNS = TEXT_COLUMNS + NUMERIC_COLUMNS

# pt-BR has no CLDR tailoring over the root collation, so the default
# Unicode Collation Algorithm table orders accents the Brazilian way.
_collator = Collator()


def collation_key(text: str) -> tuple:
    return _collator.sort_key(text or "")


@dataclass(frozen=True)
class ProductRecord:
    id: Hashable
    name: str
    unit: str
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class MovementRecord:
    id: Hashable
    product_id: Hashable
    kind: Any  # raw movement_type, normalized by MovementKind.normalize
    quantity: float
    unit_price: float | None = None
    date: date_type | None = None


@dataclass(frozen=True)
class StockBalance:
    product_id: Hashable
    product_name: str
    unit: str
    categories: tuple[str, ...]
    balance: float
    average_price: float
    predicted_quantity: float


@dataclass
class StockDiagnostics:
    """Anomalies seen while aggregating. Reported, never raised."""

    negative_quantities: list[Hashable] = field(default_factory=list)
    negative_prices: list[Hashable] = field(default_factory=list)
    unknown_kinds: list[Hashable] = field(default_factory=list)
    unknown_products: list[Hashable] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (
            self.negative_quantities
            or self.negative_prices
            or self.unknown_kinds
            or self.unknown_products
        )


@dataclass
class _Totals:
    # terms are summed with math.fsum so the result does not depend on movement order
    entries: list[float] = field(default_factory=list)
    exits: list[float] = field(default_factory=list)
    entry_values: list[float] = field(default_factory=list)

    @property
    def balance(self) -> float:
        return math.fsum(self.entries) - math.fsum(self.exits)

    @property
    def average_price(self) -> float:
        total_entry_quantity = math.fsum(self.entries)
        if total_entry_quantity > 0:
            return math.fsum(self.entry_values) / total_entry_quantity
        return 0.0


def _accumulate(totals: _Totals, kind: MovementKind, mv: MovementRecord) -> None:
    quantity = float(mv.quantity)
    if kind is MovementKind.entry:
        totals.entries.append(quantity)
        totals.entry_values.append(quantity * float(mv.unit_price or 0))
    else:
        totals.exits.append(quantity)


def _inspect(mv: MovementRecord, diagnostics: StockDiagnostics | None) -> None:
    if mv.quantity < 0:
        logger.warning("Negative quantity on movement %s (product %s)", mv.id, mv.product_id)
        if diagnostics is not None:
            diagnostics.negative_quantities.append(mv.id)
    if mv.unit_price is not None and mv.unit_price < 0:
        logger.warning("Negative unit price on movement %s (product %s)", mv.id, mv.product_id)
        if diagnostics is not None:
            diagnostics.negative_prices.append(mv.id)


def weighted_average_price(movements: Iterable[MovementRecord]) -> float:
    """
    Quantity-weighted average unit cost over entry movements.
    Recomputed from the full history; exits never change it.
    """
    totals = _Totals()
    for mv in movements:
        if MovementKind.normalize(mv.kind) is MovementKind.entry:
            _accumulate(totals, MovementKind.entry, mv)
    return totals.average_price


def compute_balances(
    movements: Iterable[MovementRecord],
    products: Iterable[ProductRecord],
    planned: Mapping[Hashable, float] | None = None,
    categories_by_product: Mapping[Hashable, Sequence[str]] | None = None,
    *,
    diagnostics: StockDiagnostics | None = None,
    sort_key: Callable[[str], Any] = collation_key,
) -> list[StockBalance]:
    """
    One StockBalance per product in the union of the roster and the
    movements, sorted by product name.
    """
    planned = planned or {}
    categories_by_product = categories_by_product or {}
    roster = {p.id: p for p in products}

    accumulator: dict[Hashable, _Totals] = {}
    for mv in movements:
        _inspect(mv, diagnostics)
        totals = accumulator.setdefault(mv.product_id, _Totals())

        kind = MovementKind.normalize(mv.kind)
        if kind is None:
            logger.warning("Ignoring movement %s with unknown kind %r", mv.id, mv.kind)
            if diagnostics is not None:
                diagnostics.unknown_kinds.append(mv.id)
            continue
        _accumulate(totals, kind, mv)

    for pid in roster:
        accumulator.setdefault(pid, _Totals())

    balances = []
    for pid, totals in accumulator.items():
        product = roster.get(pid)
        if product is None:
            logger.warning("Movements reference unknown product %s", pid)
            if diagnostics is not None:
                diagnostics.unknown_products.append(pid)

        balance = totals.balance
        balances.append(
            StockBalance(
                product_id=pid,
                product_name=product.name if product else UNKNOWN_PRODUCT_NAME,
                unit=product.unit if product else UNKNOWN_UNIT,
                categories=tuple(categories_by_product.get(pid) or ()),
                balance=balance,
                average_price=totals.average_price,
                predicted_quantity=balance - float(planned.get(pid) or 0),
            )
        )

    balances.sort(key=lambda b: (sort_key(b.product_name), str(b.product_id)))
    return balances


def _column_value(balance: StockBalance, column: str):
    if column == "categories":
        return ", ".join(balance.categories)
    value = getattr(balance, column)
    if column in TEXT_COLUMNS:
        return value or ""
    return value or 0


def sort_balances(
    balances: Iterable[StockBalance],
    column: str,
    direction: str | None = None,
    *,
    sort_key: Callable[[str], Any] = collation_key,
) -> list[StockBalance]:
    """
    Re-sort a report by any column.
    Text columns default to A-Z, numeric columns to largest first.
    """
    if column not in SORTABLE_COLUMNS:
        raise ValueError(f"Unknown sort column: {column}")

    is_text = column in TEXT_COLUMNS
    if direction is None:
        direction = "asc" if is_text else "desc"
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction}")

    def key(b: StockBalance):
        value = _column_value(b, column)
        return sort_key(value) if is_text else value

    # sorted() is stable: ties keep the name order of the incoming report
    return sorted(balances, key=key, reverse=direction == "desc")
