"""
Company ledgers and quarterly result records.

A `CompanyLedger` is the persistent state of one company: headcount, fleet,
stock, cash and the append-only `history` of `QuarterResult` records. Result
records are immutable; every numpy vector stored inside one is made
read-only, so a record handed to a caller can never be edited after the
fact.

Per-product vectors are indexed in `PRODUCTS` order, per-region vectors in
`REGIONS` order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np

from topazsim.helpers import freeze
from topazsim.typing import Float1D, Int1D

PRODUCTS: tuple[str, ...] = ("p1", "p2", "p3")
REGIONS: tuple[str, ...] = ("south", "west", "north", "export")


# --------------------------------------------------------------------------- #
#  Regional staff                                                             #
# --------------------------------------------------------------------------- #
@dataclass(slots=True)
class RegionalStaff:
    """Sales reps and marketing staff employed in each region."""

    sales_reps: Int1D  # shape (n_regions,)
    marketing_staff: Int1D  # shape (n_regions,)

    @classmethod
    def uniform(cls, sales_reps: int, marketing_staff: int) -> RegionalStaff:
        n = len(REGIONS)
        return cls(
            sales_reps=np.full(n, sales_reps, dtype=np.int64),
            marketing_staff=np.full(n, marketing_staff, dtype=np.int64),
        )

    @property
    def total_reps(self) -> int:
        return int(self.sales_reps.sum())

    @property
    def total_marketing_staff(self) -> int:
        return int(self.marketing_staff.sum())

    def copy(self) -> RegionalStaff:
        return RegionalStaff(self.sales_reps.copy(), self.marketing_staff.copy())

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            region: {
                "sales_reps": int(self.sales_reps[i]),
                "marketing_staff": int(self.marketing_staff[i]),
            }
            for i, region in enumerate(REGIONS)
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, int]]) -> RegionalStaff:
        """Build from ``{region: {sales_reps, marketing_staff}}``, absent regions 0."""
        reps = np.zeros(len(REGIONS), dtype=np.int64)
        mkt = np.zeros(len(REGIONS), dtype=np.int64)
        for i, region in enumerate(REGIONS):
            entry = data.get(region) or {}
            reps[i] = int(entry.get("sales_reps", 0))
            mkt[i] = int(entry.get("marketing_staff", 0))
        return cls(sales_reps=reps, marketing_staff=mkt)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegionalStaff):
            return NotImplemented
        return bool(
            np.array_equal(self.sales_reps, other.sales_reps)
            and np.array_equal(self.marketing_staff, other.marketing_staff)
        )


# --------------------------------------------------------------------------- #
#  Quarter results                                                            #
# --------------------------------------------------------------------------- #
@dataclass(slots=True, frozen=True)
class Expenses:
    """Itemized expenses of one quarter."""

    marketing: float
    rd: float
    personnel: float
    maintenance: float
    depreciation: float
    interest: float
    salesforce: float
    tax: float

    @property
    def operating(self) -> float:
        """Every item except tax (what EBIT is net of)."""
        return (
            self.marketing
            + self.rd
            + self.personnel
            + self.maintenance
            + self.depreciation
            + self.interest
            + self.salesforce
        )

    @property
    def total(self) -> float:
        return self.operating + self.tax

    def to_dict(self) -> dict[str, float]:
        return {
            "marketing": self.marketing,
            "rd": self.rd,
            "personnel": self.personnel,
            "maintenance": self.maintenance,
            "depreciation": self.depreciation,
            "interest": self.interest,
            "salesforce": self.salesforce,
            "tax": self.tax,
        }


@dataclass(slots=True, frozen=True)
class BalanceSheet:
    """Closing balance-sheet figures."""

    cash: float
    inventory_value: float
    machine_value: float
    loans: float
    net_worth: float

    def to_dict(self) -> dict[str, float]:
        return {
            "cash": self.cash,
            "inventory_value": self.inventory_value,
            "machine_value": self.machine_value,
            "loans": self.loans,
            "net_worth": self.net_worth,
        }


@dataclass(slots=True, frozen=True)
class Financials:
    revenue: float
    cogs: float
    gross_profit: float
    expenses: Expenses
    ebit: float
    net_profit: float
    balance_sheet: BalanceSheet

    def to_dict(self) -> dict[str, Any]:
        return {
            "revenue": self.revenue,
            "cogs": self.cogs,
            "gross_profit": self.gross_profit,
            "expenses": self.expenses.to_dict(),
            "ebit": self.ebit,
            "net_profit": self.net_profit,
            "balance_sheet": self.balance_sheet.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Financials:
        return cls(
            revenue=float(data["revenue"]),
            cogs=float(data["cogs"]),
            gross_profit=float(data["gross_profit"]),
            expenses=Expenses(**{k: float(v) for k, v in data["expenses"].items()}),
            ebit=float(data["ebit"]),
            net_profit=float(data["net_profit"]),
            balance_sheet=BalanceSheet(
                **{k: float(v) for k, v in data["balance_sheet"].items()}
            ),
        )


@dataclass(slots=True, frozen=True)
class Metrics:
    units_sold: int
    units_produced: int
    market_share: float  # percent of total market demand
    share_price: float
    eps: float
    morale: float
    productivity: float
    capacity: float
    fulfillment_ratio: float  # share of requested production actually built

    def to_dict(self) -> dict[str, Any]:
        return {
            "units_sold": self.units_sold,
            "units_produced": self.units_produced,
            "market_share": self.market_share,
            "share_price": self.share_price,
            "eps": self.eps,
            "morale": self.morale,
            "productivity": self.productivity,
            "capacity": self.capacity,
            "fulfillment_ratio": self.fulfillment_ratio,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Metrics:
        return cls(
            units_sold=int(data["units_sold"]),
            units_produced=int(data["units_produced"]),
            market_share=float(data["market_share"]),
            share_price=float(data["share_price"]),
            eps=float(data["eps"]),
            morale=float(data["morale"]),
            productivity=float(data["productivity"]),
            capacity=float(data["capacity"]),
            fulfillment_ratio=float(data["fulfillment_ratio"]),
        )


@dataclass(slots=True, frozen=True)
class ProductSales:
    product: str
    units: int
    revenue: float

    def to_dict(self) -> dict[str, Any]:
        return {"product": self.product, "units": self.units, "revenue": self.revenue}


@dataclass(slots=True, frozen=True, eq=False)
class RegionSales:
    """Units and revenue of one region, per product."""

    region: str
    units: Int1D  # shape (n_products,)
    revenue: Float1D  # shape (n_products,)

    def __post_init__(self) -> None:
        object.__setattr__(self, "units", freeze(np.asarray(self.units, np.int64)))
        object.__setattr__(
            self, "revenue", freeze(np.asarray(self.revenue, np.float64))
        )

    @property
    def total(self) -> float:
        return float(self.revenue.sum())

    def to_dict(self) -> dict[str, Any]:
        return {
            "region": self.region,
            "units": {p: int(u) for p, u in zip(PRODUCTS, self.units)},
            "revenue": {p: float(r) for p, r in zip(PRODUCTS, self.revenue)},
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegionSales:
        return cls(
            region=str(data["region"]),
            units=np.array([data["units"][p] for p in PRODUCTS], dtype=np.int64),
            revenue=np.array([data["revenue"][p] for p in PRODUCTS], dtype=np.float64),
        )


_VECTOR_FIELDS = (
    "inventory_opening",
    "units_produced_by_product",
    "units_sold_by_product",
    "inventory_closing",
)


@dataclass(slots=True, frozen=True, eq=False)
class QuarterResult:
    """
    Immutable snapshot of one company's quarter.

    Created exactly once per company per tick by the ``append_result`` stage
    and never edited afterwards.
    """

    quarter: int
    financials: Financials
    metrics: Metrics
    inventory_opening: Int1D
    units_produced_by_product: Int1D
    units_sold_by_product: Int1D
    inventory_closing: Int1D
    sales_by_product: tuple[ProductSales, ...] = ()
    sales_by_region: tuple[RegionSales, ...] = ()
    events: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in _VECTOR_FIELDS:
            object.__setattr__(
                self, name, freeze(np.asarray(getattr(self, name), np.int64))
            )
        object.__setattr__(self, "sales_by_product", tuple(self.sales_by_product))
        object.__setattr__(self, "sales_by_region", tuple(self.sales_by_region))
        object.__setattr__(self, "events", tuple(self.events))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "quarter": self.quarter,
            "financials": self.financials.to_dict(),
            "metrics": self.metrics.to_dict(),
        }
        for name in _VECTOR_FIELDS:
            out[name] = {p: int(v) for p, v in zip(PRODUCTS, getattr(self, name))}
        out["sales_by_product"] = [s.to_dict() for s in self.sales_by_product]
        out["sales_by_region"] = [s.to_dict() for s in self.sales_by_region]
        out["events"] = list(self.events)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QuarterResult:
        vectors = {
            name: np.array([data[name][p] for p in PRODUCTS], dtype=np.int64)
            for name in _VECTOR_FIELDS
        }
        return cls(
            quarter=int(data["quarter"]),
            financials=Financials.from_dict(data["financials"]),
            metrics=Metrics.from_dict(data["metrics"]),
            sales_by_product=tuple(
                ProductSales(str(s["product"]), int(s["units"]), float(s["revenue"]))
                for s in data.get("sales_by_product", ())
            ),
            sales_by_region=tuple(
                RegionSales.from_dict(s) for s in data.get("sales_by_region", ())
            ),
            events=tuple(data.get("events", ())),
            **vectors,
        )


# --------------------------------------------------------------------------- #
#  Ledger                                                                     #
# --------------------------------------------------------------------------- #
@dataclass(slots=True, eq=False)
class CompanyLedger:
    """
    Persistent state of one company.

    ``history`` is append-only: `append_result` is the only writer and it
    refuses out-of-order quarters.
    """

    company_id: str
    name: str
    share_price: float
    share_count: int
    employees: int
    morale: float
    productivity: float
    machines: int
    inventory: Int1D  # shape (n_products,)
    cash: float
    loans: float
    net_worth: float
    regional_staff: RegionalStaff
    history: list[QuarterResult] = field(default_factory=list)

    @property
    def last_result(self) -> QuarterResult | None:
        return self.history[-1] if self.history else None

    def append_result(self, result: QuarterResult) -> None:
        """
        Append *result* to the history.

        Raises
        ------
        ValueError
            If *result* is not strictly later than the last recorded quarter.
        """
        if self.history and result.quarter <= self.history[-1].quarter:
            raise ValueError(
                f"Company '{self.company_id}': result for quarter {result.quarter} "
                f"cannot follow quarter {self.history[-1].quarter}"
            )
        self.history.append(result)

    def copy(self) -> CompanyLedger:
        """
        Return an independent copy.

        Results are immutable, so the copy shares them; the history list itself
        is new.
        """
        return CompanyLedger(
            company_id=self.company_id,
            name=self.name,
            share_price=self.share_price,
            share_count=self.share_count,
            employees=self.employees,
            morale=self.morale,
            productivity=self.productivity,
            machines=self.machines,
            inventory=self.inventory.copy(),
            cash=self.cash,
            loans=self.loans,
            net_worth=self.net_worth,
            regional_staff=self.regional_staff.copy(),
            history=list(self.history),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "company_id": self.company_id,
            "name": self.name,
            "share_price": self.share_price,
            "share_count": self.share_count,
            "employees": self.employees,
            "morale": self.morale,
            "productivity": self.productivity,
            "machines": self.machines,
            "inventory": [int(x) for x in self.inventory],
            "cash": self.cash,
            "loans": self.loans,
            "net_worth": self.net_worth,
            "regional_staff": self.regional_staff.to_dict(),
            "history": [r.to_dict() for r in self.history],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompanyLedger:
        return cls(
            company_id=str(data["company_id"]),
            name=str(data["name"]),
            share_price=float(data["share_price"]),
            share_count=int(data["share_count"]),
            employees=int(data["employees"]),
            morale=float(data["morale"]),
            productivity=float(data["productivity"]),
            machines=int(data["machines"]),
            inventory=np.array(data["inventory"], dtype=np.int64),
            cash=float(data["cash"]),
            loans=float(data["loans"]),
            net_worth=float(data["net_worth"]),
            regional_staff=RegionalStaff.from_dict(data["regional_staff"]),
            history=[QuarterResult.from_dict(r) for r in data.get("history", ())],
        )


_DEFAULT_COMPANY: dict[str, Any] = {
    "share_price": 1.0,
    "share_count": 1_000_000,
    "employees": 50,
    "morale": 75.0,
    "productivity": 1.0,
    "machines": 10,
    "inventory": [500, 200, 0],
    "cash": 500_000.0,
    "loans": 0.0,
    "net_worth": 1_000_000.0,
    "regional_staff": {r: {"sales_reps": 4, "marketing_staff": 2} for r in REGIONS},
}


def default_ledger(
    company_id: str,
    name: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CompanyLedger:
    """
    Return the starting ledger of a company joining a session.

    Parameters
    ----------
    company_id : str
        Identity of the company within its session.
    name : str, optional
        Display name; defaults to *company_id*.
    overrides : Mapping, optional
        The ``company:`` section of the engine configuration. Keys it omits
        keep their package defaults.
    """
    values = dict(_DEFAULT_COMPANY)
    values.update(overrides or {})
    values["company_id"] = company_id
    values["name"] = name if name is not None else company_id
    values["history"] = []
    return CompanyLedger.from_dict(values)
