"""
Quarterly decisions submitted by a company.

Decisions are frozen value objects. They are built from the wire payload
with `Decisions.from_mapping`, which accepts the camelCase keys used by
clients (``products.p1.price``, ``operations.shiftLevel``,
``personnel.workerWage``, ``regionalStaff.south.salesReps``) as well as
their snake_case equivalents, and rejects anything malformed with
`topazsim.errors.ValidationError` before a session is touched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np

from topazsim.errors import ValidationError
from topazsim.ledger import PRODUCTS, REGIONS, RegionalStaff
from topazsim.typing import Float1D, Float2D, Int1D

_MISSING = object()


@dataclass(slots=True, frozen=True)
class ProductDecision:
    price: float
    production: int
    marketing: tuple[float, ...]  # spend per region, REGIONS order

    @property
    def total_marketing(self) -> float:
        return float(sum(self.marketing))


@dataclass(slots=True, frozen=True)
class Operations:
    shift_level: int  # 1, 2 or 3
    maintenance_hours: float  # per machine
    buy_machines: int
    sell_machines: int


@dataclass(slots=True, frozen=True)
class Personnel:
    worker_wage: float
    recruit_workers: int
    dismiss_workers: int
    sales_salary: float


@dataclass(slots=True, frozen=True)
class StaffingDecision:
    """Target regional staffing, REGIONS order."""

    sales_reps: tuple[int, ...]
    marketing_staff: tuple[int, ...]

    def to_staff(self) -> RegionalStaff:
        return RegionalStaff(
            sales_reps=np.array(self.sales_reps, dtype=np.int64),
            marketing_staff=np.array(self.marketing_staff, dtype=np.int64),
        )


@dataclass(slots=True, frozen=True)
class Decisions:
    """
    Everything one company decides for one quarter.

    ``regional_staff`` is optional; ``None`` keeps the company's current
    staffing.
    """

    products: tuple[ProductDecision, ...]  # PRODUCTS order
    operations: Operations
    personnel: Personnel
    regional_staff: StaffingDecision | None = None

    # ---- vector views -------------------------------------------------- #
    def product(self, name: str) -> ProductDecision:
        return self.products[PRODUCTS.index(name)]

    @property
    def prices(self) -> Float1D:
        return np.array([p.price for p in self.products], dtype=np.float64)

    @property
    def production(self) -> Int1D:
        return np.array([p.production for p in self.products], dtype=np.int64)

    @property
    def marketing(self) -> Float2D:
        """Spend matrix of shape (n_products, n_regions)."""
        return np.array([p.marketing for p in self.products], dtype=np.float64)

    # ---- wire format --------------------------------------------------- #
    @classmethod
    def from_mapping(cls, payload: Any) -> Decisions:
        """
        Parse and validate a decisions payload.

        Raises
        ------
        ValidationError
            If a required field is missing, has the wrong type, is out of
            range, or names an unknown product or region.
        """
        if isinstance(payload, Decisions):
            return payload
        if not isinstance(payload, Mapping):
            raise ValidationError(
                f"decisions must be a mapping, got {type(payload).__name__}"
            )

        products_raw = _section(payload, "products", "products")
        unknown = set(products_raw) - set(PRODUCTS)
        if unknown:
            raise ValidationError(
                f"Unknown product(s) {sorted(unknown)}; expected {list(PRODUCTS)}"
            )
        products = tuple(
            _parse_product(name, _section(products_raw, name, name, path="products"))
            for name in PRODUCTS
        )

        ops = _section(payload, "operations", "operations")
        operations = Operations(
            shift_level=_int(ops, "shiftLevel", "shift_level", "operations"),
            maintenance_hours=_number(
                ops, "maintenanceHours", "maintenance_hours", "operations"
            ),
            buy_machines=_int(ops, "buyMachines", "buy_machines", "operations"),
            sell_machines=_int(ops, "sellMachines", "sell_machines", "operations"),
        )
        if operations.shift_level not in (1, 2, 3):
            raise ValidationError(
                f"operations.shiftLevel must be 1, 2 or 3, got {operations.shift_level}"
            )

        pers = _section(payload, "personnel", "personnel")
        personnel = Personnel(
            worker_wage=_number(pers, "workerWage", "worker_wage", "personnel"),
            recruit_workers=_int(
                pers, "recruitWorkers", "recruit_workers", "personnel"
            ),
            dismiss_workers=_int(
                pers, "dismissWorkers", "dismiss_workers", "personnel"
            ),
            sales_salary=_number(
                pers, "salesSalary", "sales_salary", "personnel", default=0.0
            ),
        )
        if personnel.worker_wage <= 0:
            raise ValidationError(
                f"personnel.workerWage must be > 0, got {personnel.worker_wage}"
            )

        staff_raw = _get(payload, "regionalStaff", "regional_staff", None)
        staffing = None if staff_raw is None else _parse_staffing(staff_raw)

        return cls(
            products=products,
            operations=operations,
            personnel=personnel,
            regional_staff=staffing,
        )

    def to_mapping(self) -> dict[str, Any]:
        """Return the camelCase wire form; `from_mapping` round-trips it."""
        out: dict[str, Any] = {
            "products": {
                name: {
                    "price": p.price,
                    "production": p.production,
                    "marketing": dict(zip(REGIONS, p.marketing)),
                }
                for name, p in zip(PRODUCTS, self.products)
            },
            "operations": {
                "shiftLevel": self.operations.shift_level,
                "maintenanceHours": self.operations.maintenance_hours,
                "buyMachines": self.operations.buy_machines,
                "sellMachines": self.operations.sell_machines,
            },
            "personnel": {
                "workerWage": self.personnel.worker_wage,
                "recruitWorkers": self.personnel.recruit_workers,
                "dismissWorkers": self.personnel.dismiss_workers,
                "salesSalary": self.personnel.sales_salary,
            },
        }
        if self.regional_staff is not None:
            out["regionalStaff"] = {
                region: {
                    "salesReps": self.regional_staff.sales_reps[i],
                    "marketingStaff": self.regional_staff.marketing_staff[i],
                }
                for i, region in enumerate(REGIONS)
            }
        return out


# --------------------------------------------------------------------------- #
#  Canned decisions                                                           #
# --------------------------------------------------------------------------- #
def default_decisions() -> Decisions:
    """The starting draft offered to a new company."""
    return Decisions.from_mapping(
        {
            "products": {
                "p1": {
                    "price": 100,
                    "production": 2000,
                    "marketing": dict.fromkeys(REGIONS, 5000),
                },
                "p2": {
                    "price": 120,
                    "production": 1000,
                    "marketing": dict.fromkeys(REGIONS, 4000),
                },
                "p3": {
                    "price": 150,
                    "production": 0,
                    "marketing": {**dict.fromkeys(REGIONS[:3], 2000), "export": 0},
                },
            },
            "operations": {
                "shiftLevel": 1,
                "maintenanceHours": 40,
                "buyMachines": 0,
                "sellMachines": 0,
            },
            "personnel": {
                "workerWage": 12,
                "recruitWorkers": 0,
                "dismissWorkers": 0,
                "salesSalary": 2000,
            },
            "regionalStaff": {
                region: {"salesReps": 4, "marketingStaff": 2} for region in REGIONS
            },
        }
    )


def idle_decisions(reference_wage: float = 12.0, price: float = 150.0) -> Decisions:
    """
    A quarter of doing nothing.

    No production, no marketing, no maintenance or fleet changes; workers
    are paid the reference wage and staffing is kept as it is.
    """
    n_regions = len(REGIONS)
    return Decisions(
        products=tuple(
            ProductDecision(price=price, production=0, marketing=(0.0,) * n_regions)
            for _ in PRODUCTS
        ),
        operations=Operations(
            shift_level=1, maintenance_hours=0.0, buy_machines=0, sell_machines=0
        ),
        personnel=Personnel(
            worker_wage=reference_wage,
            recruit_workers=0,
            dismiss_workers=0,
            sales_salary=0.0,
        ),
        regional_staff=None,
    )


# --------------------------------------------------------------------------- #
#  Parsing helpers                                                            #
# --------------------------------------------------------------------------- #
def _get(mapping: Mapping[str, Any], camel: str, snake: str, default: Any) -> Any:
    if camel in mapping:
        return mapping[camel]
    if snake in mapping:
        return mapping[snake]
    return default


def _section(
    mapping: Mapping[str, Any], camel: str, snake: str, path: str = ""
) -> Mapping[str, Any]:
    where = f"{path}.{camel}" if path else camel
    value = _get(mapping, camel, snake, _MISSING)
    if value is _MISSING:
        raise ValidationError(f"missing required field '{where}'")
    if not isinstance(value, Mapping):
        raise ValidationError(
            f"'{where}' must be a mapping, got {type(value).__name__}"
        )
    return value


def _number(
    mapping: Mapping[str, Any],
    camel: str,
    snake: str,
    path: str,
    default: Any = _MISSING,
) -> float:
    where = f"{path}.{camel}"
    value = _get(mapping, camel, snake, default)
    if value is _MISSING:
        raise ValidationError(f"missing required field '{where}'")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"'{where}' must be a number, got {type(value).__name__}"
        )
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"'{where}' must be finite, got {value}")
    if value < 0:
        raise ValidationError(f"'{where}' must be >= 0, got {value}")
    return value


def _int(
    mapping: Mapping[str, Any],
    camel: str,
    snake: str,
    path: str,
    default: Any = _MISSING,
) -> int:
    value = _number(mapping, camel, snake, path, default)
    if not value.is_integer():
        raise ValidationError(f"'{path}.{camel}' must be a whole number, got {value}")
    return int(value)


def _parse_product(name: str, raw: Mapping[str, Any]) -> ProductDecision:
    path = f"products.{name}"
    price = _number(raw, "price", "price", path)
    if price <= 0:
        raise ValidationError(f"'{path}.price' must be > 0, got {price}")

    marketing_raw = _section(raw, "marketing", "marketing", path=path)
    unknown = set(marketing_raw) - set(REGIONS)
    if unknown:
        raise ValidationError(
            f"Unknown region(s) {sorted(unknown)} in '{path}.marketing'; "
            f"expected {list(REGIONS)}"
        )
    marketing = tuple(
        _number(marketing_raw, r, r, f"{path}.marketing", default=0.0)
        for r in REGIONS
    )

    return ProductDecision(
        price=price,
        production=_int(raw, "production", "production", path),
        marketing=marketing,
    )


def _parse_staffing(raw: Any) -> StaffingDecision:
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f"'regionalStaff' must be a mapping, got {type(raw).__name__}"
        )
    unknown = set(raw) - set(REGIONS)
    if unknown:
        raise ValidationError(
            f"Unknown region(s) {sorted(unknown)} in 'regionalStaff'; "
            f"expected {list(REGIONS)}"
        )
    reps, mkt = [], []
    for region in REGIONS:
        entry = raw.get(region) or {}
        if not isinstance(entry, Mapping):
            raise ValidationError(f"'regionalStaff.{region}' must be a mapping")
        path = f"regionalStaff.{region}"
        reps.append(_int(entry, "salesReps", "sales_reps", path, default=0))
        mkt.append(_int(entry, "marketingStaff", "marketing_staff", path, default=0))
    return StaffingDecision(sales_reps=tuple(reps), marketing_staff=tuple(mkt))
