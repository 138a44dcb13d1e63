"""
Configuration dataclass for engine coefficients.

This module defines the Config dataclass, which groups every coefficient of
the quarterly simulation in one immutable object. Config instances are
created by Engine.init() after merging defaults, user config, and kwargs.

Design Notes
------------
- Immutable (frozen=True) to prevent accidental modification
- Memory-efficient (slots=True)
- Simple dataclass, no methods - validation happens in ConfigValidator

See Also
--------
ConfigValidator : Centralized validation for configuration parameters
topazsim.engine.Engine.init : Creates Config from merged parameters
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class Config:
    """
    Immutable configuration for the quarterly simulation.

    Parameters
    ----------
    reference_wage : float
        Market wage per labor hour; the offered wage is compared against it.
    wage_bonus_threshold, wage_penalty_threshold : float
        Wage ratios above / below which morale moves.
    morale_bonus, morale_penalty, dismissal_penalty : float
        Morale deltas for generous wages, low wages and any dismissal.
    productivity_base, productivity_span : float
        ``productivity = base + span * morale / 100``.
    units_per_machine : int
        Base quarterly output of one machine.
    shift_capacity, shift_wage_premium : tuple of float
        Capacity multiplier and labor-cost premium for shift levels 1..3.
    labor_hours_per_unit : float
        Labor hours per unit at productivity 1.0.
    maintenance_rate : float
        Cost per machine per maintenance hour.
    machine_price, machine_sale_price, machine_book_value : float
        Purchase cost, resale proceeds and balance-sheet value per machine.
    depreciation_per_machine : float
        Quarterly depreciation per owned machine.
    elasticity : float
        Price elasticity of demand (> 1).
    reference_price : float
        Price at which the price factor equals one.
    marketing_k : float
        Divisor of the logarithmic marketing factor.
    demand_scale : float
        Scale from market demand to per-company unit demand.
    region_base_weight : float
        Baseline regional sales weight added to regional marketing spend.
    admin_cost_per_employee, sales_salary_multiplier : float
        Personnel overhead terms.
    sales_rep_cost, marketing_staff_cost : float
        Quarterly payroll per regional sales rep / marketing staff member.
    tax_rate : float
        Tax on positive EBIT.
    pe_multiplier : float
        Share-price change per unit of EPS.
    share_price_floor : float
        Lower bound of the share price.
    shock_probability : float
        Probability of one market shock per tick.
    rate_shock : float
        Additive interest-rate shock.
    material_shock : float
        Multiplicative material-cost shock.
    market : dict
        Initial market state of a new session.
    company : dict
        Initial ledger values of a new company.
    seed : int or None
        Base seed for session random streams.

    Examples
    --------
    >>> import topazsim as tz
    >>> engine = tz.Engine.init(tax_rate=0.25)
    >>> engine.config.tax_rate
    0.25
    """

    # Personnel
    reference_wage: float
    wage_bonus_threshold: float
    wage_penalty_threshold: float
    morale_bonus: float
    morale_penalty: float
    dismissal_penalty: float
    productivity_base: float
    productivity_span: float

    # Operations
    units_per_machine: int
    shift_capacity: tuple[float, float, float]
    shift_wage_premium: tuple[float, float, float]
    labor_hours_per_unit: float
    maintenance_rate: float
    machine_price: float
    machine_sale_price: float
    machine_book_value: float
    depreciation_per_machine: float

    # Marketing / demand
    elasticity: float
    reference_price: float
    marketing_k: float
    demand_scale: float
    region_base_weight: float

    # Finance
    admin_cost_per_employee: float
    sales_salary_multiplier: float
    sales_rep_cost: float
    marketing_staff_cost: float
    tax_rate: float
    pe_multiplier: float
    share_price_floor: float

    # Market shocks
    shock_probability: float
    rate_shock: float
    material_shock: float

    # Initial state of new sessions
    market: dict[str, Any] = field(default_factory=dict)
    company: dict[str, Any] = field(default_factory=dict)

    seed: int | None = None

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> Config:
        """Build a Config from a merged (and validated) parameter dict."""
        names = set(cls.__dataclass_fields__)
        kwargs = {k: v for k, v in cfg.items() if k in names}
        for key in ("shift_capacity", "shift_wage_premium"):
            if key in kwargs:
                kwargs[key] = tuple(float(x) for x in kwargs[key])
        return cls(**kwargs)
