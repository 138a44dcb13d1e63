"""
System functions for operations (production and fleet) events.

See Also
--------
topazsim.events.operations : Event classes (primary documentation source)
"""

from __future__ import annotations

import math

import numpy as np

from topazsim import logging
from topazsim.config import Config
from topazsim.decisions import Decisions, Operations
from topazsim.helpers import safe_divide
from topazsim.ledger import CompanyLedger
from topazsim.market import MarketState
from topazsim.worksheet import Worksheet

log = logging.getLogger(__name__)


def calc_capacity(
    ledger: CompanyLedger, operations: Operations, cfg: Config, sheet: Worksheet
) -> None:
    """
    Compute effective production capacity for the quarter.

    See Also
    --------
    topazsim.events.operations.CalcCapacity : Full documentation
    """
    shift_mult = cfg.shift_capacity[operations.shift_level - 1]
    sheet.capacity = (
        ledger.machines * cfg.units_per_machine * ledger.productivity * shift_mult
    )

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] capacity = {ledger.machines} machines x "
            f"{cfg.units_per_machine} x {ledger.productivity:.3f} x {shift_mult} "
            f"= {sheet.capacity:,.1f}"
        )


def run_production(
    ledger: CompanyLedger,
    decisions: Decisions,
    market: MarketState,
    cfg: Config,
    sheet: Worksheet,
    notes: list[str],
) -> None:
    """
    Build requested output up to capacity and cost it.

    See Also
    --------
    topazsim.events.operations.RunProduction : Full documentation
    """
    info_enabled = log.isEnabledFor(logging.INFO)
    if info_enabled:
        log.info("--- Running Production ---")

    requested = decisions.production
    requested_total = int(requested.sum())
    sheet.inventory_opening = ledger.inventory.copy()

    ratio = min(1.0, sheet.capacity / max(1, requested_total))
    sheet.fulfillment_ratio = ratio

    if ratio < 1.0:
        note = (
            f"Warning: Production capped at {math.floor(sheet.capacity)} units "
            f"due to capacity constraints."
        )
        notes.append(note)
        log.warning(f"  [{ledger.company_id}] {note}")

    output = np.floor(requested * ratio).astype(np.int64)
    sheet.units_produced = output
    np.add(ledger.inventory, output, out=ledger.inventory)

    produced = int(output.sum())
    if produced > 0:
        shift_premium = cfg.shift_wage_premium[decisions.operations.shift_level - 1]
        labor_hours = safe_divide(cfg.labor_hours_per_unit, ledger.productivity)
        unit_cost = (
            market.material_cost
            + labor_hours * decisions.personnel.worker_wage * shift_premium
        )
        sheet.production_cost = produced * unit_cost
    else:
        sheet.production_cost = 0.0

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] requested={requested.tolist()}, "
            f"ratio={ratio:.4f}, output={output.tolist()}"
        )
    if info_enabled:
        log.info(
            f"  [{ledger.company_id}] produced {produced:,} units "
            f"at total cost {sheet.production_cost:,.2f}"
        )
        log.info("--- Production complete ---")


def trade_machines(
    ledger: CompanyLedger,
    operations: Operations,
    cfg: Config,
    sheet: Worksheet,
    notes: list[str],
) -> None:
    """
    Charge maintenance on the current fleet, then buy and sell machines.

    See Also
    --------
    topazsim.events.operations.TradeMachines : Full documentation
    """
    sheet.maintenance_cost = (
        ledger.machines * operations.maintenance_hours * cfg.maintenance_rate
    )

    sold = min(operations.sell_machines, ledger.machines)
    if sold < operations.sell_machines:
        note = (
            f"Only {sold} of {operations.sell_machines} machines could be sold "
            f"(fleet size {ledger.machines})."
        )
        notes.append(note)
        log.warning(f"  [{ledger.company_id}] {note}")

    sheet.purchase_cost = operations.buy_machines * cfg.machine_price
    sheet.sale_proceeds = sold * cfg.machine_sale_price

    previous = ledger.machines
    ledger.machines = previous + operations.buy_machines - sold

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] machines {previous} -> {ledger.machines}, "
            f"maintenance={sheet.maintenance_cost:,.2f}, "
            f"bought for {sheet.purchase_cost:,.2f}, sold for "
            f"{sheet.sale_proceeds:,.2f}"
        )
