"""
System functions for personnel events.

See Also
--------
topazsim.events.personnel : Event classes (primary documentation source)
"""

from __future__ import annotations

from topazsim import logging
from topazsim.config import Config
from topazsim.decisions import Decisions, Personnel
from topazsim.helpers import clamp
from topazsim.ledger import CompanyLedger

log = logging.getLogger(__name__)


def adjust_morale(ledger: CompanyLedger, personnel: Personnel, cfg: Config) -> None:
    """
    Move morale with the offered wage and dismissals, then derive productivity.

    See Also
    --------
    topazsim.events.personnel.AdjustMorale : Full documentation
    """
    info_enabled = log.isEnabledFor(logging.INFO)
    if info_enabled:
        log.info("--- Adjusting Morale ---")

    wage_ratio = personnel.worker_wage / cfg.reference_wage

    delta = 0.0
    if wage_ratio > cfg.wage_bonus_threshold:
        delta += cfg.morale_bonus
    elif wage_ratio < cfg.wage_penalty_threshold:
        delta -= cfg.morale_penalty
    if personnel.dismiss_workers > 0:
        delta -= cfg.dismissal_penalty

    previous = ledger.morale
    ledger.morale = clamp(previous + delta, 0.0, 100.0)
    ledger.productivity = (
        cfg.productivity_base + cfg.productivity_span * ledger.morale / 100.0
    )

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] wage ratio={wage_ratio:.3f}, "
            f"dismissals={personnel.dismiss_workers}, delta={delta:+.1f}"
        )
    if info_enabled:
        log.info(
            f"  [{ledger.company_id}] morale {previous:.1f} -> {ledger.morale:.1f}, "
            f"productivity={ledger.productivity:.3f}"
        )
        log.info("--- Morale Adjustment complete ---")


def update_headcount(ledger: CompanyLedger, personnel: Personnel) -> None:
    """
    Apply recruitment and dismissals to the workforce.

    See Also
    --------
    topazsim.events.personnel.UpdateHeadcount : Full documentation
    """
    previous = ledger.employees
    ledger.employees = max(
        0, previous + personnel.recruit_workers - personnel.dismiss_workers
    )

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] employees {previous} -> {ledger.employees} "
            f"(+{personnel.recruit_workers} / -{personnel.dismiss_workers})"
        )


def update_regional_staff(ledger: CompanyLedger, decisions: Decisions) -> None:
    """
    Replace regional staffing with the decided one, if any was decided.

    See Also
    --------
    topazsim.events.personnel.UpdateRegionalStaff : Full documentation
    """
    if decisions.regional_staff is None:
        log.deep(f"  [{ledger.company_id}] regional staffing unchanged")
        return

    ledger.regional_staff = decisions.regional_staff.to_staff()

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] regional staff: "
            f"reps={ledger.regional_staff.sales_reps.tolist()}, "
            f"marketing={ledger.regional_staff.marketing_staff.tolist()}"
        )
