"""
Personnel events: morale, productivity, headcount and regional staffing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from topazsim.core.decorators import event

if TYPE_CHECKING:
    from topazsim.worksheet import CompanyContext


@event
class AdjustMorale:
    """
    Update morale from the offered wage and dismissals; derive productivity.

    Rule
    ----
        ρ  =  w / w̄
        Δ  =  +5   if ρ > 1.1
              −10  if ρ < 0.9
        Δ  −= 15   if any worker is dismissed
        M  ←  clamp(M + Δ, 0, 100)
        a  ←  0.8 + 0.4 · M / 100

    w: Offered Wage, w̄: Reference Wage (12), M: Morale, a: Productivity
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.personnel import adjust_morale

        adjust_morale(ctx.ledger, ctx.decisions.personnel, ctx.config)


@event
class UpdateHeadcount:
    """
    Apply recruitment and dismissals.

    Rule
    ----
        E  ←  max(0, E + hire − fire)
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.personnel import update_headcount

        update_headcount(ctx.ledger, ctx.decisions.personnel)


@event
class UpdateRegionalStaff:
    """
    Adopt the decided regional staffing (sales reps and marketing staff).

    Staffing is kept unchanged when the decisions carry none.
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.personnel import update_regional_staff

        update_regional_staff(ctx.ledger, ctx.decisions)
