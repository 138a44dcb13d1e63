"""
Operations events: capacity, production and the machine fleet.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from topazsim.core.decorators import event

if TYPE_CHECKING:
    from topazsim.worksheet import CompanyContext


@event
class CalcCapacity:
    """
    Compute effective production capacity.

    Rule
    ----
        C  =  K · u · a · s(shift)

    K: Machines, u: Units per Machine (500), a: Productivity,
    s: Shift Multiplier {1: 1.0, 2: 1.5, 3: 2.0}
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.operations import calc_capacity

        calc_capacity(ctx.ledger, ctx.decisions.operations, ctx.config, ctx.sheet)


@event
class RunProduction:
    """
    Build requested output, scaled down uniformly when over capacity.

    Rule
    ----
        f   =  min(1, C / max(1, Σ Q))
        Y_j =  ⌊Q_j · f⌋
        S_j ←  S_j + Y_j
        c   =  m + (h / a) · w · π(shift)

    Q: Requested Production, C: Capacity, Y: Output, S: Inventory,
    c: Unit Production Cost, m: Material Cost, h: Labor Hours per Unit (1.5),
    w: Wage, π: Shift Wage Premium {1: 1.0, 2: 1.3, 3: 1.5}

    A capacity warning note is recorded whenever f < 1.
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.operations import run_production

        run_production(
            ctx.ledger, ctx.decisions, ctx.market, ctx.config, ctx.sheet, ctx.notes
        )


@event
class TradeMachines:
    """
    Charge maintenance, then buy and sell machines.

    Rule
    ----
        maintenance  =  K · hours · 20
        sold         =  min(sell, K)
        K            ←  K + buy − sold

    Maintenance is charged on the fleet owned before the trade. Purchases
    cost 50 000 per machine, sales return 25 000 per machine; both settle in
    cash when the books close.
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.operations import trade_machines

        trade_machines(
            ctx.ledger, ctx.decisions.operations, ctx.config, ctx.sheet, ctx.notes
        )
