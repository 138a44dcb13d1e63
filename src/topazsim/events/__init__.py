"""
Pipeline events of the quarterly tick.

Importing this package registers every built-in event. Market events run
once per tick; company events run once per submitting company, in the order
listed in default_pipeline.yml.
"""

from topazsim.events.finance import (
    AppendResult,
    BookExpenses,
    CloseBooks,
    RevalueShares,
)
from topazsim.events.market import ApplyMarketShock, GrowMarketDemand
from topazsim.events.operations import CalcCapacity, RunProduction, TradeMachines
from topazsim.events.personnel import AdjustMorale, UpdateHeadcount, UpdateRegionalStaff
from topazsim.events.sales import DistributeRegionalSales, SellProducts

__all__ = [
    "AdjustMorale",
    "AppendResult",
    "ApplyMarketShock",
    "BookExpenses",
    "CalcCapacity",
    "CloseBooks",
    "DistributeRegionalSales",
    "GrowMarketDemand",
    "RevalueShares",
    "RunProduction",
    "SellProducts",
    "TradeMachines",
    "UpdateHeadcount",
    "UpdateRegionalStaff",
]
