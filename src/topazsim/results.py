"""
History export for company ledgers.

Turns the append-only history of a `CompanyLedger` into flat per-quarter
records, pandas DataFrames or YAML text.

Note: pandas is an optional dependency. It is only required by the DataFrame
export functions (history_frame, session_frame).
Install with: pip install topazsim[pandas] or pip install pandas
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

import yaml

from topazsim.ledger import PRODUCTS, CompanyLedger, QuarterResult

if TYPE_CHECKING:  # pragma: no cover
    from pandas import DataFrame

    from topazsim.session import SessionRecord

__all__ = ["dumps_history", "history_frame", "history_records", "session_frame"]


def _import_pandas() -> Any:
    """
    Lazily import pandas with helpful error message if not installed.

    Raises
    ------
    ImportError
        If pandas is not installed.
    """
    try:
        import pandas as pd

        return pd
    except ImportError:  # pragma: no cover
        raise ImportError(
            "pandas is required for DataFrame export methods. "
            "Install it with: pip install pandas"
        ) from None


def _flatten(result: QuarterResult) -> dict[str, Any]:
    fin = result.financials
    row: dict[str, Any] = {
        "quarter": result.quarter,
        "revenue": fin.revenue,
        "cogs": fin.cogs,
        "gross_profit": fin.gross_profit,
        "ebit": fin.ebit,
        "net_profit": fin.net_profit,
    }
    row.update({f"expense_{k}": v for k, v in fin.expenses.to_dict().items()})
    row.update(fin.balance_sheet.to_dict())
    row.update(result.metrics.to_dict())
    for i, p in enumerate(PRODUCTS):
        row[f"produced_{p}"] = int(result.units_produced_by_product[i])
        row[f"sold_{p}"] = int(result.units_sold_by_product[i])
        row[f"inventory_{p}"] = int(result.inventory_closing[i])
    row["events"] = "; ".join(result.events)
    return row


def history_records(ledger: CompanyLedger) -> list[dict[str, Any]]:
    """
    One flat dict per recorded quarter, oldest first.

    Keys are the P&L lines, ``expense_<item>`` for each itemized expense,
    the closing balance sheet, the metrics, and ``produced_<p>``,
    ``sold_<p>`` and ``inventory_<p>`` for each product.
    """
    return [_flatten(r) for r in ledger.history]


def history_frame(ledger: CompanyLedger) -> DataFrame:
    """
    History of one company as a DataFrame indexed by quarter.

    Examples
    --------
    >>> df = history_frame(ledger)  # doctest: +SKIP
    >>> df[["revenue", "net_profit", "cash"]]  # doctest: +SKIP
    """
    pd = _import_pandas()
    records = history_records(ledger)
    if not records:
        return cast("DataFrame", pd.DataFrame())
    df = pd.DataFrame.from_records(records).set_index("quarter")
    return cast("DataFrame", df)


def session_frame(record: SessionRecord) -> DataFrame:
    """History of every company of a session, indexed by (company_id, quarter)."""
    pd = _import_pandas()
    rows = [
        {"company_id": cid, **row}
        for cid, ledger in record.companies.items()
        for row in history_records(ledger)
    ]
    if not rows:
        return cast("DataFrame", pd.DataFrame())
    df = pd.DataFrame.from_records(rows).set_index(["company_id", "quarter"])
    return cast("DataFrame", df)


def dumps_history(ledger: CompanyLedger) -> str:
    """Full (nested) history of one company as a YAML document."""
    return yaml.safe_dump(
        {
            "company_id": ledger.company_id,
            "name": ledger.name,
            "history": [r.to_dict() for r in ledger.history],
        },
        sort_keys=False,
    )
