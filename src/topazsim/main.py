"""Command‑line demo runner for topazsim."""

from __future__ import annotations

import argparse
import logging

from topazsim.barrier import CompletedResult, SubmissionBarrier
from topazsim.competitors import list_strategies
from topazsim.decisions import default_decisions
from topazsim.engine import Engine
from topazsim.repository import InMemorySessionRepository, YamlSessionRepository


def _cli(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a topazsim demo session.")
    p.add_argument("--game", default="demo", help="Session id")
    p.add_argument("--players", type=int, default=2, help="Number of human companies")
    p.add_argument(
        "--ai",
        action="append",
        default=[],
        choices=list_strategies(),
        help="Add an AI competitor with this strategy (repeatable)",
    )
    p.add_argument("--quarters", type=int, default=4, help="Quarters to play")
    p.add_argument("--seed", type=int, default=42, help="RNG seed")
    p.add_argument("--config", default=None, help="YAML config file")
    p.add_argument(
        "--state-dir", default=None, help="Persist sessions as YAML in this directory"
    )
    p.add_argument("--log-level", default="WARNING", help="Log level of the engine")
    args = p.parse_args(argv)
    if args.players < 1:
        p.error("--players must be at least 1")
    return args


def main(argv: list[str] | None = None) -> None:
    args = _cli(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    log = logging.getLogger(__name__)

    engine = Engine.init(
        config=args.config,
        seed=args.seed,
        logging={"default_level": args.log_level},
    )
    repo = (
        YamlSessionRepository(args.state_dir)
        if args.state_dir
        else InMemorySessionRepository()
    )
    barrier = SubmissionBarrier(engine, repo)

    humans = [f"company-{i + 1}" for i in range(args.players)]
    for cid in humans:
        barrier.join(args.game, cid, name=f"Company {cid.rsplit('-', 1)[1]}")
    for i, strategy in enumerate(args.ai):
        barrier.join(args.game, f"ai-{i + 1}", name=f"AI {strategy}", strategy=strategy)

    draft = default_decisions()
    for _ in range(args.quarters):
        quarter = barrier.status(args.game).quarter
        for cid in humans:
            outcome = barrier.submit(args.game, cid, quarter, draft)
        if not isinstance(outcome, CompletedResult):
            log.error("Quarter %d did not complete: %s", quarter, outcome)
            break

        log.info("=== QUARTER %d ===", outcome.quarter)
        for cid, result in outcome.results.items():
            fin = result.financials
            log.info(
                "%-12s revenue=%12.2f net=%12.2f cash=%12.2f share=%6.3f sold=%6d",
                cid,
                fin.revenue,
                fin.net_profit,
                fin.balance_sheet.cash,
                result.metrics.share_price,
                result.metrics.units_sold,
            )
        first = next(iter(outcome.results.values()), None)
        for note in first.events if first is not None else ():
            log.info("  note: %s", note)

    log.info("Session finished.")


if __name__ == "__main__":
    main()
