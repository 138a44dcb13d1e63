"""
Logging for topazsim.

A thin layer over the standard library: every logger handed out by this
module is a `TopazLogger`, which understands one extra level below DEBUG,
``DEEP_DEBUG`` (5), used for dumping whole results and worksheets.

Logger names follow the package layout (``topazsim.engine``,
``topazsim.barrier``, ...); pipeline stages log through
``topazsim.events.<event_name>`` so that single stages can be turned up or
down from the ``logging:`` section of the engine configuration:

>>> import topazsim as tz
>>> engine = tz.Engine.init(
...     logging={"default_level": "WARNING", "events": {"run_production": "DEBUG"}}
... )

Stages guard anything costly to format behind ``isEnabledFor``:

>>> from topazsim import logging
>>> log = logging.getLogger("topazsim.events.sell_products")
>>> if log.isEnabledFor(logging.DEBUG):
...     log.debug("demand vector ...")
"""

import logging
from typing import Any

CRITICAL = logging.CRITICAL
ERROR = logging.ERROR
WARNING = logging.WARNING
INFO = logging.INFO
DEBUG = logging.DEBUG
DEEP_DEBUG = 5

logging.addLevelName(DEEP_DEBUG, "DEEP")


class TopazLogger(logging.Logger):
    """`logging.Logger` with a `deep` method for the DEEP_DEBUG level."""

    def deep(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(DEEP_DEBUG):
            self._log(DEEP_DEBUG, msg, args, **kwargs)


logging.setLoggerClass(TopazLogger)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)


def getLogger(name: str | None = None) -> TopazLogger:
    """Same as `logging.getLogger`, typed as returning a TopazLogger."""
    return logging.getLogger(name)  # type: ignore[return-value]


def configure(log_config: dict[str, Any]) -> None:
    """
    Apply the ``logging`` section of an engine configuration.

    ``default_level`` is set on the ``topazsim`` logger; each entry of
    ``events`` sets the level of one stage's ``topazsim.events.<name>``
    logger. Level names are case-insensitive and already validated by
    `ConfigValidator`.
    """
    root = logging.getLogger("topazsim")
    root.setLevel(_level(log_config.get("default_level", "INFO")))

    for event_name, level in (log_config.get("events") or {}).items():
        logging.getLogger(f"topazsim.events.{event_name}").setLevel(_level(level))


def _level(name: str) -> int:
    """Numeric value of a level name, DEEP_DEBUG included."""
    upper = name.upper()
    return DEEP_DEBUG if upper == "DEEP_DEBUG" else int(getattr(logging, upper))
