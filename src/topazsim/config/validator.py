"""Centralized configuration validation for topazsim."""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any

import yaml

from topazsim.ledger import PRODUCTS, REGIONS


class ConfigValidator:
    """
    Centralized validation for engine configuration.

    All validation happens once at Engine.init() to ensure:
    - Type correctness
    - Valid parameter ranges
    - Relationship constraints between parameters
    - Clear error messages with actionable feedback
    """

    # Valid log levels for logging configuration
    VALID_LOG_LEVELS = {"DEEP_DEBUG", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    # Pipeline sections and whether they may be empty
    PIPELINE_SECTIONS = ("market", "company")

    @staticmethod
    def validate_config(cfg: dict[str, Any]) -> None:
        """
        Validate all configuration parameters.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.

        Raises
        ------
        ValueError
            If any validation check fails.
        """
        # Type checking
        ConfigValidator._validate_types(cfg)

        # Range validation
        ConfigValidator._validate_ranges(cfg)

        # Relationship constraints
        ConfigValidator._validate_relationships(cfg)

        # Initial session state
        if "market" in cfg:
            ConfigValidator._validate_market(cfg["market"])
        if "company" in cfg:
            ConfigValidator._validate_company(cfg["company"])

        # Logging configuration
        if "logging" in cfg:
            ConfigValidator._validate_logging(cfg["logging"])

    @staticmethod
    def _validate_types(cfg: dict[str, Any]) -> None:
        """
        Ensure correct types for configuration parameters.

        Raises
        ------
        ValueError
            If any parameter has incorrect type.
        """
        # Integer parameters
        int_params = [
            "units_per_machine",
            "seed",
        ]

        # Float parameters
        float_params = [
            "reference_wage",
            "wage_bonus_threshold",
            "wage_penalty_threshold",
            "morale_bonus",
            "morale_penalty",
            "dismissal_penalty",
            "productivity_base",
            "productivity_span",
            "labor_hours_per_unit",
            "maintenance_rate",
            "machine_price",
            "machine_sale_price",
            "machine_book_value",
            "depreciation_per_machine",
            "elasticity",
            "reference_price",
            "marketing_k",
            "demand_scale",
            "region_base_weight",
            "admin_cost_per_employee",
            "sales_salary_multiplier",
            "sales_rep_cost",
            "marketing_staff_cost",
            "tax_rate",
            "pe_multiplier",
            "share_price_floor",
            "shock_probability",
            "rate_shock",
            "material_shock",
        ]

        # Per-shift-level parameters
        shift_params = ["shift_capacity", "shift_wage_premium"]

        # Check integers (bool is an int subclass but never a valid count)
        for key in int_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if val is not None and (isinstance(val, bool) or not isinstance(val, int)):
                raise ValueError(
                    f"Config parameter '{key}' must be int, got {type(val).__name__}"
                )

        # Check floats (accept int or float)
        for key in float_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Config parameter '{key}' must be float, got {type(val).__name__}"
                )

        for key in shift_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if not isinstance(val, (list, tuple)) or len(val) != 3:
                raise ValueError(
                    f"Config parameter '{key}' must be a list of 3 numbers "
                    f"(shift levels 1, 2, 3), got {val!r}"
                )
            for item in val:
                if isinstance(item, bool) or not isinstance(item, (int, float)):
                    raise ValueError(
                        f"Config parameter '{key}' must contain numbers, "
                        f"got {type(item).__name__}"
                    )

        # Check pipeline_path (str or None)
        if "pipeline_path" in cfg:
            val = cfg["pipeline_path"]
            if val is not None and not isinstance(val, str):
                raise ValueError(
                    f"Config parameter 'pipeline_path' must be str or None, "
                    f"got {type(val).__name__}"
                )

    @staticmethod
    def _validate_ranges(cfg: dict[str, Any]) -> None:
        """
        Ensure parameters are in valid ranges.

        Raises
        ------
        ValueError
            If any parameter is out of valid range.
        """
        # Define constraints as (min_val, max_val) tuples
        # None means unbounded
        constraints = {
            # Wages and morale
            "reference_wage": (1e-9, None),
            "wage_bonus_threshold": (0.0, None),
            "wage_penalty_threshold": (0.0, None),
            "morale_bonus": (0.0, 100.0),
            "morale_penalty": (0.0, 100.0),
            "dismissal_penalty": (0.0, 100.0),
            "productivity_base": (0.0, None),
            "productivity_span": (0.0, None),
            # Operations
            "units_per_machine": (0, None),
            "labor_hours_per_unit": (0.0, None),
            "maintenance_rate": (0.0, None),
            "machine_price": (0.0, None),
            "machine_sale_price": (0.0, None),
            "machine_book_value": (0.0, None),
            "depreciation_per_machine": (0.0, None),
            # Demand (elasticity must make price increases superlinear)
            "elasticity": (1.0 + 1e-9, None),
            "reference_price": (1e-9, None),
            "marketing_k": (1e-9, None),
            "demand_scale": (0.0, None),
            "region_base_weight": (1e-9, None),
            # Finance
            "admin_cost_per_employee": (0.0, None),
            "sales_salary_multiplier": (0.0, None),
            "sales_rep_cost": (0.0, None),
            "marketing_staff_cost": (0.0, None),
            "tax_rate": (0.0, 1.0),
            "pe_multiplier": (0.0, None),
            "share_price_floor": (1e-9, None),
            # Shocks
            "shock_probability": (0.0, 1.0),
            "rate_shock": (0.0, None),
            "material_shock": (0.0, None),
        }

        for key, (min_val, max_val) in constraints.items():
            if key not in cfg:
                continue

            val = cfg[key]

            # Skip None values for optional parameters
            if val is None:
                continue

            # Check minimum
            if min_val is not None and val < min_val:
                raise ValueError(
                    f"Config parameter '{key}' must be >= {min_val}, got {val}"
                )

            # Check maximum
            if max_val is not None and val > max_val:
                raise ValueError(
                    f"Config parameter '{key}' must be <= {max_val}, got {val}"
                )

        for key in ("shift_capacity", "shift_wage_premium"):
            for level, val in enumerate(cfg.get(key) or (), start=1):
                if val < 0:
                    raise ValueError(
                        f"Config parameter '{key}' for shift level {level} "
                        f"must be >= 0, got {val}"
                    )

    @staticmethod
    def _validate_relationships(cfg: dict[str, Any]) -> None:
        """
        Validate cross-parameter constraints.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.
        """
        # Selling a machine for more than it costs is an arbitrage loop
        price = cfg.get("machine_price", float("inf"))
        sale = cfg.get("machine_sale_price", 0.0)
        if sale > price:
            warnings.warn(
                f"machine_sale_price ({sale}) > machine_price ({price}). "
                "Companies can print cash by trading machines.",
                UserWarning,
                stacklevel=3,
            )

        lo = cfg.get("wage_penalty_threshold", 0.0)
        hi = cfg.get("wage_bonus_threshold", float("inf"))
        if lo > hi:
            raise ValueError(
                f"wage_penalty_threshold ({lo}) must not exceed "
                f"wage_bonus_threshold ({hi})"
            )

        base = cfg.get("productivity_base", 0.8)
        span = cfg.get("productivity_span", 0.4)
        if base + span <= 0:
            warnings.warn(
                "productivity_base + productivity_span <= 0: "
                "no company will ever produce anything.",
                UserWarning,
                stacklevel=3,
            )

    @staticmethod
    def _validate_market(market: Any) -> None:
        """
        Validate the initial market section.

        Raises
        ------
        ValueError
            If a field is missing, mistyped or out of range.
        """
        if not isinstance(market, dict):
            raise ValueError(
                "Config section 'market' must be a mapping, "
                f"got {type(market).__name__}"
            )

        bounds = {
            "gdp_growth": 0.0,
            "interest_rate": 0.0,
            "material_cost": 1e-9,
            "total_demand": 0.0,
            "quarter": 1,
        }
        for key, min_val in bounds.items():
            if key not in market:
                raise ValueError(f"Config section 'market' is missing '{key}'")
            val = market[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Market parameter '{key}' must be a number, "
                    f"got {type(val).__name__}"
                )
            if val < min_val:
                raise ValueError(
                    f"Market parameter '{key}' must be >= {min_val}, got {val}"
                )
        if not isinstance(market["quarter"], int):
            raise ValueError("Market parameter 'quarter' must be int")

    @staticmethod
    def _validate_company(company: Any) -> None:
        """
        Validate the initial company section.

        Raises
        ------
        ValueError
            If a field is missing, mistyped or out of range.
        """
        if not isinstance(company, dict):
            raise ValueError(
                f"Config section 'company' must be a mapping, "
                f"got {type(company).__name__}"
            )

        bounds: dict[str, tuple[float | None, float | None]] = {
            "share_price": (1e-9, None),
            "share_count": (1, None),
            "employees": (0, None),
            "morale": (0.0, 100.0),
            "productivity": (0.0, None),
            "machines": (0, None),
            "cash": (None, None),
            "loans": (0.0, None),
            "net_worth": (None, None),
        }
        for key, (min_val, max_val) in bounds.items():
            if key not in company:
                continue
            val = company[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Company parameter '{key}' must be a number, "
                    f"got {type(val).__name__}"
                )
            if min_val is not None and val < min_val:
                raise ValueError(
                    f"Company parameter '{key}' must be >= {min_val}, got {val}"
                )
            if max_val is not None and val > max_val:
                raise ValueError(
                    f"Company parameter '{key}' must be <= {max_val}, got {val}"
                )

        for key in ("share_count", "employees", "machines"):
            if key in company and not isinstance(company[key], int):
                raise ValueError(f"Company parameter '{key}' must be int")

        if "inventory" in company:
            inv = company["inventory"]
            if not isinstance(inv, (list, tuple)) or len(inv) != len(PRODUCTS):
                raise ValueError(
                    f"Company parameter 'inventory' must list {len(PRODUCTS)} "
                    f"integers ({', '.join(PRODUCTS)}), got {inv!r}"
                )
            if any(not isinstance(x, int) or x < 0 for x in inv):
                raise ValueError("Company inventory must be non-negative integers")

        if "regional_staff" in company:
            staff = company["regional_staff"]
            if not isinstance(staff, dict):
                raise ValueError("Company parameter 'regional_staff' must be a mapping")
            unknown = set(staff) - set(REGIONS)
            if unknown:
                raise ValueError(
                    f"Unknown region(s) in 'regional_staff': {sorted(unknown)}. "
                    f"Known regions: {list(REGIONS)}"
                )
            for region, entry in staff.items():
                if not isinstance(entry, dict):
                    raise ValueError(
                        f"Regional staff for '{region}' must be a mapping"
                    )
                for field_name in ("sales_reps", "marketing_staff"):
                    val = entry.get(field_name, 0)
                    if not isinstance(val, int) or val < 0:
                        raise ValueError(
                            f"Regional staff '{region}.{field_name}' must be a "
                            f"non-negative int, got {val!r}"
                        )

    @staticmethod
    def _check_level(level: Any, where: str) -> None:
        if not isinstance(level, str):
            raise ValueError(f"{where} must be str, got {type(level).__name__}")
        if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{level}' for {where}. "
                f"Must be one of {sorted(ConfigValidator.VALID_LOG_LEVELS)}"
            )

    @staticmethod
    def _validate_logging(log_config: Any) -> None:
        """
        Validate the ``logging`` section.

        Accepted keys are ``default_level`` (a level name) and ``events``
        (event name → level name). Level names are case-insensitive.

        Raises
        ------
        ValueError
            If the section or one of its levels is malformed.
        """
        if not isinstance(log_config, dict):
            raise ValueError(
                f"Logging config must be dict, got {type(log_config).__name__}"
            )

        if "default_level" in log_config:
            ConfigValidator._check_level(
                log_config["default_level"], "logging default_level"
            )

        events = log_config.get("events")
        if events is None:
            return
        if not isinstance(events, dict):
            raise ValueError(
                f"Logging events must be dict, got {type(events).__name__}"
            )
        for event_name, level in events.items():
            if not isinstance(event_name, str):
                raise ValueError(
                    f"Event name must be str, got {type(event_name).__name__}"
                )
            ConfigValidator._check_level(level, f"event '{event_name}'")

    @staticmethod
    def validate_pipeline_path(pipeline_path: str) -> None:
        """
        Check that *pipeline_path* names an existing file.

        A missing ``.yml`` / ``.yaml`` suffix only warns.

        Raises
        ------
        ValueError
            If the path does not exist or is not a file.
        """
        path = Path(pipeline_path)
        if not path.exists():
            raise ValueError(f"Pipeline path '{pipeline_path}' does not exist")
        if not path.is_file():
            raise ValueError(f"Pipeline path '{pipeline_path}' is not a file")
        if path.suffix not in (".yml", ".yaml"):
            warnings.warn(
                f"Pipeline path '{pipeline_path}' does not have .yml/.yaml extension",
                UserWarning,
                stacklevel=2,
            )

    @staticmethod
    def validate_pipeline_yaml(yaml_path: str) -> None:
        """
        Check a pipeline file before any pipeline is built from it.

        Both sections must be present and list only registered event names.

        Raises
        ------
        ValueError
            If a section is missing, is not a list of names, or names an
            unknown event.
        """
        from topazsim.core.registry import list_events

        with Path(yaml_path).open("rt", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if not isinstance(data, dict):
            raise ValueError(
                f"Pipeline YAML must be a dictionary, got {type(data).__name__}"
            )

        known = set(list_events())
        for section in ConfigValidator.PIPELINE_SECTIONS:
            if section not in data:
                raise ValueError(
                    f"Pipeline YAML must have '{section}' key: {yaml_path}"
                )
            names = data[section]
            if not isinstance(names, list):
                raise ValueError(
                    f"Pipeline '{section}' must be a list, got {type(names).__name__}"
                )
            for i, entry in enumerate(names):
                if not isinstance(entry, str):
                    raise ValueError(
                        f"Entry {section}[{i}] must be str, got {type(entry).__name__}"
                    )
                if entry.strip() not in known:
                    raise ValueError(
                        f"Event '{entry}' (from section '{section}') not found in "
                        f"registry. Available events: {sorted(known)}"
                    )
