"""Configuration module for topazsim."""

from topazsim.config.schema import Config
from topazsim.config.validator import ConfigValidator

__all__ = ["Config", "ConfigValidator"]
