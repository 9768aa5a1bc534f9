"""RNDC shared utilities package."""

from rndc_shared.config import BaseServiceSettings
from rndc_shared.logging import setup_logging

__all__ = ["setup_logging", "BaseServiceSettings"]
