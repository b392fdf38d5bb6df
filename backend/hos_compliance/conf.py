"""
HOS engine configuration.

Reads the HOS_ENGINE dict from Django settings and turns it into explicit
objects for HOSCalculatorService. The engine itself never reads settings;
the API layer builds a calculator from this configuration.

Example settings:
    HOS_ENGINE = {
        "GAP_POLICY": "reject",
        "HOME_TERMINAL_TIMEZONE": "America/Chicago",
        "SPLIT_SLEEPER": {"require_adjacent_periods": True},
        "LIMITS": {"apply_cycle_restart": False},
    }
"""

import logging
from dataclasses import dataclass, field
from datetime import timezone as dt_timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .models import HosLimits
from .services import GapPolicy, HOSCalculatorService, SplitSleeperPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HOSEngineConfig:
    """Engine configuration resolved from settings."""

    gap_policy: str = GapPolicy.REJECT
    home_timezone: tzinfo = dt_timezone.utc
    split_policy: SplitSleeperPolicy = field(default_factory=SplitSleeperPolicy)
    limits: HosLimits = field(default_factory=HosLimits.property_carrying)

    @classmethod
    def from_settings(cls, overrides=None):
        """
        Build configuration from settings.HOS_ENGINE.

        Args:
            overrides: Optional dict merged over the settings values

        Raises:
            ImproperlyConfigured: A setting has an invalid value
        """
        options = dict(getattr(settings, "HOS_ENGINE", {}) or {})
        options.update(overrides or {})

        try:
            gap_policy = GapPolicy.validate(options.get("GAP_POLICY", GapPolicy.REJECT))
            split_policy = cls._split_policy(options.get("SPLIT_SLEEPER") or {})
            limits = HosLimits(**(options.get("LIMITS") or {}))
        except (TypeError, ValueError) as e:
            raise ImproperlyConfigured(f"Invalid HOS_ENGINE setting: {str(e)}") from e

        return cls(
            gap_policy=gap_policy,
            home_timezone=cls._timezone(options.get("HOME_TERMINAL_TIMEZONE")),
            split_policy=split_policy,
            limits=limits,
        )

    @staticmethod
    def _timezone(name):
        if not name or name == "UTC":
            return dt_timezone.utc
        try:
            return ZoneInfo(name)
        except ZoneInfoNotFoundError as e:
            raise ImproperlyConfigured(f"Unknown HOME_TERMINAL_TIMEZONE: {name}") from e

    @staticmethod
    def _split_policy(options):
        options = dict(options)
        if "qualifying_splits" in options:
            options["qualifying_splits"] = tuple(
                tuple(pair) for pair in options["qualifying_splits"]
            )
        return SplitSleeperPolicy(**options)

    def calculator(self, limits=None, gap_policy=None):
        """Create an HOSCalculatorService with this configuration."""
        return HOSCalculatorService(
            limits=limits or self.limits,
            gap_policy=gap_policy or self.gap_policy,
            split_policy=self.split_policy,
            home_timezone=self.home_timezone,
        )
