"""Routing configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from split_router.errors import ConfigError

ENV_PREFIX = "ROUTER_"


@dataclass(frozen=True)
class RouterConfig:
    """Tunables for one routing call.

    The top-N limits bound the curated pool set, which in turn bounds the
    number of routes the enumerator produces and the size of the split search.

    Attributes:
        block_number: Block to price at. None means the providers' latest.
        top_n: Pools taken by TVL from the whole universe.
        top_n_token_in_out: Pools taken by TVL touching token in (and token out).
        top_n_second_hop: Pools taken for tokens one hop away from token in/out.
        top_n_with_each_base_token: Pools per base token paired with token in/out.
        top_n_with_base_token: Cap on base-token pools per side, after merging.
        top_n_with_base_token_in_set: Exclude base-token pools from later buckets.
        max_swaps_per_path: Maximum pools in one route.
        max_splits: Maximum routes the amount can be split across.
        distribution_percent: Percent step of the amount ladder. Must divide 100.
    """

    block_number: int | None = None
    top_n: int = 4
    top_n_token_in_out: int = 4
    top_n_second_hop: int = 2
    top_n_with_each_base_token: int = 2
    top_n_with_base_token: int = 10
    top_n_with_base_token_in_set: bool = False
    max_swaps_per_path: int = 3
    max_splits: int = 3
    distribution_percent: int = 5

    def validate(self) -> None:
        """Check the tunables before any search work begins.

        Raises:
            ConfigError: If any limit is out of range
        """
        for name in (
            "top_n",
            "top_n_token_in_out",
            "top_n_second_hop",
            "top_n_with_each_base_token",
            "top_n_with_base_token",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative, got {getattr(self, name)}")

        if self.max_swaps_per_path < 1:
            raise ConfigError(f"max_swaps_per_path must be at least 1, got {self.max_swaps_per_path}")
        if self.max_splits < 1:
            raise ConfigError(f"max_splits must be at least 1, got {self.max_splits}")
        validate_distribution_percent(self.distribution_percent)
        if self.block_number is not None and self.block_number < 0:
            raise ConfigError(f"block_number must be non-negative, got {self.block_number}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> RouterConfig:
        """Build a config from ROUTER_* environment variables.

        Example: ROUTER_MAX_SPLITS=2 sets max_splits. Unset variables keep
        their defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for field in fields(cls):
            raw = env.get(ENV_PREFIX + field.name.upper())
            if raw is None or raw == "":
                continue
            if field.name == "top_n_with_base_token_in_set":
                values[field.name] = raw.lower() in ("true", "1", "yes")
                continue
            try:
                values[field.name] = int(raw)
            except ValueError as err:
                raise ConfigError(f"{ENV_PREFIX}{field.name.upper()} must be an integer: {raw!r}") from err
        return cls(**values)  # type: ignore[arg-type]


def validate_distribution_percent(distribution_percent: int) -> None:
    """Raise ConfigError unless the step is a positive divisor of 100."""
    if distribution_percent <= 0 or distribution_percent > 100 or 100 % distribution_percent != 0:
        raise ConfigError(f"distribution_percent must evenly divide 100, got {distribution_percent}")


# Default configuration instance
DEFAULT_CONFIG = RouterConfig()
