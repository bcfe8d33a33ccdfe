"""Configuration for the route optimizer."""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from routeform.algorithms.base import DEFAULT_PRUNE_THRESHOLD, SolveMode

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Parameter '{name}' must be a boolean, got {value!r}")


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Parameter '{name}' must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(
            f"Parameter '{name}' must be an integer, got {value!r}"
        ) from None


def _parse_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Parameter '{name}' must be a number, got {value!r}")
    try:
        return float(str(value).strip())
    except ValueError:
        raise ValueError(
            f"Parameter '{name}' must be a number, got {value!r}"
        ) from None


@dataclass(frozen=True)
class OptimizerConfig:
    """Parameters of one optimization run.

    Attributes:
        k: Maximum number of loopless candidate paths per demand.
        non_bifurcated: If True, each demand must use a single route
            (binary selection model); otherwise traffic may be split.
        prune_threshold: Routes carrying less traffic are dropped.
        solver: Solver backend name (see ``routeform.solver.get_solver``).
        time_limit: Optional solver time limit in seconds.
        workers: Threads used for candidate path generation.
        max_hops: Optional hop limit for candidate paths.
    """

    k: int = 10
    non_bifurcated: bool = False
    prune_threshold: float = DEFAULT_PRUNE_THRESHOLD
    solver: str = "cbc"
    time_limit: Optional[float] = None
    workers: int = 1
    max_hops: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.k, bool) or not isinstance(self.k, int) or self.k <= 0:
            raise ValueError(f"k must be a positive integer, got {self.k!r}")
        if self.prune_threshold < 0:
            raise ValueError(
                f"prune_threshold must be >= 0, got {self.prune_threshold!r}"
            )
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {self.time_limit!r}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers!r}")
        if self.max_hops is not None and self.max_hops < 1:
            raise ValueError(f"max_hops must be >= 1, got {self.max_hops!r}")

    @property
    def mode(self) -> SolveMode:
        return SolveMode.INTEGER if self.non_bifurcated else SolveMode.CONTINUOUS

    @classmethod
    def from_options(
        cls, options: Mapping[str, Any], base: Optional["OptimizerConfig"] = None
    ) -> "OptimizerConfig":
        """Build a config from host-style options (string values accepted).

        Keys may use the field names or the host parameter names
        ``isNonBifurcated``, ``pruneThreshold``, ``timeLimit`` and ``maxHops``.
        Missing keys keep the values of ``base`` (defaults if None).

        Raises:
            ValueError: On unknown keys or unparsable values.
        """
        known = {f.name for f in fields(cls)}
        updates = {}
        for raw_key, value in options.items():
            key = _ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise ValueError(f"Unknown optimizer parameter '{raw_key}'")
            if key in ("k", "workers"):
                updates[key] = _parse_int(raw_key, value)
            elif key == "max_hops":
                hops = None if value in (None, "") else _parse_int(raw_key, value)
                # Zero or negative values mean no limit
                updates[key] = hops if hops is None or hops > 0 else None
            elif key == "non_bifurcated":
                updates[key] = _parse_bool(raw_key, value)
            elif key == "prune_threshold":
                updates[key] = _parse_float(raw_key, value)
            elif key == "time_limit":
                updates[key] = (
                    None if value in (None, "") else _parse_float(raw_key, value)
                )
            else:
                updates[key] = str(value)
        return replace(base or cls(), **updates)


_ALIASES = {
    "isNonBifurcated": "non_bifurcated",
    "pruneThreshold": "prune_threshold",
    "timeLimit": "time_limit",
    "maxHops": "max_hops",
}

# Global default configuration instance
DEFAULT_CONFIG = OptimizerConfig()
