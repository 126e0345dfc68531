import os
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional, Tuple

# --- WEEK DEFINITION ---

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")

DAY_LABELS = {
    "monday": "Monday",
    "tuesday": "Tuesday",
    "wednesday": "Wednesday",
    "thursday": "Thursday",
    "friday": "Friday",
}

# --- AVAILABILITY WINDOW ---
# Sessions may start every STEP minutes inside [WINDOW_START, WINDOW_END).

WINDOW_START = "08:00"
WINDOW_END = "20:00"
SESSION_MINUTES = 60
STEP_MINUTES = 30

# Travel / setup time kept clear on both sides of a session
BUFFER_MINUTES = 5

# --- SCORING THRESHOLDS (minutes) ---

NEAR_CLASS_MINUTES = 60           # score 2
PREFERRED_PROXIMITY_MINUTES = 120  # score 1
GROUP_GAP_WINDOW_MINUTES = 90     # "everyone is already on campus"

# --- GROUPS & PEERS ---

MAX_GROUP_SIZE = 4
DEFAULT_PEER_CAPACITY = 2

# Subsets tried per group size before giving up on that size.
# Efficiency cutoffs only; smaller groups get more attempts.
COMBINATION_CAPS = {4: 50, 3: 75, 2: 100, 1: 100}

ENV_PREFIX = "MATCHING_"


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class MatchingConfig:
    """
    Tunables for one matching run.

    Every field has a module-level default above; callers override only
    what they need (``MatchingConfig(buffer_minutes=10)``).

    ``combination_caps`` accepts a mapping and is stored as sorted
    ``(size, cap)`` pairs so the config stays hashable.
    """

    window_start: str = WINDOW_START
    window_end: str = WINDOW_END
    session_minutes: int = SESSION_MINUTES
    step_minutes: int = STEP_MINUTES
    buffer_minutes: int = BUFFER_MINUTES
    max_group_size: int = MAX_GROUP_SIZE
    default_peer_capacity: int = DEFAULT_PEER_CAPACITY
    combination_caps: Tuple[Tuple[int, int], ...] = tuple(sorted(COMBINATION_CAPS.items()))
    near_class_minutes: int = NEAR_CLASS_MINUTES
    preferred_proximity_minutes: int = PREFERRED_PROXIMITY_MINUTES
    group_gap_window_minutes: int = GROUP_GAP_WINDOW_MINUTES

    def __post_init__(self):
        # local import: timeslots depends on this module for defaults
        from timeslots import to_minutes

        if to_minutes(self.window_start) >= to_minutes(self.window_end):
            raise ValueError(
                f"Availability window is empty: {self.window_start}-{self.window_end}"
            )
        if self.session_minutes <= 0:
            raise ValueError(f"session_minutes must be positive, got {self.session_minutes}")
        if self.step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {self.step_minutes}")
        if self.buffer_minutes < 0:
            raise ValueError(f"buffer_minutes cannot be negative, got {self.buffer_minutes}")
        if not 1 <= self.max_group_size <= MAX_GROUP_SIZE:
            raise ValueError(
                f"max_group_size must be between 1 and {MAX_GROUP_SIZE}, got {self.max_group_size}"
            )
        if self.default_peer_capacity < 1:
            raise ValueError(
                f"default_peer_capacity must be at least 1, got {self.default_peer_capacity}"
            )
        caps = tuple(sorted(dict(self.combination_caps).items()))
        object.__setattr__(self, "combination_caps", caps)
        for size, cap in caps:
            if cap < 1:
                raise ValueError(f"combination cap for size {size} must be at least 1, got {cap}")
        if not (self.near_class_minutes <= self.preferred_proximity_minutes):
            raise ValueError("near_class_minutes cannot exceed preferred_proximity_minutes")

    def combination_cap(self, size: int) -> int:
        """Subsets to try for a group of ``size`` learners."""
        caps = dict(self.combination_caps)
        if size in caps:
            return caps[size]
        return min(caps.values()) if caps else 1

    def with_overrides(self, **overrides) -> "MatchingConfig":
        return replace(self, **overrides)

    @classmethod
    def from_env(cls, base: Optional["MatchingConfig"] = None) -> "MatchingConfig":
        """
        Build a config from MATCHING_* environment variables.

        MATCHING_WINDOW_START / MATCHING_WINDOW_END  "HH:MM"
        MATCHING_SESSION_MINUTES, MATCHING_STEP_MINUTES, MATCHING_BUFFER_MINUTES,
        MATCHING_MAX_GROUP_SIZE, MATCHING_DEFAULT_PEER_CAPACITY   integers
        """
        base = base or cls()
        overrides: Dict[str, object] = {}

        for name in ("WINDOW_START", "WINDOW_END"):
            raw = os.getenv(ENV_PREFIX + name)
            if raw and raw.strip():
                overrides[name.lower()] = raw.strip()

        for name in (
            "SESSION_MINUTES",
            "STEP_MINUTES",
            "BUFFER_MINUTES",
            "MAX_GROUP_SIZE",
            "DEFAULT_PEER_CAPACITY",
        ):
            value = _env_int(name)
            if value is not None:
                overrides[name.lower()] = value

        return base.with_overrides(**overrides) if overrides else base

    def as_dict(self) -> Mapping[str, object]:
        return {
            "window_start": self.window_start,
            "window_end": self.window_end,
            "session_minutes": self.session_minutes,
            "step_minutes": self.step_minutes,
            "buffer_minutes": self.buffer_minutes,
            "max_group_size": self.max_group_size,
            "default_peer_capacity": self.default_peer_capacity,
            "combination_caps": dict(self.combination_caps),
            "near_class_minutes": self.near_class_minutes,
            "preferred_proximity_minutes": self.preferred_proximity_minutes,
            "group_gap_window_minutes": self.group_gap_window_minutes,
        }
