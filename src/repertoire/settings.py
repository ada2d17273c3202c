"""User-configurable trainer settings."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import TYPE_CHECKING, Any

from repertoire.core.enums import HintLevel

if TYPE_CHECKING:
    from repertoire.storage.interfaces import IKeyValueStore

_LOGGER = logging.getLogger(__name__)

SETTINGS_KEY = "settings"


@dataclass
class TrainerSettings:
    """All user-configurable settings."""

    # Practice timing (milliseconds)
    opening_delay_ms: int = 500  # before the first opponent move of a line
    opponent_delay_ms: int = 400
    wrong_flash_ms: int = 500

    # Hints
    hint_cap: HintLevel = HintLevel.ARROW

    # Practice order
    shuffle_lines: bool = False

    # Speed drill
    drill_opponent_delay_ms: int = 150
    drill_next_line_delay_ms: int = 200
    drill_time_limit_s: int = 0  # 0 = no limit

    # Mistake review ladder (hours, indexed by streak)
    review_intervals_hours: tuple[float, ...] = field(
        default=(1, 4, 12, 24, 48, 96, 192, 384)
    )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["hint_cap"] = int(self.hint_cap)
        data["review_intervals_hours"] = list(self.review_intervals_hours)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrainerSettings:
        """Build settings from stored data; unknown keys are ignored.

        Raises ``ValueError`` when a known key holds a value of the wrong type.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for name, value in values.items():
            if name in _INT_FIELDS:
                values[name] = _as_int(name, value)
        if "shuffle_lines" in values and not isinstance(values["shuffle_lines"], bool):
            raise ValueError(f"shuffle_lines must be a boolean, got {values['shuffle_lines']!r}")
        if "hint_cap" in values:
            values["hint_cap"] = HintLevel(_as_int("hint_cap", values["hint_cap"]))
        if "review_intervals_hours" in values:
            values["review_intervals_hours"] = _as_ladder(values["review_intervals_hours"])
        return cls(**values)


_INT_FIELDS = frozenset(
    {
        "opening_delay_ms",
        "opponent_delay_ms",
        "wrong_flash_ms",
        "drill_opponent_delay_ms",
        "drill_next_line_delay_ms",
        "drill_time_limit_s",
    }
)


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _as_ladder(value: Any) -> tuple[float, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise ValueError(f"review_intervals_hours must be a non-empty list, got {value!r}")
    hours = []
    for h in value:
        if isinstance(h, bool) or not isinstance(h, (int, float)) or h < 0:
            raise ValueError(f"Invalid review interval {h!r}")
        hours.append(float(h))
    return tuple(hours)


def load_settings(store: IKeyValueStore) -> TrainerSettings:
    """Stored settings, or defaults when none (or unreadable ones) exist."""
    data = store.load(SETTINGS_KEY)
    if not isinstance(data, dict):
        return TrainerSettings()
    try:
        return TrainerSettings.from_dict(data)
    except (TypeError, ValueError) as exc:
        _LOGGER.warning("Ignoring invalid stored settings: %s", exc)
        return TrainerSettings()


def save_settings(store: IKeyValueStore, settings: TrainerSettings) -> None:
    store.save(SETTINGS_KEY, settings.to_dict())
