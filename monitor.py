"""
Battery sampling and threshold alerts.

BatteryMonitor owns the current level and the two alert thresholds. Each
sample reads the power source and posts at most one alert. There is no
debounce: a level that stays past a threshold alerts again on every tick.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import config
from backends import Notifier, PowerSource, Scheduler

logger = logging.getLogger(__name__)


@dataclass
class BatteryState:
    level: int = 0
    low_threshold: int = config.DEFAULT_LOW_THRESHOLD
    high_threshold: int = config.DEFAULT_HIGH_THRESHOLD


@dataclass(frozen=True)
class Alert:
    title: str
    message: str


def evaluate(level: int, low: int, high: int) -> Optional[Alert]:
    """
    Decide which alert, if any, a battery level should raise.

    The low check runs first, so a level that satisfies both thresholds
    raises only the low alert.

    Args:
        level: Battery percentage.
        low: Low threshold, inclusive.
        high: High threshold, inclusive.

    Returns:
        An Alert, or None when the level is between the thresholds.
    """
    if level <= low:
        return Alert("Low Battery", f"Battery level is at {level}%")
    elif level >= high:
        return Alert("High Battery", f"Battery level is at {level}%")
    return None


def level_color(level: int, low: int, high: int) -> str:
    """Colour name used to draw the level bar."""
    if level <= low:
        return "red"
    elif level <= low + config.WARNING_BAND:
        return "orange"
    elif level >= high:
        return "green"
    else:
        return "blue"


def _check_range(value: int, bounds: tuple, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    lo, hi = bounds
    if not lo <= value <= hi:
        raise ValueError(f"{name} must be between {lo} and {hi}, got {value}")
    return value


class BatteryMonitor:
    """Polls the power source and raises threshold notifications."""

    def __init__(self, power_source: PowerSource, notifier: Notifier, settings) -> None:
        self.power_source = power_source
        self.notifier = notifier
        self.settings = settings
        self._state = BatteryState()
        self._observers: List[Callable[[BatteryState], None]] = []
        self.load_saved_thresholds()

    @property
    def state(self) -> BatteryState:
        return dataclasses.replace(self._state)

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def low_threshold(self) -> int:
        return self._state.low_threshold

    @property
    def high_threshold(self) -> int:
        return self._state.high_threshold

    def subscribe(self, callback: Callable[[BatteryState], None]) -> None:
        """Register a callback receiving a state snapshot after every change."""
        if callback not in self._observers:
            self._observers.append(callback)

    def unsubscribe(self, callback: Callable[[BatteryState], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _publish(self) -> None:
        snapshot = self.state
        for callback in list(self._observers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("State observer %r failed", callback)

    def _saved_threshold(self, key: str, bounds: tuple, default: int) -> int:
        value = self.settings.get_int(key)
        if not value:
            return default
        lo, hi = bounds
        if not lo <= value <= hi:
            logger.warning("Saved %s=%d is outside %d-%d; using %d", key, value, lo, hi, default)
            return default
        return value

    def load_saved_thresholds(self) -> None:
        """Load thresholds from settings; missing, zero or out of range values use the defaults."""
        self._state.low_threshold = self._saved_threshold(
            config.LOW_SETTING_KEY, config.LOW_THRESHOLD_RANGE, config.DEFAULT_LOW_THRESHOLD)
        self._state.high_threshold = self._saved_threshold(
            config.HIGH_SETTING_KEY, config.HIGH_THRESHOLD_RANGE, config.DEFAULT_HIGH_THRESHOLD)
        logger.debug("Loaded thresholds low=%d high=%d",
                     self._state.low_threshold, self._state.high_threshold)

    def set_low_threshold(self, value: int) -> None:
        value = _check_range(value, config.LOW_THRESHOLD_RANGE, "Low threshold")
        self.settings.set_int(config.LOW_SETTING_KEY, value)
        self._state.low_threshold = value
        self._publish()

    def set_high_threshold(self, value: int) -> None:
        value = _check_range(value, config.HIGH_THRESHOLD_RANGE, "High threshold")
        self.settings.set_int(config.HIGH_SETTING_KEY, value)
        self._state.high_threshold = value
        self._publish()

    def reset_to_defaults(self) -> None:
        """Restore and persist the default thresholds."""
        # State only takes values that were saved
        try:
            self.settings.set_int(config.LOW_SETTING_KEY, config.DEFAULT_LOW_THRESHOLD)
            self._state.low_threshold = config.DEFAULT_LOW_THRESHOLD
            self.settings.set_int(config.HIGH_SETTING_KEY, config.DEFAULT_HIGH_THRESHOLD)
            self._state.high_threshold = config.DEFAULT_HIGH_THRESHOLD
        finally:
            self._publish()

    def sample(self) -> None:
        """Read the power source; update the level and check thresholds if present."""
        try:
            capacity = self.power_source.capacity()
        except Exception:
            logger.exception("Reading the power source failed")
            return
        if capacity is None:
            logger.debug("No power source reported a capacity")
            return
        self._state.level = int(capacity)
        self._publish()
        self.check_levels()

    def check_levels(self) -> Optional[Alert]:
        """Post the alert for the current state, if any."""
        alert = evaluate(self._state.level, self._state.low_threshold, self._state.high_threshold)
        if alert is None:
            return None
        logger.info("%s: %s", alert.title, alert.message)
        try:
            self.notifier.notify(alert.title, alert.message)
        except Exception:
            logger.exception("Could not post %r notification", alert.title)
        return alert

    def start(self, scheduler: Scheduler) -> None:
        """Sample once now, then every UPDATE_INTERVAL seconds."""
        self.sample()
        scheduler.every(config.UPDATE_INTERVAL, self.sample)
