"""
Operating system collaborators.

The monitor only talks to these narrow interfaces: a power source that
reports the current capacity, a notifier that posts a user-visible alert,
a login item registry, and a scheduler for the repeating sample.
"""

import logging
import os
import plistlib
import re
import shutil
import subprocess
import sys
from typing import Callable, Optional, Protocol, Tuple

import config
from errors import LoginItemError

logger = logging.getLogger(__name__)


class PowerSource(Protocol):
    def capacity(self) -> Optional[int]:
        """Current capacity of the first power source, or None if absent."""


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None:
        """Post an immediate, one-shot notification."""


class LoginItemRegistry(Protocol):
    def is_enabled(self) -> bool: ...

    def register(self) -> None: ...

    def unregister(self) -> None: ...


class Scheduler(Protocol):
    def every(self, interval: int, callback: Callable[[], None]) -> None:
        """Call callback every interval seconds until the process exits."""


def _log_rejected(title: str, result: subprocess.CompletedProcess) -> None:
    """Notification tools exit non-zero when the desktop refuses or lacks permission."""
    if result.returncode != 0:
        logger.debug("Notification %r was not shown (exit %s): %s",
                     title, result.returncode, (result.stderr or "").strip())


# ---------------------------------------------------------------------------
# Linux
# ---------------------------------------------------------------------------

class SysfsPowerSource:
    """Reads the battery capacity from /sys/class/power_supply."""

    def __init__(self, paths: Optional[list] = None) -> None:
        self.paths: list = paths if paths is not None else config.BATTERY_PATHS

    def _find_battery_path(self) -> Optional[str]:
        for path in self.paths:
            if os.path.exists(path):
                return path
        return None

    def capacity(self) -> Optional[int]:
        battery_path = self._find_battery_path()
        if not battery_path:
            return None
        try:
            with open(os.path.join(battery_path, "capacity"), 'r') as f:
                return int(f.read().strip())
        except (IOError, OSError, ValueError):
            return None


class NotifySendNotifier:
    """Sends desktop notifications using notify-send."""

    def __init__(self) -> None:
        self._missing_warned: bool = False

    def notify(self, title: str, message: str) -> None:
        try:
            result = subprocess.run(
                ["notify-send", "-a", config.APP_NAME, "-i", "battery", title, message],
                capture_output=True, text=True, timeout=5
            )
        except FileNotFoundError:
            if not self._missing_warned:
                logger.warning("notify-send not found; notifications are disabled")
                self._missing_warned = True
        except (subprocess.SubprocessError, OSError) as exc:
            logger.warning("Could not post notification %r: %s", title, exc)
        else:
            _log_rejected(title, result)


class XdgAutostartRegistry:
    """Launch at login through an XDG autostart desktop entry."""

    def __init__(self, autostart_dir: Optional[str] = None,
                 executable: Optional[str] = None) -> None:
        self.autostart_dir: str = autostart_dir or config.XDG_AUTOSTART_DIR
        self.executable: str = executable or shutil.which(config.APP_EXECUTABLE) or config.APP_EXECUTABLE

    @property
    def entry_path(self) -> str:
        return os.path.join(self.autostart_dir, f"{config.APP_ID}.desktop")

    def desktop_entry(self) -> str:
        return (
            "[Desktop Entry]\n"
            "Type=Application\n"
            f"Name={config.APP_NAME}\n"
            f"Exec={self.executable}\n"
            "Icon=battery\n"
            "X-GNOME-Autostart-enabled=true\n"
        )

    def is_enabled(self) -> bool:
        return os.path.exists(self.entry_path)

    def register(self) -> None:
        try:
            os.makedirs(self.autostart_dir, exist_ok=True)
            with open(self.entry_path, 'w') as f:
                f.write(self.desktop_entry())
        except OSError as exc:
            raise LoginItemError(exc.strerror or str(exc)) from exc

    def unregister(self) -> None:
        try:
            os.remove(self.entry_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise LoginItemError(exc.strerror or str(exc)) from exc


# ---------------------------------------------------------------------------
# macOS
# ---------------------------------------------------------------------------

_PERCENT_RE = re.compile(r"(\d{1,3})%")


def parse_pmset_capacity(output: str) -> Optional[int]:
    """
    Extract the first battery percentage from `pmset -g batt` output.

    Format e.g.:
        Now drawing from 'Battery Power'
         -InternalBattery-0 (id=1234567)	87%; discharging; 4:12 remaining
    """
    for line in output.splitlines():
        match = _PERCENT_RE.search(line)
        if match:
            value = int(match.group(1))
            if 0 <= value <= 100:
                return value
    return None


class PmsetPowerSource:
    """Reads the battery capacity by asking pmset."""

    def capacity(self) -> Optional[int]:
        try:
            out = subprocess.run(
                ["pmset", "-g", "batt"], capture_output=True, text=True, timeout=2
            ).stdout
        except (subprocess.SubprocessError, OSError):
            return None
        return parse_pmset_capacity(out)


def _applescript_string(value: str) -> str:
    return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'


class OsascriptNotifier:
    """Displays a macOS notification through AppleScript."""

    def notify(self, title: str, message: str) -> None:
        script = f"display notification {_applescript_string(message)} with title {_applescript_string(title)}"
        try:
            result = subprocess.run(["osascript", "-e", script], capture_output=True, text=True, timeout=5)
        except (subprocess.SubprocessError, OSError) as exc:
            logger.warning("Could not post notification %r: %s", title, exc)
        else:
            _log_rejected(title, result)


class LaunchAgentRegistry:
    """Launch at login through a per-user LaunchAgent."""

    def __init__(self, agents_dir: Optional[str] = None,
                 program: Optional[list] = None) -> None:
        self.agents_dir: str = agents_dir or config.LAUNCH_AGENTS_DIR
        self.program: list = program or [sys.executable, "-m", "battery_indicator"]

    @property
    def plist_path(self) -> str:
        return os.path.join(self.agents_dir, f"{config.APP_ID}.plist")

    def is_enabled(self) -> bool:
        return os.path.exists(self.plist_path)

    def register(self) -> None:
        payload = {
            "Label": config.APP_ID,
            "ProgramArguments": list(self.program),
            "RunAtLoad": True,
        }
        try:
            os.makedirs(self.agents_dir, exist_ok=True)
            with open(self.plist_path, 'wb') as f:
                plistlib.dump(payload, f)
        except OSError as exc:
            raise LoginItemError(exc.strerror or str(exc)) from exc

    def unregister(self) -> None:
        try:
            os.remove(self.plist_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise LoginItemError(exc.strerror or str(exc)) from exc


def default_backends() -> Tuple[PowerSource, Notifier, LoginItemRegistry]:
    """Return the (power source, notifier, login registry) for this platform."""
    if sys.platform == "darwin":
        return PmsetPowerSource(), OsascriptNotifier(), LaunchAgentRegistry()
    return SysfsPowerSource(), NotifySendNotifier(), XdgAutostartRegistry()
