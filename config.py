"""
Configuration options for the Battery Monitor tray utility.

This module contains the fixed settings of the application. User-adjustable
values (the alert thresholds) are persisted separately, see settings.py.
"""

import os

# Update interval in seconds (how often to sample the battery)
UPDATE_INTERVAL: int = 60

# Alert thresholds used on first run and by "Reset to Defaults"
DEFAULT_LOW_THRESHOLD: int = 10
DEFAULT_HIGH_THRESHOLD: int = 85

# Slider ranges (inclusive); disjoint so low < high always holds
LOW_THRESHOLD_RANGE: tuple = (1, 50)
HIGH_THRESHOLD_RANGE: tuple = (51, 100)

# Keys used in the settings file
LOW_SETTING_KEY: str = "LowBatteryThreshold"
HIGH_SETTING_KEY: str = "HighBatteryThreshold"

# Settings file location
SETTINGS_DIR: str = os.path.expanduser("~/.config/battery-monitor")
SETTINGS_FILE: str = "settings.json"

# Levels this far above the low threshold are drawn in the caution colour
WARNING_BAND: int = 10

# Battery paths (will try these in order)
BATTERY_PATHS: list = [
    "/sys/class/power_supply/BAT0",
    "/sys/class/power_supply/BAT1",
]

# Application identity
APP_ID: str = "com.openrangedevs.BatteryMonitor"
APP_NAME: str = "Battery Monitor"
APP_EXECUTABLE: str = "battery-monitor"

# Login item locations
XDG_AUTOSTART_DIR: str = os.path.expanduser("~/.config/autostart")
LAUNCH_AGENTS_DIR: str = os.path.expanduser("~/Library/LaunchAgents")

# Logging level name, overridden by BATTERY_MONITOR_LOG_LEVEL
LOG_LEVEL: str = "INFO"
