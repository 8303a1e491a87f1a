"""Exceptions raised by the Battery Monitor modules."""


class BatteryMonitorError(Exception):
    """Base error for the application."""


class SettingsError(BatteryMonitorError):
    """The settings file could not be written."""


class LoginItemError(BatteryMonitorError):
    """Registering or unregistering the login item failed."""
