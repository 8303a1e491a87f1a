#!/usr/bin/env python3
"""
Battery Monitor Tray Indicator

A small tray / menu-bar utility using GTK3 and AppIndicator3. Shows the
battery level, raises notifications when it crosses the low or high alert
threshold, and toggles launching at login.
"""

import logging
import os
import sys
from typing import Callable, Optional

import gi
gi.require_version('Gtk', '3.0')
gi.require_version('AppIndicator3', '0.1')
gi.require_version('Gdk', '3.0')
from gi.repository import Gtk, GLib, AppIndicator3, Gdk

import config
from backends import default_backends
from errors import BatteryMonitorError
from logging_config import configure_logging
from login_item import LoginItemManager
from monitor import BatteryMonitor, BatteryState, level_color
from settings import SettingsStore

logger = logging.getLogger(__name__)


# CSS for the menu, respecting the system theme
MENU_CSS = """
.battery-header {
    font-weight: bold;
    font-size: 1.1em;
    padding: 8px 12px;
}
.battery-thresholds {
    padding: 4px 12px;
    font-size: 0.9em;
    opacity: 0.8;
}
.threshold-dialog-header {
    font-size: 1.2em;
    font-weight: bold;
    padding-bottom: 8px;
}
"""

# RGB for the level bar bands
BAR_COLORS = {
    "red": (0.88, 0.19, 0.16),
    "orange": (0.96, 0.55, 0.10),
    "green": (0.20, 0.70, 0.30),
    "blue": (0.20, 0.45, 0.85),
}

BAR_HEIGHT = 20
MARKER_WIDTH = 2


class GLibScheduler:
    """Runs callbacks on the GLib main loop at a fixed interval."""

    def __init__(self) -> None:
        self.source_ids: list = []

    def every(self, interval: int, callback: Callable[[], None]) -> None:
        def _tick() -> bool:
            # An exception here would remove the GLib source
            try:
                callback()
            except Exception:
                logger.exception("Scheduled callback %r failed", callback)
            return True  # Continue the timeout

        self.source_ids.append(GLib.timeout_add_seconds(interval, _tick))


def get_icon_name(level: int, low: int) -> str:
    """Pick a symbolic battery icon for the level."""
    if level <= low:
        return "battery-caution-symbolic"
    elif level >= 80:
        return "battery-full-symbolic"
    elif level >= 50:
        return "battery-good-symbolic"
    else:
        return "battery-low-symbolic"


class LevelBar(Gtk.DrawingArea):
    """Battery level bar with markers at the low and high thresholds."""

    def __init__(self) -> None:
        super().__init__()
        self.state: BatteryState = BatteryState()
        self.set_size_request(220, BAR_HEIGHT)
        self.connect("draw", self._on_draw)

    def update(self, state: BatteryState) -> None:
        self.state = state
        self.queue_draw()

    def _on_draw(self, widget: Gtk.DrawingArea, cr) -> bool:
        width = widget.get_allocated_width()
        height = widget.get_allocated_height()
        state = self.state

        # Track
        cr.set_source_rgba(0.5, 0.5, 0.5, 0.3)
        cr.rectangle(0, 0, width, height)
        cr.fill()

        # Level
        cr.set_source_rgb(*BAR_COLORS[level_color(state.level, state.low_threshold, state.high_threshold)])
        cr.rectangle(0, 0, width * state.level / 100.0, height)
        cr.fill()

        # Threshold markers
        cr.set_source_rgb(*BAR_COLORS["red"])
        cr.rectangle(width * state.low_threshold / 100.0, 0, MARKER_WIDTH, height)
        cr.fill()
        cr.set_source_rgb(*BAR_COLORS["green"])
        cr.rectangle(width * state.high_threshold / 100.0 - MARKER_WIDTH, 0, MARKER_WIDTH, height)
        cr.fill()

        # Caption
        text = f"{state.level}%"
        cr.set_source_rgb(1, 1, 1)
        cr.set_font_size(11)
        extents = cr.text_extents(text)
        cr.move_to((width - extents.width) / 2, (height + extents.height) / 2)
        cr.show_text(text)
        return False


class BatteryIndicator:
    """Tray indicator wired to the battery monitor and the login item toggle."""

    def __init__(self, monitor: BatteryMonitor, login_items: LoginItemManager) -> None:
        """Initialize the battery indicator."""
        self.monitor = monitor
        self.login_items = login_items
        self.scheduler = GLibScheduler()
        self.threshold_dialog: Optional[Gtk.Dialog] = None
        self._syncing: bool = False

        # Apply CSS styling
        self._apply_css()

        # Create the indicator
        self.indicator = AppIndicator3.Indicator.new(
            config.APP_ID,
            "battery-missing-symbolic",
            AppIndicator3.IndicatorCategory.HARDWARE
        )
        self.indicator.set_status(AppIndicator3.IndicatorStatus.ACTIVE)

        # Build the menu
        self.menu = self._build_menu()
        self.indicator.set_menu(self.menu)

        self.monitor.subscribe(self._on_state_changed)
        self._on_state_changed(self.monitor.state)

        # Initial sample, then periodic updates
        self.monitor.start(self.scheduler)

    def _apply_css(self) -> None:
        """Apply CSS styling to the application."""
        css_provider = Gtk.CssProvider()
        css_provider.load_from_data(MENU_CSS.encode())
        Gtk.StyleContext.add_provider_for_screen(
            Gdk.Screen.get_default(),
            css_provider,
            Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
        )

    def _build_menu(self) -> Gtk.Menu:
        """
        Build the dropdown menu for the indicator.

        Returns:
            A Gtk.Menu with the battery level, thresholds and controls.
        """
        menu = Gtk.Menu()
        menu.connect("show", self._on_menu_shown)

        # Battery level header
        self.header_item = Gtk.MenuItem()
        self.header_label = Gtk.Label(label="Battery Level: ---%")
        self.header_label.set_halign(Gtk.Align.START)
        self.header_label.get_style_context().add_class("battery-header")
        self.header_item.add(self.header_label)
        self.header_item.set_sensitive(False)
        menu.append(self.header_item)

        # Level bar with threshold markers
        bar_item = Gtk.MenuItem()
        self.level_bar = LevelBar()
        bar_item.add(self.level_bar)
        bar_item.set_sensitive(False)
        menu.append(bar_item)

        # Current thresholds
        thresholds_item = Gtk.MenuItem()
        self.thresholds_label = Gtk.Label(label="")
        self.thresholds_label.set_halign(Gtk.Align.START)
        self.thresholds_label.get_style_context().add_class("battery-thresholds")
        thresholds_item.add(self.thresholds_label)
        thresholds_item.set_sensitive(False)
        menu.append(thresholds_item)

        adjust_item = Gtk.MenuItem(label="Alert Thresholds…")
        adjust_item.connect("activate", self._on_thresholds_clicked)
        menu.append(adjust_item)

        menu.append(Gtk.SeparatorMenuItem())

        # Start at login toggle
        self.login_item = Gtk.CheckMenuItem(label="Start at login")
        self.login_item.set_active(self.login_items.starts_at_login)
        self.login_item.connect("toggled", self._on_login_toggled)
        menu.append(self.login_item)

        menu.append(Gtk.SeparatorMenuItem())

        # Quit button
        quit_item = Gtk.MenuItem(label="Quit")
        quit_item.connect("activate", self._on_quit_clicked)
        menu.append(quit_item)

        menu.show_all()
        return menu

    def _on_state_changed(self, state: BatteryState) -> None:
        """Refresh the tray label, icon and menu from a state snapshot."""
        self.indicator.set_label(f"Battery: {state.level}%", "Battery: 100%")
        self.indicator.set_title(f"Battery: {state.level}%")
        self.indicator.set_icon_full(get_icon_name(state.level, state.low_threshold), "Battery")
        self.header_label.set_text(f"Battery Level: {state.level}%")
        self.thresholds_label.set_text(
            f"Alerts at ≤ {state.low_threshold}% and ≥ {state.high_threshold}%"
        )
        self.level_bar.update(state)

    def _on_menu_shown(self, widget: Gtk.Menu) -> None:
        """Re-sync the login toggle with the registry each time the menu opens."""
        self._syncing = True
        try:
            self.login_item.set_active(self.login_items.refresh())
        finally:
            self._syncing = False

    def _on_login_toggled(self, widget: Gtk.CheckMenuItem) -> None:
        if self._syncing:
            return
        self.login_items.starts_at_login = widget.get_active()

    def _on_thresholds_clicked(self, widget: Gtk.MenuItem) -> None:
        """Show the threshold dialog, or raise it if already open."""
        if self.threshold_dialog is not None:
            self.threshold_dialog.present()
            return
        self.threshold_dialog = self._build_threshold_dialog()
        self.threshold_dialog.show_all()

    def _build_threshold_dialog(self) -> Gtk.Dialog:
        """Dialog with the two threshold sliders and a reset button."""
        dialog = Gtk.Dialog(title="Alert Thresholds", transient_for=None, flags=0)
        dialog.set_default_size(320, 200)
        dialog.set_resizable(False)

        content = dialog.get_content_area()
        content.set_margin_start(16)
        content.set_margin_end(16)
        content.set_margin_top(12)
        content.set_margin_bottom(12)

        header = Gtk.Label(label="Alert Thresholds:")
        header.set_halign(Gtk.Align.START)
        header.get_style_context().add_class("threshold-dialog-header")
        content.pack_start(header, False, False, 0)

        bar = LevelBar()
        bar.update(self.monitor.state)
        content.pack_start(bar, False, False, 8)

        grid = Gtk.Grid(column_spacing=8, row_spacing=8)
        content.pack_start(grid, True, True, 0)

        low_lo, low_hi = config.LOW_THRESHOLD_RANGE
        high_lo, high_hi = config.HIGH_THRESHOLD_RANGE
        low_scale = self._add_slider(grid, 0, "Low:", self.monitor.low_threshold,
                                     low_lo, low_hi, self.monitor.set_low_threshold)
        high_scale = self._add_slider(grid, 1, "High:", self.monitor.high_threshold,
                                      high_lo, high_hi, self.monitor.set_high_threshold)

        reset_btn = Gtk.Button(label="Reset to Defaults")
        reset_btn.connect("clicked", lambda w: self._call_safely(self.monitor.reset_to_defaults))
        grid.attach(reset_btn, 0, 2, 3, 1)

        # Keep the dialog in step with changes made elsewhere (reset, restart)
        def on_state(state: BatteryState) -> None:
            bar.update(state)
            if int(low_scale.get_value()) != state.low_threshold:
                low_scale.set_value(state.low_threshold)
            if int(high_scale.get_value()) != state.high_threshold:
                high_scale.set_value(state.high_threshold)

        self.monitor.subscribe(on_state)

        def on_destroy(w: Gtk.Dialog) -> None:
            self.monitor.unsubscribe(on_state)
            self.threshold_dialog = None

        dialog.add_button("Close", Gtk.ResponseType.CLOSE)
        dialog.connect("response", lambda d, r: d.destroy())
        dialog.connect("destroy", on_destroy)
        return dialog

    def _add_slider(self, grid: Gtk.Grid, row: int, label: str, value: int,
                    lower: int, upper: int, setter: Callable[[int], None]) -> Gtk.Scale:
        """Add a labelled 1% step slider with a value readout."""
        grid.attach(Gtk.Label(label=label), 0, row, 1, 1)

        adjustment = Gtk.Adjustment(value, lower, upper, 1, 5, 0)
        scale = Gtk.Scale(orientation=Gtk.Orientation.HORIZONTAL, adjustment=adjustment)
        scale.set_digits(0)
        scale.set_draw_value(False)
        scale.set_hexpand(True)
        grid.attach(scale, 1, row, 1, 1)

        readout = Gtk.Label(label=f"{value}%")
        grid.attach(readout, 2, row, 1, 1)

        def on_changed(s: Gtk.Scale) -> None:
            new_value = int(round(s.get_value()))
            readout.set_text(f"{new_value}%")
            self._call_safely(setter, new_value)

        scale.connect("value-changed", on_changed)
        return scale

    def _call_safely(self, func: Callable, *args) -> None:
        """Run a state change from a UI callback, logging instead of raising."""
        try:
            func(*args)
        except (BatteryMonitorError, ValueError) as exc:
            logger.error("Could not update thresholds: %s", exc)

    def _on_quit_clicked(self, widget: Gtk.MenuItem) -> None:
        """Handle quit button click."""
        Gtk.main_quit()


def build_app() -> BatteryIndicator:
    """Create the backends and state objects for this platform."""
    power_source, notifier, registry = default_backends()
    monitor = BatteryMonitor(power_source, notifier, SettingsStore())
    login_items = LoginItemManager(registry)
    return BatteryIndicator(monitor, login_items)


def main() -> None:
    """Main entry point for the battery monitor application."""
    configure_logging()

    # Check if running on a system with a display
    if sys.platform != "darwin" and not os.environ.get('DISPLAY') and not os.environ.get('WAYLAND_DISPLAY'):
        logger.error("No display server found. This application requires X11 or Wayland.")
        sys.exit(1)

    try:
        indicator = build_app()
        logger.info("Battery monitor started (low=%d%%, high=%d%%)",
                    indicator.monitor.low_threshold, indicator.monitor.high_threshold)
        Gtk.main()
    except KeyboardInterrupt:
        logger.info("Exiting...")
        sys.exit(0)


if __name__ == "__main__":
    main()
