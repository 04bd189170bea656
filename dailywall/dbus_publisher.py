"""
D-Bus Publisher

Exposes the current picture on the session bus so other programs (wallpaper engines, lock
screens, status bars) can read it and subscribe to the standard PropertiesChanged signal:

    bus name     net.dailywall.DailyWall1
    object path  /net/dailywall/DailyWall1
    property     net.dailywall.DailyWall1.CurrentPicture (s, read-only)

Python has available a third-party package PyGObject which provides an interface for GLib/GIO,
including GDBus. More information can be found at: https://pygobject.readthedocs.io/en/latest/

GDBus dispatches incoming calls from a GLib main loop, which runs on its own daemon thread here.
Property reads go through SchedulerState, so they are safe from that thread.
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from gi.repository import Gio, GLib

from dailywall.errors import DailywallError
from dailywall.state import SchedulerState

logger = logging.getLogger(__name__)

BUS_NAME = "net.dailywall.DailyWall1"
OBJECT_PATH = "/net/dailywall/DailyWall1"
INTERFACE_NAME = "net.dailywall.DailyWall1"
PROPERTY_NAME = "CurrentPicture"

INTROSPECTION_XML = f"""
<node>
  <interface name="{INTERFACE_NAME}">
    <property name="{PROPERTY_NAME}" type="s" access="read"/>
  </interface>
</node>
"""


class DBusPublisher:
    def __init__(self, state: SchedulerState):
        self.state = state
        self.connection: Optional[Gio.DBusConnection] = None
        self._node_info = Gio.DBusNodeInfo.new_for_xml(INTROSPECTION_XML)
        self._loop = GLib.MainLoop()
        self._owner_id = 0
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Claim the bus name and start serving the property. Raises DailywallError."""

        try:
            connection = Gio.bus_get_sync(Gio.BusType.SESSION, None)
            connection.register_object(
                OBJECT_PATH,
                self._node_info.interfaces[0],
                None,
                self.get_property,
                None,
            )
        except GLib.Error as error:
            raise DailywallError(f"Cannot publish on the session bus: {error.message}") from error

        self.connection = connection
        self._owner_id = Gio.bus_own_name_on_connection(
            connection, BUS_NAME, Gio.BusNameOwnerFlags.NONE, None, self._on_name_lost
        )
        self._thread = threading.Thread(target=self._loop.run, name="DBusPublisher", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._owner_id:
            Gio.bus_unown_name(self._owner_id)
            self._owner_id = 0
        self._loop.quit()

    def get_property(self, connection, sender, object_path, interface_name, property_name):
        if property_name == PROPERTY_NAME:
            return GLib.Variant("s", str(self.state.current_picture))
        return None

    def __call__(self, path: Path) -> None:
        """Emit PropertiesChanged for the new picture."""

        if self.connection is None:
            raise DailywallError("D-Bus publisher has not been started")

        changed = {PROPERTY_NAME: GLib.Variant("s", str(path))}
        self.connection.emit_signal(
            None,
            OBJECT_PATH,
            "org.freedesktop.DBus.Properties",
            "PropertiesChanged",
            GLib.Variant("(sa{sv}as)", (INTERFACE_NAME, changed, [])),
        )

    def _on_name_lost(self, connection, name):
        logger.error("Lost (or could not acquire) the D-Bus name %s", name)
