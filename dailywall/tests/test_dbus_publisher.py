"""
Tests for dbus_publisher.py

Skipped when PyGObject is not installed. No session bus is needed: the connection is a mock.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

pytest.importorskip("gi")

# following entities are tested in this module:
from dailywall.dbus_publisher import DBusPublisher
from dailywall.dbus_publisher import INTERFACE_NAME
from dailywall.dbus_publisher import OBJECT_PATH
from dailywall.dbus_publisher import PROPERTY_NAME
from dailywall.errors import DailywallError

PICTURE = Path("/pictures/20240115-Foo.jpg")


def test_get_property(state):

    publisher = DBusPublisher(state)
    state.set_current_picture(PICTURE)

    value = publisher.get_property(None, ":1.1", OBJECT_PATH, INTERFACE_NAME, PROPERTY_NAME)

    assert value.unpack() == str(PICTURE)


def test_publish_emits_properties_changed(state):

    publisher = DBusPublisher(state)
    publisher.connection = MagicMock()

    publisher(PICTURE)

    args = publisher.connection.emit_signal.call_args.args
    assert args[1:4] == (OBJECT_PATH, "org.freedesktop.DBus.Properties", "PropertiesChanged")
    assert args[4].unpack() == (INTERFACE_NAME, {PROPERTY_NAME: str(PICTURE)}, [])


def test_publish_before_start(state):

    with pytest.raises(DailywallError):
        DBusPublisher(state)(PICTURE)
