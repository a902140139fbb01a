"""Ports (interfaces) implemented by the backend drivers."""

from dbfixtures.ports.driver import BaseDriver, Driver

__all__ = ["BaseDriver", "Driver"]
