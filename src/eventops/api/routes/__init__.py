"""Route group exports."""

from . import geo, health, orders, phases, schedules

__all__ = ["geo", "health", "orders", "phases", "schedules"]
