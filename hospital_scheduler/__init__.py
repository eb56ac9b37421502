"""Hospital appointment scheduler: least-loaded doctor allocation with daily capacity caps."""

__version__ = "1.0.0"
