"""Weather dashboard core: place search, forecast snapshots and display helpers."""

__version__ = "0.1.0"
