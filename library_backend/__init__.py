"""Library lending backend: catalog, inventory and the borrow/return workflow."""

__version__ = "1.0.0"
