"""
Farmacia pharmacy-inventory client core.

The package exposes the typed API client used to talk to the inventory backend,
the local shopping-list engine, and the feature view-models built on top of them.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
