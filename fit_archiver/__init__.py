"""Archive FIT activity files into a templated directory layout."""

__version__ = "0.1.0"
