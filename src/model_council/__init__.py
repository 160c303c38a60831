"""Fan one prompt out to several chat and image model providers."""

__version__ = "0.1.0"
