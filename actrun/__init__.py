"""actrun - UI automation action runner."""

__version__ = "0.1.0"
