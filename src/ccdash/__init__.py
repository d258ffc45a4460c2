"""ccdash — summary engine for a local AI-assistant configuration dashboard."""

__version__ = "0.1.0-dev"
