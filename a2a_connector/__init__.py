"""A2A Connector: config-driven bridge between A2A agents and legacy systems."""

__version__ = "0.1.0"
