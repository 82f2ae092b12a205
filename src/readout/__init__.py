"""readout: read text aloud with a local OS voice or an Azure neural voice."""

__version__ = "0.3.0"
