"""Build, deploy and verify a static single-page application on an edge platform."""

__version__ = "0.1.0"
