"""Multi-hazard risk scoring for a geographic point."""

__version__ = "0.3.0"
