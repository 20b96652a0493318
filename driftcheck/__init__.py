"""driftcheck - documentation drift detection for Git pushes."""

__version__ = "0.1.0"
