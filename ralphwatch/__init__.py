"""ralphwatch - incremental observer for ralph agent fleets."""

__version__ = "0.1.0"
