"""navguard: synchronization and navigation verification for browser-driven functional checks."""

__version__ = "0.3.0"
