"""An on-disk string key-value cache with per-key time-to-live and background expiry."""

__version__ = "0.1.0"
__all__ = ["__version__"]