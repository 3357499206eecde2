"""Package marker for the contact upsert demo HTTP service."""

__version__ = "1.0.0"
