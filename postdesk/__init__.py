"""Posts with cover images kept consistent across a database and object storage."""

__version__ = "0.1.0"
