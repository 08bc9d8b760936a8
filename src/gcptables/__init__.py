"""Google Cloud resource inventory exposed as queryable tables."""

__version__ = "0.1.0"
