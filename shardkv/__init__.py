"""Key-value store replicated across shard nodes and coordinated with two-phase commit."""

__version__ = "0.1.0"