"""Key-value space primitives: identifiers, typed data, mempool, settings, file trees, fees and activity."""

__version__ = "0.0.1"

__all__ = ["activity", "config", "fees", "mempool", "parser", "tdata", "tree"]