"""Round-robin scheduling simulator with memory models, and a minimal IMAP mail fetcher."""

__version__ = "0.1.0"

__all__ = ["process", "memory", "scheduler", "allocate", "imap_parse", "imap_client", "fetchmail"]