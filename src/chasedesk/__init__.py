"""chasedesk — retrieval attempt tracking with audited, versioned edits."""

__version__ = "0.1.0"
