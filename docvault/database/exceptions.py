class PersistenceError(Exception):
    """Raised when a database read or write fails."""
