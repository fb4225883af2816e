class LeaseUnavailableError(Exception):
    """Raised when another run already owns (or finished) this document."""
