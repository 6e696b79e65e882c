"""
Engine exceptions.

Only genuine failures raise. An empty peer corpus is not one of them: it
yields a degraded baseline (sample_size == 0) through an ordinary return.
"""


class EngineError(Exception):
    """Base class for benchmark engine failures."""


class ProfileNotFound(EngineError):
    """The subject account is not present in the corpus."""
    def __init__(self, profile_id):
        self.profile_id = profile_id
        super().__init__(f"Profile '{profile_id}' not found in database")


class TransientStoreError(EngineError):
    """Corpus or baseline store unreachable. Surfaced as-is, never retried here."""
    def __init__(self, operation, cause=None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ''
        super().__init__(f"Store operation '{operation}' failed{detail}")
