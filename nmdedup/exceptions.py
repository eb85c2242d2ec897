"""Exception types raised by the deduplication plugin."""


class DedupError(Exception):
    """Base class for all deduplication errors."""


class ResolutionError(DedupError):
    """A module specifier could not be resolved to a file."""

    def __init__(self, specifier: str, basedir: str):
        super().__init__(f"Cannot find module '{specifier}' from '{basedir}'")
        self.specifier = specifier
        self.basedir = basedir


class DuplicateGroupError(DedupError):
    """Duplicate groups overlap or are otherwise malformed."""
