"""Exception hierarchy for torrentshare.

Listing operations downgrade most failures to a synthetic error leaf, so
only a handful of these ever reach the host protocol layer:

    - NoSuchFileError: a file-like path with no registered backing
    - NotSupportedError: any mutating tree operation (the tree is read-only)

The rest are raised and handled internally (cache startup, session
creation, scraping, transfer-client HTTP calls).
"""


class ShareError(Exception):
    """Base class for all torrentshare errors."""
    pass


class NoSuchFileError(ShareError):
    """Path looks like a file but nothing is registered behind it."""

    def __init__(self, path: str):
        super().__init__(f"file does not exist: {path}")
        self.path = path


class NotSupportedError(ShareError):
    """Mutating operation on the read-only tree."""

    def __init__(self, operation: str, path: str = ""):
        message = f"{operation} not supported"
        if path:
            message = f"{message}: {path}"
        super().__init__(message)
        self.operation = operation
        self.path = path


class CacheLoadError(ShareError):
    """The cache store is missing or cannot be parsed."""
    pass


class SessionCreateError(ShareError):
    """The transfer client failed to create a session for a content ref."""

    def __init__(self, content_ref: str, cause: Exception):
        super().__init__(f"could not create session for {content_ref}: {cause}")
        self.content_ref = content_ref
        self.cause = cause


class ScrapeError(ShareError):
    """A remote search could not be completed or parsed."""
    pass


class TransferError(ShareError):
    """The transfer client rejected or failed a request."""
    pass
