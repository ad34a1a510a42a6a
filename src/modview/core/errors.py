"""Exception hierarchy for Modview."""


class ModviewError(Exception):
    """Base class for all Modview errors."""


class UpstreamError(ModviewError):
    """Metadata or content source failed or answered inconsistently.

    Fatal for the current request. No partial content is produced and the
    call is not retried.
    """


class TransferError(ModviewError):
    """A raw file body broke off after the response was started.

    The status line is already sent, so the connection is dropped instead
    of answering 502.
    """


class ContentError(ModviewError):
    """A raw file or readme could not be fetched during page enrichment."""
