"""Exception hierarchy for clssaver."""


class ClsSaverError(Exception):
    """Base exception for all clssaver errors."""


class SourceError(ClsSaverError):
    """Error reading bytecode or resources from a source container."""


class ContainerUnreadableError(SourceError):
    """Container is missing, unreadable, corrupt or not zip-format."""


class EntryNotFoundError(SourceError):
    """Requested entry does not exist in the container."""


class OutputError(ClsSaverError):
    """Error materializing a single artifact. Not fatal to the run."""


class PathConflictError(OutputError):
    """A destination directory path collides with a non-directory."""


class WriteFailureError(OutputError):
    """I/O error while writing or copying an artifact."""


class ArchiveStateError(ClsSaverError):
    """Archive lifecycle contract violated by the caller."""


class DuplicateArchiveError(ArchiveStateError):
    """Archive is already open for this destination."""


class ArchiveNotOpenError(ArchiveStateError):
    """No open archive exists for this destination."""
