"""Error types raised by the event log, the projections and the history readers"""


class VersionConflictError(Exception):
    """An append was attempted with a version that is not the next one in the stream"""

    def __init__(self, expected_version: int, current_version: int):
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Expected version ({expected_version}) is not the next version after current ({current_version})"
        )


class StreamReadError(Exception):
    """Unable to read or deserialize a stream"""

    def __init__(self, stream: str, message: str, event_source: str = "sqlite"):
        self.stream = stream
        self.event_source = event_source
        super().__init__(f"Unable to read stream {stream!r} from {event_source}: {message}")


class StreamWriteError(Exception):
    """Unable to serialize or persist an event"""

    def __init__(self, stream: str, message: str, event_source: str = "sqlite"):
        self.stream = stream
        self.event_source = event_source
        super().__init__(f"Unable to write to stream {stream!r} in {event_source}: {message}")


class SnapshotReadError(Exception):
    """Unable to load or deserialize a stored snapshot"""


class SnapshotWriteError(Exception):
    """Unable to persist a snapshot"""


class NormalizationError(ValueError):
    """A single track play record could not be normalized"""


class ReadError(Exception):
    """Base class for history files that cannot be read"""

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        super().__init__(f"{message} ({file_name})")


class NotAFileError(ReadError):
    def __init__(self, file_name: str):
        super().__init__(file_name, "Not a file")


class UnsupportedFileTypeError(ReadError):
    def __init__(self, file_name: str, file_type: str):
        self.file_type = file_type
        super().__init__(file_name, f"Unsupported file type {file_type!r}")


class CannotReadContentsError(ReadError):
    pass


class DeserializationError(ReadError):
    pass
