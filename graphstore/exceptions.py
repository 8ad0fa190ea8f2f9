"""Error hierarchy shared by the graph store and the HTTP layer."""


class GraphStoreError(Exception):
    """Base error carrying a client-safe message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GraphStoreError):
    """A required field is missing or blank, or a node reference is unknown."""


class NotFoundError(GraphStoreError):
    """The node or relationship targeted by an operation does not exist."""


class MalformedIdentifier(GraphStoreError):
    """A path identifier could not be parsed as an integer."""


class InternalFault(GraphStoreError):
    """An unexpected failure, reported to clients with a generic message."""
