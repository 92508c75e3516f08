class ConsoleError(Exception):
    """Base class for every failure the console reports to the user."""


class ValidationError(ConsoleError):
    """Rejected locally before any request is sent."""


class NetworkError(ConsoleError):
    """Transport failure or non-success response from the engine."""


class BackendError(ConsoleError):
    """The engine answered with an explicit error status."""


class GateClosedError(ConsoleError):
    """A session-protected area was requested while unmounted or logged out."""


class StaleNavigationError(ConsoleError):
    """A path could not be fully resolved against the current tree snapshot."""

    def __init__(self, path, resolved_depth: int):
        super().__init__(
            f"path /{'/'.join(path)} resolves only {resolved_depth} segment(s)"
        )
        self.path = tuple(path)
        self.resolved_depth = resolved_depth
