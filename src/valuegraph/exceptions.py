"""Custom exception hierarchy for valuegraph."""


class ValueGraphError(Exception):
    """Base exception for all valuegraph errors."""


class UnsupportedOperationError(ValueGraphError):
    """Raised when a mutating operation is attempted on an immutable graph."""


class NoSuchNodeError(ValueGraphError, KeyError):
    """Raised when a queried node is not in the graph."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class NoSuchEdgeError(ValueGraphError, KeyError):
    """Raised when a queried edge is not in the graph."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class GraphFormatError(ValueGraphError, ValueError):
    """Raised when a serialized graph stream is malformed."""


class UnsupportedGraphShapeError(GraphFormatError):
    """Raised when a serialized graph claims mixed or multiple edges."""


class StructuralCopyError(ValueGraphError, RuntimeError):
    """Raised when the structural copy of a value graph fails."""


class ConverterNotPersistableError(ValueGraphError, TypeError):
    """Raised when a weight converter cannot be pickled."""
