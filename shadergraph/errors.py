"""
Exceptions raised while building shader graphs and generating shader source.

Two kinds of failure exist:

- ``ContractViolation``: the graph was constructed incorrectly (a bug in the
  calling code or in a backend). These are never caught inside the package.
- ``LinkError``: the vertex and fragment documents do not agree on their shared
  interface. These are reported before any source text is produced.
"""

from loguru import logger

from shadergraph.types import ValueType


class ShaderGraphError(Exception):
    """Base class for all shadergraph errors."""


class ContractViolation(ShaderGraphError):
    """Raised when a shader graph or backend breaks a programming contract.

    Examples:
        >>> raise ContractViolation("operation has no type")
        ContractViolation: operation has no type
    """

    def __init__(self, message: str):
        self.message = message
        logger.error(message)
        super().__init__(message)


class LinkError(ShaderGraphError):
    """Raised when the fragment stage's named inputs are not satisfied.

    Attributes:
        name: Name of the missing or mismatched interface variable
        expected: Type required by the consuming stage
        actual: Type produced by the vertex stage, None when it is missing
        reason: Short description of the failure
    """

    def __init__(
        self,
        name: str,
        expected: ValueType | None,
        actual: ValueType | None,
        reason: str,
    ):
        self.name = name
        self.expected = expected
        self.actual = actual
        self.reason = reason

        message = f"Link error for '{name}': {reason}"
        if expected is not None:
            message += f" (expected {expected.name}"
            if actual is not None:
                message += f", got {actual.name}"
            message += ")"
        logger.error(message)
        super().__init__(message)
