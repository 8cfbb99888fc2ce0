"""
Exception types raised by the contributions generator.
"""

import json
from typing import Any, List


class ContribsGeneratorError(Exception):
    """Base class for fatal errors."""


class ConfigurationError(ContribsGeneratorError, ValueError):
    """A required setting is missing or a setting has an invalid value."""


class TransportError(ContribsGeneratorError, RuntimeError):
    """The GraphQL endpoint answered with a non-success HTTP status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"GraphQL request failed: {status_code} {reason}\n{body}")


class GraphQLError(ContribsGeneratorError, RuntimeError):
    """The GraphQL endpoint answered successfully but reported errors."""

    def __init__(self, errors: List[Any]) -> None:
        self.errors = errors
        super().__init__(f"GraphQL errors: {json.dumps(errors, indent=2)}")


class MarkerNotFoundWarning(UserWarning):
    """The README lacks the contribution markers, or they are out of order."""
