"""
Failure results returned by the product handler.

Handler operations return one of these instead of raising; the HTTP
boundary (see problems.py) turns them into problem-details responses.
"""
from dataclasses import dataclass, field
from typing import Dict, List


class Failure:
    """Base class for every failure result."""

    error_type = "failure"


@dataclass(frozen=True)
class NotFound(Failure):
    product_id: int
    detail: str

    error_type = "not_found"


@dataclass(frozen=True)
class ValidationFailed(Failure):
    errors: Dict[str, List[str]] = field(default_factory=dict)
    detail: str = "One or more validation errors occurred"

    error_type = "validation_error"


@dataclass(frozen=True)
class UnhandledFault(Failure):
    # Message destiné aux logs uniquement, jamais renvoyé au client
    message: str

    error_type = "unhandled_fault"
