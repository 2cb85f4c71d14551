"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the
gateway and CLI layers can catch them uniformly.  Saga participants
treat ``PreconditionFailed`` as a benign outcome; everything else is
left to propagate to the caller or to the event channel's redelivery.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed input or a violated business rule.  Never retried."""

    @classmethod
    def from_errors(cls, errors: list[dict], noun: str, root: str = "") -> ValidationError:
        """Summarise the first entry of a pydantic ``errors()`` list.

        The location is rendered as a dotted path under ``root`` with
        list positions in brackets, e.g. ``input.items[0].quantity``.
        """
        error = errors[0]
        where = root
        for part in error["loc"]:
            if isinstance(part, int):
                where += f"[{part}]"
            else:
                where += f".{part}" if where else str(part)
        if error["type"] == "missing":
            return cls(f"Missing required {noun} '{where}'")
        if not where:
            return cls(f"Invalid {noun}: {error['msg']}")
        return cls(f"Invalid {noun} '{where}': {error['msg']}")


class PreconditionFailed(DomainException):
    """A conditional write's expected prior state did not hold."""


class TransientInfrastructureError(DomainException):
    """The store or channel is unavailable, or a write lost a race.

    Event-driven paths leave these to redelivery; synchronous callers
    see them directly.
    """
