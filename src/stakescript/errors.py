"""
Error types raised while building staking scripts.

All failures are terminal for the build call that raised them; nothing here
is retried or recovered locally.
"""
from __future__ import annotations

from typing import Any


class StakingScriptError(Exception):
    """Base class for every error raised by this package."""


class InvalidScriptParameters(StakingScriptError, ValueError):
    """A staking parameter failed validation.

    Attributes:
        field: name of the offending parameter (e.g. ``staker_key``).
        reason: human-readable description of the violated constraint.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class UnsupportedArgumentType(StakingScriptError, TypeError):
    """A template argument is outside the set of kinds the renderer formats."""

    def __init__(self, value: Any, detail: str = "") -> None:
        self.value = value
        msg = f"Unsupported template argument type: {type(value).__name__}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class PolicyCompilationError(StakingScriptError):
    """The policy compiler rejected a policy expression.

    ``message`` is the compiler's own message, unchanged.
    """

    def __init__(self, policy: str, message: str) -> None:
        self.policy = policy
        self.message = message
        super().__init__(message)
