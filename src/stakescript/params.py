"""
Staking parameters and their validation.

StakingParameters is the single validated input to every script builder. It
is frozen, holds private ``bytes`` copies of every key buffer, and can only be
observed after validation succeeded.
"""
from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterable
from typing import Any, Sequence, Tuple

from .errors import InvalidScriptParameters
from .hexutil import parse_hex, parse_hex_list

PK_LENGTH = 32  # x-only public key, no parity byte
MAX_TIMELOCK_BLOCKS = 0xFFFF  # BIP-68 block-based CSV uses low 16 bits only


def _as_bytes(field: str, value: Any) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidScriptParameters(field, f"expected bytes, got {type(value).__name__}")
    return bytes(value)


def _as_key_tuple(field: str, values: Any) -> Tuple[bytes, ...]:
    if isinstance(values, (bytes, bytearray, str)) or not isinstance(values, Iterable):
        raise InvalidScriptParameters(field, "expected a sequence of keys")
    return tuple(_as_bytes(f"{field}[{i}]", v) for i, v in enumerate(values))


def _as_int(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScriptParameters(field, f"expected an integer, got {type(value).__name__}")
    return value


def _check_keys(field: str, keys: Sequence[bytes]) -> None:
    if not keys:
        raise InvalidScriptParameters(field, "at least one key is required")
    for i, k in enumerate(keys):
        if len(k) != PK_LENGTH:
            raise InvalidScriptParameters(f"{field}[{i}]", f"must be {PK_LENGTH} bytes (got {len(k)})")


def check_lock_blocks(field: str, value: Any) -> None:
    """Reject an integer relative timelock outside the block-based CSV range."""
    if isinstance(value, int) and not isinstance(value, bool) and not 1 <= value <= MAX_TIMELOCK_BLOCKS:
        raise InvalidScriptParameters(field, f"must be in 1..{MAX_TIMELOCK_BLOCKS} blocks (got {value})")


def validate(params: "StakingParameters") -> None:
    """Check the staking invariants, raising InvalidScriptParameters on the first violation.

    Pure: reads ``params`` and raises, nothing else.
    """
    if len(params.staker_key) != PK_LENGTH:
        raise InvalidScriptParameters("staker_key", f"must be {PK_LENGTH} bytes (got {len(params.staker_key)})")
    _check_keys("finality_provider_keys", params.finality_provider_keys)
    _check_keys("covenant_keys", params.covenant_keys)
    check_lock_blocks("staking_timelock", params.staking_timelock)
    n_cov = len(params.covenant_keys)
    if not 1 <= params.covenant_threshold <= n_cov:
        raise InvalidScriptParameters(
            "covenant_threshold", f"must be in 1..{n_cov} (got {params.covenant_threshold})"
        )
    if not params.magic_bytes:
        raise InvalidScriptParameters("magic_bytes", "must not be empty")


@dataclass(frozen=True)
class StakingParameters:
    """Validated inputs for the staking scripts.

    Attributes:
        staker_key: 32-byte x-only staker pubkey.
        finality_provider_keys: 32-byte x-only pubkeys of the finality
            providers the stake is delegated to (protocol allows one today).
        covenant_keys: 32-byte x-only covenant committee pubkeys, used in the
            order given.
        covenant_threshold: covenant signatures required (1..len(covenant_keys)).
        staking_timelock: staking period in blocks (1-65535).
        unbonding_timelock: unbonding period in blocks (1-65535, checked when
            the timelock script is rendered).
        magic_bytes: protocol tag prefixed to the data-embed payload.
    """

    staker_key: bytes
    finality_provider_keys: Tuple[bytes, ...]
    covenant_keys: Tuple[bytes, ...]
    covenant_threshold: int
    staking_timelock: int
    unbonding_timelock: int
    magic_bytes: bytes

    def __post_init__(self) -> None:
        # copy every buffer so later caller mutation cannot bypass validation
        object.__setattr__(self, "staker_key", _as_bytes("staker_key", self.staker_key))
        object.__setattr__(
            self, "finality_provider_keys", _as_key_tuple("finality_provider_keys", self.finality_provider_keys)
        )
        object.__setattr__(self, "covenant_keys", _as_key_tuple("covenant_keys", self.covenant_keys))
        object.__setattr__(self, "covenant_threshold", _as_int("covenant_threshold", self.covenant_threshold))
        object.__setattr__(self, "staking_timelock", _as_int("staking_timelock", self.staking_timelock))
        object.__setattr__(self, "unbonding_timelock", _as_int("unbonding_timelock", self.unbonding_timelock))
        object.__setattr__(self, "magic_bytes", _as_bytes("magic_bytes", self.magic_bytes))
        validate(self)

    @classmethod
    def from_hex(
        cls,
        staker_key: str,
        finality_provider_keys: Sequence[str],
        covenant_keys: Sequence[str],
        covenant_threshold: int,
        staking_timelock: int,
        unbonding_timelock: int,
        magic_bytes: str,
    ) -> "StakingParameters":
        """Build from hex strings; hex errors surface as InvalidScriptParameters."""
        def _hex(field: str, fn, value):
            try:
                return fn(field, value)
            except ValueError as exc:
                raise InvalidScriptParameters(field, str(exc)) from exc

        return cls(
            _hex("staker_key", parse_hex, staker_key),
            tuple(_hex("finality_provider_keys", parse_hex_list, finality_provider_keys)),
            tuple(_hex("covenant_keys", parse_hex_list, covenant_keys)),
            covenant_threshold,
            staking_timelock,
            unbonding_timelock,
            _hex("magic_bytes", parse_hex, magic_bytes) if magic_bytes else b"",
        )
