"""
Staking data-embed payload (OP_RETURN commitment).

Layout, big-endian where multi-byte:

    magic_bytes        N bytes
    version            1 byte (0x00)
    staker_key         32 bytes
    finality_provider  32 bytes (first provider key only)
    staking_timelock   2 bytes
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .compiler import OP_RETURN, ScriptOp
from .params import PK_LENGTH, StakingParameters

STAKING_DATA_VERSION = 0
_TIMELOCK_LEN = 2


@dataclass(frozen=True)
class StakingData:
    """Decoded data-embed payload."""

    magic_bytes: bytes
    version: int
    staker_key: bytes
    finality_provider_key: bytes
    staking_timelock: int


def payload_length(magic_len: int) -> int:
    return magic_len + 1 + PK_LENGTH + PK_LENGTH + _TIMELOCK_LEN


def serialize_staking_data(params: StakingParameters) -> bytes:
    return b"".join([
        params.magic_bytes,
        bytes([STAKING_DATA_VERSION]),
        params.staker_key,
        params.finality_provider_keys[0],
        params.staking_timelock.to_bytes(_TIMELOCK_LEN, "big"),
    ])


def data_embed_ops(params: StakingParameters) -> List[ScriptOp]:
    """Assembler input for ``OP_RETURN <payload>``."""
    return [OP_RETURN, serialize_staking_data(params)]


def parse_staking_data(data: bytes, magic_len: int) -> StakingData:
    """Decode a payload produced by serialize_staking_data.

    Raises ValueError on a length mismatch or an unknown version byte.
    """
    if magic_len <= 0:
        raise ValueError("magic_len must be positive")
    expected = payload_length(magic_len)
    if len(data) != expected:
        raise ValueError(f"staking data must be {expected} bytes (got {len(data)})")
    i = magic_len
    magic, version = data[:i], data[i]
    if version != STAKING_DATA_VERSION:
        raise ValueError(f"unsupported staking data version {version}")
    i += 1
    staker = data[i:i + PK_LENGTH]
    i += PK_LENGTH
    fp = data[i:i + PK_LENGTH]
    i += PK_LENGTH
    return StakingData(
        magic_bytes=bytes(magic),
        version=version,
        staker_key=bytes(staker),
        finality_provider_key=bytes(fp),
        staking_timelock=int.from_bytes(data[i:i + _TIMELOCK_LEN], "big"),
    )


def extract_op_return_data(script: bytes) -> bytes:
    """Return the single data push of an ``OP_RETURN <data>`` script."""
    if not script or script[0] != OP_RETURN:
        raise ValueError("script does not start with OP_RETURN")
    body = script[1:]
    if not body:
        raise ValueError("OP_RETURN script carries no data")
    n = body[0]
    if n < 0x4c:
        start, ln = 1, n
    elif n == 0x4c:
        start, ln = 2, body[1]
    elif n == 0x4d:
        start, ln = 3, int.from_bytes(body[1:3], "little")
    else:
        raise ValueError("unexpected push opcode after OP_RETURN")
    data = body[start:start + ln]
    if len(data) != ln or start + ln != len(body):
        raise ValueError("malformed OP_RETURN push")
    return bytes(data)
