"""
Protocol global parameters.

The covenant committee, its quorum, the unbonding time and the magic tag are
set by the staking protocol rather than by each staker. They are published
as JSON:

    {
        "covenant_pks": ["<32B x-only hex>", ...],
        "covenant_quorum": 2,
        "unbonding_time": 1008,
        "tag": "<magic bytes hex>"
    }
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

from .hexutil import parse_hex, parse_hex_list
from .params import MAX_TIMELOCK_BLOCKS, PK_LENGTH, StakingParameters


def _require_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    return value


def _require_blocks(name: str, value: Any) -> int:
    n = _require_int(name, value)
    if not 1 <= n <= MAX_TIMELOCK_BLOCKS:
        raise ValueError(f"{name} must be in 1..{MAX_TIMELOCK_BLOCKS} blocks (got {n})")
    return n


@dataclass(frozen=True)
class GlobalParams:
    covenant_pks: Tuple[bytes, ...]
    covenant_quorum: int
    unbonding_time: int
    tag: bytes

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlobalParams":
        missing = [k for k in ('covenant_pks', 'covenant_quorum', 'unbonding_time', 'tag') if k not in data]
        if missing:
            raise ValueError(f"global params missing: {', '.join(missing)}")
        pks = data['covenant_pks']
        if not isinstance(pks, list):
            raise ValueError("covenant_pks must be a list of hex strings")
        return cls(
            covenant_pks=tuple(parse_hex_list('covenant_pks', pks, PK_LENGTH)),
            covenant_quorum=_require_int('covenant_quorum', data['covenant_quorum']),
            unbonding_time=_require_blocks('unbonding_time', data['unbonding_time']),
            tag=parse_hex('tag', data['tag']),
        )

    @classmethod
    def from_file(cls, path: str) -> "GlobalParams":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Params file not found: {path}")
        with open(config_path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Params file is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Params file must contain a JSON object")
        return cls.from_dict(data)

    def staking_parameters(self, staker_key: bytes, finality_provider_keys: Sequence[bytes],
                           staking_timelock: int) -> StakingParameters:
        """Combine the protocol values with one staker's choices."""
        return StakingParameters(
            staker_key=staker_key,
            finality_provider_keys=tuple(finality_provider_keys),
            covenant_keys=self.covenant_pks,
            covenant_threshold=self.covenant_quorum,
            staking_timelock=staking_timelock,
            unbonding_timelock=self.unbonding_time,
            magic_bytes=self.tag,
        )
