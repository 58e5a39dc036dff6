"""Shared fixtures: deterministic stand-ins for the compiler and assembler."""
from typing import List, Sequence, Tuple, Union

import pytest

from stakescript.compiler import ScriptContext
from stakescript.errors import PolicyCompilationError
from stakescript.params import StakingParameters


class StubCompiler:
    """Accepts any policy and returns ``b'ms:' + policy``; records every call."""

    def __init__(self, fail_on: str = '') -> None:
        self.fail_on = fail_on
        self.calls: List[Tuple[str, ScriptContext]] = []

    def compile(self, policy: str, context: ScriptContext) -> bytes:
        self.calls.append((str(policy), context))
        if self.fail_on and self.fail_on in policy:
            raise PolicyCompilationError(policy, f'stub rejects {self.fail_on}')
        return b'ms:' + str(policy).encode()


class StubAssembler:
    """Opcodes as single bytes, data as a direct push (< 0x4c bytes only)."""

    def __init__(self) -> None:
        self.calls: List[Sequence[Union[int, bytes]]] = []

    def assemble(self, ops: Sequence[Union[int, bytes]]) -> bytes:
        self.calls.append(list(ops))
        out = b''
        for op in ops:
            if isinstance(op, bytes):
                assert len(op) < 0x4c
                out += bytes([len(op)]) + op
            else:
                out += bytes([op])
        return out


@pytest.fixture
def stub_compiler() -> StubCompiler:
    return StubCompiler()


@pytest.fixture
def stub_assembler() -> StubAssembler:
    return StubAssembler()


@pytest.fixture
def params() -> StakingParameters:
    return StakingParameters(
        staker_key=b'\x01' * 32,
        finality_provider_keys=(b'\x02' * 32,),
        covenant_keys=(b'\x0a' * 32, b'\x0b' * 32, b'\x0c' * 32),
        covenant_threshold=2,
        staking_timelock=144,
        unbonding_timelock=101,
        magic_bytes=bytes.fromhex('aabbccdd'),
    )
