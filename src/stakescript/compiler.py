"""
Policy compiler and script assembler.

The script builders talk to two collaborators through small protocols:

- PolicyCompiler: policy text + script context -> script bytes
- ScriptAssembler: opcode/data sequence -> script bytes

Default adapters wrap embit (miniscript, taproot mode) and python-bitcointx
(CScript). Both libraries are imported on first use, so tests can inject
stubs without either installed.
"""
from __future__ import annotations

import importlib
import logging
from enum import Enum
from typing import Protocol, Sequence, Union

from .errors import PolicyCompilationError
from .template import CompiledPolicy, PolicyExpression

logger = logging.getLogger(__name__)

OP_RETURN = 0x6a

ScriptOp = Union[int, bytes]


class ScriptContext(Enum):
    TAP = "tap"  # BIP-342 tapscript leaf


class PolicyCompiler(Protocol):
    def compile(self, policy: str, context: ScriptContext) -> bytes:
        ...


class ScriptAssembler(Protocol):
    def assemble(self, ops: Sequence[ScriptOp]) -> bytes:
        ...


def _imp_miniscript():
    return importlib.import_module('embit.descriptor.miniscript').Miniscript


def _imp_script_module():
    return importlib.import_module('bitcointx.core.script')


class EmbitPolicyCompiler:
    """Compile miniscript policy text with embit."""

    def compile(self, policy: str, context: ScriptContext) -> bytes:
        if context is not ScriptContext.TAP:
            raise PolicyCompilationError(policy, f"unsupported script context: {context!r}")
        Miniscript = _imp_miniscript()
        try:
            ms = Miniscript.from_string(str(policy), taproot=True)
            return bytes(ms.compile())
        except Exception as exc:
            raise PolicyCompilationError(policy, str(exc)) from exc


class BitcointxAssembler:
    """Assemble raw scripts with python-bitcointx."""

    def assemble(self, ops: Sequence[ScriptOp]) -> bytes:
        script_mod = _imp_script_module()
        # ints are opcodes here; CScript would push a bare int as a number
        items = [bytes(op) if isinstance(op, (bytes, bytearray)) else script_mod.CScriptOp(op) for op in ops]
        return bytes(script_mod.CScript(items))


def compile_policy(compiler: PolicyCompiler, policy: PolicyExpression,
                   context: ScriptContext = ScriptContext.TAP) -> CompiledPolicy:
    """Compile ``policy`` and keep the text next to the resulting script."""
    logger.debug("compiling policy (%s): %s", context.value, policy)
    script = compiler.compile(policy, context)
    return CompiledPolicy(policy=PolicyExpression(policy), script=bytes(script))
