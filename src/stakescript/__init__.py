"""Build the Taproot spending scripts of a BTC staking protocol."""
from .compiler import (
    BitcointxAssembler,
    EmbitPolicyCompiler,
    PolicyCompiler,
    ScriptAssembler,
    ScriptContext,
    compile_policy,
)
from .errors import (
    InvalidScriptParameters,
    PolicyCompilationError,
    StakingScriptError,
    UnsupportedArgumentType,
)
from .params import StakingParameters, validate
from .payload import parse_staking_data, serialize_staking_data
from .scripts import StakingScriptBundle, StakingScripts, build_scripts
from .template import CompiledPolicy, PolicyExpression, render, template

__all__ = [
    'BitcointxAssembler',
    'CompiledPolicy',
    'EmbitPolicyCompiler',
    'InvalidScriptParameters',
    'PolicyCompilationError',
    'PolicyCompiler',
    'PolicyExpression',
    'ScriptAssembler',
    'ScriptContext',
    'StakingParameters',
    'StakingScriptBundle',
    'StakingScriptError',
    'StakingScripts',
    'UnsupportedArgumentType',
    'build_scripts',
    'compile_policy',
    'parse_staking_data',
    'render',
    'serialize_staking_data',
    'template',
    'validate',
]
