import pytest

from stakescript.compiler import (
    OP_RETURN,
    BitcointxAssembler,
    EmbitPolicyCompiler,
    ScriptContext,
    compile_policy,
)
from stakescript.errors import PolicyCompilationError
from stakescript.params import StakingParameters
from stakescript.payload import serialize_staking_data
from stakescript.scripts import StakingScripts
from stakescript.template import CompiledPolicy, PolicyExpression


def _xonly(seed: int) -> bytes:
    ec = pytest.importorskip('embit.ec', reason='embit not installed')
    return ec.PrivateKey(bytes([seed]) * 32).get_public_key().xonly()


def test_compile_policy_keeps_text(stub_compiler) -> None:
    cp = compile_policy(stub_compiler, PolicyExpression('older(1)'))
    assert cp == CompiledPolicy(PolicyExpression('older(1)'), b'ms:older(1)')
    assert stub_compiler.calls == [('older(1)', ScriptContext.TAP)]


def test_embit_compiles_timelock_leaf():
    pytest.importorskip('embit', reason='embit not installed')
    key = _xonly(1)
    script = EmbitPolicyCompiler().compile(f'and_v(v:pk({key.hex()}),older(144))', ScriptContext.TAP)
    assert script == b'\x20' + key + b'\xad' + b'\x02\x90\x00' + b'\xb2'


def test_embit_compiles_unbonding_leaf():
    pytest.importorskip('embit', reason='embit not installed')
    s, c1, c2, c3 = (_xonly(i) for i in (1, 2, 3, 4))
    params = StakingParameters(s, (_xonly(5),), (c1, c2, c3), 2, 144, 101, b'\x01\x02\x03\x04')
    script = StakingScripts(params, EmbitPolicyCompiler(), BitcointxAssembler()).build_unbonding_script()
    assert script == (
        b'\x20' + s + b'\xad'
        + b'\x20' + c1 + b'\xac'
        + b'\x20' + c2 + b'\xba'
        + b'\x20' + c3 + b'\xba'
        + b'\x52\x9c'
    )


def test_embit_compiles_slashing_leaf():
    pytest.importorskip('embit', reason='embit not installed')
    s, fp, c1, c2, c3 = (_xonly(i) for i in (1, 2, 3, 4, 5))
    params = StakingParameters(s, (fp,), (c1, c2, c3), 2, 144, 101, b'\x01\x02\x03\x04')
    script = StakingScripts(params, EmbitPolicyCompiler(), BitcointxAssembler()).build_slashing_script()
    assert script.startswith(b'\x20' + s + b'\xad' + b'\x20' + fp + b'\xad')
    assert script.endswith(b'\x52\x9c')


@pytest.mark.parametrize('policy', ['and_v(', 'nonsense(1)', 'and_v(v:pk(zz),older(1))'])
def test_embit_errors_become_policy_compilation_error(policy: str) -> None:
    pytest.importorskip('embit', reason='embit not installed')
    with pytest.raises(PolicyCompilationError) as ei:
        EmbitPolicyCompiler().compile(policy, ScriptContext.TAP)
    assert ei.value.policy == policy
    assert ei.value.__cause__ is not None


def test_bitcointx_assembles_op_return():
    pytest.importorskip('bitcointx', reason='python-bitcointx not installed')
    payload = bytes(71)
    assert BitcointxAssembler().assemble([OP_RETURN, payload]) == b'\x6a\x47' + payload


def test_default_collaborators_build_bundle():
    pytest.importorskip('embit', reason='embit not installed')
    pytest.importorskip('bitcointx', reason='python-bitcointx not installed')
    params = StakingParameters(_xonly(1), (_xonly(2),), (_xonly(3), _xonly(4)), 1, 144, 101, b'\xaa\xbb\xcc\xdd')
    bundle = StakingScripts(params).build_scripts()
    assert bundle.data_embed_script == b'\x6a\x47' + serialize_staking_data(params)
    assert bundle.timelock_script != bundle.unbonding_timelock_script
    assert bundle == StakingScripts(params).build_scripts()
