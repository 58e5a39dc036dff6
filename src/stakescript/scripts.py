"""
Staking script templates.

Five scripts make up a staking output and its spending paths:

- timelock:            staker after the staking period
                       and_v(v:pk(S),older(T))
- unbonding:           staker + covenant quorum
                       and_v(v:pk(S),multi_a(k,C1,...,Cn))
- slashing:            staker + every finality provider + covenant quorum
                       and_v(and_v(v:pk(S),v:pk(F)),multi_a(k,C1,...,Cn))
- unbonding timelock:  staker after the unbonding period
- data embed:          OP_RETURN <magic|version|S|F|T>

Covenant keys are used in the order supplied; they are not sorted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .compiler import (
    BitcointxAssembler,
    EmbitPolicyCompiler,
    PolicyCompiler,
    ScriptAssembler,
    ScriptContext,
    compile_policy,
)
from .params import StakingParameters, check_lock_blocks
from .payload import data_embed_ops
from .template import PolicyExpression, render, template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StakingScriptBundle:
    timelock_script: bytes
    unbonding_script: bytes
    slashing_script: bytes
    unbonding_timelock_script: bytes
    data_embed_script: bytes

    def as_dict(self) -> Dict[str, bytes]:
        return {
            'timelock_script': self.timelock_script,
            'unbonding_script': self.unbonding_script,
            'slashing_script': self.slashing_script,
            'unbonding_timelock_script': self.unbonding_timelock_script,
            'data_embed_script': self.data_embed_script,
        }


def timelock_policy(staker_key: bytes, lock_blocks: int) -> PolicyExpression:
    check_lock_blocks("lock_blocks", lock_blocks)
    return template("and_v(v:pk({}),older({}))", staker_key, lock_blocks)


def covenant_policy(threshold: int, covenant_keys: List[bytes]) -> PolicyExpression:
    return template("multi_a({},{})", threshold, list(covenant_keys))


def unbonding_policy(params: StakingParameters) -> PolicyExpression:
    return render(
        [
            """and_v(
                 v:pk(""", """),
                 """, """
               )""",
        ],
        [params.staker_key, covenant_policy(params.covenant_threshold, list(params.covenant_keys))],
    )


def slashing_policy(params: StakingParameters) -> PolicyExpression:
    fp_terms = [template("v:pk({})", k) for k in params.finality_provider_keys]
    return render(
        [
            """and_v(
                 and_v(
                   v:pk(""", """),
                   """, """
                 ),
                 """, """
               )""",
        ],
        [params.staker_key, fp_terms, covenant_policy(params.covenant_threshold, list(params.covenant_keys))],
    )


class StakingScripts:
    """Builds the staking scripts for one set of validated parameters.

    Nothing is cached: every call renders and compiles afresh. The compiler
    and assembler default to the embit / python-bitcointx adapters.
    """

    def __init__(
        self,
        params: StakingParameters,
        compiler: Optional[PolicyCompiler] = None,
        assembler: Optional[ScriptAssembler] = None,
    ) -> None:
        if not isinstance(params, StakingParameters):
            raise TypeError("params must be StakingParameters")
        self.params = params
        self.compiler = compiler if compiler is not None else EmbitPolicyCompiler()
        self.assembler = assembler if assembler is not None else BitcointxAssembler()

    def _compile(self, policy: PolicyExpression) -> bytes:
        return compile_policy(self.compiler, policy, ScriptContext.TAP).script

    def build_timelock_script(self, lock_blocks: int) -> bytes:
        return self._compile(timelock_policy(self.params.staker_key, lock_blocks))

    def build_staking_timelock_script(self) -> bytes:
        """Staker may spend alone once the staking period has elapsed."""
        return self.build_timelock_script(self.params.staking_timelock)

    def build_unbonding_timelock_script(self) -> bytes:
        """Staker may spend alone once the unbonding period has elapsed."""
        return self.build_timelock_script(self.params.unbonding_timelock)

    def build_unbonding_script(self) -> bytes:
        return self._compile(unbonding_policy(self.params))

    def build_slashing_script(self) -> bytes:
        return self._compile(slashing_policy(self.params))

    def build_data_embed_script(self) -> bytes:
        return bytes(self.assembler.assemble(data_embed_ops(self.params)))

    def policies(self) -> Dict[str, PolicyExpression]:
        """Rendered policy text of the four policy-based scripts."""
        p = self.params
        return {
            'timelock_script': timelock_policy(p.staker_key, p.staking_timelock),
            'unbonding_script': unbonding_policy(p),
            'slashing_script': slashing_policy(p),
            'unbonding_timelock_script': timelock_policy(p.staker_key, p.unbonding_timelock),
        }

    def build_scripts(self) -> StakingScriptBundle:
        """Build all five scripts; any failure propagates and no bundle is returned."""
        bundle = StakingScriptBundle(
            timelock_script=self.build_staking_timelock_script(),
            unbonding_script=self.build_unbonding_script(),
            slashing_script=self.build_slashing_script(),
            unbonding_timelock_script=self.build_unbonding_timelock_script(),
            data_embed_script=self.build_data_embed_script(),
        )
        logger.debug(
            "built staking scripts: %s",
            ", ".join(f"{k}={len(v)}B" for k, v in bundle.as_dict().items()),
        )
        return bundle


def build_scripts(params: StakingParameters, compiler: Optional[PolicyCompiler] = None,
                  assembler: Optional[ScriptAssembler] = None) -> StakingScriptBundle:
    return StakingScripts(params, compiler, assembler).build_scripts()
