#!/usr/bin/env python3
"""
stakescript CLI: render and build BTC staking scripts

Quick start
1) Collect the protocol params (covenant keys, quorum, unbonding time, tag),
   either as flags or as a JSON file (see stakescript.config)
2) Inspect the policies:
   python -m stakescript.cli render-policies --params-file params.json \
       --staker-pk <xonly> --fp-pk <xonly> --staking-timelock 144
3) Build the scripts (hex + TapLeaf hashes):
   python -m stakescript.cli build-scripts ... --json
4) Decode a data-embed output:
   python -m stakescript.cli decode-data-embed --script <hex> --magic-len 4

Notes
- All keys are 32-byte x-only hex.
- --covenant-pk / --fp-pk may be repeated; covenant keys are used in the order given.
"""
import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .compiler import OP_RETURN
from .config import GlobalParams
from .errors import StakingScriptError
from .hexutil import file_or_hex, parse_hex, parse_hex_list
from .params import PK_LENGTH, StakingParameters
from .payload import extract_op_return_data, parse_staking_data
from .scripts import StakingScripts
from .tapscript import disasm, tapleaf_hash

LEAF_SCRIPTS = ('timelock_script', 'unbonding_script', 'slashing_script', 'unbonding_timelock_script')


def _pick(flag_value: Any, file_value: Any, name: str) -> Any:
    if flag_value is not None:
        return flag_value
    if file_value is not None:
        return file_value
    raise ValueError(f"--{name} is required (or supply --params-file)")


def params_from_args(args: argparse.Namespace) -> StakingParameters:
    gp: Optional[GlobalParams] = GlobalParams.from_file(args.params_file) if args.params_file else None
    staker = file_or_hex('staker-pk', args.staker_pk, args.staker_pk_file, length=PK_LENGTH)
    if not args.fp_pk:
        raise ValueError("at least one --fp-pk is required")
    fps = parse_hex_list('fp-pk', args.fp_pk, PK_LENGTH)
    covs = parse_hex_list('covenant-pk', args.covenant_pk, PK_LENGTH) if args.covenant_pk else None
    magic = parse_hex('magic-bytes', args.magic_bytes) if args.magic_bytes else None
    return StakingParameters(
        staker_key=staker,
        finality_provider_keys=tuple(fps),
        covenant_keys=tuple(_pick(covs, gp and gp.covenant_pks, 'covenant-pk')),
        covenant_threshold=_pick(args.covenant_threshold, gp and gp.covenant_quorum, 'covenant-threshold'),
        staking_timelock=args.staking_timelock,
        unbonding_timelock=_pick(args.unbonding_timelock, gp and gp.unbonding_time, 'unbonding-timelock'),
        magic_bytes=_pick(magic, gp and gp.tag, 'magic-bytes'),
    )


def cmd_render(args: argparse.Namespace) -> None:
    policies = StakingScripts(params_from_args(args)).policies()
    if args.json:
        print(json.dumps({k: str(v) for k, v in policies.items()}))
    else:
        for name, policy in policies.items():
            print(f"{name:<26}= {policy}")


def cmd_build(args: argparse.Namespace) -> None:
    bundle = StakingScripts(params_from_args(args)).build_scripts()
    out: Dict[str, Dict[str, str]] = {}
    for name, script in bundle.as_dict().items():
        row = {'hex': script.hex()}
        if name in LEAF_SCRIPTS:
            row['tapleaf_hash'] = tapleaf_hash(script).hex()
        if args.disasm:
            row['disasm'] = disasm(script)
        out[name] = row
    if args.json:
        print(json.dumps(out))
    else:
        for name, row in out.items():
            print(f"{name}:")
            for k, v in row.items():
                print(f"  {k:<13}= {v}")


def cmd_decode(args: argparse.Namespace) -> None:
    raw = file_or_hex('script', args.script, args.script_file)
    data = extract_op_return_data(raw) if raw[:1] == bytes([OP_RETURN]) else raw
    sd = parse_staking_data(data, args.magic_len)
    res = {
        'magic_bytes': sd.magic_bytes.hex(),
        'version': sd.version,
        'staker_key': sd.staker_key.hex(),
        'finality_provider_key': sd.finality_provider_key.hex(),
        'staking_timelock': sd.staking_timelock,
    }
    if args.json:
        print(json.dumps(res))
    else:
        for k, v in res.items():
            print(f"{k:<22}= {v}")


def _add_param_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument('--params-file', help='JSON file with covenant_pks, covenant_quorum, unbonding_time, tag')
    p.add_argument('--staker-pk', help='staker 32B x-only pubkey hex')
    p.add_argument('--staker-pk-file', help='read staker pubkey hex from file')
    p.add_argument('--fp-pk', action='append', default=[], help='finality provider 32B x-only pubkey hex (repeatable)')
    p.add_argument('--covenant-pk', action='append', default=[], help='covenant 32B x-only pubkey hex (repeatable, order kept)')
    p.add_argument('--covenant-threshold', type=int, help='covenant signatures required')
    p.add_argument('--staking-timelock', type=int, required=True, help='staking period in blocks (1-65535)')
    p.add_argument('--unbonding-timelock', type=int, help='unbonding period in blocks')
    p.add_argument('--magic-bytes', help='protocol tag hex for the data-embed script')
    p.add_argument('--json', action='store_true', help='print JSON output')


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="stakescript CLI (render policies, build staking scripts)",
                                 formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument('-v', '--verbose', action='store_true', help='debug logging (shows rendered policies)')
    sub = ap.add_subparsers(dest='cmd', required=True)

    ap_r = sub.add_parser('render-policies', help='print the policy text of the four tapscript leaves')
    _add_param_flags(ap_r)
    ap_r.set_defaults(func=cmd_render)

    ap_b = sub.add_parser('build-scripts', help='build all five staking scripts')
    _add_param_flags(ap_b)
    ap_b.add_argument('--disasm', action='store_true', help='include simple disassembly')
    ap_b.set_defaults(func=cmd_build)

    ap_d = sub.add_parser('decode-data-embed', help='decode an OP_RETURN staking data script or payload')
    ap_d.add_argument('--script', help='OP_RETURN script hex (or bare payload hex)')
    ap_d.add_argument('--script-file', help='read script hex from file')
    ap_d.add_argument('--magic-len', type=int, default=4, help='length of the magic tag in bytes')
    ap_d.add_argument('--json', action='store_true', help='print JSON output')
    ap_d.set_defaults(func=cmd_decode)

    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')
    try:
        args.func(args)
    except (StakingScriptError, ValueError, FileNotFoundError) as e:
        print(f'ERROR: {e}', file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
