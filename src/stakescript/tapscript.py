"""
Tapscript helpers for the staking scripts.

The staking, unbonding and slashing scripts are tapscript leaves. These
helpers compute their BIP-341 TapLeaf hashes and give a readable disassembly
for debugging, e.g. the slashing leaf with one provider and 2-of-3 covenants:

  <staker> OP_CHECKSIGVERIFY <fp> OP_CHECKSIGVERIFY
  <c1> OP_CHECKSIG <c2> OP_CHECKSIGADD <c3> OP_CHECKSIGADD OP_2 OP_NUMEQUAL
"""
from __future__ import annotations

import hashlib
from typing import Dict

# Opcodes
OP_0 = 0x00
OP_1NEGATE = 0x4f
OP_1 = 0x51
OP_16 = 0x60
OP_VERIFY = 0x69
OP_RETURN = 0x6a
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_NUMEQUAL = 0x9c
OP_NUMEQUALVERIFY = 0x9d
OP_CHECKSIG = 0xac
OP_CHECKSIGVERIFY = 0xad
OP_CHECKSEQUENCEVERIFY = 0xb2
OP_CHECKSIGADD = 0xba

LEAF_VERSION = 0xC0  # BIP-342 tapscript leaf version

_NAMES: Dict[int, str] = {
    OP_0: 'OP_0',
    OP_1NEGATE: 'OP_1NEGATE',
    OP_VERIFY: 'OP_VERIFY',
    OP_RETURN: 'OP_RETURN',
    OP_EQUAL: 'OP_EQUAL',
    OP_EQUALVERIFY: 'OP_EQUALVERIFY',
    OP_NUMEQUAL: 'OP_NUMEQUAL',
    OP_NUMEQUALVERIFY: 'OP_NUMEQUALVERIFY',
    OP_CHECKSIG: 'OP_CHECKSIG',
    OP_CHECKSIGVERIFY: 'OP_CHECKSIGVERIFY',
    OP_CHECKSEQUENCEVERIFY: 'OP_CHECKSEQUENCEVERIFY',
    OP_CHECKSIGADD: 'OP_CHECKSIGADD',
}
_NAMES.update({op: f'OP_{op - OP_1 + 1}' for op in range(OP_1, OP_16 + 1)})


def compactsize(n: int) -> bytes:
    if n < 0xfd:
        return bytes([n])
    elif n <= 0xffff:
        return b"\xfd" + n.to_bytes(2, "little")
    elif n <= 0xffffffff:
        return b"\xfe" + n.to_bytes(4, "little")
    else:
        return b"\xff" + n.to_bytes(8, "little")


def tagged_sha256(tag: str, msg: bytes) -> bytes:
    t = hashlib.sha256(tag.encode()).digest()
    return hashlib.sha256(t + t + msg).digest()


def tapleaf_hash(script: bytes, leaf_version: int = LEAF_VERSION) -> bytes:
    """BIP-341 tagged TapLeaf hash of a tapscript."""
    data = bytes([leaf_version]) + compactsize(len(script)) + script
    return tagged_sha256("TapLeaf", data)


def disasm(script: bytes) -> str:
    out: list[str] = []
    i = 0
    while i < len(script):
        op = script[i]; i += 1
        if op in _NAMES:
            out.append(_NAMES[op])
            continue
        if op < 0x4c:
            ln = op
        elif op == 0x4c:
            ln = script[i]; i += 1
        elif op == 0x4d:
            ln = int.from_bytes(script[i:i+2], 'little'); i += 2
        elif op == 0x4e:
            ln = int.from_bytes(script[i:i+4], 'little'); i += 4
        else:
            out.append(f'OP_UNKNOWN<0x{op:02x}>')
            continue
        data = script[i:i+ln]; i += ln
        if len(data) != ln:
            raise ValueError("push past end of script")
        out.append(data.hex())
    return ' '.join(out)
