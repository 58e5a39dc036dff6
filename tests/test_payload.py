import pytest

from stakescript.params import StakingParameters
from stakescript.payload import (
    STAKING_DATA_VERSION,
    data_embed_ops,
    extract_op_return_data,
    parse_staking_data,
    payload_length,
    serialize_staking_data,
)
from stakescript.scripts import StakingScripts

from conftest import StubAssembler, StubCompiler


@pytest.fixture
def payload_params() -> StakingParameters:
    return StakingParameters(
        staker_key=bytes(32),
        finality_provider_keys=(b'\xff' * 32, b'\x11' * 32),
        covenant_keys=(b'\x0a' * 32,),
        covenant_threshold=1,
        staking_timelock=100,
        unbonding_timelock=5,
        magic_bytes=bytes.fromhex('AABBCCDD'),
    )


def test_payload_byte_layout(payload_params: StakingParameters) -> None:
    data = serialize_staking_data(payload_params)
    expected = bytes.fromhex('aabbccdd' + '00' + '00' * 32 + 'ff' * 32 + '0064')
    assert data == expected
    assert len(data) == 71 == payload_length(4)


def test_only_first_provider_is_committed(payload_params: StakingParameters) -> None:
    assert b'\x11' * 32 not in serialize_staking_data(payload_params)


def test_timelock_is_big_endian() -> None:
    p = StakingParameters(bytes(32), (bytes(32),), (bytes(32),), 1, 0xFFFE, 1, b'\x01')
    assert serialize_staking_data(p)[-2:] == b'\xff\xfe'


def test_data_embed_ops(payload_params: StakingParameters) -> None:
    ops = data_embed_ops(payload_params)
    assert ops == [0x6a, serialize_staking_data(payload_params)]


def test_data_embed_script_goes_through_assembler(payload_params: StakingParameters) -> None:
    asm = StubAssembler()
    script = StakingScripts(payload_params, StubCompiler(), asm).build_data_embed_script()
    assert asm.calls == [data_embed_ops(payload_params)]
    assert script == b'\x6a\x47' + serialize_staking_data(payload_params)


def test_parse_round_trip(payload_params: StakingParameters) -> None:
    sd = parse_staking_data(serialize_staking_data(payload_params), 4)
    assert sd.magic_bytes == bytes.fromhex('aabbccdd')
    assert sd.version == STAKING_DATA_VERSION
    assert sd.staker_key == bytes(32)
    assert sd.finality_provider_key == b'\xff' * 32
    assert sd.staking_timelock == 100


def test_parse_rejects_bad_length_and_version(payload_params: StakingParameters) -> None:
    data = serialize_staking_data(payload_params)
    with pytest.raises(ValueError, match='71 bytes'):
        parse_staking_data(data[:-1], 4)
    bumped = data[:4] + b'\x01' + data[5:]
    with pytest.raises(ValueError, match='version'):
        parse_staking_data(bumped, 4)
    with pytest.raises(ValueError):
        parse_staking_data(data, 0)


def test_extract_op_return_data() -> None:
    data = bytes(range(71))
    assert extract_op_return_data(b'\x6a\x47' + data) == data
    assert extract_op_return_data(b'\x6a\x4c\x50' + bytes(80)) == bytes(80)
    with pytest.raises(ValueError):
        extract_op_return_data(b'\x51\x01\x00')
    with pytest.raises(ValueError):
        extract_op_return_data(b'\x6a\x47' + data[:-1])
