import os
import tempfile

import pytest

from stakescript.hexutil import file_or_hex, parse_hex, parse_hex_list


def test_parse_hex_valid_and_length():
    b = parse_hex('x', '00ff', length=2)
    assert b == bytes.fromhex('00ff')


def test_parse_hex_accepts_prefix_and_case():
    assert parse_hex('x', ' 0xAaBb ') == b'\xaa\xbb'


@pytest.mark.parametrize('s', ['zz', 'abc', ''])
def test_parse_hex_invalid_raises(s: str) -> None:
    with pytest.raises(ValueError, match='Invalid hex for x'):
        parse_hex('x', s)


def test_parse_hex_wrong_length():
    with pytest.raises(ValueError, match='must be 32 bytes'):
        parse_hex('key', '00' * 31, length=32)


def test_parse_hex_list_names_index():
    with pytest.raises(ValueError, match=r'keys\[1\]'):
        parse_hex_list('keys', ['00' * 32, '00'], length=32)


def test_file_or_hex_precedence_and_file_reading():
    with tempfile.TemporaryDirectory() as td:
        p = os.path.join(td, 'h.txt')
        with open(p, 'wt') as f:
            f.write('0a\n')
        # hex arg takes precedence
        assert file_or_hex('x', 'ff', p) == b'\xff'
        # file path used when hex not provided
        assert file_or_hex('x', None, p) == b'\x0a'
    with pytest.raises(ValueError, match='x required'):
        file_or_hex('x', None, None)
