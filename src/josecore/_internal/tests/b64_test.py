"""Tests for josecore.b64."""
import sys
import unittest

import pytest

# https://en.wikipedia.org/wiki/Base64#Examples
B64_PADDING_EXAMPLES = {
    b'any carnal pleasure.': (b'YW55IGNhcm5hbCBwbGVhc3VyZS4', b'='),
    b'any carnal pleasure': (b'YW55IGNhcm5hbCBwbGVhc3VyZQ', b'=='),
    b'any carnal pleasur': (b'YW55IGNhcm5hbCBwbGVhc3Vy', b''),
    b'any carnal pleasu': (b'YW55IGNhcm5hbCBwbGVhc3U', b'='),
    b'any carnal pleas': (b'YW55IGNhcm5hbCBwbGVhcw', b'=='),
}


B64_URL_UNSAFE_EXAMPLES = {
    bytes((251, 239)): b'--8',
    bytes((255,)) * 2: b'__8',
}


class B64EncodeTest(unittest.TestCase):
    """Tests for josecore.b64.b64encode."""

    @classmethod
    def _call(cls, data):
        from josecore.b64 import b64encode
        return b64encode(data)

    def test_empty(self):
        assert self._call(b'') == b''

    def test_unsafe_url(self):
        for text, b64 in B64_URL_UNSAFE_EXAMPLES.items():
            assert self._call(text) == b64

    def test_different_paddings(self):
        for text, (b64, _) in B64_PADDING_EXAMPLES.items():
            assert self._call(text) == b64

    def test_bytearray(self):
        assert self._call(bytearray(b'a')) == b'YQ'

    def test_unicode_fails_with_type_error(self):
        with pytest.raises(TypeError):
            self._call('some unicode')


class B64DecodeTest(unittest.TestCase):
    """Tests for josecore.b64.b64decode."""

    @classmethod
    def _call(cls, data):
        from josecore.b64 import b64decode
        return b64decode(data)

    def test_unsafe_url(self):
        for text, b64 in B64_URL_UNSAFE_EXAMPLES.items():
            assert self._call(b64) == text

    def test_input_without_padding(self):
        for text, (b64, _) in B64_PADDING_EXAMPLES.items():
            assert self._call(b64) == text

    def test_input_with_padding_fails(self):
        for _, (b64, pad) in B64_PADDING_EXAMPLES.items():
            if pad:
                with pytest.raises(ValueError):
                    self._call(b64 + pad)

    def test_standard_alphabet_fails(self):
        with pytest.raises(ValueError):
            self._call(b'++8')
        with pytest.raises(ValueError):
            self._call(b'//8')

    def test_whitespace_fails(self):
        with pytest.raises(ValueError):
            self._call(b'YW55 IGNh')

    def test_impossible_length_fails(self):
        with pytest.raises(ValueError):
            self._call(b'YW55I')

    def test_non_canonical_fails(self):
        assert self._call(b'YQ') == b'a'
        with pytest.raises(ValueError):
            self._call(b'YR')

    def test_empty(self):
        assert self._call(b'') == b''

    def test_unicode_with_ascii(self):
        assert self._call('YQ') == b'a'

    def test_non_ascii_unicode_fails(self):
        with pytest.raises(ValueError):
            self._call('ą')

    def test_type_error_no_unicode_or_bytes(self):
        with pytest.raises(TypeError):
            self._call(object())


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
