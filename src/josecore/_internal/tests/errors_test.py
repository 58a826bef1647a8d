"""Tests for josecore.errors."""
import sys
import unittest

import pytest


class UnrecognizedTypeErrorTest(unittest.TestCase):
    """Tests for josecore.errors.UnrecognizedTypeError."""

    def setUp(self):
        from josecore.errors import UnrecognizedTypeError
        self.error = UnrecognizedTypeError('foo', {'type': 'foo'})

    def test_str(self):
        assert 'foo was not recognized, full message: {\'type\': \'foo\'}' == str(self.error)

    def test_is_deserialization_error(self):
        from josecore.errors import DeserializationError
        assert isinstance(self.error, DeserializationError)


class UnsupportedAlgorithmTest(unittest.TestCase):
    """Tests for josecore.errors.UnsupportedAlgorithm."""

    def test_str(self):
        from josecore.errors import UnsupportedAlgorithm
        error = UnsupportedAlgorithm('HS1', 'not permitted')
        assert error.alg == 'HS1'
        assert str(error) == 'HS1: not permitted'

    def test_str_no_alg(self):
        from josecore.errors import UnsupportedAlgorithm
        assert str(UnsupportedAlgorithm()) == 'not supported'


class UnsupportedCriticalParameterTest(unittest.TestCase):
    """Tests for josecore.errors.UnsupportedCriticalParameter."""

    def test_names(self):
        from josecore.errors import UnsupportedCriticalParameter
        error = UnsupportedCriticalParameter('b64', 'exp')
        assert error.names == ('b64', 'exp')
        assert str(error) == 'b64, exp'


class OpaqueErrorsTest(unittest.TestCase):
    """Cryptographic failures carry no detail."""

    def test_signature_mismatch(self):
        from josecore.errors import SignatureMismatch
        assert str(SignatureMismatch()) == 'Signature verification failed'

    def test_ciphertext_authentication_failed(self):
        from josecore.errors import CiphertextAuthenticationFailed
        assert str(CiphertextAuthenticationFailed()) == 'Ciphertext authentication failed'


class ClaimValidationErrorTest(unittest.TestCase):
    """Tests for josecore.errors.ClaimValidationError."""

    def test_claim(self):
        from josecore import errors
        assert errors.ExpiredToken('x').claim == 'exp'
        assert errors.ImmatureToken('x').claim == 'nbf'
        assert errors.InvalidIssuer('x').claim == 'iss'
        assert errors.InvalidAudience('x').claim == 'aud'
        assert errors.MissingClaim('x', claim='sub').claim == 'sub'

    def test_hierarchy(self):
        from josecore import errors
        for cls in (errors.ExpiredToken, errors.ImmatureToken, errors.InvalidIssuer,
                    errors.InvalidAudience, errors.MissingClaim):
            assert issubclass(cls, errors.ClaimValidationError)
            assert issubclass(cls, errors.Error)


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
