"""Tests for josecore.util."""
import functools
import sys
import unittest

import pytest

from josecore._internal.tests import test_util


class ComparableRSAKeyTest(unittest.TestCase):
    """Tests for josecore.util.ComparableRSAKey."""

    def setUp(self):
        from josecore.util import ComparableRSAKey
        self.key = ComparableRSAKey(test_util.rsa_key().key.wrapped)
        self.key_same = ComparableRSAKey(test_util.rsa_key().key.wrapped)
        self.key2 = ComparableRSAKey(test_util.rsa_key(3072).key.wrapped)

    def test_getattr_proxy(self):
        assert 2048 == self.key.key_size

    def test_eq(self):
        assert self.key == self.key_same

    def test_ne(self):
        assert self.key != self.key2

    def test_ne_different_types(self):
        assert self.key != 5

    def test_ne_not_wrapped(self):
        assert self.key != self.key_same.wrapped

    def test_ne_no_serialization(self):
        from josecore.util import ComparableRSAKey
        assert ComparableRSAKey(5) != ComparableRSAKey(5)

    def test_hash(self):
        assert isinstance(hash(self.key), int)
        assert hash(self.key) == hash(self.key_same)
        assert hash(self.key) != hash(self.key2)

    def test_repr(self):
        assert repr(self.key).startswith('<ComparableRSAKey(<')

    def test_public_key(self):
        from josecore.util import ComparableRSAKey
        public = self.key.public_key()
        assert isinstance(public, ComparableRSAKey)
        assert public == self.key_same.public_key()
        assert hash(public) == hash(self.key_same.public_key())
        assert public != self.key


class ComparableECKeyTest(unittest.TestCase):
    """Tests for josecore.util.ComparableECKey."""

    def setUp(self):
        from josecore.util import ComparableECKey
        self.p256 = ComparableECKey(test_util.ec_key('P-256').key.wrapped)
        self.p256_same = ComparableECKey(test_util.ec_key('P-256').key.wrapped)
        self.p384 = ComparableECKey(test_util.ec_key('P-384').key.wrapped)

    def test_eq(self):
        assert self.p256 == self.p256_same
        assert self.p256.public_key() == self.p256_same.public_key()

    def test_ne(self):
        assert self.p256 != self.p384

    def test_hash(self):
        assert hash(self.p256) == hash(self.p256_same)
        assert hash(self.p256.public_key()) == hash(self.p256_same.public_key())


class ComparableOKPKeyTest(unittest.TestCase):
    """Tests for josecore.util.ComparableOKPKey."""

    def setUp(self):
        from josecore.util import ComparableOKPKey
        self.ed25519 = ComparableOKPKey(test_util.okp_key('Ed25519').key.wrapped)
        self.ed25519_same = ComparableOKPKey(test_util.okp_key('Ed25519').key.wrapped)
        self.x25519 = ComparableOKPKey(test_util.okp_key('X25519').key.wrapped)

    def test_eq(self):
        assert self.ed25519 == self.ed25519_same
        assert self.ed25519.public_key() == self.ed25519_same.public_key()

    def test_ne(self):
        assert self.ed25519 != self.x25519
        assert self.ed25519 != self.ed25519.public_key()

    def test_hash(self):
        assert hash(self.ed25519) == hash(self.ed25519_same)
        assert hash(self.ed25519) != hash(self.ed25519.public_key())


class ImmutableMapTest(unittest.TestCase):
    """Tests for josecore.util.ImmutableMap."""

    def setUp(self):
        # pylint: disable=invalid-name,too-few-public-methods
        # pylint: disable=missing-docstring
        from josecore.util import ImmutableMap

        class A(ImmutableMap):
            __slots__ = ('x', 'y')

        class B(ImmutableMap):
            __slots__ = ('x', 'y')

        self.A = A
        self.B = B

        self.a1 = self.A(x=1, y=2)
        self.a1_swap = self.A(y=2, x=1)
        self.a2 = self.A(x=3, y=4)
        self.b = self.B(x=1, y=2)

    def test_update(self):
        assert self.A(x=2, y=2) == self.a1.update(x=2)
        assert self.a2 == self.a1.update(x=3, y=4)

    def test_get_missing_item_raises_key_error(self):
        with pytest.raises(KeyError):
            self.a1.__getitem__('z')

    def test_order_of_args_does_not_matter(self):
        assert self.a1 == self.a1_swap

    def test_type_error_on_missing(self):
        with pytest.raises(TypeError):
            self.A(x=1)
        with pytest.raises(TypeError):
            self.A(y=2)

    def test_type_error_on_unrecognized(self):
        with pytest.raises(TypeError):
            self.A(x=1, z=2)
        with pytest.raises(TypeError):
            self.A(x=1, y=2, z=3)

    def test_get_attr(self):
        assert 1 == self.a1.x
        assert 2 == self.a1.y
        assert 1 == self.a1_swap.x
        assert 2 == self.a1_swap.y

    def test_set_attr_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            functools.partial(self.a1.__setattr__, 'x')(10)

    def test_equal(self):
        assert self.a1 == self.a1
        assert self.a2 == self.a2
        assert self.a1 != self.a2

    def test_hash(self):
        assert hash((1, 2)) == hash(self.a1)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            self.A(x=1, y={}).__hash__()

    def test_repr(self):
        assert 'A(x=1, y=2)' == repr(self.a1)
        assert 'A(x=1, y=2)' == repr(self.a1_swap)
        assert 'B(x=1, y=2)' == repr(self.b)
        assert "B(x='foo', y='bar')" == repr(self.B(x='foo', y='bar'))


class frozendictTest(unittest.TestCase):  # pylint: disable=invalid-name
    """Tests for josecore.util.frozendict."""

    def setUp(self):
        from josecore.util import frozendict
        self.fdict = frozendict(x=1, y='2')

    def test_init_dict(self):
        from josecore.util import frozendict
        assert self.fdict == frozendict({'x': 1, 'y': '2'})

    def test_init_other_raises_type_error(self):
        from josecore.util import frozendict
        # specifically fail for generators...
        with pytest.raises(TypeError):
            frozendict({'a': 'b'}.items())

    def test_len(self):
        assert 2 == len(self.fdict)

    def test_hash(self):
        from josecore.util import frozendict
        assert isinstance(hash(self.fdict), int)
        assert hash(self.fdict) == hash(frozendict(y='2', x=1))

    def test_insertion_order(self):
        from josecore.util import frozendict
        assert list(frozendict({'b': 1, 'a': 2})) == ['b', 'a']

    def test_getattr_proxy(self):
        assert 1 == self.fdict.x
        assert '2' == self.fdict.y

    def test_getattr_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            self.fdict.__getattr__('z')

    def test_setattr_immutable(self):
        with pytest.raises(AttributeError):
            self.fdict.__setattr__('z', 3)

    def test_repr(self):
        assert "frozendict(x=1, y='2')" == repr(self.fdict)


class SecretBytesTest(unittest.TestCase):
    """Tests for josecore.util.SecretBytes."""

    def test_wiped_on_exit(self):
        from josecore.util import SecretBytes
        with SecretBytes(b'secret') as secret:
            buf = secret.value
            assert bytes(secret) == b'secret'
            assert len(secret) == 6
        assert buf == bytearray(6)

    def test_wiped_on_error(self):
        from josecore.util import SecretBytes
        secret = SecretBytes(b'secret')
        with pytest.raises(ValueError):
            with secret:
                raise ValueError()
        assert bytes(secret) == bytes(6)

    def test_copy_is_independent(self):
        from josecore.util import SecretBytes
        original = SecretBytes(b'secret')
        copy = SecretBytes(original)
        original.wipe()
        assert bytes(copy) == b'secret'

    def test_repr_hides_value(self):
        from josecore.util import SecretBytes
        assert 'secret' not in repr(SecretBytes(b'secret'))
        assert repr(SecretBytes(b'secret')) == '<SecretBytes(6 bytes)>'


class ConstantTimeEqTest(unittest.TestCase):
    """Tests for josecore.util.constant_time_eq."""

    def test_eq(self):
        from josecore.util import constant_time_eq
        assert constant_time_eq(b'abc', bytearray(b'abc'))
        assert not constant_time_eq(b'abc', b'abd')
        assert not constant_time_eq(b'abc', b'ab')


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
