"""JOSE utilities."""
from collections.abc import Hashable
from collections.abc import Mapping
from typing import Any
from typing import Callable
from typing import Iterator
from typing import Optional
from typing import TypeVar
from typing import Union

from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import rsa


class ComparableKey:
    """Comparable wrapper for ``cryptography`` keys.

    See https://github.com/pyca/cryptography/issues/2122.

    """
    __hash__: Callable[[], int] = NotImplemented  # type: ignore

    def __init__(self, wrapped: Any) -> None:
        self._wrapped = wrapped

    def __getattr__(self, name: str) -> Any:
        return getattr(self._wrapped, name)

    @property
    def wrapped(self) -> Any:
        """The ``cryptography`` key itself."""
        return self._wrapped

    def _raw(self) -> Optional[bytes]:
        # Edwards and Montgomery keys have no "numbers"
        if hasattr(self._wrapped, 'private_bytes'):
            return self._wrapped.private_bytes(
                serialization.Encoding.Raw, serialization.PrivateFormat.Raw,
                serialization.NoEncryption())
        elif hasattr(self._wrapped, 'public_bytes'):
            return self._wrapped.public_bytes(
                serialization.Encoding.Raw, serialization.PublicFormat.Raw)
        return None

    def __eq__(self, other: Any) -> bool:
        # pylint: disable=protected-access
        if (not isinstance(other, self.__class__) or
                self._wrapped.__class__ is not other._wrapped.__class__):
            return NotImplemented
        elif hasattr(self._wrapped, 'private_numbers'):
            return self.private_numbers() == other.private_numbers()
        elif hasattr(self._wrapped, 'public_numbers'):
            return self.public_numbers() == other.public_numbers()
        raw = self._raw()
        if raw is None:
            return NotImplemented
        return constant_time_eq(raw, other._raw())

    def __repr__(self) -> str:
        return '<{0}({1!r})>'.format(self.__class__.__name__, self._wrapped)

    def public_key(self) -> 'ComparableKey':
        """Get wrapped public key."""
        if not hasattr(self._wrapped, 'public_key'):
            return self
        return self.__class__(self._wrapped.public_key())


class ComparableRSAKey(ComparableKey):
    """Wrapper for ``cryptography`` RSA keys.

    Wraps around:

    - :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey`
    - :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey`

    """

    def __hash__(self) -> int:
        # public_numbers() hasn't got stable hash!
        # https://github.com/pyca/cryptography/issues/2143
        if isinstance(self._wrapped, rsa.RSAPrivateKey):
            priv = self.private_numbers()
            pub = priv.public_numbers
            return hash((self.__class__, priv.p, priv.q, priv.dmp1,
                         priv.dmq1, priv.iqmp, pub.n, pub.e))
        pub = self.public_numbers()
        return hash((self.__class__, pub.n, pub.e))


class ComparableECKey(ComparableKey):
    """Wrapper for ``cryptography`` elliptic curve keys.

    Wraps around:

    - :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePrivateKey`
    - :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePublicKey`

    """

    def __hash__(self) -> int:
        if isinstance(self._wrapped, ec.EllipticCurvePrivateKey):
            priv = self.private_numbers()
            pub = priv.public_numbers
            return hash((self.__class__, pub.curve.name, pub.x, pub.y,
                         priv.private_value))
        pub = self.public_numbers()
        return hash((self.__class__, pub.curve.name, pub.x, pub.y))


class ComparableOKPKey(ComparableKey):
    """Wrapper for ``cryptography`` Edwards and Montgomery curve keys
    (Ed25519, Ed448, X25519, X448)."""

    def __hash__(self) -> int:
        return hash((self.__class__, self._wrapped.__class__, self._raw()))


GenericImmutableMap = TypeVar('GenericImmutableMap', bound='ImmutableMap')


class ImmutableMap(Mapping, Hashable):
    """Immutable key to value mapping with attribute access."""

    __slots__: tuple = ()
    """Must be overridden in subclasses."""

    def __init__(self, **kwargs: Any) -> None:
        if set(kwargs) != set(self.__slots__):
            raise TypeError(
                '__init__() takes exactly the following arguments: {0} '
                '({1} given)'.format(', '.join(self.__slots__),
                                     ', '.join(kwargs) if kwargs else 'none'))
        for slot in self.__slots__:
            object.__setattr__(self, slot, kwargs.pop(slot))

    def update(self: GenericImmutableMap, **kwargs: Any) -> GenericImmutableMap:
        """Return updated map."""
        items: dict = dict(self)
        items.update(kwargs)
        return type(self)(**items)

    def __getitem__(self, key: str) -> Any:
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__slots__)

    def __len__(self) -> int:
        return len(self.__slots__)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, slot) for slot in self.__slots__))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("can't set attribute")

    def __repr__(self) -> str:
        return '{0}({1})'.format(self.__class__.__name__, ', '.join(
            '{0}={1!r}'.format(key, value)
            for key, value in self.items()))


class frozendict(Mapping, Hashable):  # pylint: disable=invalid-name
    """Frozen dictionary.

    Iteration follows insertion order of the source mapping.

    """
    __slots__ = ('_items', '_keys')

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        items: Mapping
        if kwargs and not args:
            items = dict(kwargs)
        elif len(args) == 1 and isinstance(args[0], Mapping):
            items = dict(args[0])
        elif not args:
            items = {}
        else:
            raise TypeError()

        object.__setattr__(self, '_items', items)
        object.__setattr__(self, '_keys', tuple(items))

    def __getitem__(self, key: Any) -> Any:
        return self._items[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._items)

    def _sorted_items(self) -> tuple:
        return tuple((key, self[key]) for key in sorted(self._keys))

    def __hash__(self) -> int:
        return hash(self._sorted_items())

    def __getattr__(self, name: str) -> Any:
        try:
            return self._items[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("can't set attribute")

    def __repr__(self) -> str:
        return 'frozendict({0})'.format(', '.join('{0}={1!r}'.format(
            key, value) for key, value in self._sorted_items()))


GenericSecretBytes = TypeVar('GenericSecretBytes', bound='SecretBytes')


class SecretBytes:
    """Scoped secret octets.

    Holds key material (CEKs, key wrapping keys, KDF output) in a
    mutable buffer that is overwritten with zeros when the ``with``
    block exits, whether normally or through an exception::

      with SecretBytes(os.urandom(32)) as cek:
          ciphertext = alg.encrypt(cek.value, ...)

    :attr:`value` is the live buffer. ``cryptography`` accepts it
    wherever it accepts ``bytes``.

    """
    __slots__ = ('_buf',)

    def __init__(self, data: Union[bytes, bytearray, 'SecretBytes'] = b'') -> None:
        if isinstance(data, SecretBytes):
            data = data.value
        self._buf = bytearray(data)

    def __enter__(self: GenericSecretBytes) -> GenericSecretBytes:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.wipe()

    @property
    def value(self) -> bytearray:
        """The secret buffer."""
        return self._buf

    def wipe(self) -> None:
        """Overwrite the buffer with zeros."""
        self._buf[:] = bytes(len(self._buf))

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({len(self._buf)} bytes)>'


def constant_time_eq(first: Union[bytes, bytearray],
                     second: Union[bytes, bytearray]) -> bool:
    """Compare two octet strings in time independent of their contents."""
    return constant_time.bytes_eq(bytes(first), bytes(second))
