"""JSON Web Key.

https://datatracker.ietf.org/doc/html/rfc7517

"""
import abc
import json
import logging
import secrets
from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import Mapping
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Type
from typing import Union

import cryptography.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed448
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import x448
from cryptography.hazmat.primitives.asymmetric import x25519

from josecore import errors
from josecore import json_util
from josecore import util

logger = logging.getLogger(__name__)


class JWK(json_util.TypedJSONObjectWithFields, metaclass=abc.ABCMeta):
    """JSON Web Key.

    Key parameters are held by subclasses in the ``key`` slot; common
    metadata members are fields of this class. Instances are immutable.

    :ivar str kid: Key ID.
    :ivar str use: Public key use, ``"sig"`` or ``"enc"``.
    :ivar tuple key_ops: Key operations.
    :ivar str alg: Algorithm the key is intended for.
    :ivar x5tS256: "x5t#S256"

    """
    type_field_name = 'kty'
    TYPES: Dict[str, Type['JWK']] = {}
    cryptography_key_types: Tuple[Type[Any], ...] = ()
    """Subclasses should override."""

    required: Sequence[str] = NotImplemented
    """Required members of public key's representation as defined by JWK/JWA."""

    kid = json_util.Field('kid', omitempty=True)
    use = json_util.Field('use', omitempty=True)
    key_ops = json_util.Field('key_ops', omitempty=True, default=())
    alg = json_util.Field('alg', omitempty=True)
    x5u = json_util.Field('x5u', omitempty=True)
    x5c = json_util.Field('x5c', omitempty=True, default=(),
                          decoder=json_util.decode_x5c,
                          encoder=json_util.encode_x5c)
    x5t = json_util.Field('x5t', omitempty=True,
                          decoder=json_util.decode_b64jose,
                          encoder=json_util.encode_b64jose)
    x5tS256 = json_util.Field('x5t#S256', omitempty=True,
                              decoder=json_util.decode_b64jose,
                              encoder=json_util.encode_b64jose)

    _thumbprint_json_dumps_params: Dict[str, Any] = {
        # "no whitespace or line breaks before or after any syntactic
        # elements"
        'indent': None,
        'separators': (',', ':'),
        # "members ordered lexicographically by the Unicode [UNICODE]
        # code points of the member names"
        'sort_keys': True,
    }

    key: Any

    @key_ops.decoder
    def key_ops(value: Any) -> Tuple[str, ...]:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        if (isinstance(value, str) or not isinstance(value, (list, tuple)) or
                not all(isinstance(op, str) for op in value)):
            raise errors.DeserializationError('"key_ops" must be a list of strings')
        if len(set(value)) != len(value):
            raise errors.DeserializationError('"key_ops" contains duplicates')
        return tuple(value)

    def thumbprint(self, hash_function: Callable[[], hashes.HashAlgorithm] = hashes.SHA256
                   ) -> bytes:
        """Compute JWK Thumbprint.

        https://datatracker.ietf.org/doc/html/rfc7638

        Only the required members take part, so the result does not
        depend on metadata, private members, or member order.

        :returns: Digest of the canonical JSON form.
        :rtype: bytes

        """
        digest = hashes.Hash(hash_function())
        digest.update(json.dumps(
            {k: v for k, v in self.to_json().items() if k in self.required},
            **self._thumbprint_json_dumps_params).encode())
        return digest.finalize()

    @abc.abstractmethod
    def public_key(self) -> 'JWK':  # pragma: no cover
        """Generate JWK with public key.

        For symmetric cryptosystems, this would return ``self``.

        """
        raise NotImplementedError()

    @property
    @abc.abstractmethod
    def is_private(self) -> bool:  # pragma: no cover
        """Does the key hold private (or secret) material?"""
        raise NotImplementedError()

    @property
    @abc.abstractmethod
    def key_size(self) -> int:  # pragma: no cover
        """Key size in bits."""
        raise NotImplementedError()

    @property
    def crv(self) -> Optional[str]:
        """Curve name, for curve based keys."""
        return None

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWK':
        """Parse and validate a JWK.

        :raises josecore.errors.InvalidKeyError: if key type is unknown,
            required members are missing, or key material is invalid.

        """
        try:
            return super().from_json(jobj)  # type: ignore[return-value]
        except errors.InvalidKeyError:
            raise
        except errors.DeserializationError as error:
            raise errors.InvalidKeyError(str(error)) from error

    @classmethod
    def _load_cryptography_key(cls, data: bytes, password: Optional[bytes] = None) -> Any:
        exceptions = {}

        # private key?
        for loader in (serialization.load_pem_private_key,
                       serialization.load_der_private_key):
            try:
                return loader(data, password)
            except (ValueError, TypeError,
                    cryptography.exceptions.UnsupportedAlgorithm) as error:
                exceptions[loader] = error

        # public key?
        for loader in (serialization.load_pem_public_key,  # type: ignore[assignment]
                       serialization.load_der_public_key):
            try:
                return loader(data)  # type: ignore[call-arg]
            except (ValueError,
                    cryptography.exceptions.UnsupportedAlgorithm) as error:
                exceptions[loader] = error

        # no luck
        raise errors.InvalidKeyError('Unable to deserialize key: {0}'.format(exceptions))

    @classmethod
    def load(cls, data: bytes, password: Optional[bytes] = None, **kwargs: Any) -> 'JWK':
        """Load serialized key as JWK.

        :param bytes data: Public or private key serialized as PEM or DER.
        :param bytes password: Optional password.
        :param kwargs: JWK metadata (``kid``, ``use``, ...).

        :raises errors.InvalidKeyError: if unable to deserialize, or
            unsupported JWK algorithm

        :returns: JWK of an appropriate type.
        :rtype: `JWK`

        """
        try:
            key = cls._load_cryptography_key(data, password)
        except errors.InvalidKeyError as error:
            logger.debug('Loading symmetric key, asymmetric failed: %s', error)
            if cls.typ is not NotImplemented and cls is not JWKOct:
                raise
            return JWKOct(key=data, **kwargs)

        if cls.typ is not NotImplemented and not isinstance(
                key, cls.cryptography_key_types):
            raise errors.InvalidKeyError('Unable to deserialize {0} into {1}'.format(
                key.__class__, cls.__name__))
        for jwk_cls in cls.TYPES.values():
            if isinstance(key, jwk_cls.cryptography_key_types):
                return jwk_cls(key=key, **kwargs)
        raise errors.InvalidKeyError('Unsupported algorithm: {0}'.format(key.__class__))


def _encode_uint(value: int, length: Optional[int] = None) -> str:
    """Encode Base64urlUInt, optionally left padded to ``length`` octets."""
    if length is None:
        length = max(1, (value.bit_length() + 7) // 8)
    return json_util.encode_b64jose(value.to_bytes(length, 'big'))


def _decode_uint(data: Any, length: Optional[int] = None) -> int:
    """Decode Base64urlUInt, optionally of exactly ``length`` octets."""
    try:
        raw = json_util.decode_b64jose(data, size=length)
    except errors.DeserializationError as error:
        raise errors.InvalidKeyError(str(error))
    if not raw:
        raise errors.InvalidKeyError('Empty integer parameter')
    return int.from_bytes(raw, 'big')


@JWK.register
class JWKOct(JWK):
    """Symmetric JWK.

    :ivar bytes key: Key octets.

    """
    typ = 'oct'
    __slots__ = ('key',)
    required = ('k', JWK.type_field_name)

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs and not isinstance(kwargs['key'], bytes):
            if isinstance(kwargs['key'], str):
                kwargs['key'] = kwargs['key'].encode('utf-8')
            else:
                kwargs['key'] = bytes(kwargs['key'])
        super().__init__(**kwargs)

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj['k'] = json_util.encode_b64jose(self.key)
        return jobj

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        if 'k' not in jobj:
            raise errors.InvalidKeyError('Symmetric key is missing "k"')
        fields = super().fields_from_json(jobj)
        try:
            fields['key'] = json_util.decode_b64jose(jobj['k'])
        except errors.DeserializationError as error:
            raise errors.InvalidKeyError(str(error))
        return fields

    @classmethod
    def generate(cls, key_size: int = 256, **kwargs: Any) -> 'JWKOct':
        """Generate random symmetric key of ``key_size`` bits."""
        if key_size <= 0 or key_size % 8:
            raise errors.InvalidKeyError('Key size must be a positive multiple of 8')
        return cls(key=secrets.token_bytes(key_size // 8), **kwargs)

    def public_key(self) -> 'JWKOct':
        return self

    @property
    def is_private(self) -> bool:
        return True

    @property
    def key_size(self) -> int:
        return len(self.key) * 8


@JWK.register
class JWKRSA(JWK):
    """RSA JWK.

    :ivar key: :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey`
        or :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey` wrapped
        in :class:`~josecore.util.ComparableRSAKey`

    """
    typ = 'RSA'
    cryptography_key_types = (rsa.RSAPublicKey, rsa.RSAPrivateKey)
    __slots__ = ('key',)
    required = ('e', JWK.type_field_name, 'n')

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs and not isinstance(
                kwargs['key'], util.ComparableRSAKey):
            kwargs['key'] = util.ComparableRSAKey(kwargs['key'])
        super().__init__(**kwargs)

    @classmethod
    def _encode_param(cls, data: int) -> str:
        """Encode Base64urlUInt."""
        return _encode_uint(data)

    @classmethod
    def _decode_param(cls, data: str) -> int:
        """Decode Base64urlUInt."""
        return _decode_uint(data)

    @classmethod
    def generate(cls, key_size: int = 2048, public_exponent: int = 65537,
                 **kwargs: Any) -> 'JWKRSA':
        """Generate RSA private key."""
        return cls(key=rsa.generate_private_key(
            public_exponent=public_exponent, key_size=key_size), **kwargs)

    def public_key(self) -> 'JWKRSA':
        return self.update(key=self.key.public_key())

    @property
    def is_private(self) -> bool:
        return isinstance(self.key._wrapped, rsa.RSAPrivateKey)  # pylint: disable=protected-access

    @property
    def key_size(self) -> int:
        return self.key.key_size

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        # pylint: disable=invalid-name
        missing = [x for x in ('n', 'e') if x not in jobj]
        if missing:
            raise errors.InvalidKeyError(
                'RSA key is missing: {0}'.format(', '.join(missing)))
        fields = super().fields_from_json(jobj)
        n, e = (cls._decode_param(jobj[x]) for x in ('n', 'e'))
        public_numbers = rsa.RSAPublicNumbers(e=e, n=n)
        try:
            if 'd' not in jobj:  # public key
                if any(x in jobj for x in ('p', 'q', 'dp', 'dq', 'qi', 'oth')):
                    raise errors.InvalidKeyError(
                        'Private parameters present without "d"')
                key = public_numbers.public_key()
            else:  # private key
                if 'oth' in jobj:
                    raise errors.InvalidKeyError(
                        'Multi-prime RSA keys ("oth") are not supported')
                d = cls._decode_param(jobj['d'])
                if ('p' in jobj or 'q' in jobj or 'dp' in jobj or
                        'dq' in jobj or 'qi' in jobj):
                    # "If the producer includes any of the other private
                    # key parameters, then all of the others MUST be
                    # present, with the exception of "oth", which MUST
                    # only be present when more than two prime factors
                    # were used."
                    all_params = tuple(
                        jobj.get(x) for x in ('p', 'q', 'dp', 'dq', 'qi'))
                    if tuple(param for param in all_params if param is None):
                        raise errors.InvalidKeyError(
                            'Some private parameters are missing: {0}'.format(
                                ', '.join(x for x, param in zip(
                                    ('p', 'q', 'dp', 'dq', 'qi'), all_params)
                                    if param is None)))
                    p, q, dp, dq, qi = tuple(
                        cls._decode_param(x) for x in all_params)
                else:
                    p, q = rsa.rsa_recover_prime_factors(n, e, d)
                    dp = rsa.rsa_crt_dmp1(d, p)
                    dq = rsa.rsa_crt_dmq1(d, q)
                    qi = rsa.rsa_crt_iqmp(p, q)

                key = rsa.RSAPrivateNumbers(
                    p, q, d, dp, dq, qi, public_numbers).private_key()
        except (ValueError, TypeError) as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError('Invalid RSA key parameters')

        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        if not self.is_private:
            numbers = self.key.public_numbers()
            params = {
                'n': numbers.n,
                'e': numbers.e,
            }
        else:  # rsa.RSAPrivateKey
            private = self.key.private_numbers()
            public = self.key.public_key().public_numbers()
            params = {
                'n': public.n,
                'e': public.e,
                'd': private.d,
                'p': private.p,
                'q': private.q,
                'dp': private.dmp1,
                'dq': private.dmq1,
                'qi': private.iqmp,
            }
        jobj.update((key, self._encode_param(value))
                    for key, value in params.items())
        return jobj


@JWK.register
class JWKEC(JWK):
    """Elliptic curve JWK.

    :ivar key: :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePrivateKey`
        or :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePublicKey`
        wrapped in :class:`~josecore.util.ComparableECKey`

    """
    typ = 'EC'
    cryptography_key_types = (
        ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey)
    __slots__ = ('key',)
    required = ('crv', JWK.type_field_name, 'x', 'y')

    CURVES: Dict[str, Type[ec.EllipticCurve]] = {
        'P-256': ec.SECP256R1,
        'P-384': ec.SECP384R1,
        'P-521': ec.SECP521R1,
        'secp256k1': ec.SECP256K1,
    }
    """Supported curves, by JWK "crv" name."""

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs:
            if not isinstance(kwargs['key'], util.ComparableECKey):
                kwargs['key'] = util.ComparableECKey(kwargs['key'])
            if self._curve_name(kwargs['key'].curve) is None:
                raise errors.InvalidKeyError('Unsupported curve: {0}'.format(
                    kwargs['key'].curve.name))
        super().__init__(**kwargs)

    @classmethod
    def _curve_name(cls, curve: ec.EllipticCurve) -> Optional[str]:
        for name, curve_cls in cls.CURVES.items():
            if isinstance(curve, curve_cls):
                return name
        return None

    @classmethod
    def _coordinate_size(cls, curve: ec.EllipticCurve) -> int:
        return (curve.key_size + 7) // 8

    @classmethod
    def generate(cls, crv: str = 'P-256', **kwargs: Any) -> 'JWKEC':
        """Generate elliptic curve private key on curve ``crv``."""
        try:
            curve = cls.CURVES[crv]()
        except KeyError:
            raise errors.InvalidKeyError('Unsupported curve: {0}'.format(crv))
        return cls(key=ec.generate_private_key(curve), **kwargs)

    def public_key(self) -> 'JWKEC':
        return self.update(key=self.key.public_key())

    @property
    def is_private(self) -> bool:
        return isinstance(self.key._wrapped, ec.EllipticCurvePrivateKey)  # pylint: disable=protected-access

    @property
    def key_size(self) -> int:
        return self.key.curve.key_size

    @property
    def crv(self) -> Optional[str]:
        return self._curve_name(self.key.curve)

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        missing = [x for x in ('crv', 'x', 'y') if x not in jobj]
        if missing:
            raise errors.InvalidKeyError(
                'EC key is missing: {0}'.format(', '.join(missing)))
        try:
            curve = cls.CURVES[jobj['crv']]()
        except (KeyError, TypeError):
            raise errors.InvalidKeyError('Unsupported curve: {0!r}'.format(jobj['crv']))
        fields = super().fields_from_json(jobj)
        size = cls._coordinate_size(curve)
        x, y = (_decode_uint(jobj[param], size) for param in ('x', 'y'))
        public_numbers = ec.EllipticCurvePublicNumbers(x, y, curve)
        try:
            if 'd' not in jobj:
                key = public_numbers.public_key()
            else:
                d = _decode_uint(jobj['d'], size)
                key = ec.EllipticCurvePrivateNumbers(d, public_numbers).private_key()
        except ValueError as error:
            # not on curve, or private value does not match
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError('Invalid EC key parameters')
        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        size = self._coordinate_size(self.key.curve)
        if self.is_private:
            private = self.key.private_numbers()
            public = private.public_numbers
            jobj['d'] = _encode_uint(private.private_value, size)
        else:
            public = self.key.public_numbers()
        jobj['crv'] = self.crv
        jobj['x'] = _encode_uint(public.x, size)
        jobj['y'] = _encode_uint(public.y, size)
        return jobj


OKPPrivateKey = Union[ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey,
                      x25519.X25519PrivateKey, x448.X448PrivateKey]
OKPPublicKey = Union[ed25519.Ed25519PublicKey, ed448.Ed448PublicKey,
                     x25519.X25519PublicKey, x448.X448PublicKey]


@JWK.register
class JWKOKP(JWK):
    """Octet key pair JWK (RFC 8037).

    Edwards curves (Ed25519, Ed448) sign, Montgomery curves (X25519,
    X448) do key agreement.

    :ivar key: ``cryptography`` Ed25519/Ed448/X25519/X448 key wrapped in
        :class:`~josecore.util.ComparableOKPKey`

    """
    typ = 'OKP'
    cryptography_key_types = (
        ed25519.Ed25519PublicKey, ed25519.Ed25519PrivateKey,
        ed448.Ed448PublicKey, ed448.Ed448PrivateKey,
        x25519.X25519PublicKey, x25519.X25519PrivateKey,
        x448.X448PublicKey, x448.X448PrivateKey,
    )
    __slots__ = ('key',)
    required = ('crv', JWK.type_field_name, 'x')

    # crv: (private class, public class, key size in bits)
    CURVES: Dict[str, Tuple[Any, Any, int]] = {
        'Ed25519': (ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey, 256),
        'Ed448': (ed448.Ed448PrivateKey, ed448.Ed448PublicKey, 456),
        'X25519': (x25519.X25519PrivateKey, x25519.X25519PublicKey, 256),
        'X448': (x448.X448PrivateKey, x448.X448PublicKey, 448),
    }
    """Supported curves, by JWK "crv" name."""

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs and not isinstance(
                kwargs['key'], util.ComparableOKPKey):
            kwargs['key'] = util.ComparableOKPKey(kwargs['key'])
        super().__init__(**kwargs)

    @classmethod
    def generate(cls, crv: str = 'Ed25519', **kwargs: Any) -> 'JWKOKP':
        """Generate private key on curve ``crv``."""
        try:
            private_cls = cls.CURVES[crv][0]
        except KeyError:
            raise errors.InvalidKeyError('Unsupported curve: {0}'.format(crv))
        return cls(key=private_cls.generate(), **kwargs)

    def public_key(self) -> 'JWKOKP':
        return self.update(key=self.key.public_key())

    @property
    def is_private(self) -> bool:
        return any(isinstance(self.key._wrapped, private_cls)  # pylint: disable=protected-access
                   for private_cls, _, _ in self.CURVES.values())

    @property
    def crv(self) -> Optional[str]:
        for name, (private_cls, public_cls, _) in self.CURVES.items():
            if isinstance(self.key._wrapped, (private_cls, public_cls)):  # pylint: disable=protected-access
                return name
        return None  # pragma: no cover

    @property
    def key_size(self) -> int:
        return self.CURVES[self.crv][2]  # type: ignore[index]

    def _public_bytes(self) -> bytes:
        public = self.key.public_key() if self.is_private else self.key
        return public.public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw)

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        missing = [x for x in ('crv', 'x') if x not in jobj]
        if missing:
            raise errors.InvalidKeyError(
                'OKP key is missing: {0}'.format(', '.join(missing)))
        try:
            private_cls, public_cls, _ = cls.CURVES[jobj['crv']]
        except (KeyError, TypeError):
            raise errors.InvalidKeyError('Unsupported curve: {0!r}'.format(jobj['crv']))
        fields = super().fields_from_json(jobj)
        try:
            x = json_util.decode_b64jose(jobj['x'])
            public = public_cls.from_public_bytes(x)
            if 'd' not in jobj:
                key = public
            else:
                key = private_cls.from_private_bytes(json_util.decode_b64jose(jobj['d']))
                derived = key.public_key().public_bytes(
                    serialization.Encoding.Raw, serialization.PublicFormat.Raw)
                if not util.constant_time_eq(derived, x):
                    raise errors.InvalidKeyError('"x" does not match "d"')
        except (ValueError, errors.DeserializationError) as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError('Invalid OKP key parameters')
        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj['crv'] = self.crv
        jobj['x'] = json_util.encode_b64jose(self._public_bytes())
        if self.is_private:
            jobj['d'] = json_util.encode_b64jose(self.key.private_bytes(
                serialization.Encoding.Raw, serialization.PrivateFormat.Raw,
                serialization.NoEncryption()))
        return jobj


class JWKSet(json_util.JSONObjectWithFields):
    """JSON Web Key Set.

    Members with a "kty" that is not understood are skipped, as RFC 7517
    section 5 recommends. Any other invalid member fails the whole set.

    :ivar tuple keys: :class:`JWK` members.

    """
    keys = json_util.Field('keys', default=())

    @keys.decoder
    def keys(value: Any) -> Tuple[JWK, ...]:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise errors.DeserializationError('"keys" must be a list')
        keys = []
        for jobj in value:
            try:
                keys.append(JWK.from_json(jobj))
            except errors.InvalidKeyError as error:
                if isinstance(error.__cause__, errors.UnrecognizedTypeError):
                    logger.debug('Skipping key of unrecognized type: %s',
                                 error.__cause__.typ)
                    continue
                raise
        return tuple(keys)

    def find_by_kid(self, kid: str) -> Optional[JWK]:
        """Find key by its key ID.

        :returns: First key with matching ``kid``, or ``None``.

        """
        for key in self.keys:
            if key.kid == kid:
                return key
        return None

    def public_keys(self) -> 'JWKSet':
        """Set with private material stripped from every key."""
        return type(self)(keys=tuple(key.public_key() for key in self.keys))


def key_list(keys: Union[JWK, JWKSet, Iterable[JWK]]) -> Tuple[JWK, ...]:
    """Normalize a key, a key set, or an iterable of keys to a tuple."""
    if isinstance(keys, JWK):
        return (keys,)
    if isinstance(keys, JWKSet):
        return tuple(keys.keys)
    keys = tuple(keys)
    for key in keys:
        if not isinstance(key, JWK):
            raise TypeError('{0!r} is not a JWK'.format(key))
    return keys
