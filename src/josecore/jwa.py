"""JSON Web Algorithms.

https://datatracker.ietf.org/doc/html/rfc7518

The set of algorithms is closed: every algorithm is a module level
singleton created at import time, and :meth:`JWA.from_json` refuses
any name outside of that set. Each algorithm carries a
:class:`Capability` descriptor (see :func:`describe`) and binds the
``cryptography`` primitive that implements it.

"""
import abc
from collections.abc import Hashable
import logging
import os
import struct
from typing import Any
from typing import Callable
from typing import Dict
from typing import FrozenSet
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

import cryptography.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives import keywrap
from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric import utils as asym_utils
from cryptography.hazmat.primitives.asymmetric import x448
from cryptography.hazmat.primitives.asymmetric import x25519
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import algorithms as ciphers
from cryptography.hazmat.primitives.ciphers import modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.concatkdf import ConcatKDFHash
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from josecore import errors
from josecore import interfaces
from josecore import jwk
from josecore import util

logger = logging.getLogger(__name__)

DEFAULT_PBES2_ITERATIONS = 310000
"""PBES2 iteration count ("p2c") used when the caller gives none."""

MIN_PBES2_ITERATIONS = 1000
"""Smallest "p2c" accepted, RFC 7518 section 4.8.1.2."""

MAX_PBES2_ITERATIONS = 1000000
"""Largest "p2c" accepted on decryption."""

PBES2_SALT_SIZE = 16
"""Size of generated "p2s" in bytes."""


class Capability(util.ImmutableMap):
    """Algorithm capability descriptor.

    :ivar str name: Algorithm name as it appears in "alg" or "enc".
    :ivar str use: ``"sig"`` for signatures, ``"enc"`` for key
        management and content encryption.
    :ivar tuple kty: JWK classes the algorithm accepts (empty for
        content encryption, which takes a raw CEK, and for "none").
    :ivar int key_size: Required key size in bits, or ``None``.
    :ivar bool key_size_minimum: ``key_size`` is a lower bound rather
        than an exact size.
    :ivar frozenset curves: Accepted curves, empty when not applicable.
    :ivar bool ephemeral_key: Algorithm produces and consumes an
        ephemeral public key ("epk").
    :ivar bool iv: Algorithm consumes an initialization vector.
    :ivar frozenset key_ops: JWK "key_ops" values the algorithm may
        be used under.

    """
    __slots__ = ('name', 'use', 'kty', 'key_size', 'key_size_minimum',
                 'curves', 'ephemeral_key', 'iv', 'key_ops')


_SIG_OPS = frozenset(['sign', 'verify'])
_KW_OPS = frozenset(['wrapKey', 'unwrapKey', 'encrypt', 'decrypt'])
_KA_OPS = frozenset(['deriveKey', 'deriveBits'])


def _capability(name: str, use: str, kty: Tuple[Type[jwk.JWK], ...] = (),
                key_size: Optional[int] = None, key_size_minimum: bool = False,
                curves: FrozenSet[str] = frozenset(), ephemeral_key: bool = False,
                iv: bool = False, key_ops: FrozenSet[str] = frozenset()) -> Capability:
    return Capability(name=name, use=use, kty=kty, key_size=key_size,
                      key_size_minimum=key_size_minimum, curves=curves,
                      ephemeral_key=ephemeral_key, iv=iv, key_ops=key_ops)


def _raw_key(key: Any) -> Any:
    """Unwrap :class:`~josecore.util.ComparableKey` and :class:`~josecore.jwk.JWK`."""
    if isinstance(key, jwk.JWK):
        key = key.key
    return getattr(key, 'wrapped', key)


def _public(key: Any) -> Any:
    key = _raw_key(key)
    if hasattr(key, 'private_bytes') and hasattr(key, 'public_key'):
        return key.public_key()
    return key


class JWA(interfaces.JSONDeSerializable, Hashable):  # pylint: disable=abstract-method
    """JSON Web Algorithm.

    Serializes to (and from) its name.

    """
    ALGORITHMS: Dict[str, 'JWA'] = NotImplemented
    """Algorithms of this family, by name. Subclasses override."""

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    @abc.abstractmethod
    def capability(self) -> Capability:  # pragma: no cover
        """Capability descriptor."""
        raise NotImplementedError()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JWA):
            return NotImplemented
        return self.__class__ is other.__class__ and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.__class__, self.name))

    def to_partial_json(self) -> str:
        return self.name

    @classmethod
    def from_json(cls, jobj: Any) -> 'JWA':
        """Look up algorithm by name.

        :raises josecore.errors.UnsupportedAlgorithm: if ``jobj`` does not
            name an algorithm of this family.

        """
        try:
            return cls.ALGORITHMS[jobj]
        except (KeyError, TypeError):
            raise errors.UnsupportedAlgorithm(jobj)

    def __repr__(self) -> str:
        return self.name


class JWASignature(JWA):
    """Base class for JSON Web Signature Algorithms."""
    ALGORITHMS: Dict[str, JWA] = {}
    kty: Tuple[Type[jwk.JWK], ...] = ()

    @abc.abstractmethod
    def sign(self, key: Any, msg: bytes) -> bytes:  # pragma: no cover
        """Sign the ``msg`` using ``key``."""
        raise NotImplementedError()

    @abc.abstractmethod
    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:  # pragma: no cover
        """Verify the ``msg`` and ``sig`` using ``key``."""
        raise NotImplementedError()


class _JWAHS(JWASignature):

    kty = (jwk.JWKOct,)

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        self.hash = hash_()

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'sig', self.kty, self.hash.digest_size * 8,
                           key_size_minimum=True, key_ops=_SIG_OPS)

    def sign(self, key: bytes, msg: bytes) -> bytes:
        signer = hmac.HMAC(_raw_key(key), self.hash)
        signer.update(msg)
        return signer.finalize()

    def verify(self, key: bytes, msg: bytes, sig: bytes) -> bool:
        verifier = hmac.HMAC(_raw_key(key), self.hash)
        verifier.update(msg)
        try:
            verifier.verify(sig)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWARSA:

    kty = (jwk.JWKRSA,)
    name: str
    padding: Any = NotImplemented
    hash: hashes.HashAlgorithm = NotImplemented

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'sig', self.kty, 2048,
                           key_size_minimum=True, key_ops=_SIG_OPS)

    def sign(self, key: Any, msg: bytes) -> bytes:
        """Sign the ``msg`` using ``key``."""
        try:
            return _raw_key(key).sign(msg, self.padding, self.hash)
        except AttributeError as error:
            logger.debug(error, exc_info=True)
            raise errors.AlgorithmKeyMismatch("Public key cannot be used for signing")
        except ValueError as error:  # digest too large
            logger.debug(error, exc_info=True)
            raise errors.AlgorithmKeyMismatch(str(error))

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        """Verify the ``msg`` and ``sig`` using ``key``."""
        try:
            _public(key).verify(sig, msg, self.padding, self.hash)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWARS(_JWARSA, JWASignature):

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        self.padding = padding.PKCS1v15()
        self.hash = hash_()


class _JWAPS(_JWARSA, JWASignature):

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        # RFC 7518 section 3.5: salt as long as the hash output
        self.padding = padding.PSS(
            mgf=padding.MGF1(hash_()),
            salt_length=hash_.digest_size)
        self.hash = hash_()


class _JWAES(JWASignature):

    kty = (jwk.JWKEC,)

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm],
                 curve: str) -> None:
        super().__init__(name)
        self.hash = hash_()
        self.curve = curve
        self.curve_cls = jwk.JWKEC.CURVES[curve]

    @property
    def _size(self) -> int:
        return (self.curve_cls.key_size + 7) // 8

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'sig', self.kty, self.curve_cls.key_size,
                           curves=frozenset([self.curve]), key_ops=_SIG_OPS)

    def _check_curve(self, key: Any) -> Any:
        if not isinstance(key.curve, self.curve_cls):
            raise errors.AlgorithmKeyMismatch(
                '{0} requires a key on {1}'.format(self.name, self.curve))
        return key

    def sign(self, key: Any, msg: bytes) -> bytes:
        """Sign the ``msg`` using ``key``.

        :returns: ``R || S``, each left padded to the curve size
            (RFC 7518 section 3.4), not DER.

        """
        key = self._check_curve(_raw_key(key))
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise errors.AlgorithmKeyMismatch("Public key cannot be used for signing")
        der = key.sign(msg, ec.ECDSA(self.hash))
        r, s = asym_utils.decode_dss_signature(der)  # pylint: disable=invalid-name
        return r.to_bytes(self._size, 'big') + s.to_bytes(self._size, 'big')

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        """Verify the ``msg`` and ``R || S`` ``sig`` using ``key``."""
        key = self._check_curve(_public(key))
        if len(sig) != 2 * self._size:
            logger.debug('%s signature has wrong size %d', self.name, len(sig))
            return False
        r = int.from_bytes(sig[:self._size], 'big')  # pylint: disable=invalid-name
        s = int.from_bytes(sig[self._size:], 'big')  # pylint: disable=invalid-name
        try:
            key.verify(asym_utils.encode_dss_signature(r, s), msg,
                       ec.ECDSA(self.hash))
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWAEdDSA(JWASignature):

    kty = (jwk.JWKOKP,)
    curves = frozenset(['Ed25519', 'Ed448'])

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'sig', self.kty, curves=self.curves,
                           key_ops=_SIG_OPS)

    def sign(self, key: Any, msg: bytes) -> bytes:
        key = _raw_key(key)
        if not hasattr(key, 'sign'):
            raise errors.AlgorithmKeyMismatch("Key cannot be used for signing")
        return key.sign(msg)

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        key = _public(key)
        if not hasattr(key, 'verify'):
            raise errors.AlgorithmKeyMismatch("Key cannot be used for verification")
        try:
            key.verify(sig, msg)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWANone(JWASignature):
    """Unsecured JWS ("alg": "none", RFC 7518 section 3.6)."""

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'sig')

    def sign(self, key: Any, msg: bytes) -> bytes:
        return b''

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        return sig == b''


class JWAContentEncryption(JWA):
    """Base class for JWE content encryption ("enc") algorithms."""
    ALGORITHMS: Dict[str, JWA] = {}

    cek_size: int = NotImplemented
    """CEK size in bytes."""

    iv_size: int = NotImplemented
    """IV size in bytes."""

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', key_size=self.cek_size * 8, iv=True)

    def generate_cek(self) -> util.SecretBytes:
        """Fresh random CEK of the right size."""
        return util.SecretBytes(os.urandom(self.cek_size))

    def generate_iv(self) -> bytes:
        """Fresh random IV of the right size."""
        return os.urandom(self.iv_size)

    def _check_cek(self, cek: Union[bytes, bytearray]) -> None:
        if len(cek) != self.cek_size:
            raise errors.AlgorithmKeyMismatch(
                '{0} requires a {1}-bit key'.format(self.name, self.cek_size * 8))

    @abc.abstractmethod
    def encrypt(self, cek: Union[bytes, bytearray], iv: bytes, plaintext: bytes,
                aad: bytes) -> Tuple[bytes, bytes]:  # pragma: no cover
        """Encrypt ``plaintext``.

        :returns: Ciphertext and authentication tag.

        """
        raise NotImplementedError()

    @abc.abstractmethod
    def decrypt(self, cek: Union[bytes, bytearray], iv: bytes, ciphertext: bytes,
                tag: bytes, aad: bytes) -> bytes:  # pragma: no cover
        """Authenticate and decrypt.

        :raises josecore.errors.CiphertextAuthenticationFailed: on any
            failure, without telling which.

        """
        raise NotImplementedError()


class _JWAAESCBCHMAC(JWAContentEncryption):
    """AES_CBC_HMAC_SHA2 composite, RFC 7518 section 5.2."""

    iv_size = 16

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm],
                 key_size: int) -> None:
        super().__init__(name)
        self.hash = hash_()
        self.half = key_size // 8
        self.cek_size = 2 * self.half

    def _tag(self, mac_key: Union[bytes, bytearray], aad: bytes, iv: bytes,
             ciphertext: bytes) -> bytes:
        # AL: number of bits in AAD as 64-bit big-endian unsigned integer
        al = struct.pack('>Q', len(aad) * 8)  # pylint: disable=invalid-name
        signer = hmac.HMAC(mac_key, self.hash)
        signer.update(aad + iv + ciphertext + al)
        return signer.finalize()[:self.half]

    def encrypt(self, cek: Union[bytes, bytearray], iv: bytes, plaintext: bytes,
                aad: bytes) -> Tuple[bytes, bytes]:
        self._check_cek(cek)
        mac_key, enc_key = cek[:self.half], cek[self.half:]
        padder = sym_padding.PKCS7(ciphers.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(ciphers.AES(enc_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return ciphertext, self._tag(mac_key, aad, iv, ciphertext)

    def decrypt(self, cek: Union[bytes, bytearray], iv: bytes, ciphertext: bytes,
                tag: bytes, aad: bytes) -> bytes:
        if len(cek) != self.cek_size or len(iv) != self.iv_size:
            raise errors.CiphertextAuthenticationFailed()
        mac_key, enc_key = cek[:self.half], cek[self.half:]
        # tag is checked before any decryption takes place
        if not util.constant_time_eq(self._tag(mac_key, aad, iv, ciphertext), tag):
            raise errors.CiphertextAuthenticationFailed()
        try:
            decryptor = Cipher(ciphers.AES(enc_key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = sym_padding.PKCS7(ciphers.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.CiphertextAuthenticationFailed()


class _JWAAESGCM(JWAContentEncryption):
    """AES GCM, RFC 7518 section 5.3."""

    iv_size = 12
    tag_size = 16

    def __init__(self, name: str, key_size: int) -> None:
        super().__init__(name)
        self.cek_size = key_size // 8

    def encrypt(self, cek: Union[bytes, bytearray], iv: bytes, plaintext: bytes,
                aad: bytes) -> Tuple[bytes, bytes]:
        self._check_cek(cek)
        sealed = AESGCM(cek).encrypt(iv, plaintext, aad)
        return sealed[:-self.tag_size], sealed[-self.tag_size:]

    def decrypt(self, cek: Union[bytes, bytearray], iv: bytes, ciphertext: bytes,
                tag: bytes, aad: bytes) -> bytes:
        if (len(cek) != self.cek_size or len(iv) != self.iv_size or
                len(tag) != self.tag_size):
            raise errors.CiphertextAuthenticationFailed()
        try:
            return AESGCM(cek).decrypt(iv, ciphertext + tag, aad)
        except cryptography.exceptions.InvalidTag as error:
            logger.debug(error, exc_info=True)
            raise errors.CiphertextAuthenticationFailed()


class JWAKeyManagement(JWA):
    """Base class for JWE key management ("alg") algorithms.

    Key wrapping algorithms implement :meth:`wrap`; direct key
    agreement and direct encryption (``direct = True``) implement
    :meth:`agree` instead and produce an empty JWE Encrypted Key. Both
    kinds implement :meth:`unwrap`.

    ``header`` arguments are the combined JWE header of the recipient
    (see :class:`josecore.jwe.Header`), read for "apu", "apv", "epk",
    "iv", "tag", "p2s" and "p2c". Header parameters produced by key
    management come back as a dict, keyed by JSON parameter name.

    """
    ALGORITHMS: Dict[str, JWA] = {}
    kty: Tuple[Type[jwk.JWK], ...] = ()

    direct = False
    """CEK is determined by the key, not randomly generated."""

    def agree(self, key: Any, enc: JWAContentEncryption,
              header: Any) -> Tuple[util.SecretBytes, Dict[str, Any]]:
        """Determine the CEK directly from ``key``."""
        raise errors.UnsupportedAlgorithm(self.name, 'cannot determine the CEK')

    def wrap(self, key: Any, cek: Union[bytes, bytearray], enc: JWAContentEncryption,
             header: Any) -> Tuple[bytes, Dict[str, Any]]:
        """Encrypt ``cek`` for the holder of ``key``."""
        raise errors.UnsupportedAlgorithm(self.name, 'cannot wrap a CEK')

    @abc.abstractmethod
    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:  # pragma: no cover
        """Recover the CEK.

        :raises josecore.errors.CiphertextAuthenticationFailed: if the
            CEK cannot be recovered.

        """
        raise NotImplementedError()


class _JWARSAKeyWrap(JWAKeyManagement):

    kty = (jwk.JWKRSA,)

    def __init__(self, name: str, padding_: Callable[[], Any]) -> None:
        super().__init__(name)
        self.padding = padding_()

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', self.kty, 2048,
                           key_size_minimum=True, key_ops=_KW_OPS)

    def wrap(self, key: Any, cek: Union[bytes, bytearray], enc: JWAContentEncryption,
             header: Any) -> Tuple[bytes, Dict[str, Any]]:
        return _public(key).encrypt(bytes(cek), self.padding), {}

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        key = _raw_key(key)
        if not hasattr(key, 'decrypt'):
            raise errors.AlgorithmKeyMismatch("Public key cannot be used for decryption")
        try:
            return util.SecretBytes(key.decrypt(encrypted_key, self.padding))
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.CiphertextAuthenticationFailed()


class _JWARSA15(_JWARSAKeyWrap):

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        # RFC 7516 section 11.5: on any failure continue with a random
        # CEK, so that a padding failure looks like a tag failure
        random_cek = enc.generate_cek()
        try:
            cek = super().unwrap(key, encrypted_key, enc, header)
        except errors.CiphertextAuthenticationFailed:
            return random_cek
        if len(cek) != enc.cek_size:
            cek.wipe()
            return random_cek
        random_cek.wipe()
        return cek


class _JWAAESKW(JWAKeyManagement):
    """AES Key Wrap, RFC 3394."""

    kty = (jwk.JWKOct,)

    def __init__(self, name: str, key_size: int) -> None:
        super().__init__(name)
        self.key_size = key_size

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', self.kty, self.key_size,
                           key_ops=_KW_OPS)

    def _kek(self, key: Any) -> Union[bytes, bytearray]:
        kek = _raw_key(key)
        if len(kek) * 8 != self.key_size:
            raise errors.AlgorithmKeyMismatch(
                '{0} requires a {1}-bit key'.format(self.name, self.key_size))
        return kek

    def wrap(self, key: Any, cek: Union[bytes, bytearray], enc: JWAContentEncryption,
             header: Any) -> Tuple[bytes, Dict[str, Any]]:
        return keywrap.aes_key_wrap(self._kek(key), bytes(cek)), {}

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        try:
            return util.SecretBytes(keywrap.aes_key_unwrap(self._kek(key), encrypted_key))
        except (keywrap.InvalidUnwrap, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.CiphertextAuthenticationFailed()


class _JWAAESGCMKW(_JWAAESKW):
    """Key wrapping with AES GCM, RFC 7518 section 4.7."""

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', self.kty, self.key_size,
                           iv=True, key_ops=_KW_OPS)

    def wrap(self, key: Any, cek: Union[bytes, bytearray], enc: JWAContentEncryption,
             header: Any) -> Tuple[bytes, Dict[str, Any]]:
        iv = os.urandom(12)
        sealed = AESGCM(self._kek(key)).encrypt(iv, bytes(cek), None)
        return sealed[:-16], {'iv': iv, 'tag': sealed[-16:]}

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        kek = self._kek(key)
        iv, tag = header.iv, header.tag
        if iv is None or tag is None:
            raise errors.MalformedSerialization(
                '{0} requires "iv" and "tag" header parameters'.format(self.name))
        if len(iv) != 12 or len(tag) != 16:
            raise errors.CiphertextAuthenticationFailed()
        try:
            return util.SecretBytes(AESGCM(kek).decrypt(iv, encrypted_key + tag, None))
        except cryptography.exceptions.InvalidTag as error:
            logger.debug(error, exc_info=True)
            raise errors.CiphertextAuthenticationFailed()


class _JWADirect(JWAKeyManagement):
    """Direct use of a shared symmetric key as the CEK."""

    kty = (jwk.JWKOct,)
    direct = True

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', self.kty, key_ops=_KW_OPS)

    def _cek(self, key: Any, enc: JWAContentEncryption) -> util.SecretBytes:
        cek = _raw_key(key)
        if len(cek) != enc.cek_size:
            raise errors.AlgorithmKeyMismatch(
                '{0} requires a {1}-bit key'.format(enc.name, enc.cek_size * 8))
        return util.SecretBytes(cek)

    def agree(self, key: Any, enc: JWAContentEncryption,
              header: Any) -> Tuple[util.SecretBytes, Dict[str, Any]]:
        return self._cek(key, enc), {}

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        if encrypted_key:
            raise errors.MalformedSerialization(
                '"dir" requires an empty JWE Encrypted Key')
        return self._cek(key, enc)


class _JWAECDHES(JWAKeyManagement):
    """Elliptic Curve Diffie-Hellman Ephemeral Static, RFC 7518 section 4.6.

    Without ``key_size`` the agreed key is the CEK itself ("ECDH-ES");
    otherwise it is a key wrapping key for AES Key Wrap
    ("ECDH-ES+A128KW" and friends).

    """

    kty = (jwk.JWKEC, jwk.JWKOKP)
    curves = frozenset(['P-256', 'P-384', 'P-521', 'X25519', 'X448'])

    def __init__(self, name: str, key_size: Optional[int] = None) -> None:
        super().__init__(name)
        self.key_size = key_size
        self.direct = key_size is None
        self.key_wrap = (
            None if key_size is None else _JWAAESKW(name, key_size))

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', self.kty, curves=self.curves,
                           ephemeral_key=True, key_ops=_KA_OPS | _KW_OPS)

    @classmethod
    def _exchange(cls, private: Any, public: Any) -> bytes:
        if isinstance(private, ec.EllipticCurvePrivateKey):
            if (not isinstance(public, ec.EllipticCurvePublicKey) or
                    public.curve.name != private.curve.name):
                raise errors.AlgorithmKeyMismatch('"epk" curve does not match key')
            return private.exchange(ec.ECDH(), public)
        for private_cls, public_cls in (
                (x25519.X25519PrivateKey, x25519.X25519PublicKey),
                (x448.X448PrivateKey, x448.X448PublicKey)):
            if isinstance(private, private_cls):
                if not isinstance(public, public_cls):
                    raise errors.AlgorithmKeyMismatch('"epk" curve does not match key')
                return private.exchange(public)
        raise errors.AlgorithmKeyMismatch(
            '{0} requires an EC or X25519/X448 key'.format(type(private).__name__))

    def _derive(self, shared: bytes, enc: JWAContentEncryption,
                header: Any) -> util.SecretBytes:
        if self.direct:
            algorithm_id, key_bits = enc.name, enc.cek_size * 8
        else:
            algorithm_id, key_bits = self.name, self.key_size
        # OtherInfo, NIST SP 800-56A section 5.8.1.2.1
        otherinfo = b''
        for item in (algorithm_id.encode('utf-8'), header.apu or b'', header.apv or b''):
            otherinfo += struct.pack('>I', len(item)) + item
        otherinfo += struct.pack('>I', key_bits)
        with util.SecretBytes(shared) as secret:
            return util.SecretBytes(ConcatKDFHash(
                algorithm=hashes.SHA256(), length=key_bits // 8,
                otherinfo=otherinfo).derive(bytes(secret.value)))

    def _ephemeral(self, key: Any) -> Tuple[Any, jwk.JWK]:
        public = _public(key)
        if isinstance(public, ec.EllipticCurvePublicKey):
            private = ec.generate_private_key(public.curve)
            return private, jwk.JWKEC(key=private.public_key())
        for private_cls, public_cls in (
                (x25519.X25519PrivateKey, x25519.X25519PublicKey),
                (x448.X448PrivateKey, x448.X448PublicKey)):
            if isinstance(public, public_cls):
                private = private_cls.generate()
                return private, jwk.JWKOKP(key=private.public_key())
        raise errors.AlgorithmKeyMismatch(
            '{0} requires an EC or X25519/X448 key'.format(self.name))

    def _agree_send(self, key: Any, enc: JWAContentEncryption,
                    header: Any) -> Tuple[util.SecretBytes, Dict[str, Any]]:
        private, epk = self._ephemeral(key)
        shared = self._exchange(private, _public(key))
        return self._derive(shared, enc, header), {'epk': epk}

    def _agree_receive(self, key: Any, enc: JWAContentEncryption,
                       header: Any) -> util.SecretBytes:
        if header.epk is None:
            raise errors.MalformedSerialization(
                '{0} requires an "epk" header parameter'.format(self.name))
        private = _raw_key(key)
        if not hasattr(private, 'exchange'):
            raise errors.AlgorithmKeyMismatch("Public key cannot be used for decryption")
        shared = self._exchange(private, _raw_key(header.epk))
        return self._derive(shared, enc, header)

    def agree(self, key: Any, enc: JWAContentEncryption,
              header: Any) -> Tuple[util.SecretBytes, Dict[str, Any]]:
        if not self.direct:
            return super().agree(key, enc, header)
        return self._agree_send(key, enc, header)

    def wrap(self, key: Any, cek: Union[bytes, bytearray], enc: JWAContentEncryption,
             header: Any) -> Tuple[bytes, Dict[str, Any]]:
        if self.key_wrap is None:
            return super().wrap(key, cek, enc, header)
        kek, params = self._agree_send(key, enc, header)
        with kek:
            encrypted_key, _ = self.key_wrap.wrap(kek.value, cek, enc, header)
        return encrypted_key, params

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        if self.key_wrap is None:
            if encrypted_key:
                raise errors.MalformedSerialization(
                    '"ECDH-ES" requires an empty JWE Encrypted Key')
            return self._agree_receive(key, enc, header)
        with self._agree_receive(key, enc, header) as kek:
            return self.key_wrap.unwrap(kek.value, encrypted_key, enc, header)


class _JWAPBES2(JWAKeyManagement):
    """PBES2 with HMAC SHA-2 and AES Key Wrap, RFC 7518 section 4.8."""

    kty = (jwk.JWKOct,)

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm],
                 key_size: int) -> None:
        super().__init__(name)
        self.hash = hash_
        self.key_size = key_size
        self.key_wrap = _JWAAESKW(name, key_size)

    @property
    def capability(self) -> Capability:
        return _capability(self.name, 'enc', self.kty, key_ops=_KW_OPS | _KA_OPS)

    def _kek(self, password: Any, salt: bytes, count: int) -> util.SecretBytes:
        # salt input is UTF8(alg) || 0x00 || p2s
        kdf = PBKDF2HMAC(algorithm=self.hash(), length=self.key_size // 8,
                         salt=self.name.encode('utf-8') + b'\x00' + salt,
                         iterations=count)
        return util.SecretBytes(kdf.derive(bytes(_raw_key(password))))

    def wrap(self, key: Any, cek: Union[bytes, bytearray], enc: JWAContentEncryption,
             header: Any) -> Tuple[bytes, Dict[str, Any]]:
        salt = header.p2s if header.p2s is not None else os.urandom(PBES2_SALT_SIZE)
        count = header.p2c if header.p2c is not None else DEFAULT_PBES2_ITERATIONS
        if len(salt) < 8:
            raise errors.Error('"p2s" must be at least 8 bytes')
        if not MIN_PBES2_ITERATIONS <= count <= MAX_PBES2_ITERATIONS:
            raise errors.Error('"p2c" must be between {0} and {1}'.format(
                MIN_PBES2_ITERATIONS, MAX_PBES2_ITERATIONS))
        with self._kek(key, salt, count) as kek:
            encrypted_key, _ = self.key_wrap.wrap(kek.value, cek, enc, header)
        return encrypted_key, {'p2s': salt, 'p2c': count}

    def unwrap(self, key: Any, encrypted_key: bytes, enc: JWAContentEncryption,
               header: Any) -> util.SecretBytes:
        if header.p2s is None or header.p2c is None:
            raise errors.MalformedSerialization(
                '{0} requires "p2s" and "p2c" header parameters'.format(self.name))
        if (not isinstance(header.p2c, int) or isinstance(header.p2c, bool) or
                not MIN_PBES2_ITERATIONS <= header.p2c <= MAX_PBES2_ITERATIONS):
            raise errors.UnsupportedAlgorithm(
                self.name, '"p2c" out of accepted range')
        with self._kek(key, header.p2s, header.p2c) as kek:
            return self.key_wrap.unwrap(kek.value, encrypted_key, enc, header)


_FAMILIES: Tuple[Type[JWA], ...] = (JWASignature, JWAKeyManagement, JWAContentEncryption)


def _register(alg: JWA) -> Any:
    for family in _FAMILIES:
        if isinstance(alg, family):
            family.ALGORITHMS[alg.name] = alg
            return alg
    raise TypeError(alg)  # pragma: no cover


#: HMAC using SHA-256
HS256 = _register(_JWAHS('HS256', hashes.SHA256))
#: HMAC using SHA-384
HS384 = _register(_JWAHS('HS384', hashes.SHA384))
#: HMAC using SHA-512
HS512 = _register(_JWAHS('HS512', hashes.SHA512))

#: RSASSA-PKCS-v1_5 using SHA-256
RS256 = _register(_JWARS('RS256', hashes.SHA256))
#: RSASSA-PKCS-v1_5 using SHA-384
RS384 = _register(_JWARS('RS384', hashes.SHA384))
#: RSASSA-PKCS-v1_5 using SHA-512
RS512 = _register(_JWARS('RS512', hashes.SHA512))

#: RSASSA-PSS using SHA-256 and MGF1 with SHA-256
PS256 = _register(_JWAPS('PS256', hashes.SHA256))
#: RSASSA-PSS using SHA-384 and MGF1 with SHA-384
PS384 = _register(_JWAPS('PS384', hashes.SHA384))
#: RSASSA-PSS using SHA-512 and MGF1 with SHA-512
PS512 = _register(_JWAPS('PS512', hashes.SHA512))

#: ECDSA using P-256 and SHA-256
ES256 = _register(_JWAES('ES256', hashes.SHA256, 'P-256'))
#: ECDSA using P-384 and SHA-384
ES384 = _register(_JWAES('ES384', hashes.SHA384, 'P-384'))
#: ECDSA using P-521 and SHA-512
ES512 = _register(_JWAES('ES512', hashes.SHA512, 'P-521'))
#: ECDSA using secp256k1 and SHA-256 (RFC 8812)
ES256K = _register(_JWAES('ES256K', hashes.SHA256, 'secp256k1'))

#: Edwards-curve DSA (RFC 8037)
EdDSA = _register(_JWAEdDSA('EdDSA'))  # pylint: disable=invalid-name

#: No digital signature or MAC performed
NONE = _register(_JWANone('none'))

#: RSAES-PKCS1-v1_5
RSA1_5 = _register(_JWARSA15('RSA1_5', padding.PKCS1v15))
#: RSAES OAEP using default parameters
RSA_OAEP = _register(_JWARSAKeyWrap('RSA-OAEP', lambda: padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA1(), label=None)))
#: RSAES OAEP using SHA-256 and MGF1 with SHA-256
RSA_OAEP_256 = _register(_JWARSAKeyWrap('RSA-OAEP-256', lambda: padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=None)))

#: AES Key Wrap with default initial value using 128-bit key
A128KW = _register(_JWAAESKW('A128KW', 128))
#: AES Key Wrap with default initial value using 192-bit key
A192KW = _register(_JWAAESKW('A192KW', 192))
#: AES Key Wrap with default initial value using 256-bit key
A256KW = _register(_JWAAESKW('A256KW', 256))

#: Direct use of a shared symmetric key as the CEK
DIR = _register(_JWADirect('dir'))

#: ECDH-ES using Concat KDF, agreed key is the CEK
ECDH_ES = _register(_JWAECDHES('ECDH-ES'))
#: ECDH-ES using Concat KDF and CEK wrapped with "A128KW"
ECDH_ES_A128KW = _register(_JWAECDHES('ECDH-ES+A128KW', 128))
#: ECDH-ES using Concat KDF and CEK wrapped with "A192KW"
ECDH_ES_A192KW = _register(_JWAECDHES('ECDH-ES+A192KW', 192))
#: ECDH-ES using Concat KDF and CEK wrapped with "A256KW"
ECDH_ES_A256KW = _register(_JWAECDHES('ECDH-ES+A256KW', 256))

#: Key wrapping with AES GCM using 128-bit key
A128GCMKW = _register(_JWAAESGCMKW('A128GCMKW', 128))
#: Key wrapping with AES GCM using 192-bit key
A192GCMKW = _register(_JWAAESGCMKW('A192GCMKW', 192))
#: Key wrapping with AES GCM using 256-bit key
A256GCMKW = _register(_JWAAESGCMKW('A256GCMKW', 256))

#: PBES2 with HMAC SHA-256 and "A128KW" wrapping
PBES2_HS256_A128KW = _register(_JWAPBES2('PBES2-HS256+A128KW', hashes.SHA256, 128))
#: PBES2 with HMAC SHA-384 and "A192KW" wrapping
PBES2_HS384_A192KW = _register(_JWAPBES2('PBES2-HS384+A192KW', hashes.SHA384, 192))
#: PBES2 with HMAC SHA-512 and "A256KW" wrapping
PBES2_HS512_A256KW = _register(_JWAPBES2('PBES2-HS512+A256KW', hashes.SHA512, 256))

#: AES_128_CBC_HMAC_SHA_256 authenticated encryption
A128CBC_HS256 = _register(_JWAAESCBCHMAC('A128CBC-HS256', hashes.SHA256, 256))
#: AES_192_CBC_HMAC_SHA_384 authenticated encryption
A192CBC_HS384 = _register(_JWAAESCBCHMAC('A192CBC-HS384', hashes.SHA384, 384))
#: AES_256_CBC_HMAC_SHA_512 authenticated encryption
A256CBC_HS512 = _register(_JWAAESCBCHMAC('A256CBC-HS512', hashes.SHA512, 512))

#: AES GCM using 128-bit key
A128GCM = _register(_JWAAESGCM('A128GCM', 128))
#: AES GCM using 192-bit key
A192GCM = _register(_JWAAESGCM('A192GCM', 192))
#: AES GCM using 256-bit key
A256GCM = _register(_JWAAESGCM('A256GCM', 256))


def _lookup(alg: Union[str, JWA]) -> JWA:
    if isinstance(alg, JWA):
        return alg
    for family in _FAMILIES:
        if alg in family.ALGORITHMS:
            return family.ALGORITHMS[alg]
    raise errors.UnsupportedAlgorithm(alg)


def describe(alg: Union[str, JWA]) -> Capability:
    """Capability descriptor of an algorithm.

    :param alg: Algorithm object or name.

    :raises josecore.errors.UnsupportedAlgorithm: if ``alg`` is not one
        of the algorithms defined in this module.

    """
    try:
        return _lookup(alg).capability
    except TypeError:  # unhashable name from untrusted input
        raise errors.UnsupportedAlgorithm(alg)


def is_compatible(alg: Union[str, JWA], key: jwk.JWK) -> bool:
    """Can ``key`` be used with ``alg``?

    Checks key type, curve and size against the capability descriptor,
    and honours the key's own "use", "key_ops" and "alg" restrictions.

    :raises josecore.errors.UnsupportedAlgorithm: if ``alg`` is unknown.

    """
    capability = describe(alg)
    if not capability.kty or not isinstance(key, capability.kty):
        return False
    if capability.curves and key.crv not in capability.curves:
        return False
    if capability.key_size is not None:
        if capability.key_size_minimum:
            if key.key_size < capability.key_size:
                return False
        elif key.key_size != capability.key_size:
            return False
    if key.use is not None and key.use != capability.use:
        return False
    if key.key_ops and not capability.key_ops.intersection(key.key_ops):
        return False
    if key.alg is not None and key.alg != capability.name:
        return False
    return True


def algorithms(names: Any, family: Type[JWA] = JWA) -> FrozenSet[JWA]:
    """Resolve a collection of algorithm names or objects.

    :raises josecore.errors.UnsupportedAlgorithm: on an unknown name, or
        one outside of ``family``.

    """
    resolved = set()
    for name in names:
        alg = _lookup(name)
        if not isinstance(alg, family):
            raise errors.UnsupportedAlgorithm(alg.name, 'not a {0} algorithm'.format(
                family.__name__))
        resolved.add(alg)
    return frozenset(resolved)


#: Every algorithm, by name.
ALL: Mapping[str, JWA] = util.frozendict({
    name: alg for family in _FAMILIES for name, alg in family.ALGORITHMS.items()})
