"""JSON Web Encryption.

https://datatracker.ietf.org/doc/html/rfc7516

Encryption runs in two stages: key management (:class:`~josecore.jwa.
JWAKeyManagement`, "alg") determines and protects the Content
Encryption Key for every recipient, then content encryption
(:class:`~josecore.jwa.JWAContentEncryption`, "enc") seals the payload
under that CEK with the protected header as additional authenticated
data.

"""
import json
import logging
import zlib
from typing import Any
from typing import Collection
from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from josecore import b64
from josecore import errors
from josecore import json_util
from josecore import jwa
from josecore import jwk
from josecore import jws

logger = logging.getLogger(__name__)

DEFLATE = 'DEF'
"""The only "zip" algorithm (RFC 7516 section 4.1.3)."""

MAX_DECOMPRESSED_SIZE = 256 * 1024
"""Largest plaintext, in bytes, that "zip": "DEF" may expand to."""


class Header(jws.Header):
    """JWE JOSE Header.

    :ivar alg: Key management algorithm (:class:`~josecore.jwa.JWAKeyManagement`).
    :ivar enc: Content encryption algorithm
        (:class:`~josecore.jwa.JWAContentEncryption`).
    :ivar str zip: Compression algorithm.
    :ivar epk: Ephemeral public key (:class:`~josecore.jwk.JWK`).
    :ivar bytes apu: Agreement PartyUInfo.
    :ivar bytes apv: Agreement PartyVInfo.
    :ivar bytes iv: Key wrapping IV ("A*GCMKW").
    :ivar bytes tag: Key wrapping tag ("A*GCMKW").
    :ivar bytes p2s: PBES2 salt input.
    :ivar int p2c: PBES2 iteration count.

    """
    alg = json_util.Field(
        'alg', decoder=jwa.JWAKeyManagement.from_json, omitempty=True)
    enc = json_util.Field(
        'enc', decoder=jwa.JWAContentEncryption.from_json, omitempty=True)
    zip = json_util.Field('zip', omitempty=True)
    epk = json_util.Field('epk', decoder=jwk.JWK.from_json, omitempty=True)
    apu = json_util.Field('apu', decoder=json_util.decode_b64jose,
                          encoder=json_util.encode_b64jose, omitempty=True)
    apv = json_util.Field('apv', decoder=json_util.decode_b64jose,
                          encoder=json_util.encode_b64jose, omitempty=True)
    iv = json_util.Field('iv', decoder=json_util.decode_b64jose,
                         encoder=json_util.encode_b64jose, omitempty=True)
    tag = json_util.Field('tag', decoder=json_util.decode_b64jose,
                          encoder=json_util.encode_b64jose, omitempty=True)
    p2s = json_util.Field('p2s', decoder=json_util.decode_b64jose,
                          encoder=json_util.encode_b64jose, omitempty=True)
    p2c = json_util.Field('p2c', omitempty=True)

    @epk.encoder
    def epk(value: jwk.JWK) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        return value.public_key()

    @p2c.decoder
    def p2c(value: Any) -> int:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise errors.DeserializationError('"p2c" must be a positive integer')
        return value


class Recipient(json_util.JSONObjectWithFields):
    """JWE recipient.

    :ivar header: Per-recipient unprotected header (:class:`Header`).
    :ivar bytes encrypted_key: JWE Encrypted Key, empty for direct key
        agreement and direct encryption.

    """
    header = json_util.Field(
        'header', omitempty=True, default=Header(), decoder=Header.from_json)
    encrypted_key = json_util.Field(
        'encrypted_key', omitempty=True, default=b'',
        decoder=json_util.decode_b64jose, encoder=json_util.encode_b64jose)

    def fields_to_partial_json(self) -> Dict[str, Any]:
        fields = super().fields_to_partial_json()
        if self.header.is_empty():
            fields.pop('header', None)
        return fields


def _resolve(alg: Union[str, jwa.JWA], family: Any) -> Any:
    if isinstance(alg, family):
        return alg
    if isinstance(alg, jwa.JWA):
        raise errors.UnsupportedAlgorithm(alg.name, 'not a {0} algorithm'.format(
            family.__name__))
    return family.from_json(alg)


def _compress(zip_: Optional[str], data: bytes) -> bytes:
    if zip_ is None:
        return data
    if zip_ != DEFLATE:
        raise errors.UnsupportedAlgorithm(zip_, 'unknown compression')
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def _decompress(zip_: Optional[str], data: bytes) -> bytes:
    if zip_ is None:
        return data
    if zip_ != DEFLATE:
        raise errors.UnsupportedAlgorithm(zip_, 'unknown compression')
    decompressor = zlib.decompressobj(wbits=-zlib.MAX_WBITS)
    try:
        plaintext = decompressor.decompress(data, MAX_DECOMPRESSED_SIZE)
    except zlib.error as error:
        logger.debug(error, exc_info=True)
        raise errors.CiphertextAuthenticationFailed()
    if decompressor.unconsumed_tail or not decompressor.eof:
        raise errors.Error('Compressed plaintext too large or truncated')
    return plaintext


class JWE(json_util.JSONObjectWithFields):
    """JSON Web Encryption.

    :ivar str protected: JWE Protected Header, exactly as serialized
        (JOSE Base-64 decoded), may be empty.
    :ivar unprotected: Shared JWE Unprotected Header (:class:`Header`).
    :ivar tuple recipients: :class:`Recipient` objects.
    :ivar bytes iv: Initialization Vector.
    :ivar bytes ciphertext: Ciphertext.
    :ivar bytes tag: Authentication Tag.
    :ivar bytes aad: External Additional Authenticated Data, or ``None``.

    """
    __slots__ = ('protected', 'unprotected', 'recipients', 'iv',
                 'ciphertext', 'tag', 'aad')

    header_cls = Header
    recipient_cls = Recipient

    @property
    def protected_header(self) -> Header:
        """Parsed JWE Protected Header."""
        if not self.protected:
            return self.header_cls()
        return self.header_cls.json_loads(self.protected)

    def combined_header(self, recipient: Recipient) -> Header:
        """Union of protected, shared and per-recipient headers.

        :raises josecore.errors.MalformedSerialization: if a parameter
            occurs in more than one of them.

        """
        return self.protected_header + self.unprotected + recipient.header

    @classmethod
    def _aad(cls, protected: str, aad: Optional[bytes]) -> bytes:
        encoded = b64.b64encode(protected.encode('utf-8'))
        if aad is not None:
            encoded += b'.' + b64.b64encode(aad)
        return encoded

    @classmethod
    def encrypt(cls, payload: bytes,
                keys: Union[jwk.JWK, jwk.JWKSet, Iterable[jwk.JWK]],
                enc: Union[str, jwa.JWAContentEncryption],
                alg: Union[str, jwa.JWAKeyManagement],
                protect: Optional[Collection[str]] = None,
                aad: Optional[bytes] = None, zip: Optional[str] = None,  # pylint: disable=redefined-builtin
                **kwargs: Any) -> 'JWE':
        """Encrypt ``payload`` for every key in ``keys``.

        :param keys: Recipient keys (public keys for asymmetric
            algorithms).
        :param enc: Content encryption algorithm.
        :param alg: Key management algorithm, shared by all recipients.
        :param protect: Names of the header parameters to protect, all
            of them when ``None``. Header parameters produced by key
            management ("epk", "iv", "tag", "p2s", "p2c") are protected
            for a single recipient when ``protect`` is ``None`` and
            carried in the per-recipient header otherwise.
        :param bytes aad: External Additional Authenticated Data (JSON
            serialization only).
        :param str zip: ``"DEF"`` to compress the payload first.
        :param kwargs: Further header parameters, e.g. ``kid``, ``apu``,
            ``p2c``.

        :raises josecore.errors.UnsupportedAlgorithm: if an algorithm is
            unknown, or a direct algorithm is used with several keys.
        :raises josecore.errors.AlgorithmKeyMismatch: if a key cannot be
            used with ``alg``.

        """
        enc = _resolve(enc, jwa.JWAContentEncryption)
        alg = _resolve(alg, jwa.JWAKeyManagement)
        keys = jwk.key_list(keys)
        if not keys:
            raise errors.Error('No recipient keys')
        if alg.direct and len(keys) != 1:
            raise errors.UnsupportedAlgorithm(
                alg.name, 'only valid for a single recipient')
        for key in keys:
            if not jwa.is_compatible(alg, key):
                raise errors.AlgorithmKeyMismatch(
                    '{0!r} cannot be used with {1}'.format(key, alg.name))

        params = dict(kwargs)
        params['alg'] = alg
        params['enc'] = enc
        if zip is not None:
            params['zip'] = zip
        plaintext = _compress(zip, payload)
        input_header = cls.header_cls.build(params)

        if alg.direct:
            cek, generated = alg.agree(keys[0], enc, input_header)
        else:
            cek = enc.generate_cek()

        with cek:
            if alg.direct:
                wrapped: List[Tuple[bytes, Dict[str, Any]]] = [(b'', generated)]
            else:
                wrapped = [alg.wrap(key, cek.value, enc, input_header)
                           for key in keys]
            # generated values replace caller supplied inputs ("p2c", ...)
            for _, generated in wrapped:
                for name in generated:
                    params.pop(name, None)
            if len(keys) == 1 and protect is None:
                params.update(wrapped[0][1])
                recipients = [cls.recipient_cls(encrypted_key=wrapped[0][0])]
            else:
                recipients = [
                    cls.recipient_cls(encrypted_key=encrypted_key,
                                      header=cls.header_cls.build(generated))
                    for encrypted_key, generated in wrapped]
            protected, unprotected = jws.split_params(
                cls.header_cls, params, protect)
            if 'zip' in unprotected.not_omitted():
                raise errors.SerializationError('"zip" must be protected')

            iv = enc.generate_iv()
            ciphertext, tag = enc.encrypt(
                cek.value, iv, plaintext, cls._aad(protected, aad))

        return cls(protected=protected, unprotected=unprotected,
                   recipients=tuple(recipients), iv=iv,
                   ciphertext=ciphertext, tag=tag, aad=aad)

    def _recipient_header(self, recipient: Recipient,
                          allowed_algs: Optional[FrozenSet[jwa.JWA]],
                          allowed_encs: Optional[FrozenSet[jwa.JWA]],
                          understood: Iterable[str]) -> Header:
        header = self.combined_header(recipient)
        header.check_critical(
            understood, in_protected=self.protected_header.crit is not None)
        if header.alg is None or header.enc is None:
            raise errors.MalformedSerialization('"alg" and "enc" are required')
        if allowed_algs is not None and header.alg not in allowed_algs:
            raise errors.UnsupportedAlgorithm(header.alg.name, 'not permitted')
        if allowed_encs is not None and header.enc not in allowed_encs:
            raise errors.UnsupportedAlgorithm(header.enc.name, 'not permitted')
        if header.zip is not None and self.protected_header.zip is None:
            raise errors.MalformedSerialization('"zip" must be protected')
        return header

    def decrypt(self, key: Union[jwk.JWK, jwk.JWKSet, Iterable[jwk.JWK]],
                algorithms: Optional[Iterable[Union[str, jwa.JWA]]] = None,
                understood: Iterable[str] = (),
                encryptions: Optional[Iterable[Union[str, jwa.JWA]]] = None) -> bytes:
        """Decrypt and return the payload.

        Every recipient is tried, with every key compatible with its
        "alg" (and "kid", when present), until the content decrypts.

        :param key: Candidate key(s): a :class:`~josecore.jwk.JWK`, a
            :class:`~josecore.jwk.JWKSet`, or an iterable of keys.
        :param algorithms: Permitted key management algorithms.
        :param understood: Extension header parameters the caller
            processes (see "crit").
        :param encryptions: Permitted content encryption algorithms.

        :raises josecore.errors.CiphertextAuthenticationFailed: for any
            cryptographic failure.
        :raises josecore.errors.UnsupportedAlgorithm: if an algorithm is
            not permitted.
        :raises josecore.errors.AlgorithmKeyMismatch: if no key fits.
        :raises josecore.errors.UnsupportedCriticalParameter: see
            :meth:`josecore.jws.Header.check_critical`.

        """
        keys = jwk.key_list(key)
        allowed_algs = (None if algorithms is None else
                        jwa.algorithms(algorithms, jwa.JWAKeyManagement))
        allowed_encs = (None if encryptions is None else
                        jwa.algorithms(encryptions, jwa.JWAContentEncryption))
        aad = self._aad(self.protected, self.aad)

        tried = False
        for recipient in self.recipients:
            header = self._recipient_header(
                recipient, allowed_algs, allowed_encs, understood)
            for candidate in jws.candidate_keys(keys, header.alg, header.kid):
                tried = True
                try:
                    with header.alg.unwrap(candidate, recipient.encrypted_key,
                                           header.enc, header) as cek:
                        plaintext = header.enc.decrypt(
                            cek.value, self.iv, self.ciphertext, self.tag, aad)
                except errors.CiphertextAuthenticationFailed:
                    continue
                except errors.AlgorithmKeyMismatch as error:
                    logger.debug('Skipping key: %s', error)
                    continue
                return _decompress(header.zip, plaintext)

        if not tried:
            raise errors.AlgorithmKeyMismatch('No key can be used with this JWE')
        raise errors.CiphertextAuthenticationFailed()

    def to_compact(self) -> bytes:
        """Compact serialization.

        :raises josecore.errors.SerializationError: if the JWE cannot be
            expressed in compact form.

        :rtype: bytes

        """
        if len(self.recipients) != 1:
            raise errors.SerializationError(
                'Compact serialization carries exactly one recipient')
        recipient = self.recipients[0]
        if not self.unprotected.is_empty() or not recipient.header.is_empty():
            raise errors.SerializationError(
                'Compact serialization cannot carry an unprotected header')
        if self.aad is not None:
            raise errors.SerializationError(
                'Compact serialization cannot carry external AAD')
        return b'.'.join((
            b64.b64encode(self.protected.encode('utf-8')),
            b64.b64encode(recipient.encrypted_key),
            b64.b64encode(self.iv),
            b64.b64encode(self.ciphertext),
            b64.b64encode(self.tag),
        ))

    @classmethod
    @jws.malformed_on_error
    def from_compact(cls, compact: Union[bytes, str]) -> 'JWE':
        """Compact deserialization.

        :raises josecore.errors.MalformedSerialization: on anything but
            five dot-separated, unpadded Base64url parts.

        """
        if isinstance(compact, str):
            try:
                compact = compact.encode('ascii')
            except UnicodeEncodeError as error:
                raise errors.MalformedSerialization(error)
        parts = compact.split(b'.')
        if len(parts) != 5:
            raise errors.MalformedSerialization(
                'Compact JWE serialization should comprise of exactly'
                ' 5 dot-separated components')
        if not parts[0]:
            raise errors.MalformedSerialization('Empty JWE Protected Header')
        try:
            protected = b64.b64decode(parts[0]).decode('utf-8')
            encrypted_key, iv, ciphertext, tag = (
                b64.b64decode(part) for part in parts[1:])
        except ValueError as error:  # UnicodeDecodeError included
            raise errors.MalformedSerialization(error)
        jwe = cls(protected=protected, unprotected=cls.header_cls(),
                  recipients=(cls.recipient_cls(encrypted_key=encrypted_key),),
                  iv=iv, ciphertext=ciphertext, tag=tag, aad=None)
        # parse now, so that a malformed header fails here
        jwe.protected_header  # pylint: disable=pointless-statement
        return jwe

    def to_partial_json(self, flat: bool = True) -> Dict[str, Any]:  # pylint: disable=arguments-differ
        if not self.recipients:
            raise errors.SerializationError('JWE has no recipients')
        jobj: Dict[str, Any] = {}
        if self.protected:
            jobj['protected'] = json_util.encode_b64jose(self.protected.encode('utf-8'))
        if not self.unprotected.is_empty():
            jobj['unprotected'] = self.unprotected.to_json()
        if flat and len(self.recipients) == 1:
            jobj.update(self.recipients[0].to_json())
        else:
            jobj['recipients'] = [recipient.to_json() for recipient in self.recipients]
        if self.aad is not None:
            jobj['aad'] = json_util.encode_b64jose(self.aad)
        jobj['iv'] = json_util.encode_b64jose(self.iv)
        jobj['ciphertext'] = json_util.encode_b64jose(self.ciphertext)
        jobj['tag'] = json_util.encode_b64jose(self.tag)
        return jobj

    def to_json(self, flat: bool = True) -> Dict[str, Any]:  # pylint: disable=arguments-differ
        """Fully serialize, flattened (when possible) or general."""
        return self.to_partial_json(flat=flat)

    def json_dumps(self, flat: bool = True, **kwargs: Any) -> str:  # pylint: disable=arguments-differ
        return json.dumps(self.to_json(flat=flat), **kwargs)

    @classmethod
    @jws.malformed_on_error
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWE':
        if not isinstance(jobj, Mapping):
            raise errors.MalformedSerialization('JWE is not a JSON object')
        if 'ciphertext' not in jobj:
            raise errors.MalformedSerialization('"ciphertext" not present')

        if 'recipients' in jobj:
            if 'header' in jobj or 'encrypted_key' in jobj:
                raise errors.MalformedSerialization('Flat mixed with non-flat')
            if not isinstance(jobj['recipients'], list) or not jobj['recipients']:
                raise errors.MalformedSerialization(
                    '"recipients" must be a non-empty list')
            recipients = tuple(cls.recipient_cls.from_json(recipient)
                               for recipient in jobj['recipients'])
        else:
            recipients = (cls.recipient_cls.from_json(
                {k: jobj[k] for k in ('header', 'encrypted_key') if k in jobj}),)

        protected = ''
        if 'protected' in jobj:
            protected = jws.decode_protected(jobj['protected'])
        unprotected = (cls.header_cls.from_json(jobj['unprotected'])
                       if 'unprotected' in jobj else cls.header_cls())
        aad = (json_util.decode_b64jose(jobj['aad'])
               if 'aad' in jobj else None)

        jwe = cls(protected=protected, unprotected=unprotected,
                  recipients=recipients,
                  iv=json_util.decode_b64jose(jobj.get('iv', '')),
                  ciphertext=json_util.decode_b64jose(jobj['ciphertext']),
                  tag=json_util.decode_b64jose(jobj.get('tag', '')),
                  aad=aad)
        for recipient in recipients:
            jwe.combined_header(recipient)
        return jwe


def encrypt(payload: bytes, key: jwk.JWK, enc: Union[str, jwa.JWAContentEncryption],
            alg: Union[str, jwa.JWAKeyManagement], **kwargs: Any) -> str:
    """Encrypt for a single recipient into compact serialization."""
    return JWE.encrypt(payload, key, enc, alg, **kwargs).to_compact().decode('ascii')


def decrypt(compact: Union[bytes, str], key: Union[jwk.JWK, jwk.JWKSet, Iterable[jwk.JWK]],
            **kwargs: Any) -> bytes:
    """Decrypt compact serialization, see :meth:`JWE.decrypt`."""
    return JWE.from_compact(compact).decrypt(key, **kwargs)
