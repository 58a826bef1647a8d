"""JSON Web Signature.

https://datatracker.ietf.org/doc/html/rfc7515

"""
import enum
import functools
import json
import logging
from typing import Any
from typing import Callable
from typing import Collection
from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Type
from typing import TypeVar
from typing import Union

from josecore import b64
from josecore import errors
from josecore import json_util
from josecore import jwa
from josecore import jwk

logger = logging.getLogger(__name__)


class Policy(enum.Enum):
    """How signatures of a multi-signature JWS are combined on verify."""

    ANY = 'any'
    """At least one signature must verify."""

    ALL = 'all'
    """Every signature must verify."""


ANY = Policy.ANY
ALL = Policy.ALL


class MediaType:
    """MediaType field encoder/decoder."""

    PREFIX = 'application/'
    """MIME Media Type and Content Type prefix."""

    @classmethod
    def decode(cls, value: str) -> str:
        """Decoder."""
        if not isinstance(value, str):
            raise errors.DeserializationError('Media type must be a string')
        # 4.1.10
        if '/' not in value:
            if ';' in value:
                raise errors.DeserializationError('Unexpected semi-colon')
            return cls.PREFIX + value
        return value

    @classmethod
    def encode(cls, value: str) -> str:
        """Encoder."""
        # 4.1.10
        if ';' not in value and value.startswith(cls.PREFIX):
            return value[len(cls.PREFIX):]
        return value


GenericHeader = TypeVar('GenericHeader', bound='Header')


class PresenceField(json_util.Field):
    """Field omitted only when absent (``None``), never when empty."""
    __slots__ = ()

    def omit(self, value: Any) -> bool:
        return value is None


class Header(json_util.ExtensibleJSONObjectWithFields):
    """JOSE Header.

    Registered Header Parameters are typed fields; any other parameter
    is kept in :attr:`extra`. A header object does not know whether it
    is protected: the owning :class:`Signature` (or JWE) keeps the
    protected and unprotected parts apart and combines them.

    :ivar x5tS256: "x5t#S256"
    :ivar str typ: MIME Media Type, inc. :const:`MediaType.PREFIX`.
    :ivar str cty: Content-Type, inc. :const:`MediaType.PREFIX`.
    :ivar tuple crit: Critical parameter names, ``None`` when absent.

    """
    alg = json_util.Field(
        'alg', decoder=jwa.JWASignature.from_json, omitempty=True)
    jku = json_util.Field('jku', omitempty=True)
    jwk = json_util.Field('jwk', decoder=jwk.JWK.from_json, omitempty=True)
    kid = json_util.Field('kid', omitempty=True)
    x5u = json_util.Field('x5u', omitempty=True)
    x5c = json_util.Field('x5c', omitempty=True, default=(),
                          decoder=json_util.decode_x5c,
                          encoder=json_util.encode_x5c)
    x5t = json_util.Field(
        'x5t', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    x5tS256 = json_util.Field(
        'x5t#S256', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    typ = json_util.Field('typ', encoder=MediaType.encode,
                          decoder=MediaType.decode, omitempty=True)
    cty = json_util.Field('cty', encoder=MediaType.encode,
                          decoder=MediaType.decode, omitempty=True)
    # None (absent) and () (present but empty) must stay distinguishable
    crit = PresenceField('crit', omitempty=True, default=None)

    @crit.encoder
    def crit(value: Any) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        return list(value) if isinstance(value, (list, tuple)) else value

    @crit.decoder
    def crit(value: Any) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        if value is None:
            raise errors.UnsupportedCriticalParameter()
        return json_util.Field.default_decoder(value)

    def is_empty(self) -> bool:
        """Would the header serialize to an empty JSON object?"""
        return not self.not_omitted()

    def __add__(self: GenericHeader, other: 'Header') -> GenericHeader:
        if not isinstance(other, type(self)):
            raise TypeError('Header cannot be added to: {0}'.format(
                type(other)))

        not_omitted_self = self.not_omitted()
        not_omitted_other = other.not_omitted()

        overlap = set(not_omitted_self).intersection(not_omitted_other)
        if overlap:
            raise errors.MalformedSerialization(
                'Header parameters occur more than once: {0}'.format(
                    ', '.join(sorted(overlap))))

        not_omitted_self.update(not_omitted_other)
        return type(self).build(not_omitted_self)

    def find_key(self) -> 'jwk.JWK':
        """Find key based on header.

        Only the "jwk" header parameter is looked at. A key found this
        way is controlled by whoever produced the object; do not trust
        it unless it is otherwise known.

        :returns: (Public) key found in the header.
        :rtype: .JWK

        :raises josecore.errors.Error: if key could not be found

        """
        if self.jwk is None:
            raise errors.Error('No key found')
        return self.jwk

    def critical_parameters(self) -> FrozenSet[str]:
        """Names listed in "crit"."""
        if not self.crit or isinstance(self.crit, str):
            return frozenset()
        return frozenset(name for name in self.crit if isinstance(name, str))

    def check_critical(self, understood: Iterable[str] = (),
                       in_protected: bool = True) -> None:
        """Enforce the "crit" rules of RFC 7515 section 4.1.11.

        :param understood: Extension parameter names the caller
            processes.
        :param bool in_protected: "crit" came from the protected header.

        :raises josecore.errors.UnsupportedCriticalParameter: if "crit"
            is malformed, unprotected, lists registered or absent
            parameters, or lists parameters not ``understood``.

        """
        crit = self.crit
        if crit is None:
            return
        if not in_protected:
            raise errors.UnsupportedCriticalParameter('crit')
        if (not isinstance(crit, tuple) or not crit or
                not all(isinstance(name, str) for name in crit) or
                len(set(crit)) != len(crit)):
            raise errors.UnsupportedCriticalParameter()
        registered = self.json_names().intersection(crit)
        if registered:
            raise errors.UnsupportedCriticalParameter(*sorted(registered))
        absent = [name for name in crit if name not in self.extra]
        if absent:
            raise errors.UnsupportedCriticalParameter(*absent)
        understood = frozenset(understood)
        not_understood = [name for name in crit if name not in understood]
        if not_understood:
            raise errors.UnsupportedCriticalParameter(*not_understood)


def split_params(header_cls: Type[GenericHeader], params: Mapping[str, Any],
                  protect: Optional[Collection[str]]) -> Tuple[str, GenericHeader]:
    """Split header parameters into protected JSON text and unprotected header."""
    protected_params = {name: value for name, value in params.items()
                        if protect is None or name in protect}
    unprotected_params = {name: value for name, value in params.items()
                          if name not in protected_params}
    protected = (header_cls.build(protected_params).json_dumps()
                 if protected_params else '')
    return protected, header_cls.build(unprotected_params)


def decode_protected(value: Any) -> str:
    try:
        return json_util.decode_b64jose(value).decode('utf-8')
    except UnicodeDecodeError as error:
        raise errors.MalformedSerialization(error)


def malformed_on_error(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report undecodable headers as :class:`~josecore.errors.MalformedSerialization`."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (errors.MalformedSerialization, errors.UnrecognizedTypeError):
            raise
        except errors.DeserializationError as error:
            raise errors.MalformedSerialization(error) from error
    return wrapper


def candidate_keys(keys: Tuple[jwk.JWK, ...], alg: jwa.JWA,
                 kid: Optional[str]) -> List[jwk.JWK]:
    """Keys compatible with ``alg``, narrowed by ``kid`` when present."""
    return [key for key in keys
            if jwa.is_compatible(alg, key) and
            (kid is None or key.kid is None or key.kid == kid)]


class Signature(json_util.JSONObjectWithFields):
    """JWS Signature.

    :ivar combined: Combined Header (protected and unprotected,
        :class:`Header`).
    :ivar str protected: JWS Protected Header, exactly as serialized
        (JOSE Base-64 decoded).
    :ivar header: JWS Unprotected Header (:class:`Header`).
    :ivar bytes signature: The signature.

    """
    header_cls = Header

    __slots__ = ('combined',)
    protected = json_util.Field('protected', omitempty=True, default='')
    header = json_util.Field(
        'header', omitempty=True, default=header_cls(),
        decoder=header_cls.from_json)
    signature = json_util.Field(
        'signature', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose)

    @protected.encoder
    def protected(value: str) -> str:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        return json_util.encode_b64jose(value.encode('utf-8'))

    @protected.decoder
    def protected(value: str) -> str:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        return decode_protected(value)

    def __init__(self, **kwargs: Any) -> None:
        if 'combined' not in kwargs:
            kwargs = self._with_combined(kwargs)
        super().__init__(**kwargs)

    @classmethod
    def _with_combined(cls, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        assert 'combined' not in kwargs
        header = kwargs.get('header', cls._fields['header'].default)
        protected = kwargs.get('protected', cls._fields['protected'].default)

        if protected:
            combined = header + cls.header_cls.json_loads(protected)
        else:
            combined = header

        kwargs['combined'] = combined
        return kwargs

    @classmethod
    def _msg(cls, protected: str, payload: bytes) -> bytes:
        return (b64.b64encode(protected.encode('utf-8')) + b'.' +
                b64.b64encode(payload))

    @property
    def protected_header(self) -> Header:
        """Parsed JWS Protected Header."""
        if not self.protected:
            return self.header_cls()
        return self.header_cls.json_loads(self.protected)

    def check_critical(self, understood: Iterable[str] = ()) -> None:
        """Enforce "crit" on the combined header."""
        self.combined.check_critical(
            understood, in_protected=self.protected_header.crit is not None)

    def verify(self, payload: bytes, key: Optional[jwk.JWK] = None) -> bool:
        """Verify.

        Does no algorithm or "crit" policy checks, see :meth:`JWS.verify`.

        :param JWK key: Key used for verification, defaults to
            :meth:`Header.find_key`.

        """
        key = self.combined.find_key() if key is None else key
        return self.combined.alg.verify(
            key=key.public_key().key, sig=self.signature,
            msg=self._msg(self.protected, payload))

    @classmethod
    def sign(cls, payload: bytes, key: Optional[jwk.JWK],
             alg: Union[str, jwa.JWASignature], include_jwk: bool = False,
             protect: Optional[Collection[str]] = None,
             allow_unsecured: bool = False, **kwargs: Any) -> 'Signature':
        """Sign.

        :param JWK key: Key for signature, ``None`` for "none".
        :param alg: Signature algorithm.
        :param bool include_jwk: Put the public key in the "jwk" header
            parameter.
        :param protect: Names of the header parameters to protect, all
            of them when ``None``.
        :param bool allow_unsecured: Permit the "none" algorithm.
        :param kwargs: Header parameters. Names that are not registered
            header parameters become extension parameters.

        :raises josecore.errors.UnsupportedAlgorithm: for "none" without
            ``allow_unsecured``.
        :raises josecore.errors.AlgorithmKeyMismatch: if ``key`` cannot
            sign with ``alg``.

        """
        if not isinstance(alg, jwa.JWASignature):
            alg = jwa.JWASignature.from_json(alg)
        if alg is jwa.NONE:
            if not allow_unsecured:
                raise errors.UnsupportedAlgorithm(
                    alg.name, 'unsecured JWS is not allowed')
        elif key is None or not jwa.is_compatible(alg, key):
            raise errors.AlgorithmKeyMismatch(
                '{0!r} cannot be used with {1}'.format(key, alg.name))
        elif not key.is_private:
            raise errors.AlgorithmKeyMismatch("Public key cannot be used for signing")

        header_params = kwargs
        header_params['alg'] = alg
        if include_jwk and key is not None:
            header_params['jwk'] = key.public_key()

        protected, header = split_params(cls.header_cls, header_params, protect)
        signature = alg.sign(None if key is None else key.key,
                             cls._msg(protected, payload))

        return cls(protected=protected, header=header, signature=signature)

    def fields_to_partial_json(self) -> Dict[str, Any]:
        fields = super().fields_to_partial_json()
        if self.header.is_empty():
            fields.pop('header', None)
        return fields

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        fields_with_combined = cls._with_combined(fields)
        if fields_with_combined['combined'].alg is None:
            raise errors.MalformedSerialization('"alg" not present')
        return fields_with_combined


class JWS(json_util.JSONObjectWithFields):
    """JSON Web Signature.

    :ivar bytes payload: JWS Payload.
    :ivar tuple signatures: JWS Signatures.

    """
    __slots__ = ('payload', 'signatures')

    signature_cls = Signature

    def _verify_signature(self, sig: Signature, keys: Tuple[jwk.JWK, ...],
                          allowed: Optional[FrozenSet[jwa.JWA]],
                          understood: Iterable[str], allow_unsecured: bool) -> bool:
        sig.check_critical(understood)
        alg = sig.combined.alg
        if alg is jwa.NONE:
            if not allow_unsecured:
                raise errors.UnsupportedAlgorithm(
                    alg.name, 'unsecured JWS is not allowed')
        if allowed is not None and alg not in allowed:
            raise errors.UnsupportedAlgorithm(alg.name, 'not permitted')

        msg = sig._msg(sig.protected, self.payload)  # pylint: disable=protected-access
        if alg is jwa.NONE:
            return alg.verify(None, msg, sig.signature)

        candidates = candidate_keys(keys, alg, sig.combined.kid)
        if not candidates:
            raise errors.AlgorithmKeyMismatch(
                'No key can be used with {0}'.format(alg.name))
        return any(alg.verify(key.public_key().key, msg, sig.signature)
                   for key in candidates)

    def verify(self, keys: Union[jwk.JWK, jwk.JWKSet, Iterable[jwk.JWK]] = (),
               algorithms: Optional[Iterable[Union[str, jwa.JWA]]] = None,
               policy: Policy = ANY, understood: Iterable[str] = (),
               allow_unsecured: bool = False) -> bytes:
        """Verify signatures and return the payload.

        The algorithm of each signature is taken from its header and
        must be one of ``algorithms`` when those are given. Every key
        compatible with that algorithm (and with the "kid" of the
        header, when present) is tried.

        :param keys: Candidate keys: a :class:`~josecore.jwk.JWK`, a
            :class:`~josecore.jwk.JWKSet`, or an iterable of keys.
        :param algorithms: Permitted signature algorithms.
        :param Policy policy: :data:`ANY` or :data:`ALL`.
        :param understood: Extension header parameters the caller
            processes (see "crit").
        :param bool allow_unsecured: Accept "none".

        :raises josecore.errors.SignatureMismatch: if verification failed.
        :raises josecore.errors.UnsupportedAlgorithm: if an algorithm is
            not permitted.
        :raises josecore.errors.AlgorithmKeyMismatch: if no candidate key
            fits the algorithm.
        :raises josecore.errors.UnsupportedCriticalParameter: see
            :meth:`Header.check_critical`.

        """
        keys = jwk.key_list(keys)
        allowed = (None if algorithms is None else
                   jwa.algorithms(algorithms, jwa.JWASignature))
        policy = Policy(policy)

        first_error: Optional[errors.Error] = None
        results = []
        for sig in self.signatures:
            try:
                results.append(self._verify_signature(
                    sig, keys, allowed, understood, allow_unsecured))
            except (errors.UnsupportedAlgorithm, errors.AlgorithmKeyMismatch,
                    errors.UnsupportedCriticalParameter) as error:
                if policy is ALL:
                    raise
                logger.debug('Skipping signature: %s', error)
                results.append(False)
                if first_error is None:
                    first_error = error

        if results and (any(results) if policy is ANY else all(results)):
            return self.payload
        if first_error is not None:
            raise first_error
        raise errors.SignatureMismatch()

    @classmethod
    def sign(cls, payload: bytes, key: Optional[jwk.JWK],
             alg: Union[str, jwa.JWASignature], **kwargs: Any) -> 'JWS':
        """Sign.

        See :meth:`Signature.sign` for the arguments.

        """
        return cls(payload=payload, signatures=(
            cls.signature_cls.sign(payload=payload, key=key, alg=alg, **kwargs),))

    def add_signature(self, key: Optional[jwk.JWK],
                      alg: Union[str, jwa.JWASignature], **kwargs: Any) -> 'JWS':
        """Return a new JWS with one more signature over the same payload."""
        return self.update(signatures=self.signatures + (
            self.signature_cls.sign(payload=self.payload, key=key, alg=alg, **kwargs),))

    @property
    def signature(self) -> Signature:
        """Get a singleton signature.

        :rtype: :class:`JWS.signature_cls`

        """
        if len(self.signatures) != 1:
            raise errors.Error('JWS carries {0} signatures'.format(
                len(self.signatures)))
        return self.signatures[0]

    def to_compact(self) -> bytes:
        """Compact serialization.

        :raises josecore.errors.SerializationError: if the JWS cannot be
            expressed in compact form.

        :rtype: bytes

        """
        if len(self.signatures) != 1:
            raise errors.SerializationError(
                'Compact serialization carries exactly one signature')
        if not self.signature.header.is_empty():
            raise errors.SerializationError(
                'Compact serialization cannot carry an unprotected header')

        return (
            b64.b64encode(self.signature.protected.encode('utf-8')) +
            b'.' +
            b64.b64encode(self.payload) +
            b'.' +
            b64.b64encode(self.signature.signature))

    @classmethod
    @malformed_on_error
    def from_compact(cls, compact: Union[bytes, str]) -> 'JWS':
        """Compact deserialization.

        :param bytes compact:

        :raises josecore.errors.MalformedSerialization: on anything but
            three dot-separated, unpadded Base64url parts.

        """
        if isinstance(compact, str):
            try:
                compact = compact.encode('ascii')
            except UnicodeEncodeError as error:
                raise errors.MalformedSerialization(error)
        parts = compact.split(b'.')
        if len(parts) != 3:
            raise errors.MalformedSerialization(
                'Compact JWS serialization should comprise of exactly'
                ' 3 dot-separated components')
        protected, payload, signature = parts
        if not protected:
            raise errors.MalformedSerialization('Empty JWS Protected Header')

        try:
            sig = cls.signature_cls(
                protected=decode_protected(protected.decode('ascii')),
                signature=b64.b64decode(signature))
            payload = b64.b64decode(payload)
        except ValueError as error:
            raise errors.MalformedSerialization(error)
        if sig.combined.alg is None:
            raise errors.MalformedSerialization('"alg" not present')
        return cls(payload=payload, signatures=(sig,))

    def to_partial_json(self, flat: bool = True) -> Dict[str, Any]:  # pylint: disable=arguments-differ
        if not self.signatures:
            raise errors.SerializationError('JWS has no signatures')
        payload = json_util.encode_b64jose(self.payload)

        if flat and len(self.signatures) == 1:
            ret = self.signatures[0].to_json()
            ret['payload'] = payload
            return ret
        return {
            'payload': payload,
            'signatures': [sig.to_json() for sig in self.signatures],
        }

    def to_json(self, flat: bool = True) -> Dict[str, Any]:  # pylint: disable=arguments-differ
        """Fully serialize, flattened (when possible) or general."""
        return self.to_partial_json(flat=flat)

    def json_dumps(self, flat: bool = True, **kwargs: Any) -> str:  # pylint: disable=arguments-differ
        return json.dumps(self.to_json(flat=flat), **kwargs)

    @classmethod
    @malformed_on_error
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWS':
        if not isinstance(jobj, Mapping):
            raise errors.MalformedSerialization('JWS is not a JSON object')
        if 'payload' not in jobj:
            raise errors.MalformedSerialization('"payload" not present')
        payload = json_util.decode_b64jose(jobj['payload'])
        if 'signature' in jobj and 'signatures' in jobj:
            raise errors.MalformedSerialization('Flat mixed with non-flat')
        elif 'signature' in jobj:  # flat
            return cls(payload=payload, signatures=(cls.signature_cls.from_json(
                {k: v for k, v in jobj.items() if k != 'payload'}),))
        signatures = jobj.get('signatures')
        if not isinstance(signatures, list) or not signatures:
            raise errors.MalformedSerialization('"signatures" must be a non-empty list')
        if any(k in jobj for k in ('protected', 'header')):
            raise errors.MalformedSerialization('Flat mixed with non-flat')
        return cls(payload=payload,
                   signatures=tuple(cls.signature_cls.from_json(sig)
                                    for sig in signatures))
