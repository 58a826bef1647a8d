"""JSON Web Token.

https://datatracker.ietf.org/doc/html/rfc7519

A JWT is a claims set carried as the payload of a compact JWS or JWE.
Temporal claims are checked against a caller supplied ``now``; this
module never reads the clock.

"""
import datetime
import logging
import numbers
from typing import Any
from typing import Iterable
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from josecore import errors
from josecore import json_util
from josecore import jwa
from josecore import jwe
from josecore import jwk
from josecore import jws
from josecore import util

logger = logging.getLogger(__name__)

DEFAULT_LEEWAY = 0
"""Default clock skew tolerance, in seconds."""

TYPE = 'JWT'
"""Value of the "typ" header parameter of issued tokens."""

Keys = Union[jwk.JWK, jwk.JWKSet, Iterable[jwk.JWK]]
Timestamp = Union[int, float, datetime.datetime]


def decode_numeric_date(value: Any) -> Union[int, float]:
    """Decode NumericDate (seconds since the epoch)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise errors.DeserializationError('NumericDate must be a number')
    return value


def encode_numeric_date(value: Timestamp) -> Union[int, float]:
    """Encode NumericDate, accepting aware :class:`datetime.datetime` too."""
    if isinstance(value, datetime.datetime):
        return int(value.timestamp())
    return value


def _timestamp(value: Timestamp) -> float:
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            raise ValueError('naive datetime is ambiguous, use an aware one')
        return value.timestamp()
    return float(value)


class Claims(json_util.ExtensibleJSONObjectWithFields):
    """JWT Claims Set.

    Registered claims are typed fields, any other claim is kept, in
    order, in :attr:`extra`.

    :ivar str iss: Issuer.
    :ivar str sub: Subject.
    :ivar aud: Audience, a string or a tuple of strings.
    :ivar exp: Expiration time (NumericDate).
    :ivar nbf: Not before (NumericDate).
    :ivar iat: Issued at (NumericDate).
    :ivar str jti: JWT ID.

    """
    iss = json_util.Field('iss', omitempty=True)
    sub = json_util.Field('sub', omitempty=True)
    aud = json_util.Field('aud', omitempty=True)
    exp = json_util.Field('exp', omitempty=True, decoder=decode_numeric_date,
                          encoder=encode_numeric_date)
    nbf = json_util.Field('nbf', omitempty=True, decoder=decode_numeric_date,
                          encoder=encode_numeric_date)
    iat = json_util.Field('iat', omitempty=True, decoder=decode_numeric_date,
                          encoder=encode_numeric_date)
    jti = json_util.Field('jti', omitempty=True)

    @aud.decoder
    def aud(value: Any) -> Union[str, Tuple[str, ...]]:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        if isinstance(value, str):
            return value
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return tuple(value)
        raise errors.DeserializationError('"aud" must be a string or a list of strings')

    @aud.encoder
    def aud(value: Union[str, Iterable[str]]) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        if isinstance(value, str):
            return value
        return list(value)

    @property
    def audiences(self) -> Tuple[str, ...]:
        """"aud" as a tuple."""
        if self.aud is None:
            return ()
        if isinstance(self.aud, str):
            return (self.aud,)
        return tuple(self.aud)


def issue(claims: Union[Claims, Mapping[str, Any]], key: jwk.JWK,
          alg: Union[str, jwa.JWA], enc: Optional[Union[str, jwa.JWA]] = None,
          allow_unsecured: bool = False, **kwargs: Any) -> str:
    """Issue a JWT in compact serialization.

    :param claims: :class:`Claims`, or a mapping of claim names.
    :param key: Signing key, or the recipient key when ``enc`` is given.
    :param alg: Signature algorithm, or key management algorithm when
        ``enc`` is given.
    :param enc: Content encryption algorithm; a JWS is issued when
        ``None``, a JWE otherwise.
    :param bool allow_unsecured: Permit the "none" signature algorithm.
        Not applicable with ``enc``.
    :param kwargs: Further header parameters (``kid``, ...).

    :raises ValueError: if both ``enc`` and ``allow_unsecured`` are given.

    """
    if not isinstance(claims, Claims):
        claims = Claims.build(claims)
    payload = claims.json_dumps(separators=(',', ':')).encode('utf-8')
    kwargs.setdefault('typ', TYPE)
    if enc is None:
        return jws.JWS.sign(payload, key, alg, allow_unsecured=allow_unsecured,
                            **kwargs).to_compact().decode('ascii')
    if allow_unsecured:
        raise ValueError('allow_unsecured does not apply to encrypted tokens')
    return jwe.encrypt(payload, key, enc, alg, **kwargs)


def _split(token: Union[bytes, str]) -> Tuple[bytes, int]:
    if isinstance(token, str):
        try:
            token = token.encode('ascii')
        except UnicodeEncodeError as error:
            raise errors.MalformedSerialization(error)
    return token, token.count(b'.') + 1


def decode_unverified(token: Union[bytes, str]) -> Tuple[jws.Header, Optional[Claims]]:
    """Header and claims of a compact JWT, without any verification.

    Meant for routing only (e.g. reading "kid" to choose a key set);
    nothing returned here may be trusted. Claims of an encrypted token
    cannot be read and come back as ``None``.

    """
    token, parts = _split(token)
    if parts == 5:
        return jwe.JWE.from_compact(token).protected_header, None
    jws_obj = jws.JWS.from_compact(token)
    return jws_obj.signature.combined, Claims.json_loads(jws_obj.payload.decode('utf-8'))


class Validator(util.ImmutableMap):
    """Reusable, immutable set of JWT validation options.

    :ivar issuer: Expected "iss", a string or a collection of strings.
    :ivar audience: Expected "aud" value (a string), or collection of
        which at least one must be present.
    :ivar leeway: Clock skew tolerance in seconds.
    :ivar algorithms: Permitted "alg" values.
    :ivar encryptions: Permitted "enc" values, for encrypted tokens.
    :ivar understood: Extension header parameters the caller processes.
    :ivar require: Claims that must be present.

    """
    __slots__ = ('issuer', 'audience', 'leeway', 'algorithms', 'encryptions',
                 'understood', 'require')

    def __init__(self, issuer: Any = None, audience: Any = None,
                 leeway: Union[int, float] = DEFAULT_LEEWAY,
                 algorithms: Optional[Iterable[Union[str, jwa.JWA]]] = None,
                 encryptions: Optional[Iterable[Union[str, jwa.JWA]]] = None,
                 understood: Iterable[str] = (), require: Iterable[str] = ()) -> None:
        if leeway < 0:
            raise ValueError('leeway must not be negative')
        super().__init__(
            issuer=issuer if issuer is None or isinstance(issuer, str)
            else frozenset(issuer),
            audience=audience if audience is None or isinstance(audience, str)
            else frozenset(audience),
            leeway=leeway,
            algorithms=None if algorithms is None else tuple(algorithms),
            encryptions=None if encryptions is None else tuple(encryptions),
            understood=frozenset(understood), require=tuple(require))

    def _payload(self, token: Union[bytes, str], keys: Keys) -> bytes:
        token, parts = _split(token)
        if parts == 5:
            return jwe.JWE.from_compact(token).decrypt(
                keys, algorithms=self.algorithms, understood=self.understood,
                encryptions=self.encryptions)
        return jws.JWS.from_compact(token).verify(
            keys, algorithms=self.algorithms, understood=self.understood)

    def check(self, claims: Claims, now: Timestamp) -> Claims:
        """Check claims of an already verified token against ``now``.

        :raises josecore.errors.ClaimValidationError: on any failure.

        """
        now = _timestamp(now)
        for name in self.require:
            if claims.param(name) is None:
                raise errors.MissingClaim(
                    'Required claim "{0}" is missing'.format(name), claim=name)

        if claims.exp is not None and not claims.exp > now - self.leeway:
            logger.debug('Token expired at %s, now is %s', claims.exp, now)
            raise errors.ExpiredToken('Token has expired')
        if claims.nbf is not None and claims.nbf > now + self.leeway:
            logger.debug('Token not valid before %s, now is %s', claims.nbf, now)
            raise errors.ImmatureToken('Token is not yet valid')

        if self.issuer is not None:
            expected = ((self.issuer,) if isinstance(self.issuer, str)
                        else self.issuer)
            if claims.iss not in expected:
                raise errors.InvalidIssuer('Issuer does not match')

        if self.audience is not None:
            expected = ((self.audience,) if isinstance(self.audience, str)
                        else self.audience)
            if not set(expected).intersection(claims.audiences):
                raise errors.InvalidAudience('Audience does not match')
        return claims

    def validate(self, token: Union[bytes, str], keys: Keys, now: Timestamp) -> Claims:
        """Verify (or decrypt) ``token`` and validate its claims.

        The cryptographic check always runs first; claims of a token
        that does not verify are never looked at.

        """
        payload = self._payload(token, keys)
        try:
            claims = Claims.json_loads(payload.decode('utf-8'))
        except UnicodeDecodeError as error:
            raise errors.MalformedSerialization(error)
        return self.check(claims, now)


def validate(token: Union[bytes, str], keys: Keys, now: Timestamp,
             issuer: Any = None, audience: Any = None,
             leeway: Union[int, float] = DEFAULT_LEEWAY,
             algorithms: Optional[Iterable[Union[str, jwa.JWA]]] = None,
             **kwargs: Any) -> Claims:
    """Verify (or decrypt) a compact JWT and validate its claims.

    :param keys: Candidate keys.
    :param now: Current time, seconds since the epoch or an aware
        :class:`datetime.datetime`.
    :param issuer: Expected "iss".
    :param audience: Expected "aud".
    :param leeway: Clock skew tolerance in seconds.
    :param algorithms: Permitted algorithms.
    :param kwargs: ``encryptions``, ``understood``, ``require``, see
        :class:`Validator`.

    :raises josecore.errors.ClaimValidationError: if a claim check fails.

    """
    return Validator(issuer=issuer, audience=audience, leeway=leeway,
                     algorithms=algorithms, **kwargs).validate(token, keys, now)
