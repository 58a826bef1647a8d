"""JSON Object Signing and Encryption (JOSE).

This package is a Python implementation of the standards developed by
the IETF `Javascript Object Signing and Encryption (Active WG)`_, in
particular the following RFCs:

  - `JSON Web Algorithms (JWA)`_
  - `JSON Web Key (JWK)`_
  - `JSON Web Signature (JWS)`_
  - `JSON Web Encryption (JWE)`_
  - `JSON Web Token (JWT)`_


.. _`Javascript Object Signing and Encryption (Active WG)`:
  https://datatracker.ietf.org/wg/jose/about/

.. _`JSON Web Algorithms (JWA)`:
  https://datatracker.ietf.org/doc/html/rfc7518

.. _`JSON Web Key (JWK)`:
  https://datatracker.ietf.org/doc/html/rfc7517

.. _`JSON Web Signature (JWS)`:
  https://datatracker.ietf.org/doc/html/rfc7515

.. _`JSON Web Encryption (JWE)`:
  https://datatracker.ietf.org/doc/html/rfc7516

.. _`JSON Web Token (JWT)`:
  https://datatracker.ietf.org/doc/html/rfc7519

"""
from josecore.b64 import b64decode
from josecore.b64 import b64encode
from josecore.errors import AlgorithmKeyMismatch
from josecore.errors import CiphertextAuthenticationFailed
from josecore.errors import ClaimValidationError
from josecore.errors import DeserializationError
from josecore.errors import Error
from josecore.errors import ExpiredToken
from josecore.errors import ImmatureToken
from josecore.errors import InvalidAudience
from josecore.errors import InvalidIssuer
from josecore.errors import InvalidKeyError
from josecore.errors import MalformedSerialization
from josecore.errors import MissingClaim
from josecore.errors import SerializationError
from josecore.errors import SignatureMismatch
from josecore.errors import UnrecognizedTypeError
from josecore.errors import UnsupportedAlgorithm
from josecore.errors import UnsupportedCriticalParameter
from josecore.interfaces import JSONDeSerializable
from josecore.json_util import decode_b64jose
from josecore.json_util import encode_b64jose
from josecore.json_util import Field
from josecore.json_util import JSONObjectWithFields
from josecore.json_util import TypedJSONObjectWithFields
from josecore.jwa import A128CBC_HS256
from josecore.jwa import A128GCM
from josecore.jwa import A128GCMKW
from josecore.jwa import A128KW
from josecore.jwa import A192CBC_HS384
from josecore.jwa import A192GCM
from josecore.jwa import A192GCMKW
from josecore.jwa import A192KW
from josecore.jwa import A256CBC_HS512
from josecore.jwa import A256GCM
from josecore.jwa import A256GCMKW
from josecore.jwa import A256KW
from josecore.jwa import Capability
from josecore.jwa import describe
from josecore.jwa import DIR
from josecore.jwa import ECDH_ES
from josecore.jwa import ECDH_ES_A128KW
from josecore.jwa import ECDH_ES_A192KW
from josecore.jwa import ECDH_ES_A256KW
from josecore.jwa import EdDSA
from josecore.jwa import ES256
from josecore.jwa import ES256K
from josecore.jwa import ES384
from josecore.jwa import ES512
from josecore.jwa import HS256
from josecore.jwa import HS384
from josecore.jwa import HS512
from josecore.jwa import is_compatible
from josecore.jwa import JWAContentEncryption
from josecore.jwa import JWAKeyManagement
from josecore.jwa import JWASignature
from josecore.jwa import NONE
from josecore.jwa import PBES2_HS256_A128KW
from josecore.jwa import PBES2_HS384_A192KW
from josecore.jwa import PBES2_HS512_A256KW
from josecore.jwa import PS256
from josecore.jwa import PS384
from josecore.jwa import PS512
from josecore.jwa import RS256
from josecore.jwa import RS384
from josecore.jwa import RS512
from josecore.jwa import RSA1_5
from josecore.jwa import RSA_OAEP
from josecore.jwa import RSA_OAEP_256
from josecore.jwe import JWE
from josecore.jwe import Recipient
from josecore.jwk import JWK
from josecore.jwk import JWKEC
from josecore.jwk import JWKOct
from josecore.jwk import JWKOKP
from josecore.jwk import JWKRSA
from josecore.jwk import JWKSet
from josecore.jws import ALL
from josecore.jws import ANY
from josecore.jws import Header
from josecore.jws import JWS
from josecore.jws import Policy
from josecore.jws import Signature
from josecore.jwt import Claims
from josecore.jwt import Validator
from josecore.util import ComparableECKey
from josecore.util import ComparableKey
from josecore.util import ComparableOKPKey
from josecore.util import ComparableRSAKey
from josecore.util import constant_time_eq
from josecore.util import frozendict
from josecore.util import ImmutableMap
from josecore.util import SecretBytes
