"""Tests for josecore.jws."""
import json
import sys
import unittest

import pytest

from josecore import b64
from josecore import errors
from josecore import jwa
from josecore._internal.tests import test_util

# RFC 8037, appendix A.4
ED25519_COMPACT = (
    'eyJhbGciOiJFZERTQSJ9'
    '.'
    'RXhhbXBsZSBvZiBFZDI1NTE5IHNpZ25pbmc'
    '.'
    'hgyY0il_MGCjP0JzlnLWG1PPOt7-09PGcvMg3AIbQR6dWbhijcNR4ki4iylGjg5BhVsPt9g7sVvpAr_MuM0KAg')


def _signing_key(alg):
    """Private key for a signature algorithm, ``None`` for "none"."""
    if alg is jwa.NONE:
        return None
    if alg.name.startswith('HS'):
        return test_util.oct_key(int(alg.name[2:]))
    if alg.name[:2] in ('RS', 'PS'):
        return test_util.rsa_key()
    if alg.name.startswith('ES'):
        return test_util.ec_key(alg.curve)
    return test_util.okp_key('Ed25519')


def _flip(data, index=0):
    raw = bytearray(data)
    raw[index] ^= 1
    return bytes(raw)


class MediaTypeTest(unittest.TestCase):
    """Tests for josecore.jws.MediaType."""

    def test_decode(self):
        from josecore.jws import MediaType
        assert 'application/app' == MediaType.decode('application/app')
        assert 'application/app' == MediaType.decode('app')
        with pytest.raises(errors.DeserializationError):
            MediaType.decode('app;foo')
        with pytest.raises(errors.DeserializationError):
            MediaType.decode(5)

    def test_encode(self):
        from josecore.jws import MediaType
        assert 'foo' == MediaType.encode('application/foo')
        assert 'application/foo;bar' == MediaType.encode('application/foo;bar')
        assert 'text/plain' == MediaType.encode('text/plain')


class HeaderTest(unittest.TestCase):
    """Tests for josecore.jws.Header."""

    def setUp(self):
        from josecore.jws import Header
        self.header1 = Header(jwk='foo')
        self.header2 = Header(jwk='bar')
        self.crit = Header.build({'alg': jwa.HS256, 'crit': ('exp',), 'exp': 1})

    def test_add_non_empty(self):
        from josecore.jws import Header
        assert Header(jwk='foo', crit=('a',)) == self.header1 + Header(crit=('a',))

    def test_add_overlapping_error(self):
        with pytest.raises(errors.MalformedSerialization):
            self.header1.__add__(self.header2)

    def test_add_overlapping_extension_error(self):
        from josecore.jws import Header
        with pytest.raises(errors.MalformedSerialization):
            Header.build({'foo': 1}) + Header.build({'foo': 2})

    def test_add_wrong_type_error(self):
        with pytest.raises(TypeError):
            self.header1.__add__('xxx')

    def test_crit_decode_always_tuple(self):
        from josecore.jws import Header
        assert ('a', 'b') == Header.from_json({'crit': ['a', 'b']}).crit
        assert Header.from_json({}).crit is None
        assert () == Header.from_json({'crit': []}).crit

    def test_x5c_decoding(self):
        from josecore.jws import Header
        with pytest.raises(errors.DeserializationError):
            Header.from_json({'x5c': ['xxx']})

    def test_typ_round_trip(self):
        from josecore.jws import Header
        header = Header.from_json({'typ': 'JWT'})
        assert header.typ == 'application/JWT'
        assert header.to_partial_json() == {'typ': 'JWT'}

    def test_extension_parameters(self):
        from josecore.jws import Header
        header = Header.from_json({'alg': 'HS256', 'b64': False, 'url': 'x'})
        assert header.alg is jwa.HS256
        assert header.extra == {'b64': False, 'url': 'x'}
        assert header.param('url') == 'x'
        assert header.param('alg') is jwa.HS256

    def test_unknown_alg(self):
        from josecore.jws import Header
        with pytest.raises(errors.UnsupportedAlgorithm):
            Header.from_json({'alg': 'HS1'})

    def test_is_empty(self):
        from josecore.jws import Header
        assert Header().is_empty()
        assert not Header(kid='a').is_empty()
        assert not Header.build({'foo': 1}).is_empty()

    def test_find_key(self):
        assert 'foo' == self.header1.find_key()
        assert 'bar' == self.header2.find_key()
        from josecore.jws import Header
        with pytest.raises(errors.Error):
            Header().find_key()

    def test_check_critical_understood(self):
        self.crit.check_critical(understood=['exp'])

    def test_check_critical_not_understood(self):
        with pytest.raises(errors.UnsupportedCriticalParameter) as error:
            self.crit.check_critical()
        assert error.value.names == ('exp',)

    def test_check_critical_unprotected(self):
        with pytest.raises(errors.UnsupportedCriticalParameter):
            self.crit.check_critical(understood=['exp'], in_protected=False)

    def test_check_critical_malformed(self):
        from josecore.jws import Header
        for crit, params in ((), {}), (('exp', 'exp'), {'exp': 1}), ('exp', {'exp': 1}), \
                ((1,), {}):
            header = Header.build(dict(params, crit=crit))
            with pytest.raises(errors.UnsupportedCriticalParameter):
                header.check_critical(understood=['exp'])

    def test_check_critical_registered(self):
        from josecore.jws import Header
        header = Header.build({'alg': jwa.HS256, 'crit': ('alg',)})
        with pytest.raises(errors.UnsupportedCriticalParameter):
            header.check_critical(understood=['alg'])

    def test_check_critical_absent(self):
        from josecore.jws import Header
        header = Header.build({'crit': ('exp',)})
        with pytest.raises(errors.UnsupportedCriticalParameter):
            header.check_critical(understood=['exp'])

    def test_critical_parameters(self):
        from josecore.jws import Header
        assert self.crit.critical_parameters() == frozenset(['exp'])
        assert Header().critical_parameters() == frozenset()


class SplitParamsTest(unittest.TestCase):
    """Tests for josecore.jws.split_params."""

    def test_protect_all(self):
        from josecore.jws import Header
        from josecore.jws import split_params
        protected, header = split_params(Header, {'alg': jwa.HS256, 'kid': 'a'}, None)
        assert json.loads(protected) == {'alg': 'HS256', 'kid': 'a'}
        assert header.is_empty()

    def test_protect_some(self):
        from josecore.jws import Header
        from josecore.jws import split_params
        protected, header = split_params(Header, {'alg': jwa.HS256, 'kid': 'a'}, ['alg'])
        assert json.loads(protected) == {'alg': 'HS256'}
        assert header == Header(kid='a')

    def test_protect_none(self):
        from josecore.jws import Header
        from josecore.jws import split_params
        protected, header = split_params(Header, {'kid': 'a'}, ())
        assert protected == ''
        assert header == Header(kid='a')


class SignatureTest(unittest.TestCase):
    """Tests for josecore.jws.Signature."""

    def test_from_json(self):
        from josecore.jws import Header
        from josecore.jws import Signature
        assert Signature(signature=b'foo', header=Header(alg=jwa.RS256)) == \
            Signature.from_json({'signature': 'Zm9v', 'header': {'alg': 'RS256'}})

    def test_from_json_no_alg_error(self):
        from josecore.jws import Signature
        with pytest.raises(errors.MalformedSerialization):
            Signature.from_json({'signature': 'foo'})

    def test_from_json_duplicate_parameter(self):
        from josecore.jws import Signature
        protected = b64.b64encode(b'{"alg": "HS256"}').decode()
        with pytest.raises(errors.MalformedSerialization):
            Signature.from_json({'signature': 'Zm9v', 'protected': protected,
                                 'header': {'alg': 'HS256'}})

    def test_sign_and_verify(self):
        from josecore.jws import Signature
        key = test_util.ec_key()
        sig = Signature.sign(b'foo', key, 'ES256', include_jwk=True, kid='ec')
        assert sig.combined.alg is jwa.ES256
        assert sig.combined.kid == 'ec'
        assert sig.combined.jwk == key.public_key()
        assert sig.protected_header == sig.combined
        assert sig.verify(b'foo')
        assert sig.verify(b'foo', key.public_key())
        assert not sig.verify(b'bar')

    def test_sign_incompatible_key(self):
        from josecore.jws import Signature
        with pytest.raises(errors.AlgorithmKeyMismatch):
            Signature.sign(b'foo', test_util.ec_key(), 'RS256')
        with pytest.raises(errors.AlgorithmKeyMismatch):
            Signature.sign(b'foo', test_util.ec_key().public_key(), 'ES256')
        with pytest.raises(errors.AlgorithmKeyMismatch):
            Signature.sign(b'foo', None, 'HS256')
        with pytest.raises(errors.UnsupportedAlgorithm):
            Signature.sign(b'foo', test_util.oct_key(), 'A128KW')

    def test_sign_none(self):
        from josecore.jws import Signature
        with pytest.raises(errors.UnsupportedAlgorithm):
            Signature.sign(b'foo', None, 'none')
        sig = Signature.sign(b'foo', None, 'none', allow_unsecured=True)
        assert sig.signature == b''


class JWSTest(unittest.TestCase):
    """Tests for josecore.jws.JWS."""

    def setUp(self):
        from josecore.jws import JWS
        self.key = test_util.rsa_key()
        self.pubkey = self.key.public_key()
        self.unprotected = JWS.sign(
            payload=b'foo', key=self.key, alg=jwa.RS256, protect=('alg',), kid='r')
        self.protected = JWS.sign(payload=b'foo', key=self.key, alg=jwa.RS256)
        self.mixed = JWS.sign(payload=b'foo', key=self.key, alg=jwa.PS256,
                              protect=frozenset(['jwk', 'alg']), include_jwk=True)

    def test_pubkey_jwk(self):
        assert self.mixed.signature.combined.jwk == self.pubkey

    def test_sign_unprotected_parameter(self):
        assert self.unprotected.signature.header.kid == 'r'
        assert self.unprotected.signature.protected_header.kid is None
        assert self.pubkey.thumbprint() == self.key.thumbprint()

    def test_verify(self):
        for jws in (self.unprotected, self.protected, self.mixed):
            assert jws.verify(self.pubkey) == b'foo'
            assert jws.verify([self.pubkey], algorithms=['RS256', 'PS256']) == b'foo'

    def test_verify_key_set(self):
        from josecore.jwk import JWKSet
        keys = JWKSet(keys=(test_util.ec_key(), test_util.oct_key(), self.pubkey))
        assert self.protected.verify(keys) == b'foo'

    def test_verify_wrong_key(self):
        other = test_util.rsa_key(3072).public_key()
        with pytest.raises(errors.SignatureMismatch):
            self.protected.verify(other)

    def test_verify_no_compatible_key(self):
        with pytest.raises(errors.AlgorithmKeyMismatch):
            self.protected.verify(test_util.oct_key())
        with pytest.raises(errors.AlgorithmKeyMismatch):
            self.protected.verify()

    def test_verify_kid_narrows_candidates(self):
        assert self.unprotected.verify([self.pubkey.update(kid='r')]) == b'foo'
        with pytest.raises(errors.AlgorithmKeyMismatch):
            self.unprotected.verify([self.pubkey.update(kid='other')])

    def test_algorithm_confinement(self):
        # RS256 token, verifier expecting HS256 only
        with pytest.raises(errors.UnsupportedAlgorithm):
            self.protected.verify(self.pubkey, algorithms=['HS256'])

    def test_hmac_key_from_rsa_public_key(self):
        from josecore.jws import JWS
        from josecore.jwk import JWKOct
        # the classic confusion: HMAC keyed with the public key PEM
        forged = JWS.sign(b'foo', JWKOct(key=test_util.public_pem(self.key)), 'HS256')
        with pytest.raises(errors.AlgorithmKeyMismatch):
            forged.verify(self.pubkey)

    def test_short_hmac_key(self):
        from josecore.jws import JWS
        from josecore.jwk import JWKOct
        short = JWKOct(key=b'secret')
        with pytest.raises(errors.AlgorithmKeyMismatch):
            JWS.sign(b'foo', short, 'HS256')
        jws = JWS.from_compact(test_util.RFC7515_A1_COMPACT)
        with pytest.raises(errors.AlgorithmKeyMismatch):
            jws.verify(short)

    def test_tampered_signature(self):
        from josecore.jws import JWS
        protected, payload, sig = self.protected.to_compact().split(b'.')
        raw = bytearray(b64.b64decode(sig))
        raw[0] ^= 1
        tampered = JWS.from_compact(b'.'.join((protected, payload, b64.b64encode(bytes(raw)))))
        with pytest.raises(errors.SignatureMismatch):
            tampered.verify(self.pubkey)

    def test_tampered_payload(self):
        from josecore.jws import JWS
        protected, _, sig = self.protected.to_compact().split(b'.')
        tampered = JWS.from_compact(b'.'.join((protected, b64.b64encode(b'bar'), sig)))
        with pytest.raises(errors.SignatureMismatch):
            tampered.verify(self.pubkey)

    def test_tampered_protected_header(self):
        from josecore.jws import JWS
        _, payload, sig = self.protected.to_compact().split(b'.')
        protected = b64.b64encode(b'{"alg":"RS256","kid":"x"}')
        tampered = JWS.from_compact(b'.'.join((protected, payload, sig)))
        with pytest.raises(errors.SignatureMismatch):
            tampered.verify(self.pubkey)

    def test_none_rejected_by_default(self):
        from josecore.jws import JWS
        unsecured = JWS.sign(b'foo', None, 'none', allow_unsecured=True)
        compact = unsecured.to_compact()
        assert compact.endswith(b'.')
        parsed = JWS.from_compact(compact)
        with pytest.raises(errors.UnsupportedAlgorithm):
            parsed.verify(self.pubkey)
        assert parsed.verify(allow_unsecured=True) == b'foo'
        with pytest.raises(errors.UnsupportedAlgorithm):
            parsed.verify(allow_unsecured=True, algorithms=['RS256'])

    def test_crit(self):
        from josecore.jws import JWS
        jws = JWS.sign(b'foo', self.key, 'RS256', crit=('exp',), exp=1)
        parsed = JWS.from_compact(jws.to_compact())
        with pytest.raises(errors.UnsupportedCriticalParameter):
            parsed.verify(self.pubkey)
        assert parsed.verify(self.pubkey, understood=['exp']) == b'foo'

    def test_crit_unprotected(self):
        from josecore.jws import JWS
        jws = JWS.sign(b'foo', self.key, 'RS256', protect=('alg', 'exp'),
                       crit=('exp',), exp=1)
        with pytest.raises(errors.UnsupportedCriticalParameter):
            jws.verify(self.pubkey, understood=['exp'])

    def test_compact_lost_unprotected(self):
        with pytest.raises(errors.SerializationError):
            self.unprotected.to_compact()

    def test_compact_round_trip(self):
        from josecore.jws import JWS
        compact = self.protected.to_compact()
        assert compact.count(b'.') == 2
        parsed = JWS.from_compact(compact)
        assert parsed == self.protected
        assert JWS.from_compact(compact.decode('ascii')) == self.protected

    def test_from_compact_malformed(self):
        from josecore.jws import JWS
        compact = self.protected.to_compact()
        protected, payload, sig = compact.split(b'.')
        for bad in (protected + b'.' + payload,
                    compact + b'.',
                    b'.' + payload + b'.' + sig,
                    protected + b'=.' + payload + b'.' + sig,
                    protected + b'.' + payload + b'.' + sig + b'=',
                    b64.b64encode(b'not json') + b'.' + payload + b'.' + sig,
                    b64.b64encode(b'{"kid":"a"}') + b'.' + payload + b'.' + sig,
                    b64.b64encode(b'\xff') + b'.' + payload + b'.' + sig,
                    b'eyJ\xc3\xa9.' + payload + b'.' + sig):
            with pytest.raises(errors.MalformedSerialization):
                JWS.from_compact(bad)

    def test_from_compact_unknown_alg(self):
        from josecore.jws import JWS
        _, payload, sig = self.protected.to_compact().split(b'.')
        with pytest.raises(errors.UnsupportedAlgorithm):
            JWS.from_compact(b64.b64encode(b'{"alg":"HS1"}') + b'.' + payload + b'.' + sig)

    def test_json_flat(self):
        from josecore.jws import JWS
        jobj = self.mixed.to_json()
        assert set(jobj) == {'payload', 'protected', 'signature'}
        assert JWS.from_json(jobj) == self.mixed
        jobj = self.unprotected.to_json()
        assert jobj['header'] == {'kid': 'r'}
        assert JWS.json_loads(self.unprotected.json_dumps()) == self.unprotected

    def test_json_general(self):
        from josecore.jws import JWS
        jobj = self.protected.to_json(flat=False)
        assert set(jobj) == {'payload', 'signatures'}
        assert len(jobj['signatures']) == 1
        assert JWS.from_json(jobj) == self.protected

    def test_from_json_mixed_flat(self):
        from josecore.jws import JWS
        jobj = self.protected.to_json(flat=False)
        jobj['signature'] = 'Zm9v'
        with pytest.raises(errors.MalformedSerialization):
            JWS.from_json(jobj)
        jobj = self.protected.to_json(flat=False)
        jobj['protected'] = jobj['signatures'][0]['protected']
        with pytest.raises(errors.MalformedSerialization):
            JWS.from_json(jobj)

    def test_from_json_malformed(self):
        from josecore.jws import JWS
        for jobj in ([], {'signature': 'Zm9v'}, {'payload': 'Zm9v'},
                     {'payload': 'Zm9v', 'signatures': []},
                     {'payload': 'Zm9v=', 'signatures': []}):
            with pytest.raises(errors.MalformedSerialization):
                JWS.from_json(jobj)

    def test_signature_property(self):
        jws = self.protected.add_signature(test_util.ec_key(), 'ES256')
        with pytest.raises(errors.Error):
            jws.signature  # pylint: disable=pointless-statement
        with pytest.raises(errors.SerializationError):
            jws.to_compact()

    def test_from_compact_header_not_an_object(self):
        from josecore.jws import JWS
        for header in (b'[]', b'"alg"', b'{"alg":"HS256","typ":5}'):
            with pytest.raises(errors.MalformedSerialization):
                JWS.from_compact(b64.b64encode(header) + b'.' +
                                 b64.b64encode(b'x') + b'.')

    def test_from_json_header_not_an_object(self):
        from josecore.jws import JWS
        for jobj in ({'payload': 'eA', 'protected': b64.b64encode(b'[]').decode(),
                      'signature': ''},
                     {'payload': 'eA', 'header': [], 'signature': ''},
                     {'payload': 'eA', 'signatures': [
                         {'protected': b64.b64encode(b'1').decode(), 'signature': ''}]}):
            with pytest.raises(errors.MalformedSerialization):
                JWS.from_json(jobj)


class AllAlgorithmsTest(unittest.TestCase):
    """josecore.jws.JWS with every signature algorithm."""

    def _sign(self, alg, **kwargs):
        from josecore.jws import JWS
        return JWS.sign(b'foo', _signing_key(alg), alg, allow_unsecured=True,
                        **kwargs).to_compact()

    def _verify(self, compact, alg, **kwargs):
        from josecore.jws import JWS
        key = _signing_key(alg)
        return JWS.from_compact(compact).verify(
            () if key is None else key, allow_unsecured=True, **kwargs)

    def test_tampering(self):
        for alg in jwa.JWASignature.ALGORITHMS.values():
            if alg is jwa.NONE:
                continue
            compact = self._sign(alg, kid='k')
            assert self._verify(compact, alg) == b'foo', alg.name
            protected, payload, sig = compact.split(b'.')

            header = b64.b64decode(protected)
            bad_protected = b64.b64encode(_flip(header, header.index(b'"k"') + 1))
            bad_payload = b64.b64encode(_flip(b64.b64decode(payload)))
            bad_sig = b64.b64encode(_flip(b64.b64decode(sig)))
            for tampered in ((bad_protected, payload, sig),
                             (protected, bad_payload, sig),
                             (protected, payload, bad_sig)):
                with pytest.raises(errors.SignatureMismatch):
                    self._verify(b'.'.join(tampered), alg)

    def test_crit_unknown(self):
        for alg in jwa.JWASignature.ALGORITHMS.values():
            compact = self._sign(alg, crit=('unknownParam',), unknownParam=1)
            with pytest.raises(errors.UnsupportedCriticalParameter):
                self._verify(compact, alg)
            assert self._verify(compact, alg, understood=['unknownParam']) == b'foo'

    def test_crit_empty(self):
        for alg in jwa.JWASignature.ALGORITHMS.values():
            compact = self._sign(alg, crit=())
            assert json.loads(b64.b64decode(compact.split(b'.')[0]))['crit'] == []
            with pytest.raises(errors.UnsupportedCriticalParameter):
                self._verify(compact, alg)

    def test_crit_null(self):
        for alg in jwa.JWASignature.ALGORITHMS.values():
            _, payload, sig = self._sign(alg).split(b'.')
            header = json.dumps({'alg': alg.name, 'crit': None}).encode()
            with pytest.raises(errors.UnsupportedCriticalParameter):
                self._verify(b'.'.join((b64.b64encode(header), payload, sig)), alg)

    def test_crit_empty_json(self):
        from josecore.jws import JWS
        key = _signing_key(jwa.HS256)
        jobj = JWS.sign(b'foo', key, 'HS256', crit=()).to_json()
        with pytest.raises(errors.UnsupportedCriticalParameter):
            JWS.from_json(jobj).verify(key)
        jobj['header'] = {'crit': None}
        with pytest.raises(errors.UnsupportedCriticalParameter):
            JWS.from_json(jobj)


class MultiSignatureTest(unittest.TestCase):
    """Tests for josecore.jws.JWS with several signatures."""

    def setUp(self):
        from josecore.jws import JWS
        self.rsa = test_util.rsa_key()
        self.ec = test_util.ec_key()
        self.jws = JWS.sign(b'foo', self.rsa, 'RS256').add_signature(self.ec, 'ES256')

    def test_general_round_trip(self):
        from josecore.jws import JWS
        jobj = self.jws.to_json()
        assert len(jobj['signatures']) == 2
        assert JWS.from_json(jobj) == self.jws

    def test_any(self):
        from josecore.jws import ANY
        assert self.jws.verify(self.ec.public_key()) == b'foo'
        assert self.jws.verify(self.rsa.public_key(), policy=ANY) == b'foo'
        # one signature's algorithm not permitted, the other verifies
        assert self.jws.verify([self.ec.public_key()], algorithms=['ES256']) == b'foo'

    def test_any_none_verify(self):
        from josecore.jwk import JWKEC
        keys = [test_util.rsa_key(3072).public_key(), JWKEC.generate('P-256').public_key()]
        with pytest.raises(errors.SignatureMismatch):
            self.jws.verify(keys)

    def test_any_first_policy_error_raised(self):
        with pytest.raises(errors.UnsupportedAlgorithm):
            self.jws.verify([self.rsa.public_key(), self.ec.public_key()],
                            algorithms=['PS256'])

    def test_all(self):
        from josecore.jws import ALL
        keys = [self.rsa.public_key(), self.ec.public_key()]
        assert self.jws.verify(keys, policy=ALL) == b'foo'
        with pytest.raises(errors.AlgorithmKeyMismatch):
            self.jws.verify(self.ec.public_key(), policy=ALL)
        with pytest.raises(errors.UnsupportedAlgorithm):
            self.jws.verify(keys, policy=ALL, algorithms=['ES256'])

    def test_all_one_mismatch(self):
        from josecore.jws import ALL
        keys = [test_util.rsa_key(3072).public_key(), self.ec.public_key()]
        with pytest.raises(errors.SignatureMismatch):
            self.jws.verify(keys, policy=ALL)

    def test_policy_by_value(self):
        assert self.jws.verify(self.ec.public_key(), policy='any') == b'foo'


class RFCVectorsTest(unittest.TestCase):
    """Published JWS examples."""

    def test_rfc7515_a1(self):
        from josecore.jws import JWS
        jws = JWS.from_compact(test_util.RFC7515_A1_COMPACT)
        assert jws.signature.protected == '{"typ":"JWT",\r\n "alg":"HS256"}'
        assert jws.signature.combined.typ == 'application/JWT'
        key = test_util.rfc7515_a1_key()
        assert jws.verify(key, algorithms=['HS256']) == test_util.RFC7515_A1_PAYLOAD
        # protected header text is kept byte for byte
        assert jws.to_compact().decode('ascii') == test_util.RFC7515_A1_COMPACT

    def test_rfc7515_a1_short_key_rejected(self):
        from josecore.jws import JWS
        from josecore.jwk import JWKOct
        jws = JWS.from_compact(test_util.RFC7515_A1_COMPACT)
        with pytest.raises(errors.AlgorithmKeyMismatch):
            jws.verify(JWKOct(key=b'secret'))

    def test_rfc8037_a4(self):
        from josecore.jws import JWS
        from josecore.jwk import JWK
        from josecore._internal.tests.jwk_test import ED25519_JWK
        key = JWK.from_json(ED25519_JWK)
        jws = JWS.from_compact(ED25519_COMPACT)
        assert jws.verify(key.public_key(), algorithms=['EdDSA']) == \
            b'Example of Ed25519 signing'
        protected, payload, sig = ED25519_COMPACT.split('.')
        msg = (protected + '.' + payload).encode('ascii')
        assert b64.b64encode(jwa.EdDSA.sign(key.key, msg)).decode() == sig


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
