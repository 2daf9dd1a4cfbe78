"""Tests for jwecore.jwe."""
import json
import sys
import unittest
from unittest import mock

from cryptography.hazmat.primitives import keywrap
import josepy as jose
import pytest

from jwecore import errors
from jwecore._internal.tests import test_util

RSA_KEY = jose.JWKRSA(key=test_util.load_rsa_private_key('rsa2048_key.pem'))
EC_KEY = jose.JWKEC(key=test_util.load_ecdsa_private_key('ec_p256_key.pem'))
EC384_KEY = jose.JWKEC(key=test_util.load_ecdsa_private_key('ec_p384_key.pem'))

LIVE_LONG = b'Live long and prosper.'
FRODO = (
    b"You can trust us to stick with you through thick and "
    b"thin\xe2\x80\x93to the bitter end. And you can trust us to "
    b"keep any secret of yours\xe2\x80\x93closer than you keep it "
    b"yourself. But you cannot trust us to let you face trouble "
    b"alone, and go off without a word. We are your friends, Frodo.")

A3_HEADER = b'{"alg":"A128KW","enc":"A128CBC-HS256"}'


def _header_json(alg, enc, **kwargs):
    return json.dumps(dict(alg=alg, enc=enc, **kwargs),
                      separators=(',', ':')).encode()


def _encrypt(key, header_json, plaintext, aad=b''):
    from jwecore.buffers import Scratch
    from jwecore.jwe import JWE
    from jwecore.jwe import Slot
    jwe = JWE(key=key)
    jwe.map.set(Slot.JOSE, header_json)
    jwe.map.set(Slot.CTXT, plaintext)
    if aad:
        jwe.map.set(Slot.AAD, aad)
    jwe.encrypt(Scratch.sized_for(len(plaintext)))
    return jwe


def _decrypt_compact(key, compact):
    from jwecore.buffers import Scratch
    from jwecore.jwe import JWE
    from jwecore.jwe import JWEMap
    from jwecore.jwe import Slot
    temp = Scratch.sized_for(len(compact))
    jwe = JWE(key=key, jwe_map=JWEMap.from_compact(compact, temp))
    length = jwe.auth_and_decrypt(temp)
    assert length == len(jwe.map[Slot.CTXT])
    return bytes(jwe.map[Slot.CTXT])


def _decrypt_flattened(key, data):
    from jwecore.buffers import Scratch
    from jwecore.jwe import JWE
    from jwecore.jwe import JWEMap
    from jwecore.jwe import Slot
    temp = Scratch()
    jwe = JWE(key=key, jwe_map=JWEMap.from_flattened(data, temp))
    jwe.auth_and_decrypt(temp)
    return bytes(jwe.map[Slot.CTXT])


class JWEMapTest(unittest.TestCase):
    """Tests for jwecore.jwe.JWEMap."""

    def setUp(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWEMap
        self.map = JWEMap()
        self.temp = Scratch()

    def test_slots(self):
        from jwecore.jwe import Slot
        assert not self.map.is_set(Slot.IV)
        assert bytes(self.map[Slot.IV]) == b''
        backing = bytearray(b'iv')
        self.map.set(Slot.IV, backing)
        assert self.map.is_set(Slot.IV)
        backing[0:1] = b'I'
        assert bytes(self.map.get(Slot.IV)) == b'Iv'
        self.map.clear()
        assert not self.map.is_set(Slot.IV)

    def test_from_compact(self):
        from jwecore.jwe import JWEMap
        from jwecore.jwe import Slot
        jwe_map = JWEMap.from_compact(test_util.load_text('rfc7516_a3.txt'), self.temp)
        assert bytes(jwe_map[Slot.JOSE]) == A3_HEADER
        assert len(jwe_map[Slot.EKEY]) == 40
        assert len(jwe_map[Slot.IV]) == 16
        assert len(jwe_map[Slot.ATAG]) == 16
        assert not jwe_map.is_set(Slot.AAD)

    def test_from_compact_errors(self):
        from jwecore.jwe import JWEMap
        for data in ('a.b.c.d', 'a.b.c.d.e.f', 'eyJ9.A.AAAA.AAAA.AAAA', b'a..b.c.d',
                     '\xe9.a.b.c.d'):
            with pytest.raises(jose.DeserializationError):
                JWEMap.from_compact(data, self.temp)

    def test_from_compact_scratch_exhausted(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWEMap
        with pytest.raises(errors.BufferTooSmall):
            JWEMap.from_compact(test_util.load_text('rfc7516_a3.txt'), Scratch(16))

    def test_from_flattened_general_single_recipient(self):
        from jwecore.jwe import JWEMap
        from jwecore.jwe import Slot
        protected, ekey, iv, ciphertext, tag = \
            test_util.load_text('rfc7516_a3.txt').split('.')
        jwe_map = JWEMap.from_flattened(json.dumps({
            'protected': protected,
            'recipients': [{'encrypted_key': ekey}],
            'iv': iv, 'ciphertext': ciphertext, 'tag': tag,
        }), self.temp)
        assert jose.b64encode(bytes(jwe_map[Slot.EKEY])).decode() == ekey

    def test_from_flattened_multi_recipient(self):
        from jwecore.jwe import JWEMap
        data = {'protected': 'e30', 'recipients': [{}, {}]}
        with pytest.raises(errors.MultiRecipientNotSupported):
            JWEMap.from_flattened(data, self.temp)

    def test_from_flattened_errors(self):
        from jwecore.jwe import JWEMap
        for data in ('not json', '[]', '{"iv":"AAAA"}',
                     '{"protected":"e30","recipients":["x"]}',
                     '{"protected":"e30","tag":1}'):
            with pytest.raises(jose.DeserializationError):
                JWEMap.from_flattened(data, self.temp)


class SelectPipelineTest(unittest.TestCase):
    """Tests for jwecore.jwe.select_pipeline."""

    def test_supported(self):
        from jwecore import jwa
        from jwecore.jwe import Pipeline
        from jwecore.jwe import select_pipeline
        assert select_pipeline(jwa.RSA1_5, jwa.A128CBC_HS256) is Pipeline.RSA_CBC_HS
        assert select_pipeline(jwa.RSA_OAEP_256, jwa.A256CBC_HS512) is Pipeline.RSA_CBC_HS
        assert select_pipeline(jwa.RSA_OAEP, jwa.A192GCM) is Pipeline.RSA_GCM
        assert select_pipeline(jwa.A192KW, jwa.A192CBC_HS384) is Pipeline.AESKW_CBC_HS
        assert select_pipeline(jwa.ECDH_ES, jwa.A128CBC_HS256) is Pipeline.ECDH_CBC_HS
        assert select_pipeline(jwa.ECDH_ES_A256KW, jwa.A256CBC_HS512) is \
            Pipeline.ECDH_CBC_HS

    def test_unsupported(self):
        from jwecore import jwa
        from jwecore.jwe import select_pipeline
        for alg, enc, names in (
                (jwa.ECDH_ES, jwa.A128GCM, ('ECDH-ES', 'A128GCM')),
                (jwa.A128KW, jwa.A128GCM, ('A128KW', 'A128GCM')),
                (jose.RS256, jwa.A128CBC_HS256, ('RS256', 'A128CBC-HS256')),
                (jwa.RSA1_5, None, ('RSA1_5', None)),
                (None, None, (None, None))):
            with pytest.raises(errors.UnsupportedAlgorithmCombination) as info:
                select_pipeline(alg, enc)
            assert (info.value.alg, info.value.enc) == names


class JWEEncryptDecryptTest(unittest.TestCase):
    """Tests for jwecore.jwe.JWE.encrypt and JWE.auth_and_decrypt."""

    SIZES = (0, 15, 16, 17)

    def _check_round_trips(self, key, alg, encs, decrypt_key=None):
        for enc in encs:
            for size in self.SIZES:
                plaintext = bytes(range(size))
                jwe = _encrypt(key, _header_json(alg, enc), plaintext)
                assert _decrypt_compact(decrypt_key or key, jwe.to_compact()) == \
                    plaintext, (alg, enc, size)

    def test_rsa(self):
        for alg in ('RSA1_5', 'RSA-OAEP', 'RSA-OAEP-256'):
            self._check_round_trips(
                RSA_KEY.public_key(), alg,
                ('A128CBC-HS256', 'A192CBC-HS384', 'A256CBC-HS512',
                 'A128GCM', 'A192GCM', 'A256GCM'), decrypt_key=RSA_KEY)

    def test_aes_kw(self):
        for alg, size in (('A128KW', 16), ('A192KW', 24), ('A256KW', 32)):
            self._check_round_trips(
                jose.JWKOct(key=b'k' * size), alg,
                ('A128CBC-HS256', 'A192CBC-HS384', 'A256CBC-HS512'))

    def test_ecdh_es(self):
        for key in (EC_KEY, EC384_KEY):
            for alg in ('ECDH-ES', 'ECDH-ES+A128KW', 'ECDH-ES+A192KW',
                        'ECDH-ES+A256KW'):
                self._check_round_trips(
                    key.public_key(), alg,
                    ('A128CBC-HS256', 'A192CBC-HS384', 'A256CBC-HS512'),
                    decrypt_key=key)

    def test_ecdh_es_header(self):
        from jwecore.jwe import Slot
        header_json = _header_json('ECDH-ES', 'A128CBC-HS256', apu='QWxpY2U',
                                   apv='Qm9i')
        jwe = _encrypt(EC_KEY, header_json, b'hello')
        rendered = json.loads(bytes(jwe.map[Slot.JOSE]))
        assert rendered['epk']['crv'] == 'P-256'
        assert 'd' not in rendered['epk']
        assert rendered['apu'] == 'QWxpY2U'
        assert jwe.header.epk.to_json() == rendered['epk']
        assert not jwe.map.is_set(Slot.EKEY)
        assert _decrypt_compact(EC_KEY, jwe.to_compact()) == b'hello'

    def test_ecdh_es_key_wrap_has_ekey(self):
        from jwecore.jwe import Slot
        jwe = _encrypt(EC_KEY, _header_json('ECDH-ES+A128KW', 'A128CBC-HS256'), b'x')
        assert len(jwe.map[Slot.EKEY]) == 40

    def test_encrypt_points_slots_at_scratch(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        temp = Scratch(256)
        jwe = JWE(key=jose.JWKOct(key=b'k' * 16))
        jwe.map.set(Slot.JOSE, A3_HEADER)
        jwe.map.set(Slot.CTXT, b'p' * 20)
        assert jwe.encrypt(temp) == 32
        assert len(jwe.map[Slot.CTXT]) == 32
        assert len(jwe.map[Slot.IV]) == 16
        assert len(jwe.map[Slot.ATAG]) == 16
        assert temp.remaining == 256 - (40 + 16 + 32 + 16)

    def test_rfc7516_a3_encrypt(self):
        from jwecore.jwe import Slot
        vector = test_util.load_text('rfc7516_a3.txt')
        _, ekey, iv, _, _ = vector.split('.')
        key = test_util.load_jwk('rfc7516_a3_key.json')
        cek = keywrap.aes_key_unwrap(key.key, jose.b64decode(ekey))
        with mock.patch('jwecore.jwe.os.urandom',
                        side_effect=[cek, jose.b64decode(iv)]):
            jwe = _encrypt(key, A3_HEADER, LIVE_LONG)
        assert bytes(jwe.map[Slot.JOSE]) == A3_HEADER
        assert jwe.to_compact() == vector.encode()

    def test_rfc7516_a3_decrypt(self):
        key = test_util.load_jwk('rfc7516_a3_key.json')
        assert _decrypt_compact(key, test_util.load_text('rfc7516_a3.txt')) == LIVE_LONG

    def test_rfc7516_a2_decrypt(self):
        key = test_util.load_jwk('rfc7516_a2_key.json')
        assert _decrypt_compact(key, test_util.load_text('rfc7516_a2.txt')) == LIVE_LONG

    def test_rfc7520_5_5_decrypt(self):
        key = test_util.load_jwk('rfc7520_5_5_key.json')
        compact = test_util.load_text('rfc7520_5_5.txt')
        assert _decrypt_compact(key, compact) == FRODO
        protected, _, iv, ciphertext, tag = compact.split('.')
        assert _decrypt_flattened(key, {
            'protected': protected, 'iv': iv,
            'ciphertext': ciphertext, 'tag': tag}) == FRODO

    def test_aad(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import JWEMap
        from jwecore.jwe import Slot
        key = jose.JWKOct(key=b'k' * 16)
        jwe = _encrypt(key, A3_HEADER, b'payload', aad=b'extra')
        flattened = jwe.to_flattened()
        assert _decrypt_flattened(key, flattened) == b'payload'

        temp = Scratch()
        stripped = JWE(key=key, jwe_map=JWEMap.from_flattened(flattened, temp))
        stripped.map.set(Slot.AAD, b'')
        with pytest.raises(errors.DecryptionFailed):
            stripped.auth_and_decrypt(temp)

    def test_tampering(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import JWEMap
        from jwecore.jwe import Slot
        cases = (
            (jose.JWKOct(key=b'k' * 16), jose.JWKOct(key=b'k' * 16), 'A128KW',
             'A128CBC-HS256'),
            (RSA_KEY.public_key(), RSA_KEY, 'RSA-OAEP', 'A128GCM'),
            (RSA_KEY.public_key(), RSA_KEY, 'RSA1_5', 'A256CBC-HS512'),
            (EC_KEY.public_key(), EC_KEY, 'ECDH-ES+A128KW', 'A128CBC-HS256'),
            (EC_KEY.public_key(), EC_KEY, 'ECDH-ES', 'A128CBC-HS256'),
        )
        for enc_key, dec_key, alg, enc in cases:
            compact = _encrypt(enc_key, _header_json(alg, enc), b's' * 33).to_compact()
            for slot in (Slot.EKEY, Slot.CTXT, Slot.ATAG):
                temp = Scratch.sized_for(len(compact))
                jwe = JWE(key=dec_key, jwe_map=JWEMap.from_compact(compact, temp))
                if not jwe.map.is_set(slot):
                    continue
                tampered = bytearray(jwe.map[slot])
                tampered[len(tampered) // 2] ^= 0x40
                jwe.map.set(slot, tampered)
                with pytest.raises(errors.DecryptionFailed):
                    jwe.auth_and_decrypt(temp)

    def test_wrong_key(self):
        compact = _encrypt(RSA_KEY.public_key(), _header_json('RSA-OAEP', 'A128GCM'),
                           b'x').to_compact()
        for key in (EC_KEY, jose.JWKOct(key=b'k' * 16), RSA_KEY.public_key()):
            with pytest.raises(errors.DecryptionFailed):
                _decrypt_compact(key, compact)

        compact = _encrypt(EC_KEY, _header_json('ECDH-ES', 'A128CBC-HS256'),
                           b'x').to_compact()
        for key in (EC384_KEY, EC_KEY.public_key(), RSA_KEY):
            with pytest.raises(errors.DecryptionFailed):
                _decrypt_compact(key, compact)

    def test_unsupported_combination(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        for key, alg, enc in ((EC_KEY, 'ECDH-ES', 'A128GCM'),
                              (jose.JWKOct(key=b'k' * 16), 'A128KW', 'A128GCM'),
                              (RSA_KEY, 'RS256', 'A128GCM')):
            with pytest.raises(errors.UnsupportedAlgorithmCombination):
                _encrypt(key, _header_json(alg, enc), b'x')
            jwe = JWE(key=key)
            jwe.map.set(Slot.JOSE, _header_json(alg, enc))
            with pytest.raises(errors.UnsupportedAlgorithmCombination):
                jwe.auth_and_decrypt(Scratch())

    def test_encrypt_from_header_object(self):
        from jwecore import jwa
        from jwecore.buffers import Scratch
        from jwecore.header import Header
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        key = jose.JWKOct(key=b'k' * 16)
        jwe = JWE(key=key, header=Header(alg=jwa.A128KW, enc=jwa.A128CBC_HS256))
        jwe.map.set(Slot.CTXT, b'data')
        jwe.encrypt(Scratch())
        assert bytes(jwe.map[Slot.JOSE]) == A3_HEADER
        assert _decrypt_compact(key, jwe.to_compact()) == b'data'

    def test_invalid_state(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        with pytest.raises(errors.InvalidState):
            JWE(key=RSA_KEY).encrypt(Scratch())
        with pytest.raises(errors.InvalidState):
            JWE(key=RSA_KEY).auth_and_decrypt(Scratch())
        jwe = JWE()
        jwe.map.set(Slot.JOSE, A3_HEADER)
        with pytest.raises(errors.InvalidState):
            jwe.encrypt(Scratch())

    def test_missing_alg_or_enc(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        key = jose.JWKOct(key=b'k' * 16)
        for header_json in (b'{"enc":"A128CBC-HS256"}', b'{"alg":"A128KW"}', b'{}'):
            with pytest.raises(errors.InvalidState):
                _encrypt(key, header_json, b'x')
            jwe = JWE(key=key)
            jwe.map.set(Slot.JOSE, header_json)
            with pytest.raises(errors.InvalidState):
                jwe.auth_and_decrypt(Scratch())

    def test_malformed_header(self):
        compact = test_util.load_text('rfc7516_a3.txt')
        key = test_util.load_jwk('rfc7516_a3_key.json')
        rest = compact.split('.', 1)[1]
        for header_json in (b'{"alg":[1],"enc":"A128CBC-HS256"}',
                            b'{"alg":"A128KW","enc":"A128CBC-HS256","apu":5}',
                            b'{"alg":"A128KW","enc":"A128CBC-HS256","epk":"x"}'):
            tampered = jose.b64encode(header_json).decode() + '.' + rest
            with pytest.raises(jose.DeserializationError):
                _decrypt_compact(key, tampered)

    def test_encrypt_wrong_key_type(self):
        with pytest.raises(errors.InvalidState):
            _encrypt(EC_KEY, _header_json('RSA-OAEP', 'A128GCM'), b'x')
        with pytest.raises(errors.InvalidState):
            _encrypt(RSA_KEY, _header_json('ECDH-ES', 'A128CBC-HS256'), b'x')

    def test_scratch_exhausted(self):
        from jwecore.buffers import Scratch
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        jwe = JWE(key=jose.JWKOct(key=b'k' * 16))
        jwe.map.set(Slot.JOSE, A3_HEADER)
        jwe.map.set(Slot.CTXT, b'p' * 100)
        with pytest.raises(errors.BufferTooSmall):
            jwe.encrypt(Scratch(64))


class RenderCompactTest(unittest.TestCase):
    """Tests for jwecore.jwe.JWE.render_compact."""

    def setUp(self):
        self.jwe = _encrypt(jose.JWKOct(key=b'k' * 16), A3_HEADER, LIVE_LONG)
        self.expected = self.jwe.to_compact()

    def test_layout(self):
        from jwecore.jwe import Slot
        parts = self.expected.split(b'.')
        assert len(parts) == 5
        assert jose.b64decode(parts[0]) == A3_HEADER
        assert jose.b64decode(parts[3]) == bytes(self.jwe.map[Slot.CTXT])
        assert b'=' not in self.expected

    def test_exact_buffer(self):
        out = bytearray(len(self.expected) + 1)
        assert self.jwe.render_compact(out) == len(self.expected)
        assert bytes(out[:-1]) == self.expected
        assert out[-1] == 0

    def test_one_byte_short(self):
        with pytest.raises(errors.BufferTooSmall):
            self.jwe.render_compact(bytearray(len(self.expected)))
        with pytest.raises(errors.BufferTooSmall):
            self.jwe.render_compact(bytearray(0))

    def test_writable_memoryview(self):
        backing = bytearray(len(self.expected) + 10)
        length = self.jwe.render_compact(memoryview(backing)[5:])
        assert bytes(backing[5:5 + length]) == self.expected

    def test_multi_recipient(self):
        self.jwe.recipients = 2
        out = bytearray(b'\xff' * 1024)
        with pytest.raises(errors.MultiRecipientNotSupported):
            self.jwe.render_compact(out)
        assert out == bytearray(b'\xff' * 1024)

    def test_empty_ekey(self):
        jwe = _encrypt(EC_KEY, _header_json('ECDH-ES', 'A128CBC-HS256'), b'x')
        assert b'..' in jwe.to_compact()


class RenderFlattenedTest(unittest.TestCase):
    """Tests for jwecore.jwe.JWE.render_flattened."""

    def setUp(self):
        self.jwe = _encrypt(jose.JWKOct(key=b'k' * 16), A3_HEADER, LIVE_LONG)
        self.expected = self.jwe.to_flattened()

    def _b64(self, slot):
        return jose.b64encode(bytes(self.jwe.map[slot]))

    def test_layout(self):
        from jwecore.jwe import Slot
        assert self.expected == (
            b'{"protected":"' + jose.b64encode(A3_HEADER) + b'",\n' +
            b'"header":' + A3_HEADER +
            b',"encrypted_key":"' + self._b64(Slot.EKEY) + b'"' +
            b',"iv":"' + self._b64(Slot.IV) + b'"' +
            b',"ciphertext":"' + self._b64(Slot.CTXT) + b'"' +
            b',"tag":"' + self._b64(Slot.ATAG) + b'"' +
            b'\n}\n')

    def test_valid_json(self):
        jobj = json.loads(self.expected)
        assert jobj['header'] == {'alg': 'A128KW', 'enc': 'A128CBC-HS256'}
        assert jose.b64decode(jobj['protected']) == A3_HEADER
        assert 'aad' not in jobj

    def test_aad_member(self):
        jwe = _encrypt(jose.JWKOct(key=b'k' * 16), A3_HEADER, b'x', aad=b'\x00extra')
        jobj = json.loads(jwe.to_flattened())
        assert jobj['aad'] == jose.b64encode(b'\x00extra').decode()
        assert list(jobj) == ['protected', 'header', 'encrypted_key', 'aad',
                              'iv', 'ciphertext', 'tag']

    def test_empty_members_omitted(self):
        jwe = _encrypt(EC_KEY, _header_json('ECDH-ES', 'A128CBC-HS256'), b'x')
        assert 'encrypted_key' not in json.loads(jwe.to_flattened())

    def test_exact_buffer(self):
        out = bytearray(len(self.expected) + 1)
        assert self.jwe.render_flattened(out) == len(self.expected)
        assert bytes(out[:-1]) == self.expected
        assert out[-1] == 0

    def test_one_byte_short(self):
        with pytest.raises(errors.BufferTooSmall):
            self.jwe.render_flattened(bytearray(len(self.expected)))

    def test_header_too_large(self):
        from jwecore import constants
        from jwecore.jwe import JWE
        from jwecore.jwe import Slot
        jwe = JWE()
        jwe.map.set(Slot.JOSE, b'{"kid":"' + b'x' * constants.FLATTENED_HEADER_MAX + b'"}')
        with pytest.raises(errors.BufferTooSmall):
            jwe.render_flattened(bytearray(4 * constants.FLATTENED_HEADER_MAX))

    def test_header_from_object(self):
        from jwecore import jwa
        from jwecore.header import Header
        from jwecore.jwe import JWE
        jwe = JWE(header=Header(alg=jwa.A128KW, enc=jwa.A128GCM))
        jobj = json.loads(jwe.to_flattened())
        assert jobj == {'protected': jose.b64encode(
            b'{"alg":"A128KW","enc":"A128GCM"}').decode(),
                        'header': {'alg': 'A128KW', 'enc': 'A128GCM'}}

    def test_no_header(self):
        from jwecore.jwe import JWE
        with pytest.raises(errors.InvalidState):
            JWE().render_flattened(bytearray(128))


class DestroyTest(unittest.TestCase):
    """Tests for jwecore.jwe.JWE.destroy."""

    def test_destroy(self):
        from jwecore.jwe import Slot
        jwe = _encrypt(jose.JWKOct(key=b'k' * 16), A3_HEADER, b'x')
        jwe.destroy()
        assert jwe.key is None
        assert jwe.header is None
        for slot in Slot:
            assert not jwe.map.is_set(slot)


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
