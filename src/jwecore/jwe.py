"""JSON Web Encryption.

https://datatracker.ietf.org/doc/html/rfc7516

A `JWE` couples a JOSE header, a key and a `JWEMap`, the table of
byte ranges (header, encrypted key, IV, ciphertext, tag, ...) the
encrypt and decrypt pipelines and the serializers work on. Slots are
views into caller owned buffers or into a `.Scratch` arena; a `JWE`
never owns the bytes they point to.

"""
import enum
import json
import logging
import os
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec
import josepy as jose

from jwecore import buffers
from jwecore import constants
from jwecore import errors
from jwecore import header as jwe_header
from jwecore import jwa
from jwecore import kdf
from jwecore import util

logger = logging.getLogger(__name__)


class Slot(enum.IntEnum):
    """Named byte ranges of a `JWEMap`."""
    JOSE = 0
    EKEY = 1
    AAD = 2
    IV = 3
    CTXT = 4
    ATAG = 5
    PYLD = 6
    UHDR = 7
    SIG = 8


COMPACT_SLOTS = (Slot.JOSE, Slot.EKEY, Slot.IV, Slot.CTXT, Slot.ATAG)

MEMBER_SLOTS: Dict[str, Slot] = dict(zip(
    constants.FLATTENED_MEMBERS,
    (Slot.EKEY, Slot.AAD, Slot.IV, Slot.CTXT, Slot.ATAG)))

_EMPTY = memoryview(b'')


class JWEMap:
    """Fixed table of non-owning byte ranges, indexed by `Slot`."""

    def __init__(self) -> None:
        self._views = [_EMPTY] * len(Slot)

    def set(self, slot: Slot, data: Union[bytes, bytearray, memoryview]) -> None:
        """Point ``slot`` at ``data``. No copy is made."""
        self._views[slot] = memoryview(data).cast('B')

    def get(self, slot: Slot) -> memoryview:
        """View held by ``slot``, empty if unset."""
        return self._views[slot]

    __getitem__ = get

    def is_set(self, slot: Slot) -> bool:
        """Is ``slot`` non-empty?"""
        return len(self._views[slot]) > 0

    def clear(self) -> None:
        """Unset all slots."""
        self._views = [_EMPTY] * len(Slot)

    def _store_b64(self, slot: Slot, value: Any, temp: buffers.Scratch) -> None:
        try:
            decoded = jose.b64decode(value)
        except (TypeError, ValueError) as error:
            raise jose.DeserializationError(
                'Invalid {0} segment: {1}'.format(slot.name, error))
        self.set(slot, temp.store(decoded))

    @classmethod
    def from_compact(cls, data: Union[str, bytes], temp: buffers.Scratch) -> 'JWEMap':
        """Split a Compact Serialization.

        Decoded segments are held in the scratch arena ``temp``.

        :raises josepy.errors.DeserializationError: if ``data`` is not
            five dot separated Base64url segments

        """
        if isinstance(data, str):
            try:
                data = data.encode('ascii')
            except UnicodeEncodeError as error:
                raise jose.DeserializationError(error)
        parts = bytes(data).split(b'.')
        if len(parts) != len(COMPACT_SLOTS):
            raise jose.DeserializationError(
                'Compact JWE has {0} segments, expected {1}'.format(
                    len(parts), len(COMPACT_SLOTS)))
        jwe_map = cls()
        for slot, part in zip(COMPACT_SLOTS, parts):
            jwe_map._store_b64(slot, part, temp)  # pylint: disable=protected-access
        return jwe_map

    @classmethod
    def from_flattened(cls, data: Union[str, bytes, Dict[str, Any]],
                       temp: buffers.Scratch) -> 'JWEMap':
        """Split a Flattened (or single recipient General) JSON Serialization.

        :raises .MultiRecipientNotSupported: if there is not exactly one
            recipient
        :raises josepy.errors.DeserializationError: on malformed input

        """
        if isinstance(data, dict):
            jobj = data
        else:
            try:
                jobj = json.loads(data)
            except ValueError as error:
                raise jose.DeserializationError(error)
        if not isinstance(jobj, dict):
            raise jose.DeserializationError('JWE JSON must be an object')

        if 'recipients' in jobj:
            recipients = jobj['recipients']
            if not isinstance(recipients, list) or len(recipients) != 1:
                raise errors.MultiRecipientNotSupported(
                    'Only single recipient JWE JSON is supported')
            if not isinstance(recipients[0], dict):
                raise jose.DeserializationError('Recipient must be an object')
            jobj = dict(jobj, **recipients[0])

        if 'protected' not in jobj:
            raise jose.DeserializationError('Missing "protected"')
        jwe_map = cls()
        jwe_map._store_b64(Slot.JOSE, jobj['protected'], temp)  # pylint: disable=protected-access
        for name, slot in MEMBER_SLOTS.items():
            if name in jobj:
                jwe_map._store_b64(slot, jobj[name], temp)  # pylint: disable=protected-access
        return jwe_map


class Pipeline(enum.Enum):
    """Encrypt/decrypt pipelines, one per supported algorithm shape."""
    RSA_CBC_HS = 'RSA key wrap, AES-CBC-HMAC'
    RSA_GCM = 'RSA key wrap, AES-GCM'
    AESKW_CBC_HS = 'AES key wrap, AES-CBC-HMAC'
    ECDH_CBC_HS = 'ECDH-ES key agreement, AES-CBC-HMAC'


_RSA_KINDS = (jwa.KeyManagementType.RSA_PKCS1_1_5, jwa.KeyManagementType.RSA_OAEP)


def select_pipeline(alg: Any, enc: Any) -> Pipeline:
    """Select the pipeline for ``alg`` and ``enc``.

    Rows are tried in a fixed priority order and the first match wins:
    RSA with AES-CBC-HMAC, RSA with AES-GCM, AES key wrap with
    AES-CBC-HMAC, ECDH-ES with AES-CBC-HMAC.

    :raises .UnsupportedAlgorithmCombination: for any other pair,
        including ECDH-ES or AES key wrap with AES-GCM

    """
    alg_kind = getattr(alg, 'kind', None)
    enc_kind = getattr(enc, 'kind', None)
    cbc_hs = enc_kind is jwa.ContentEncryptionType.AES_CBC_HMAC
    gcm = enc_kind is jwa.ContentEncryptionType.AES_GCM

    if alg_kind in _RSA_KINDS and cbc_hs:
        return Pipeline.RSA_CBC_HS
    if alg_kind in _RSA_KINDS and gcm:
        return Pipeline.RSA_GCM
    if alg_kind is jwa.KeyManagementType.AES_KW and cbc_hs:
        return Pipeline.AESKW_CBC_HS
    if alg_kind is jwa.KeyManagementType.ECDH_ES and cbc_hs:
        return Pipeline.ECDH_CBC_HS

    alg_name = getattr(alg, 'name', None)
    enc_name = getattr(enc, 'name', None)
    logger.warning('Unknown cipher alg combo %s / %s', alg_name, enc_name)
    raise errors.UnsupportedAlgorithmCombination(alg_name, enc_name)


class JWE:
    """JWE context.

    :ivar key: `josepy.JWK` used to wrap, agree on or unwrap the CEK.
    :ivar header: Parsed `.Header`, set by `encrypt` and
        `auth_and_decrypt`, or by the caller.
    :ivar JWEMap map: Byte ranges of this JWE.
    :ivar int recipients: Number of recipients.

    """

    def __init__(self, key: Optional[jose.JWK] = None,
                 jwe_map: Optional[JWEMap] = None, recipients: int = 1,
                 header: Optional[jwe_header.Header] = None) -> None:
        self.key = key
        self.map = JWEMap() if jwe_map is None else jwe_map
        self.recipients = recipients
        self.header = header

    def _parse_header(self, temp: buffers.Scratch) -> None:
        if not self.map.is_set(Slot.JOSE):
            if self.header is None:
                raise errors.InvalidState('No JOSE header')
            self.map.set(Slot.JOSE, temp.store(self.header.render()))
        self.header = jwe_header.Header.parse(self.map[Slot.JOSE], temp)
        if self.header.alg is None or self.header.enc is None:
            raise errors.InvalidState('JOSE header needs "alg" and "enc"')
        if self.key is None:
            raise errors.InvalidState('No key')

    def _aad(self) -> bytes:
        aad = jose.b64encode(bytes(self.map[Slot.JOSE]))
        if self.map.is_set(Slot.AAD):
            aad += b'.' + jose.b64encode(bytes(self.map[Slot.AAD]))
        return aad

    def _agree(self, temp: buffers.Scratch) -> Tuple[bytes, bytes]:
        alg, enc = self.header.alg, self.header.enc
        peer = alg.ec_key(self.key)
        if isinstance(peer, ec.EllipticCurvePrivateKey):
            peer = peer.public_key()
        ephemeral = alg.ephemeral(self.key)

        # epk is part of the protected header, hence of the AAD
        self.header = self.header.update(epk=jose.JWKEC(key=ephemeral.public_key()))
        self.map.set(Slot.JOSE, temp.store(self.header.render()))

        try:
            shared = alg.exchange(ephemeral, peer)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.CryptoFailure(str(error)) from error
        derived = kdf.concat_kdf(self.header, not alg.wraps, shared)
        if not alg.wraps:
            return derived, b''
        cek = os.urandom(enc.cek_size)
        return cek, alg.wrap(jose.JWKOct(key=derived), cek)

    def encrypt(self, temp: buffers.Scratch) -> int:
        """Encrypt the plaintext held in the ``CTXT`` slot.

        The JOSE header is taken from the ``JOSE`` slot (or rendered
        from `header` if the slot is empty). On success ``EKEY``,
        ``IV``, ``CTXT`` and ``ATAG`` point into ``temp``.

        :param .Scratch temp: Scratch arena, shrinks by what is used.

        :returns: Ciphertext length.

        :raises .InvalidState: if the header or key is missing
        :raises .UnsupportedAlgorithmCombination: if no pipeline matches
        :raises .CryptoFailure: if a primitive fails
        :raises .BufferTooSmall: if ``temp`` is exhausted

        """
        self._parse_header(temp)
        alg, enc = self.header.alg, self.header.enc
        pipeline = select_pipeline(alg, enc)
        logger.debug('Encrypting with %s (%s / %s)', pipeline.value, alg, enc)

        if pipeline is Pipeline.ECDH_CBC_HS:
            cek, ekey = self._agree(temp)
        else:
            cek = os.urandom(enc.cek_size)
            ekey = alg.wrap(self.key, cek)

        iv, ciphertext, tag = enc.encrypt(
            cek, self._aad(), bytes(self.map[Slot.CTXT]))
        for slot, data in ((Slot.EKEY, ekey), (Slot.IV, iv),
                           (Slot.CTXT, ciphertext), (Slot.ATAG, tag)):
            self.map.set(slot, temp.store(data))
        return len(ciphertext)

    def _recover_cek(self, pipeline: Pipeline) -> bytes:
        alg, enc = self.header.alg, self.header.enc
        ekey = bytes(self.map[Slot.EKEY])
        if pipeline is not Pipeline.ECDH_CBC_HS:
            return alg.unwrap(self.key, ekey, enc.cek_size)

        private = alg.ec_key(self.key)
        if not isinstance(private, ec.EllipticCurvePrivateKey):
            raise errors.InvalidState('ECDH-ES decryption needs a private key')
        shared = alg.exchange(private, alg.ec_key(self.header.epk))
        derived = kdf.concat_kdf(self.header, not alg.wraps, shared)
        if not alg.wraps:
            if ekey:
                raise errors.InvalidState('Direct key agreement with encrypted key')
            return derived
        return alg.unwrap(jose.JWKOct(key=derived), ekey, enc.cek_size)

    def auth_and_decrypt(self, temp: buffers.Scratch) -> int:
        """Verify and decrypt.

        On success the ``CTXT`` slot points at the plaintext, held in
        ``temp``. Every failure past algorithm selection is reported as
        `.DecryptionFailed`.

        :returns: Plaintext length.

        :raises .InvalidState: if the header or key is missing
        :raises .UnsupportedAlgorithmCombination: if no pipeline matches
        :raises .DecryptionFailed: if the JWE cannot be authenticated

        """
        self._parse_header(temp)
        alg, enc = self.header.alg, self.header.enc
        pipeline = select_pipeline(alg, enc)
        logger.debug('Decrypting with %s (%s / %s)', pipeline.value, alg, enc)

        try:
            cek = self._recover_cek(pipeline)
            plaintext = enc.decrypt(
                cek, self._aad(), bytes(self.map[Slot.IV]),
                bytes(self.map[Slot.CTXT]), bytes(self.map[Slot.ATAG]))
        except (errors.InvalidState, errors.CryptoFailure, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.DecryptionFailed() from error

        self.map.set(Slot.CTXT, temp.store(plaintext))
        return len(plaintext)

    def render_compact(self, out: buffers.Buffer) -> int:
        """Render the Compact Serialization into ``out``.

        Output is NUL terminated, so ``out`` needs one byte more than
        the returned length.

        :returns: Length of the output, NUL not included.

        :raises .MultiRecipientNotSupported: if there is more than one
            recipient, nothing is written
        :raises .BufferTooSmall: if ``out`` is too small

        """
        if self.recipients > 1:
            logger.info('Compact JWE cannot hold %d recipients', self.recipients)
            raise errors.MultiRecipientNotSupported(
                'Compact serialization holds a single recipient')
        writer = buffers.Writer(out)
        for index, slot in enumerate(COMPACT_SLOTS):
            if index:
                writer.write(b'.')
            writer.write_b64(self.map[slot])
        return writer.terminate()

    def _header_json(self) -> bytes:
        if self.map.is_set(Slot.JOSE):
            return bytes(self.map[Slot.JOSE])
        if self.header is None:
            raise errors.InvalidState('No JOSE header')
        return self.header.render()

    def render_flattened(self, out: buffers.Buffer) -> int:
        """Render the Flattened JSON Serialization into ``out``.

        The header is rendered once and written both Base64url encoded
        (``protected``) and as plain JSON (``header``). Members whose
        slot is empty are left out.

        :returns: Length of the output, NUL not included.

        :raises .BufferTooSmall: if ``out`` is too small or the header
            exceeds `.FLATTENED_HEADER_MAX`

        """
        header_json = self._header_json()
        if len(header_json) > constants.FLATTENED_HEADER_MAX:
            raise errors.BufferTooSmall(
                len(header_json), constants.FLATTENED_HEADER_MAX)

        writer = buffers.Writer(out)
        writer.write(b'{"protected":"')
        writer.write_b64(header_json)
        writer.write(b'",\n"header":')
        writer.write(header_json)
        for name, slot in MEMBER_SLOTS.items():
            if not self.map.is_set(slot):
                continue
            writer.write(',"{0}":"'.format(name).encode('ascii'))
            writer.write_b64(self.map[slot])
            writer.write(b'"')
        writer.write(b'\n}\n')
        return writer.terminate()

    def to_compact(self) -> bytes:
        """Compact Serialization as `bytes`."""
        size = sum(util.b64_length(len(self.map[slot])) for slot in COMPACT_SLOTS)
        out = bytearray(size + len(COMPACT_SLOTS) - 1 + len(constants.NUL))
        return bytes(out[:self.render_compact(out)])

    def to_flattened(self) -> bytes:
        """Flattened JSON Serialization as `bytes`."""
        header_json = self._header_json()
        size = len(header_json) + util.b64_length(len(header_json)) + 64
        for name, slot in MEMBER_SLOTS.items():
            size += len(name) + util.b64_length(len(self.map[slot])) + 6
        out = bytearray(size)
        return bytes(out[:self.render_flattened(out)])

    def destroy(self) -> None:
        """Drop the header, the key reference and all byte ranges."""
        self.map.clear()
        self.header = None
        self.key = None
