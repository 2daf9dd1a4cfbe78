"""JWS signed packets.

A signed packet is a flattened JWS whose protected header carries the
signer's public key and a server nonce, as used by ACME style APIs::

  {"protected":"<b64 header>","payload":"<b64 payload>",
   "header":"<b64 payload>","signature":"<b64 signature>"}

"""
import json
import logging
from typing import Union

import josepy as jose

from jwecore import buffers
from jwecore import constants
from jwecore import errors
from jwecore import jwe as jwe_mod

logger = logging.getLogger(__name__)


def _export_public_key(key: jose.JWK) -> bytes:
    if key is None:
        raise errors.KeyExportFailed('No key')
    try:
        jobj = key.public_key().to_json()
        return json.dumps(jobj, separators=(',', ':')).encode('utf-8')
    except (jose.Error, AttributeError, TypeError, ValueError) as error:
        logger.debug(error, exc_info=True)
        raise errors.KeyExportFailed(str(error)) from error


def _render_protected(alg: jose.JWASignature, jwk_json: bytes,
                      nonce: Union[str, bytes]) -> memoryview:
    if isinstance(nonce, bytes):
        nonce = nonce.decode('ascii')
    writer = buffers.Writer(bytearray(constants.PACKET_HEADER_MAX), reserve=0)
    writer.write(b'{"alg":')
    writer.write(json.dumps(alg.name).encode('ascii'))
    writer.write(b',"jwk":')
    writer.write(jwk_json)
    writer.write(b',"nonce":')
    writer.write(json.dumps(nonce).encode('ascii'))
    writer.write(b'}')
    return writer.out[:writer.tell()]


def create_packet(jwe: jwe_mod.JWE, payload: bytes, nonce: Union[str, bytes],
                  out: buffers.Buffer) -> int:
    """Build a signed packet into ``out``.

    ``jwe.header.alg`` selects the JWS algorithm and ``jwe.key`` signs.
    The protected header is ``{"alg":..,"jwk":..,"nonce":..}`` with the
    public part of ``jwe.key`` as ``jwk``.

    .. note:: The ``header`` member repeats the Base64url payload instead
        of carrying an unprotected header. Existing peers expect exactly
        this layout.

    The signature covers ``b64(protected) || '.' || b64(payload)``, read
    back from ``out`` once written. Output is NUL terminated. On error
    the contents of ``out`` are undefined.

    :returns: Length of the packet, NUL not included.

    :raises .InvalidState: if no JWS ``alg`` is set
    :raises .KeyExportFailed: if the key is missing or cannot be exported
    :raises .CryptoFailure: if signing fails
    :raises .BufferTooSmall: if ``out`` (or the header scratch) is too small

    """
    alg = getattr(jwe.header, 'alg', None)
    if not isinstance(alg, jose.JWASignature):
        raise errors.InvalidState('Signed packet needs a JWS alg')
    protected = _render_protected(alg, _export_public_key(jwe.key), nonce)

    segments = jwe_mod.JWEMap()
    writer = buffers.Writer(out)
    writer.write(b'{"protected":"')
    segments.set(jwe_mod.Slot.JOSE, writer.write_b64(protected))
    writer.write(b'","payload":"')
    segments.set(jwe_mod.Slot.PYLD, writer.write_b64(payload))
    writer.write(b'","header":"')
    segments.set(jwe_mod.Slot.UHDR, writer.write_b64(payload))
    writer.write(b'","signature":"')

    signing_input = (bytes(segments[jwe_mod.Slot.JOSE]) + b'.' +
                     bytes(segments[jwe_mod.Slot.PYLD]))
    try:
        signature = alg.sign(jwe.key.key, signing_input)
    except (jose.Error, TypeError, ValueError) as error:
        logger.debug(error, exc_info=True)
        raise errors.CryptoFailure(str(error)) from error
    segments.set(jwe_mod.Slot.SIG, writer.write_b64(signature))
    writer.write(b'"}')
    length = writer.terminate()
    logger.debug('Signed packet of %d bytes with %s', length, alg.name)
    return length
