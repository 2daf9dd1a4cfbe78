"""JWE JOSE Header.

The JWE flavour of :class:`josepy.Header`: ``alg`` names a key
management algorithm, ``enc`` and the key agreement parameters are
added. Compression (``zip``) and extensions (``crit``) are rejected.

"""
import json
import logging
from typing import Any
from typing import Optional

import josepy as jose

from jwecore import jwa

logger = logging.getLogger(__name__)


def _decode_b64(value: Any) -> bytes:
    if not isinstance(value, str):
        raise jose.DeserializationError(
            'Expected a Base64url string, got {0!r}'.format(value))
    return jose.decode_b64jose(value)


class Header(jose.JSONObjectWithFields):
    """JWE JOSE Header (RFC 7516 4.1).

    :ivar alg: `.JWAKeyManagement`, or `josepy.JWASignature` when the
        header protects a signed packet.
    :ivar enc: `.JWAContentEncryption`.
    :ivar epk: Ephemeral public key (`josepy.JWKEC`) for ECDH-ES.
    :ivar bytes apu: Decoded Agreement PartyUInfo.
    :ivar bytes apv: Decoded Agreement PartyVInfo.

    """
    alg: Any = jose.field('alg', omitempty=True)
    enc: Optional[jwa.JWAContentEncryption] = jose.field(
        'enc', decoder=jwa.JWAContentEncryption.from_json, omitempty=True)
    zip: Optional[str] = jose.field('zip', omitempty=True)
    jku: Optional[str] = jose.field('jku', omitempty=True)
    jwk: Optional[jose.JWK] = jose.field(
        'jwk', decoder=jose.JWK.from_json, omitempty=True)
    kid: Optional[str] = jose.field('kid', omitempty=True)
    x5u: Optional[str] = jose.field('x5u', omitempty=True)
    x5t: Optional[bytes] = jose.field(
        'x5t', decoder=_decode_b64, encoder=jose.encode_b64jose,
        omitempty=True)
    typ: Optional[str] = jose.field('typ', omitempty=True)
    cty: Optional[str] = jose.field('cty', omitempty=True)
    epk: Optional[jose.JWK] = jose.field(
        'epk', decoder=jose.JWK.from_json, omitempty=True)
    apu: bytes = jose.field('apu', omitempty=True, default=b'',
                            decoder=_decode_b64,
                            encoder=jose.encode_b64jose)
    apv: bytes = jose.field('apv', omitempty=True, default=b'',
                            decoder=_decode_b64,
                            encoder=jose.encode_b64jose)
    crit: Any = jose.field('crit', omitempty=True, default=())

    @alg.decoder  # type: ignore[no-redef,attr-defined,union-attr]
    def alg(value: Any) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        try:
            return jwa.JWAKeyManagement.from_json(value)
        except jose.DeserializationError:
            pass
        try:
            return jose.JWASignature.from_json(value)
        except (KeyError, TypeError):
            raise jose.DeserializationError('Unknown algorithm: {0!r}'.format(value))

    @zip.decoder  # type: ignore[no-redef,attr-defined,union-attr]
    def zip(unused_value: Any) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring,redefined-builtin
        raise jose.DeserializationError('"zip" is not supported')

    @crit.decoder  # type: ignore[no-redef,attr-defined,union-attr]
    def crit(unused_value: Any) -> Any:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        raise jose.DeserializationError('"crit" is not supported')

    def render(self) -> bytes:
        """Compact UTF-8 JSON rendering, fields in declaration order."""
        return self.json_dumps(separators=(',', ':')).encode('utf-8')

    @classmethod
    def parse(cls, raw: Any, temp: Any) -> 'Header':
        """Parse header JSON.

        The scratch arena ``temp`` is charged for the decoded ``apu``
        and ``apv``. The charge is accounting only: the header keeps
        its own ``bytes`` copies, and the stored views are not read.

        :param raw: Header JSON (bytes-like).
        :param .Scratch temp: Scratch arena.

        :raises josepy.errors.DeserializationError: on malformed input
        :raises .BufferTooSmall: if ``temp`` is exhausted

        """
        try:
            jobj = json.loads(bytes(raw).decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as error:
            raise jose.DeserializationError(error)
        if not isinstance(jobj, dict):
            raise jose.DeserializationError('JOSE header must be a JSON object')
        header = cls.from_json(jobj)
        for value in (header.apu, header.apv):
            temp.store(value)
        logger.debug('Parsed JOSE header: alg=%s enc=%s', header.alg, header.enc)
        return header
