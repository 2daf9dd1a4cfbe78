"""Concat KDF (NIST SP 800-56A 5.8.1) as profiled by RFC 7518 4.6.2."""
import logging
from typing import Any

from cryptography.hazmat.primitives import hashes

from jwecore import errors
from jwecore import jwa
from jwecore import util

logger = logging.getLogger(__name__)


def keydatalen(header: Any, direct: bool) -> int:
    """Number of key bits the KDF has to produce.

    :param header: Parsed `.Header`.
    :param bool direct: ``True`` if the derived key is the CEK itself,
        ``False`` if it wraps the CEK.

    :raises .InvalidState: if ``alg`` or ``enc`` is missing

    """
    alg = getattr(header, 'alg', None)
    enc = getattr(header, 'enc', None)
    if not isinstance(alg, jwa.JWAKeyManagement) or enc is None:
        raise errors.InvalidState('alg and enc are required for key derivation')
    bits = enc.key_bits if direct else alg.key_bits
    if not bits:
        raise errors.InvalidState('{0} has no key wrap size'.format(alg.name))
    return bits


def concat_kdf(header: Any, direct: bool, shared_secret: bytes) -> bytes:
    """Derive key material from an agreed ``shared_secret``.

    AlgorithmID is the ``enc`` name for direct key agreement and the
    ``alg`` name otherwise. PartyUInfo and PartyVInfo are the decoded
    ``apu`` and ``apv`` header parameters.

    :returns: ``keydatalen(header, direct) // 8`` bytes.

    :raises .InvalidState: if ``alg`` or ``enc`` is missing
    :raises .CryptoFailure: if hashing fails

    """
    bits = keydatalen(header, direct)
    algorithm_id = (header.enc.name if direct else header.alg.name).encode('ascii')
    other_info = b''.join((
        util.be32(len(algorithm_id)), algorithm_id,
        util.be32(len(header.apu)), bytes(header.apu),
        util.be32(len(header.apv)), bytes(header.apv),
        util.be32(bits),
    ))

    output = b''
    counter = 1
    while len(output) * 8 < bits:
        try:
            digest = hashes.Hash(hashes.SHA256())
            digest.update(util.be32(counter))
            digest.update(shared_secret)
            digest.update(other_info)
            output += digest.finalize()
        except (TypeError, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.CryptoFailure(str(error)) from error
        counter += 1

    logger.debug('Derived %d key bits in %d rounds for %s',
                 bits, counter - 1, algorithm_id.decode('ascii'))
    return output[:bits // 8]
