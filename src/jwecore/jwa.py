"""JSON Web Algorithms for encryption.

https://datatracker.ietf.org/doc/html/rfc7518#section-4 (``alg``) and
https://datatracker.ietf.org/doc/html/rfc7518#section-5 (``enc``).

"""
import abc
from collections.abc import Hashable
import enum
import logging
import os
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple

import cryptography.exceptions
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives import keywrap
from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
import josepy as jose

from jwecore import constants
from jwecore import errors
from jwecore import util

logger = logging.getLogger(__name__)


class KeyManagementType(enum.Enum):
    """Key management type tag of an ``alg``."""
    RSA_PKCS1_1_5 = 'RSA-PKCS1v1.5'
    RSA_OAEP = 'RSA-OAEP'
    AES_KW = 'AES-ECB-keywrap'
    ECDH_ES = 'ECDH-ES'


class ContentEncryptionType(enum.Enum):
    """Content encryption type tag of an ``enc``."""
    AES_CBC_HMAC = 'AES-CBC-HMAC'
    AES_GCM = 'AES-GCM'


def _unwrapped(key: Any) -> Any:
    """Get the `cryptography` key out of a josepy comparable wrapper."""
    # pylint: disable=protected-access
    return getattr(key, '_wrapped', key)


class JWA(jose.JSONDeSerializable):  # pylint: disable=abstract-method
    """JSON Web Algorithm used for encryption."""

    def __init__(self, name: str, key_bits: int) -> None:
        self.name = name
        self.key_bits = key_bits

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JWA):
            return NotImplemented
        return (self.__class__, self.name) == (other.__class__, other.name)

    def __hash__(self) -> int:
        return hash((self.__class__, self.name))

    def to_partial_json(self) -> Any:
        return self.name

    def __repr__(self) -> str:
        return self.name


class JWAKeyManagement(JWA, Hashable):
    """Key management algorithm (``alg``).

    :ivar int key_bits: Size of the AES key wrapping key in bits, ``0``
        for algorithms that do not wrap with AES.

    """
    ALGORITHMS: Dict[str, 'JWAKeyManagement'] = {}
    kind: KeyManagementType

    @classmethod
    def register(cls, alg: 'JWAKeyManagement') -> 'JWAKeyManagement':
        """Register algorithm for JSON deserialization."""
        cls.ALGORITHMS[alg.name] = alg
        return alg

    @classmethod
    def from_json(cls, jobj: Any) -> 'JWAKeyManagement':
        try:
            return cls.ALGORITHMS[jobj]
        except (KeyError, TypeError):
            raise jose.DeserializationError(
                'Unknown key management algorithm: {0!r}'.format(jobj))

    @property
    def wraps(self) -> bool:
        """Does the algorithm produce a JWE Encrypted Key?"""
        return self.kind is not KeyManagementType.ECDH_ES or self.key_bits > 0

    @abc.abstractmethod
    def wrap(self, key: jose.JWK, cek: bytes) -> bytes:  # pragma: no cover
        """Encrypt ``cek`` for ``key``.

        :raises .CryptoFailure: if the primitive fails

        """
        raise NotImplementedError()

    @abc.abstractmethod
    def unwrap(self, key: jose.JWK, ekey: bytes,
               cek_size: int) -> bytes:  # pragma: no cover
        """Recover a ``cek_size`` bytes long CEK from ``ekey``.

        :raises .DecryptionFailed: if the key cannot be recovered

        """
        raise NotImplementedError()


class _JWARSA(JWAKeyManagement):

    def __init__(self, name: str, kind: KeyManagementType,
                 pad: padding.AsymmetricPadding) -> None:
        super().__init__(name, key_bits=0)
        self.kind = kind
        self.padding = pad

    @classmethod
    def _rsa_key(cls, key: jose.JWK) -> Any:
        if not isinstance(key, jose.JWKRSA):
            raise errors.InvalidState('RSA key required, got {0}'.format(
                type(key).__name__))
        return _unwrapped(key.key)

    def wrap(self, key: jose.JWK, cek: bytes) -> bytes:
        rsa_key = self._rsa_key(key)
        if isinstance(rsa_key, rsa.RSAPrivateKey):
            rsa_key = rsa_key.public_key()
        try:
            return rsa_key.encrypt(cek, self.padding)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.CryptoFailure(str(error)) from error

    def unwrap(self, key: jose.JWK, ekey: bytes, cek_size: int) -> bytes:
        try:
            rsa_key = self._rsa_key(key)
        except errors.InvalidState as error:
            logger.debug(error)
            raise errors.DecryptionFailed() from error
        if not isinstance(rsa_key, rsa.RSAPrivateKey):
            logger.debug('Public RSA key cannot unwrap')
            raise errors.DecryptionFailed()
        try:
            cek = rsa_key.decrypt(ekey, self.padding)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.DecryptionFailed() from error
        if len(cek) != cek_size:
            raise errors.DecryptionFailed()
        return cek


class _JWARSA15(_JWARSA):

    def unwrap(self, key: jose.JWK, ekey: bytes, cek_size: int) -> bytes:
        # RFC 3218 2.3.2 random filling: a bad PKCS#1 v1.5 block yields a
        # random CEK and fails later at the tag check
        cek = os.urandom(cek_size)
        try:
            candidate = super().unwrap(key, ekey, cek_size)
        except errors.DecryptionFailed:
            return cek
        return candidate


class _JWAAESKW(JWAKeyManagement):

    kind = KeyManagementType.AES_KW

    def _kek(self, key: jose.JWK) -> bytes:
        if not isinstance(key, jose.JWKOct):
            raise errors.InvalidState('Symmetric key required, got {0}'.format(
                type(key).__name__))
        if len(key.key) * 8 != self.key_bits:
            raise errors.InvalidState('{0} needs a {1} bit key'.format(
                self.name, self.key_bits))
        return key.key

    def wrap(self, key: jose.JWK, cek: bytes) -> bytes:
        return self.wrap_with(self._kek(key), cek)

    def unwrap(self, key: jose.JWK, ekey: bytes, cek_size: int) -> bytes:
        try:
            kek = self._kek(key)
        except errors.InvalidState as error:
            logger.debug(error)
            raise errors.DecryptionFailed() from error
        return self.unwrap_with(kek, ekey, cek_size)

    @classmethod
    def wrap_with(cls, kek: bytes, cek: bytes) -> bytes:
        """AES key wrap ``cek`` with raw ``kek``."""
        try:
            return keywrap.aes_key_wrap(kek, cek)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.CryptoFailure(str(error)) from error

    @classmethod
    def unwrap_with(cls, kek: bytes, ekey: bytes, cek_size: int) -> bytes:
        """AES key unwrap ``ekey`` with raw ``kek``."""
        try:
            cek = keywrap.aes_key_unwrap(kek, ekey)
        except (keywrap.InvalidUnwrap, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.DecryptionFailed() from error
        if len(cek) != cek_size:
            raise errors.DecryptionFailed()
        return cek


class _JWAECDHES(JWAKeyManagement):
    """ECDH-ES, direct (``key_bits == 0``) or with AES key wrap.

    Key agreement needs the Concat KDF and therefore the whole header,
    so it lives in :mod:`jwecore.jwe`. This class only provides the
    elliptic curve operations and the AES key wrap step.

    """
    kind = KeyManagementType.ECDH_ES

    @classmethod
    def ec_key(cls, key: Optional[jose.JWK]) -> Any:
        """Get the `cryptography` EC key out of a JWK."""
        if not isinstance(key, jose.JWKEC):
            raise errors.InvalidState('EC key required, got {0}'.format(
                type(key).__name__))
        return _unwrapped(key.key)

    @classmethod
    def ephemeral(cls, key: jose.JWK) -> ec.EllipticCurvePrivateKey:
        """Generate an ephemeral key on the curve of ``key``."""
        return ec.generate_private_key(cls.ec_key(key).curve)

    @classmethod
    def exchange(cls, private: ec.EllipticCurvePrivateKey,
                 public: ec.EllipticCurvePublicKey) -> bytes:
        """Compute the ECDH shared secret Z."""
        if private.curve.name != public.curve.name:
            raise ValueError('Curve mismatch: {0} / {1}'.format(
                private.curve.name, public.curve.name))
        return private.exchange(ec.ECDH(), public)

    def wrap(self, key: jose.JWK, cek: bytes) -> bytes:
        return _JWAAESKW.wrap_with(key.key, cek)

    def unwrap(self, key: jose.JWK, ekey: bytes, cek_size: int) -> bytes:
        return _JWAAESKW.unwrap_with(key.key, ekey, cek_size)


class JWAContentEncryption(JWA, Hashable):
    """Content encryption algorithm (``enc``).

    :ivar int key_bits: Size of the CEK in bits.
    :ivar hmac_hash: HMAC hash of AES-CBC-HMAC algorithms, else ``None``.

    """
    ENCRYPTIONS: Dict[str, 'JWAContentEncryption'] = {}
    kind: ContentEncryptionType
    hmac_hash: Optional[hashes.HashAlgorithm] = None

    @classmethod
    def register(cls, enc: 'JWAContentEncryption') -> 'JWAContentEncryption':
        """Register algorithm for JSON deserialization."""
        cls.ENCRYPTIONS[enc.name] = enc
        return enc

    @classmethod
    def from_json(cls, jobj: Any) -> 'JWAContentEncryption':
        try:
            return cls.ENCRYPTIONS[jobj]
        except (KeyError, TypeError):
            raise jose.DeserializationError(
                'Unknown content encryption algorithm: {0!r}'.format(jobj))

    @property
    def cek_size(self) -> int:
        """CEK size in bytes."""
        return self.key_bits // 8

    @abc.abstractmethod
    def encrypt(self, cek: bytes, aad: bytes,
                plaintext: bytes) -> Tuple[bytes, bytes, bytes]:  # pragma: no cover
        """Encrypt and authenticate.

        :returns: ``(iv, ciphertext, tag)``
        :raises .CryptoFailure: if the primitive fails

        """
        raise NotImplementedError()

    @abc.abstractmethod
    def decrypt(self, cek: bytes, aad: bytes, iv: bytes, ciphertext: bytes,
                tag: bytes) -> bytes:  # pragma: no cover
        """Verify and decrypt.

        :raises .DecryptionFailed: on any authentication failure

        """
        raise NotImplementedError()


class _JWAAESCBCHS(JWAContentEncryption):
    """AES_CBC_HMAC_SHA2 (RFC 7518 5.2)."""

    kind = ContentEncryptionType.AES_CBC_HMAC

    def __init__(self, name: str, key_bits: int, hash_: Any) -> None:
        super().__init__(name, key_bits)
        self.hmac_hash = hash_()

    def _split(self, cek: bytes) -> Tuple[bytes, bytes]:
        if len(cek) != self.cek_size:
            raise ValueError('{0} needs a {1} byte CEK'.format(
                self.name, self.cek_size))
        half = self.cek_size // 2
        return cek[:half], cek[half:]

    def _mac(self, mac_key: bytes, aad: bytes, iv: bytes,
             ciphertext: bytes) -> bytes:
        signer = hmac.HMAC(mac_key, self.hmac_hash)
        signer.update(aad)
        signer.update(iv)
        signer.update(ciphertext)
        signer.update(util.be64(len(aad) * 8))
        return signer.finalize()[:len(mac_key)]

    def encrypt(self, cek: bytes, aad: bytes,
                plaintext: bytes) -> Tuple[bytes, bytes, bytes]:
        try:
            mac_key, enc_key = self._split(cek)
            iv = os.urandom(constants.CBC_IV_SIZE)
            padder = sym_padding.PKCS7(algorithms.AES.block_size).padder()
            padded = padder.update(plaintext) + padder.finalize()
            encryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.CryptoFailure(str(error)) from error
        return iv, ciphertext, self._mac(mac_key, aad, iv, ciphertext)

    def decrypt(self, cek: bytes, aad: bytes, iv: bytes, ciphertext: bytes,
                tag: bytes) -> bytes:
        try:
            mac_key, enc_key = self._split(cek)
            if not constant_time.bytes_eq(
                    tag, self._mac(mac_key, aad, iv, ciphertext)):
                raise cryptography.exceptions.InvalidSignature('MAC mismatch')
            decryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = sym_padding.PKCS7(algorithms.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except (cryptography.exceptions.InvalidSignature, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.DecryptionFailed() from error


class _JWAAESGCM(JWAContentEncryption):
    """AES GCM (RFC 7518 5.3)."""

    kind = ContentEncryptionType.AES_GCM

    def encrypt(self, cek: bytes, aad: bytes,
                plaintext: bytes) -> Tuple[bytes, bytes, bytes]:
        iv = os.urandom(constants.GCM_IV_SIZE)
        try:
            sealed = AESGCM(cek).encrypt(iv, plaintext, aad)
        except (ValueError, OverflowError) as error:
            logger.debug(error, exc_info=True)
            raise errors.CryptoFailure(str(error)) from error
        split = len(sealed) - constants.GCM_TAG_SIZE
        return iv, sealed[:split], sealed[split:]

    def decrypt(self, cek: bytes, aad: bytes, iv: bytes, ciphertext: bytes,
                tag: bytes) -> bytes:
        if len(tag) != constants.GCM_TAG_SIZE:
            raise errors.DecryptionFailed()
        try:
            return AESGCM(cek).decrypt(iv, ciphertext + tag, aad)
        except (cryptography.exceptions.InvalidTag, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.DecryptionFailed() from error


RSA1_5 = JWAKeyManagement.register(_JWARSA15(
    'RSA1_5', KeyManagementType.RSA_PKCS1_1_5, padding.PKCS1v15()))
RSA_OAEP = JWAKeyManagement.register(_JWARSA(
    'RSA-OAEP', KeyManagementType.RSA_OAEP, padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA1()),
        algorithm=hashes.SHA1(), label=None)))
RSA_OAEP_256 = JWAKeyManagement.register(_JWARSA(
    'RSA-OAEP-256', KeyManagementType.RSA_OAEP, padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(), label=None)))

A128KW = JWAKeyManagement.register(_JWAAESKW('A128KW', 128))
A192KW = JWAKeyManagement.register(_JWAAESKW('A192KW', 192))
A256KW = JWAKeyManagement.register(_JWAAESKW('A256KW', 256))

ECDH_ES = JWAKeyManagement.register(_JWAECDHES('ECDH-ES', 0))
ECDH_ES_A128KW = JWAKeyManagement.register(_JWAECDHES('ECDH-ES+A128KW', 128))
ECDH_ES_A192KW = JWAKeyManagement.register(_JWAECDHES('ECDH-ES+A192KW', 192))
ECDH_ES_A256KW = JWAKeyManagement.register(_JWAECDHES('ECDH-ES+A256KW', 256))

A128CBC_HS256 = JWAContentEncryption.register(
    _JWAAESCBCHS('A128CBC-HS256', 256, hashes.SHA256))
A192CBC_HS384 = JWAContentEncryption.register(
    _JWAAESCBCHS('A192CBC-HS384', 384, hashes.SHA384))
A256CBC_HS512 = JWAContentEncryption.register(
    _JWAAESCBCHS('A256CBC-HS512', 512, hashes.SHA512))

A128GCM = JWAContentEncryption.register(_JWAAESGCM('A128GCM', 128))
A192GCM = JWAContentEncryption.register(_JWAAESGCM('A192GCM', 192))
A256GCM = JWAContentEncryption.register(_JWAAESGCM('A256GCM', 256))
