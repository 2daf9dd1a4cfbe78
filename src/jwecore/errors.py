"""JWE errors."""
from typing import Any
from typing import Optional


class Error(Exception):
    """Generic JWE error."""


class InvalidState(Error):
    """Required header fields or keys are missing for the operation."""


class UnsupportedAlgorithmCombination(Error):
    """The ``alg``/``enc`` pair has no encrypt/decrypt pipeline.

    :ivar str alg: Name of the key management algorithm, or ``None``.
    :ivar str enc: Name of the content encryption algorithm, or ``None``.

    """

    def __init__(self, alg: Optional[str], enc: Optional[str], *args: Any) -> None:
        super().__init__(*args)
        self.alg = alg
        self.enc = enc

    def __str__(self) -> str:
        return 'Unsupported algorithm combination: {0} / {1}'.format(
            self.alg, self.enc)


class DecryptionFailed(Error):
    """Decryption failed.

    Raised for tag or HMAC mismatch as well as for key unwrap and
    agreement failures. The message is deliberately the same for all of
    them.

    """

    def __init__(self, *args: Any) -> None:
        super().__init__('Decryption failed', *args)

    def __str__(self) -> str:
        return 'Decryption failed'


class CryptoFailure(Error):
    """An underlying cryptographic primitive failed."""


class BufferTooSmall(Error):
    """Output does not fit in the destination buffer.

    :ivar int needed: Number of bytes the failed write required.
    :ivar int available: Number of bytes that were left.

    """

    def __init__(self, needed: int, available: int, *args: Any) -> None:
        super().__init__(*args)
        self.needed = needed
        self.available = available

    def __str__(self) -> str:
        return 'Buffer too small: {0} bytes needed, {1} available'.format(
            self.needed, self.available)


class MultiRecipientNotSupported(Error):
    """The requested form cannot represent more than one recipient."""


class KeyExportFailed(Error):
    """JWK could not be exported."""
