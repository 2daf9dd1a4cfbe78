"""JWE utilities."""
import struct


def be32(value: int) -> bytes:
    """Encode ``value`` as a 32-bit big-endian unsigned integer.

    :raises ValueError: if ``value`` does not fit

    """
    try:
        return struct.pack('>I', value)
    except struct.error as error:
        raise ValueError(error)


def be64(value: int) -> bytes:
    """Encode ``value`` as a 64-bit big-endian unsigned integer.

    :raises ValueError: if ``value`` does not fit

    """
    try:
        return struct.pack('>Q', value)
    except struct.error as error:
        raise ValueError(error)


def b64_length(size: int) -> int:
    """Length of the JOSE Base64 (unpadded) encoding of ``size`` bytes."""
    return (4 * size + 2) // 3
