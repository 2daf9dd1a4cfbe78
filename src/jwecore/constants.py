"""jwecore constants."""

DEFAULT_SCRATCH_SIZE = 8192
"""Default size of a `.Scratch` arena."""

SCRATCH_OVERHEAD = 4096
"""Scratch needed on top of the payload length for one encrypt or
decrypt cycle: rendered header, encrypted key, IV, padding and tag."""

FLATTENED_HEADER_MAX = 3072
"""Largest JOSE header the Flattened JSON renderer accepts."""

PACKET_HEADER_MAX = 2048
"""Largest plaintext protected header of a signed packet. Holds the
exported public key (about 512 bytes for RSA 4096) and the nonce."""

CBC_IV_SIZE = 16
"""AES-CBC initialization vector size, in bytes."""

GCM_IV_SIZE = 12
"""AES-GCM initialization vector size, in bytes (RFC 7518 5.3)."""

GCM_TAG_SIZE = 16
"""AES-GCM authentication tag size, in bytes."""

NUL = b'\0'
"""Terminator written after rendered output, not counted in lengths."""

FLATTENED_MEMBERS = ('encrypted_key', 'aad', 'iv', 'ciphertext', 'tag')
"""Optional Flattened JSON members, in rendering order."""
