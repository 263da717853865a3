"""Format-wide constants of the NCM container.

All values here are fixed by the container format and identical for every
file; nothing in this module is derived per call.
"""

# Magic/version prefix. Only the first 8 bytes carry the tag; the rest is
# a version/gap field that is skipped.
HEADER_SIZE = 10
MAGIC = b"CTENFDAM"

# Key block: XOR mask, AES key, plaintext prefix (b"neteasecloudmusic")
KEY_XOR = 0x64
CODE_KEY = bytes([
    0x68, 0x7A, 0x48, 0x52, 0x41, 0x6D, 0x73, 0x6F,
    0x35, 0x6B, 0x49, 0x6E, 0x62, 0x61, 0x78, 0x57,
])
KEY_PREFIX_SIZE = 17

# Metadata block: XOR mask, AES key, obfuscated prefix
# (b"163 key(Don't modify):"), plaintext prefix (b"music:"), trailer
META_XOR = 0x63
META_KEY = bytes([
    0x23, 0x31, 0x34, 0x6C, 0x6A, 0x6B, 0x5F, 0x21,
    0x5C, 0x5D, 0x26, 0x30, 0x55, 0x3C, 0x27, 0x28,
])
META_PREFIX_SIZE = 22
META_PLAIN_PREFIX_SIZE = 6
META_TRAILER_SIZE = 9

LENGTH_FIELD_SIZE = 4
AES_BLOCK_BITS = 128

# Audio body is read and decrypted in chunks of this size. The keystream
# restarts at every chunk boundary, so this is part of the format.
AUDIO_CHUNK_SIZE = 0x8000

TABLE_SIZE = 256

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
MIME_PNG = "image/png"
MIME_JPEG = "image/jpeg"

# Byte count above which keystream XOR goes through numpy.
FAST_MIN_DEFAULT = 4096
