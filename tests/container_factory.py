"""Builders for synthetic NCM containers used by the test-suite and scripts."""

import base64
import json

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ncmunbox import constants
from ncmunbox.cipher import StreamCipher, xor_bytes

KEY_PREFIX = b"neteasecloudmusic"
META_PREFIX = b"163 key(Don't modify):"
META_PLAIN_PREFIX = b"music:"
SESSION_KEY = b"0123456789abcdefghijklmnopqrstuvwxyzE7fT49x7dof9OKCgg9cdvhEuezy3iZCL1nFvBFd1T4uSktAJKmwZXsijPbijliionVUXXg9plTbXEclAE9Lb"


def aes_ecb_encrypt(plain: bytes, key: bytes) -> bytes:
    padder = padding.PKCS7(constants.AES_BLOCK_BITS).padder()
    padded = padder.update(plain) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def key_block(session_key: bytes = SESSION_KEY, prefix: bytes = KEY_PREFIX) -> bytes:
    return xor_bytes(aes_ecb_encrypt(prefix + session_key, constants.CODE_KEY), constants.KEY_XOR)


def meta_block(record) -> bytes:
    text = record if isinstance(record, str) else json.dumps(record, ensure_ascii=False)
    encrypted = aes_ecb_encrypt(META_PLAIN_PREFIX + text.encode("utf-8"), constants.META_KEY)
    return xor_bytes(META_PREFIX + base64.b64encode(encrypted), constants.META_XOR)


def length_prefixed(block: bytes) -> bytes:
    return len(block).to_bytes(constants.LENGTH_FIELD_SIZE, "little") + block


def encrypt_audio(plain: bytes, session_key: bytes = SESSION_KEY) -> bytes:
    cipher = StreamCipher(session_key)
    step = constants.AUDIO_CHUNK_SIZE
    return b"".join(cipher.encrypt_chunk(plain[i:i + step]) for i in range(0, len(plain), step))


def build_container(
    record,
    audio: bytes,
    image: bytes = constants.PNG_SIGNATURE,
    session_key: bytes = SESSION_KEY,
    header: bytes = constants.MAGIC + b"\x01\x70",
) -> bytes:
    return b"".join([
        header,
        length_prefixed(key_block(session_key)),
        length_prefixed(meta_block(record)),
        bytes(constants.META_TRAILER_SIZE),
        length_prefixed(image),
        encrypt_audio(audio, session_key),
    ])


def sample_record(**overrides) -> dict:
    record = {
        "format": "mp3",
        "musicName": "Song",
        "artist": [["Artist", 1]],
        "album": "Album",
    }
    record.update(overrides)
    return record


def sample_audio(size: int = 70000) -> bytes:
    # No b"TAG" run anywhere, so mutagen never mistakes the tail for ID3v1.
    return bytes((i * 7) % 251 for i in range(size))


def minimal_flac(frames: bytes = b"\xff\xf8\x69\x08" + bytes(60)) -> bytes:
    """fLaC marker, a 44.1 kHz/16-bit stereo STREAMINFO block, then ``frames``."""
    streaminfo = (
        (4096).to_bytes(2, "big") * 2
        + bytes(6)
        + bytes([0x0A, 0xC4, 0x42, 0xF0])
        + bytes(4)
        + bytes(16)
    )
    return b"fLaC" + bytes([0x80]) + len(streaminfo).to_bytes(3, "big") + streaminfo + frames
