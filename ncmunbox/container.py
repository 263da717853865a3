"""Sequential reader for the NCM container.

Layout, all lengths little-endian u32::

    header[10] | key_len key[key_len] | meta_len meta[meta_len] trailer[9]
    | image_len image[image_len] | audio...

The reader walks these regions once, top to bottom.
"""

import base64
import binascii
import os as _os_module
import struct
import typing
import warnings

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from . import constants
from .cipher import StreamCipher, xor_bytes
from .metadata import Metadata

_LENGTH_STRUCT = struct.Struct("<I")


def read_exact(source: "typing.BinaryIO", size: int, label: str) -> bytes:
    data = source.read(size) if size else b""
    if len(data) != size:
        raise EOFError(f"Truncated {label}: expected {size} bytes, got {len(data)}")
    return data


def read_length(source: "typing.BinaryIO", label: str) -> int:
    return _LENGTH_STRUCT.unpack(read_exact(source, constants.LENGTH_FIELD_SIZE, f"{label} length"))[0]


def read_block(source: "typing.BinaryIO", label: str) -> bytes:
    """Read one length-prefixed block. The length field is trusted as-is."""
    size = read_length(source, label)
    return read_exact(source, size, f"{label} block")


def aes_ecb_decrypt(ciphertext: bytes, key: bytes, label: str = "ciphertext") -> bytes:
    if len(ciphertext) % (constants.AES_BLOCK_BITS // 8):
        raise ValueError(
            f"{label} decryption failed: length {len(ciphertext)} is not a multiple of the AES block size"
        )
    decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(constants.AES_BLOCK_BITS).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise ValueError(f"{label} decryption failed: invalid PKCS7 padding") from exc


def _strict_magic() -> bool:
    return _os_module.getenv("NCMUNBOX_STRICT_MAGIC") == "1"


def skip_header(source: "typing.BinaryIO") -> bytes:
    header = read_exact(source, constants.HEADER_SIZE, "header")
    if not header.startswith(constants.MAGIC):
        message = f"Unexpected container magic {header[:len(constants.MAGIC)]!r}"
        if _strict_magic():
            raise ValueError(message)
        warnings.warn(message, RuntimeWarning, stacklevel=2)
    return header


def unwrap_session_key(block: bytes) -> bytes:
    """Recover the per-file stream cipher key from the raw key block."""
    plain = aes_ecb_decrypt(xor_bytes(block, constants.KEY_XOR), constants.CODE_KEY, "Key block")
    if len(plain) <= constants.KEY_PREFIX_SIZE:
        raise ValueError("Key block decrypted to an empty session key")
    return plain[constants.KEY_PREFIX_SIZE:]


def unwrap_metadata(block: bytes) -> Metadata:
    """Recover the metadata record from the raw metadata block."""
    decoded = xor_bytes(block, constants.META_XOR)
    if len(decoded) < constants.META_PREFIX_SIZE:
        raise ValueError(f"Metadata block too short ({len(decoded)} bytes)")
    try:
        encrypted = base64.b64decode(decoded[constants.META_PREFIX_SIZE:], validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Malformed metadata base64: {exc}") from exc
    plain = aes_ecb_decrypt(encrypted, constants.META_KEY, "Metadata block")
    if len(plain) < constants.META_PLAIN_PREFIX_SIZE:
        raise ValueError("Metadata block decrypted to a truncated record")
    try:
        text = plain[constants.META_PLAIN_PREFIX_SIZE:].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"Metadata record is not UTF-8: {exc}") from exc
    return Metadata.from_json(text)


def read_image(source: "typing.BinaryIO") -> bytes:
    """Read the cover-art block. Stored unencrypted."""
    image = read_block(source, "image")
    if not image:
        warnings.warn("Container has an empty cover image", RuntimeWarning, stacklevel=2)
    return image


class ContainerReader:
    """One pass over a container: header, key, metadata, image, then audio.

    The caller owns ``source`` and closes it.
    """

    def __init__(self, source: "typing.BinaryIO") -> None:
        self._source = source
        self.header: "typing.Optional[bytes]" = None
        self.session_key: "typing.Optional[bytes]" = None
        self.metadata: "typing.Optional[Metadata]" = None
        self.image: "typing.Optional[bytes]" = None
        self._audio_read = False

    def read_head(self) -> "ContainerReader":
        """Read every region ahead of the audio body, strictly in order."""
        if self.image is not None:
            return self
        self.header = skip_header(self._source)
        self.session_key = unwrap_session_key(read_block(self._source, "key"))
        meta_block = read_block(self._source, "metadata")
        read_exact(self._source, constants.META_TRAILER_SIZE, "metadata trailer")
        self.metadata = unwrap_metadata(meta_block)
        self.image = read_image(self._source)
        return self

    def decrypt_audio(
        self,
        dest: "typing.BinaryIO",
        chunk_size: int = constants.AUDIO_CHUNK_SIZE,
    ) -> int:
        """Stream the decrypted audio body into ``dest``."""
        if self._audio_read:
            raise RuntimeError("Audio body already consumed")
        self.read_head()
        self._audio_read = True
        return StreamCipher(self.session_key).decrypt_stream(self._source, dest, chunk_size)
