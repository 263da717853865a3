from .cipher import StreamCipher, key_schedule, keystream, xor_bytes
from .container import ContainerReader, aes_ecb_decrypt, read_image, unwrap_metadata, unwrap_session_key
from .main import build_output_path, cli, main, unbox
from .metadata import Metadata, artist_names
from .tags import read_tags, sniff_cover_mime, write_tags
from .version import __version__


def decode(path: str, output: str | None = None): return unbox(path, output)
def probe(path: str) -> Metadata:
    with open(path, "rb") as handle:
        return ContainerReader(handle).read_head().metadata


__all__ = [
    "ContainerReader",
    "Metadata",
    "StreamCipher",
    "__version__",
    "aes_ecb_decrypt",
    "artist_names",
    "build_output_path",
    "cli",
    "decode",
    "key_schedule",
    "keystream",
    "main",
    "probe",
    "read_image",
    "read_tags",
    "sniff_cover_mime",
    "unbox",
    "unwrap_metadata",
    "unwrap_session_key",
    "write_tags",
    "xor_bytes",
]
