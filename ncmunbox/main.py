import os as _os_module
import pathlib
import sys as _sys_module
import typing
import warnings as _warnings_module

from .container import ContainerReader
from .metadata import Metadata
from .tags import read_tags, sniff_cover_mime, write_tags


def check_paths(input_path, output_dir) -> "typing.Tuple[pathlib.Path, pathlib.Path]":
    """Validate input/output before any I/O and create the output directory."""
    src = pathlib.Path(input_path)
    dst = pathlib.Path(output_dir)
    if not src.exists():
        raise FileNotFoundError(f"input: {src} does not exist")
    if src.is_dir():
        raise IsADirectoryError(f"input: {src} is a directory")
    if dst.exists() and not dst.is_dir():
        raise NotADirectoryError(f"output: {dst} is a file")
    dst.mkdir(parents=True, exist_ok=True)
    return src, dst


def _safe_name(part: str) -> str:
    for sep in {"/", _os_module.sep, _os_module.altsep}:
        if sep:
            part = part.replace(sep, "_")
    return part


def build_output_path(output_dir, meta: Metadata) -> pathlib.Path:
    # Separators in any name part would escape output_dir.
    name = f"{_safe_name(meta.music_name)} - {_safe_name(meta.joined_artists)}.{_safe_name(meta.format)}"
    return pathlib.Path(output_dir) / name


def embed_tags(path: pathlib.Path, meta: Metadata, image: bytes) -> pathlib.Path:
    handle = read_tags(path)
    handle.set_title(meta.music_name)
    handle.set_album(meta.album)
    for name in meta.artist_names:
        handle.add_artist(name)
    handle.set_cover(image, sniff_cover_mime(image))
    return write_tags(handle, path)


def unbox(input_path, output_dir=None) -> pathlib.Path:
    """Decode one container into ``output_dir`` and tag the result.

    ``output_dir`` defaults to the input's parent directory. Returns the
    path of the written audio file. A failure after the audio body is
    written leaves the file in place.
    """
    if output_dir is None:
        output_dir = pathlib.Path(input_path).parent
    src, dst = check_paths(input_path, output_dir)
    with open(src, "rb") as source:
        reader = ContainerReader(source).read_head()
        target = build_output_path(dst, reader.metadata)
        with open(target, "wb") as sink:
            reader.decrypt_audio(sink)
    embed_tags(target, reader.metadata, reader.image)
    return target


def _with_warnings_to_stderr(fn, *args, **kwargs):
    with _warnings_module.catch_warnings(record=True) as caught:
        _warnings_module.simplefilter("always", RuntimeWarning)
        try:
            return fn(*args, **kwargs)
        finally:
            for item in caught:
                msg = str(item.message).strip()
                if msg:
                    print(f"⚠ {msg}", file=_sys_module.stderr)


def _cli_plain_mode() -> bool:
    if _os_module.getenv("NCMUNBOX_CLI_PLAIN"):
        return True
    if _os_module.getenv("NO_COLOR"):
        return True
    style = (_os_module.getenv("NCMUNBOX_CLI_STYLE") or "").strip().lower()
    if style in {"plain", "0", "false", "off"}:
        return True
    if style in {"color", "emoji", "on"}:
        return False
    return not _sys_module.stdout.isatty()


class _CliTheme:
    def __init__(self, plain: bool):
        self.plain = plain
        self.reset = "" if plain else "\033[0m"
        self.bold = "" if plain else "\033[1m"
        self.red = "" if plain else "\033[31m"
        self.green = "" if plain else "\033[32m"

    def _wrap(self, msg: str, color: str, emoji: "str | None" = None) -> str:
        if self.plain:
            return msg
        prefix = f"{emoji} " if emoji else ""
        return f"{self.bold}{color}{prefix}{msg}{self.reset}"

    def ok(self, msg: str) -> str:
        return self._wrap(msg, self.green, "✅")

    def err(self, msg: str) -> str:
        return self._wrap(msg, self.red, "❌")


def cli(argv=None) -> int:
    import argparse

    theme = _CliTheme(_cli_plain_mode())

    parser = argparse.ArgumentParser(prog="ncmunbox", description="Decode NCM containers into tagged audio files")
    subparsers = parser.add_subparsers(dest="command", required=True)

    unboxing = subparsers.add_parser(
        "unboxing",
        help="Decrypt one container and embed its title, album, artists and cover"
    )
    unboxing.add_argument("input", help="Input container path")
    unboxing.add_argument(
        "output",
        nargs="?",
        default=None,
        help="Output directory (defaults to the input's directory)"
    )

    args = parser.parse_args(argv)

    if args.command == "unboxing":
        try:
            out_path = _with_warnings_to_stderr(unbox, args.input, args.output)
        except Exception as exc:
            print(theme.err(f"Error: {exc}"), file=_sys_module.stderr)
            return 1
        print(theme.ok(f"Wrote {out_path}"))
        return 0

    return 0


def main(argv=None) -> int:
    try:
        return cli(argv)
    except KeyboardInterrupt:
        print("Exiting...")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
