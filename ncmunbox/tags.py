"""Tag writing for the decoded audio file, backed by mutagen."""

import pathlib
import typing

from mutagen import MutagenError
from mutagen.flac import FLAC, Picture
from mutagen.id3 import APIC, ID3, ID3NoHeaderError, PictureType, TALB, TIT2, TPE1

from . import constants


def sniff_cover_mime(image: bytes) -> str:
    if image[:len(constants.PNG_SIGNATURE)] == constants.PNG_SIGNATURE:
        return constants.MIME_PNG
    return constants.MIME_JPEG


class TagHandle:
    """Pending tag values for one audio file plus the mutagen object to write them with."""

    def __init__(self, path: pathlib.Path, kind: str, tags) -> None:
        self.path = path
        self.kind = kind
        self._tags = tags
        self.title: "typing.Optional[str]" = None
        self.album: "typing.Optional[str]" = None
        self.artists: "typing.List[str]" = []
        self.cover: "typing.Optional[bytes]" = None
        self.cover_mime: "typing.Optional[str]" = None

    def set_title(self, title: str) -> None:
        self.title = title

    def set_album(self, album: str) -> None:
        self.album = album

    def add_artist(self, artist: str) -> None:
        self.artists.append(artist)

    def set_cover(self, data: bytes, mime: "typing.Optional[str]" = None) -> None:
        self.cover = data
        self.cover_mime = mime or sniff_cover_mime(data)

    def _apply_id3(self) -> None:
        tags = self._tags
        if self.title is not None:
            tags.setall("TIT2", [TIT2(encoding=3, text=[self.title])])
        if self.album is not None:
            tags.setall("TALB", [TALB(encoding=3, text=[self.album])])
        if self.artists:
            tags.setall("TPE1", [TPE1(encoding=3, text=list(self.artists))])
        if self.cover is not None:
            tags.delall("APIC")
            tags.add(APIC(
                encoding=3,
                mime=self.cover_mime,
                type=PictureType.COVER_FRONT,
                desc="Cover",
                data=self.cover,
            ))

    def _apply_flac(self) -> None:
        audio = self._tags
        if audio.tags is None:
            audio.add_tags()
        if self.title is not None:
            audio["title"] = [self.title]
        if self.album is not None:
            audio["album"] = [self.album]
        if self.artists:
            audio["artist"] = list(self.artists)
        if self.cover is not None:
            picture = Picture()
            picture.type = PictureType.COVER_FRONT
            picture.mime = self.cover_mime
            picture.desc = "Cover"
            picture.data = self.cover
            audio.clear_pictures()
            audio.add_picture(picture)

    def save(self, path: pathlib.Path) -> None:
        if self.kind == "mp3":
            self._apply_id3()
        else:
            self._apply_flac()
        self._tags.save(str(path))


def read_tags(path) -> TagHandle:
    """Open ``path`` for tagging; the tag format follows the file extension."""
    path = pathlib.Path(path)
    kind = path.suffix.lower().lstrip(".")
    try:
        if kind == "mp3":
            try:
                tags = ID3(str(path))
            except ID3NoHeaderError:
                tags = ID3()
        elif kind == "flac":
            tags = FLAC(str(path))
        else:
            raise RuntimeError(f"Tag write failed: unsupported audio format {kind!r} for {path}")
    except MutagenError as exc:
        raise RuntimeError(f"Tag write failed: cannot read tags from {path}: {exc}") from exc
    return TagHandle(path, kind, tags)


def write_tags(handle: TagHandle, path=None) -> pathlib.Path:
    target = pathlib.Path(path) if path is not None else handle.path
    try:
        handle.save(target)
    except MutagenError as exc:
        raise RuntimeError(f"Tag write failed for {target}: {exc}") from exc
    return target
