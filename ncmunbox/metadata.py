"""Metadata record carried in the container's metadata block."""

import json
import typing
from dataclasses import dataclass, field


_REQUIRED = (
    ("format", "format", str),
    ("music_name", "musicName", str),
    ("artist", "artist", list),
    ("album", "album", str),
)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Metadata:
    format: str
    music_name: str
    artist: "typing.Tuple[tuple, ...]"
    album: str
    bitrate: "typing.Optional[int]" = None
    trans_names: "typing.Optional[typing.Tuple[str, ...]]" = None
    album_pic: "typing.Optional[str]" = None
    extra: "typing.Dict[str, typing.Any]" = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_json(cls, text: str) -> "Metadata":
        """Parse the JSON record. Any missing or mistyped required field fails."""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Malformed metadata JSON: {exc}") from exc
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw) -> "Metadata":
        if not isinstance(raw, dict):
            raise ValueError("Malformed metadata JSON: expected an object")
        values = {}
        for attr, key, expected in _REQUIRED:
            if key not in raw:
                raise ValueError(f"Metadata missing required field {key!r}")
            value = raw[key]
            if not isinstance(value, expected):
                raise ValueError(
                    f"Metadata field {key!r} has type {type(value).__name__}, "
                    f"expected {expected.__name__}"
                )
            values[attr] = value
        for entry in values["artist"]:
            if not isinstance(entry, list):
                raise ValueError("Metadata field 'artist' must be a list of lists")

        bitrate = raw.get("bitrate")
        if bitrate is not None and not _is_int(bitrate):
            raise ValueError("Metadata field 'bitrate' must be an integer")
        trans_names = raw.get("transNames")
        if trans_names is not None:
            if not isinstance(trans_names, list) or not all(isinstance(n, str) for n in trans_names):
                raise ValueError("Metadata field 'transNames' must be a list of strings")
        album_pic = raw.get("albumPic")
        if album_pic is not None and not isinstance(album_pic, str):
            raise ValueError("Metadata field 'albumPic' must be a string")

        # Stored as tuples so the frozen record stays hashable.
        values["artist"] = tuple(tuple(entry) for entry in values["artist"])
        if trans_names is not None:
            trans_names = tuple(trans_names)

        known = {key for _, key, _ in _REQUIRED} | {"bitrate", "transNames", "albumPic"}
        extra = {k: v for k, v in raw.items() if k not in known}
        return cls(
            bitrate=bitrate,
            trans_names=trans_names,
            album_pic=album_pic,
            extra=extra,
            **values,
        )

    @property
    def artist_names(self) -> "typing.List[str]":
        return artist_names(self.artist)

    @property
    def joined_artists(self) -> str:
        return ",".join(self.artist_names)


def artist_names(pairs: "typing.Iterable[typing.Sequence]") -> "typing.List[str]":
    """First element of each ``[name, id]`` pair, skipping non-strings."""
    names = []
    for pair in pairs:
        if not pair:
            continue
        name = pair[0]
        if isinstance(name, str):
            names.append(name)
    return names
