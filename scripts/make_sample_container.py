#!/usr/bin/env python3
"""
Write a synthetic NCM container for manual end-to-end runs.

Example:
    python scripts/make_sample_container.py song.mp3 sample.ncm --title Song --artist A --artist B
"""
import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
for entry in (REPO_ROOT, REPO_ROOT / "tests"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

import container_factory as factory


def main():
    parser = argparse.ArgumentParser(description="Pack an audio file into a synthetic NCM container")
    parser.add_argument("audio", help="Plain audio file to embed")
    parser.add_argument("output", help="Container path to write")
    parser.add_argument("--title", default="Sample")
    parser.add_argument("--album", default="Sample Album")
    parser.add_argument("--artist", action="append", default=None)
    parser.add_argument("--format", default=None, help="Output format (defaults to the audio file's extension)")
    parser.add_argument("--cover", default=None, help="Cover image file (defaults to a bare PNG signature)")
    args = parser.parse_args()

    audio_path = Path(args.audio)
    if not audio_path.is_file():
        print(f"ERROR: {audio_path} is not a file", file=sys.stderr)
        return 1
    fmt = args.format or audio_path.suffix.lstrip(".").lower()
    artists = args.artist or ["Sample Artist"]
    record = factory.sample_record(
        format=fmt,
        musicName=args.title,
        album=args.album,
        artist=[[name, index + 1] for index, name in enumerate(artists)],
    )
    kwargs = {}
    if args.cover:
        kwargs["image"] = Path(args.cover).read_bytes()

    blob = factory.build_container(record, audio_path.read_bytes(), **kwargs)
    out = Path(args.output)
    out.write_bytes(blob)
    print(f"  ✓ {out} ({len(blob) / 1024:.1f} KB)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
