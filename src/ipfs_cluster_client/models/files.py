"""Binary payloads handed to the add operations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO

CAR_CONTENT_TYPE = "application/car"


@dataclass(frozen=True)
class FilePart:
    """A named blob sent as one ``file`` part of a multipart body."""

    content: bytes | IO[bytes]
    name: str = "blob"
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> FilePart:
        p = Path(path).expanduser()
        if content_type is None:
            content_type = CAR_CONTENT_TYPE if p.suffix == ".car" else "application/octet-stream"
        return cls(content=p.read_bytes(), name=p.name, content_type=content_type)

    def to_multipart(self) -> tuple[str, tuple[str, bytes | IO[bytes], str]]:
        return ("file", (self.name, self.content, self.content_type))
