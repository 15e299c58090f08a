from __future__ import annotations

import gzip
import shutil
import zlib
from dataclasses import dataclass
from pathlib import Path

from ..infra.errors import TransformError
from ..infra.models import COMPRESSION_SUFFIX
from ..utils.fs import human_size

CHUNK_BYTES = 1024 * 1024


@dataclass(frozen=True)
class TransformResult:
    path: Path
    size_bytes: int


def decompress_gzip(compressed_path: Path) -> TransformResult:
    """Gunzip compressed_path next to itself and remove the input.

    On failure the compressed input is left alone and any partial output removed.
    """
    src = Path(compressed_path)
    if src.suffix != COMPRESSION_SUFFIX:
        raise TransformError(f"Expected a {COMPRESSION_SUFFIX} file, got {src.name}")
    dest = src.with_name(src.name[: -len(COMPRESSION_SUFFIX)])

    print(f"[transform] Extracting {src.name} -> {dest.name}")
    try:
        with gzip.open(src, "rb") as fin, dest.open("wb") as fout:
            shutil.copyfileobj(fin, fout, CHUNK_BYTES)
    except (OSError, EOFError, zlib.error) as e:
        if dest.exists():
            dest.unlink()
        raise TransformError(f"Failed to decompress {src.name}: {e}") from e

    src.unlink()

    if not dest.is_file():
        raise TransformError(f"Extraction produced no file: {dest.name}")
    size = int(dest.stat().st_size)
    if size == 0:
        raise TransformError(f"Extraction produced an empty file: {dest.name}")

    print(f"[transform] Extraction complete - {dest.name} size: {human_size(size)}")
    return TransformResult(path=dest, size_bytes=size)
