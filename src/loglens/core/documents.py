"""Async document loading for scans."""

from __future__ import annotations

import gzip
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .scanning import split_lines

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


async def read_document(
    log_path: str | Path,
    *,
    encoding: str = TEXT_ENCODING,
    decode_errors: str = TEXT_ERRORS,
) -> str:
    """Return the full text of a log file."""
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        return await f.read()


async def read_lines(log_path: str | Path, **kwargs) -> list[str]:
    """Return the document split into lines (terminators removed)."""
    return split_lines(await read_document(log_path, **kwargs))
