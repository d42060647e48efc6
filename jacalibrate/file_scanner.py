"""CLI 用の原稿ファイル走査ユーティリティ。

- 明示されたファイルは拡張子に関わらず対象
- ディレクトリは原稿らしい拡張子(.txt / .md)のみを再帰的に拾う
- バイナリらしいものは除外(ヒューリスティック)
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

MANUSCRIPT_SUFFIXES = (".txt", ".md", ".markdown")
BINARY_BYTES = set(range(0, 9)) | {11, 12} | set(range(14, 32))
ENCODINGS = ("utf-8", "utf-8-sig", "utf-16", "cp932", "shift_jis")


def is_probably_text(data: bytes, threshold: float = 0.30) -> bool:
    if not data:
        return True
    non_text = sum(b in BINARY_BYTES for b in data)
    return non_text / len(data) < threshold


def read_text(path: Path) -> str | None:
    """候補エンコーディングを順に試して読み込む。読めなければ None。"""
    try:
        raw = path.read_bytes()
    except OSError:
        return None
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        try:
            return raw.decode("utf-16")
        except UnicodeDecodeError:
            return None
    if not is_probably_text(raw):
        return None
    for enc in ENCODINGS:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return None


def iter_manuscripts(paths: Iterable[str | os.PathLike[str]]) -> Iterator[Path]:
    for p in paths:
        path = Path(p)
        if path.is_file():
            yield path
        elif path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if not d.startswith("."))
                for f in sorted(files):
                    if f.lower().endswith(MANUSCRIPT_SUFFIXES):
                        yield Path(root) / f


__all__ = ["iter_manuscripts", "read_text", "is_probably_text", "MANUSCRIPT_SUFFIXES"]
