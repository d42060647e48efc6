"""形態素解析アダプタ。

優先度(backend="auto"):
- 辞書パスが MeCab 辞書ディレクトリ(sys.dic / dicrc を含む)なら fugashi(GenericTagger)
- それ以外は Janome(同梱 IPADIC)。.csv を渡した場合はユーザー辞書として読み込む

どちらも IPADIC 形式の品詞(品詞, 品詞細分類1)を返す。
MeCab は空白・改行を読み飛ばすため、飛ばされた区間は「記号,空白」トークンとして補い、
トークン列が常に元テキスト全体を覆うようにしている(文区切りの改行判定に必要)。
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Protocol, Tuple

from janome.tokenizer import Tokenizer as JanomeBackend

from .errors import TokenizerBuildError
from .models import Token

try:  # optional dependency
    from fugashi import GenericTagger  # type: ignore
except Exception:  # pragma: no cover - optional dependency may be missing
    GenericTagger = None  # type: ignore

logger = logging.getLogger(__name__)

BACKENDS = ("auto", "janome", "fugashi")
_MECAB_DICDIR_MARKERS = ("sys.dic", "dicrc")


class Tokenizer(Protocol):
    backend: str

    def tokenize(self, text: str) -> List[Token]:
        ...


def align_tokens(text: str, pieces: Iterable[Tuple[str, str, str]]) -> List[Token]:
    """(surface, 品詞, 細分類) 列に元テキスト上の位置を付与する。"""
    tokens: List[Token] = []
    idx = 0
    for surf, pos, detail in pieces:
        if not surf:
            continue
        start = text.find(surf, idx)
        if start < 0:
            start = idx
        if start > idx:
            gap = text[idx:start]
            tokens.append(Token(gap, "記号", "空白" if gap.isspace() else "一般", idx + 1))
        tokens.append(Token(surf, pos, detail, start + 1))
        idx = start + len(surf)
    if idx < len(text):
        gap = text[idx:]
        tokens.append(Token(gap, "記号", "空白" if gap.isspace() else "一般", idx + 1))
    return tokens


class JanomeTokenizer:
    backend = "janome"

    def __init__(self, user_dictionary: str | None = None):
        if user_dictionary:
            self._tokenizer = JanomeBackend(udic=user_dictionary, udic_enc="utf8")
        else:
            self._tokenizer = JanomeBackend()

    def tokenize(self, text: str) -> List[Token]:
        def pieces():
            for tok in self._tokenizer.tokenize(text):
                fields = tok.part_of_speech.split(",")
                detail = fields[1] if len(fields) > 1 else "*"
                yield tok.surface, fields[0], detail

        return align_tokens(text, pieces())


class FugashiTokenizer:
    backend = "fugashi"

    def __init__(self, dicdir: str):
        self._tagger = GenericTagger(f'-d "{dicdir}"')

    def tokenize(self, text: str) -> List[Token]:
        def pieces():
            for w in self._tagger(text):
                feature = w.feature
                pos = feature[0] if len(feature) > 0 else "*"
                detail = feature[1] if len(feature) > 1 else "*"
                yield w.surface, pos, detail

        return align_tokens(text, pieces())


def available_backends() -> List[str]:
    names = ["janome"]
    if GenericTagger is not None:
        names.append("fugashi")
    return names


def _is_mecab_dicdir(path: Path) -> bool:
    return path.is_dir() and any((path / m).is_file() for m in _MECAB_DICDIR_MARKERS)


def build_tokenizer(dictionary_path: str, backend: str = "auto") -> Tokenizer:
    """辞書パスから形態素解析器を構築する。失敗時は TokenizerBuildError。"""
    if backend not in BACKENDS:
        raise TokenizerBuildError(f"unknown tokenizer backend: {backend}")
    path = Path(dictionary_path)
    if not path.exists():
        raise TokenizerBuildError(f"dictionary not found: {dictionary_path}")
    if backend == "auto":
        backend = "fugashi" if _is_mecab_dicdir(path) else "janome"

    if backend == "fugashi":
        if GenericTagger is None:
            raise TokenizerBuildError("fugashi がインストールされていないため MeCab 辞書を読み込めません。'pip install fugashi' を実行してください")
        if not path.is_dir():
            raise TokenizerBuildError(f"MeCab dictionary directory expected: {dictionary_path}")
        try:
            tokenizer: Tokenizer = FugashiTokenizer(str(path))
        except Exception as e:
            raise TokenizerBuildError(f"failed to load MeCab dictionary {dictionary_path}: {e}") from e
    else:
        user_dictionary = None
        if path.is_file():
            if path.suffix.lower() != ".csv":
                raise TokenizerBuildError(f"user dictionary must be a MeCab-format .csv file: {dictionary_path}")
            user_dictionary = str(path)
        try:
            tokenizer = JanomeTokenizer(user_dictionary)
        except Exception as e:
            raise TokenizerBuildError(f"failed to build janome tokenizer from {dictionary_path}: {e}") from e

    logger.info("tokenizer ready (backend=%s, dictionary=%s)", tokenizer.backend, dictionary_path)
    return tokenizer


__all__ = [
    "Tokenizer",
    "JanomeTokenizer",
    "FugashiTokenizer",
    "align_tokens",
    "build_tokenizer",
    "available_backends",
    "BACKENDS",
]
