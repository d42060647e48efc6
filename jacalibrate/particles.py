"""文区切りと助詞の重複チェック。

1文(。！？ または改行まで)の中で同じ助詞が3回以上使われていれば、
その助詞につき1件の指摘を返す。range は最初の出現、ranges は全出現。
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Sequence

from .models import Issue, PARTICLE_REPETITION, Token
from .position import PositionMapper

SENTENCE_TERMINATORS = frozenset("。！？")
TRACKED_PARTICLES = ("の", "が", "に", "を", "と", "で", "や", "も")
PARTICLE_POS = "助詞"
REPEAT_THRESHOLD = 3


def is_sentence_end(token: Token) -> bool:
    surf = token.surface
    if "\n" in surf:
        return True
    return bool(surf) and all(ch in SENTENCE_TERMINATORS for ch in surf)


def split_sentences(tokens: Sequence[Token]) -> Iterator[List[Token]]:
    """終端トークンを含まない文単位のトークン列を順に返す。最後の未終端文も含む。"""
    current: List[Token] = []
    for tok in tokens:
        if is_sentence_end(tok):
            yield current
            current = []
            continue
        current.append(tok)
    yield current


def _sentence_issues(sentence: Sequence[Token], mapper: PositionMapper) -> Iterator[Issue]:
    grouped: Dict[str, List[Token]] = {}
    for tok in sentence:
        if tok.part_of_speech == PARTICLE_POS and tok.surface in TRACKED_PARTICLES:
            grouped.setdefault(tok.surface, []).append(tok)
    for surface, occurrences in grouped.items():
        count = len(occurrences)
        if count < REPEAT_THRESHOLD:
            continue
        ranges = [mapper.make_range(t.offset, len(surface)) for t in occurrences]
        first = occurrences[0]
        yield Issue(
            id=f"particle-{first.offset}-{surface}",
            type=PARTICLE_REPETITION,
            message=f"助詞「{surface}」が文中で連続しています（{count}回）",
            range=ranges[0],
            ranges=ranges,
            source="particle-repetition",
        )


def check_particle_repetition(tokens: Sequence[Token], mapper: PositionMapper) -> List[Issue]:
    issues: List[Issue] = []
    for sentence in split_sentences(tokens):
        issues.extend(_sentence_issues(sentence, mapper))
    return issues


__all__ = [
    "check_particle_repetition",
    "split_sentences",
    "is_sentence_end",
    "TRACKED_PARTICLES",
    "SENTENCE_TERMINATORS",
    "REPEAT_THRESHOLD",
]
