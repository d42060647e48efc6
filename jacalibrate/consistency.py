"""漢字の開き(表記統一)チェック。

形式名詞・副詞などで、かな書きが一般的な漢字表記をトークン単位で検出する。
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from .models import Issue, KANJI_OPEN_CLOSE, Token
from .position import PositionMapper

# 漢字表記 -> 推奨かな表記
KANA_OPEN_MAP: Dict[str, str] = {
    "事": "こと",
    "時": "とき",
    "所": "ところ",
    "他": "ほか",
    "等": "など",
    "為": "ため",
    "故": "ゆえ",
    "或いは": "あるいは",
    "貴方": "あなた",
    "何時": "いつ",
    "何処": "どこ",
    "此処": "ここ",
    "其処": "そこ",
    "彼処": "あそこ",
    "何故": "なぜ",
    "殆ど": "ほとんど",
    "滅多に": "めったに",
    "居る": "いる",  # 補助動詞
    "或る": "ある",
    "無く": "なく",  # 補助形容詞
    "無い": "ない",
}


def check_consistency(tokens: Sequence[Token], mapper: PositionMapper) -> List[Issue]:
    issues: List[Issue] = []
    for tok in tokens:
        suggestion = KANA_OPEN_MAP.get(tok.surface)
        if suggestion is None:
            continue
        issues.append(Issue(
            id=f"consistency-{tok.offset}",
            type=KANJI_OPEN_CLOSE,
            message=f"「{tok.surface}」は「{suggestion}」と開くのが一般的です",
            range=mapper.make_range(tok.offset, len(tok.surface)),
            suggestion=suggestion,
            source="kanji-open-close",
        ))
    return issues


__all__ = ["check_consistency", "KANA_OPEN_MAP"]
