from __future__ import annotations

from typing import Dict, List, Sequence

from .models import FrequencyResult, Token

CONTENT_POS = ("名詞", "動詞", "形容詞", "副詞", "連体詞", "接続詞", "感動詞")
EXCLUDED_NOUN_DETAILS = ("非自立", "接尾", "代名詞", "数")


def is_content_word(token: Token) -> bool:
    if token.part_of_speech not in CONTENT_POS:
        return False
    if token.part_of_speech == "名詞" and token.pos_detail in EXCLUDED_NOUN_DETAILS:
        return False
    # 1文字語は除外
    return len(token.surface) > 1


def count_frequency(tokens: Sequence[Token]) -> List[FrequencyResult]:
    """内容語の出現回数を表層形ごとに集計し、回数の降順で返す。

    同じ表層形が別品詞で現れても1エントリにまとめ、品詞は最初に見たものを残す。
    """
    table: Dict[str, FrequencyResult] = {}
    for tok in tokens:
        if not is_content_word(tok):
            continue
        entry = table.get(tok.surface)
        if entry is None:
            table[tok.surface] = FrequencyResult(word=tok.surface, count=1, pos=tok.part_of_speech)
        else:
            entry.count += 1
    return sorted(table.values(), key=lambda r: r.count, reverse=True)


__all__ = ["count_frequency", "is_content_word", "CONTENT_POS", "EXCLUDED_NOUN_DETAILS"]
