"""文字オフセット → (行, 桁) 変換。

- 先頭の BOM(U+FEFF) は1文字だけ除去してから計算する
- 行頭は 0 と、各 '\\n' の直後の位置
- オフセットはコードポイント単位(マルチバイト文字も1単位)
"""
from __future__ import annotations

from bisect import bisect_right
from typing import List, Tuple

from .models import Range

BOM = "\ufeff"


def strip_bom(text: str) -> str:
    if text.startswith(BOM):
        return text[1:]
    return text


class PositionMapper:
    def __init__(self, text: str):
        self.text = strip_bom(text)
        self.line_starts: List[int] = [0]
        for i, ch in enumerate(self.text):
            if ch == "\n":
                self.line_starts.append(i + 1)

    def get_line_col(self, offset: int) -> Tuple[int, int]:
        # 二分探索で offset 以下の最大の行頭を求める
        if offset < 0:
            offset = 0
        idx = bisect_right(self.line_starts, offset) - 1
        return idx + 1, offset - self.line_starts[idx] + 1

    def make_range(self, offset: int, length: int) -> Range:
        """offset から length 文字分の単一行レンジ。"""
        line, col = self.get_line_col(offset)
        return Range(start_line=line, start_column=col, end_line=line, end_column=col + length)


__all__ = ["PositionMapper", "strip_bom", "BOM"]
