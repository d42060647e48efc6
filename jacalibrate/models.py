"""校正エンジンのデータモデル。

- Token: 形態素解析器が返す1トークン(位置は1始まりのコードポイント)
- Range: 1始まりの行/桁による範囲
- Issue: 指摘1件。to_dict() でエディタ側が使う camelCase 形式に変換
- FrequencyResult: 語の出現頻度
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PARTICLE_REPETITION = "particle_repetition"
CONSISTENCY = "consistency"
KANJI_OPEN_CLOSE = "kanji_open_close"
TEXTLINT = "textlint"

ISSUE_TYPES = (PARTICLE_REPETITION, CONSISTENCY, KANJI_OPEN_CLOSE, TEXTLINT)


@dataclass(frozen=True)
class Token:
    surface: str
    part_of_speech: str
    pos_detail: str
    position: int  # 1-based

    @property
    def offset(self) -> int:
        """0始まりの文字オフセット。"""
        return self.position - 1


@dataclass(frozen=True)
class Range:
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "startLine": self.start_line,
            "startColumn": self.start_column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
        }


@dataclass
class Issue:
    id: str
    type: str
    message: str
    range: Range
    ranges: Optional[List[Range]] = None
    suggestion: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if self.type not in ISSUE_TYPES:
            raise ValueError(f"unknown issue type: {self.type}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "message": self.message,
            "range": self.range.to_dict(),
        }
        if self.ranges is not None:
            data["ranges"] = [r.to_dict() for r in self.ranges]
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.source is not None:
            data["source"] = self.source
        return data


@dataclass
class FrequencyResult:
    word: str
    count: int
    pos: str

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.word, "count": self.count, "pos": self.pos}


@dataclass
class AnalysisResult:
    frequency: List[FrequencyResult] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": [f.to_dict() for f in self.frequency],
            "issues": [i.to_dict() for i in self.issues],
        }


__all__ = [
    "Token",
    "Range",
    "Issue",
    "FrequencyResult",
    "AnalysisResult",
    "ISSUE_TYPES",
    "PARTICLE_REPETITION",
    "CONSISTENCY",
    "KANJI_OPEN_CLOSE",
    "TEXTLINT",
]
