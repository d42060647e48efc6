"""外部ルールエンジンの結果を Issue 形式に正規化するアダプタ。

- エンジンは終了位置を返さないことがあるため、range は開始桁から1桁分とする
- id は (行, 桁, ルールID) から作るので、同じテキストなら再実行しても同じ。重複時は -2, -3 を付ける
- 設定読み込みに失敗した場合やエンジン実行時エラーでは空リストを返す
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .lint_engine import LintEngine, LintMessage
from .models import Issue, Range, TEXTLINT

logger = logging.getLogger(__name__)


def to_issue(msg: LintMessage) -> Issue:
    return Issue(
        id=f"textlint-{msg.line}-{msg.column}-{msg.rule_id}",
        type=TEXTLINT,
        message=msg.message,
        range=Range(
            start_line=msg.line,
            start_column=msg.column,
            end_line=msg.line,
            end_column=msg.column + 1,
        ),
        suggestion=msg.fix.text if msg.fix is not None else None,
        source=msg.rule_id,
    )


class ExternalLinter:
    def __init__(self, engine: Optional[LintEngine] = None):
        self._engine = engine

    @property
    def enabled(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Optional[LintEngine]:
        return self._engine

    def replace(self, engine: Optional[LintEngine]) -> None:
        # 参照の差し替えのみ。実行中の lint は古いエンジンで完走する
        self._engine = engine

    def disable(self) -> None:
        self._engine = None

    def lint(self, text: str, disabled_rules: Iterable[str] = ()) -> List[Issue]:
        engine = self._engine
        if engine is None:
            return []
        try:
            messages = engine.lint(text, disabled_rules=disabled_rules)
        except Exception:
            logger.warning("external lint failed; returning no lint issues for this call", exc_info=True)
            return []
        issues = [to_issue(m) for m in messages]
        # プラグインが同じ位置に同じルールIDで複数返した場合も id を一意にする
        seen: Dict[str, int] = {}
        for issue in issues:
            n = seen.get(issue.id, 0) + 1
            seen[issue.id] = n
            if n > 1:
                issue.id = f"{issue.id}-{n}"
        return issues


__all__ = ["ExternalLinter", "to_issue"]
