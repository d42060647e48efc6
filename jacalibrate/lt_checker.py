"""
LanguageTool 連携ルール(languagetool): language_tool_python でテキストを校正し、
ルールエンジンのヒット辞書形式で返す。

注意:
- オフライン利用では Java が必要な場合があります。
- public_api: true の場合は LanguageTool の公開 API に接続します。
  ネットワークポリシーに従ってご利用ください。
"""
from __future__ import annotations

import threading
from typing import Any, Dict, Iterator, Mapping

try:  # Optional dependency
    import language_tool_python as ltp
    _LT_AVAILABLE = True
except Exception:  # pragma: no cover - optional dependency may be missing
    ltp = None  # type: ignore
    _LT_AVAILABLE = False


def is_available() -> bool:
    return _LT_AVAILABLE


_tool_cache: dict[tuple[str, bool], Any] = {}
_tool_lock = threading.Lock()


def _get_tool(lang: str, public_api: bool):
    # Tool は軽くないため言語ごとに使い回す
    key = (lang, public_api)
    with _tool_lock:
        tool = _tool_cache.get(key)
        if tool is None:
            tool = ltp.LanguageToolPublicAPI(lang) if public_api else ltp.LanguageTool(lang)
            _tool_cache[key] = tool
    return tool


def run_languagetool(text: str, options: Mapping[str, Any] | None = None) -> Iterator[Dict[str, Any]]:
    """LanguageTool で text をチェックし、ヒット辞書を yield。

    options: lang (既定 ja-JP), public_api (既定 False)
    rule_id には LanguageTool のルールIDを LT_ 付きで入れる。
    ツールの起動/通信エラーはそのまま送出する(呼び出し側でルール単位に処理)。
    """
    if not _LT_AVAILABLE:
        return
    options = options or {}
    tool = _get_tool(str(options.get("lang", "ja-JP")), bool(options.get("public_api", False)))
    for m in tool.check(text):
        start = getattr(m, "offset", 0)
        length = getattr(m, "errorLength", 0)
        repls = getattr(m, "replacements", [])
        rule_id = getattr(m, "ruleId", "") or "LT"
        yield {
            "start": start,
            "end": start + length,
            "match": text[start:start + length],
            "message": getattr(m, "message", "LanguageTool指摘"),
            "suggestion": str(repls[0]) if repls else None,
            "severity": "INFO",
            "rule_id": f"LT_{rule_id}",
        }


__all__ = ["is_available", "run_languagetool"]
