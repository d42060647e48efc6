"""プロジェクト独自の置換ルール(kanji-rules)を YAML / JSON / TXT からロードする。

フォーマット例:

YAML:
---
- pattern: "出来る"
  message: "「出来る」は「できる」と開く"
  suggestion: "できる"
  severity: WARN
- pattern: "危険な語"
  message: "使用を避ける"
  severity: ERROR

JSON: 上記と同じ構造の配列。

TXT: 1行1ルール「表記=推奨表記」。'#' 始まりの行と空行は無視。
  出来る=できる
  下さい=ください
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Pattern

import yaml

from .errors import LintConfigError

SEVERITIES = ("INFO", "WARN", "ERROR")
_ENCODINGS = ("utf-8", "utf-8-sig", "utf-16", "utf-16-le", "utf-16-be", "cp932")


@dataclass
class ReplacePattern:
    pattern: Pattern[str]
    message: str
    suggestion: str | None = None
    severity: str = "WARN"

    def finditer(self, text: str) -> Iterator[Dict[str, Any]]:
        for m in self.pattern.finditer(text):
            if m.start() == m.end():
                continue
            yield {
                "start": m.start(),
                "end": m.end(),
                "match": m.group(0),
                "message": self.message,
                "suggestion": self.suggestion,
                "severity": self.severity,
            }


def read_rule_text(path: Path) -> str:
    # いくつかのエンコーディング候補を試す (PowerShell Set-Content デフォルト UTF-16 対応)
    raw = path.read_bytes()
    for enc in _ENCODINGS:
        try:
            text = raw.decode(enc)
        except UnicodeDecodeError:
            continue
        return text.lstrip("\ufeff")
    raise LintConfigError(f"Unable to decode rule file with tried encodings: {path}")


def _compile(pat: str, path: Path) -> Pattern[str]:
    try:
        return re.compile(pat)
    except re.error as e:
        raise LintConfigError(f"Invalid regex in {path}: {pat}: {e}") from e


def _parse_txt(text: str, path: Path) -> List[ReplacePattern]:
    patterns: List[ReplacePattern] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise LintConfigError(f"{path}:{lineno}: '表記=推奨表記' の形式で記述してください")
        wrong, right = (s.strip() for s in line.split("=", 1))
        if not wrong:
            raise LintConfigError(f"{path}:{lineno}: 表記が空です")
        patterns.append(ReplacePattern(
            pattern=re.compile(re.escape(wrong)),
            message=f"「{wrong}」は「{right}」と表記してください",
            suggestion=right,
        ))
    return patterns


def _parse_items(data: Any, path: Path) -> List[ReplacePattern]:
    if not isinstance(data, list):
        raise LintConfigError("ルールファイルは配列である必要があります")
    patterns: List[ReplacePattern] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        pat = item.get("pattern")
        if not isinstance(pat, str) or not pat:
            raise LintConfigError(f"pattern is required: {item!r}")
        sug = item.get("suggestion")
        msg = item.get("message") or (f"「{pat}」は「{sug}」と表記してください" if sug else f"「{pat}」の使用を確認してください")
        sev = str(item.get("severity") or "WARN").upper()
        if sev not in SEVERITIES:
            raise LintConfigError(f"Invalid severity: {sev}")
        patterns.append(ReplacePattern(pattern=_compile(pat, path), message=msg, suggestion=sug, severity=sev))
    return patterns


def load_rule_file(path: str | Path) -> List[ReplacePattern]:
    p = Path(path)
    if not p.is_file():
        raise LintConfigError(f"rule file not found: {path}")
    text = read_rule_text(p)
    suffix = p.suffix.lower()
    if suffix == ".txt":
        return _parse_txt(text, p)
    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise LintConfigError(f"failed to parse rule file {path}: {e}") from e
    return _parse_items(data, p)


__all__ = ["load_rule_file", "read_rule_text", "ReplacePattern", "SEVERITIES"]
