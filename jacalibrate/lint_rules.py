"""ルールエンジン組込みルール。

各ルールはファクトリ関数 (options, base_dir) -> (text -> ヒット辞書の列) として登録する。
ヒット辞書: start, end, match, message, suggestion(任意), severity, rule_id(任意。ルール内のパターン識別子)
設定時に読み込みが必要なもの(kanji-rules の辞書ファイル等)はファクトリ内で読み込む。
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import LintConfigError
from .external_rules import ReplacePattern, load_rule_file
from .lt_checker import is_available as lt_available, run_languagetool

logger = logging.getLogger(__name__)

RuleFunc = Callable[[str], Iterable[Dict[str, Any]]]
RuleFactory = Callable[[Mapping[str, Any], Optional[Path]], RuleFunc]

# ら抜き言葉（ヒューリスティック）: 直前が「え段」かなで「れる」になっているものを検出
_E_ROW = "えけげせぜてでねへべぺめれエケゲセゼテデネヘベペメレ"
_RA_NUKI_RE = re.compile(f"([{_E_ROW}])れ(る|ない|ます|た|て)")

# 代表的なら抜き表現（誤用が頻出するものを個別に拾う）
_RANUKI_SPECIAL: List[Tuple[str, str]] = [
    ("見れる", "見られる"),
    ("来れる", "来られる"),
    ("出れる", "出られる"),
    ("食べれる", "食べられる"),
    ("寝れる", "寝られる"),
    ("起きれる", "起きられる"),
    ("着れる", "着られる"),
    ("居れる", "居られる"),
]

# 連続助詞: 「のの」「がが」「にに」「をを」「へへ」「とと」「でで」
_DOUBLE_PARTICLE_RE = re.compile(r"(の|が|に|を|へ|と|で)\1")

_JP = r"\u3040-\u30FF\u4E00-\u9FFF"
_SPACE_BETWEEN_JP_RE = re.compile(f"(?<=[{_JP}])[ ]+(?=[{_JP}])")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"[ \u3000]+(?=[。．，、])")

DEFAULT_KANJI_RULES_FILE = "kanji-rules.txt"


def _no_rules(text: str) -> Iterator[Dict[str, Any]]:
    return iter(())


def no_dropping_the_ra(options: Mapping[str, Any], base_dir: Optional[Path]) -> RuleFunc:
    heuristic = bool(options.get("heuristic", True))

    def run(text: str) -> Iterator[Dict[str, Any]]:
        covered: List[Tuple[int, int]] = []
        for wrong, sug in _RANUKI_SPECIAL:
            for m in re.finditer(re.escape(wrong), text):
                covered.append((m.start(), m.end()))
                yield {
                    "start": m.start(),
                    "end": m.end(),
                    "match": wrong,
                    "message": f"ら抜き言葉を使用しています（{wrong} → {sug}）",
                    "suggestion": sug,
                    "severity": "WARN",
                }
        if not heuristic:
            return
        for m in _RA_NUKI_RE.finditer(text):
            start = m.start()
            # 代表例と重複するものは除外
            if any(s <= start < e for s, e in covered):
                continue
            wrong = m.group(0)
            yield {
                "start": start,
                "end": m.end(),
                "match": wrong,
                "message": "ら抜き言葉の可能性があります",
                "suggestion": m.group(1) + "られ" + m.group(2),
                # 誤検出低減のため INFO
                "severity": "INFO",
            }

    return run


def no_doubled_joshi(options: Mapping[str, Any], base_dir: Optional[Path]) -> RuleFunc:
    def run(text: str) -> Iterator[Dict[str, Any]]:
        for m in _DOUBLE_PARTICLE_RE.finditer(text):
            yield {
                "start": m.start(),
                "end": m.end(),
                "match": m.group(0),
                "message": f"助詞「{m.group(1)}」が連続しています",
                "suggestion": None,
                "severity": "WARN",
            }

    return run


def ja_spacing(options: Mapping[str, Any], base_dir: Optional[Path]) -> RuleFunc:
    def run(text: str) -> Iterator[Dict[str, Any]]:
        for m in _SPACE_BETWEEN_JP_RE.finditer(text):
            yield {
                "start": m.start(),
                "end": m.end(),
                "match": m.group(0),
                "message": "日本語の間のスペースを削除してください",
                "suggestion": "",
                "severity": "INFO",
            }
        for m in _SPACE_BEFORE_PUNCT_RE.finditer(text):
            yield {
                "start": m.start(),
                "end": m.end(),
                "match": m.group(0),
                "message": "句読点直前のスペースを削除してください",
                "suggestion": "",
                "severity": "WARN",
            }

    return run


def kanji_rules(options: Mapping[str, Any], base_dir: Optional[Path]) -> RuleFunc:
    """プロジェクトの置換辞書ルール。既定ファイルが無ければ何もしない。"""
    explicit = "path" in options
    rel = options.get("path", DEFAULT_KANJI_RULES_FILE)
    if not isinstance(rel, str):
        raise LintConfigError(f"kanji-rules: path must be a string: {rel!r}")
    path = Path(rel)
    if not path.is_absolute():
        if base_dir is None:
            if explicit:
                raise LintConfigError(f"kanji-rules: relative path needs a project directory: {rel}")
            return _no_rules
        path = base_dir / path
    if not path.is_file():
        if explicit:
            raise LintConfigError(f"kanji-rules: rule file not found: {path}")
        logger.debug("kanji-rules: %s not found, rule inactive", path)
        return _no_rules
    patterns: List[ReplacePattern] = load_rule_file(path)
    logger.info("kanji-rules: loaded %d pattern(s) from %s", len(patterns), path)

    def run(text: str) -> Iterator[Dict[str, Any]]:
        for num, pat in enumerate(patterns, 1):
            for hit in pat.finditer(text):
                hit["rule_id"] = str(num)
                yield hit

    return run


def languagetool(options: Mapping[str, Any], base_dir: Optional[Path]) -> RuleFunc:
    if not lt_available():
        logger.warning("languagetool: 'language_tool_python' が見つかりません。ルールは無効化されます。")
        return _no_rules
    opts = dict(options)

    def run(text: str) -> Iterator[Dict[str, Any]]:
        return run_languagetool(text, opts)

    return run


BUILTIN_RULES: Dict[str, RuleFactory] = {
    "no-dropping-the-ra": no_dropping_the_ra,
    "no-doubled-joshi": no_doubled_joshi,
    "ja-spacing": ja_spacing,
    "kanji-rules": kanji_rules,
    "languagetool": languagetool,
}

# 設定ファイルが無い場合のプリセット
DEFAULT_PRESET: Dict[str, Any] = {
    "no-dropping-the-ra": True,
    "no-doubled-joshi": True,
    "ja-spacing": True,
    "kanji-rules": True,
    "languagetool": False,
}

__all__ = ["BUILTIN_RULES", "DEFAULT_PRESET", "RuleFunc", "RuleFactory", "DEFAULT_KANJI_RULES_FILE"]
