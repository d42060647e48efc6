"""設定駆動の外部ルールエンジン。

プロジェクトディレクトリから設定を探し(最初に見つかったもの):
- .jacalibrate.yml / .jacalibrate.yaml / .jacalibrate.json
- pyproject.toml の [tool.jacalibrate.lint]
見つからなければ組込みプリセット(lint_rules.DEFAULT_PRESET)で動作する。

設定例(YAML):
---
rules:
  no-dropping-the-ra: true
  ja-spacing: false
  kanji-rules:
    path: docs/kanji-rules.txt
plugins:
  my-rule: "mypackage.rules:check"   # check(text, options) -> ヒット辞書の列

preset: false とするとプリセットを使わず rules に列挙したものだけを有効にする。
"""
from __future__ import annotations

import importlib
import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from .errors import LintConfigError
from .external_rules import read_rule_text
from .lint_rules import BUILTIN_RULES, DEFAULT_PRESET, RuleFactory, RuleFunc
from .position import PositionMapper, strip_bom

logger = logging.getLogger(__name__)

CONFIG_FILES = (".jacalibrate.yml", ".jacalibrate.yaml", ".jacalibrate.json")


@dataclass(frozen=True)
class LintFix:
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class LintMessage:
    rule_id: str
    message: str
    line: int
    column: int
    index: int
    severity: str = "WARN"
    fix: Optional[LintFix] = None


@dataclass
class LintConfig:
    rules: Dict[str, Dict[str, Any]] = field(default_factory=dict)  # 有効ルール名 -> オプション
    plugins: Dict[str, str] = field(default_factory=dict)
    base_dir: Optional[Path] = None
    source: Optional[Path] = None


def _read_config_file(path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with path.open("rb") as f:
                data = tomllib.load(f)
            return data.get("tool", {}).get("jacalibrate", {}).get("lint", {})
        text = read_rule_text(path)
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        return json.loads(text)
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise LintConfigError(f"failed to read lint config {path}: {e}") from e


def find_config_file(project_dir: Path) -> Optional[Path]:
    for name in CONFIG_FILES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    pyproject = project_dir / "pyproject.toml"
    if pyproject.is_file():
        with pyproject.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise LintConfigError(f"failed to read {pyproject}: {e}") from e
        if "lint" in data.get("tool", {}).get("jacalibrate", {}):
            return pyproject
    return None


def _rule_options(name: str, value: Any) -> Optional[Dict[str, Any]]:
    if value is True:
        return {}
    if value is False or value is None:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    raise LintConfigError(f"rule '{name}': expected true/false or a mapping of options, got {value!r}")


def parse_config(raw: Any, base_dir: Optional[Path] = None, source: Optional[Path] = None) -> LintConfig:
    if not isinstance(raw, Mapping):
        raise LintConfigError("lint config must be a mapping")
    plugins = raw.get("plugins") or {}
    if not isinstance(plugins, Mapping) or not all(isinstance(v, str) for v in plugins.values()):
        raise LintConfigError("plugins must map rule names to 'module:attr' strings")
    for name in plugins:
        if name in BUILTIN_RULES:
            raise LintConfigError(f"plugin '{name}' shadows a built-in rule")

    rules_raw = raw.get("rules") or {}
    if not isinstance(rules_raw, Mapping):
        raise LintConfigError("rules must be a mapping")
    merged: Dict[str, Any] = dict(DEFAULT_PRESET) if raw.get("preset", True) else {}
    merged.update(rules_raw)

    rules: Dict[str, Dict[str, Any]] = {}
    for name, value in merged.items():
        if name not in BUILTIN_RULES and name not in plugins:
            raise LintConfigError(f"unknown rule: {name}")
        options = _rule_options(name, value)
        if options is not None:
            rules[name] = options
    return LintConfig(rules=rules, plugins=dict(plugins), base_dir=base_dir, source=source)


def load_lint_config(project_path: str | Path | None) -> LintConfig:
    """プロジェクトディレクトリ(または設定ファイル自体)から設定を読む。"""
    if project_path is None:
        return parse_config({})
    p = Path(project_path)
    if p.is_file():
        return parse_config(_read_config_file(p), base_dir=p.parent, source=p)
    if not p.is_dir():
        raise LintConfigError(f"project path not found: {project_path}")
    cfg_file = find_config_file(p)
    if cfg_file is None:
        return parse_config({}, base_dir=p)
    return parse_config(_read_config_file(cfg_file), base_dir=p, source=cfg_file)


def _load_plugin(name: str, target: str) -> RuleFactory:
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise LintConfigError(f"plugin '{name}': expected 'module:attr', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise LintConfigError(f"plugin '{name}': cannot import {module_name}: {e}") from e
    func = getattr(module, attr, None)
    if not callable(func):
        raise LintConfigError(f"plugin '{name}': {target} is not callable")

    def factory(options: Mapping[str, Any], base_dir: Optional[Path]) -> RuleFunc:
        return lambda text: func(text, options)

    return factory


class LintEngine:
    def __init__(self, config: LintConfig):
        self.config = config
        self._rules: Dict[str, RuleFunc] = {}
        for name, options in config.rules.items():
            factory = BUILTIN_RULES.get(name)
            if factory is None:
                factory = _load_plugin(name, config.plugins[name])
            self._rules[name] = factory(options, config.base_dir)

    @classmethod
    def from_project(cls, project_path: str | Path | None) -> "LintEngine":
        config = load_lint_config(project_path)
        engine = cls(config)
        logger.info(
            "lint engine ready: %s (config=%s)",
            ", ".join(engine.rule_ids) or "<no rules>",
            config.source or "preset",
        )
        return engine

    @property
    def rule_ids(self) -> List[str]:
        return list(self._rules)

    def lint(self, text: str, disabled_rules: Iterable[str] = ()) -> List[LintMessage]:
        """テキストを検査し、行/桁(1始まり)付きの診断を位置順に返す。

        ルール実行中の例外はそのまま送出する。
        """
        disabled = set(disabled_rules)
        clean = strip_bom(text)
        mapper = PositionMapper(clean)
        messages: List[LintMessage] = []
        for name, rule in self._rules.items():
            if name in disabled:
                continue
            for hit in rule(clean):
                start = int(hit["start"])
                end = int(hit.get("end", start))
                line, col = mapper.get_line_col(start)
                suggestion = hit.get("suggestion")
                fix = LintFix(start, end, suggestion) if suggestion is not None else None
                # 1ルールが複数パターンを持つ場合は "ルール/パターン" で区別する
                sub = hit.get("rule_id")
                rule_id = f"{name}/{sub}" if sub else name
                messages.append(LintMessage(
                    rule_id=rule_id,
                    message=str(hit.get("message") or name),
                    line=line,
                    column=col,
                    index=start,
                    severity=str(hit.get("severity") or "WARN"),
                    fix=fix,
                ))
        messages.sort(key=lambda m: (m.index, m.rule_id))
        return messages


__all__ = [
    "LintEngine",
    "LintConfig",
    "LintMessage",
    "LintFix",
    "load_lint_config",
    "parse_config",
    "find_config_file",
    "CONFIG_FILES",
]
