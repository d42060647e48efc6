"""解析ごとのルール切り替え設定。

エディタ側の設定(camelCase: textlint, noDroppingTheRa, ...)と snake_case の両方を受け付ける。
pyproject.toml の [tool.jacalibrate] からも読み込める。
"""
from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, List, Mapping

from .errors import CalibrationError

# 設定項目 -> ルールエンジンのルールID
LINT_RULE_TOGGLES = {
    "no_dropping_the_ra": "no-dropping-the-ra",
    "no_doubled_joshi": "no-doubled-joshi",
    "ja_spacing": "ja-spacing",
}


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass
class CalibrationSettings:
    textlint: bool = True
    no_dropping_the_ra: bool = True
    no_doubled_joshi: bool = True
    ja_spacing: bool = True
    kanji_open_close: bool = True
    # 既定パイプラインには含めない。統合側で有効化する
    particle_repetition: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "CalibrationSettings":
        """未知のキーは無視する。値が真偽値でなければ CalibrationError。"""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for key, val in data.items():
            name = _snake(str(key))
            if name not in known:
                continue
            if not isinstance(val, bool):
                raise CalibrationError(f"setting {key!r} must be true or false, got {val!r}")
            values[name] = val
        return cls(**values)

    def disabled_lint_rules(self) -> List[str]:
        return [rule for attr, rule in LINT_RULE_TOGGLES.items() if not getattr(self, attr)]


def load_settings(path: str | Path) -> CalibrationSettings:
    """pyproject.toml などの [tool.jacalibrate] を読み込む。テーブルが無ければ既定値。"""
    p = Path(path)
    try:
        with p.open("rb") as f:
            cfg = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise CalibrationError(f"failed to load settings {p}: {e}") from e
    tool = cfg.get("tool", {}) if isinstance(cfg, dict) else {}
    section = tool.get("jacalibrate", {}) if isinstance(tool, dict) else {}
    if not isinstance(section, dict):
        return CalibrationSettings()
    # lint サブテーブルはルールエンジン側の設定
    flags = {k: v for k, v in section.items() if not isinstance(v, dict)}
    return CalibrationSettings.from_dict(flags)


__all__ = ["CalibrationSettings", "load_settings", "LINT_RULE_TOGGLES"]
