from __future__ import annotations


class CalibrationError(Exception):
    """校正エンジン共通の例外。"""


class NotInitialized(CalibrationError):
    """initialize() 完了前に形態素解析を要する処理が呼ばれた。"""

    def __init__(self, message: str = "Tokenizer not initialized"):
        super().__init__(message)


class TokenizerBuildError(CalibrationError):
    """辞書パス不正・解析器未導入などで形態素解析器を構築できない。"""


class LintConfigError(CalibrationError, ValueError):
    """外部ルールエンジンの設定/ルールファイルが不正。"""


__all__ = ["CalibrationError", "NotInitialized", "TokenizerBuildError", "LintConfigError"]
