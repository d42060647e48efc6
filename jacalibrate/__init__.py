"""jacalibrate
日本語原稿の文体校正エンジン。

主な提供機能:
- 内容語の出現頻度表(品詞フィルタ付き)
- 1文中の助詞の重複検出
- 漢字の開き(「事」→「こと」など)の推奨
- 設定駆動の外部ルールエンジン(ら抜き言葉/連続助詞/余白/プロジェクト辞書/LanguageTool)
- すべての指摘を行・桁(1始まり)の範囲付きで返す

使い方:
    service = CalibrationService()
    await service.initialize(dictionary_path, project_path)
    result = service.analyze(text, {"textlint": True, "kanjiOpenClose": True})
"""
from .errors import CalibrationError, LintConfigError, NotInitialized, TokenizerBuildError
from .models import AnalysisResult, FrequencyResult, Issue, Range, Token
from .position import PositionMapper
from .service import CalibrationService
from .settings import CalibrationSettings

__all__ = [
    "CalibrationService",
    "CalibrationSettings",
    "PositionMapper",
    "AnalysisResult",
    "FrequencyResult",
    "Issue",
    "Range",
    "Token",
    "CalibrationError",
    "NotInitialized",
    "TokenizerBuildError",
    "LintConfigError",
]

__version__ = "0.1.0"
