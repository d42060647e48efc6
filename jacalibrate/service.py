"""校正サービス(オーケストレータ)。

- initialize(): 形態素解析器の構築と外部ルール設定の読み込みを並行実行(1回だけ)
- analyze*(): テキストごとに独立した解析。共有するのは読み取り専用のバックエンドのみ
- reload_external_lint_config(): ルールエンジンだけを作り直して差し替える

インスタンスは呼び出し側が生成・保持する(エディタセッションごとに1つなど)。
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from .consistency import check_consistency
from .errors import NotInitialized, TokenizerBuildError
from .external_lint import ExternalLinter
from .frequency import count_frequency
from .lint_engine import LintEngine
from .models import AnalysisResult, FrequencyResult, Issue, Token
from .morph import Tokenizer, build_tokenizer
from .particles import check_particle_repetition
from .position import PositionMapper, strip_bom
from .settings import CalibrationSettings

logger = logging.getLogger(__name__)

SettingsLike = Union[CalibrationSettings, Mapping[str, Any], None]
TokenizerFactory = Callable[[str, str], Tokenizer]
EngineFactory = Callable[[Union[str, Path, None]], LintEngine]


def _coerce_settings(settings: SettingsLike) -> CalibrationSettings:
    if isinstance(settings, CalibrationSettings):
        return settings
    return CalibrationSettings.from_dict(settings)


class CalibrationService:
    def __init__(
        self,
        backend: str = "auto",
        tokenizer_factory: TokenizerFactory = build_tokenizer,
        engine_factory: EngineFactory = LintEngine.from_project,
    ):
        self._backend = backend
        self._tokenizer_factory = tokenizer_factory
        self._engine_factory = engine_factory
        self._tokenizer: Optional[Tokenizer] = None
        self._init_task: Optional[asyncio.Future] = None
        self._linter = ExternalLinter()
        self._reload_lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        return self._tokenizer is not None

    @property
    def lint_enabled(self) -> bool:
        return self._linter.enabled

    # ---- lifecycle -------------------------------------------------

    async def initialize(self, dictionary_path: str, project_path: str | Path | None = None) -> None:
        """バックエンドを構築する。並行呼び出しは同じ構築処理を待つ。

        形態素解析器の構築失敗は TokenizerBuildError として送出する。
        外部ルール設定の失敗はログに残し、外部ルールを無効化するだけ。
        """
        if self._tokenizer is not None:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize(dictionary_path, project_path))
        # 呼び出し元のキャンセルで共有の構築処理を止めない
        await asyncio.shield(self._init_task)

    async def _initialize(self, dictionary_path: str, project_path: str | Path | None) -> None:
        try:
            tok_res, lint_res = await asyncio.gather(
                asyncio.to_thread(self._tokenizer_factory, dictionary_path, self._backend),
                asyncio.to_thread(self._engine_factory, project_path),
                return_exceptions=True,
            )
            if isinstance(lint_res, Exception):
                logger.warning("failed to load lint config for %s: %s; external lint disabled", project_path, lint_res)
                self._linter.disable()
            elif not isinstance(lint_res, BaseException):
                self._linter.replace(lint_res)
            if isinstance(tok_res, TokenizerBuildError):
                logger.error("tokenizer initialization failed: %s", tok_res)
                raise tok_res
            if isinstance(tok_res, Exception):
                logger.error("tokenizer initialization failed: %s", tok_res)
                raise TokenizerBuildError(str(tok_res)) from tok_res
            if isinstance(tok_res, BaseException):
                raise tok_res
            self._tokenizer = tok_res
        finally:
            if self._tokenizer is None:
                # 失敗時は再試行できるようにする
                self._init_task = None

    async def reload_external_lint_config(self, project_path: str | Path | None) -> bool:
        """外部ルール設定だけを読み直す。成功すれば True。

        構築中の initialize があれば、その完了(成否は問わない)を待ってから差し替える。
        """
        init_task = self._init_task
        if init_task is not None and not init_task.done():
            await asyncio.wait({init_task})
        async with self._reload_lock:
            try:
                engine = await asyncio.to_thread(self._engine_factory, project_path)
            except Exception as e:
                logger.warning("failed to reload lint config for %s: %s; external lint disabled", project_path, e)
                self._linter.disable()
                return False
            self._linter.replace(engine)
            return True

    # ---- analysis --------------------------------------------------

    def _prepare(self, text: str) -> Tuple[List[Token], PositionMapper]:
        tokenizer = self._tokenizer
        if tokenizer is None:
            raise NotInitialized()
        clean = strip_bom(text)
        return tokenizer.tokenize(clean), PositionMapper(clean)

    def analyze_frequency(self, text: str) -> List[FrequencyResult]:
        tokens, _ = self._prepare(text)
        return count_frequency(tokens)

    def analyze_consistency(self, text: str) -> List[Issue]:
        tokens, mapper = self._prepare(text)
        return check_consistency(tokens, mapper)

    def analyze_particle_repetition(self, text: str) -> List[Issue]:
        tokens, mapper = self._prepare(text)
        return check_particle_repetition(tokens, mapper)

    def analyze_external_lint(self, text: str, settings: SettingsLike = None) -> List[Issue]:
        if self._tokenizer is None:
            raise NotInitialized()
        cfg = _coerce_settings(settings)
        return self._linter.lint(text, disabled_rules=cfg.disabled_lint_rules())

    def analyze(self, text: str, settings: SettingsLike = None) -> AnalysisResult:
        """頻度表と指摘一覧をまとめて返す。

        指摘は 漢字の開き + 外部ルール の順。助詞の重複は settings.particle_repetition が
        True の場合のみ末尾に加える。
        settings の値が真偽値でなければ CalibrationError。
        """
        cfg = _coerce_settings(settings)
        tokens, mapper = self._prepare(text)
        issues: List[Issue] = []
        if cfg.kanji_open_close:
            issues.extend(check_consistency(tokens, mapper))
        if cfg.textlint:
            issues.extend(self._linter.lint(text, disabled_rules=cfg.disabled_lint_rules()))
        if cfg.particle_repetition:
            issues.extend(check_particle_repetition(tokens, mapper))
        frequency = count_frequency(tokens)
        logger.debug("analyzed %d chars: %d issue(s), %d word(s)", len(text), len(issues), len(frequency))
        return AnalysisResult(frequency=frequency, issues=issues)


__all__ = ["CalibrationService"]
