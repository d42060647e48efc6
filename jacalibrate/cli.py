from __future__ import annotations
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from .errors import CalibrationError, TokenizerBuildError
from .file_scanner import iter_manuscripts, read_text
from .morph import BACKENDS, available_backends
from .service import CalibrationService
from .settings import CalibrationSettings, load_settings


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="jacalibrate",
        description="日本語原稿の文体校正(助詞の重複・漢字の開き・外部ルール)と頻出語の集計を行います"
    )
    p.add_argument("paths", nargs="+", help="走査するファイル/ディレクトリ(ディレクトリは .txt/.md のみ)")
    p.add_argument("--dict", dest="dictionary", required=True, metavar="PATH",
                   help="形態素解析辞書のパス(MeCab辞書ディレクトリ / ユーザー辞書 .csv / 任意のディレクトリで同梱辞書)")
    p.add_argument("--backend", choices=BACKENDS, default="auto", help="形態素解析器 (既定: auto)")
    p.add_argument("--project", help="外部ルール設定(.jacalibrate.yml, kanji-rules.txt)を探すディレクトリ (既定: カレント)")
    p.add_argument("--config", help="設定ファイル(TOML: pyproject.toml など)の [tool.jacalibrate] を読み込み、既定値を上書き")
    p.add_argument("--json", action="store_true", help="JSONで出力")
    p.add_argument("--frequency", action="store_true", help="頻出語を表示")
    p.add_argument("--top", type=int, default=20, help="頻出語の表示件数 (既定: 20)")
    p.add_argument("--particles", action="store_true", help="助詞の重複(1文中に同じ助詞3回以上)もチェック")
    p.add_argument("--no-textlint", action="store_true", help="外部ルールエンジンを使わない")
    p.add_argument("--no-kanji-open-close", action="store_true", help="漢字の開きチェックを行わない")
    p.add_argument("--fail-on-issue", action="store_true", help="問題が1件でもあれば終了コード1")
    p.add_argument("-v", "--verbose", action="store_true", help="詳細ログを表示")
    return p


def _resolve_settings(args: argparse.Namespace) -> CalibrationSettings:
    settings = CalibrationSettings()
    if args.config:
        cfg_path = Path(args.config)
        if cfg_path.is_file():
            try:
                settings = load_settings(cfg_path)
            except CalibrationError as e:
                print(f"[warn] failed to load config {cfg_path}: {e}", file=sys.stderr)
        else:
            print(f"[warn] config not found: {cfg_path}", file=sys.stderr)
    # CLI引数が最優先
    if args.particles:
        settings.particle_repetition = True
    if args.no_textlint:
        settings.textlint = False
    if args.no_kanji_open_close:
        settings.kanji_open_close = False
    return settings


def _format_issue(path: str, issue) -> str:
    r = issue.range
    # VS Code でクリック可能なリンクにするため file:line:col 形式
    line = f"{path}:{r.start_line}:{r.start_column}: [{issue.type}] {issue.message}"
    extra = []
    if issue.ranges and len(issue.ranges) > 1:
        extra.append("lines: " + ", ".join(str(x.start_line) for x in issue.ranges))
    if issue.suggestion:
        extra.append(f"suggest: {issue.suggestion}")
    if issue.source:
        extra.append(f"rule: {issue.source}")
    if extra:
        line += " | " + " | ".join(extra)
    return line


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    if args.backend == "fugashi" and "fugashi" not in available_backends():
        print("[warn] --backend fugashi が指定されましたが 'fugashi' が見つかりません。", file=sys.stderr)

    settings = _resolve_settings(args)
    project = Path(args.project) if args.project else Path.cwd()
    service = CalibrationService(backend=args.backend)
    try:
        asyncio.run(service.initialize(args.dictionary, project))
    except TokenizerBuildError as e:
        print(f"Failed to initialize tokenizer: {e}", file=sys.stderr)
        return 2
    if settings.textlint and not service.lint_enabled:
        print("[warn] 外部ルール設定の読み込みに失敗したため、外部ルールは無効化されます。", file=sys.stderr)

    total = 0
    results: List[Dict[str, Any]] = []
    for path in iter_manuscripts(args.paths):
        text = read_text(path)
        if text is None:
            print(f"[warn] skipped (unreadable): {path}", file=sys.stderr)
            continue
        result = service.analyze(text, settings)
        total += len(result.issues)
        if args.json:
            data = result.to_dict()
            data["frequency"] = data["frequency"][: args.top] if args.frequency else []
            results.append({"file": str(path), **data})
            continue
        for issue in result.issues:
            print(_format_issue(str(path), issue))
        if args.frequency:
            print(f"# {path}: top {args.top} words")
            for f in result.frequency[: args.top]:
                print(f"{f.word}\t{f.count}\t{f.pos}")

    if args.json:
        print(json.dumps(results, ensure_ascii=False, indent=2))
    elif total == 0:
        print("No issues found.")
    else:
        print(f"Total: {total} issue(s)")
    if args.fail_on_issue and total:
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
