import asyncio
import threading

import pytest

from conftest import StubTokenizer
from jacalibrate.errors import CalibrationError, LintConfigError, NotInitialized, TokenizerBuildError
from jacalibrate.models import KANJI_OPEN_CLOSE, PARTICLE_REPETITION, TEXTLINT
from jacalibrate.service import CalibrationService


def _init(service, project):
    asyncio.run(service.initialize("dummy-dict", project))


def test_requires_initialize(stub_service):
    assert not stub_service.is_ready
    for call in (
        stub_service.analyze,
        stub_service.analyze_frequency,
        stub_service.analyze_consistency,
        stub_service.analyze_external_lint,
        stub_service.analyze_particle_repetition,
    ):
        with pytest.raises(NotInitialized):
            call("これは事実だ。")


def test_concurrent_initialize_builds_once(tmp_path):
    calls = []

    def factory(path, backend):
        calls.append((path, backend))
        return StubTokenizer()

    service = CalibrationService(tokenizer_factory=factory)

    async def run():
        await asyncio.gather(*(service.initialize("dummy-dict", tmp_path) for _ in range(5)))
        await service.initialize("dummy-dict", tmp_path)

    asyncio.run(run())
    assert calls == [("dummy-dict", "auto")]
    assert service.is_ready and service.lint_enabled


def test_tokenizer_failure_can_be_retried(tmp_path):
    attempts = []

    def factory(path, backend):
        attempts.append(path)
        if len(attempts) == 1:
            raise OSError("dictionary is broken")
        return StubTokenizer()

    service = CalibrationService(tokenizer_factory=factory)
    with pytest.raises(TokenizerBuildError):
        _init(service, tmp_path)
    assert not service.is_ready
    _init(service, tmp_path)
    assert service.is_ready
    assert len(attempts) == 2


def test_tokenizer_build_error_passes_through(tmp_path):
    def factory(path, backend):
        raise TokenizerBuildError("dictionary not found: x")

    service = CalibrationService(tokenizer_factory=factory)
    with pytest.raises(TokenizerBuildError, match="dictionary not found"):
        _init(service, tmp_path)


def test_particle_scenario(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    issues = stub_service.analyze_particle_repetition("彼の部屋の本の表紙。")
    assert len(issues) == 1
    issue = issues[0]
    assert issue.type == PARTICLE_REPETITION
    assert issue.id == "particle-1-の"
    assert [r.start_column for r in issue.ranges] == [2, 5, 7]


def test_consistency_scenario(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    result = stub_service.analyze("これは事実だ。")
    assert [(i.type, i.suggestion) for i in result.issues] == [(KANJI_OPEN_CLOSE, "こと")]


def test_particle_repetition_is_opt_in(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    text = "彼の部屋の本の表紙。"
    assert stub_service.analyze(text).issues == []
    issues = stub_service.analyze(text, {"particleRepetition": True}).issues
    assert [i.type for i in issues] == [PARTICLE_REPETITION]


def test_analyze_order_and_toggles(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    text = "事を見れる。\n猫のの庭"
    issues = stub_service.analyze(text).issues
    assert [i.type for i in issues] == [KANJI_OPEN_CLOSE, TEXTLINT, TEXTLINT]
    assert [i.source for i in issues[1:]] == ["no-dropping-the-ra", "no-doubled-joshi"]

    issues = stub_service.analyze(text, {"noDoubledJoshi": False, "kanjiOpenClose": False}).issues
    assert [i.source for i in issues] == ["no-dropping-the-ra"]
    assert stub_service.analyze(text, {"textlint": False}).issues[0].type == KANJI_OPEN_CLOSE
    assert len(stub_service.analyze(text, {"textlint": False}).issues) == 1


def test_external_lint_honours_settings(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    assert [i.source for i in stub_service.analyze_external_lint("見れる")] == ["no-dropping-the-ra"]
    assert stub_service.analyze_external_lint("見れる", {"noDroppingTheRa": False}) == []


def test_bom_does_not_shift_positions(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    plain = stub_service.analyze("これは事実だ。").to_dict()
    with_bom = stub_service.analyze("\ufeffこれは事実だ。").to_dict()
    assert plain == with_bom


def test_graceful_degradation_on_bad_lint_config(stub_service, tmp_path, caplog):
    (tmp_path / ".jacalibrate.yml").write_text("rules:\n  no-such-rule: true\n", encoding="utf-8")
    _init(stub_service, tmp_path)
    assert stub_service.is_ready
    assert not stub_service.lint_enabled
    assert "external lint disabled" in caplog.text

    result = stub_service.analyze("子猫が学校を見る事。見れる")
    assert [f.word for f in result.frequency] == ["子猫", "学校", "見る"]
    assert [i.type for i in result.issues] == [KANJI_OPEN_CLOSE]
    assert stub_service.analyze_external_lint("見れる") == []


def test_reload_swaps_rules(stub_service, tmp_path):
    async def run():
        await stub_service.initialize("dummy-dict", tmp_path)
        before = stub_service.analyze_external_lint("見て下さい")
        (tmp_path / "kanji-rules.txt").write_text("下さい=ください\n", encoding="utf-8")
        ok = await stub_service.reload_external_lint_config(tmp_path)
        after = stub_service.analyze_external_lint("見て下さい")
        return before, ok, after

    before, ok, after = asyncio.run(run())
    assert before == []
    assert ok
    assert [i.suggestion for i in after] == ["ください"]


def test_reload_failure_disables_then_recovers(stub_service, tmp_path):
    cfg = tmp_path / ".jacalibrate.yml"

    async def run():
        await stub_service.initialize("dummy-dict", tmp_path)
        cfg.write_text("rules: [broken\n", encoding="utf-8")
        failed = await stub_service.reload_external_lint_config(tmp_path)
        disabled = stub_service.lint_enabled
        cfg.write_text("rules:\n  ja-spacing: false\n", encoding="utf-8")
        recovered = await stub_service.reload_external_lint_config(tmp_path)
        return failed, disabled, recovered

    failed, disabled, recovered = asyncio.run(run())
    assert (failed, disabled, recovered) == (False, False, True)
    assert stub_service.lint_enabled
    # 辞書は作り直さない
    assert stub_service.is_ready


def test_custom_engine_factory(tmp_path):
    def engine_factory(project):
        raise LintConfigError("broken")

    service = CalibrationService(
        tokenizer_factory=lambda path, backend: StubTokenizer(),
        engine_factory=engine_factory,
    )
    _init(service, None)
    assert not service.lint_enabled
    assert service.analyze("事").issues[0].suggestion == "こと"


def test_string_flag_is_not_treated_as_true(stub_service, tmp_path):
    _init(stub_service, tmp_path)
    with pytest.raises(CalibrationError):
        stub_service.analyze("事", {"kanjiOpenClose": "false"})
    assert stub_service.analyze("事", {"kanjiOpenClose": False}).issues == []


def test_reload_during_initialize_is_not_overwritten(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    for path, rule in ((first, "ja-spacing"), (second, "no-doubled-joshi")):
        path.mkdir()
        (path / ".jacalibrate.yml").write_text(f"preset: false\nrules:\n  {rule}: true\n", encoding="utf-8")
    gate = threading.Event()

    def slow_factory(path, backend):
        gate.wait(5)
        return StubTokenizer()

    service = CalibrationService(tokenizer_factory=slow_factory)

    async def run():
        init = asyncio.ensure_future(service.initialize("dummy-dict", first))
        await asyncio.sleep(0)
        reload = asyncio.ensure_future(service.reload_external_lint_config(second))
        await asyncio.sleep(0.1)
        assert not reload.done()
        gate.set()
        await init
        return await reload

    assert asyncio.run(run())
    assert [i.source for i in service.analyze_external_lint("私のの本 です")] == ["no-doubled-joshi"]
