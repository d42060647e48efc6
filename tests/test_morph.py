import pytest

from jacalibrate.errors import TokenizerBuildError
from jacalibrate.morph import align_tokens, available_backends, build_tokenizer


def test_align_fills_skipped_whitespace():
    tokens = align_tokens("猫\n が", [("猫", "名詞", "一般"), ("が", "助詞", "格助詞")])
    assert [(t.surface, t.part_of_speech, t.pos_detail, t.position) for t in tokens] == [
        ("猫", "名詞", "一般", 1),
        ("\n ", "記号", "空白", 2),
        ("が", "助詞", "格助詞", 4),
    ]


def test_align_trailing_gap_and_empty_pieces():
    tokens = align_tokens("本。\n", [("", "記号", "*"), ("本", "名詞", "一般"), ("。", "記号", "句点")])
    assert [t.surface for t in tokens] == ["本", "。", "\n"]
    assert tokens[-1].offset == 2


def test_available_backends():
    assert available_backends()[0] == "janome"


def test_unknown_backend(tmp_path):
    with pytest.raises(TokenizerBuildError, match="unknown tokenizer backend"):
        build_tokenizer(str(tmp_path), backend="sudachi")


def test_missing_dictionary(tmp_path):
    with pytest.raises(TokenizerBuildError, match="dictionary not found"):
        build_tokenizer(str(tmp_path / "nope"))


def test_janome_rejects_non_csv_file(tmp_path):
    path = tmp_path / "dict.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(TokenizerBuildError):
        build_tokenizer(str(path))


def test_fugashi_requires_directory(tmp_path):
    path = tmp_path / "dict.csv"
    path.write_text("x", encoding="utf-8")
    # fugashi が無い場合も同じ例外
    with pytest.raises(TokenizerBuildError):
        build_tokenizer(str(path), backend="fugashi")
