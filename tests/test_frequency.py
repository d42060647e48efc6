from jacalibrate.frequency import count_frequency
from jacalibrate.models import Token


def _tok(surface, pos, detail="一般", position=1):
    return Token(surface, pos, detail, position)


def test_counts_and_order(stub_tokenizer):
    text = "子猫が学校を見る。子猫が庭で走る。子猫が学校で見る。"
    result = count_frequency(stub_tokenizer.tokenize(text))
    words = {r.word: r for r in result}
    assert words["子猫"].count == 3
    assert words["学校"].count == 2
    assert words["見る"].count == 2
    assert words["走る"].count == 1
    assert result[0].word == "子猫"
    counts = [r.count for r in result]
    assert counts == sorted(counts, reverse=True)


def test_single_char_and_excluded_nouns_are_dropped(stub_tokenizer):
    # 猫/庭/本 は1文字、これ は代名詞、三 は数、つ は接尾
    text = "これは猫の本だ。三つの庭。とても美しい。"
    result = count_frequency(stub_tokenizer.tokenize(text))
    assert [r.word for r in result] == ["とても", "美しい"]
    assert all(r.count == 1 for r in result)


def test_excluded_detail_only_applies_to_nouns():
    tokens = [_tok("なさる", "動詞", "非自立"), _tok("ことば", "名詞", "非自立")]
    assert [r.word for r in count_frequency(tokens)] == ["なさる"]


def test_particles_and_symbols_are_not_counted():
    tokens = [_tok("から", "助詞"), _tok("……", "記号"), _tok("です", "助動詞")]
    assert count_frequency(tokens) == []


def test_first_seen_pos_wins():
    tokens = [_tok("明日", "名詞", "副詞可能"), _tok("明日", "副詞"), _tok("明日", "名詞")]
    result = count_frequency(tokens)
    assert len(result) == 1
    assert result[0].count == 3
    assert result[0].pos == "名詞"
