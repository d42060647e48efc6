import pytest

from jacalibrate.morph import align_tokens
from jacalibrate.service import CalibrationService

# テスト用の最長一致辞書: 表層形 -> (品詞, 細分類)
LEXICON = {
    "彼": ("名詞", "代名詞"),
    "部屋": ("名詞", "一般"),
    "本": ("名詞", "一般"),
    "表紙": ("名詞", "一般"),
    "これ": ("名詞", "代名詞"),
    "事": ("名詞", "非自立"),
    "実": ("名詞", "一般"),
    "時": ("名詞", "非自立"),
    "殆ど": ("副詞", "一般"),
    "猫": ("名詞", "一般"),
    "子猫": ("名詞", "一般"),
    "庭": ("名詞", "一般"),
    "学校": ("名詞", "一般"),
    "三": ("名詞", "数"),
    "つ": ("名詞", "接尾"),
    "見る": ("動詞", "自立"),
    "走る": ("動詞", "自立"),
    "美しい": ("形容詞", "自立"),
    "とても": ("副詞", "一般"),
    "の": ("助詞", "連体化"),
    "が": ("助詞", "格助詞"),
    "に": ("助詞", "格助詞"),
    "を": ("助詞", "格助詞"),
    "で": ("助詞", "格助詞"),
    "は": ("助詞", "係助詞"),
    "だ": ("助動詞", "*"),
    "。": ("記号", "句点"),
    "！": ("記号", "一般"),
    "？": ("記号", "一般"),
    "、": ("記号", "読点"),
    "\n": ("記号", "空白"),
}


class StubTokenizer:
    """LEXICON による最長一致分割。未知の文字は1文字ずつ記号扱い。"""

    backend = "stub"

    def __init__(self, lexicon=None):
        self.lexicon = lexicon or LEXICON
        self.longest = max(len(k) for k in self.lexicon)

    def tokenize(self, text):
        pieces = []
        i = 0
        while i < len(text):
            for n in range(min(self.longest, len(text) - i), 0, -1):
                surf = text[i:i + n]
                if surf in self.lexicon:
                    pos, detail = self.lexicon[surf]
                    pieces.append((surf, pos, detail))
                    i += n
                    break
            else:
                pieces.append((text[i], "記号", "一般"))
                i += 1
        return align_tokens(text, pieces)


@pytest.fixture
def stub_tokenizer():
    return StubTokenizer()


@pytest.fixture
def stub_service(tmp_path):
    """スタブ解析器 + tmp_path をプロジェクトとする初期化前のサービス。"""
    return CalibrationService(tokenizer_factory=lambda path, backend: StubTokenizer())
