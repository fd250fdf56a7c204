import pytest

from jma_knowledge.constants import EncodingType
from jma_knowledge.ctype import CharacterClassifier
from jma_knowledge.exceptions import EncodingInconsistencyError


@pytest.mark.parametrize("encoding", list(EncodingType))
def test_ascii_is_single_byte(encoding: EncodingType):
    """ASCII の文字はどの文字コードでも 1 バイト"""
    classifier = CharacterClassifier(encoding)
    assert classifier.byte_width(b"a") == 1
    assert classifier.byte_width(b" ") == 1


@pytest.mark.parametrize("encoding", list(EncodingType))
def test_end_of_string(encoding: EncodingType):
    """終端とヌル文字では 0 を返す"""
    classifier = CharacterClassifier(encoding)
    assert classifier.byte_width(b"") == 0
    assert classifier.byte_width(b"\x00abc") == 0
    assert classifier.byte_width(b"ab", 2) == 0


def test_eucjp_widths():
    classifier = CharacterClassifier(EncodingType.EUCJP)
    assert classifier.byte_width("本".encode("euc_jp")) == 2
    assert classifier.byte_width(b"\xa4\xa2") == 2  # あ
    # 半角カナ (0x8E) は 2 バイト、JIS X 0212 (0x8F) は 3 バイト
    assert classifier.byte_width("ｱ".encode("euc_jp")) == 2
    assert classifier.byte_width(b"\x8f\xb0\xa1") == 3


def test_sjis_widths():
    classifier = CharacterClassifier(EncodingType.SJIS)
    assert classifier.byte_width("本".encode("shift_jis")) == 2
    # 半角カナは 1 バイト
    assert classifier.byte_width("ｱ".encode("shift_jis")) == 1


def test_utf8_widths():
    classifier = CharacterClassifier(EncodingType.UTF8)
    assert classifier.byte_width("é".encode()) == 2
    assert classifier.byte_width("本".encode()) == 3
    assert classifier.byte_width("😀".encode()) == 4


def test_width_past_end_is_fatal():
    """宣言されたバイト数が終端・ヌル文字を越える場合は致命的なエラー"""
    classifier = CharacterClassifier(EncodingType.EUCJP)
    with pytest.raises(EncodingInconsistencyError):
        classifier.byte_width(b"\xa4")
    with pytest.raises(EncodingInconsistencyError):
        classifier.byte_width(b"\xa4\x00")
    with pytest.raises(EncodingInconsistencyError):
        CharacterClassifier(EncodingType.UTF8).byte_width(b"\x80")


def test_iter_chars():
    classifier = CharacterClassifier(EncodingType.EUCJP)
    data = "本田a総".encode("euc_jp")
    chars = [c.decode("euc_jp") for c in classifier.iter_chars(data)]
    assert chars == ["本", "田", "a", "総"]


def test_is_space():
    classifier = CharacterClassifier(EncodingType.EUCJP)
    assert classifier.is_space(" ")
    assert classifier.is_space(" \t　")
    assert classifier.is_space("　".encode("euc_jp"))
    assert not classifier.is_space("")
    assert not classifier.is_space(" a ")
    assert not classifier.is_space("本")
