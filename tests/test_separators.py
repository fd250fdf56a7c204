import pytest

from jma_knowledge.constants import EncodingType
from jma_knowledge.ctype import CharacterClassifier
from jma_knowledge.exceptions import EncodingInconsistencyError, MissingResourceError
from jma_knowledge.separators import SeparatorSet, load_separator_config


@pytest.mark.parametrize(
    "value, expected",
    [(0x00, 1), (0x2E, 1), (0xFF, 1), (0x100, 2), (0xA1A3, 2), (0x8FB0A1, 3), (0xF09F9880, 4)],
)
def test_occupied_bytes(value: int, expected: int):
    assert SeparatorSet.occupied_bytes(value) == expected


def test_occupied_bytes_over_four_bytes_is_fatal():
    with pytest.raises(EncodingInconsistencyError):
        SeparatorSet.occupied_bytes(0x1_0000_0000)


def test_add_and_contains():
    separators = SeparatorSet()
    assert separators.add(0xA1A3)  # 。 (EUC-JP)
    assert not separators.add(0xA1A3)
    assert separators.contains(0xA1A3, 2)
    assert not separators.contains(0xA1A3, 3)
    assert separators.contains_char("。".encode("euc_jp"))
    assert not separators.contains_char(b".")


def test_load_separator_config(write_text):
    path = write_text("seps.txt", "# 区切り文字\n。\n！\n.\n\n")
    classifier = CharacterClassifier(EncodingType.EUCJP)
    separators = load_separator_config(path, classifier)

    assert len(separators) == 3
    assert separators.contains_char("。".encode("euc_jp"))
    assert separators.contains_char("！".encode("euc_jp"))
    assert separators.contains_char(b".")
    assert not separators.contains_char("、".encode("euc_jp"))


def test_load_separator_config_converts_encoding(write_text):
    """設定ファイルの文字コードから分類器の文字コードに変換して格納する"""
    path = write_text("seps_utf8.txt", "。\n", EncodingType.UTF8)
    classifier = CharacterClassifier(EncodingType.SJIS)
    separators = load_separator_config(path, classifier, EncodingType.UTF8)
    assert separators.contains_char("。".encode("shift_jis"))
    assert not separators.contains_char("。".encode("utf-8"))


def test_load_separator_config_missing_file(tmp_path):
    with pytest.raises(MissingResourceError):
        load_separator_config(tmp_path / "none.txt", CharacterClassifier(EncodingType.EUCJP))
