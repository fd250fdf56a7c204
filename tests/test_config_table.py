import pytest

from jma_knowledge.archive import DictionaryArchive
from jma_knowledge.config_table import iter_table_rows, load_config, parse_config_text
from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import MissingResourceError, StructuralParseError


def test_parse_key_value():
    """key の末尾と value の先頭の空白が取り除かれる"""
    entries = parse_config_text("cost-factor = 800\nbos-feature=BOS/EOS,*,*\r\nkey\t=  value  \n")
    assert entries == {
        "cost-factor": "800",
        "bos-feature": "BOS/EOS,*,*",
        "key": "value  ",
    }


def test_comments_and_blank_lines_are_ignored():
    text = "; comment\n# another = comment\n\n\r\nkey = value\n"
    assert parse_config_text(text) == {"key": "value"}
    assert parse_config_text("; only = comment\n#\n\n") == {}


def test_value_may_contain_equal_sign():
    assert parse_config_text("node-format = %m=%f[0]\n") == {"node-format": "%m=%f[0]"}


def test_line_without_equal_sign_fails():
    """"=" を含まない行があればファイル全体の解析が失敗する"""
    with pytest.raises(StructuralParseError):
        parse_config_text("good = 1\nbroken line\nother = 2\n")


@pytest.mark.parametrize(
    "key, value",
    [("base-form-feature-offset", "6"), ("user-noun-pos", "N-USER"), ("bos-feature", "BOS/EOS,*,*,*")],
)
def test_round_trip(key: str, value: str):
    """解析結果を再度 key=value に書き出して解析しても同じ結果になる"""
    entries = parse_config_text(f"{key} = {value}\n")
    serialized = "\n".join(f"{k}={v}" for k, v in entries.items())
    assert parse_config_text(serialized) == entries == {key: value}


def test_load_config_from_archive(make_archive):
    archive = DictionaryArchive()
    archive.open(make_archive() / "sys.bin")
    entries = load_config(archive, "dicrc", EncodingType.EUCJP)
    assert entries["cost-factor"] == "800"
    assert entries["user-noun-pos"] == "N-USER"


def test_load_config_missing_resource(make_archive):
    """リソースが存在しない場合は書式エラーとは別の例外になる"""
    archive = DictionaryArchive()
    archive.open(make_archive({"dicrc": None}) / "sys.bin")
    with pytest.raises(MissingResourceError):
        load_config(archive, "dicrc", EncodingType.EUCJP)


def test_iter_table_rows():
    rows = list(iter_table_rows("# comment\nあ ア\n\n; x\nい\tイ\r\n"))
    assert rows == [(2, ["あ", "ア"]), (5, ["い", "イ"])]
