from pathlib import Path

import pytest

from jma_knowledge.archive import DictionaryArchive
from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import MissingResourceError, StructuralParseError
from jma_knowledge.pos_table import POSFormat, POSTable


@pytest.fixture
def pos_table(make_archive) -> POSTable:
    archive = DictionaryArchive()
    archive.open(make_archive() / "sys.bin")
    table = POSTable()
    table.load_config(archive, "pos-id.def", EncodingType.EUCJP)
    return table


def test_index_from_alpha_pos(pos_table: POSTable):
    assert pos_table.get_index_from_alpha_pos("N-USER") == 69
    assert pos_table.get_index_from_alpha_pos("N-GENERAL") == 38
    assert pos_table.get_index_from_alpha_pos("V-UNKNOWN") == -1


def test_get_pos_formats(pos_table: POSTable):
    assert pos_table.get_pos(41, POSFormat.FULL_CATEGORY) == "名詞,固有名詞,一般,*"
    assert pos_table.get_pos(41, POSFormat.DEFAULT) == "名詞-固有名詞-一般"
    assert pos_table.get_pos(41, POSFormat.ALPHABET) == "N-PROPER"
    assert pos_table.get_pos(0) is None


def test_get_pos_output(pos_table: POSTable):
    assert not pos_table.is_output_full_pos()
    assert pos_table.get_pos_output(38) == "名詞-一般"
    pos_table.set_output_full_pos(True)
    assert pos_table.is_output_full_pos()
    assert pos_table.get_pos_output(38) == "名詞,一般,*,*"
    pos_table.set_output_full_pos(False)
    assert pos_table.get_pos_output(38) == "名詞-一般"


def test_pos_count(pos_table: POSTable):
    assert len(pos_table) == 4
    assert pos_table.pos_count == 70


def test_mecab_style_rows_without_alpha_label():
    table = POSTable()
    table.parse("その他,間投,*,* 0\nフィラー,*,*,* 1\n")
    assert table.get_pos(1, POSFormat.DEFAULT) == "フィラー"
    assert table.get_pos(1, POSFormat.ALPHABET) is None


@pytest.mark.parametrize("text", ["名詞,一般,*,*\n", "名詞,一般,*,* N-GENERAL x\n", "a b c d\n"])
def test_invalid_rows(text: str):
    with pytest.raises(StructuralParseError):
        POSTable().parse(text)


def test_missing_pos_table(make_archive):
    archive = DictionaryArchive()
    archive.open(make_archive({"pos-id.def": None}) / "sys.bin")
    with pytest.raises(MissingResourceError):
        POSTable().load_config(archive, "pos-id.def", EncodingType.EUCJP)


def test_combine_rules(pos_table: POSTable, tmp_path: Path):
    path = tmp_path / "compound.def"
    path.write_bytes("# 人名 + 接尾\nN-PROPER N-PROPER N-SUFFIX-NAME\n".encode("euc_jp"))
    pos_table.load_combine_rule(path, EncodingType.EUCJP)
    assert pos_table.has_combine_rules()
    assert pos_table.get_combine_pos(41, 52) == 41
    assert pos_table.get_combine_pos(52, 41) == -1


def test_combine_rules_errors(pos_table: POSTable, tmp_path: Path):
    with pytest.raises(MissingResourceError):
        pos_table.load_combine_rule(tmp_path / "compound.def", EncodingType.EUCJP)

    path = tmp_path / "compound.def"
    path.write_bytes(b"N-PROPER N-UNKNOWN N-SUFFIX-NAME\n")
    with pytest.raises(StructuralParseError):
        pos_table.load_combine_rule(path, EncodingType.EUCJP)
    assert not pos_table.has_combine_rules()


def test_combine_rules_unreadable_file(pos_table: POSTable, tmp_path: Path):
    """ディレクトリなど読み込めないパスはファイルが存在しない場合と同様に扱う"""
    path = tmp_path / "compound.def"
    path.mkdir()
    with pytest.raises(MissingResourceError):
        pos_table.load_combine_rule(path, EncodingType.EUCJP)
    assert not pos_table.has_combine_rules()
