"""
辞書アーカイブに格納されたテキストリソース (dicrc や *.def) の読み込み処理。
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import MissingResourceError, StructuralParseError
from jma_knowledge.logging import logger


if TYPE_CHECKING:
    from jma_knowledge.archive import DictionaryArchive


def read_text_resource(
    archive: DictionaryArchive, name: str, encoding: EncodingType
) -> str:
    """
    アーカイブ内のテキストリソースを読み込み、文字列にデコードする。

    Args:
        archive (DictionaryArchive): 読み込み元のアーカイブ
        name (str): リソース名
        encoding (EncodingType): リソースの文字コード

    Returns:
        str: デコードされたテキスト

    Raises:
        MissingResourceError: リソースがアーカイブ内に存在しない場合
        StructuralParseError: リソースを指定された文字コードでデコードできない場合
    """

    data = archive.read_resource(name)
    if data is None:
        raise MissingResourceError(f"Cannot find configuration file: {name}")

    try:
        return data.decode(encoding.codec)
    except UnicodeDecodeError as ex:
        raise StructuralParseError(
            f"Cannot decode configuration file {name} as {encoding.value}: {ex}"
        ) from ex


def iter_lines(text: str) -> Iterator[str]:
    """
    テキストを 1 行ずつ返す。
    キャリッジリターン以降は取り除かれ、空行と ";" "#" で始まるコメント行はスキップされる。
    """

    for line in text.split("\n"):
        line = line.split("\r", 1)[0]
        if not line or line[0] in ";#":
            continue
        yield line


def parse_config_text(text: str, name: str = "<string>") -> dict[str, str]:
    """
    key = value 形式の設定テキストを解析する。
    key は "=" より前の末尾の空白を、value は "=" より後の先頭の空白を取り除いたもの。

    Args:
        text (str): 設定テキスト
        name (str, optional): エラーメッセージに利用するリソース名. Defaults to "<string>".

    Returns:
        dict[str, str]: key と value の辞書

    Raises:
        StructuralParseError: "=" を含まない行が存在する場合
    """

    entries: dict[str, str] = {}
    for line in iter_lines(text):
        key, separator, value = line.partition("=")
        if not separator:
            raise StructuralParseError(
                f"Format error in configuration file: {name}, line: {line}"
            )
        entries[key.rstrip()] = value.lstrip()

    logger.debug(f"{len(entries)} entries are loaded from {name}")
    return entries


def load_config(
    archive: DictionaryArchive, name: str, encoding: EncodingType
) -> dict[str, str]:
    """
    アーカイブ内の key = value 形式の設定ファイルを読み込む。
    リソースが存在しない場合 (MissingResourceError) と書式が不正な場合 (StructuralParseError) は
    異なる例外として送出されるため、呼び出し元でファイルが必須かどうかに応じて扱いを決める。
    """

    return parse_config_text(read_text_resource(archive, name, encoding), name)


def iter_table_rows(text: str) -> Iterator[tuple[int, list[str]]]:
    """
    行単位のマッピングファイル (pos-id.def, map-*.def, compound.def) の各行を
    空白区切りのフィールドに分割して返す。

    Yields:
        tuple[int, list[str]]: 1 から始まる行番号とフィールドのリスト
    """

    for line_no, line in enumerate(text.split("\n"), start=1):
        line = line.split("\r", 1)[0]
        if not line or line[0] in ";#":
            continue
        fields = line.split()
        if fields:
            yield line_no, fields
