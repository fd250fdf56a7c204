"""
品詞 (POS) テーブル。

pos-id.def の各行は "<品詞の全階層> [<英字ラベル>] <インデックス>" の形式で、
例えば "名詞,固有名詞,人名,姓 N-PROPER-SURNAME 41" のように記述される。
英字ラベルを省略した MeCab 標準の "<品詞の全階層> <インデックス>" 形式も受け付ける。
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from jma_knowledge.config_table import iter_table_rows, read_text_resource
from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import MissingResourceError, StructuralParseError
from jma_knowledge.logging import logger


if TYPE_CHECKING:
    from jma_knowledge.archive import DictionaryArchive


class POSFormat(enum.Enum):
    """品詞文字列の出力形式"""

    # "名詞-固有名詞-人名-姓" のように "*" 以外の階層を "-" で連結した形式
    DEFAULT = "default"
    # "N-PROPER-SURNAME" のような英字ラベル
    ALPHABET = "alphabet"
    # "名詞,固有名詞,人名,姓" のような全階層
    FULL_CATEGORY = "full"


@dataclass(frozen=True)
class POSEntry:
    index: int
    full_category: str
    alpha: str | None

    @property
    def abbreviation(self) -> str:
        parts = [p for p in self.full_category.split(",") if p and p != "*"]
        return "-".join(parts)


class POSTable:
    def __init__(self) -> None:
        self._entries: dict[int, POSEntry] = {}
        self._alpha_to_index: dict[str, int] = {}
        # (前の品詞, 後ろの品詞) => 結合後の品詞
        self._combine_rules: dict[tuple[int, int], int] = {}
        self._output_full_pos = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def pos_count(self) -> int:
        """品詞インデックスの数 (最大のインデックス + 1)"""
        return max(self._entries) + 1 if self._entries else 0

    def load_config(
        self, archive: DictionaryArchive, name: str, encoding: EncodingType
    ) -> None:
        """
        アーカイブ内の pos-id.def を読み込む。読み込み前の内容は破棄される。

        Args:
            archive (DictionaryArchive): 読み込み元のアーカイブ
            name (str): リソース名
            encoding (EncodingType): pos-id.def の文字コード

        Raises:
            MissingResourceError: リソースが存在しない場合
            StructuralParseError: 書式が不正な行がある場合
        """

        text = read_text_resource(archive, name, encoding)
        self.parse(text, name)

    def parse(self, text: str, name: str = "<string>") -> None:
        self._entries.clear()
        self._alpha_to_index.clear()
        self._combine_rules.clear()

        for line_no, fields in iter_table_rows(text):
            if len(fields) not in (2, 3):
                raise StructuralParseError(
                    f"Format error in {name} (line {line_no}): {' '.join(fields)}"
                )
            try:
                index = int(fields[-1])
            except ValueError as ex:
                raise StructuralParseError(
                    f"Invalid POS index in {name} (line {line_no}): {fields[-1]}"
                ) from ex
            if index < 0:
                raise StructuralParseError(
                    f"Negative POS index in {name} (line {line_no}): {index}"
                )

            alpha = fields[1] if len(fields) == 3 else None
            self._entries[index] = POSEntry(index, fields[0], alpha)
            if alpha is not None:
                self._alpha_to_index[alpha] = index

        logger.debug(f"{len(self._entries)} POS tags are loaded from {name}")

    def load_combine_rule(self, path: Path, encoding: EncodingType) -> None:
        """
        品詞の結合ルールファイル (compound.def) を読み込む。
        各行は "<結合後の英字ラベル> <前の英字ラベル> <後ろの英字ラベル>" の形式。

        Raises:
            MissingResourceError: ファイルが存在しない・読み込めない場合
            StructuralParseError: 書式が不正な行や未知の品詞ラベルがある場合
        """

        self._combine_rules.clear()
        try:
            text = path.read_bytes().decode(encoding.codec)
        except FileNotFoundError as ex:
            raise MissingResourceError(f"Cannot find POS combine rule file: {path}") from ex
        except OSError as ex:
            raise MissingResourceError(f"Cannot read POS combine rule file {path}: {ex}") from ex
        except UnicodeDecodeError as ex:
            raise StructuralParseError(f"Cannot decode {path} as {encoding.value}") from ex

        rules: dict[tuple[int, int], int] = {}
        for line_no, fields in iter_table_rows(text):
            if len(fields) != 3:
                raise StructuralParseError(
                    f"Format error in {path} (line {line_no}): {' '.join(fields)}"
                )
            indices = [self.get_index_from_alpha_pos(f) for f in fields]
            if -1 in indices:
                raise StructuralParseError(
                    f"Unknown POS label in {path} (line {line_no}): {' '.join(fields)}"
                )
            target, first, second = indices
            rules[(first, second)] = target

        self._combine_rules = rules

    def get_index_from_alpha_pos(self, alpha: str) -> int:
        """英字ラベルから品詞インデックスを取得する。見つからない場合は -1 を返す"""
        return self._alpha_to_index.get(alpha, -1)

    def get_pos(self, index: int, format: POSFormat = POSFormat.DEFAULT) -> str | None:
        """
        品詞インデックスから指定された形式の品詞文字列を取得する。

        Args:
            index (int): 品詞インデックス
            format (POSFormat, optional): 出力形式. Defaults to POSFormat.DEFAULT.

        Returns:
            str | None: 品詞文字列。インデックスが未定義、または英字ラベルが未定義の場合は None
        """

        entry = self._entries.get(index)
        if entry is None:
            return None
        if format == POSFormat.FULL_CATEGORY:
            return entry.full_category
        if format == POSFormat.ALPHABET:
            return entry.alpha
        return entry.abbreviation

    def set_output_full_pos(self, flag: bool) -> None:
        """get_pos_output() で全階層の品詞文字列を出力するかどうかを設定する"""
        self._output_full_pos = flag

    def is_output_full_pos(self) -> bool:
        return self._output_full_pos

    def get_pos_output(self, index: int) -> str | None:
        """set_output_full_pos() の設定に応じた形式で品詞文字列を取得する"""
        if self._output_full_pos:
            return self.get_pos(index, POSFormat.FULL_CATEGORY)
        return self.get_pos(index, POSFormat.DEFAULT)

    def get_combine_pos(self, first: int, second: int) -> int:
        """
        連続する 2 つの品詞の結合後の品詞インデックスを返す。
        結合ルールが定義されていない場合は -1 を返す。
        """

        return self._combine_rules.get((first, second), -1)

    def has_combine_rules(self) -> bool:
        return bool(self._combine_rules)
