"""
文字の変換テーブル (ひらがな・カタカナ / 半角・全角 / 小文字・大文字)。

map-*.def の各行は "<左の文字> <右の文字>" の形式で、例えば map-kana.def では
"あ ア" のようにひらがなとカタカナの対応を記述する。
半角カナの濁音 ("ｶﾞ") のように複数のコードポイントからなる文字も扱える。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jma_knowledge.config_table import iter_table_rows, read_text_resource
from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import StructuralParseError


if TYPE_CHECKING:
    from jma_knowledge.archive import DictionaryArchive


class CharTable:
    def __init__(self) -> None:
        self._to_right: dict[str, str] = {}
        self._to_left: dict[str, str] = {}
        self._max_right_key = 0
        self._max_left_key = 0

    def __len__(self) -> int:
        return len(self._to_right)

    def clear(self) -> None:
        self._to_right.clear()
        self._to_left.clear()
        self._max_right_key = 0
        self._max_left_key = 0

    def load_config(
        self, archive: DictionaryArchive, name: str, encoding: EncodingType
    ) -> None:
        """
        アーカイブ内の変換マップファイルを読み込む。読み込み前の内容は破棄される。

        Raises:
            MissingResourceError: リソースが存在しない場合
            StructuralParseError: 書式が不正な行がある場合
        """

        self.clear()
        text = read_text_resource(archive, name, encoding)
        self.parse(text, name)

    def parse(self, text: str, name: str = "<string>") -> None:
        self.clear()
        for line_no, fields in iter_table_rows(text):
            if len(fields) != 2:
                self.clear()
                raise StructuralParseError(
                    f"Format error in {name} (line {line_no}): {' '.join(fields)}"
                )
            left, right = fields
            self._to_right[left] = right
            # 逆方向は最初に現れた対応を優先する
            self._to_left.setdefault(right, left)

        self._max_right_key = max((len(k) for k in self._to_right), default=0)
        self._max_left_key = max((len(k) for k in self._to_left), default=0)

    def to_right(self, ch: str) -> str | None:
        """左の文字に対応する右の文字を返す。対応が定義されていない場合は None"""
        return self._to_right.get(ch)

    def to_left(self, ch: str) -> str | None:
        """右の文字に対応する左の文字を返す。対応が定義されていない場合は None"""
        return self._to_left.get(ch)

    def convert_to_right(self, text: str) -> str:
        """文字列全体を左から右へ変換する。対応のない文字はそのまま残る"""
        return _convert(text, self._to_right, self._max_right_key)

    def convert_to_left(self, text: str) -> str:
        """文字列全体を右から左へ変換する。対応のない文字はそのまま残る"""
        return _convert(text, self._to_left, self._max_left_key)


def _convert(text: str, mapping: dict[str, str], max_key: int) -> str:
    if not mapping:
        return text

    result: list[str] = []
    i = 0
    while i < len(text):
        # 最長一致で変換する
        for length in range(min(max_key, len(text) - i), 0, -1):
            converted = mapping.get(text[i : i + length])
            if converted is not None:
                result.append(converted)
                i += length
                break
        else:
            result.append(text[i])
            i += 1
    return "".join(result)
