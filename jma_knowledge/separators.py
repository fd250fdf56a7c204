"""
文区切り文字の集合。

区切り文字は 1 文字のバイト列をビッグエンディアンで詰めた整数として、
バイト数 (1 ~ 4) ごとの集合に格納される。
"""

from __future__ import annotations

from pathlib import Path

from jma_knowledge.constants import EncodingType
from jma_knowledge.ctype import CharacterClassifier
from jma_knowledge.exceptions import EncodingInconsistencyError, MissingResourceError
from jma_knowledge.logging import logger


MAX_SEPARATOR_BYTES = 4


class SeparatorSet:
    def __init__(self) -> None:
        self._sets: dict[int, set[int]] = {
            width: set() for width in range(1, MAX_SEPARATOR_BYTES + 1)
        }

    def __len__(self) -> int:
        return sum(len(s) for s in self._sets.values())

    @staticmethod
    def occupied_bytes(value: int) -> int:
        """
        整数を格納するのに必要なバイト数 (1 ~ 4) を返す。

        Raises:
            EncodingInconsistencyError: 4 バイトを超える値の場合
        """

        if value < 0:
            raise ValueError(f"Separator value must be non-negative: {value}")
        width = max(1, (value.bit_length() + 7) // 8)
        if width > MAX_SEPARATOR_BYTES:
            raise EncodingInconsistencyError(
                f"Cannot handle character longer than {MAX_SEPARATOR_BYTES} bytes: 0x{value:X}"
            )
        return width

    @staticmethod
    def pack(char: bytes) -> int:
        """1 文字分のバイト列をビッグエンディアンの整数に変換する"""
        if not 1 <= len(char) <= MAX_SEPARATOR_BYTES:
            raise EncodingInconsistencyError(
                f"Cannot handle character of {len(char)} bytes: {char!r}"
            )
        return int.from_bytes(char, "big")

    def add(self, value: int) -> bool:
        """
        区切り文字を追加する。

        Returns:
            bool: 新たに追加された場合は True、既に含まれていた場合は False
        """

        target = self._sets[self.occupied_bytes(value)]
        if value in target:
            return False
        target.add(value)
        return True

    def contains(self, value: int, width: int) -> bool:
        """width バイトの文字を詰めた整数 value が区切り文字かどうかを返す"""
        target = self._sets.get(width)
        return target is not None and value in target

    def contains_char(self, char: bytes) -> bool:
        return self.contains(self.pack(char), len(char))

    def clear(self) -> None:
        for s in self._sets.values():
            s.clear()


def load_separator_config(
    path: str | Path,
    classifier: CharacterClassifier,
    source_encoding: EncodingType | None = None,
) -> SeparatorSet:
    """
    文区切り文字の設定ファイルを読み込み、新しい SeparatorSet を返す。
    設定ファイルは 1 行に 1 文字を記述し、空行と "#" で始まる行は無視される。
    各文字は classifier の文字コードに変換した上で整数に詰められる。

    Args:
        path (str | Path): 設定ファイルのパス
        classifier (CharacterClassifier): 変換先の文字コードの分類器
        source_encoding (EncodingType | None, optional): 設定ファイルの文字コード。
            未指定時は classifier の文字コードとみなす. Defaults to None.

    Returns:
        SeparatorSet: 設定ファイルの内容だけを含む区切り文字の集合

    Raises:
        MissingResourceError: ファイルが存在しない・読み込めない場合
    """

    path = Path(path)
    source_encoding = source_encoding or classifier.encoding
    try:
        text = path.read_bytes().decode(source_encoding.codec)
    except OSError as ex:
        raise MissingResourceError(f"Cannot open file: {path}") from ex
    except UnicodeDecodeError as ex:
        raise MissingResourceError(
            f"Cannot read {path} as {source_encoding.value}: {ex}"
        ) from ex

    separators = SeparatorSet()
    for line in text.split("\n"):
        line = line.split("\r", 1)[0]
        if not line or line[0] == "#":
            continue

        try:
            data = classifier.encode(line[0])
        except UnicodeEncodeError:
            logger.warning(
                f"Separator {line[0]!r} cannot be encoded in {classifier.encoding.value}, ignored"
            )
            continue
        if len(line) > 1:
            logger.warning(f"Only the first character is used as separator in line: {line}")

        width = classifier.byte_width(data)
        separators.add(separators.pack(data[:width]))

    logger.debug(f"{len(separators)} sentence separators are loaded from {path}")
    return separators
