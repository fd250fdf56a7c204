"""
文字コードごとの文字種判定 (1 文字のバイト数・空白文字の判定)。

文字コードの種類は少なく閉じているため、文字コードごとのサブクラスは作らず、
CharacterClassifier の内部で文字コードに応じて判定処理を切り替える。
"""

from __future__ import annotations

from collections.abc import Iterator

from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import EncodingInconsistencyError


# 空白文字として扱う文字 (全角スペースを含む)
SPACE_CHARS = frozenset(" \t\n\r\f\v　")


class CharacterClassifier:
    """
    指定された文字コードのバイト列を 1 文字ずつ判定する。
    文字コードを変更する場合は新しいインスタンスを生成する。
    """

    def __init__(self, encoding: EncodingType) -> None:
        self.encoding = encoding

    def __repr__(self) -> str:
        return f"CharacterClassifier({self.encoding.value!r})"

    def byte_width(self, data: bytes, pos: int = 0) -> int:
        """
        data の pos の位置から始まる 1 文字のバイト数を返す。

        Args:
            data (bytes): この分類器の文字コードでエンコードされたバイト列
            pos (int, optional): 判定する文字の開始位置. Defaults to 0.

        Returns:
            int: 1 文字のバイト数 (1 ~ 4)。終端またはヌル文字の場合は 0

        Raises:
            EncodingInconsistencyError: 宣言されたバイト数が終端・ヌル文字を越える場合
        """

        if pos >= len(data) or data[pos] == 0:
            return 0

        lead = data[pos]

        # ASCII の範囲はどの文字コードでも 1 バイト
        if lead < 0x80:
            return 1

        if self.encoding == EncodingType.EUCJP:
            # 0x8F は JIS X 0212 の 3 バイト文字、それ以外 (0x8E の半角カナを含む) は 2 バイト
            width = 3 if lead == 0x8F else 2
        elif self.encoding == EncodingType.SJIS:
            # 0x81-0x9F, 0xE0-0xFC は 2 バイト文字の先頭バイト、0xA1-0xDF は半角カナ
            width = 2 if (0x81 <= lead <= 0x9F or 0xE0 <= lead <= 0xFC) else 1
        else:
            if lead >= 0xF0:
                width = 4
            elif lead >= 0xE0:
                width = 3
            elif lead >= 0xC0:
                width = 2
            else:
                raise EncodingInconsistencyError(
                    f"Unexpected continuation byte 0x{lead:02X} at offset {pos} for {self.encoding.value}"
                )

        trail = data[pos + 1 : pos + width]
        if len(trail) != width - 1 or 0 in trail:
            raise EncodingInconsistencyError(
                f"{width}-byte character at offset {pos} runs past the end of string, "
                f"the text may not be encoded in {self.encoding.value}"
            )
        return width

    def iter_chars(self, data: bytes) -> Iterator[bytes]:
        """
        バイト列を 1 文字ずつのバイト列に分割して返す。
        ヌル文字が現れた時点で終了する。

        Args:
            data (bytes): この分類器の文字コードでエンコードされたバイト列

        Yields:
            bytes: 1 文字分のバイト列
        """

        pos = 0
        while True:
            width = self.byte_width(data, pos)
            if width == 0:
                return
            yield data[pos : pos + width]
            pos += width

    def encode(self, text: str) -> bytes:
        """テキストをこの分類器の文字コードでエンコードする"""
        return text.encode(self.encoding.codec)

    def decode(self, data: bytes) -> str:
        """この分類器の文字コードのバイト列をテキストにデコードする"""
        return data.decode(self.encoding.codec)

    def is_space(self, word: str | bytes) -> bool:
        """
        文字列が空白文字のみで構成されているかどうかを返す。
        空文字列は空白とみなさない。

        Args:
            word (str | bytes): 判定する文字列 (bytes の場合はこの分類器の文字コードでデコードする)

        Returns:
            bool: 空白文字のみで構成されている場合は True
        """

        if isinstance(word, bytes):
            word = self.decode(word)
        return len(word) > 0 and all(ch in SPACE_CHARS for ch in word)
