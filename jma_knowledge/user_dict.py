"""
ユーザー辞書のテキストファイルを mecab-dict-index が受け付ける CSV 形式に変換する。

ユーザー辞書の各行は空白区切りで最大 3 つのトークンからなる:

    <単語> [<分割パターン または 読み>] [<読みパターン>]

    本田総一郎 2,3 ホンダ,ソウイチロウ

分割パターンは各形態素の文字数をカンマ区切りで並べたもので、上記の例では
"本田" (2 文字) と "総一郎" (3 文字) に分割される。読みパターンは各形態素の読みを
カンマ区切りで並べたもので、その要素数は分割パターンの要素数と一致しなければならない。
2 番目のトークンが数値でない場合は、単語全体の読みとして扱われる。
"""

from __future__ import annotations

import io
import itertools
import re
from dataclasses import dataclass, field
from pathlib import Path

from jma_knowledge.config import DictConfig, KnowledgeSettings
from jma_knowledge.constants import EncodingType
from jma_knowledge.ctype import CharacterClassifier
from jma_knowledge.exceptions import DecompositionError, KnowledgeError
from jma_knowledge.logging import logger
from jma_knowledge.pos_table import POSFormat, POSTable


_ASCII_SPACES = re.compile(r"[ \t\n\r\v\f]+")

@dataclass
class Morpheme:
    """ユーザー定義名詞を分割した形態素。read_form が空文字列の場合は読みが未定義"""

    lexicon: str
    read_form: str = ""


# ユーザー定義名詞 => 分割された形態素のリスト
DecompMap = dict[str, list[Morpheme]]


@dataclass(frozen=True)
class UserDictSource:
    """登録されたユーザー辞書ファイル。encoding が None の場合は解析時の文字コードで読み込む"""

    path: Path
    encoding: EncodingType | None = None


@dataclass
class UserDictCompileResult:
    entry_count: int
    csv_text: str
    decomp_map: DecompMap = field(default_factory=dict)


def tokenize_csv(text: str) -> list[str]:
    """
    カンマ区切りの文字列を要素に分割する。末尾のカンマの後ろの空要素は含めない。

    >>> tokenize_csv("1,2,3")
    ['1', '2', '3']
    >>> tokenize_csv("1,2,")
    ['1', '2']
    >>> tokenize_csv(",")
    ['']
    """

    if not text:
        return []
    components = text.split(",")
    if components[-1] == "":
        components.pop()
    return components


def split_tokens(line: str) -> list[str]:
    """ASCII の空白文字で行をトークンに分割する。全角スペースなどは単語の一部として扱う"""
    return [token for token in _ASCII_SPACES.split(line) if token]


def is_number(text: str) -> bool:
    """10 進数の数字のみで構成された空でない文字列かどうか"""
    return len(text) > 0 and all("0" <= ch <= "9" for ch in text)


class UserDictCompiler:
    """
    ユーザー辞書ファイルを CSV 形式のレコードに変換しつつ、分割マップを構築する。
    インスタンスは 1 回のコンパイルごとに生成する。
    """

    def __init__(
        self,
        pos_table: POSTable,
        classifier: CharacterClassifier,
        dict_config: DictConfig,
        settings: KnowledgeSettings,
    ) -> None:
        self._classifier = classifier
        self._read_form_offset = dict_config.read_form_offset
        self._cost = settings.user_noun_cost
        self.decomp_map: DecompMap = {}

        # ユーザー定義名詞の品詞を全階層の品詞文字列に解決する
        self.user_noun_index = pos_table.get_index_from_alpha_pos(dict_config.user_noun_pos)
        if self.user_noun_index == -1:
            raise KnowledgeError(
                f"Fail to get POS index of user noun: {dict_config.user_noun_pos}"
            )
        user_noun_pos = pos_table.get_pos(self.user_noun_index, POSFormat.FULL_CATEGORY)
        if not user_noun_pos:
            raise KnowledgeError(
                f"Fail to get POS string of user noun: {dict_config.user_noun_pos}"
            )
        self.user_noun_pos = user_noun_pos
        self._pos_size = len(tokenize_csv(user_noun_pos))

    def compile(self, sources: list[UserDictSource]) -> UserDictCompileResult:
        """
        すべてのユーザー辞書ファイルを変換する。

        Args:
            sources (list[UserDictSource]): ユーザー辞書ファイルのリスト

        Returns:
            UserDictCompileResult: 変換されたエントリ数・CSV テキスト・分割マップ

        Raises:
            KnowledgeError: エントリが 1 件も変換されなかった場合
        """

        self.decomp_map = {}
        output = io.StringIO()
        entry_count = 0
        for source in sources:
            entry_count += self.convert_file(source, output)

        logger.info(f"{entry_count} entries in user dictionaries altogether")
        if entry_count == 0:
            raise KnowledgeError("Fail to compile the empty user dictionary")

        return UserDictCompileResult(entry_count, output.getvalue(), self.decomp_map)

    def convert_file(self, source: UserDictSource, output: io.StringIO) -> int:
        """
        ユーザー辞書ファイル 1 つを変換して output に書き込む。
        ファイルが開けない場合は警告を出してスキップし、0 を返す。

        Returns:
            int: output に書き込んだエントリ数
        """

        encoding = source.encoding or self._classifier.encoding
        try:
            text = source.path.read_bytes().decode(encoding.codec)
        except OSError:
            logger.warning(f"Fail to open user dictionary {source.path}, ignoring this file")
            return 0
        except UnicodeDecodeError as ex:
            logger.warning(
                f"Fail to read user dictionary {source.path} as {encoding.value}, ignoring this file: {ex}"
            )
            return 0

        logger.debug(f"Converting user dictionary {source.path} ...")
        count = 0
        for line in text.split("\n"):
            line = line.split("\r", 1)[0]
            if not line or line[0] in ";#":
                continue
            try:
                record = self.convert_line(line)
            except DecompositionError as ex:
                logger.warning(f"{ex} ({source.path})")
                continue
            output.write(record)
            output.write("\n")
            count += 1

        return count

    def convert_line(self, line: str) -> str:
        """
        ユーザー辞書の 1 行を CSV 形式のレコードに変換する。
        分割パターンが指定されている場合は分割マップにも登録する。

        Args:
            line (str): コメント・空行ではないユーザー辞書の 1 行

        Returns:
            str: 改行を含まない CSV 形式のレコード

        Raises:
            DecompositionError: 行の内容に矛盾があり、変換できない場合
        """

        try:
            self._classifier.encode(line)
        except UnicodeEncodeError as ex:
            raise DecompositionError(
                f"Line cannot be encoded in {self._classifier.encoding.value}: {line}"
            ) from ex

        tokens = split_tokens(line)
        if not tokens:
            raise DecompositionError(f"No word is defined in line: {line}")

        word = tokens[0]
        fields = [word, "-1", "-1", str(self._cost), self.user_noun_pos]
        # 読みが読みの素性オフセットの位置に来るように "*" で埋める
        fields.extend(["*"] * max(0, self._read_form_offset - self._pos_size))

        # 読みが指定された場合は空文字列でもそのまま出力し、指定がなければ "*" を出力する
        read_form: str | None = None
        decomposition: list[Morpheme] | None = None
        if len(tokens) > 1:
            components = tokenize_csv(tokens[1])
            if not components:
                raise DecompositionError(f"Fail to tokenize from pattern: {tokens[1]}")

            if is_number(components[0]):
                decomposition = self.decompose(word, components, line)
                if len(tokens) > 2:
                    readings = tokenize_csv(tokens[2])
                    if len(readings) != len(decomposition):
                        raise DecompositionError(
                            "Invalid format, the pronunciation pattern size is not equal to "
                            f"decomposition pattern size in line: {line}"
                        )
                    for morpheme, reading in zip(decomposition, readings):
                        morpheme.read_form = reading
                    read_form = "".join(readings)
            else:
                # 数値でない場合は単語全体の読み
                read_form = "".join(components)

        fields.append("*" if read_form is None else read_form)

        if decomposition is not None:
            self.decomp_map[word] = decomposition
            logger.debug(
                f"Word {word} is decomposed into: "
                + ", ".join(
                    f"{m.lexicon}/{m.read_form}" if m.read_form else m.lexicon
                    for m in decomposition
                )
            )

        return ",".join(fields)

    def decompose(self, word: str, components: list[str], line: str) -> list[Morpheme]:
        """
        分割パターンの各要素の文字数ずつ単語を区切り、形態素のリストを返す。

        Raises:
            DecompositionError: 数値でない要素が含まれる場合、または文字数の合計が単語の文字数と一致しない場合
        """

        codec = self._classifier.encoding.codec
        chars = self._classifier.iter_chars(self._classifier.encode(word))

        morphemes: list[Morpheme] = []
        for component in components:
            if not is_number(component):
                raise DecompositionError(
                    f"Invalid format, only digit is allowed in decomposition pattern: {','.join(components)}"
                )
            char_count = int(component)
            pieces = list(itertools.islice(chars, char_count))
            if len(pieces) < char_count:
                raise DecompositionError(f"Unmatched character numbers in line: {line}")
            morphemes.append(Morpheme(b"".join(pieces).decode(codec)))

        # 単語の末尾に到達していなければならない
        if next(chars, None) is not None:
            raise DecompositionError(f"Unmatched character numbers in line: {line}")

        return morphemes
