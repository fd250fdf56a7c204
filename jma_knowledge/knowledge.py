"""
日本語形態素解析のための言語知識 (辞書・設定・変換テーブル) を管理する。

DictionaryKnowledge.load_dict() は以下の順に処理を行う:

    Uninitialized -> ArchiveOpened -> ConfigLoaded -> TablesLoaded
        -> [UserDictCompiled] -> Ready

どの段階で失敗しても Failed に遷移し、load_dict() は False を返す。
読み込みはシングルスレッドで行うことを前提としており、load_dict() の実行中に
問い合わせ系のメソッドを並行して呼び出してはならない。
"""

from __future__ import annotations

import enum
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jma_knowledge import encoder
from jma_knowledge.archive import DictionaryArchive
from jma_knowledge.char_table import CharTable
from jma_knowledge.config import DictConfig, KnowledgeSettings
from jma_knowledge.config_table import parse_config_text
from jma_knowledge.constants import (
    BIN_USER_DICT_MEMORY_FILE,
    CASE_MAP_DEF_FILE,
    DICT_ARCHIVE_FILE,
    DICT_CONFIG_FILES,
    KANA_MAP_DEF_FILE,
    POS_COMBINE_DEF_FILE,
    POS_ID_DEF_FILE,
    TXT_USER_DICT_MEMORY_FILE,
    WIDTH_MAP_DEF_FILE,
    EncodingType,
)
from jma_knowledge.ctype import CharacterClassifier
from jma_knowledge.engine import DictionaryEngine, MecabEngine
from jma_knowledge.exceptions import (
    ExternalToolError,
    KnowledgeError,
    MissingResourceError,
)
from jma_knowledge.logging import logger
from jma_knowledge.pos_table import POSTable
from jma_knowledge.separators import SeparatorSet, load_separator_config
from jma_knowledge.user_dict import DecompMap, UserDictCompiler, UserDictSource


class KnowledgeState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ARCHIVE_OPENED = "archive_opened"
    CONFIG_LOADED = "config_loaded"
    TABLES_LOADED = "tables_loaded"
    USER_DICT_COMPILED = "user_dict_compiled"
    READY = "ready"
    FAILED = "failed"


class DictionaryKnowledge:
    """
    システム辞書・ユーザー辞書・各種テーブルを所有し、形態素解析エンジンに渡す辞書一式を準備する。

    Args:
        settings (KnowledgeSettings | None, optional): 不変の設定。未指定時はデフォルト値. Defaults to None.
        engine (DictionaryEngine | None, optional): 辞書のコンパイル・タガー生成を行うエンジン。
            未指定時は fugashi を利用する MecabEngine. Defaults to None.
    """

    def __init__(
        self,
        settings: KnowledgeSettings | None = None,
        engine: DictionaryEngine | None = None,
    ) -> None:
        self.settings = settings or KnowledgeSettings()
        self._engine = engine or MecabEngine()

        self._encoding = self.settings.encoding
        self._ctype = CharacterClassifier(self._encoding)

        self._system_dict_path: Path | None = None
        self._user_dicts: list[UserDictSource] = []

        self._archive = DictionaryArchive()
        self._dict_config = DictConfig.defaults(self.settings)
        self._pos_table = POSTable()
        self._kana_table = CharTable()
        self._width_table = CharTable()
        self._case_table = CharTable()
        self._decomp_map: DecompMap = {}
        self._user_noun_index = -1

        self._stop_words: set[str] = set()
        self._separators = SeparatorSet()
        self._keyword_pos: set[int] = set()
        self._output_full_pos = False

        # MeCab はファイルから辞書を読み込むため、アーカイブの内容を書き出す作業ディレクトリ
        self._work_dir: Path | None = None

        self.state = KnowledgeState.UNINITIALIZED

    # ------------------------------------------------------------------
    # 文字コード・辞書パスの設定
    # ------------------------------------------------------------------

    def set_encode_type(self, encoding: EncodingType) -> None:
        """解析時の文字コードを変更する。変更した場合は文字種の分類器を作り直す"""
        if encoding != self._encoding:
            self._encoding = encoding
            self._ctype = CharacterClassifier(encoding)

    def get_encode_type(self) -> EncodingType:
        return self._encoding

    def set_system_dict(self, dir_path: str | Path) -> None:
        """システム辞書 (sys.bin を含むディレクトリ) のパスを設定する"""
        self._system_dict_path = Path(dir_path)

    def add_user_dict(
        self, file_path: str | Path, encoding: EncodingType | None = None
    ) -> None:
        """
        ユーザー辞書ファイルを登録する。登録したファイルは次回の load_dict() でコンパイルされる。

        Args:
            file_path (str | Path): ユーザー辞書ファイルのパス
            encoding (EncodingType | None, optional): ファイルの文字コード。
                未指定時は解析時の文字コードとみなす. Defaults to None.
        """

        self._user_dicts.append(UserDictSource(Path(file_path), encoding))

    def has_user_dict(self) -> bool:
        return len(self._user_dicts) > 0

    # ------------------------------------------------------------------
    # 読み込み
    # ------------------------------------------------------------------

    def load_dict(self) -> bool:
        """
        set_system_dict() と add_user_dict() で設定された辞書を読み込む。
        既に読み込み済みの場合も、すべての手順を最初からやり直す。

        Returns:
            bool: 成功した場合は True、失敗した場合は False
        """

        try:
            self._load_dict()
        except KnowledgeError as ex:
            self.state = KnowledgeState.FAILED
            logger.error(f"Fail to load dictionary: {ex}")
            return False

        self.state = KnowledgeState.READY
        logger.success(f"Dictionary is loaded from {self._system_dict_path}")
        return True

    def _load_dict(self) -> None:
        if self._system_dict_path is None:
            raise MissingResourceError("System dictionary path is not set")

        # sys.bin
        archive_path = self._system_dict_path / DICT_ARCHIVE_FILE
        self._archive.open(archive_path)
        self.state = KnowledgeState.ARCHIVE_OPENED

        # dicrc
        self._dict_config = self._load_dict_config()
        self.state = KnowledgeState.CONFIG_LOADED

        config_encoding = self._dict_config.config_encoding

        # pos-id.def は必須
        self._pos_table = POSTable()
        self._pos_table.set_output_full_pos(self._output_full_pos)
        self._pos_table.load_config(self._archive, POS_ID_DEF_FILE, config_encoding)
        self._user_noun_index = self._pos_table.get_index_from_alpha_pos(
            self._dict_config.user_noun_pos
        )

        # compound.def はアーカイブではなく辞書ディレクトリに置かれる
        combine_path = self._system_dict_path / POS_COMBINE_DEF_FILE
        try:
            self._pos_table.load_combine_rule(combine_path, config_encoding)
        except KnowledgeError as ex:
            logger.warning(
                f"{ex}, no rule is defined to combine tokens with specific POS tags"
            )

        self._kana_table = self._load_char_table(
            KANA_MAP_DEF_FILE, "between Hiragana and Katakana characters"
        )
        self._width_table = self._load_char_table(
            WIDTH_MAP_DEF_FILE, "between half and full width characters"
        )
        self._case_table = self._load_char_table(
            CASE_MAP_DEF_FILE, "between lower and upper case characters"
        )
        self.state = KnowledgeState.TABLES_LOADED

        self._prepare_work_dir()

        if self.has_user_dict():
            self._compile_user_dict()
            self.state = KnowledgeState.USER_DICT_COMPILED

        # 一時的にタガーを生成して、辞書一式が正しく読み込めることを確認する
        tagger = self._create_tagger()
        del tagger

    def _load_dict_config(self) -> DictConfig:
        config_file = DICT_CONFIG_FILES[0]
        data = self._archive.read_resource(config_file)
        if data is None:
            logger.warning(f"{config_file} not exists, default configuration value is used")
            entries = {}
        else:
            # 参照するキーと値は ASCII なので、config-charset が分かる前はデフォルトの文字コードで読み込む
            text = data.decode(self.settings.default_config_encoding.codec, errors="replace")
            entries = parse_config_text(text, config_file)

        dict_config = DictConfig.from_entries(entries, self.settings)
        logger.debug(f"Dictionary config: {dict_config}")
        if (
            dict_config.binary_encoding is not None
            and dict_config.binary_encoding != self._encoding
        ):
            logger.warning(
                f"System dictionary is encoded in {dict_config.binary_encoding.value}, "
                f"but the analysis encoding is {self._encoding.value}"
            )
        return dict_config

    def _load_char_table(self, name: str, description: str) -> CharTable:
        table = CharTable()
        try:
            table.load_config(self._archive, name, self._dict_config.config_encoding)
        except KnowledgeError as ex:
            logger.warning(f"As fails to load {name} ({ex}), no mapping is defined to convert {description}")
            table.clear()
        return table

    def _prepare_work_dir(self) -> None:
        self._remove_work_dir()
        try:
            self._work_dir = Path(tempfile.mkdtemp(prefix="jma_knowledge_"))
            self._archive.extract_to(self._work_dir)
        except OSError as ex:
            raise KnowledgeError(f"Fail to prepare dictionary work directory: {ex}") from ex

    def _compile_user_dict(self) -> None:
        assert self._work_dir is not None

        # 既存の分割マップは破棄する
        self._decomp_map = {}

        self._archive.stage_empty_binary_user_dict(BIN_USER_DICT_MEMORY_FILE)
        self._archive.stage_empty_text_user_dict(TXT_USER_DICT_MEMORY_FILE)

        compiler = UserDictCompiler(
            self._pos_table, self._ctype, self._dict_config, self.settings
        )
        result = compiler.compile(self._user_dicts)

        csv_data = self._ctype.encode(result.csv_text)
        if not self._archive.copy_into_staged(csv_data, TXT_USER_DICT_MEMORY_FILE):
            raise KnowledgeError("Fail to copy text user dictionary into memory")

        csv_path = self._work_dir / TXT_USER_DICT_MEMORY_FILE
        bin_path = self._work_dir / BIN_USER_DICT_MEMORY_FILE
        try:
            csv_path.write_bytes(csv_data)
        except OSError as ex:
            raise KnowledgeError(f"Fail to write text user dictionary {csv_path}: {ex}") from ex

        status = self._engine.compile_user_dictionary(
            self._work_dir, bin_path, csv_path, self._encoding
        )
        if status != 0:
            raise ExternalToolError(f"Fail to compile user dictionary (status: {status})")

        try:
            bin_data = bin_path.read_bytes()
        except FileNotFoundError:
            bin_data = None
        except OSError as ex:
            raise KnowledgeError(f"Fail to read binary user dictionary {bin_path}: {ex}") from ex
        if bin_data is not None:
            self._archive.copy_into_staged(bin_data, BIN_USER_DICT_MEMORY_FILE)

        self._decomp_map = result.decomp_map

    def _create_tagger(self) -> Any:
        if self._work_dir is None:
            raise MissingResourceError("Dictionary is not loaded")

        user_dict_path = None
        if self.has_user_dict():
            user_dict_path = self._work_dir / BIN_USER_DICT_MEMORY_FILE

        tagger = self._engine.create_handle(self._work_dir, user_dict_path)
        if tagger is None:
            raise ExternalToolError("Fail to create tagger")
        return tagger

    def create_tagger(self) -> Any | None:
        """
        読み込み済みの辞書からタガーを生成する。

        Returns:
            Any | None: 生成されたタガー。失敗した場合は None。タガーの寿命は呼び出し元で管理する
        """

        try:
            return self._create_tagger()
        except KnowledgeError as ex:
            logger.error(str(ex))
            return None

    def load_stop_word_dict(
        self, file_path: str | Path, encoding: EncodingType | None = None
    ) -> bool:
        """
        ストップワードの辞書ファイル (1 行に 1 単語) を読み込む。

        Returns:
            bool: 成功した場合は True、ファイルが開けない場合は False
        """

        file_path = Path(file_path)
        encoding = encoding or self._encoding
        try:
            text = file_path.read_bytes().decode(encoding.codec)
        except (OSError, UnicodeDecodeError) as ex:
            logger.error(f"Cannot open file: {file_path} ({ex})")
            return False

        for line in text.split("\n"):
            line = line.split("\r", 1)[0]
            if line:
                self._stop_words.add(line)
        return True

    def load_sentence_separator_config(
        self, file_path: str | Path, encoding: EncodingType | None = None
    ) -> bool:
        """
        文区切り文字の設定ファイルを読み込む。
        以前に読み込んだ区切り文字はすべて破棄され、このファイルの内容で置き換えられる。

        Returns:
            bool: 成功した場合は True、ファイルが開けない場合は False
        """

        try:
            self._separators = load_separator_config(file_path, self._ctype, encoding)
        except KnowledgeError as ex:
            logger.error(str(ex))
            return False
        return True

    def encode_system_dict(
        self,
        txt_dir: str | Path,
        bin_dir: str | Path,
        bin_encoding: EncodingType | None = None,
    ) -> bool:
        """
        テキスト形式のシステム辞書をバイナリ辞書に変換し、sys.bin にまとめる。

        Args:
            txt_dir (str | Path): テキスト形式のシステム辞書のディレクトリ
            bin_dir (str | Path): 出力先のディレクトリ
            bin_encoding (EncodingType | None, optional): バイナリ辞書の文字コード。
                未指定時は解析時の文字コード. Defaults to None.

        Returns:
            bool: 成功した場合は True、失敗した場合は False
        """

        try:
            encoder.encode_system_dict(
                txt_dir, bin_dir, bin_encoding or self._encoding, self._engine
            )
        except KnowledgeError as ex:
            logger.error(str(ex))
            return False
        return True

    def close(self) -> None:
        """アーカイブを閉じ、作業ディレクトリを削除する (削除に失敗しても無視する)"""
        self._archive.close()
        self._remove_work_dir()

    def _remove_work_dir(self) -> None:
        if self._work_dir is not None:
            shutil.rmtree(self._work_dir, ignore_errors=True)
            self._work_dir = None

    # ------------------------------------------------------------------
    # 問い合わせ
    # ------------------------------------------------------------------

    @property
    def pos_table(self) -> POSTable:
        return self._pos_table

    @property
    def kana_table(self) -> CharTable:
        """ひらがな・カタカナの変換テーブル"""
        return self._kana_table

    @property
    def width_table(self) -> CharTable:
        """半角・全角の変換テーブル"""
        return self._width_table

    @property
    def case_table(self) -> CharTable:
        """小文字・大文字の変換テーブル"""
        return self._case_table

    @property
    def decomp_map(self) -> DecompMap:
        """ユーザー定義名詞 => 分割された形態素のリスト"""
        return self._decomp_map

    @property
    def dict_config(self) -> DictConfig:
        return self._dict_config

    @property
    def base_form_offset(self) -> int:
        """
        原形の素性オフセット (0 始まり)。
        例えば "動詞,自立,*,*,一段,未然形,見る,ミ,ミ" の原形 "見る" のオフセットは 6。
        """
        return self._dict_config.base_form_offset

    @property
    def read_form_offset(self) -> int:
        """読みの素性オフセット (0 始まり)。上記の例では読み "ミ" のオフセットは 7"""
        return self._dict_config.read_form_offset

    @property
    def norm_form_offset(self) -> int:
        """
        正規化形の素性オフセット (0 始まり)。
        例えば "名詞,固有名詞,人名,姓,*,*,渡邊,わたなべ,ワタナベ,渡辺" の "渡辺" のオフセットは 9。
        """
        return self._dict_config.norm_form_offset

    @property
    def user_noun_pos_index(self) -> int:
        """ユーザー定義名詞の品詞インデックス。未解決の場合は -1"""
        return self._user_noun_index

    @property
    def ctype(self) -> CharacterClassifier:
        return self._ctype

    def is_stop_word(self, word: str) -> bool:
        """ストップワードに含まれる、または空白文字のみで構成された単語かどうか"""
        return word in self._stop_words or self._ctype.is_space(word)

    def is_sentence_separator(self, text: str | bytes, pos: int = 0) -> bool:
        """
        text の pos の位置の文字が文区切り文字かどうかを返す。

        Args:
            text (str | bytes): 判定する文字列 (str の場合は解析時の文字コードでエンコードする)
            pos (int, optional): bytes の場合の判定位置 (バイト単位). Defaults to 0.
        """

        if isinstance(text, str):
            try:
                data = self._ctype.encode(text)
            except UnicodeEncodeError:
                # 解析時の文字コードで表現できない文字は区切り文字になりえない
                return False
        else:
            data = text
        width = self._ctype.byte_width(data, pos)
        if width == 0:
            return False
        return self._separators.contains_char(data[pos : pos + width])

    def add_sentence_separator(self, value: int) -> bool:
        """ビッグエンディアンで詰めた整数で文区切り文字を追加する"""
        return self._separators.add(value)

    def set_output_full_pos(self, flag: bool) -> None:
        """
        品詞を全階層 ("名詞,固有名詞,一般,*") で出力するかどうかを設定する。
        設定は読み込み済みの品詞表と、以降の load_dict() で読み込まれる品詞表に適用される。
        """

        self._output_full_pos = flag
        self._pos_table.set_output_full_pos(flag)

    def is_output_full_pos(self) -> bool:
        return self._output_full_pos

    def set_keyword_pos(self, labels: Iterable[str]) -> None:
        """
        キーワードとして扱う品詞を英字ラベルで設定する。
        pos-id.def を読み込んだ後に呼び出す必要がある。
        """

        keyword_pos: set[int] = set()
        for label in labels:
            index = self._pos_table.get_index_from_alpha_pos(label)
            if index == -1:
                logger.warning(f"Unknown keyword POS label: {label}")
                continue
            keyword_pos.add(index)
        self._keyword_pos = keyword_pos

    def is_keyword_pos(self, pos: int) -> bool:
        """キーワードの品詞かどうか。キーワードの品詞が設定されていない場合はすべての品詞がキーワード"""
        if not self._keyword_pos:
            return True
        return pos in self._keyword_pos
