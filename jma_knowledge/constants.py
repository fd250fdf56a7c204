"""
jma_knowledge 全体で共通して利用する定数・列挙型の定義。
"""

from __future__ import annotations

import enum
from pathlib import Path


# パッケージのバージョン
VERSION = "0.1.0"

# ベースディレクトリ
BASE_DIR = Path(__file__).parent.parent

# dicrc にエントリが存在しない場合に利用する素性オフセットのデフォルト値
DEFAULT_BASE_FORM_OFFSET = 6
DEFAULT_READ_FORM_OFFSET = 7
DEFAULT_NORM_FORM_OFFSET = 9

# dicrc にエントリが存在しない場合に利用するユーザー定義名詞の品詞ラベル
DEFAULT_USER_NOUN_POS = "N-USER"

# ユーザー定義名詞のコスト (小さいほどユーザー定義名詞が優先的に認識される)
DEFAULT_USER_NOUN_COST = -500

# 辞書の設定ファイル・定義ファイル
DICT_CONFIG_FILES = ("dicrc", "rewrite.def", "left-id.def", "right-id.def")

# mecab-dict-index が出力する辞書のバイナリファイル
DICT_BINARY_FILES = ("unk.dic", "char.bin", "sys.dic", "matrix.bin")

# 品詞インデックスの定義ファイル
POS_ID_DEF_FILE = "pos-id.def"

# 品詞の結合ルールファイル
POS_COMBINE_DEF_FILE = "compound.def"

# ひらがな・カタカナ / 半角・全角 / 小文字・大文字の変換マップファイル
KANA_MAP_DEF_FILE = "map-kana.def"
WIDTH_MAP_DEF_FILE = "map-width.def"
CASE_MAP_DEF_FILE = "map-case.def"

# システム辞書のアーカイブファイル
DICT_ARCHIVE_FILE = "sys.bin"

# メモリ上に置かれるユーザー辞書 (バイナリ・テキスト) のリソース名
BIN_USER_DICT_MEMORY_FILE = "user.bin"
TXT_USER_DICT_MEMORY_FILE = "user.csv"


class EncodingType(str, enum.Enum):
    """
    辞書・設定ファイルの文字コード。
    値は mecab-dict-index の -f / -t 引数にそのまま渡される。
    """

    EUCJP = "EUC-JP"
    SJIS = "SHIFT-JIS"
    UTF8 = "UTF-8"

    @property
    def codec(self) -> str:
        """Python の codecs で利用するエンコーディング名"""
        return _CODEC_NAMES[self]

    @classmethod
    def from_label(cls, label: str) -> EncodingType | None:
        """
        dicrc の config-charset などに記述された文字コード名から EncodingType を取得する。
        大文字・小文字やハイフン・アンダースコアの表記揺れは無視される。

        Args:
            label (str): 文字コード名 (例: "EUC-JP", "eucjp", "sjis", "utf8")

        Returns:
            EncodingType | None: 対応する EncodingType。未知の文字コード名の場合は None
        """

        normalized = label.strip().lower().replace("-", "").replace("_", "")
        return _LABEL_ALIASES.get(normalized)


_CODEC_NAMES: dict[EncodingType, str] = {
    EncodingType.EUCJP: "euc_jp",
    EncodingType.SJIS: "shift_jis",
    EncodingType.UTF8: "utf-8",
}

_LABEL_ALIASES: dict[str, EncodingType] = {
    "eucjp": EncodingType.EUCJP,
    "euc": EncodingType.EUCJP,
    "shiftjis": EncodingType.SJIS,
    "sjis": EncodingType.SJIS,
    "utf8": EncodingType.UTF8,
}
