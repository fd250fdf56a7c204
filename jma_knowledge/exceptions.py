"""
辞書ナレッジの読み込み・コンパイル中に発生するエラーの定義。
DictionaryKnowledge の公開メソッドは EncodingInconsistencyError 以外の例外を捕捉し、
ログを出力した上で False を返す。
"""


class KnowledgeError(Exception):
    """辞書ナレッジ関連のエラーの基底クラス"""


class MissingResourceError(KnowledgeError):
    """ファイル・アーカイブ内リソースが存在しない"""


class StructuralParseError(KnowledgeError):
    """存在するファイルの書式が不正"""


class DecompositionError(KnowledgeError):
    """ユーザー辞書の 1 行 (分割パターン・読みパターン) の内容に矛盾がある"""


class ExternalToolError(KnowledgeError):
    """mecab-dict-index やタガーの生成など、外部の形態素解析エンジンの処理に失敗した"""


class EncodingInconsistencyError(AssertionError):
    """
    宣言された文字コードと実際のバイト列が一致しない。
    このまま処理を続けると以降のオフセットがすべて壊れるため、回復不能なエラーとして扱う。
    """
