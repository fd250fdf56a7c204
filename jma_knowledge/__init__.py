"""
jma_knowledge: 日本語形態素解析のための辞書ナレッジ管理

形態素解析エンジン (MeCab) が利用する設定ファイル・辞書を読み込み、検証し、組み立てる。

Basic Usage:
    from jma_knowledge import DictionaryKnowledge, EncodingType, KnowledgeSettings

    knowledge = DictionaryKnowledge(KnowledgeSettings(encoding=EncodingType.UTF8))
    knowledge.set_system_dict("db/ipadic/bin_utf8")
    knowledge.add_user_dict("user_noun.txt")
    if knowledge.load_dict():
        tagger = knowledge.create_tagger()
"""

from jma_knowledge.config import DictConfig, KnowledgeSettings
from jma_knowledge.constants import VERSION, EncodingType
from jma_knowledge.knowledge import DictionaryKnowledge, KnowledgeState
from jma_knowledge.user_dict import Morpheme


__version__ = VERSION

__all__ = [
    "DictConfig",
    "DictionaryKnowledge",
    "EncodingType",
    "KnowledgeSettings",
    "KnowledgeState",
    "Morpheme",
]
