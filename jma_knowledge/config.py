"""
辞書ナレッジの設定値の定義。

KnowledgeSettings は DictionaryKnowledge の生成時に一度だけ構築される不変の設定で、
文字コードやユーザー定義名詞のコストなど、各コンポーネントが必要とする既定値を保持する。
DictConfig はシステム辞書の dicrc から実際に解決された値を保持する。
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict

from jma_knowledge.constants import (
    DEFAULT_BASE_FORM_OFFSET,
    DEFAULT_NORM_FORM_OFFSET,
    DEFAULT_READ_FORM_OFFSET,
    DEFAULT_USER_NOUN_COST,
    DEFAULT_USER_NOUN_POS,
    EncodingType,
)
from jma_knowledge.logging import logger


class KnowledgeSettings(BaseModel):
    """DictionaryKnowledge インスタンス全体で共有される不変の設定"""

    model_config = ConfigDict(frozen=True)

    # 解析対象テキスト・バイナリ辞書の文字コード
    encoding: EncodingType = EncodingType.EUCJP
    # dicrc に config-charset が記述されていない場合の設定ファイルの文字コード
    default_config_encoding: EncodingType = EncodingType.EUCJP
    user_noun_cost: int = DEFAULT_USER_NOUN_COST
    default_user_noun_pos: str = DEFAULT_USER_NOUN_POS
    default_base_form_offset: int = DEFAULT_BASE_FORM_OFFSET
    default_read_form_offset: int = DEFAULT_READ_FORM_OFFSET
    default_norm_form_offset: int = DEFAULT_NORM_FORM_OFFSET

    @classmethod
    def from_yaml(cls, path: str | Path) -> KnowledgeSettings:
        """
        YAML ファイルから設定を読み込む。
        記述されていない項目にはデフォルト値が利用される。

        Args:
            path (str | Path): YAML ファイルのパス

        Returns:
            KnowledgeSettings: 読み込んだ設定
        """

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)


class DictConfig(BaseModel):
    """システム辞書の dicrc から解決された設定値"""

    model_config = ConfigDict(frozen=True)

    base_form_offset: int
    read_form_offset: int
    norm_form_offset: int
    user_noun_pos: str
    config_encoding: EncodingType
    # encode_system_dict() で書き込まれるバイナリ辞書の文字コード (未記述の場合は None)
    binary_encoding: EncodingType | None = None

    @classmethod
    def defaults(cls, settings: KnowledgeSettings) -> DictConfig:
        """dicrc が存在しない場合に利用するデフォルトの設定値を返す"""
        return cls.from_entries({}, settings)

    @classmethod
    def from_entries(
        cls, entries: dict[str, str], settings: KnowledgeSettings
    ) -> DictConfig:
        """
        dicrc の key=value エントリから設定値を解決する。
        エントリが存在しない項目には settings のデフォルト値が利用される。

        Args:
            entries (dict[str, str]): dicrc から読み込んだエントリ
            settings (KnowledgeSettings): デフォルト値を提供する設定

        Returns:
            DictConfig: 解決された設定値
        """

        config_encoding = settings.default_config_encoding
        charset = entries.get("config-charset")
        if charset is not None:
            resolved = EncodingType.from_label(charset)
            if resolved is None:
                logger.warning(
                    f"Unknown dictionary config charset: {charset}, use default charset {config_encoding.value}"
                )
            else:
                config_encoding = resolved

        binary_encoding = None
        binary_charset = entries.get("binary-charset")
        if binary_charset is not None:
            binary_encoding = EncodingType.from_label(binary_charset)
            if binary_encoding is None:
                logger.warning(f"Unknown dictionary binary charset: {binary_charset}")

        return cls(
            base_form_offset=_to_int(
                entries, "base-form-feature-offset", settings.default_base_form_offset
            ),
            read_form_offset=_to_int(
                entries, "read-form-feature-offset", settings.default_read_form_offset
            ),
            norm_form_offset=_to_int(
                entries, "norm-form-feature-offset", settings.default_norm_form_offset
            ),
            user_noun_pos=entries.get("user-noun-pos", settings.default_user_noun_pos),
            config_encoding=config_encoding,
            binary_encoding=binary_encoding,
        )


def _to_int(entries: dict[str, str], key: str, default: int) -> int:
    value = entries.get(key)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        logger.warning(f"Error in converting {key} from {value!r}, use default value {default}")
        return default
