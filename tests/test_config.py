from pathlib import Path

import pydantic
import pytest

from jma_knowledge.config import DictConfig, KnowledgeSettings
from jma_knowledge.constants import EncodingType


def test_default_settings():
    settings = KnowledgeSettings()
    assert settings.encoding == EncodingType.EUCJP
    assert settings.user_noun_cost == -500
    assert settings.default_user_noun_pos == "N-USER"


def test_settings_are_immutable():
    settings = KnowledgeSettings()
    with pytest.raises(pydantic.ValidationError):
        settings.encoding = EncodingType.UTF8  # type: ignore


def test_settings_from_yaml(tmp_path: Path):
    path = tmp_path / "knowledge.yml"
    path.write_text("encoding: UTF-8\nuser_noun_cost: -1000\n", encoding="utf-8")
    settings = KnowledgeSettings.from_yaml(path)
    assert settings.encoding == EncodingType.UTF8
    assert settings.user_noun_cost == -1000
    assert settings.default_config_encoding == EncodingType.EUCJP


def test_dict_config_defaults():
    config = DictConfig.defaults(KnowledgeSettings())
    assert (config.base_form_offset, config.read_form_offset, config.norm_form_offset) == (6, 7, 9)
    assert config.user_noun_pos == "N-USER"
    assert config.config_encoding == EncodingType.EUCJP


def test_dict_config_from_entries():
    entries = {
        "base-form-feature-offset": "10",
        "read-form-feature-offset": "11",
        "user-noun-pos": "N-PROPER",
        "config-charset": "utf8",
    }
    config = DictConfig.from_entries(entries, KnowledgeSettings())
    assert config.base_form_offset == 10
    assert config.read_form_offset == 11
    assert config.norm_form_offset == 9
    assert config.user_noun_pos == "N-PROPER"
    assert config.config_encoding == EncodingType.UTF8


def test_dict_config_invalid_values_fall_back():
    """数値でないオフセットと未知の文字コードはデフォルト値になる"""
    entries = {"base-form-feature-offset": "six", "config-charset": "latin1"}
    config = DictConfig.from_entries(entries, KnowledgeSettings())
    assert config.base_form_offset == 6
    assert config.config_encoding == EncodingType.EUCJP


def test_dict_config_binary_charset():
    settings = KnowledgeSettings()
    assert DictConfig.defaults(settings).binary_encoding is None
    config = DictConfig.from_entries({"binary-charset": "SHIFT-JIS"}, settings)
    assert config.binary_encoding == EncodingType.SJIS
    # 未知の文字コードは未記述として扱う
    assert DictConfig.from_entries({"binary-charset": "latin1"}, settings).binary_encoding is None


@pytest.mark.parametrize(
    "label, expected",
    [
        ("EUC-JP", EncodingType.EUCJP),
        ("euc_jp", EncodingType.EUCJP),
        ("SHIFT-JIS", EncodingType.SJIS),
        ("sjis", EncodingType.SJIS),
        ("UTF-8", EncodingType.UTF8),
        ("utf8", EncodingType.UTF8),
        ("latin1", None),
    ],
)
def test_encoding_from_label(label: str, expected: EncodingType | None):
    assert EncodingType.from_label(label) == expected
