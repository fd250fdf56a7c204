"""
テスト共通のフィクスチャ

実際の MeCab の代わりに FakeEngine を利用し、EUC-JP の最小限のシステム辞書アーカイブを生成する。
"""

import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from jma_knowledge.constants import DICT_BINARY_FILES, EncodingType


DICRC = """; 辞書の設定
cost-factor = 800
bos-feature = BOS/EOS,*,*,*,*,*,*,*,*
config-charset = EUC-JP
base-form-feature-offset = 6
read-form-feature-offset = 7
norm-form-feature-offset = 9
user-noun-pos = N-USER
"""

POS_ID_DEF = """# 品詞の定義
名詞,一般,*,* N-GENERAL 38
名詞,固有名詞,一般,* N-PROPER 41
名詞,接尾,人名,* N-SUFFIX-NAME 52
名詞,ユーザー定義,*,* N-USER 69
"""

MAP_KANA_DEF = """あ ア
い イ
う ウ
"""

MAP_WIDTH_DEF = """ｱ ア
ｶﾞ ガ
"""

MAP_CASE_DEF = """a A
b B
"""

DEFAULT_RESOURCES: dict[str, str] = {
    "dicrc": DICRC,
    "pos-id.def": POS_ID_DEF,
    "map-kana.def": MAP_KANA_DEF,
    "map-width.def": MAP_WIDTH_DEF,
    "map-case.def": MAP_CASE_DEF,
    "rewrite.def": "[unigram rewrite]\n",
    "left-id.def": "0 BOS/EOS,*,*,*,*,*,*,*,*\n",
    "right-id.def": "0 BOS/EOS,*,*,*,*,*,*,*,*\n",
}


class FakeEngine:
    """MeCab の代わりに呼び出し内容を記録するエンジン"""

    def __init__(self) -> None:
        self.system_status = 0
        self.user_status = 0
        self.handle_fails = False
        self.calls: list[tuple[str, Any]] = []

    def compile_system_dictionary(
        self, src_dir: Path, dest_dir: Path, encoding: EncodingType
    ) -> int:
        self.calls.append(("system", (src_dir, dest_dir, encoding)))
        if self.system_status == 0:
            for name in DICT_BINARY_FILES:
                (dest_dir / name).write_bytes(b"binary:" + name.encode())
        return self.system_status

    def compile_user_dictionary(
        self, dict_dir: Path, user_dict_path: Path, csv_path: Path, encoding: EncodingType
    ) -> int:
        self.calls.append(("user", (dict_dir, user_dict_path, csv_path, encoding)))
        if self.user_status == 0:
            user_dict_path.write_bytes(b"compiled:" + csv_path.read_bytes())
        return self.user_status

    def create_handle(self, dict_dir: Path, user_dict_path: Path | None = None) -> Any:
        self.calls.append(("handle", (dict_dir, user_dict_path)))
        if self.handle_fails:
            return None
        return object()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """
    システム辞書のディレクトリに sys.bin を作成する関数を返す。
    resources の値が None のリソースはアーカイブに含めない。
    """

    def _make_archive(
        overrides: dict[str, str | None] | None = None,
        encoding: EncodingType = EncodingType.EUCJP,
        dir_name: str = "sysdict",
    ) -> Path:
        resources: dict[str, str | None] = {**DEFAULT_RESOURCES, **(overrides or {})}
        dict_dir = tmp_path / dir_name
        dict_dir.mkdir(exist_ok=True)
        with zipfile.ZipFile(dict_dir / "sys.bin", "w") as zf:
            for name, text in resources.items():
                if text is not None:
                    zf.writestr(name, text.encode(encoding.codec))
            for name in DICT_BINARY_FILES:
                zf.writestr(name, b"binary")
        return dict_dir

    return _make_archive


@pytest.fixture
def write_text(tmp_path: Path) -> Callable[..., Path]:
    """テキストを指定された文字コードでファイルに書き込む関数を返す"""

    def _write_text(
        name: str, text: str, encoding: EncodingType = EncodingType.EUCJP
    ) -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode(encoding.codec))
        return path

    return _write_text
