"""
テキスト形式のシステム辞書をコンパイルし、アーカイブ (sys.bin) にまとめる。
"""

from __future__ import annotations

import shutil
from pathlib import Path

from jma_knowledge.archive import DictionaryArchive
from jma_knowledge.constants import (
    CASE_MAP_DEF_FILE,
    DICT_ARCHIVE_FILE,
    DICT_BINARY_FILES,
    DICT_CONFIG_FILES,
    KANA_MAP_DEF_FILE,
    POS_COMBINE_DEF_FILE,
    POS_ID_DEF_FILE,
    WIDTH_MAP_DEF_FILE,
    EncodingType,
)
from jma_knowledge.engine import DictionaryEngine
from jma_knowledge.exceptions import ExternalToolError, MissingResourceError
from jma_knowledge.logging import logger


BINARY_CHARSET_KEY = b"binary-charset"


def archive_source_files(txt_dir: Path, bin_dir: Path) -> list[Path]:
    """
    アーカイブに格納するファイルのリストを返す。
    dicrc は binary-charset を書き込んだ bin_dir 側のものを格納する。
    """

    dicrc, *config_files = DICT_CONFIG_FILES
    files = [bin_dir / dicrc]
    files += [txt_dir / name for name in config_files]
    files += [
        txt_dir / name
        for name in (POS_ID_DEF_FILE, KANA_MAP_DEF_FILE, WIDTH_MAP_DEF_FILE, CASE_MAP_DEF_FILE)
    ]
    files += [bin_dir / name for name in DICT_BINARY_FILES]
    return files


def fill_binary_encoding(src: Path, dest: Path, encoding: EncodingType) -> None:
    """
    dicrc の "binary-charset" にバイナリ辞書の文字コードを書き込んで dest に出力する。
    既にエントリがあれば置き換え、なければ末尾に追加する。
    キーと値は ASCII なので、dicrc の文字コードに関わらずバイト列のまま処理する。

    Raises:
        MissingResourceError: src が存在しない・読み込めない場合、または dest に書き込めない場合
    """

    try:
        data = src.read_bytes()
    except OSError as ex:
        raise MissingResourceError(f"Cannot read dictionary config {src}: {ex}") from ex

    entry = BINARY_CHARSET_KEY + b" = " + encoding.value.encode("ascii")
    lines = data.split(b"\n")
    if lines and lines[-1] == b"":
        lines.pop()

    filled = False
    for i, line in enumerate(lines):
        key, sep, _ = line.partition(b"=")
        if sep and key.strip() == BINARY_CHARSET_KEY:
            lines[i] = entry + (b"\r" if line.endswith(b"\r") else b"")
            filled = True
    if not filled:
        lines.append(entry)

    try:
        dest.write_bytes(b"\n".join(lines) + b"\n")
    except OSError as ex:
        raise MissingResourceError(f"Cannot write dictionary config {dest}: {ex}") from ex


def encode_system_dict(
    txt_dir: str | Path,
    bin_dir: str | Path,
    encoding: EncodingType,
    engine: DictionaryEngine,
) -> Path:
    """
    テキスト形式のシステム辞書をバイナリに変換し、bin_dir に sys.bin を出力する。

    1. mecab-dict-index で unk.dic, char.bin, sys.dic, matrix.bin を生成する
    2. compound.def が存在すればそのまま bin_dir にコピーする
    3. binary-charset を書き込んだ dicrc を bin_dir に出力する
    4. 設定ファイル・定義ファイル・バイナリファイルを sys.bin にまとめる
    5. sys.bin に格納済みのバイナリファイルを削除する

    mecab-dict-index やアーカイブの作成に失敗した場合、途中で生成されたバイナリファイルは
    削除されずに残ることがある。

    Args:
        txt_dir (str | Path): テキスト形式のシステム辞書のディレクトリ (既に存在している必要がある)
        bin_dir (str | Path): 出力先のディレクトリ (既に存在している必要がある)
        encoding (EncodingType): バイナリ辞書の文字コード
        engine (DictionaryEngine): mecab-dict-index を実行するエンジン

    Returns:
        Path: 生成された sys.bin のパス

    Raises:
        MissingResourceError: ディレクトリやアーカイブに格納するファイルが存在しない場合
        ExternalToolError: mecab-dict-index が失敗した場合
    """

    txt_dir = Path(txt_dir)
    bin_dir = Path(bin_dir)
    logger.info(f"Encoding system dictionary from {txt_dir} to {bin_dir} in {encoding.value}")

    for directory in (txt_dir, bin_dir):
        if not directory.is_dir():
            raise MissingResourceError(
                f"Directory path not exist to compile system dictionary: {directory}"
            )

    status = engine.compile_system_dictionary(txt_dir, bin_dir, encoding)
    if status != 0:
        raise ExternalToolError(f"Fail to compile system dictionary (status: {status})")

    try:
        shutil.copyfile(txt_dir / POS_COMBINE_DEF_FILE, bin_dir / POS_COMBINE_DEF_FILE)
    except OSError as ex:
        logger.warning(
            f"{POS_COMBINE_DEF_FILE} is not copied from {txt_dir} ({ex}), "
            "no rule is defined to combine tokens with specific POS"
        )

    dicrc = DICT_CONFIG_FILES[0]
    fill_binary_encoding(txt_dir / dicrc, bin_dir / dicrc, encoding)

    archive_path = bin_dir / DICT_ARCHIVE_FILE
    logger.info(f"Compressing into archive file {archive_path}")
    try:
        DictionaryArchive.compile(archive_source_files(txt_dir, bin_dir), archive_path)
    except OSError as ex:
        raise MissingResourceError(f"Fail to create archive {archive_path}: {ex}") from ex

    for name in DICT_BINARY_FILES:
        binary_path = bin_dir / name
        try:
            binary_path.unlink()
        except OSError:
            logger.error(f"Fail to delete temporary binary file: {binary_path}")

    logger.success(f"System dictionary is encoded into {archive_path}")
    return archive_path
