"""
システム辞書のアーカイブ (sys.bin) へのアクセス。

sys.bin は辞書の設定ファイル・定義ファイル・バイナリファイルをまとめた zip ファイルで、
開いた時点で全リソースをメモリ上に読み込む。
ユーザー辞書 (user.bin / user.csv) はアーカイブ本体とは別に、メモリ上の名前付きバッファとして保持される。
"""

from __future__ import annotations

import os
import zipfile
from pathlib import Path

from jma_knowledge.exceptions import MissingResourceError, StructuralParseError
from jma_knowledge.logging import logger


def _is_plain_file_name(name: str) -> bool:
    return (
        name not in ("", ".", "..")
        and "/" not in name
        and "\\" not in name
        and ":" not in name
    )


class DictionaryArchive:
    def __init__(self) -> None:
        self.path: Path | None = None
        self._resources: dict[str, bytes] = {}
        self._staged: dict[str, bytes] = {}

    @property
    def is_open(self) -> bool:
        return self.path is not None

    def open(self, path: str | Path) -> None:
        """
        アーカイブを開き、全リソースを読み込む。既に開いているアーカイブは閉じられる。

        Raises:
            MissingResourceError: アーカイブが存在しない・読み込めない場合
            StructuralParseError: zip ファイルとして壊れている場合、またはディレクトリを含むリソース名がある場合
        """

        self.close()
        path = Path(path)
        try:
            with zipfile.ZipFile(path, "r") as zf:
                resources = {name: zf.read(name) for name in zf.namelist()}
        except FileNotFoundError as ex:
            raise MissingResourceError(f"Fail to open system dictionary: {path}") from ex
        except zipfile.BadZipFile as ex:
            raise StructuralParseError(f"Broken system dictionary archive: {path}") from ex
        except OSError as ex:
            raise MissingResourceError(f"Cannot read system dictionary {path}: {ex}") from ex

        # リソースは作業ディレクトリの直下に書き出されるため、ファイル名のみを許可する
        for name in resources:
            if not _is_plain_file_name(name):
                raise StructuralParseError(
                    f"Invalid resource name {name!r} in system dictionary archive: {path}"
                )

        self.path = path
        self._resources = resources
        logger.debug(f"{len(resources)} resources are loaded from {path}")

    def close(self) -> None:
        self.path = None
        self._resources = {}
        self._staged = {}

    def names(self) -> list[str]:
        return sorted({*self._resources, *self._staged})

    def read_resource(self, name: str) -> bytes | None:
        """リソースの内容を返す。存在しない場合は None"""
        if name in self._staged:
            return self._staged[name]
        return self._resources.get(name)

    def stage_empty_binary_user_dict(self, name: str) -> None:
        """バイナリのユーザー辞書用の空のバッファを用意する。内容は mecab-dict-index の出力で置き換えられる"""
        self._staged[name] = b""

    def stage_empty_text_user_dict(self, name: str) -> None:
        """テキストのユーザー辞書用の空のバッファを用意する"""
        self._staged[name] = b""

    def copy_into_staged(self, data: bytes, name: str) -> bool:
        """
        用意済みのバッファに内容を書き込む。

        Returns:
            bool: 書き込めた場合は True、name のバッファが用意されていない場合は False
        """

        if name not in self._staged:
            return False
        self._staged[name] = data
        return True

    def extract_to(self, directory: Path) -> None:
        """アーカイブのリソースとメモリ上のバッファをすべて directory に書き出す"""
        directory.mkdir(parents=True, exist_ok=True)
        for name, data in {**self._resources, **self._staged}.items():
            (directory / name).write_bytes(data)

    @staticmethod
    def compile(src_files: list[Path], dest: Path) -> None:
        """
        ファイルのリストを 1 つのアーカイブにまとめる。
        失敗した場合は書きかけのアーカイブを残さない。

        Args:
            src_files (list[Path]): アーカイブに格納するファイルのリスト (ファイル名がリソース名になる)
            dest (Path): 出力先のアーカイブのパス

        Raises:
            MissingResourceError: 格納するファイルが存在しない場合
        """

        tmp_path = dest.with_name(dest.name + ".tmp")
        try:
            with zipfile.ZipFile(tmp_path, "w", zipfile.ZIP_DEFLATED) as zf:
                for src in src_files:
                    if not src.is_file():
                        raise MissingResourceError(f"Cannot find file to archive: {src}")
                    zf.write(src, arcname=src.name)
            os.replace(tmp_path, dest)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
