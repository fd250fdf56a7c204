"""
形態素解析エンジン (MeCab) との境界。

辞書ナレッジはエンジンの内部のバイナリ形式には一切触れず、ディレクトリのパスと
文字コード名だけを渡して mecab-dict-index の実行とタガーの生成を依頼する。
MecabEngine は fugashi を通じて MeCab を呼び出す。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Protocol

from fugashi import GenericTagger, build_dictionary  # type: ignore

from jma_knowledge.constants import EncodingType
from jma_knowledge.exceptions import ExternalToolError
from jma_knowledge.logging import logger


class DictionaryEngine(Protocol):
    def compile_system_dictionary(
        self, src_dir: Path, dest_dir: Path, encoding: EncodingType
    ) -> int: ...

    def compile_user_dictionary(
        self, dict_dir: Path, user_dict_path: Path, csv_path: Path, encoding: EncodingType
    ) -> int: ...

    def create_handle(self, dict_dir: Path, user_dict_path: Path | None = None) -> Any: ...


def _escape_path(path: Path) -> str:
    path_str = str(path)
    # windows環境だとパスが途中でエスケープされるバグがあるため、区切り文字を二重にする
    if os.name == "nt":
        path_str = path_str.replace("\\", "\\\\")
    return path_str


class MecabEngine:
    """fugashi を利用して MeCab の辞書コンパイル・タガー生成を行う"""

    def compile_system_dictionary(
        self, src_dir: Path, dest_dir: Path, encoding: EncodingType
    ) -> int:
        """
        テキスト形式のシステム辞書をコンパイルし、dest_dir にバイナリファイルを出力する。
        入力の文字コードは src_dir の dicrc の dictionary-charset で決まる (未指定時は EUC-JP)。

        Returns:
            int: mecab-dict-index の終了ステータス (0 で成功)
        """

        return self._run_dict_index(
            f"-d {_escape_path(src_dir)} -o {_escape_path(dest_dir)} -t {encoding.value}"
        )

    def compile_user_dictionary(
        self, dict_dir: Path, user_dict_path: Path, csv_path: Path, encoding: EncodingType
    ) -> int:
        """
        CSV 形式のユーザー辞書をコンパイルし、user_dict_path にバイナリ辞書を出力する。
        CSV は解析時の文字コードに変換済みなので、入力・出力ともに同じ文字コードを指定する。
        MeCab は辞書の文字コード名がシステム辞書とユーザー辞書で完全一致していないと動かない。

        Returns:
            int: mecab-dict-index の終了ステータス (0 で成功)
        """

        args = (
            f"-d {_escape_path(dict_dir)} -u {_escape_path(user_dict_path)} "
            f"-f {encoding.value} -t {encoding.value} {_escape_path(csv_path)}"
        )
        if os.name == "nt":
            # なぜかリソースファイルが読み込まれず、先頭の引数はなぜかくっつけないと認識しない
            args = f"-r{_escape_path(dict_dir / 'dicrc')} " + args
        return self._run_dict_index(args)

    def create_handle(self, dict_dir: Path, user_dict_path: Path | None = None) -> Any:
        """
        辞書ディレクトリからタガーを生成する。

        Raises:
            ExternalToolError: タガーの生成に失敗した場合
        """

        # 念のため、パス区切り文字は OS に関わらず通常のスラッシュとしている
        # パスをダブルクオートで囲わないと、空白の入ったパスでエラーになる
        args = f'-r "{(dict_dir / "dicrc").as_posix()}" -d "{dict_dir.as_posix()}"'
        if user_dict_path is not None:
            args += f' -u "{user_dict_path.as_posix()}"'

        logger.debug(f"Parameter to create MeCab tagger: {args}")
        try:
            return GenericTagger(args)
        except RuntimeError as ex:
            raise ExternalToolError(f"Fail to create MeCab tagger: {ex}") from ex

    @staticmethod
    def _run_dict_index(args: str) -> int:
        logger.debug(f"Parameter of mecab-dict-index: {args}")
        try:
            status = build_dictionary(args)
        except RuntimeError as ex:
            logger.error(f"mecab-dict-index failed: {ex}")
            return 1
        # fugashi のバージョンによっては終了ステータスを返さず、失敗時は例外を送出する
        return status if isinstance(status, int) else 0
