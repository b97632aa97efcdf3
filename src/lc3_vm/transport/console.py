# lc3_vm/transport/console.py
"""
Transport Layer (コンソール)

LC-3のキーボード/ディスプレイに相当する文字入出力の協調オブジェクトを定義します。
CPUコアはこのインターフェースにのみ依存し、実際の端末やテスト用バッファを差し替えられます。
"""
import os
import select
import sys
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterable, Optional, TextIO, Union

# @intent:responsibility 文字入出力の抽象インターフェースを定義します。
class Console(ABC):
    """
    キーボード入力とディスプレイ出力の抽象基底クラス。
    文字は0-255の整数コードとして扱います。
    """
    # @intent:responsibility ブロックせずに入力文字が到着済みかどうかを返します。
    @abstractmethod
    def key_available(self) -> bool:
        pass

    # @intent:responsibility 1文字を読み込みます。入力が来るまでブロックします。
    @abstractmethod
    def read_char(self) -> int:
        pass

    @abstractmethod
    def write_char(self, code: int) -> None:
        pass

    @abstractmethod
    def flush(self) -> None:
        pass

    def write_text(self, text: str) -> None:
        for ch in text.encode("latin-1", errors="replace"):
            self.write_char(ch)

# @intent:responsibility プロセスの標準入出力を使う端末コンソールです。
class TerminalConsole(Console):
    """
    標準入力のファイルディスクリプタをselectでポーリングし、os.readで1バイトずつ読み込みます。
    出力は標準出力のバイナリバッファに書き込みます。
    """
    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self._stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        self._out: BinaryIO = getattr(stdout, "buffer", stdout)
        self._eof = False

    # @intent:post-condition 入力の終端に達した後は常にFalseを返します。
    def key_available(self) -> bool:
        if self._eof:
            return False
        r, _, _ = select.select([self._stdin.fileno()], [], [], 0)
        return len(r) > 0

    def read_char(self) -> int:
        ch = os.read(self._stdin.fileno(), 1)
        if not ch:
            self._eof = True
            raise EOFError("Console input closed.")
        return ch[0]

    def write_char(self, code: int) -> None:
        self._out.write(bytes([code & 0xFF]))

    def flush(self) -> None:
        self._out.flush()

# @intent:responsibility メモリ上のバッファで入出力を行うコンソールです（テスト・非対話実行用）。
class BufferedConsole(Console):
    """
    あらかじめ与えた入力を順に返し、出力をbytearrayに蓄積します。
    入力が尽きた状態でread_charを呼ぶとEOFErrorになります。
    """
    def __init__(self, input_data: Union[bytes, str, Iterable[int]] = b""):
        if isinstance(input_data, str):
            input_data = input_data.encode("latin-1")
        self._input = bytearray(input_data)
        self.output = bytearray()
        self.flush_count = 0

    def feed(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode("latin-1")
        self._input.extend(data)

    def key_available(self) -> bool:
        return len(self._input) > 0

    def read_char(self) -> int:
        if not self._input:
            raise EOFError("No buffered console input left.")
        return self._input.pop(0)

    def write_char(self, code: int) -> None:
        self.output.append(code & 0xFF)

    def flush(self) -> None:
        self.flush_count += 1

    def get_output_text(self) -> str:
        return self.output.decode("latin-1")
