# lc3_vm/transport/terminal.py
"""
端末モード制御。

実行ループの前に端末の行バッファリングとエコーを無効化し、
正常終了・CPUフォールト・割り込み(Ctrl-C)のどの経路でも元の設定に戻します。
"""
import logging
import sys
import termios
import tty
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

logger = logging.getLogger(__name__)

# @intent:responsibility 端末をcbreakモード（ICANON/ECHO無効）にし、スコープ終了時に必ず復元します。
# @intent:rationale 標準入力が端末でない場合（パイプやファイル）は何もしません。
@contextmanager
def raw_terminal(stream: Optional[TextIO] = None) -> Iterator[bool]:
    """
    with文で使用します。端末モードを変更した場合はTrueをyieldします。
    """
    stream = stream if stream is not None else sys.stdin
    try:
        fd = stream.fileno()
        old_settings = termios.tcgetattr(fd)
    except (AttributeError, ValueError, OSError, termios.error):
        logger.debug("stdin is not a terminal; leaving input mode unchanged")
        yield False
        return

    tty.setcbreak(fd)
    try:
        yield True
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
        logger.debug("terminal settings restored")
