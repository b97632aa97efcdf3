# tests/transport/test_terminal.py
"""
lc3_vm.transport.terminalモジュールの単体テスト。
"""
import io
from unittest.mock import patch

import pytest

from lc3_vm.transport import terminal
from lc3_vm.transport.terminal import raw_terminal

class FakeTty:
    def fileno(self):
        return 7

# @intent:test_suite 端末モードが全ての終了経路で復元されることを検証します。

def test_non_terminal_stream_is_left_alone():
    with raw_terminal(io.StringIO()) as changed:
        assert changed is False

@patch.object(terminal.termios, "tcsetattr")
@patch.object(terminal.tty, "setcbreak")
@patch.object(terminal.termios, "tcgetattr", return_value=["saved"])
def test_settings_restored_after_normal_exit(mock_get, mock_cbreak, mock_set):
    with raw_terminal(FakeTty()) as changed:
        assert changed is True
        mock_cbreak.assert_called_once_with(7)
        mock_set.assert_not_called()
    mock_set.assert_called_once_with(7, terminal.termios.TCSADRAIN, ["saved"])

@patch.object(terminal.termios, "tcsetattr")
@patch.object(terminal.tty, "setcbreak")
@patch.object(terminal.termios, "tcgetattr", return_value=["saved"])
def test_settings_restored_on_interrupt(mock_get, mock_cbreak, mock_set):
    with pytest.raises(KeyboardInterrupt):
        with raw_terminal(FakeTty()):
            raise KeyboardInterrupt
    mock_set.assert_called_once_with(7, terminal.termios.TCSADRAIN, ["saved"])

@patch.object(terminal.termios, "tcsetattr")
@patch.object(terminal.tty, "setcbreak")
@patch.object(terminal.termios, "tcgetattr", return_value=["saved"])
def test_settings_restored_on_error(mock_get, mock_cbreak, mock_set):
    with pytest.raises(RuntimeError):
        with raw_terminal(FakeTty()):
            raise RuntimeError("fault")
    mock_set.assert_called_once()
