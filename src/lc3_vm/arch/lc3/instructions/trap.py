# lc3_vm/arch/lc3/instructions/trap.py
"""
トラップ（システムコール）ディスパッチャ。

TRAP命令の下位8bitのベクタに応じてコンソール入出力を行います。
文字列出力（PUTS/PUTSP）はBus.peekでメモリを直接参照し、キーボードのポーリングは発生させません。
"""
from enum import IntEnum
from typing import Callable, Dict

from lc3_vm.core.errors import InvalidTrapError
from lc3_vm.core.snapshot import Operation
from lc3_vm.transport.bus import Bus
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.state import Lc3CpuState, Register
from .base import update_flags

IN_PROMPT = "Enter a character: "
HALT_MESSAGE = "HALT"

# @intent:constant 定義済みのトラップベクタ。
class TrapVector(IntEnum):
    GETC = 0x20   # Get a character from the keyboard, not echoed
    OUT = 0x21    # Output a character
    PUTS = 0x22   # Output a word string
    IN = 0x23     # Get a character from the keyboard, echoed
    PUTSP = 0x24  # Output a byte string
    HALT = 0x25   # Halt the program

TrapHandler = Callable[[Lc3CpuState, Bus, Console], None]

# @intent:responsibility キーボードから1文字をエコーなしで読み込み、R0に格納します（上位8bitはクリア）。
def trap_getc(state: Lc3CpuState, bus: Bus, console: Console) -> None:
    state.registers.write(Register.R0, console.read_char() & 0xFF)
    update_flags(state, Register.R0)

# @intent:responsibility R0の下位8bitを1文字として出力します。
def trap_out(state: Lc3CpuState, bus: Bus, console: Console) -> None:
    console.write_char(state.registers.read(Register.R0) & 0xFF)
    console.flush()

# @intent:responsibility R0が指すアドレスから、1ワード1文字の文字列を0ワードまで出力します。
def trap_puts(state: Lc3CpuState, bus: Bus, console: Console) -> None:
    address = state.registers.read(Register.R0)
    word = bus.peek(address)
    while word:
        console.write_char(word & 0xFF)
        address = (address + 1) & 0xFFFF
        word = bus.peek(address)
    console.flush()

# @intent:responsibility プロンプトを表示し、1文字をエコー付きで読み込んでR0に格納します。
def trap_in(state: Lc3CpuState, bus: Bus, console: Console) -> None:
    console.write_text(IN_PROMPT)
    console.flush()
    code = console.read_char() & 0xFF
    console.write_char(code)
    console.flush()
    state.registers.write(Register.R0, code)
    update_flags(state, Register.R0)

# @intent:responsibility 1ワードに2文字（下位バイト→上位バイト）を詰めた文字列を0ワードまで出力します。
# @intent:rationale 奇数長の文字列では最後のワードの上位バイトが0になるため、上位バイトは非0の時だけ出力します。
def trap_putsp(state: Lc3CpuState, bus: Bus, console: Console) -> None:
    address = state.registers.read(Register.R0)
    word = bus.peek(address)
    while word:
        console.write_char(word & 0xFF)
        high = word >> 8
        if high:
            console.write_char(high)
        address = (address + 1) & 0xFFFF
        word = bus.peek(address)
    console.flush()

# @intent:responsibility 停止メッセージを出力し、実行ループを終了させます。
def trap_halt(state: Lc3CpuState, bus: Bus, console: Console) -> None:
    console.write_text(HALT_MESSAGE + "\n")
    console.flush()
    state.running = False

# @intent:map トラップベクタからハンドラへのマッピングテーブル。
TRAP_MAP: Dict[int, TrapHandler] = {
    TrapVector.GETC: trap_getc,
    TrapVector.OUT: trap_out,
    TrapVector.PUTS: trap_puts,
    TrapVector.IN: trap_in,
    TrapVector.PUTSP: trap_putsp,
    TrapVector.HALT: trap_halt,
}

def trap_mnemonic(vector: int) -> str:
    try:
        return TrapVector(vector).name
    except ValueError:
        return f"TRAP x{vector:02X}"

# @intent:responsibility トラップベクタに対応するハンドラを呼び出します。
# @intent:post-condition 未定義のベクタはInvalidTrapErrorとして実行を中断させます。
def dispatch_trap(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    handler = TRAP_MAP.get(op.trap_vector)
    if handler is None:
        # R7は既に戻りアドレス（＝この命令の次）を指している
        raise InvalidTrapError(op.trap_vector, (state.pc - 1) & 0xFFFF, op.word)
    handler(state, bus, console)
