# lc3_vm/arch/lc3/instructions/__init__.py
"""
LC-3命令セット実装パッケージ。
"""
from lc3_vm.core.errors import IllegalOpcodeError
from lc3_vm.core.snapshot import Operation
from lc3_vm.transport.bus import Bus
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.state import Lc3CpuState
from .base import opcode_of, sign_extend, Opcode
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility 16bit命令語をデコードし、Operationオブジェクトを返します。
# @intent:post-condition 予約オペコード（RTI, RES）はIllegalOpcodeErrorとなります。
def decode_instruction(word: int, address: int = 0) -> Operation:
    """
    命令語をデコードします。`address`はエラー報告にのみ使用されます。
    """
    opcode = opcode_of(word)
    decoder = DECODE_MAP.get(opcode)
    if decoder is None:
        raise IllegalOpcodeError(f"Reserved opcode {opcode.name}", address, word)
    return decoder(word)

# @intent:responsibility デコードされたLC-3命令を実行します。
def execute_instruction(operation: Operation, state: Lc3CpuState, bus: Bus, console: Console) -> None:
    """
    デコードされた命令を実行し、CPUの状態とメモリを変更します。
    """
    EXECUTE_MAP[operation.opcode](state, bus, console, operation)
