# lc3_vm/arch/lc3/instructions/alu.py
"""
算術・論理命令（ADD, AND, NOT）の実装。
"""
from lc3_vm.core.snapshot import Operation
from lc3_vm.transport.bus import Bus
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.state import Lc3CpuState
from .base import (
    Opcode, update_flags, field_dr, field_sr1, field_sr2, field_imm5,
)

def _decode_binary(word: int, opcode: Opcode) -> Operation:
    imm_mode = bool((word >> 5) & 0x1)
    return Operation(
        word, opcode, opcode.name,
        dr=field_dr(word), sr1=field_sr1(word),
        sr2=0 if imm_mode else field_sr2(word),
        imm_mode=imm_mode,
        imm5=field_imm5(word) if imm_mode else 0,
    )

def _second_operand(state: Lc3CpuState, op: Operation) -> int:
    return op.imm5 if op.imm_mode else state.get_gpr(op.sr2)

# --- ADD ---
# @intent:responsibility ADD命令をデコードします。bit 5が立っていれば即値モードです。
def decode_add(word: int) -> Operation:
    return _decode_binary(word, Opcode.ADD)

# @intent:responsibility DR <- SR1 + (imm5 | SR2)。結果は16bitで折り返します。
def execute_add(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.set_gpr(op.dr, state.get_gpr(op.sr1) + _second_operand(state, op))
    update_flags(state, op.dr)

# --- AND ---
def decode_and(word: int) -> Operation:
    return _decode_binary(word, Opcode.AND)

# @intent:responsibility DR <- SR1 & (imm5 | SR2)。
def execute_and(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.set_gpr(op.dr, state.get_gpr(op.sr1) & _second_operand(state, op))
    update_flags(state, op.dr)

# --- NOT ---
def decode_not(word: int) -> Operation:
    return Operation(word, Opcode.NOT, "NOT", dr=field_dr(word), sr1=field_sr1(word))

# @intent:responsibility DR <- ~SR1（16bit内のビット反転）。
def execute_not(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.set_gpr(op.dr, ~state.get_gpr(op.sr1) & 0xFFFF)
    update_flags(state, op.dr)
