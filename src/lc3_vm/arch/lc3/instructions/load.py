# lc3_vm/arch/lc3/instructions/load.py
"""
メモリアクセス命令（LD, LDI, LDR, LEA, ST, STI, STR）の実装。
アドレス計算は全て16bitで折り返します（Bus側でもマスクされます）。
"""
from lc3_vm.core.snapshot import Operation
from lc3_vm.transport.bus import Bus
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.state import Lc3CpuState
from .base import (
    Opcode, update_flags, field_dr, field_sr1, field_offset6, field_pc_offset9,
)

def _decode_pc_relative(word: int, opcode: Opcode) -> Operation:
    return Operation(word, opcode, opcode.name, dr=field_dr(word), pc_offset9=field_pc_offset9(word))

def _decode_base_relative(word: int, opcode: Opcode) -> Operation:
    return Operation(word, opcode, opcode.name, dr=field_dr(word), sr1=field_sr1(word), offset6=field_offset6(word))

# 実行時のstate.pcは既に次の命令を指している（CPUのstepでフェッチ直後に更新済み）
def _pc_relative(state: Lc3CpuState, op: Operation) -> int:
    return (state.pc + op.pc_offset9) & 0xFFFF

def _base_relative(state: Lc3CpuState, op: Operation) -> int:
    return (state.get_gpr(op.base_r) + op.offset6) & 0xFFFF

# --- LD ---
def decode_ld(word: int) -> Operation:
    return _decode_pc_relative(word, Opcode.LD)

# @intent:responsibility DR <- mem[PC + SEXT(PCoffset9)]
def execute_ld(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.set_gpr(op.dr, bus.read(_pc_relative(state, op)))
    update_flags(state, op.dr)

# --- LDI ---
def decode_ldi(word: int) -> Operation:
    return _decode_pc_relative(word, Opcode.LDI)

# @intent:responsibility DR <- mem[mem[PC + SEXT(PCoffset9)]]（1段の間接参照）
def execute_ldi(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    pointer = bus.read(_pc_relative(state, op))
    state.set_gpr(op.dr, bus.read(pointer))
    update_flags(state, op.dr)

# --- LDR ---
def decode_ldr(word: int) -> Operation:
    return _decode_base_relative(word, Opcode.LDR)

# @intent:responsibility DR <- mem[BaseR + SEXT(offset6)]
def execute_ldr(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.set_gpr(op.dr, bus.read(_base_relative(state, op)))
    update_flags(state, op.dr)

# --- LEA ---
def decode_lea(word: int) -> Operation:
    return _decode_pc_relative(word, Opcode.LEA)

# @intent:responsibility DR <- PC + SEXT(PCoffset9)。メモリにはアクセスしません。
def execute_lea(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.set_gpr(op.dr, _pc_relative(state, op))
    update_flags(state, op.dr)

# --- ST ---
def decode_st(word: int) -> Operation:
    return _decode_pc_relative(word, Opcode.ST)

# @intent:responsibility mem[PC + SEXT(PCoffset9)] <- SR。フラグは変化しません。
def execute_st(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    bus.write(_pc_relative(state, op), state.get_gpr(op.dr))

# --- STI ---
def decode_sti(word: int) -> Operation:
    return _decode_pc_relative(word, Opcode.STI)

# @intent:responsibility mem[mem[PC + SEXT(PCoffset9)]] <- SR
def execute_sti(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    pointer = bus.read(_pc_relative(state, op))
    bus.write(pointer, state.get_gpr(op.dr))

# --- STR ---
def decode_str(word: int) -> Operation:
    return _decode_base_relative(word, Opcode.STR)

# @intent:responsibility mem[BaseR + SEXT(offset6)] <- SR
def execute_str(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    bus.write(_base_relative(state, op), state.get_gpr(op.dr))
