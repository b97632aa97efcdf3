# lc3_vm/arch/lc3/instructions/control.py
"""
制御命令（分岐、ジャンプ、サブルーチン呼び出し）の実装。
"""
from lc3_vm.core.snapshot import Operation
from lc3_vm.transport.bus import Bus
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.state import Lc3CpuState, Register
from .base import Opcode, field_dr, field_sr1, field_pc_offset9, field_pc_offset11
from .trap import trap_mnemonic, dispatch_trap

# --- BR ---
# @intent:responsibility BR命令をデコードします。bits 11-9 はn/z/pの条件マスクです。
def decode_br(word: int) -> Operation:
    mask = field_dr(word)
    suffix = "".join(flag for bit, flag in ((4, "n"), (2, "z"), (1, "p")) if mask & bit)
    return Operation(word, Opcode.BR, "BR" + suffix, dr=mask, pc_offset9=field_pc_offset9(word))

# @intent:responsibility 条件マスクとCONDの論理積が非0ならPCを相対ジャンプさせます。
# @intent:rationale マスクが0（nzpいずれも指定なし）の場合は決して分岐しないNOPとして振る舞います。
def execute_br(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    if op.cond_mask & state.cond:
        state.pc = state.pc + op.pc_offset9

# --- JMP ---
def decode_jmp(word: int) -> Operation:
    base_r = field_sr1(word)
    return Operation(word, Opcode.JMP, "RET" if base_r == 7 else "JMP", sr1=base_r)

# @intent:responsibility PC <- BaseR。R7経由のJMPが慣習的なRETです。
def execute_jmp(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.pc = state.get_gpr(op.base_r)

# --- JSR / JSRR ---
# @intent:responsibility JSR（bit 11 = 1, PC相対）とJSRR（bit 11 = 0, ベースレジスタ）をデコードします。
def decode_jsr(word: int) -> Operation:
    if (word >> 11) & 0x1:
        return Operation(word, Opcode.JSR, "JSR", imm_mode=True, pc_offset11=field_pc_offset11(word))
    return Operation(word, Opcode.JSR, "JSRR", sr1=field_sr1(word))

# @intent:responsibility R7に戻りアドレスを保存してからサブルーチンへジャンプします。
# @intent:rationale JSRRでBaseRがR7の場合に備え、ジャンプ先はR7を上書きする前に読み出します。
def execute_jsr(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    # state.pcはフェッチ時点で既にこの命令の次を指している
    return_addr = state.pc
    if op.imm_mode:
        target = return_addr + op.pc_offset11
    else:
        target = state.get_gpr(op.base_r)
    state.registers.write(Register.R7, return_addr)
    state.pc = target

# --- TRAP ---
def decode_trap(word: int) -> Operation:
    vector = word & 0xFF
    return Operation(word, Opcode.TRAP, trap_mnemonic(vector), trap_vector=vector)

# @intent:responsibility R7 <- PC とした後、トラップベクタに応じたシステムコールを実行します。
def execute_trap(state: Lc3CpuState, bus: Bus, console: Console, op: Operation) -> None:
    state.registers.write(Register.R7, state.pc)
    dispatch_trap(state, bus, console, op)
