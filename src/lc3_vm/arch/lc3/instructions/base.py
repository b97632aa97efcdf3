# lc3_vm/arch/lc3/instructions/base.py
"""
LC-3命令実装用の共通ユーティリティ（オペコード定義、フィールド抽出、符号拡張、フラグ更新）。
"""
from enum import IntEnum

from lc3_vm.arch.lc3.state import Lc3CpuState, ConditionFlag

# @intent:constant 命令語の上位4bit（bits 15-12）で表されるオペコード。
class Opcode(IntEnum):
    BR = 0
    ADD = 1
    LD = 2
    ST = 3
    JSR = 4
    AND = 5
    LDR = 6
    STR = 7
    RTI = 8
    NOT = 9
    LDI = 10
    STI = 11
    JMP = 12
    RES = 13
    LEA = 14
    TRAP = 15

# @intent:utility_function 命令語からオペコードを取り出します。
def opcode_of(word: int) -> Opcode:
    return Opcode((word >> 12) & 0xF)

# @intent:utility_function `bit_count`ビットの2の補数値を16bitに符号拡張します。
# @intent:rationale 最上位ビットが1ならbit_countより上を全て1で埋め、そうでなければそのまま返します。
#                  結果は再度同じbit_countで符号拡張しても変化しません。
def sign_extend(value: int, bit_count: int) -> int:
    """Sign-extend the low `bit_count` bits of `value` to 16 bits."""
    if (value >> (bit_count - 1)) & 1:
        value |= (0xFFFF << bit_count)
    return value & 0xFFFF

# --- Field extraction ---

def field_dr(word: int) -> int:
    """bits 11-9"""
    return (word >> 9) & 0x7

def field_sr1(word: int) -> int:
    """bits 8-6"""
    return (word >> 6) & 0x7

def field_sr2(word: int) -> int:
    """bits 2-0"""
    return word & 0x7

def field_imm5(word: int) -> int:
    return sign_extend(word & 0x1F, 5)

def field_offset6(word: int) -> int:
    return sign_extend(word & 0x3F, 6)

def field_pc_offset9(word: int) -> int:
    return sign_extend(word & 0x1FF, 9)

def field_pc_offset11(word: int) -> int:
    return sign_extend(word & 0x7FF, 11)

# @intent:utility_function 書き込まれたレジスタの値の符号に応じてCONDを更新します。
# @intent:post-condition CONDにはPOS/ZRO/NEGのうち必ず1つだけがセットされます。
def update_flags(state: Lc3CpuState, index: int) -> None:
    value = state.get_gpr(index)
    if value == 0:
        state.cond = ConditionFlag.ZRO
    elif value >> 15:
        # 最上位ビットが1なら負
        state.cond = ConditionFlag.NEG
    else:
        state.cond = ConditionFlag.POS
