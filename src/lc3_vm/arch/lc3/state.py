# lc3_vm/arch/lc3/state.py
"""
LC-3 CPU固有の状態定義（レジスタファイルとコンディションフラグ）。
"""
from array import array
from dataclasses import dataclass
from typing import Optional
from enum import IntEnum

from lc3_vm.core.state import CpuState

PC_START = 0x3000

# @intent:responsibility レジスタファイルのインデックスを閉じた列挙型として定義します。
# @intent:rationale 範囲外インデックスを実行時チェックではなく型で排除します。
class Register(IntEnum):
    R0 = 0
    R1 = 1
    R2 = 2
    R3 = 3
    R4 = 4
    R5 = 5
    R6 = 6
    R7 = 7
    PC = 8
    COND = 9

# @intent:constant COND レジスタが取りうる3つの値。常にどれか1つだけがセットされます。
class ConditionFlag(IntEnum):
    POS = 1 << 0  # P
    ZRO = 1 << 1  # Z
    NEG = 1 << 2  # N

# @intent:responsibility 10本の16bitレジスタ（R0-R7, PC, COND）を保持します。
class RegisterFile:
    """
    書き込み値は常に16bitにマスクされます。
    """
    def __init__(self):
        self._regs = array('H', [0] * len(Register))

    def read(self, reg: Register) -> int:
        return self._regs[reg]

    def write(self, reg: Register, value: int) -> None:
        self._regs[reg] = value & 0xFFFF

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterFile):
            return NotImplemented
        return self._regs == other._regs

    def __repr__(self) -> str:
        return "RegisterFile(" + ", ".join(f"{r.name}={self._regs[r]:#06x}" for r in Register) + ")"

# @intent:responsibility LC-3 CPUの全てのレジスタと実行フラグの状態を保持します。
@dataclass
class Lc3CpuState(CpuState):
    """
    LC-3 CPUのレジスタ状態を保持するデータクラス。
    生成時はR0-R7が0、CONDがZERO、PCが0x3000です。
    """
    registers: Optional[RegisterFile] = None

    # @intent:post-condition 渡されたレジスタファイルはそのまま保持し、省略時のみ初期値を設定します。
    def __post_init__(self):
        if self.registers is None:
            self.registers = RegisterFile()
            self.registers.write(Register.PC, PC_START)
            self.registers.write(Register.COND, ConditionFlag.ZRO)

    # @intent:accessor PC/CONDおよびフラグビットにアクセスするためのプロパティを提供します。

    @property
    def pc(self) -> int:
        return self.registers.read(Register.PC)

    @pc.setter
    def pc(self, value: int) -> None:
        self.registers.write(Register.PC, value)

    @property
    def cond(self) -> int:
        return self.registers.read(Register.COND)

    @cond.setter
    def cond(self, value: int) -> None:
        self.registers.write(Register.COND, value)

    @property
    def flag_n(self) -> bool:
        return (self.cond & ConditionFlag.NEG) != 0

    @property
    def flag_z(self) -> bool:
        return (self.cond & ConditionFlag.ZRO) != 0

    @property
    def flag_p(self) -> bool:
        return (self.cond & ConditionFlag.POS) != 0

    def get_gpr(self, index: int) -> int:
        return self.registers.read(Register(index))

    def set_gpr(self, index: int, value: int) -> None:
        self.registers.write(Register(index), value)
