# lc3_vm/arch/lc3/cpu.py
"""
LC-3 CPUエミュレーションの中心モジュール。
"""
from typing import Dict

from lc3_vm.core.cpu import AbstractCpu
from lc3_vm.core.snapshot import Operation
from lc3_vm.transport.bus import Bus
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.state import Lc3CpuState, Register
from lc3_vm.arch.lc3.instructions import decode_instruction, execute_instruction

# @intent:responsibility LC-3 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Lc3Cpu(AbstractCpu):
    """
    LC-3 CPUをエミュレートするクラス。
    トラップによるコンソール入出力のため、Busに加えてConsoleを受け取ります。
    """
    # @intent:pre-condition `console`はキーボードデバイスと同じ入力源であるべきです。
    def __init__(self, bus: Bus, console: Console):
        super().__init__(bus)
        self._console = console

    def _create_initial_state(self) -> Lc3CpuState:
        return Lc3CpuState()

    def _current_pc(self) -> int:
        return self._state.pc

    # @intent:responsibility 現在のPCから命令語をフェッチします（KBSRのポーリングも通常の読み込みとして発生しうる）。
    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    # LC-3ではフェッチ直後、デコード前にPCをインクリメントする
    def _update_pc(self) -> None:
        self._state.pc = self._state.pc + 1

    def _decode(self, word: int, address: int) -> Operation:
        return decode_instruction(word, address)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus, self._console)

    def get_register_map(self) -> Dict[str, int]:
        regs = self._state.registers
        return {reg.name: regs.read(reg) for reg in Register}

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {"N": s.flag_n, "Z": s.flag_z, "P": s.flag_p}
