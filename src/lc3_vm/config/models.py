from dataclasses import dataclass, field
from typing import Dict, List

from lc3_vm.arch.lc3.state import PC_START
from lc3_vm.transport.bus import KBSR, KBDR

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str = "RAM"  # "RAM", "KEYBOARD"
    label: str = ""

@dataclass
class CpuInitialState:
    pc: int = PC_START
    registers: Dict[str, int] = field(default_factory=dict)  # "r0".."r7", "cond"

@dataclass
class SystemConfig:
    memory_map: List[MemoryRegion] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    images: List[str] = field(default_factory=list)
    max_steps: int = 0  # 0 = 無制限

    # @intent:responsibility 標準的なLC-3構成（64K RAM + キーボードレジスタ）を返します。
    @classmethod
    def default(cls) -> "SystemConfig":
        return cls(memory_map=default_memory_map())

def default_memory_map() -> List[MemoryRegion]:
    return [
        MemoryRegion(0x0000, KBSR - 1, "RAM", "main"),
        MemoryRegion(KBSR, KBDR, "KEYBOARD", "keyboard"),
        MemoryRegion(KBDR + 1, 0xFFFF, "RAM", "high"),
    ]
