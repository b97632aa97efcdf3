# lc3_vm/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、デコードされた命令と、1命令実行後のCPUとバスの状態を記録する
不変のデータ構造を定義します。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from lc3_vm.core.state import CpuState
from lc3_vm.transport.bus import BusAccess

# @intent:responsibility デコードされた命令の詳細（オペコードとオペランドフィールド）を記録します。
# @intent:rationale フィールドは命令ごとに意味が異なるため、使用しないフィールドは0のままにします。
#                  即値・オフセットは全て16bitに符号拡張済みの値を保持します。
@dataclass(frozen=True)
class Operation:
    """
    デコード済み命令。word は元の16bit命令語です。
    """
    word: int
    opcode: int
    mnemonic: str
    dr: int = 0          # bits 11-9 (DR / SR / BRのnzp)
    sr1: int = 0         # bits 8-6 (SR1 / BaseR)
    sr2: int = 0         # bits 2-0
    imm_mode: bool = False
    imm5: int = 0
    offset6: int = 0
    pc_offset9: int = 0
    pc_offset11: int = 0
    trap_vector: int = 0

    @property
    def base_r(self) -> int:
        return self.sr1

    @property
    def cond_mask(self) -> int:
        return self.dr

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    instruction_count: int
    address: int  # 命令をフェッチしたアドレス
    info: Optional[str] = None  # 例: "x3000: ADD"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    1命令実行後のCPU状態（コピー）、実行した命令、メタデータ、バスアクティビティ。
    """
    state: CpuState
    operation: Optional[Operation]
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
