# lc3_vm/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import copy
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from lc3_vm.transport.bus import Bus
from lc3_vm.core.snapshot import Snapshot, Operation, Metadata
from lc3_vm.core.state import CpuState

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._instruction_count: int = 0
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:rationale 各CPUアーキテクチャで初期状態が異なるため、抽象メソッドとして定義します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。メモリの内容は保持されます。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._instruction_count = 0

    def get_state(self) -> CpuState:
        """
        現在のCPUの状態を返します（コピーではありません）。
        """
        return self._state

    @property
    def instruction_count(self) -> int:
        return self._instruction_count

    # @intent:responsibility 現在のPCから命令語をフェッチします。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility フェッチ直後にPCを次の命令へ進めます。
    @abstractmethod
    def _update_pc(self) -> None:
        pass

    # @intent:responsibility 命令語を解析し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, word: int, address: int) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    @abstractmethod
    def _current_pc(self) -> int:
        pass

    # @intent:responsibility 1命令サイクル（フェッチ→PC更新→デコード→実行）を進めます。
    # @intent:rationale Template Methodパターン。Snapshotを作らないためrun()の高速経路としても使います。
    def _cycle(self) -> Operation:
        address = self._current_pc()
        word = self._fetch()
        self._update_pc()
        operation = self._decode(word, address)
        self._execute(operation)
        self._instruction_count += 1
        return operation

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:post-condition HALT後は何もフェッチせず、停止中を示すスナップショットを返します。
    def step(self) -> Snapshot:
        self._bus.get_and_clear_activity_log()
        address = self._current_pc()

        if not self._state.running:
            return Snapshot(
                state=copy.deepcopy(self._state),
                operation=None,
                metadata=Metadata(self._instruction_count, address, f"x{address:04X}: HALTED"),
            )

        operation = self._cycle()
        return Snapshot(
            state=copy.deepcopy(self._state),
            operation=operation,
            metadata=Metadata(self._instruction_count, address, f"x{address:04X}: {operation.mnemonic}"),
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # @intent:responsibility HALTするまで（または上限命令数に達するまで）命令を実行し続けます。
    # @intent:post-condition 実行した命令数を返します。CpuFaultはそのまま呼び出し元へ送出されます。
    def run(self, max_steps: Optional[int] = None) -> int:
        executed = 0
        trace = logger.isEnabledFor(logging.DEBUG)
        while self._state.running:
            if max_steps and executed >= max_steps:
                logger.info("Instruction limit of %d reached", max_steps)
                break
            address = self._current_pc()
            operation = self._cycle()
            # ステップ単位のスナップショットを作らないのでログは都度捨てる
            self._bus.get_and_clear_activity_log()
            if trace:
                logger.debug("x%04X: %s (%04X)", address, operation.mnemonic, operation.word)
            executed += 1
        return executed

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグの各ビットの状態を辞書形式で返す。
        """
        pass
