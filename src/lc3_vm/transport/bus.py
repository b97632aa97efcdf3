# lc3_vm/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、LC-3の16bitワードアドレス空間を抽象化し、
読み書きアクセスを適切なデバイス（RAM、メモリマップドI/O）に委譲する責務を負います。
"""
import logging
from abc import ABC, abstractmethod
from array import array
from typing import List, Tuple
from dataclasses import dataclass
from enum import Enum

from lc3_vm.transport.console import Console

logger = logging.getLogger(__name__)

ADDRESS_MASK = 0xFFFF
WORD_MASK = 0xFFFF
MEMORY_SIZE = 1 << 16

# @intent:constant キーボードのメモリマップドレジスタ。
KBSR = 0xFE00  # Keyboard status
KBDR = 0xFE02  # Keyboard data

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int  # 16bit word
    access_type: BusAccessType

# @intent:responsibility バスの抽象デバイスインターフェースを定義します。
class Device(ABC):
    """
    バスに接続されるデバイスの抽象基底クラス。
    アドレスはデバイス内でのオフセット（ワード単位）として渡されます。
    """
    @abstractmethod
    def read(self, offset: int) -> int:
        pass

    @abstractmethod
    def write(self, offset: int, data: int) -> None:
        pass

    # @intent:responsibility 副作用なしで値を読み出します。
    # @intent:rationale デフォルトはreadと同じ。ポーリング等の副作用を持つデバイスはオーバーライドします。
    def peek(self, offset: int) -> int:
        return self.read(offset)

    @abstractmethod
    def get_size(self) -> int:
        pass

# @intent:responsibility 16bitワード単位のRAMデバイスを提供します。
class RAM(Device):
    """
    ゼロ初期化された16bitワードの記憶領域。
    """
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = array('H', bytes(2 * size))
        self._size = size

    def read(self, offset: int) -> int:
        if not 0 <= offset < self._size:
            raise IndexError(f"Address {offset} out of bounds for RAM of size {self._size}.")
        return self._memory[offset]

    def write(self, offset: int, data: int) -> None:
        if not 0 <= offset < self._size:
            raise IndexError(f"Address {offset} out of bounds for RAM of size {self._size}.")
        self._memory[offset] = data & WORD_MASK

    def get_size(self) -> int:
        return self._size

# @intent:responsibility キーボードのステータス(KBSR)/データ(KBDR)レジスタをメモリマップドI/Oとして提供します。
# @intent:rationale 割り込みは配送しない。KBSRはソフトウェアが読んだ時点でのみ更新される(poll-on-read)。
class KeyboardDevice(RAM):
    """
    KBSR(オフセット0)の読み込み時にコンソールをポーリングし、
    入力があればステータスの最上位ビットを立ててKBDR(オフセット2)に文字コードを格納します。
    書き込みは通常のRAMと同様に扱われます。
    """
    STATUS_OFFSET = 0
    DATA_OFFSET = KBDR - KBSR
    READY = 1 << 15

    def __init__(self, console: Console):
        super().__init__(KBDR - KBSR + 1)
        self._console = console

    # @intent:post-condition 入力が閉じている場合も「入力なし」としてステータスを0にします。
    def read(self, offset: int) -> int:
        if offset == self.STATUS_OFFSET:
            self.write(self.STATUS_OFFSET, 0)
            if self._console.key_available():
                try:
                    code = self._console.read_char()
                except EOFError:
                    logger.debug("Keyboard input closed; KBSR reports no key")
                else:
                    self.write(self.STATUS_OFFSET, self.READY)
                    self.write(self.DATA_OFFSET, code)
        return super().read(offset)

    def peek(self, offset: int) -> int:
        return super().read(offset)

# @intent:responsibility メモリアドレス空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
# @intent:rationale バスの全てのアクセスを記録し、Snapshotに含めることでシステムの観測可能性を高めます。
class Bus:
    """
    メモリアドレス空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
    アドレスは常に16bitで折り返され、値は16bitにマスクされます。
    """
    def __init__(self):
        # メモリマップ: (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレス範囲にデバイスを登録します。
    # @intent:rationale Bus自体は範囲の重複や隙間を検査しません。0x0000-0xFFFFをちょうど1回ずつ覆うことはSystemBuilderが検証します。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        """
        指定されたアドレス範囲にデバイスを登録します。
        範囲の大きさはデバイスのサイズと一致している必要があります。
        """
        if not (0 <= start_address <= end_address <= ADDRESS_MASK):
            raise ValueError("Invalid address range: start_address must be <= end_address and within 0x0000-0xFFFF.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        expected_size = end_address - start_address + 1
        if device.get_size() != expected_size:
            raise ValueError(
                f"Registered {type(device).__name__} device size ({device.get_size()} words) does not match "
                f"the specified address range size ({expected_size} words)."
            )

        self._memory_map.append((start_address, end_address, device))

    # @intent:post-condition デバイスが見つからなかった場合、IndexErrorを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise IndexError(f"Address {address:#06x} not mapped to any device.")

    # @intent:responsibility 指定されたアドレスから16bitワードを読み出します。
    def read(self, address: int) -> int:
        """
        指定されたアドレスから16bitワードを読み出します。
        メモリマップドレジスタの場合はデバイス固有の副作用が発生します。
        """
        address &= ADDRESS_MASK
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログ記録やデバイスの副作用なしにワードを読み出します。
    def peek(self, address: int) -> int:
        address &= ADDRESS_MASK
        device, offset = self._find_device(address)
        return device.peek(offset)

    # @intent:responsibility 指定されたアドレスに16bitワードを書き込みます。
    # @intent:rationale デバイスアドレスへの書き込みも特別扱いせず、そのまま格納します。
    def write(self, address: int, data: int) -> None:
        address &= ADDRESS_MASK
        data &= WORD_MASK
        device, offset = self._find_device(address)
        device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE)

