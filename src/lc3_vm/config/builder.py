import logging
from typing import List, Tuple

from lc3_vm.transport.bus import Bus, RAM, KeyboardDevice, ADDRESS_MASK
from lc3_vm.transport.console import Console
from lc3_vm.arch.lc3.cpu import Lc3Cpu
from lc3_vm.arch.lc3.state import Register, ConditionFlag
from lc3_vm.loader.loader import ImageLoader
from .loader import ConfigError
from .models import SystemConfig, CpuInitialState, MemoryRegion

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def __init__(self, image_loader: ImageLoader = None):
        self._image_loader = image_loader or ImageLoader()

    def build_system(self, config: SystemConfig, console: Console) -> Tuple[Lc3Cpu, Bus]:
        bus = Bus()

        for region in config.memory_map:
            size = max(region.end - region.start + 1, 1)

            if region.type == "KEYBOARD":
                device = KeyboardDevice(console)
            elif region.type == "RAM":
                device = RAM(size)
            else:
                logger.warning("Unknown device type '%s' for range %04X-%04X, defaulting to RAM",
                               region.type, region.start, region.end)
                device = RAM(size)

            try:
                bus.register_device(region.start, region.end, device)
            except ValueError as e:
                raise ConfigError(f"Invalid memory region '{region.label}': {e}") from e

        self._check_coverage(config.memory_map)

        cpu = Lc3Cpu(bus, console)

        # 設定ファイル側のイメージを先にロードし、コマンドライン指定分で上書きできるようにする
        self._image_loader.load_images(config.images, bus)

        self.apply_initial_state(cpu, config.initial_state)
        return cpu, bus

    # @intent:responsibility メモリマップが0x0000-0xFFFFの全アドレスをちょうど1回ずつ覆うことを検証します。
    def _check_coverage(self, memory_map: List[MemoryRegion]) -> None:
        next_address = 0
        previous = None
        for region in sorted(memory_map, key=lambda r: r.start):
            if region.start > next_address:
                raise ConfigError(
                    f"Addresses x{next_address:04X}-x{region.start - 1:04X} are not mapped to any device")
            if region.start < next_address:
                raise ConfigError(
                    f"Memory regions '{previous.label}' and '{region.label}' overlap at x{region.start:04X}")
            next_address = region.end + 1
            previous = region
        if next_address <= ADDRESS_MASK:
            raise ConfigError(f"Addresses x{next_address:04X}-xFFFF are not mapped to any device")

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Lc3Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定されたPCとレジスタ値を適用します。
        """
        cpu.reset()
        state = cpu.get_state()
        state.pc = config_state.pc

        for reg_name, value in config_state.registers.items():
            try:
                reg = Register[reg_name.upper()]
            except KeyError:
                raise ConfigError(f"Unknown register '{reg_name}' in initial_state") from None
            if reg is Register.PC:
                raise ConfigError("Set the program counter with initial_state.pc")
            if reg is Register.COND and value not in tuple(ConditionFlag):
                raise ConfigError(f"cond must be exactly one of N(4), Z(2), P(1): {value}")
            state.registers.write(reg, value)
