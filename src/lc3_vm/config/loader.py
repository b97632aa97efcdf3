import yaml
from typing import Dict, Any

from .models import SystemConfig, MemoryRegion, CpuInitialState, default_memory_map

# @intent:responsibility 設定ファイルの値が不正であることを通知します。
class ConfigError(ValueError):
    pass

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            return self.load_from_string(f.read())

    def load_from_string(self, text: str) -> SystemConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        return self._parse_config(data or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping.")

        # Parse Memory Map (省略時は標準構成)
        memory_map = []
        for region_data in self._section(data, "memory_map", list):
            if not isinstance(region_data, dict):
                raise ConfigError(f"memory_map entries must be mappings: {region_data!r}")
            memory_map.append(MemoryRegion(
                start=self._parse_int(region_data.get("start")),
                end=self._parse_int(region_data.get("end")),
                type=str(region_data.get("type", "RAM")).upper(),
                label=str(region_data.get("label", "")),
            ))
        if not memory_map:
            memory_map = default_memory_map()

        # Parse Initial State
        initial_state_data = self._section(data, "initial_state", dict)
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", CpuInitialState.pc)),
            registers={
                str(name).lower(): self._parse_int(value)
                for name, value in self._section(initial_state_data, "registers", dict).items()
            },
        )

        images = self._section(data, "images", list)

        return SystemConfig(
            memory_map=memory_map,
            initial_state=initial_state,
            images=[str(path) for path in images],
            max_steps=self._parse_max_steps(data.get("max_steps", 0)),
        )

    # @intent:responsibility セクションの型を検証します。値がnull（空のキー）の場合は空として扱います。
    def _section(self, data: Dict[str, Any], key: str, expected: type) -> Any:
        value = data.get(key)
        if value is None:
            return expected()
        if not isinstance(value, expected):
            kind = "a list" if expected is list else "a mapping"
            raise ConfigError(f"'{key}' must be {kind}: {value!r}")
        return value

    def _parse_max_steps(self, value: Any) -> int:
        steps = self._parse_int(value)
        if steps < 0:
            raise ConfigError(f"max_steps must not be negative: {steps}")
        return steps

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                if value[:1] in ("x", "X"):
                    # LC-3アセンブラ流の x3000 表記
                    return int(value[1:], 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")
