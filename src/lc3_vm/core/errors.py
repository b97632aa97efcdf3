# lc3_vm/core/errors.py
"""
CPU実行時の致命的エラー定義。

予約オペコードや未定義のトラップベクタは、壊れたイメージかサポート外の拡張を意味します。
ISA自体に再開可能な例外の仕組みがないため、これらは常に実行ループを停止させます。
"""

# @intent:responsibility 回復不能なCPUフォールトの基底クラスです。
class CpuFault(RuntimeError):
    def __init__(self, message: str, address: int, word: int):
        super().__init__(f"{message} at {address:#06x} (instruction {word:#06x})")
        self.address = address
        self.word = word

# @intent:responsibility 予約済み/未実装オペコード（RTI, RES）のデコードを通知します。
class IllegalOpcodeError(CpuFault):
    pass

# @intent:responsibility 定義されていないトラップベクタの実行を通知します。
class InvalidTrapError(CpuFault):
    def __init__(self, vector: int, address: int, word: int):
        super().__init__(f"Unknown trap vector {vector:#04x}", address, word)
        self.vector = vector
