import unittest
from lc3_vm.transport.console import BufferedConsole
from lc3_vm.transport.bus import KBSR, KBDR
from lc3_vm.config.builder import SystemBuilder
from lc3_vm.config.models import SystemConfig
from lc3_vm.arch.lc3.state import ConditionFlag

def pc_rel(opcode, reg, offset9):
    return opcode << 12 | reg << 9 | (offset9 & 0x1FF)

def base_rel(opcode, reg, base, offset6):
    return opcode << 12 | reg << 9 | base << 6 | (offset6 & 0x3F)

LD, ST, LDR, STR, LDI, STI, LEA = 0x2, 0x3, 0x6, 0x7, 0xA, 0xB, 0xE

class TestLc3LoadStoreInstructions(unittest.TestCase):
    def setUp(self):
        self.console = BufferedConsole()
        self.cpu, self.bus = SystemBuilder().build_system(SystemConfig.default(), self.console)
        self.state = self.cpu.get_state()

    def _execute(self, word, current_pc=0x3000):
        self.bus.write(current_pc, word)
        self.state.pc = current_pc
        return self.cpu.step()

    def test_ld_is_relative_to_incremented_pc(self):
        # LD R2, #3 -> mem[0x3001 + 3]
        self.bus.write(0x3004, 0x8001)
        self._execute(pc_rel(LD, 2, 3))
        self.assertEqual(self.state.get_gpr(2), 0x8001)
        self.assertEqual(self.state.cond, ConditionFlag.NEG)

    def test_ld_negative_offset(self):
        self.bus.write(0x2FF1, 0x0042)
        self._execute(pc_rel(LD, 0, -0x10))
        self.assertEqual(self.state.get_gpr(0), 0x0042)
        self.assertEqual(self.state.cond, ConditionFlag.POS)

    # @intent:test_case_ldi mem[X] = Y, mem[Y] = Z のとき LDI は Z を読み込みます。
    def test_ldi_one_level_of_indirection(self):
        x, y, z = 0x3011, 0x4000, 0xCAFE
        self.bus.write(x, y)
        self.bus.write(y, z)
        self._execute(pc_rel(LDI, 5, x - 0x3001))
        self.assertEqual(self.state.get_gpr(5), z)
        self.assertEqual(self.state.cond, ConditionFlag.NEG)

    def test_ldi_through_keyboard_status_polls(self):
        self.bus.write(0x3002, KBSR)
        self.console.feed("A")
        self._execute(pc_rel(LDI, 0, 1))
        self.assertEqual(self.state.get_gpr(0), 0x8000)
        self.assertEqual(self.bus.read(KBDR), ord("A"))

    def test_ldr(self):
        self.state.set_gpr(1, 0x4000)
        self.bus.write(0x3FFF, 0x0000)
        self.state.cond = ConditionFlag.POS
        self._execute(base_rel(LDR, 3, 1, -1))
        self.assertEqual(self.state.get_gpr(3), 0)
        self.assertEqual(self.state.cond, ConditionFlag.ZRO)

    def test_lea_sets_flags_and_does_not_touch_memory(self):
        snapshot = self._execute(pc_rel(LEA, 4, 0x0F))
        self.assertEqual(self.state.get_gpr(4), 0x3010)
        self.assertEqual(self.state.cond, ConditionFlag.POS)
        # 命令フェッチ以外のバスアクセスはない
        self.assertEqual(len(snapshot.bus_activity), 1)

    def test_st_does_not_change_flags(self):
        self.state.set_gpr(6, 0x1234)
        self.state.cond = ConditionFlag.NEG
        self._execute(pc_rel(ST, 6, 0x20))
        self.assertEqual(self.bus.read(0x3021), 0x1234)
        self.assertEqual(self.state.cond, ConditionFlag.NEG)

    def test_sti(self):
        self.bus.write(0x3001, 0x5000)
        self.state.set_gpr(0, 0xABCD)
        self._execute(pc_rel(STI, 0, 0))
        self.assertEqual(self.bus.read(0x5000), 0xABCD)

    def test_str(self):
        self.state.set_gpr(2, 0x6000)
        self.state.set_gpr(7, 0x0007)
        self._execute(base_rel(STR, 7, 2, 31))
        self.assertEqual(self.bus.read(0x601F), 0x0007)

    def test_address_wraps_around_64k(self):
        self.state.set_gpr(1, 0xFFFF)
        self.state.set_gpr(0, 0x0099)
        self._execute(base_rel(STR, 0, 1, 2))
        self.assertEqual(self.bus.read(0x0001), 0x0099)

    def test_store_to_keyboard_data_is_plain_write(self):
        self.state.set_gpr(1, KBDR)
        self.state.set_gpr(0, 0x0041)
        self._execute(base_rel(STR, 0, 1, 0))
        self.assertEqual(self.bus.read(KBDR), 0x0041)

if __name__ == '__main__':
    unittest.main()
