# tests/core/test_snapshot.py
"""
lc3_vm.core.snapshotモジュールの単体テスト。
"""
import pytest
from lc3_vm.core.state import CpuState
from lc3_vm.core.snapshot import Operation, Metadata, Snapshot
from lc3_vm.transport.bus import BusAccess, BusAccessType

# @intent:test_suite 不変スナップショットデータ構造の検証。

class TestOperation:
    def test_operation_defaults(self):
        op = Operation(word=0x1021, opcode=1, mnemonic="ADD")
        assert op.dr == 0 and op.sr1 == 0 and op.sr2 == 0
        assert op.imm_mode is False
        assert op.trap_vector == 0

    def test_aliases(self):
        op = Operation(word=0, opcode=0, mnemonic="BRnzp", dr=7, sr1=3)
        assert op.cond_mask == 7
        assert op.base_r == 3

    def test_operation_immutability(self):
        op = Operation(word=0, opcode=0, mnemonic="BR")
        with pytest.raises(AttributeError):
            op.dr = 1

class TestSnapshot:
    def test_snapshot_init(self):
        state = CpuState()
        op = Operation(word=0xF025, opcode=15, mnemonic="HALT", trap_vector=0x25)
        meta = Metadata(instruction_count=1, address=0x3000, info="x3000: HALT")
        access = BusAccess(address=0x3000, data=0xF025, access_type=BusAccessType.READ)
        snapshot = Snapshot(state=state, operation=op, metadata=meta, bus_activity=[access])
        assert snapshot.operation.trap_vector == 0x25
        assert snapshot.metadata.address == 0x3000
        assert snapshot.bus_activity == [access]

    def test_snapshot_default_bus_activity_is_fresh_list(self):
        meta = Metadata(instruction_count=0, address=0)
        s1 = Snapshot(state=CpuState(), operation=None, metadata=meta)
        s2 = Snapshot(state=CpuState(), operation=None, metadata=meta)
        assert s1.bus_activity == []
        assert s1.bus_activity is not s2.bus_activity

    def test_snapshot_immutability(self):
        meta = Metadata(instruction_count=0, address=0)
        snapshot = Snapshot(state=CpuState(), operation=None, metadata=meta)
        with pytest.raises(AttributeError):
            snapshot.metadata = meta
