from twolevel.components.counters import SaturatingCounter
from twolevel.components.history import RegisterBank, ShiftRegister
from twolevel.components.tables import HistoryTable, PartitionedHistoryTable
from twolevel.predictors.two_level import create_predictor

from helpers import T, b, run


def test_register_prints_bits_newest_first():
    register = ShiftRegister(4)
    register.insert(b("1")[0])
    register.insert(b("1")[0])
    register.insert(b("0")[0])
    assert register.monitor() == "0110"
    assert repr(register) == "ShiftRegister(4): 0110"


def test_counter_prints_its_bits():
    counter = SaturatingCounter(3)
    counter.load(b("101"))
    assert counter.monitor() == "101"


def test_bank_lists_selectors_in_order():
    bank = RegisterBank(2, 3)
    bank.read(b("10"))
    bank.write(b("10"), b("110"))
    bank.read(b("01"))
    assert bank.monitor() == "01: 000\n10: 110"


def test_table_box_layout():
    table = HistoryTable(4, 2)
    table.put(b("10"), b("01"))
    table.put(b("01"), b("11"))

    lines = table.monitor().splitlines()
    assert lines[0] == "+-----------------------------------+"
    assert lines[1] == "| Address              | Block      |"
    assert lines[3] == "| 01                   | 11         |"
    assert lines[5] == "| 10                   | 01         |"
    assert table.monitor().endswith("+\n")


def test_table_truncates_long_keys_to_last_16_bits():
    table = HistoryTable(1 << 20, 1)
    table.put(b("1111" + "0" * 16), b("1"))
    assert "| " + "0" * 16 + "     | 1" in table.monitor()


def test_partitioned_table_groups_by_selector():
    table = PartitionedHistoryTable(1, 2, 2)
    table.put_if_absent(b("11"), b("01"))
    table.put_if_absent(b("00"), b("10"))

    text = table.monitor()
    assert text.index("PHT for selector: 0") < text.index("PHT for selector: 1")
    assert "| 1                    | 01         |" in text


def test_monitor_does_not_mutate():
    table = HistoryTable(4, 2)
    table.put(b("00"), b("01"))
    before = list(table.items())
    table.monitor()
    table.monitor()
    assert list(table.items()) == before


def test_predictor_snapshot():
    gag = create_predictor('GAg', history_width=2, counter_width=2)
    run(gag, "0", [T])

    snapshot = gag.monitor()
    assert snapshot.startswith("GAg predictor snapshot:\nBHR:\n10\nSC: 01\n")
    assert "| 00                   | 01         |" in snapshot


def test_per_address_snapshot_lists_every_history():
    pap = create_predictor('PAp', history_width=1, counter_width=2, address_width=1)
    run(pap, "1", [T])
    run(pap, "0", [T])

    snapshot = pap.monitor()
    assert "0: 1\n1: 1" in snapshot
    assert "PHT for selector: 0" in snapshot
    assert "PHT for selector: 1" in snapshot
