import logging

import pytest

from twolevel.components.errors import PartitionNotProvisionedError
from twolevel.predictors.base import BranchInstruction, BranchResult
from twolevel.predictors.two_level import (
    SCHEMES, Scope, TwoLevelPredictor, create_predictor, get_scheme
)

from helpers import N, T, b, branch, run


class TestBranchTypes:

    def test_branch_result_bits(self):
        assert T.to_bit().value is True
        assert N.to_bit().value is False
        assert BranchResult.from_bit(b("1")[0]) is T
        assert BranchResult.from_bool(False) is N

    def test_instruction_from_strings(self):
        instruction = BranchInstruction.from_strings("1010", opcode="000011", target="11")
        assert instruction.address == b("1010")
        assert instruction.opcode == b("000011")
        assert instruction.target == b("11")


class TestGAg:

    def test_three_step_scenario(self, gag):
        predictions = run(gag, "0000", [T, T, N])

        # every step reads a freshly provisioned zero counter
        assert predictions == [N, N, N]
        assert gag.bhr.read() == b("01")
        assert dict(gag.pht.items()) == {
            "00": b("01"),
            "10": b("01"),
            "11": b("00"),
        }

    def test_history_after_each_update(self, gag):
        history = []
        for actual in (T, T, N):
            gag.predict_and_update(branch("0000"), actual)
            history.append(gag.bhr.monitor())
        assert history == ["10", "11", "01"]

    def test_counter_crosses_msb_threshold(self):
        gag = create_predictor('GAg', history_width=1, counter_width=2)
        predictions = run(gag, "0", [T, T, T, T, T])
        # key "0" once, then key "1" repeatedly: 0 -> 1 -> 2 -> taken
        assert predictions == [N, N, N, T, T]
        assert gag.pht.get(b("1")) == b("11")

    def test_address_is_ignored(self):
        gag = create_predictor('GAg', history_width=1, counter_width=2)
        gag.predict_and_update(branch("0001"), T)
        gag.predict_and_update(branch("1110"), T)
        gag.predict_and_update(branch("0101"), T)
        assert gag.predict(branch("1111")) is T

    def test_predict_only_provisions_a_zero_block(self, gag):
        assert gag.predict(branch("0000")) is N
        assert dict(gag.pht.items()) == {"00": b("00")}
        assert gag.bhr.read() == b("00")

    def test_update_without_predict_is_permitted(self, gag):
        gag.update(branch("0000"), T)
        assert gag.pht.get(b("00")) == b("01")
        assert gag.bhr.read() == b("10")

    def test_wraparound_count_mode(self):
        gag = create_predictor('GAg', history_width=1, counter_width=2,
                               count_mode='wraparound')
        predictions = run(gag, "0", [T] * 6)
        assert predictions == [N, N, N, T, T, N]

    def test_saturating_count_mode(self):
        gag = create_predictor('GAg', history_width=1, counter_width=2)
        assert run(gag, "0", [T] * 6) == [N, N, N, T, T, T]


class TestGAp:

    def test_key_is_address_prefix_then_history(self):
        gap = create_predictor('GAp', history_width=2, counter_width=2, address_width=2)
        gap.predict(branch("1011"))
        assert gap.pht.partitions() == ["10"]
        assert gap.pht.get(b("1000")) == b("00")

    def test_learns_taken_branch(self):
        gap = create_predictor('GAp', history_width=2, counter_width=2, address_width=2)
        assert run(gap, "10", [T] * 5) == [N, N, N, N, T]
        assert gap.pht.get(b("1011")) == b("11")

    def test_addresses_use_separate_tables(self):
        gap = create_predictor('GAp', history_width=2, counter_width=2, address_width=2)
        run(gap, "10", [T] * 5)
        assert gap.predict(branch("01")) is N
        assert gap.pht.partitions() == ["01", "10"]

    def test_update_without_predict_fails_on_unseen_selector(self):
        gap = create_predictor('GAp', history_width=2, counter_width=2, address_width=2)
        with pytest.raises(PartitionNotProvisionedError):
            gap.update(branch("10"), T)


class TestPAp:

    def test_histories_are_per_address(self):
        pap = create_predictor('PAp', history_width=1, counter_width=2, address_width=2)
        taken, not_taken = branch("01"), branch("10")
        predictions = []
        for _ in range(4):
            predictions.append(pap.predict_and_update(taken, T))
            pap.predict_and_update(not_taken, N)

        assert predictions == [N, N, N, T]
        assert pap.history_bank.read(b("01")).read() == b("1")
        assert pap.history_bank.read(b("10")).read() == b("0")

    def test_failed_update_leaves_state_untouched(self):
        pap = create_predictor('PAp', history_width=1, counter_width=2, address_width=2)
        with pytest.raises(PartitionNotProvisionedError):
            pap.update(branch("10"), T)

        assert len(pap.history_bank) == 0
        assert len(pap.pht) == 0
        assert pap.counter.read() == b("00")

    def test_key_is_address_then_history(self):

        pap = create_predictor('PAp', history_width=2, counter_width=2, address_width=2)
        pap.predict(branch("0111"))
        assert pap.pht.partitions() == ["01"]
        assert pap.pht.get(b("0100")) == b("00")
        assert pap.history_bank.selectors() == ["01"]


class TestPAg:

    def test_shared_table_indexed_by_local_history(self):
        pag = create_predictor('PAg', history_width=1, counter_width=2, address_width=2)
        run(pag, "01", [T] * 3)
        # "10" has its own history "0" but shares the table with "01"
        pag.predict(branch("10"))
        assert set(dict(pag.pht.items())) == {"0", "1"}
        assert pag.history_bank.selectors() == ["01", "10"]


class TestGAs:

    def test_selector_is_hashed_address(self):
        gas = create_predictor('GAs', history_width=2, counter_width=2,
                               address_width=4, hash_width=2)
        gas.predict(branch("1101"))
        assert gas.pht.partitions() == ["10"]

    def test_aliasing_addresses_share_a_table(self):
        gas = create_predictor('GAs', history_width=2, counter_width=2,
                               address_width=4, hash_width=2)
        gas.predict_and_update(branch("1101"), T)
        gas.predict_and_update(branch("0111"), T)
        assert gas.pht.partitions() == ["10"]
        assert dict(gas.pht.items()) == {"1000": b("01"), "1010": b("01")}

    def test_only_address_width_bits_are_hashed(self):
        gas = create_predictor('GAs', history_width=2, counter_width=2,
                               address_width=4, hash_width=2)
        gas.predict(branch("11011111"))
        assert gas.pht.partitions() == ["10"]


class TestSAs:

    def make(self):
        return create_predictor('SAs', history_width=2, counter_width=2,
                                address_width=4, hash_width=2)

    def test_history_is_per_set(self):
        sas = self.make()
        sas.predict_and_update(branch("1101"), T)   # set "10"
        sas.predict_and_update(branch("0111"), T)   # set "10"
        sas.predict_and_update(branch("0100"), N)   # set "01"

        assert sas.history_bank.selectors() == ["01", "10"]
        assert sas.history_bank.read(b("10")).read() == b("11")
        assert sas.history_bank.read(b("01")).read() == b("00")

    def test_key_uses_the_sets_history(self):
        sas = self.make()
        sas.predict_and_update(branch("1101"), T)
        sas.predict(branch("0111"))
        assert sas.pht.get(b("1010")) == b("00")
        assert sas.pht.get(b("1000")) == b("01")

    def test_predict_and_update_agree_on_key(self):
        sas = self.make()
        for _ in range(4):
            sas.predict_and_update(branch("0100"), T)
        # set "01" history "11" reached after two updates, then counted twice
        assert sas.pht.get(b("0111")) == b("10")
        assert sas.predict(branch("0100")) is T


class TestPAs:

    def make(self):
        return create_predictor('PAs', history_width=1, counter_width=2,
                                address_width=4, hash_width=2)

    def test_own_history_hashed_table(self):
        pas = self.make()
        assert run(pas, "1101", [T] * 3) == [N, N, N]

        assert pas.history_bank.selectors() == ["1101"]
        assert pas.pht.partitions() == ["10"]
        assert dict(pas.pht.items()) == {"100": b("01"), "101": b("10")}

    def test_aliasing_address_keeps_its_own_history(self):
        pas = self.make()
        run(pas, "1101", [T] * 3)
        # "0111" hashes to the same partition but starts from history "0"
        assert pas.predict(branch("0111")) is N
        assert pas.history_bank.selectors() == ["0111", "1101"]
        assert pas.history_bank.read(b("0111")).read() == b("0")

    def test_learns_taken_branch(self):
        assert run(self.make(), "1101", [T] * 5) == [N, N, N, T, T]


class TestSAg:

    def make(self):
        return create_predictor('SAg', history_width=1, counter_width=2,
                                address_width=4, hash_width=2)

    def test_per_set_history_global_table(self):
        sag = self.make()
        sag.predict_and_update(branch("1101"), T)   # set "10"
        sag.predict_and_update(branch("0111"), T)   # set "10"
        sag.predict_and_update(branch("0100"), T)   # set "01"

        assert sag.history_bank.selectors() == ["01", "10"]
        assert sag.history_bank.read(b("10")).read() == b("1")
        assert sag.history_bank.read(b("01")).read() == b("1")
        assert dict(sag.pht.items()) == {"0": b("10"), "1": b("01")}

    def test_learns_taken_branch(self):
        assert run(self.make(), "1101", [T] * 5) == [N, N, N, T, T]


class TestSAp:

    def make(self):
        return create_predictor('SAp', history_width=1, counter_width=2,
                                address_width=4, hash_width=2)

    def test_per_set_history_prefix_table(self):
        sap = self.make()
        sap.predict_and_update(branch("1101"), T)
        sap.predict_and_update(branch("0111"), T)

        # one shared set history, one table per address prefix
        assert sap.history_bank.selectors() == ["10"]
        assert sap.history_bank.read(b("10")).read() == b("1")
        assert sap.pht.partitions() == ["0111", "1101"]
        assert dict(sap.pht.items()) == {"01111": b("01"), "11010": b("01")}

    def test_learns_taken_branch(self):
        assert run(self.make(), "1101", [T] * 5) == [N, N, N, T, T]


class TestConfiguration:


    def test_all_schemes_registered(self):
        assert set(SCHEMES) == {
            'gag', 'gap', 'gas', 'pag', 'pap', 'pas', 'sag', 'sap', 'sas'
        }
        assert get_scheme('SAs').history is Scope.PER_SET

    def test_scheme_names_are_case_insensitive(self):
        assert create_predictor('gas', history_width=2, counter_width=2,
                                address_width=4, hash_width=2).scheme.name == 'GAs'

    def test_unknown_scheme(self):
        with pytest.raises(ValueError):
            create_predictor('XYz', history_width=2, counter_width=2)

    def test_address_width_required(self):
        with pytest.raises(ValueError):
            create_predictor('GAp', history_width=2, counter_width=2)

    def test_hash_width_required(self):
        with pytest.raises(ValueError):
            create_predictor('SAs', history_width=2, counter_width=2, address_width=4)

    def test_positive_widths_required(self):
        with pytest.raises(ValueError):
            create_predictor('GAg', history_width=0, counter_width=2)

    def test_default_config(self):
        predictor = TwoLevelPredictor()
        assert predictor.scheme.name == 'GAg'
        assert predictor.history_width == 4


class TestLifecycle:

    def test_predict_and_update_records_stats(self, gag):
        run(gag, "0", [T, T, N])
        stats = gag.get_stats()
        assert stats.predictions == 3
        assert stats.correct == 1
        assert stats.mispredictions == 2

    def test_reset(self):
        pap = create_predictor('PAp', history_width=1, counter_width=2, address_width=1)
        run(pap, "1", [T, T, T])
        pap.reset()
        assert len(pap.pht) == 0
        assert len(pap.history_bank) == 0
        assert pap.counter.read() == b("00")
        assert pap.get_stats().predictions == 0

    def test_hardware_cost(self, gag):
        cost = gag.get_hardware_cost()
        assert cost['history_bits'] == 2
        assert cost['table_bits'] == 8
        assert cost['total_bits'] == 12

    def test_predict_and_update_logs_snapshots(self, gag, caplog):
        caplog.set_level(logging.DEBUG, logger="twolevel")
        gag.predict_and_update(branch("0"), T)
        assert "Before update" in caplog.text
        assert "After update" in caplog.text
