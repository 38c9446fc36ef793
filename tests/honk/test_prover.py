"""
참조 Prover 테스트

라운드별 중간 상태를 fixture로 만들어 확인한다.
  - Round 4: 첫 라운드 합 0, 평가값 = 테이블의 다중선형 평가
  - Round 5: 폴딩 커밋먼트 수, 열기 주장
  - 증명 인코딩 길이와 결정성
"""

import pytest

from ultrahonk.circuit import UltraCircuit
from ultrahonk.entities import Entity, NUMBER_OF_ENTITIES
from ultrahonk.field import FR
from ultrahonk.preprocessor import preprocess
from ultrahonk.proof import Proof, proof_size
from ultrahonk.polynomial import evaluate_mle
from ultrahonk.prover import ProverState, prove, round1, round2, round3, round4, round5
from ultrahonk.prover.round4 import pow_table
from ultrahonk.prover.tables import with_shifts
from ultrahonk.srs import SRS


@pytest.fixture(scope="module")
def round4_state(honk_data, srs, backend):
    state = ProverState(honk_data["preprocessed"], srs, backend)
    for round_module in (round1, round2, round3, round4):
        round_module.execute(state)
    return state


class TestCircuit:
    def test_secret_plus_one_trace(self, honk_data):
        trace = honk_data["preprocessed"].trace
        assert trace.n == 8
        assert trace.log_n == 3
        assert trace.public_inputs == [FR(6)]
        assert honk_data["circuit"].check_arithmetic()

    def test_public_input_sigma_override(self, honk_data):
        trace = honk_data["preprocessed"].trace
        row = trace.pub_inputs_offset
        assert trace.precomputed["s1"][row] == FR(-(row + 1))
        assert trace.precomputed["id2"][row] == FR(trace.n + row)

    def test_padding_leaves_zero_row(self):
        circuit = UltraCircuit()
        for _ in range(3):
            circuit.add_addition_gate(0, 0, 0)
        trace = circuit.build_trace()
        # 0 행 1 + 게이트 3 + 마지막 0 행 → 8
        assert trace.n == 8
        assert trace.precomputed["lagrange_last"][-1] == FR(1)

    def test_unsatisfied_circuit_detected(self):
        circuit = UltraCircuit()
        a = circuit.add_variable(2)
        b = circuit.add_variable(3)
        c = circuit.add_variable(7)
        circuit.add_multiplication_gate(a, b, c)
        assert not circuit.check_arithmetic()

    def test_unknown_variable(self):
        with pytest.raises(ValueError):
            UltraCircuit().add_gate(0, 0, 5)

    def test_srs_too_small(self, backend):
        small = SRS.generate(max_degree=4, seed=1, backend=backend)
        with pytest.raises(ValueError):
            preprocess(UltraCircuit.secret_plus_one(), small, backend)


class TestSumcheckRound:
    def test_pow_table(self):
        b0, b1 = FR(3), FR(5)
        assert pow_table([b0, b1], 4) == [FR(1), b0, b1, b0 * b1]

    def test_first_round_sums_to_zero(self, round4_state):
        first = round4_state.proof.sumcheck_univariates[0]
        assert first[0] + first[1] == 0

    def test_round_count(self, round4_state):
        univariates = round4_state.proof.sumcheck_univariates
        assert len(univariates) == round4_state.log_n
        assert all(len(u) == 8 for u in univariates)

    def test_evaluations_match_tables(self, round4_state):
        full = with_shifts(round4_state.tables)
        evaluations = round4_state.proof.sumcheck_evaluations
        assert len(evaluations) == NUMBER_OF_ENTITIES
        for entity in (Entity.Q_ARITH, Entity.W_L, Entity.Z_PERM, Entity.W_L_SHIFT):
            assert evaluate_mle(full[entity], round4_state.point) == evaluations[entity]


class TestOpeningRound:
    @pytest.fixture(scope="class")
    def round5_state(self, honk_data, srs, backend):
        state = ProverState(honk_data["preprocessed"], srs, backend)
        for round_module in (round1, round2, round3, round4, round5):
            round_module.execute(state)
        return state

    def test_fold_commitments(self, round5_state):
        proof = round5_state.proof
        assert len(proof.gemini_fold_comms) == round5_state.log_n - 1
        assert len(proof.gemini_a_evaluations) == round5_state.log_n
        assert proof.shplonk_q is not None
        assert proof.kzg_quotient is not None

    def test_same_proof_as_prove(self, round5_state, honk_data):
        assert round5_state.build_proof().to_bytes() == honk_data["proof_bytes"]


class TestProofEncoding:
    def test_size(self, honk_data):
        assert len(honk_data["proof_bytes"]) == proof_size(3) == 32 * (58 + 11 * 3)

    def test_roundtrip(self, honk_data):
        data = honk_data["proof_bytes"]
        assert Proof.from_bytes(data, 3).to_bytes() == data

    def test_deterministic(self, honk_data, srs, backend):
        again = prove(honk_data["preprocessed"], srs, backend)
        assert again.to_bytes() == honk_data["proof_bytes"]
