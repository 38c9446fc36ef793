"""
관계식 평가기 테스트

- 개별 부분 관계식의 손 계산
- 공개 입력 δ, pow 부분 평가
- Prover 트레이스의 모든 행이 관계식을 만족하는지 (domain_sep = 1)
"""

import pytest

from ultrahonk.circuit import UltraCircuit
from ultrahonk.entities import Entity, NUMBER_OF_ENTITIES, NUMBER_OF_SUBRELATIONS
from ultrahonk.errors import RelationCheckFailed, UnsupportedCircuitShape
from ultrahonk.field import FR
from ultrahonk.preprocessor import preprocess
from ultrahonk.prover import ProverState, round1, round2, round3
from ultrahonk.prover.tables import row, with_shifts
from ultrahonk.relations import (
    RELATIONS, RELATION_SETS, RelationEvaluator, RelationParameters,
    accumulate_relation_evaluations,
    arithmetic_relation, compute_public_input_delta, delta_range_relation,
    permutation_relation, pow_partial_evaluation,
)


def zero_row(**values):
    p = [FR(0)] * NUMBER_OF_ENTITIES
    for name, value in values.items():
        p[Entity[name]] = FR(value)
    return p


PARAMS = RelationParameters(FR(2), FR(4), FR(8), FR(3), FR(5), FR(1))


def run_to_round3(preprocessed, srs, backend):
    state = ProverState(preprocessed, srs, backend)
    round1.execute(state)
    round2.execute(state)
    round3.execute(state)
    return state


@pytest.fixture(scope="module")
def secret_state(honk_data, srs, backend):
    return run_to_round3(honk_data["preprocessed"], srs, backend)


@pytest.fixture(scope="module")
def range_state(srs, backend):
    circuit = UltraCircuit.range_and_multiplication(x=3, y=4)
    return run_to_round3(preprocess(circuit, srs, backend), srs, backend)


# =====================================================================
# 개별 관계식
# =====================================================================

class TestArithmetic:
    def test_multiplication_gate(self):
        p = zero_row(Q_ARITH=1, Q_M=1, Q_O=-1, W_L=3, W_R=4, W_O=12)
        assert arithmetic_relation(p, PARAMS, FR(1)) == [FR(0), FR(0)]

    def test_wrong_output(self):
        p = zero_row(Q_ARITH=1, Q_M=1, Q_O=-1, W_L=3, W_R=4, W_O=13)
        e0, _ = arithmetic_relation(p, PARAMS, FR(7))
        assert e0 == FR(-7)

    def test_constant_gate(self):
        p = zero_row(Q_ARITH=1, Q_L=1, Q_C=1, Q_O=-1, W_L=5, W_O=6)
        assert arithmetic_relation(p, PARAMS, FR(1))[0] == 0

    def test_disabled_selector(self):
        p = zero_row(W_L=3, W_R=4, W_O=99)
        assert arithmetic_relation(p, PARAMS, FR(1)) == [FR(0), FR(0)]


class TestDeltaRange:
    def test_steps_in_range(self):
        p = zero_row(Q_RANGE=1, W_L=0, W_R=1, W_O=3, W_4=6, W_L_SHIFT=6)
        assert all(e == 0 for e in delta_range_relation(p, PARAMS, FR(1)))

    def test_step_out_of_range(self):
        p = zero_row(Q_RANGE=1, W_L=0, W_R=4, W_O=4, W_4=4, W_L_SHIFT=4)
        residuals = delta_range_relation(p, PARAMS, FR(1))
        assert residuals[0] == FR(4 * 3 * 2 * 1)
        assert residuals[1:] == [FR(0)] * 3


class TestPermutation:
    def test_all_zero_row(self):
        assert permutation_relation(zero_row(), PARAMS, FR(1)) == [FR(0), FR(0)]

    def test_last_row_requires_zero_shift(self):
        p = zero_row(LAGRANGE_LAST=1, Z_PERM_SHIFT=2)
        _, e1 = permutation_relation(p, PARAMS, FR(1))
        assert e1 == FR(2)


# =====================================================================
# 공개 입력 δ, pow
# =====================================================================

class TestPublicInputDelta:
    def test_single_input(self):
        # (γ + pi + β·(n + offset)) / (γ + pi - β·(offset + 1))
        delta = compute_public_input_delta([FR(6)], FR(2), FR(3), 8, 1)
        assert delta == FR(3 + 6 + 2 * 9) / FR(3 + 6 - 2 * 2)

    def test_zero_beta_gives_one(self):
        delta = compute_public_input_delta([FR(6), FR(11)], FR(0), FR(3), 8, 1)
        assert delta == FR(1)

    def test_no_inputs(self):
        assert compute_public_input_delta([], FR(2), FR(3), 8, 1) == FR(1)

    def test_vanishing_denominator(self):
        # γ + pi - β·(offset + 1) = -4 + 6 - 2 = 0
        with pytest.raises(RelationCheckFailed):
            compute_public_input_delta([FR(6)], FR(1), FR(-4), 8, 1)


class TestPow:
    def test_hypercube_point(self):
        betas = [FR(3), FR(5), FR(7)]
        assert pow_partial_evaluation(betas, [FR(1), FR(0), FR(1)]) == FR(21)
        assert pow_partial_evaluation(betas, [FR(0), FR(0), FR(0)]) == FR(1)

    def test_off_hypercube(self):
        betas = [FR(3)]
        u = FR(10)
        assert pow_partial_evaluation(betas, [u]) == (FR(1) - u) + u * FR(3)


# =====================================================================
# RelationEvaluator
# =====================================================================

class TestRelationEvaluator:
    def test_subrelation_counts(self):
        assert sum(count for _, _, count in RELATIONS) == NUMBER_OF_SUBRELATIONS
        assert RELATION_SETS["ultra"] == tuple(name for name, _, _ in RELATIONS)

    def test_unknown_relation_set(self):
        with pytest.raises(UnsupportedCircuitShape):
            RelationEvaluator("plonk")

    def test_zero_row_accepts_zero_target(self):
        alphas = [FR(i + 2) for i in range(NUMBER_OF_SUBRELATIONS - 1)]
        identities = RelationEvaluator().check(
            zero_row(), PARAMS, alphas, [FR(3)], [FR(9)], FR(0))
        assert [identity.kind for identity in identities][:2] == ["arithmetic", "permutation"]
        assert sum(len(identity.residuals) for identity in identities) == NUMBER_OF_SUBRELATIONS
        assert all(identity.is_satisfied() for identity in identities)

    def test_mismatched_target(self):
        alphas = [FR(1)] * (NUMBER_OF_SUBRELATIONS - 1)
        with pytest.raises(RelationCheckFailed):
            RelationEvaluator().check(zero_row(), PARAMS, alphas, [FR(3)], [FR(9)], FR(1))

    def test_alpha_batching(self):
        # arithmetic e0 = -1 (잔차 0번, alpha 없음), delta range 첫 잔차 = 24 (잔차 6번)
        p = zero_row(Q_ARITH=1, Q_M=1, Q_O=-1, W_L=3, W_R=4, W_O=13)
        alphas = [FR(10 + i) for i in range(NUMBER_OF_SUBRELATIONS - 1)]
        value, _ = accumulate_relation_evaluations(p, PARAMS, alphas, FR(1))
        assert value == FR(-1)

        p = zero_row(Q_RANGE=1, W_R=4, W_O=4, W_4=4, W_L_SHIFT=4)
        value, _ = accumulate_relation_evaluations(p, PARAMS, alphas, FR(1))
        assert value == FR(24) * alphas[5]


# =====================================================================
# Prover 트레이스: 모든 행에서 모든 관계식이 0
# =====================================================================

class TestTraceSatisfiesRelations:
    @pytest.mark.parametrize("state_name", ["secret_state", "range_state"])
    def test_every_row(self, request, state_name):
        state = request.getfixturevalue(state_name)
        full = with_shifts(state.tables)
        for i in range(state.n):
            _, identities = accumulate_relation_evaluations(
                row(full, i), state.params, state.alphas, FR(1))
            failing = [identity for identity in identities if not identity.is_satisfied()]
            assert failing == [], f"row {i}: {failing}"

    def test_grand_product_starts_at_zero(self, secret_state):
        assert secret_state.tables[Entity.Z_PERM][0] == 0
        assert secret_state.tables[Entity.Z_PERM][1] != 0

    def test_wrong_delta_breaks_last_row(self, secret_state):
        state = secret_state
        params = RelationParameters(state.eta, state.eta_two, state.eta_three,
                                    state.beta, state.gamma, state.params.public_inputs_delta + 1)
        full = with_shifts(state.tables)
        residuals = permutation_relation(row(full, state.n - 1), params, FR(1))
        assert residuals[0] != 0
