"""
UltraHonk Prover Round 4: Sumcheck
===================================

  ┌────────────────────────────────────────────────────┐
  │  Prover → Verifier: 라운드 univariate S_k × d       │
  │  Verifier → Prover: u_k (라운드마다)                 │
  │  Prover → Verifier: 엔티티 평가값 40개 (점 u)        │
  └────────────────────────────────────────────────────┘

**pow 테이블**:
  P[i] = Π_k (i의 k번째 비트 ? β_k : 1)
  다중선형 확장은 pow(u) = Π ((1 - u_k) + u_k·β_k) 이다.

**라운드 k** (현재 테이블 크기 m = 2^{d-k}):
  S_k(t) = Σ_{j < m/2} F(e_j(t), P_j(t)),   t = 0, ..., 7
    e_j(t) = T[2j] + t·(T[2j+1] - T[2j])  (모든 엔티티 테이블 T)
  u_k를 받으면 모든 테이블을 u_k로 접는다 (polynomial.fold).

d 라운드 후 테이블은 길이 1이 되며, 그 값이 보낼 평가값이다.

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ultrahonk.entities import BATCHED_RELATION_PARTIAL_LENGTH
from ultrahonk.field import FR
from ultrahonk.polynomial import fold
from ultrahonk.prover.tables import with_shifts
from ultrahonk.relations import accumulate_relation_evaluations


def pow_table(gate_challenges, n):
    """P[i] = Π_k (bit_k(i) ? β_k : 1)"""
    table = [FR(1)] * n
    for i in range(n):
        value = FR(1)
        for k, beta in enumerate(gate_challenges):
            if (i >> k) & 1:
                value = value * beta
        table[i] = value
    return table


def round_univariate(tables, pow_values, params, alphas):
    """현재 테이블에서 라운드 univariate의 평가값 8개를 계산한다."""
    half = len(pow_values) // 2
    evals = [FR(0)] * BATCHED_RELATION_PARTIAL_LENGTH
    for j in range(half):
        lo = [table[2 * j] for table in tables]
        hi = [table[2 * j + 1] for table in tables]
        diff = [b - a for a, b in zip(lo, hi)]
        pow_lo = pow_values[2 * j]
        pow_diff = pow_values[2 * j + 1] - pow_lo
        for t in range(BATCHED_RELATION_PARTIAL_LENGTH):
            point = [a + d * t for a, d in zip(lo, diff)]
            value, _ = accumulate_relation_evaluations(
                point, params, alphas, pow_lo + pow_diff * t)
            evals[t] = evals[t] + value
    return evals


def execute(state):
    """Round 4를 실행한다."""
    transcript = state.transcript
    tables = with_shifts(state.tables)
    pow_values = pow_table(state.gate_challenges, state.n)

    univariates = []
    point = []
    for k in range(state.log_n):
        univariate = round_univariate(tables, pow_values, state.params, state.alphas)
        transcript.absorb_scalars(f"sumcheck_univariate_{k}", univariate)
        u = transcript.challenge_lo(f"sumcheck_u_{k}")
        univariates.append(univariate)
        point.append(u)
        tables = [fold(table, u) for table in tables]
        pow_values = fold(pow_values, u)

    state.point = point
    state.proof.sumcheck_univariates = univariates
    state.proof.sumcheck_evaluations = [table[0] for table in tables]
