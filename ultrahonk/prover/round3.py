"""
UltraHonk Prover Round 3: 룩업 역원과 순열 grand product
=========================================================

  ┌─────────────────────────────────────────────────────┐
  │  Prover → Verifier: [lookup_inverses], [z_perm]     │
  │  Verifier → Prover: alpha × 25, gate challenge × d  │
  └─────────────────────────────────────────────────────┘

**룩업 역원**:
  inverses[i] = 1 / (read_term · write_term)   (q_lookup 또는 read_tag가 있는 행)
  그 외 행은 0.

**순열 grand product z_perm**:
  z[0] = 0
  z[i+1] = Π_{k≤i} num(k) / den(k)
    num(k) = Π_j (w_j + β·id_j + γ),  den(k) = Π_j (w_j + β·σ_j + γ)

  permutation 관계식의 lagrange_first 항이 행 0의 z를 1로 취급하므로
  z[0]은 0으로 두어 shift 다항식 z/X를 만들 수 있다. 마지막 값은
  공개 입력 δ와 같아진다.

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ultrahonk.entities import Entity
from ultrahonk.field import FR, batch_inverse
from ultrahonk.prover.tables import row, with_shifts
from ultrahonk.relations import (
    RelationParameters, compute_public_input_delta, lookup_read_write_terms,
)
from ultrahonk.transcript import generate_alphas, generate_gate_challenges

WIRE_TRIPLES = (
    (Entity.W_L, Entity.ID_1, Entity.SIGMA_1),
    (Entity.W_R, Entity.ID_2, Entity.SIGMA_2),
    (Entity.W_O, Entity.ID_3, Entity.SIGMA_3),
    (Entity.W_4, Entity.ID_4, Entity.SIGMA_4),
)


def compute_lookup_inverses(tables, n, params):
    """1 / (read_term · write_term) 테이블. tables에는 35개 엔티티가 모두 있어야 한다."""
    full = with_shifts(tables)

    inverses = [FR(0)] * n
    for i in range(n):
        if tables[Entity.Q_LOOKUP][i] == 0 and tables[Entity.LOOKUP_READ_TAGS][i] == 0:
            continue
        read_term, write_term = lookup_read_write_terms(row(full, i), params)
        product = read_term * write_term
        if product == 0:
            raise ZeroDivisionError(f"lookup terms vanish at row {i}")
        inverses[i] = FR(1) / product
    return inverses


def compute_grand_product(state):
    """z_perm 테이블 (길이 n)."""
    n = state.n
    tables = state.tables
    beta, gamma = state.beta, state.gamma

    numerators = []
    denominators = []
    for i in range(n - 1):
        num = FR(1)
        den = FR(1)
        for wire, ident, sigma in WIRE_TRIPLES:
            w = tables[wire][i]
            num = num * (w + tables[ident][i] * beta + gamma)
            den = den * (w + tables[sigma][i] * beta + gamma)
        numerators.append(num)
        denominators.append(den)

    z = [FR(0)]
    acc = FR(1)
    for num, den_inv in zip(numerators, batch_inverse(denominators)):
        acc = acc * num * den_inv
        z.append(acc)
    return z


def execute(state):
    """Round 3을 실행한다."""
    proof = state.proof
    transcript = state.transcript
    vk = state.vk

    delta = compute_public_input_delta(
        state.public_inputs, state.beta, state.gamma, vk.circuit_size, vk.pub_inputs_offset)
    state.params = RelationParameters(
        state.eta, state.eta_two, state.eta_three, state.beta, state.gamma, delta)

    # ── 1. 룩업 역원 ──
    # 역원/z_perm은 룩업 항에 쓰이지 않으므로 0으로 채운 뒤 계산한다
    state.tables[Entity.LOOKUP_INVERSES] = [FR(0)] * state.n
    state.tables[Entity.Z_PERM] = [FR(0)] * state.n
    state.tables[Entity.LOOKUP_INVERSES] = compute_lookup_inverses(
        state.tables, state.n, state.params)

    # ── 2. z_perm ──
    state.tables[Entity.Z_PERM] = compute_grand_product(state)

    proof.lookup_inverses = state.commit(state.tables[Entity.LOOKUP_INVERSES])
    proof.z_perm = state.commit(state.tables[Entity.Z_PERM])

    transcript.absorb_point("lookup_inverses", proof.lookup_inverses)
    transcript.absorb_point("z_perm", proof.z_perm)

    # ── 3. alpha, gate challenge ──
    state.alphas = generate_alphas(transcript)
    state.gate_challenges = generate_gate_challenges(transcript, state.log_n)
