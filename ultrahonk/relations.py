"""
UltraHonk 관계식 평가기 (Relation Evaluator)
=============================================

sumcheck의 마지막 점 u = (u₀, ..., u_{d-1})에서 Prover가 주장한 40개
엔티티 평가값으로 모든 게이트 관계식(relation)을 계산하고, 26개의
부분 관계식(subrelation) 잔차를 alpha 거듭제곱으로 결합한다.

  ┌───────────────────────┬─────┬──────────────────────────────────┐
  │ relation              │ sub │ 의미                             │
  ├───────────────────────┼─────┼──────────────────────────────────┤
  │ arithmetic            │  2  │ q_m·w_l·w_r + q_l·w_l + ... = 0  │
  │ permutation           │  2  │ grand product z_perm (copy 제약) │
  │ lookup (log-deriv.)   │  2  │ 룩업 테이블 포함 관계            │
  │ delta range           │  4  │ 인접 배선 차이 ∈ {0,1,2,3}        │
  │ elliptic              │  2  │ Grumpkin 점 덧셈/두 배           │
  │ auxiliary (memory)    │  6  │ 비원시 필드, ROM/RAM 일관성       │
  │ poseidon2 external    │  4  │ 외부 라운드 (S-box + M_E)        │
  │ poseidon2 internal    │  4  │ 내부 라운드 (S-box + M_I)        │
  └───────────────────────┴─────┴──────────────────────────────────┘

**결합 방식**:
  acc = e₀ + Σ_{i≥1} alpha_{i-1} · eᵢ

  lookup의 두 번째 부분 관계식(인덱스 5)을 제외한 모든 잔차에는
  pow 다항식 값 pow(u) = Π ((1 - u_k) + u_k·β_k) 가 곱해진다 (domain_sep).
  인덱스 5는 행 단위가 아니라 하이퍼큐브 전체 합이 0이어야 하는 선형 종속
  관계식이기 때문이다.

**검증 조건**:
  acc == sumcheck 최종 주장값. 이 등식이 sumcheck와 관계식 검사를 잇는다.

Prover도 같은 함수로 라운드 univariate를 계산하므로,
Prover/Verifier의 관계식 정의는 항상 일치한다.
"""

import logging

from ultrahonk.entities import Entity, NUMBER_OF_SUBRELATIONS
from ultrahonk.errors import RelationCheckFailed, UnsupportedCircuitShape
from ultrahonk.field import FR

logger = logging.getLogger(__name__)


NEG_HALF = FR(-1) / FR(2)
GRUMPKIN_CURVE_B_PARAMETER_NEGATED = FR(17)
LIMB_SIZE = FR(1 << 68)
SUBLIMB_SHIFT = FR(1 << 14)

POSEIDON2_INTERNAL_MATRIX_DIAGONAL = (
    FR(0x10dc6e9c006ea38b04b1e03b4bd9490c0d03f98929ca1d7fb56821fd19d3b6e7),
    FR(0x0c28145b6a44df3e0149b3d0a30b3bb599df9756d4dd9b84a86b38cfb45a740b),
    FR(0x00544b8338791518b2c7645a50392798b21f75bb60e3596170067d00141cac15),
    FR(0x222c01175718386f2e2e82eb122789e352e105a3b8fa852613bc534433ee428b),
)


# ─────────────────────────────────────────────────────────────────────
# 관계식 파라미터
# ─────────────────────────────────────────────────────────────────────

class RelationParameters:
    """트랜스크립트에서 도출된 관계식 파라미터.

    속성:
        eta, eta_two, eta_three: 룩업/메모리 레코드 압축용
        beta, gamma: 순열/룩업 grand product용
        public_inputs_delta: 공개 입력 경계 항 δ
    """

    def __init__(self, eta, eta_two, eta_three, beta, gamma, public_inputs_delta):
        self.eta = eta
        self.eta_two = eta_two
        self.eta_three = eta_three
        self.beta = beta
        self.gamma = gamma
        self.public_inputs_delta = public_inputs_delta


def compute_public_input_delta(public_inputs, beta, gamma, circuit_size, offset):
    """공개 입력 δ를 계산한다.

    공개 입력 행 r = offset + i 에서 w_l의 순열 σ는 -(r+1) 로 덮어써져
    있다. grand product는 이 차이만큼 1에서 벗어나며, 그 값은

        δ = Π (γ + piᵢ + β·(n + offset + i)) / Π (γ + piᵢ - β·(offset + i + 1))

    이다. Verifier는 δ를 직접 계산하여 z_perm의 마지막 값과 비교한다
    (permutation 관계식의 lagrange_last 항).

    Raises:
        RelationCheckFailed: 분모가 0일 때
    """
    numerator = FR(1)
    denominator = FR(1)
    numerator_acc = gamma + beta * (circuit_size + offset)
    denominator_acc = gamma - beta * (offset + 1)
    for pi in public_inputs:
        numerator = numerator * (numerator_acc + pi)
        denominator = denominator * (denominator_acc + pi)
        numerator_acc = numerator_acc + beta
        denominator_acc = denominator_acc - beta
    if denominator == 0:
        raise RelationCheckFailed("public input delta denominator vanishes")
    return numerator / denominator


def pow_partial_evaluation(gate_challenges, point):
    """pow(u) = Π_k ((1 - u_k) + u_k·β_k)"""
    result = FR(1)
    for beta, u in zip(gate_challenges, point):
        result = result * ((FR(1) - u) + u * beta)
    return result


# ─────────────────────────────────────────────────────────────────────
# 부분 관계식
# ─────────────────────────────────────────────────────────────────────

def arithmetic_relation(p, rp, domain_sep):
    q_arith = p[Entity.Q_ARITH]
    w_l, w_r, w_o, w_4 = p[Entity.W_L], p[Entity.W_R], p[Entity.W_O], p[Entity.W_4]

    # (q_arith - 3)·q_m·w_r·w_l·(-1/2): q_arith = 1 이면 q_m·w_l·w_r
    accum = (q_arith - 3) * p[Entity.Q_M] * w_r * w_l * NEG_HALF
    accum = accum + p[Entity.Q_L] * w_l + p[Entity.Q_R] * w_r
    accum = accum + p[Entity.Q_O] * w_o + p[Entity.Q_4] * w_4 + p[Entity.Q_C]
    accum = accum + (q_arith - 1) * p[Entity.W_4_SHIFT]
    e0 = accum * q_arith * domain_sep

    accum = w_l + w_4 - p[Entity.W_L_SHIFT] + p[Entity.Q_M]
    e1 = accum * (q_arith - 2) * (q_arith - 1) * q_arith * domain_sep
    return [e0, e1]


def permutation_relation(p, rp, domain_sep):
    beta, gamma = rp.beta, rp.gamma
    num = FR(1)
    den = FR(1)
    for wire, ident, sigma in (
        (Entity.W_L, Entity.ID_1, Entity.SIGMA_1),
        (Entity.W_R, Entity.ID_2, Entity.SIGMA_2),
        (Entity.W_O, Entity.ID_3, Entity.SIGMA_3),
        (Entity.W_4, Entity.ID_4, Entity.SIGMA_4),
    ):
        num = num * (p[wire] + p[ident] * beta + gamma)
        den = den * (p[wire] + p[sigma] * beta + gamma)

    lhs = (p[Entity.Z_PERM] + p[Entity.LAGRANGE_FIRST]) * num
    rhs = (p[Entity.Z_PERM_SHIFT] + p[Entity.LAGRANGE_LAST] * rp.public_inputs_delta) * den
    e0 = (lhs - rhs) * domain_sep
    e1 = p[Entity.LAGRANGE_LAST] * p[Entity.Z_PERM_SHIFT] * domain_sep
    return [e0, e1]


def lookup_read_write_terms(p, rp):
    """로그 미분 룩업의 (read_term, write_term)."""
    write_term = (p[Entity.TABLE_1] + rp.gamma
                  + p[Entity.TABLE_2] * rp.eta
                  + p[Entity.TABLE_3] * rp.eta_two
                  + p[Entity.TABLE_4] * rp.eta_three)

    derived_1 = p[Entity.W_L] + rp.gamma + p[Entity.Q_R] * p[Entity.W_L_SHIFT]
    derived_2 = p[Entity.W_R] + p[Entity.Q_M] * p[Entity.W_R_SHIFT]
    derived_3 = p[Entity.W_O] + p[Entity.Q_C] * p[Entity.W_O_SHIFT]
    read_term = (derived_1 + derived_2 * rp.eta + derived_3 * rp.eta_two
                 + p[Entity.Q_O] * rp.eta_three)
    return read_term, write_term


def lookup_relation(p, rp, domain_sep):
    read_term, write_term = lookup_read_write_terms(p, rp)
    inverses = p[Entity.LOOKUP_INVERSES]
    read_tags = p[Entity.LOOKUP_READ_TAGS]
    q_lookup = p[Entity.Q_LOOKUP]

    read_inverse = inverses * write_term
    write_inverse = inverses * read_term
    inverse_exists = read_tags + q_lookup - read_tags * q_lookup

    e0 = (read_term * write_term * inverses - inverse_exists) * domain_sep
    # 선형 종속: 행 단위가 아닌 전체 합으로 성립하므로 domain_sep 없음
    e1 = q_lookup * read_inverse - p[Entity.LOOKUP_READ_COUNTS] * write_inverse
    return [e0, e1]


def delta_range_relation(p, rp, domain_sep):
    q_range = p[Entity.Q_RANGE]
    deltas = (
        p[Entity.W_R] - p[Entity.W_L],
        p[Entity.W_O] - p[Entity.W_R],
        p[Entity.W_4] - p[Entity.W_O],
        p[Entity.W_L_SHIFT] - p[Entity.W_4],
    )
    return [delta * (delta - 1) * (delta - 2) * (delta - 3) * q_range * domain_sep
            for delta in deltas]


def elliptic_relation(p, rp, domain_sep):
    x1, y1 = p[Entity.W_R], p[Entity.W_O]
    x2, y2 = p[Entity.W_L_SHIFT], p[Entity.W_4_SHIFT]
    x3, y3 = p[Entity.W_R_SHIFT], p[Entity.W_O_SHIFT]
    q_sign = p[Entity.Q_L]
    q_is_double = p[Entity.Q_M]
    q_elliptic = p[Entity.Q_ELLIPTIC]

    x_diff = x2 - x1
    y1_sqr = y1 * y1

    # 점 덧셈 (q_is_double = 0)
    y2_sqr = y2 * y2
    y1y2 = y1 * y2 * q_sign
    x_add = (x3 + x2 + x1) * x_diff * x_diff - y2_sqr - y1_sqr + y1y2 + y1y2
    not_double = FR(1) - q_is_double
    e0 = x_add * domain_sep * q_elliptic * not_double

    y_add = (y1 + y3) * x_diff + (x3 - x1) * (y2 * q_sign - y1)
    e1 = y_add * domain_sep * q_elliptic * not_double

    # 점 두 배 (q_is_double = 1), y² = x³ - 17
    x_pow_4 = (y1_sqr + GRUMPKIN_CURVE_B_PARAMETER_NEGATED) * x1
    x_double = (x3 + x1 + x1) * (y1_sqr * 4) - x_pow_4 * 9
    e0 = e0 + x_double * domain_sep * q_elliptic * q_is_double

    y_double = x1 * x1 * 3 * (x1 - x3) - (y1 + y1) * (y1 + y3)
    e1 = e1 + y_double * domain_sep * q_elliptic * q_is_double
    return [e0, e1]


def auxiliary_relation(p, rp, domain_sep):
    w_l, w_r, w_o, w_4 = p[Entity.W_L], p[Entity.W_R], p[Entity.W_O], p[Entity.W_4]
    w_l_s, w_r_s = p[Entity.W_L_SHIFT], p[Entity.W_R_SHIFT]
    w_o_s, w_4_s = p[Entity.W_O_SHIFT], p[Entity.W_4_SHIFT]
    q_l, q_r, q_o, q_4 = p[Entity.Q_L], p[Entity.Q_R], p[Entity.Q_O], p[Entity.Q_4]
    q_m, q_c, q_arith = p[Entity.Q_M], p[Entity.Q_C], p[Entity.Q_ARITH]
    q_aux_by_sep = p[Entity.Q_AUX] * domain_sep

    # ── 비원시 필드 곱셈 (68비트 limb) ──
    limb_subproduct = w_l * w_r_s + w_l_s * w_r
    gate_2 = ((w_l * w_4 + w_r * w_o - w_o_s) * LIMB_SIZE - w_4_s + limb_subproduct) * q_4
    limb_subproduct = limb_subproduct * LIMB_SIZE + w_l_s * w_r_s
    gate_1 = (limb_subproduct - (w_o + w_4)) * q_o
    gate_3 = (limb_subproduct + w_4 - (w_o_s + w_4_s)) * q_m
    non_native_field_identity = (gate_1 + gate_2 + gate_3) * q_r

    # ── limb 누산 (14비트 sublimb) ──
    acc_1 = w_r_s * SUBLIMB_SHIFT + w_l_s
    acc_1 = acc_1 * SUBLIMB_SHIFT + w_o
    acc_1 = acc_1 * SUBLIMB_SHIFT + w_r
    acc_1 = (acc_1 * SUBLIMB_SHIFT + w_l - w_4) * q_4
    acc_2 = w_o_s * SUBLIMB_SHIFT + w_r_s
    acc_2 = acc_2 * SUBLIMB_SHIFT + w_l_s
    acc_2 = acc_2 * SUBLIMB_SHIFT + w_4
    acc_2 = (acc_2 * SUBLIMB_SHIFT + w_o - w_4_s) * q_m
    limb_accumulator_identity = (acc_1 + acc_2) * q_o

    # ── 메모리 레코드 ──
    partial_record_check = w_o * rp.eta_three + w_r * rp.eta_two + w_l * rp.eta + q_c
    memory_record_check = partial_record_check - w_4

    # ROM: 인덱스는 단조 증가, 같은 인덱스면 같은 값
    index_delta = w_l_s - w_l
    record_delta = w_4_s - w_4
    index_is_monotonically_increasing = index_delta * index_delta - index_delta
    adjacent_values_match = (FR(1) - index_delta) * record_delta
    e1 = adjacent_values_match * (q_l * q_r) * q_aux_by_sep
    e2 = index_is_monotonically_increasing * (q_l * q_r) * q_aux_by_sep
    rom_consistency = memory_record_check * (q_l * q_r)

    # RAM: 접근 유형(read/write)은 불리언, 읽기는 직전 값과 일치
    access_type = w_4 - partial_record_check
    access_check = access_type * access_type - access_type
    next_gate_access_type = w_4_s - (w_o_s * rp.eta_three + w_r_s * rp.eta_two + w_l_s * rp.eta)
    value_delta = w_o_s - w_o
    adjacent_read_matches = (FR(1) - index_delta) * value_delta * (FR(1) - next_gate_access_type)
    next_access_is_boolean = next_gate_access_type * next_gate_access_type - next_gate_access_type
    e3 = adjacent_read_matches * q_arith * q_aux_by_sep
    e4 = index_is_monotonically_increasing * q_arith * q_aux_by_sep
    e5 = next_access_is_boolean * q_arith * q_aux_by_sep
    ram_consistency = access_check * q_arith

    timestamp_delta = w_r_s - w_r
    ram_timestamp_check = (FR(1) - index_delta) * timestamp_delta - w_o

    memory_identity = (rom_consistency
                       + ram_timestamp_check * (q_4 * q_l)
                       + memory_record_check * (q_m * q_l)
                       + ram_consistency)
    auxiliary_identity = memory_identity + non_native_field_identity + limb_accumulator_identity
    e0 = auxiliary_identity * q_aux_by_sep
    return [e0, e1, e2, e3, e4, e5]


def poseidon2_external_relation(p, rp, domain_sep):
    s = (
        p[Entity.W_L] + p[Entity.Q_L],
        p[Entity.W_R] + p[Entity.Q_R],
        p[Entity.W_O] + p[Entity.Q_O],
        p[Entity.W_4] + p[Entity.Q_4],
    )
    u1, u2, u3, u4 = (x ** 5 for x in s)

    # 외부 MDS 행렬 M_E
    t0 = u1 + u2
    t1 = u3 + u4
    t2 = u2 + u2 + t1
    t3 = u4 + u4 + t0
    v4 = t1 * 4 + t3
    v2 = t0 * 4 + t2
    v1 = t3 + v2
    v3 = t2 + v4

    q_pos = p[Entity.Q_POSEIDON2_EXTERNAL] * domain_sep
    return [
        q_pos * (v1 - p[Entity.W_L_SHIFT]),
        q_pos * (v2 - p[Entity.W_R_SHIFT]),
        q_pos * (v3 - p[Entity.W_O_SHIFT]),
        q_pos * (v4 - p[Entity.W_4_SHIFT]),
    ]


def poseidon2_internal_relation(p, rp, domain_sep):
    u1 = (p[Entity.W_L] + p[Entity.Q_L]) ** 5
    u2, u3, u4 = p[Entity.W_R], p[Entity.W_O], p[Entity.W_4]
    u_sum = u1 + u2 + u3 + u4
    q_pos = p[Entity.Q_POSEIDON2_INTERNAL] * domain_sep

    diag = POSEIDON2_INTERNAL_MATRIX_DIAGONAL
    shifts = (Entity.W_L_SHIFT, Entity.W_R_SHIFT, Entity.W_O_SHIFT, Entity.W_4_SHIFT)
    return [q_pos * (u * d + u_sum - p[shift])
            for u, d, shift in zip((u1, u2, u3, u4), diag, shifts)]


# 이름, 함수, 부분 관계식 수 (순서가 곧 부분 관계식 인덱스)
RELATIONS = (
    ("arithmetic", arithmetic_relation, 2),
    ("permutation", permutation_relation, 2),
    ("lookup", lookup_relation, 2),
    ("delta_range", delta_range_relation, 4),
    ("elliptic", elliptic_relation, 2),
    ("auxiliary", auxiliary_relation, 6),
    ("poseidon2_external", poseidon2_external_relation, 4),
    ("poseidon2_internal", poseidon2_internal_relation, 4),
)

RELATION_SETS = {
    "ultra": tuple(name for name, _, _ in RELATIONS),
}

def accumulate_relation_evaluations(evaluations, params, alphas, domain_sep, relation_set="ultra"):
    """모든 부분 관계식을 계산하고 alpha로 결합한다.

    Returns:
        tuple: (결합값 FR, [RelationIdentity, ...])
    """
    enabled = RELATION_SETS[relation_set]
    residuals = []
    identities = []
    for name, relation, count in RELATIONS:
        if name in enabled:
            values = relation(evaluations, params, domain_sep)
        else:
            values = [FR(0)] * count
        residuals.extend(values)
        identities.append(RelationIdentity(name, values))

    acc = residuals[0]
    for i in range(1, NUMBER_OF_SUBRELATIONS):
        acc = acc + residuals[i] * alphas[i - 1]
    return acc, identities


class RelationIdentity:
    """한 관계식 종류의 잔차 묶음."""

    def __init__(self, kind, residuals):
        self.kind = kind
        self.residuals = list(residuals)

    def is_satisfied(self):
        return all(r == 0 for r in self.residuals)

    def __repr__(self):
        return f"RelationIdentity({self.kind!r}, {[int(r) for r in self.residuals]})"


class RelationEvaluator:
    """sumcheck 최종 점에서의 관계식 검사.

    Args:
        relation_set: 관계식 집합 이름 (현재 "ultra"만 정의)

    Raises:
        UnsupportedCircuitShape: 알 수 없는 관계식 집합
    """

    def __init__(self, relation_set="ultra"):
        if relation_set not in RELATION_SETS:
            raise UnsupportedCircuitShape(
                f"unknown relation set {relation_set!r} (known: {', '.join(sorted(RELATION_SETS))})")
        self.relation_set = relation_set

    def check(self, evaluations, params, alphas, gate_challenges, point, target):
        """결합값이 sumcheck 최종 주장값과 같은지 확인한다.

        Returns:
            list[RelationIdentity]: 관계식별 잔차

        Raises:
            RelationCheckFailed: 결합값 ≠ target
        """
        pow_eval = pow_partial_evaluation(gate_challenges, point)
        value, identities = accumulate_relation_evaluations(
            evaluations, params, alphas, pow_eval, self.relation_set)
        if value != target:
            failing = [identity.kind for identity in identities if not identity.is_satisfied()]
            logger.debug("relation check failed; non-zero residuals in %s", failing)
            raise RelationCheckFailed(
                "batched relation evaluation does not match the sumcheck claim")
        return identities
