"""
UltraHonk 엔티티(다항식) 목록과 프로토콜 상수
==============================================

sumcheck가 끝나면 Prover는 40개 다항식의 평가값을 보낸다. 이 모듈은
그 순서(Entity)와, 각 엔티티가 어느 커밋먼트에 대응하는지를 정의한다.

  ┌──────────────┬─────┬────────────────────────────────────────────┐
  │ precomputed  │ 27  │ 셀렉터, σ, id, 테이블, lagrange (VK 커밋먼트) │
  │ witness      │  8  │ 배선 4개, z_perm, 룩업 3개 (증명 커밋먼트)    │
  │ shifted      │  5  │ w_l..w_4, z_perm 의 한 칸 이동 (X⁻¹ 배)       │
  └──────────────┴─────┴────────────────────────────────────────────┘
"""

from enum import IntEnum


class Entity(IntEnum):
    Q_M = 0
    Q_C = 1
    Q_L = 2
    Q_R = 3
    Q_O = 4
    Q_4 = 5
    Q_LOOKUP = 6
    Q_ARITH = 7
    Q_RANGE = 8
    Q_ELLIPTIC = 9
    Q_AUX = 10
    Q_POSEIDON2_EXTERNAL = 11
    Q_POSEIDON2_INTERNAL = 12
    SIGMA_1 = 13
    SIGMA_2 = 14
    SIGMA_3 = 15
    SIGMA_4 = 16
    ID_1 = 17
    ID_2 = 18
    ID_3 = 19
    ID_4 = 20
    TABLE_1 = 21
    TABLE_2 = 22
    TABLE_3 = 23
    TABLE_4 = 24
    LAGRANGE_FIRST = 25
    LAGRANGE_LAST = 26
    W_L = 27
    W_R = 28
    W_O = 29
    W_4 = 30
    Z_PERM = 31
    LOOKUP_INVERSES = 32
    LOOKUP_READ_COUNTS = 33
    LOOKUP_READ_TAGS = 34
    W_L_SHIFT = 35
    W_R_SHIFT = 36
    W_O_SHIFT = 37
    W_4_SHIFT = 38
    Z_PERM_SHIFT = 39


NUMBER_OF_ENTITIES = len(Entity)
NUMBER_UNSHIFTED = 35
NUMBER_TO_BE_SHIFTED = 5

NUMBER_OF_SUBRELATIONS = 26
NUMBER_OF_ALPHAS = NUMBER_OF_SUBRELATIONS - 1

# 라운드 univariate 평가점 {0, 1, ..., 7} (최대 차수 7)
BATCHED_RELATION_PARTIAL_LENGTH = 8

# Gemini 보조 회로가 지원하는 최대 log n
MAX_LOG_CIRCUIT_SIZE = 28

# VK 커밋먼트 이름 → 엔티티
PRECOMPUTED_ENTITIES = {
    "qm": Entity.Q_M,
    "qc": Entity.Q_C,
    "ql": Entity.Q_L,
    "qr": Entity.Q_R,
    "qo": Entity.Q_O,
    "q4": Entity.Q_4,
    "q_lookup": Entity.Q_LOOKUP,
    "q_arith": Entity.Q_ARITH,
    "q_delta_range": Entity.Q_RANGE,
    "q_elliptic": Entity.Q_ELLIPTIC,
    "q_aux": Entity.Q_AUX,
    "q_poseidon2_external": Entity.Q_POSEIDON2_EXTERNAL,
    "q_poseidon2_internal": Entity.Q_POSEIDON2_INTERNAL,
    "s1": Entity.SIGMA_1,
    "s2": Entity.SIGMA_2,
    "s3": Entity.SIGMA_3,
    "s4": Entity.SIGMA_4,
    "id1": Entity.ID_1,
    "id2": Entity.ID_2,
    "id3": Entity.ID_3,
    "id4": Entity.ID_4,
    "t1": Entity.TABLE_1,
    "t2": Entity.TABLE_2,
    "t3": Entity.TABLE_3,
    "t4": Entity.TABLE_4,
    "lagrange_first": Entity.LAGRANGE_FIRST,
    "lagrange_last": Entity.LAGRANGE_LAST,
}

# 증명 커밋먼트 이름 → 엔티티 (트랜스크립트/증명 순서와 무관)
WITNESS_ENTITIES = {
    "w1": Entity.W_L,
    "w2": Entity.W_R,
    "w3": Entity.W_O,
    "w4": Entity.W_4,
    "z_perm": Entity.Z_PERM,
    "lookup_inverses": Entity.LOOKUP_INVERSES,
    "lookup_read_counts": Entity.LOOKUP_READ_COUNTS,
    "lookup_read_tags": Entity.LOOKUP_READ_TAGS,
}

# shifted 엔티티 → 원본(to-be-shifted) 엔티티
SHIFTED_SOURCES = {
    Entity.W_L_SHIFT: Entity.W_L,
    Entity.W_R_SHIFT: Entity.W_R,
    Entity.W_O_SHIFT: Entity.W_O,
    Entity.W_4_SHIFT: Entity.W_4,
    Entity.Z_PERM_SHIFT: Entity.Z_PERM,
}
