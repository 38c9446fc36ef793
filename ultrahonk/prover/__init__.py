"""
UltraHonk Prover — 5-라운드 프로토콜 오케스트레이터
====================================================

검증기 테스트와 생성 코드 데모에 쓰이는 참조 Prover. 영지식 블라인딩은
하지 않는다 (테이블을 그대로 계수로 커밋한다).

  ┌─────────────────────────────────────────────────────┐
  │  Round 1: 배선 커밋                                  │
  │  Prover → Verifier: [w1], [w2], [w3]                │
  │  Verifier → Prover: eta, eta_two, eta_three         │
  ├─────────────────────────────────────────────────────┤
  │  Round 2: 룩업 카운트/태그, 네 번째 배선              │
  │  Prover → Verifier: [read_counts], [read_tags], [w4]│
  │  Verifier → Prover: beta, gamma                     │
  ├─────────────────────────────────────────────────────┤
  │  Round 3: grand product와 룩업 역원                   │
  │  Prover → Verifier: [lookup_inverses], [z_perm]     │
  │  Verifier → Prover: alpha × 25, gate challenge × d  │
  ├─────────────────────────────────────────────────────┤
  │  Round 4: Sumcheck                                   │
  │  Prover → Verifier: 라운드 univariate × d, 평가값 40  │
  │  Verifier → Prover: u_0, ..., u_{d-1}               │
  ├─────────────────────────────────────────────────────┤
  │  Round 5: Gemini + Shplonk + KZG                     │
  │  Prover → Verifier: [A_1..A_{d-1}], a_l, [Q], [W]   │
  └─────────────────────────────────────────────────────┘

사용 예시:
    >>> from ultrahonk.prover import prove
    >>> pp = preprocess(circuit, srs, backend)
    >>> proof = prove(pp, srs, backend)
    >>> proof.to_bytes()
"""

import logging

from ultrahonk.curve import get_backend
from ultrahonk.entities import PRECOMPUTED_ENTITIES
from ultrahonk.kzg import commit
from ultrahonk.proof import Proof
from ultrahonk.prover import round1, round2, round3, round4, round5
from ultrahonk.transcript import Transcript

logger = logging.getLogger(__name__)


class ProverState:
    """라운드 간 공유되는 Prover 상태.

    속성 (입력):
        preprocessed: PreprocessedData
        srs: SRS
        backend: CurveBackend
        transcript: Fiat-Shamir 트랜스크립트

    속성 (라운드 간 생성):
        tables: Entity → 길이 n 테이블 (unshifted 35개)
        params: RelationParameters (Round 3)
        alphas, gate_challenges: Round 3 챌린지
        point: sumcheck 챌린지 u (Round 4)

    속성 (출력):
        proof: Proof 객체
    """

    def __init__(self, preprocessed, srs, backend):
        self.preprocessed = preprocessed
        self.trace = preprocessed.trace
        self.vk = preprocessed.vk
        self.srs = srs
        self.backend = backend
        self.transcript = Transcript()

        self.n = preprocessed.n
        self.log_n = preprocessed.log_n
        self.public_inputs = list(self.trace.public_inputs)

        self.tables = {}
        for name, entity in PRECOMPUTED_ENTITIES.items():
            self.tables[entity] = self.trace.precomputed[name]

        self.eta = None
        self.eta_two = None
        self.eta_three = None
        self.beta = None
        self.gamma = None
        self.params = None
        self.alphas = None
        self.gate_challenges = None
        self.point = None

        self.proof = Proof()

    def commit(self, table):
        return commit(table, self.srs, self.backend)

    def build_proof(self):
        """최종 증명 객체를 반환한다."""
        return self.proof


def prove(preprocessed, srs, backend=None):
    """UltraHonk 5-라운드 프로토콜을 실행하여 증명을 생성한다.

    Args:
        preprocessed: PreprocessedData (전처리 결과, 트레이스 포함)
        srs: SRS
        backend: CurveBackend 또는 이름

    Returns:
        Proof
    """
    state = ProverState(preprocessed, srs, get_backend(backend))

    # ┌─────────────────────────────────────────────────────┐
    # │  Round 1: [w1], [w2], [w3] → eta                    │
    # └─────────────────────────────────────────────────────┘
    round1.execute(state)

    # ┌─────────────────────────────────────────────────────┐
    # │  Round 2: [read_counts], [read_tags], [w4] → β, γ   │
    # └─────────────────────────────────────────────────────┘
    round2.execute(state)

    # ┌─────────────────────────────────────────────────────┐
    # │  Round 3: [lookup_inverses], [z_perm] → α, gate β   │
    # └─────────────────────────────────────────────────────┘
    round3.execute(state)

    # ┌─────────────────────────────────────────────────────┐
    # │  Round 4: sumcheck univariate와 평가값               │
    # └─────────────────────────────────────────────────────┘
    round4.execute(state)

    # ┌─────────────────────────────────────────────────────┐
    # │  Round 5: Gemini 폴딩 + Shplonk + KZG               │
    # └─────────────────────────────────────────────────────┘
    round5.execute(state)

    logger.debug("proof generated (n=%d)", state.n)
    return state.build_proof()
