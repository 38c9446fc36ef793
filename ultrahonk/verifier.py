"""
UltraHonk 검증기 (Verifier)
============================

증명 바이트열과 공개 입력을 받아 수락하거나 거부 사유를 담은 예외를 던진다.

**검증 흐름** (실패 시 즉시 중단, fail-fast):

  ┌─────────────────────────────────────────────────────────────┐
  │ 0. 파싱: 공개 입력 32바이트 워드 → FR, 증명 바이트열 → Proof   │
  │ 1. 트랜스크립트: eta, beta/gamma, alpha, gate challenge 도출   │
  │    공개 입력 δ 계산                                           │
  │ 2. Sumcheck: d 라운드 상태 기계 → 최종 점 u, 최종 주장값       │
  │ 3. 관계식: Σ alpha·잔차 (× pow(u)) == 최종 주장값              │
  │ 4. 열기/페어링: Gemini + Shplonk + KZG                         │
  └─────────────────────────────────────────────────────────────┘

**반환 규약**:
  verify()는 수락 시 True를 반환하고, 거부 시 VerifierError 하위 예외를
  던진다. False를 반환하는 경로는 없다.

**주입 가능한 구성요소**:
  곡선 백엔드, 관계식 평가기(relation_evaluator), 열기 검증기
  (opening_verifier)는 속성으로 교체할 수 있다. 테스트는 이를 통해 호출
  순서를 관찰한다.

사용 예시:
    >>> verifier = HonkVerifier(vk, backend="optimized_bn128", srs_g2=srs.g2_affine())
    >>> verifier.verify(proof_bytes, [to_word(6)])   # True
"""

import logging

from ultrahonk.curve import get_backend
from ultrahonk.entities import MAX_LOG_CIRCUIT_SIZE
from ultrahonk.errors import UnsupportedCircuitShape
from ultrahonk.proof import Proof, parse_public_inputs
from ultrahonk.relations import (
    RelationEvaluator, RelationParameters, compute_public_input_delta,
)
from ultrahonk.shplemini import OpeningVerifier
from ultrahonk.sumcheck import SumcheckVerifier
from ultrahonk.transcript import (
    Transcript, absorb_header, generate_alphas, generate_gate_challenges,
)

logger = logging.getLogger(__name__)


class HonkVerifier:
    """VK 하나에 묶인 UltraHonk 검증기.

    Args:
        vk: VerificationKey (27개 표준 커밋먼트)
        backend: CurveBackend 또는 백엔드 이름 (None이면 환경 설정)
        srs_g2: [τ]₂ G2Point (None이면 공개 ceremony 값)
        relations: 관계식 집합 이름

    Raises:
        UnsupportedCircuitShape: VK 형태나 관계식 집합을 지원하지 않거나
            srs_g2가 G2 위의 점이 아닐 때
    """

    def __init__(self, vk, backend=None, srs_g2=None, relations="ultra"):
        if not vk.has_standard_schema():
            raise UnsupportedCircuitShape(
                f"{vk.layout} VK with {vk.num_points} points does not match the UltraHonk schema")
        if not 1 <= vk.log_circuit_size <= MAX_LOG_CIRCUIT_SIZE:
            raise UnsupportedCircuitShape(
                f"log_circuit_size {vk.log_circuit_size} outside [1, {MAX_LOG_CIRCUIT_SIZE}]")
        self.vk = vk
        self.backend = get_backend(backend)
        self.relation_evaluator = RelationEvaluator(relations)
        self.opening_verifier = OpeningVerifier(self.backend, srs_g2)

    def verify(self, proof, public_inputs, transcript=None):
        """증명을 검증한다.

        Args:
            proof: 증명 바이트열
            public_inputs: 32바이트 빅엔디안 워드 리스트
            transcript: 관찰용 Transcript (None이면 새로 만든다)

        Returns:
            True

        Raises:
            VerifierError: 거부 (MalformedProof, FieldElementOutOfRange,
                TranscriptMismatch, SumcheckRoundFailed, RelationCheckFailed,
                OpeningVerificationFailed, PairingCheckFailed)
        """
        vk = self.vk
        log_n = vk.log_circuit_size
        if transcript is None:
            transcript = Transcript()

        # ── 0. 파싱 ──
        pi_values = parse_public_inputs(public_inputs, vk.public_inputs_size)
        parsed = Proof.from_bytes(proof, log_n)

        # ── 1. Oink: 관계식 파라미터 ──
        absorb_header(transcript, vk.circuit_size, vk.public_inputs_size,
                      vk.pub_inputs_offset, pi_values)
        transcript.absorb_point("w1", parsed.w1)
        transcript.absorb_point("w2", parsed.w2)
        transcript.absorb_point("w3", parsed.w3)
        eta, eta_two = transcript.challenge_split("eta")
        eta_three = transcript.challenge_lo("eta_three")

        transcript.absorb_point("lookup_read_counts", parsed.lookup_read_counts)
        transcript.absorb_point("lookup_read_tags", parsed.lookup_read_tags)
        transcript.absorb_point("w4", parsed.w4)
        beta, gamma = transcript.challenge_split("beta_gamma")

        transcript.absorb_point("lookup_inverses", parsed.lookup_inverses)
        transcript.absorb_point("z_perm", parsed.z_perm)
        alphas = generate_alphas(transcript)
        gate_challenges = generate_gate_challenges(transcript, log_n)

        delta = compute_public_input_delta(
            pi_values, beta, gamma, vk.circuit_size, vk.pub_inputs_offset)
        params = RelationParameters(eta, eta_two, eta_three, beta, gamma, delta)

        # ── 2. Sumcheck ──
        sumcheck = SumcheckVerifier(log_n)
        outcome = sumcheck.run(parsed.sumcheck_univariates, transcript)
        logger.debug("sumcheck passed %d rounds", log_n)

        # ── 3. 관계식 ──
        self.relation_evaluator.check(
            parsed.sumcheck_evaluations, params, alphas, gate_challenges,
            outcome.point, outcome.claimed_sum)
        logger.debug("relation check passed")

        # ── 4. 열기/페어링 ──
        self.opening_verifier.verify(vk, parsed, outcome.point, transcript)
        logger.info("proof accepted (n=%d, public inputs=%d)", vk.circuit_size, len(pi_values))
        return True
