"""
UltraHonk 열기/페어링 검증기 (Gemini + Shplonk + KZG)
======================================================

sumcheck가 남긴 주장 "40개 다중선형 다항식이 점 u에서 주장된 값을 갖는다"를
하나의 KZG 페어링 검사로 바꾼다.

**1. 배치 (rho)**:
  A₀ = F + G/X
    F = Σ_{i<35} ρⁱ · fᵢ          (unshifted 엔티티)
    G = Σ_{j<5}  ρ^{35+j} · gⱼ    (shift 대상: w_l, w_r, w_o, w_4, z_perm)
  주장값 v = Σ ρⁱ · evalᵢ

**2. Gemini 폴딩 (r)**:
  A_{l+1}(X²) = (1-u_l)·(A_l(X) + A_l(-X))/2 + u_l·(A_l(X) - A_l(-X))/(2X)
  Prover는 A_1..A_{d-1}을 커밋하고, r을 받은 뒤 aₗ = A_l(-r^{2^l})를 보낸다.
  Verifier는 A_d = v 에서 거꾸로 A_l(r^{2^l})를 복원한다.

**3. Shplonk (nu, z)**:
  2d개의 열기 주장 (f_k, z_k, v_k)를 ν^k로 묶는다:
    Q(X) = Σ ν^k · (f_k(X) - v_k) / (X - z_k)
  z에서 Q를 다시 열면
    [G] = Σ ν^k/(z - z_k) · ([f_k] - v_k·[1]) - [Q]
  가 W(X)·(X - z)의 커밋먼트여야 한다.

**4. KZG 페어링**:
    e([G] + z·[W], [1]₂) · e(-[W], [τ]₂) == 1

페어링 연산은 곡선 백엔드(curve.CurveBackend)에 위임한다.
"""

import logging

from ultrahonk.curve import DEFAULT_SRS_G2
from ultrahonk.entities import (
    Entity, NUMBER_OF_ENTITIES, NUMBER_UNSHIFTED, PRECOMPUTED_ENTITIES,
    SHIFTED_SOURCES, WITNESS_ENTITIES,
)
from ultrahonk.errors import (
    OpeningVerificationFailed, PairingCheckFailed, UnsupportedCircuitShape,
)
from ultrahonk.field import FR, fr_powers

logger = logging.getLogger(__name__)


class OpeningProof:
    """배치된 KZG 열기 주장.

    속성:
        shplonk_q: Shplonk 몫 커밋먼트 [Q]
        kzg_quotient: 최종 KZG 몫 커밋먼트 [W]
        batched_evaluation: ρ로 결합한 주장값 v
        nu: Shplonk 배치 챌린지
        z: Shplonk 평가 챌린지
    """

    def __init__(self, shplonk_q, kzg_quotient, batched_evaluation, nu, z):
        self.shplonk_q = shplonk_q
        self.kzg_quotient = kzg_quotient
        self.batched_evaluation = batched_evaluation
        self.nu = nu
        self.z = z


class PairingCheck:
    """e(P₀, Q₀) · e(P₁, Q₁) == 1 형태의 최종 검사 (백엔드 내부 점)."""

    def __init__(self, p0, q0, p1, q1):
        self.pairs = ((p0, q0), (p1, q1))

    def holds(self, backend):
        return backend.pairing_check(self.pairs)


def gemini_r_powers(r, log_n):
    """[r, r², r⁴, ..., r^{2^{d-1}}]"""
    powers = [r]
    for _ in range(1, log_n):
        powers.append(powers[-1] * powers[-1])
    return powers


def compute_fold_pos_evaluations(batched_evaluation, gemini_a_evaluations, point, r_powers):
    """A_l(r^{2^l}) (l = 0..d-1)를 A_d = v 에서 거꾸로 계산한다.

    2x·A_{l+1}(x²) = A_l(x)·((1-u)x + u) + A_l(-x)·((1-u)x - u),  x = r^{2^l}

    Raises:
        OpeningVerificationFailed: 분모 (1-u)x + u 가 0일 때
    """
    log_n = len(point)
    pos = [FR(0)] * log_n
    acc = batched_evaluation
    for l in range(log_n - 1, -1, -1):
        x = r_powers[l]
        u = point[l]
        denominator = x * (FR(1) - u) + u
        if denominator == 0:
            raise OpeningVerificationFailed(f"gemini fold {l} has a vanishing denominator")
        numerator = x * acc * 2 - gemini_a_evaluations[l] * (x * (FR(1) - u) - u)
        acc = numerator / denominator
        pos[l] = acc
    return pos


def opening_claim_points(r_powers):
    """Shplonk 주장점 z_k (2d개): r, -r, 그리고 l ≥ 1 에 대해 -r^{2^l}, r^{2^l}."""
    points = [r_powers[0], FR(0) - r_powers[0]]
    for l in range(1, len(r_powers)):
        points.append(FR(0) - r_powers[l])
        points.append(r_powers[l])
    return points


class OpeningVerifier:
    """Gemini/Shplonk 배치 후 KZG 페어링 검사를 수행한다.

    Args:
        backend: CurveBackend
        srs_g2: [τ]₂ (G2Point). None이면 공개 ceremony 값.

    Raises:
        UnsupportedCircuitShape: srs_g2가 G2 위의 점이 아닐 때
    """

    def __init__(self, backend, srs_g2=None):
        self.backend = backend
        self.g2 = backend.g2_generator()
        try:
            self.tau_g2 = backend.g2(srs_g2 if srs_g2 is not None else DEFAULT_SRS_G2)
        except ValueError as exc:
            raise UnsupportedCircuitShape(f"srs_g2 rejected: {exc}") from exc

    def verify(self, vk, proof, point, transcript):
        """열기 주장을 검증한다.

        Args:
            vk: VerificationKey
            proof: Proof
            point: sumcheck 최종 점 u (길이 d)
            transcript: sumcheck 이후 상태의 Transcript

        Returns:
            OpeningProof

        Raises:
            OpeningVerificationFailed: 배치 분모가 0
            PairingCheckFailed: 페어링 등식 불성립
        """
        opening, check = self.batch(vk, proof, point, transcript)
        if not check.holds(self.backend):
            raise PairingCheckFailed("KZG pairing equation does not hold")
        logger.debug("pairing check passed")
        return opening

    def batch(self, vk, proof, point, transcript):
        """챌린지를 도출하고 PairingCheck를 구성한다 (페어링은 계산하지 않음)."""
        backend = self.backend
        log_n = vk.log_circuit_size
        evaluations = proof.sumcheck_evaluations

        # ── 1. 챌린지 ──
        transcript.absorb_scalars("sumcheck_evaluations", evaluations)
        rho = transcript.challenge_lo("rho")
        for l, comm in enumerate(proof.gemini_fold_comms, 1):
            transcript.absorb_point(f"gemini_fold_{l}", comm)
        r = transcript.challenge_lo("gemini_r")
        transcript.absorb_scalars("gemini_a", proof.gemini_a_evaluations)
        nu = transcript.challenge_lo("shplonk_nu")
        transcript.absorb_point("shplonk_q", proof.shplonk_q)
        z = transcript.challenge_lo("shplonk_z")

        if r == 0:
            raise OpeningVerificationFailed("gemini challenge r is zero")

        # ── 2. ρ 배치 주장값 ──
        rho_pows = fr_powers(rho, NUMBER_OF_ENTITIES)
        batched_evaluation = FR(0)
        for weight, value in zip(rho_pows, evaluations):
            batched_evaluation = batched_evaluation + weight * value

        # ── 3. Gemini: 양의 점 평가값 복원 ──
        r_pows = gemini_r_powers(r, log_n)
        a = proof.gemini_a_evaluations
        pos = compute_fold_pos_evaluations(batched_evaluation, a, point, r_pows)

        # 주장 순서: (r: pos_0), (-r: a_0), 이후 (-r^{2^l}: a_l), (r^{2^l}: pos_l)
        claim_points = opening_claim_points(r_pows)
        claim_values = [pos[0], a[0]]
        for l in range(1, log_n):
            claim_values.extend([a[l], pos[l]])

        # ── 4. Shplonk 가중치 ν^k / (z - z_k) ──
        nu_pows = fr_powers(nu, 2 * log_n)
        weights = []
        for k, z_k in enumerate(claim_points):
            denominator = z - z_k
            if denominator == 0:
                raise OpeningVerificationFailed(f"shplonk denominator for claim {k} vanishes")
            weights.append(nu_pows[k] / denominator)

        # ── 5. MSM 스칼라 ──
        r_inv = FR(1) / r
        pos_weight = weights[0] + weights[1]
        shift_weight = (weights[0] - weights[1]) * r_inv
        scalars = {}
        for i in range(NUMBER_UNSHIFTED):
            scalars[Entity(i)] = rho_pows[i] * pos_weight
        for shifted, source in SHIFTED_SOURCES.items():
            scalars[source] = scalars[source] + rho_pows[shifted] * shift_weight

        points = []
        coefficients = []
        for name, comm in vk.points:
            points.append(backend.g1(comm))
            coefficients.append(scalars[PRECOMPUTED_ENTITIES[name]])
        for name, entity in WITNESS_ENTITIES.items():
            points.append(backend.g1(getattr(proof, name)))
            coefficients.append(scalars[entity])
        for l, comm in enumerate(proof.gemini_fold_comms, 1):
            points.append(backend.g1(comm))
            coefficients.append(weights[2 * l] + weights[2 * l + 1])

        constant = FR(0)
        for weight, value in zip(weights, claim_values):
            constant = constant + weight * value
        points.append(backend.g1_generator())
        coefficients.append(FR(0) - constant)

        points.append(backend.g1(proof.shplonk_q))
        coefficients.append(FR(-1))

        kzg_quotient = backend.g1(proof.kzg_quotient)
        points.append(kzg_quotient)
        coefficients.append(z)

        p0 = backend.msm(points, coefficients)
        p1 = backend.neg(kzg_quotient)

        opening = OpeningProof(proof.shplonk_q, proof.kzg_quotient, batched_evaluation, nu, z)
        return opening, PairingCheck(p0, self.g2, p1, self.tau_g2)
