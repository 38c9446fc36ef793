"""
KZG 다항식 커밋먼트
====================

  커밋먼트: C = p(τ)·G1 = Σ cᵢ·[τⁱ]₁
  열기 증명: π = q(τ)·G1,  q(x) = (p(x) - p(z)) / (x - z)
  검증:     e(C - y·G1 + z·π, G2) == e(π, [τ]₂)

UltraHonk에서는 Prover가 다중선형 테이블을 계수로 보고 커밋하며,
열기는 Shplonk로 모은 뒤 한 번만 수행한다 (shplemini.py).

사용 예시:
    >>> C = commit(Polynomial([FR(1), FR(2)]), srs, backend)
    >>> pi = create_witness(poly, FR(7), srs, backend)
    >>> verify_opening(C, pi, FR(7), poly.evaluate(FR(7)), srs, backend)  # True
"""

from ultrahonk.field import FR
from ultrahonk.polynomial import Polynomial


def commit(poly, srs, backend):
    """다항식(또는 계수 리스트)을 KZG 커밋한다.

    Returns:
        G1Point

    Raises:
        ValueError: 다항식 차수가 SRS 최대 차수를 초과할 때
    """
    coeffs = poly.coeffs if isinstance(poly, Polynomial) else list(poly)
    while len(coeffs) > 1 and coeffs[-1] == 0:
        coeffs = coeffs[:-1]
    if len(coeffs) - 1 > srs.max_degree:
        raise ValueError(
            f"polynomial degree {len(coeffs) - 1} exceeds SRS max degree {srs.max_degree}")

    points = [backend.g1(srs.g1_powers[i]) for i in range(len(coeffs))]
    return backend.g1_affine(backend.msm(points, coeffs))


def create_witness(poly, point, srs, backend):
    """p(point)에 대한 열기 증명 π = [(p(x) - p(z)) / (x - z)]₁"""
    quotient, _ = poly.divide_by_linear(point)
    return commit(quotient, srs, backend)


def verify_opening(commitment, proof, point, evaluation, srs, backend):
    """단일 KZG 열기를 검증한다: e(C - y·G1 + z·π, G2) · e(-π, [τ]₂) == 1"""
    if not isinstance(point, FR):
        point = FR(point)
    pi = backend.g1(proof)
    lhs = backend.add(backend.g1(commitment),
                      backend.neg(backend.mul(backend.g1_generator(), evaluation)))
    lhs = backend.add(lhs, backend.mul(pi, point))
    return backend.pairing_check([
        (lhs, backend.g2(srs.g2_powers[0])),
        (backend.neg(pi), backend.g2(srs.g2_powers[1])),
    ])
