"""
UltraHonk Structured Reference String (SRS)
============================================

KZG 커밋먼트에 필요한 공개 파라미터.

  SRS = {
      G1 powers: [G1, τ·G1, τ²·G1, ..., τ^d·G1]
      G2 powers: [G2, τ·G2]
  }

실제 UltraHonk 배포는 공개 ceremony의 SRS를 사용하며, Verifier에는
[τ]₂ 하나만 필요하다 (curve.DEFAULT_SRS_G2).

여기서의 generate()는 seed에서 τ를 결정론적으로 만든다. τ를 아는 사람은
거짓 증명을 만들 수 있으므로 테스트와 데모 전용이다.

사용 예시:
    >>> srs = SRS.generate(max_degree=8, seed=42, backend="optimized_bn128")
    >>> len(srs.g1_powers)  # 9
    >>> verifier = HonkVerifier(vk, srs_g2=srs.g2_affine())
"""

import hashlib
import logging
import secrets

from ultrahonk.curve import get_backend
from ultrahonk.field import FR, CURVE_ORDER

logger = logging.getLogger(__name__)


class SRS:
    """Structured Reference String.

    속성:
        g1_powers: [G1Point(τⁱ·G1)] (백엔드 독립 정수 좌표)
        g2_powers: [G2Point(G2), G2Point(τ·G2)]
        max_degree: 커밋 가능한 최대 차수
    """

    def __init__(self, g1_powers, g2_powers, max_degree):
        self.g1_powers = g1_powers
        self.g2_powers = g2_powers
        self.max_degree = max_degree

    def g2_affine(self):
        """Verifier에 넘길 [τ]₂."""
        return self.g2_powers[1]

    @classmethod
    def generate(cls, max_degree, seed=None, backend=None):
        """SRS를 생성한다.

        Args:
            max_degree: 지원할 최대 다항식 차수 (UltraHonk는 n - 1이면 충분)
            seed: 결정론적 생성을 위한 시드 (None이면 무작위)
            backend: 곡선 백엔드 또는 이름
        """
        backend = get_backend(backend)
        if seed is not None:
            h = hashlib.sha256(str(seed).encode()).digest()
            tau_int = int.from_bytes(h, "big") % CURVE_ORDER
        else:
            tau_int = secrets.randbelow(CURVE_ORDER - 1) + 1
        tau = FR(tau_int)

        g1 = backend.g1_generator()
        g1_powers = []
        tau_power = FR(1)
        for _ in range(max_degree + 1):
            g1_powers.append(backend.g1_affine(backend.mul(g1, tau_power)))
            tau_power = tau_power * tau

        g2 = backend.g2_generator()
        g2_powers = [backend.g2_affine(g2), backend.g2_affine(backend.mul(g2, tau))]
        logger.debug("generated SRS of degree %d", max_degree)
        return cls(g1_powers, g2_powers, max_degree)
