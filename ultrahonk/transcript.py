"""
UltraHonk Fiat-Shamir Transcript
=================================

비대화식(non-interactive) 변환을 위한 SHA-256 기반 트랜스크립트.

**동작 방식**:
  - absorb: 커밋먼트/스칼라를 32바이트 워드로 직렬화하여 대기 버퍼에 추가
  - challenge: SHA-256(버퍼) → mod r 축소 → 챌린지 c
               버퍼는 c의 32바이트 표현으로 교체된다 (체이닝)
  따라서 모든 챌린지는 그 이전에 흡수된 모든 데이터에 의존한다.

**챌린지 분할**:
  UltraHonk는 하나의 해시에서 두 개의 챌린지를 얻기 위해
  c를 하위 128비트(lo)와 상위 비트(hi)로 나눈다. (eta/eta_two, beta/gamma,
  alpha 쌍). 단일 챌린지가 필요한 곳은 lo만 사용한다.

**흡수 순서** (Prover와 Verifier가 반드시 같아야 함):
  1. 헤더(n, 공개 입력 수, offset), 공개 입력, w1, w2, w3 → eta, eta_two; eta_three
  2. lookup_read_counts, lookup_read_tags, w4            → beta, gamma
  3. lookup_inverses, z_perm                             → alpha 25개
  4. (빈 흡수) × d                                       → gate challenge d개
  5. 라운드별 univariate 8개                              → u_k
  6. sumcheck 평가값 40개                                 → rho
  7. Gemini fold 커밋먼트 d-1개                           → r
  8. Gemini 음의 평가값 d개                               → nu
  9. shplonk_q                                           → z

레이블은 기록(log)에만 남고 해시 입력에는 포함되지 않는다.

사용 예시:
    >>> t = Transcript()
    >>> t.absorb_point("w1", commitment)
    >>> eta, eta_two = t.challenge_split("eta")
"""

import hashlib
import logging

from ultrahonk.entities import NUMBER_OF_ALPHAS
from ultrahonk.field import FR, CURVE_ORDER, to_word

logger = logging.getLogger(__name__)

CHALLENGE_LO_BITS = 128
CHALLENGE_LO_MASK = (1 << CHALLENGE_LO_BITS) - 1


def split_challenge(challenge):
    """챌린지를 (하위 128비트, 상위 비트) 두 FR로 나눈다."""
    value = int(challenge)
    return FR(value & CHALLENGE_LO_MASK), FR(value >> CHALLENGE_LO_BITS)


class Transcript:
    """SHA-256 Fiat-Shamir 트랜스크립트.

    속성:
        buffer: 다음 챌린지 해시에 들어갈 대기 바이트열
        log: [(레이블, 바이트열)] 흡수/챌린지 기록 (append-only)
        challenges: [(레이블, FR)] 생성된 챌린지 순서 (결정성 검사용)
    """

    def __init__(self):
        self.buffer = bytearray()
        self.log = []
        self.challenges = []

    # ── 흡수 ──

    def absorb_bytes(self, label, data):
        data = bytes(data)
        self.buffer.extend(data)
        self.log.append((label, data))

    def absorb_scalar(self, label, scalar):
        """FR 또는 정수를 32바이트 빅엔디안으로 흡수한다."""
        self.absorb_bytes(label, to_word(int(scalar) % CURVE_ORDER))

    def absorb_scalars(self, label, scalars):
        for i, scalar in enumerate(scalars):
            self.absorb_scalar(f"{label}[{i}]", scalar)

    def absorb_point(self, label, point):
        """G1Point(x, y)를 x‖y 64바이트로 흡수한다. 무한원점은 (0, 0)."""
        self.absorb_bytes(label, to_word(point.x) + to_word(point.y))

    # ── 챌린지 ──

    def challenge(self, label):
        """현재 버퍼를 해싱하여 FR 챌린지를 만든다.

        버퍼는 챌린지 값으로 교체되어 다음 챌린지에 연결된다.
        """
        digest = hashlib.sha256(bytes(self.buffer)).digest()
        challenge = FR(int.from_bytes(digest, "big") % CURVE_ORDER)
        self.buffer = bytearray(to_word(challenge))
        self.log.append((label, bytes(self.buffer)))
        self.challenges.append((label, challenge))
        logger.debug("challenge %s = %#x", label, int(challenge))
        return challenge

    def challenge_split(self, label):
        """챌린지 하나를 (lo, hi) 두 스칼라로 나누어 반환한다."""
        return split_challenge(self.challenge(label))

    def challenge_lo(self, label):
        """하위 128비트만 사용하는 단일 챌린지."""
        return split_challenge(self.challenge(label))[0]

    def challenge_values(self):
        """지금까지 생성된 챌린지 정수 값 리스트."""
        return [int(c) for _, c in self.challenges]


# ─────────────────────────────────────────────────────────────────────
# Prover와 Verifier가 공유하는 흡수/챌린지 단계
# ─────────────────────────────────────────────────────────────────────

def absorb_header(transcript, circuit_size, public_inputs_size, pub_inputs_offset, public_inputs):
    """VK 헤더와 공개 입력을 흡수한다."""
    transcript.absorb_scalar("circuit_size", circuit_size)
    transcript.absorb_scalar("public_inputs_size", public_inputs_size)
    transcript.absorb_scalar("pub_inputs_offset", pub_inputs_offset)
    transcript.absorb_scalars("public_input", public_inputs)


def generate_alphas(transcript):
    """alpha 25개: 챌린지 하나를 (lo, hi) 두 개로 나누어 사용한다."""
    alphas = []
    while len(alphas) < NUMBER_OF_ALPHAS:
        lo, hi = transcript.challenge_split(f"alpha_{len(alphas)}")
        alphas.extend([lo, hi])
    return alphas[:NUMBER_OF_ALPHAS]


def generate_gate_challenges(transcript, log_n):
    return [transcript.challenge_lo(f"gate_challenge_{k}") for k in range(log_n)]
