"""
UltraHonk 기반 모듈: 유한체(Finite Field)
==========================================

UltraHonk 검증기 전체에서 사용되는 BN254(bn128) 위의 두 소수체를 정의한다.

**스칼라 필드 FR** (위수 r ≈ 2^254):
  sumcheck 라운드 다항식, 관계식(relation) 평가, 챌린지 등 모든 프로토콜
  산술의 기본 단위이다.

**베이스 필드 FQ** (위수 q ≈ 2^254):
  G1 점의 좌표가 속하는 필드. VK/증명 파싱에서 좌표 범위 검사에 사용된다.

**32바이트 인코딩**:
  VK, 증명, 공개 입력, 트랜스크립트는 모두 32바이트 빅엔디안 워드를
  사용한다. 이 모듈의 헬퍼가 정수 ↔ 워드 변환을 담당한다.

사용 예시:
    >>> from ultrahonk.field import FR, to_word
    >>> a = FR(3) * FR(7)    # FR(21)
    >>> to_word(a)[-1]       # 21
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체 FR / 모듈러스
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 연산을 제공한다.

    주의:
        py_ecc는 0의 역원을 0으로 돌려준다. 분모가 0이 될 수 있는 곳에서는
        호출자가 먼저 0 여부를 검사해야 한다.
    """
    field_modulus = bn128.curve_order


# 스칼라 필드 위수 r
CURVE_ORDER = bn128.curve_order

# 베이스 필드 위수 q (G1 좌표 범위)
FIELD_MODULUS = bn128.field_modulus

WORD_SIZE = 32


# ─────────────────────────────────────────────────────────────────────
# 32바이트 워드 변환
# ─────────────────────────────────────────────────────────────────────

def to_word(value):
    """정수 또는 FR 원소를 32바이트 빅엔디안 워드로 변환한다."""
    return int(value).to_bytes(WORD_SIZE, "big")


def from_word(data, offset=0):
    """data[offset:offset+32]를 정수로 읽는다."""
    return int.from_bytes(data[offset:offset + WORD_SIZE], "big")


def fr_powers(base, count):
    """[1, base, base², ..., base^(count-1)]"""
    powers = []
    current = FR(1)
    for _ in range(count):
        powers.append(current)
        current = current * base
    return powers


def batch_inverse(values):
    """FR 원소 리스트의 역원을 한 번의 역원 계산으로 구한다.

    Montgomery 트릭: prefix 곱을 만든 뒤 전체 곱의 역원 하나로 되돌아간다.

    Args:
        values: 0이 아닌 FR 원소 리스트

    Raises:
        ZeroDivisionError: 원소 중 0이 있을 때
    """
    prefix = []
    acc = FR(1)
    for v in values:
        if v == 0:
            raise ZeroDivisionError("zero has no inverse")
        prefix.append(acc)
        acc = acc * v
    inv = FR(1) / acc
    result = [FR(0)] * len(values)
    for i in range(len(values) - 1, -1, -1):
        result[i] = inv * prefix[i]
        inv = inv * values[i]
    return result
