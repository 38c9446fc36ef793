"""
UltraHonk 곡선 연산 백엔드 (Curve Operations Provider)
=======================================================

검증 로직은 타원곡선 산술을 직접 구현하지 않는다. 점 덧셈, 스칼라 곱,
다중 스칼라 곱(MSM), 페어링 검사는 모두 주입 가능한 백엔드 객체를 통해
호출된다.

**백엔드 종류**:
  - Bn128Backend: py_ecc.bn128 (아핀 좌표, 참조 구현)
  - OptimizedBn128Backend: py_ecc.optimized_bn128 (사영 좌표, 테스트 속도용)

**점 표현**:
  프로토콜 경계(VK, 증명, SRS)에서는 백엔드와 무관한 정수 좌표
  G1Point(x, y) / G2Point(x, y)를 사용한다. G1 무한원점은 (0, 0)이다.
  백엔드 내부 표현으로의 변환은 g1()/g2()가 담당한다.

**설정**:
  get_backend(name)으로 이름을 지정하거나, 환경변수 HONK_CURVE_BACKEND를
  사용한다. 기본값은 "bn128".

사용 예시:
    >>> backend = get_backend("optimized_bn128")
    >>> P = backend.mul(backend.g1_generator(), 5)
    >>> backend.g1_affine(P)    # G1Point(x=..., y=...)
"""

import logging
import os
from collections import namedtuple

from py_ecc import bn128, optimized_bn128

from ultrahonk.field import CURVE_ORDER, FIELD_MODULUS

logger = logging.getLogger(__name__)


G1Point = namedtuple("G1Point", ["x", "y"])
G2Point = namedtuple("G2Point", ["x", "y"])  # x, y: (c0, c1) 정수 쌍

G1_INFINITY = G1Point(0, 0)

# [τ]₂ of the public Aztec Ignition ceremony (c0 = real part, c1 = imaginary part).
DEFAULT_SRS_G2 = G2Point(
    x=(
        0x0118c4d5b837bcc2bc89b5b398b5974e9f5944073b32078b7e231fec938883b0,
        0x260e01b251f6f1c7e7ff4e580791dee8ea51d87a358e038b4efe30fac09383c1,
    ),
    y=(
        0x22febda3c0c0632a56475b4214e5615e11e6dd3f96e6cea2854a87d4dacc5e55,
        0x04fc6369f7110fe3d25156c1bb9a72859cf2a04641f99ba4ee413c80da6a5fe4,
    ),
)


def is_on_curve_g1(x, y):
    """정수 좌표 (x, y)가 y² = x³ + 3 위에 있는지 확인한다. (0, 0)은 무한원점."""
    if x == 0 and y == 0:
        return True
    return (y * y - x * x * x - 3) % FIELD_MODULUS == 0


def is_on_curve_g2(point):
    """G2Point가 twist 곡선 y² = x³ + 3/(9+i) 위에 있는지 확인한다.

    좌표 성분은 모두 FIELD_MODULUS 미만이어야 한다.
    """
    (x0, x1), (y0, y1) = point
    coords = [int(x0), int(x1), int(y0), int(y1)]
    if not all(0 <= c < FIELD_MODULUS for c in coords):
        return False
    x = bn128.FQ2(coords[:2])
    y = bn128.FQ2(coords[2:])
    return bn128.is_on_curve((x, y), bn128.b2)


class CurveBackend:
    """곡선 연산 제공자의 공통 구현.

    하위 클래스는 `curve` (py_ecc 곡선 모듈)와 내부 표현 변환
    (_to_native_g1, _is_infinity, _normalize)만 정의한다.
    """

    name = None
    curve = None

    # ── 변환 ──

    def g1(self, point):
        """G1Point → 백엔드 내부 점. 곡선 밖의 점이면 ValueError."""
        x, y = int(point[0]), int(point[1])
        if not is_on_curve_g1(x, y):
            raise ValueError(f"G1 point ({x:#x}, {y:#x}) is not on the curve")
        if x == 0 and y == 0:
            return self._infinity()
        return self._to_native(self.curve.FQ(x), self.curve.FQ(y), self.curve.FQ)

    def g1_affine(self, native):
        """백엔드 내부 점 → G1Point."""
        if self._is_infinity(native):
            return G1_INFINITY
        x, y = self._normalize(native)
        return G1Point(int(x), int(y))

    def g2(self, point):
        """G2Point → 백엔드 내부 점. 곡선 밖의 점이면 ValueError."""
        if not is_on_curve_g2(point):
            raise ValueError("G2 point is not on the twist curve")
        FQ2 = self.curve.FQ2
        x = FQ2([int(point[0][0]), int(point[0][1])])
        y = FQ2([int(point[1][0]), int(point[1][1])])
        return self._to_native(x, y, FQ2)

    def g2_affine(self, native):
        """백엔드 내부 G2 점 → G2Point."""
        x, y = self._normalize(native)
        return G2Point(
            (int(x.coeffs[0]), int(x.coeffs[1])),
            (int(y.coeffs[0]), int(y.coeffs[1])),
        )

    # ── 그룹 연산 ──

    def g1_generator(self):
        return self.curve.G1

    def g2_generator(self):
        return self.curve.G2

    def add(self, p1, p2):
        return self.curve.add(p1, p2)

    def neg(self, point):
        return self.curve.neg(point)

    def mul(self, point, scalar):
        """scalar · point. scalar는 int 또는 FR."""
        if self._is_infinity(point):
            return point
        return self.curve.multiply(point, int(scalar) % CURVE_ORDER)

    def msm(self, points, scalars):
        """Σ scalarsᵢ · pointsᵢ (0 스칼라와 무한원점은 건너뛴다)."""
        result = self._infinity()
        for point, scalar in zip(points, scalars):
            k = int(scalar) % CURVE_ORDER
            if k == 0 or self._is_infinity(point):
                continue
            result = self.curve.add(result, self.curve.multiply(point, k))
        return result

    def pairing_check(self, pairs):
        """Π e(Pᵢ, Qᵢ) == 1 인지 검사한다.

        Args:
            pairs: [(G1 내부 점, G2 내부 점), ...]

        Returns:
            bool
        """
        acc = self.curve.FQ12.one()
        for g1_point, g2_point in pairs:
            if self._is_infinity(g1_point):
                continue
            # py_ecc의 pairing 인자 순서는 (G2, G1)이다.
            acc = acc * self.curve.pairing(g2_point, g1_point)
        return acc == self.curve.FQ12.one()

    # ── 하위 클래스 훅 ──

    def _infinity(self):
        raise NotImplementedError

    def _is_infinity(self, native):
        raise NotImplementedError

    def _to_native(self, x, y, field):
        raise NotImplementedError

    def _normalize(self, native):
        raise NotImplementedError


class Bn128Backend(CurveBackend):
    """py_ecc.bn128 기반 참조 백엔드 (아핀 좌표, 무한원점 = None)."""

    name = "bn128"
    curve = bn128

    def _infinity(self):
        return None

    def _is_infinity(self, native):
        return native is None

    def _to_native(self, x, y, field):
        return (x, y)

    def _normalize(self, native):
        return native


class OptimizedBn128Backend(CurveBackend):
    """py_ecc.optimized_bn128 기반 백엔드 (사영 좌표)."""

    name = "optimized_bn128"
    curve = optimized_bn128

    def _infinity(self):
        return optimized_bn128.Z1

    def _is_infinity(self, native):
        return native is None or optimized_bn128.is_inf(native)

    def _to_native(self, x, y, field):
        return (x, y, field.one())

    def _normalize(self, native):
        return optimized_bn128.normalize(native)


BACKENDS = {
    Bn128Backend.name: Bn128Backend,
    OptimizedBn128Backend.name: OptimizedBn128Backend,
}


def get_backend(name=None):
    """이름으로 곡선 백엔드를 만든다.

    Args:
        name: "bn128" | "optimized_bn128" | CurveBackend 인스턴스 | None.
              None이면 환경변수 HONK_CURVE_BACKEND (기본 "bn128")를 따른다.

    Raises:
        ValueError: 알 수 없는 백엔드 이름
    """
    if isinstance(name, CurveBackend):
        return name
    if name is None:
        name = os.environ.get("HONK_CURVE_BACKEND", Bn128Backend.name)
    try:
        backend_cls = BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"unknown curve backend {name!r} (known: {', '.join(sorted(BACKENDS))})"
        ) from None
    logger.debug("curve backend: %s", name)
    return backend_cls()


def parse_g2_hex(text):
    """"x0,x1,y0,y1" 형식의 16진수 문자열을 G2Point로 변환한다.

    Raises:
        ValueError: 값이 네 개가 아니거나, 16진수가 아니거나, 점이 G2 위에 없을 때
    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 4:
        raise ValueError("G2 point must be four hex values x0,x1,y0,y1")
    x0, x1, y0, y1 = (int(p, 16) for p in parts)
    point = G2Point((x0, x1), (y0, y1))
    if not is_on_curve_g2(point):
        raise ValueError("G2 point is not on the twist curve")
    return point
