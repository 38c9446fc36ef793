"""
UltraHonk 다항식 도구: 단변수(univariate)와 다중선형(multilinear)
================================================================

**Polynomial 클래스**:
  계수 표현 단변수 다항식. p(x) = c₀ + c₁·x + c₂·x² + ...
  Gemini/Shplonk 열기 증명에서 사용한다.

**다중선형 확장 (MLE)**:
  Honk에서 길이 n = 2^d 인 값 테이블 f[0..n-1]은 불 하이퍼큐브 {0,1}^d
  위의 함수이며, 그 다중선형 확장 f̃(u₀, ..., u_{d-1})가 sumcheck의 대상이다.
  인덱스 i의 최하위 비트가 첫 번째 변수 u₀에 대응한다 (LSB-first).

  같은 테이블을 계수로 보면 단변수 다항식 A(X) = Σ f[i]·X^i 가 되고,
  이것이 Gemini가 KZG로 커밋하는 다항식이다.

**무게중심(barycentric) 보간**:
  sumcheck 라운드 다항식은 {0, 1, ..., 7} 위의 8개 평가값으로 전달된다.
  임의의 점 u에서의 값은 라그랑주 무게중심 공식으로 계산한다.

사용 예시:
    >>> p = Polynomial([FR(1), FR(2), FR(3)])  # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))                       # FR(17)
    >>> fold([FR(1), FR(3)], FR(5))             # [1 + 5·(3-1)] = [FR(11)]
"""

from ultrahonk.field import FR


# ─────────────────────────────────────────────────────────────────────
# Polynomial 클래스
# ─────────────────────────────────────────────────────────────────────

class Polynomial:
    """유한체 FR 위의 단변수 다항식 (계수 표현).

    예시:
        >>> p = Polynomial([FR(1), FR(2)])  # 1 + 2x
        >>> q = Polynomial([FR(3), FR(4)])  # 3 + 4x
        >>> p + q                            # 4 + 6x
    """

    def __init__(self, coeffs=None):
        if coeffs is None:
            self.coeffs = [FR(0)]
        else:
            self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
            if not self.coeffs:
                self.coeffs = [FR(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거한다."""
        while len(self.coeffs) > 1 and self.coeffs[-1] == 0:
            self.coeffs.pop()

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == 0

    def evaluate(self, point):
        """Horner's method로 p(point)를 계산한다."""
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __add__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        size = max(len(self.coeffs), len(other.coeffs))
        a = self.coeffs + [FR(0)] * (size - len(self.coeffs))
        b = other.coeffs + [FR(0)] * (size - len(other.coeffs))
        return Polynomial([x + y for x, y in zip(a, b)])

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return self + (-other)

    def __neg__(self):
        return Polynomial([FR(0) - c for c in self.coeffs])

    def __mul__(self, other):
        """스칼라곱만 지원한다 (Honk Prover는 다항식끼리 곱하지 않는다)."""
        if isinstance(other, int):
            other = FR(other)
        if not isinstance(other, FR):
            return NotImplemented
        return Polynomial([c * other for c in self.coeffs])

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return False
        return self.coeffs == other.coeffs

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == 0:
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def __len__(self):
        return len(self.coeffs)

    def divide_by_linear(self, point):
        """(p(x) - p(point)) / (x - point) 를 합성 나눗셈으로 계산한다.

        Returns:
            tuple: (몫 Polynomial, 나머지 FR = p(point))
        """
        if not isinstance(point, FR):
            point = FR(point)
        n = len(self.coeffs)
        if n == 1:
            return Polynomial.zero(), self.coeffs[0]
        quotient = [FR(0)] * (n - 1)
        carry = FR(0)
        for i in range(n - 1, 0, -1):
            carry = self.coeffs[i] + carry * point
            quotient[i - 1] = carry
        remainder = self.coeffs[0] + carry * point
        return Polynomial(quotient), remainder

    @classmethod
    def zero(cls):
        return cls([FR(0)])


# ─────────────────────────────────────────────────────────────────────
# 다중선형 테이블
# ─────────────────────────────────────────────────────────────────────

def fold(table, challenge):
    """첫 번째 변수에 challenge를 대입하여 테이블 크기를 절반으로 줄인다.

    f'[j] = f[2j] + u · (f[2j+1] - f[2j])
    """
    return [table[2 * j] + challenge * (table[2 * j + 1] - table[2 * j])
            for j in range(len(table) // 2)]


def evaluate_mle(table, point):
    """다중선형 확장 f̃(point)를 계산한다 (LSB-first 변수 순서)."""
    for u in point:
        table = fold(table, u)
    if len(table) != 1:
        raise ValueError("table size does not match the point dimension")
    return table[0]


def shift_table(table):
    """한 칸 이동: f_shift[i] = f[i+1], 마지막 값은 0.

    f[0] = 0 인 테이블에 대해 단변수 형태로 f_shift(X) = f(X) / X.
    """
    return list(table[1:]) + [FR(0)]


# ─────────────────────────────────────────────────────────────────────
# 무게중심 보간 (domain = {0, 1, ..., m-1})
# ─────────────────────────────────────────────────────────────────────

def barycentric_weights(size):
    """wᵢ = Π_{j≠i} (i - j) 의 역원."""
    weights = []
    for i in range(size):
        denom = FR(1)
        for j in range(size):
            if j != i:
                denom = denom * FR(i - j)
        weights.append(FR(1) / denom)
    return weights


def barycentric_evaluate(evals, point, weights=None):
    """{0, ..., m-1} 위의 평가값 evals로 주어진 다항식을 point에서 평가한다.

    p(u) = B(u) · Σ evalsᵢ · wᵢ / (u - i),   B(u) = Π (u - i)

    point가 평가 도메인 위에 있으면 해당 평가값을 그대로 반환한다.
    """
    size = len(evals)
    if weights is None:
        weights = barycentric_weights(size)
    point = point if isinstance(point, FR) else FR(point)
    for i in range(size):
        if point == i:
            return evals[i]

    numerator = FR(1)
    for i in range(size):
        numerator = numerator * (point - i)
    acc = FR(0)
    for i in range(size):
        acc = acc + evals[i] * weights[i] / (point - i)
    return numerator * acc
