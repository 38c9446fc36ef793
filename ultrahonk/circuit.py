"""
UltraHonk 회로 표현 (Circuit Representation)
=============================================

Ultra 산술화: 행(row)마다 배선 4개(w_l, w_r, w_o, w_4)와 13개의 셀렉터.

**산술 게이트** (q_arith = 1):

    q_m·w_l·w_r + q_l·w_l + q_r·w_r + q_o·w_o + q_4·w_4 + q_c = 0

**델타 범위 게이트** (q_delta_range = 1):
  w_r - w_l, w_o - w_r, w_4 - w_o, (다음 행 w_l) - w_4 가 모두 {0, 1, 2, 3}

**실행 트레이스 배치**:

  ┌───────┬─────────────────────────────────────────────┐
  │ 행 0  │ 0 행 (모든 배선/셀렉터 0, shift 다항식용)      │
  │ 행 1… │ 공개 입력 행 (w_l = w_r = pi)                 │
  │ 이후  │ 게이트 행                                    │
  │ 나머지│ 0 패딩 (n은 2의 거듭제곱)                      │
  └───────┴─────────────────────────────────────────────┘

**배선 복사 제약**:
  같은 변수를 쓰는 셀들을 (행, 배선) 순서로 순환(cycle)으로 묶는다.
  셀 (j, i)의 식별자는 id = j·n + i 이고, σ(셀_k) = id(셀_{k+1}).
  공개 입력 행 r의 w_l 셀은 σ = -(r+1) 로 덮어써서 순환에서 빠진다.
  그 차이가 공개 입력 δ로 보정된다 (relations.compute_public_input_delta).

사용 예시:
    >>> circuit = UltraCircuit.secret_plus_one(secret=5)
    >>> trace = circuit.build_trace()
    >>> trace.public_inputs   # [FR(6)]
"""

from ultrahonk.field import FR
from ultrahonk.vk import DEFAULT_PUB_INPUTS_OFFSET

# 셀렉터 이름 (VK 커밋먼트 이름과 같다)
SELECTOR_NAMES = (
    "qm", "qc", "ql", "qr", "qo", "q4", "q_lookup", "q_arith", "q_delta_range",
    "q_elliptic", "q_aux", "q_poseidon2_external", "q_poseidon2_internal",
)

WIRE_NAMES = ("w1", "w2", "w3", "w4")

# 항상 0인 변수
ZERO_VARIABLE = 0

MIN_LOG_CIRCUIT_SIZE = 1


class Gate:
    """트레이스의 한 행.

    속성:
        wires: 변수 인덱스 4개 (w_l, w_r, w_o, w_4)
        selectors: 셀렉터 이름 → FR (없는 셀렉터는 0)
    """

    def __init__(self, wires, selectors):
        if len(wires) != 4:
            raise ValueError(f"a gate has 4 wires, got {len(wires)}")
        unknown = set(selectors) - set(SELECTOR_NAMES)
        if unknown:
            raise ValueError(f"unknown selectors: {sorted(unknown)}")
        self.wires = tuple(wires)
        self.selectors = {name: value if isinstance(value, FR) else FR(value)
                          for name, value in selectors.items()}

    def selector(self, name):
        return self.selectors.get(name, FR(0))


class ExecutionTrace:
    """패딩된 실행 트레이스.

    속성:
        n: 행 수 (2의 거듭제곱)
        log_n: log₂ n
        pub_inputs_offset: 첫 공개 입력 행
        public_inputs: 공개 입력 값 (FR 리스트)
        precomputed: VK 커밋먼트 이름 → 길이 n 테이블 (27개)
        witness: 배선/룩업 이름 → 길이 n 테이블
            (w1..w4, lookup_read_counts, lookup_read_tags)
    """

    def __init__(self, n, log_n, pub_inputs_offset, public_inputs, precomputed, witness):
        self.n = n
        self.log_n = log_n
        self.pub_inputs_offset = pub_inputs_offset
        self.public_inputs = public_inputs
        self.precomputed = precomputed
        self.witness = witness


class UltraCircuit:
    """UltraHonk 회로 빌더.

    변수 0은 항상 0이다. 게이트는 변수 인덱스로 배선을 지정한다.
    """

    def __init__(self):
        self.variables = [FR(0)]
        self.public_input_variables = []
        self.gates = []
        self.min_log_size = MIN_LOG_CIRCUIT_SIZE

    # ── 변수 ──

    def add_variable(self, value):
        """새 변수를 추가하고 인덱스를 반환한다."""
        self.variables.append(value if isinstance(value, FR) else FR(value))
        return len(self.variables) - 1

    def add_public_input(self, value):
        """공개 입력 변수를 추가한다. 공개 입력 행은 게이트 행보다 앞에 놓인다."""
        index = self.add_variable(value)
        self.public_input_variables.append(index)
        return index

    def value(self, index):
        return self.variables[index]

    # ── 게이트 ──

    def add_gate(self, w_l, w_r, w_o, w_4=ZERO_VARIABLE, **selectors):
        """임의의 셀렉터로 게이트 행을 추가한다.

        Returns:
            int: 게이트 번호 (트레이스 행이 아님)
        """
        for index in (w_l, w_r, w_o, w_4):
            if not 0 <= index < len(self.variables):
                raise ValueError(f"unknown variable {index}")
        self.gates.append(Gate((w_l, w_r, w_o, w_4), selectors))
        return len(self.gates) - 1

    def add_arithmetic_gate(self, w_l, w_r, w_o, w_4=ZERO_VARIABLE,
                            q_m=0, q_l=0, q_r=0, q_o=0, q_4=0, q_c=0):
        """q_m·a·b + q_l·a + q_r·b + q_o·c + q_4·d + q_c = 0"""
        return self.add_gate(w_l, w_r, w_o, w_4, q_arith=1,
                             qm=q_m, ql=q_l, qr=q_r, qo=q_o, q4=q_4, qc=q_c)

    def add_multiplication_gate(self, a, b, c):
        """a · b = c"""
        return self.add_arithmetic_gate(a, b, c, q_m=1, q_o=-1)

    def add_addition_gate(self, a, b, c):
        """a + b = c"""
        return self.add_arithmetic_gate(a, b, c, q_l=1, q_r=1, q_o=-1)

    def add_constant_gate(self, a, constant, c):
        """a + constant = c"""
        return self.add_arithmetic_gate(a, ZERO_VARIABLE, c, q_l=1, q_o=-1, q_c=constant)

    def add_delta_range_gate(self, w_l, w_r, w_o, w_4):
        """연속 배선 차이가 {0, 1, 2, 3} 안에 있음을 강제한다.

        마지막 차이는 다음 행의 w_l을 사용하므로, 다음 게이트의 w_l이
        범위의 끝 값이어야 한다.
        """
        return self.add_gate(w_l, w_r, w_o, w_4, q_delta_range=1)

    # ── 검사 ──

    def check_arithmetic(self):
        """산술 게이트가 모두 만족되는지 확인한다 (디버깅용)."""
        for gate in self.gates:
            if gate.selector("q_arith") != 1:
                continue
            a, b, c, d = (self.variables[i] for i in gate.wires)
            result = (gate.selector("qm") * a * b + gate.selector("ql") * a
                      + gate.selector("qr") * b + gate.selector("qo") * c
                      + gate.selector("q4") * d + gate.selector("qc"))
            if result != 0:
                return False
        return True

    # ── 트레이스 ──

    def num_rows(self):
        return DEFAULT_PUB_INPUTS_OFFSET + len(self.public_input_variables) + len(self.gates)

    def build_trace(self, min_log_size=None):
        """회로를 2의 거듭제곱 크기의 트레이스로 배치한다.

        마지막 게이트 뒤에는 최소 한 개의 0 행이 남는다 (shift 값이 0이 되도록).

        Args:
            min_log_size: 최소 log₂ n (None이면 self.min_log_size)

        Returns:
            ExecutionTrace
        """
        log_n = self.min_log_size if min_log_size is None else min_log_size
        while (1 << log_n) < self.num_rows() + 1:
            log_n += 1
        n = 1 << log_n
        offset = DEFAULT_PUB_INPUTS_OFFSET

        # ── 1. 행 배치 ──
        rows = [Gate((ZERO_VARIABLE,) * 4, {}) for _ in range(offset)]
        for var in self.public_input_variables:
            rows.append(Gate((var, var, ZERO_VARIABLE, ZERO_VARIABLE), {}))
        rows.extend(self.gates)
        while len(rows) < n:
            rows.append(Gate((ZERO_VARIABLE,) * 4, {}))

        precomputed = {name: [row.selector(name) for row in rows] for name in SELECTOR_NAMES}
        witness = {}
        for j, name in enumerate(WIRE_NAMES):
            witness[name] = [self.variables[row.wires[j]] for row in rows]

        # ── 2. 순열 σ와 항등 id ──
        sigmas = build_sigmas(rows, n)
        for r in range(offset, offset + len(self.public_input_variables)):
            sigmas[0][r] = FR(-(r + 1))
        for j in range(4):
            precomputed[f"s{j + 1}"] = sigmas[j]
            precomputed[f"id{j + 1}"] = [FR(j * n + i) for i in range(n)]

        # ── 3. 룩업 테이블 (이 빌더는 룩업 게이트를 만들지 않는다) ──
        for j in range(1, 5):
            precomputed[f"t{j}"] = [FR(0)] * n
        witness["lookup_read_counts"] = [FR(0)] * n
        witness["lookup_read_tags"] = [FR(0)] * n

        # ── 4. Lagrange ──
        precomputed["lagrange_first"] = [FR(1)] + [FR(0)] * (n - 1)
        precomputed["lagrange_last"] = [FR(0)] * (n - 1) + [FR(1)]

        public_inputs = [self.variables[var] for var in self.public_input_variables]
        return ExecutionTrace(n, log_n, offset, public_inputs, precomputed, witness)

    # ── 예제 회로 ──

    @staticmethod
    def secret_plus_one(secret=5):
        """예제 회로: secret + 1 == public_output.

          | 행 | 종류     | w_l       | w_r | w_o       | 셀렉터                      |
          |----|----------|-----------|-----|-----------|-----------------------------|
          | 0  | 0 행     | 0         | 0   | 0         | -                           |
          | 1  | 공개 입력 | out       | out | 0         | -                           |
          | 2  | 산술     | secret    | 0   | out       | q_arith=1, q_l=1, q_c=1, q_o=-1 |

        n = 8 (log n = 3) 로 패딩한다.
        """
        circuit = UltraCircuit()
        out = circuit.add_public_input(FR(secret) + FR(1))
        x = circuit.add_variable(secret)
        circuit.add_constant_gate(x, 1, out)
        circuit.min_log_size = 3
        return circuit

    @staticmethod
    def range_and_multiplication(x=3, y=4):
        """예제 회로: 0, 1, 2, x 의 연속 차이가 {0, 1, 2, 3} 이고 x · y == public_output.

        델타 범위 행의 마지막 차이는 다음 행(곱셈)의 w_l = x 와 비교되어 0이다.

          | 행 | 종류     | w_l | w_r | w_o | w_4 |
          |----|----------|-----|-----|-----|-----|
          | 1  | 공개 입력 | out | out | 0   | 0   |
          | 2  | 델타 범위 | 0   | 1   | 2   | x   |
          | 3  | 곱셈     | x   | y   | out | 0   |
        """
        circuit = UltraCircuit()
        out = circuit.add_public_input(FR(x) * FR(y))
        one = circuit.add_variable(1)
        two = circuit.add_variable(2)
        xv = circuit.add_variable(x)
        yv = circuit.add_variable(y)
        circuit.add_delta_range_gate(ZERO_VARIABLE, one, two, xv)
        circuit.add_multiplication_gate(xv, yv, out)
        return circuit


def build_sigmas(rows, n):
    """변수별 셀 순환으로 σ 테이블 4개를 만든다.

    Args:
        rows: Gate 리스트 (길이 n)
        n: 행 수

    Returns:
        list[list[FR]]: σ₁..σ₄
    """
    cycles = {}
    for i, row in enumerate(rows):
        for j, var in enumerate(row.wires):
            cycles.setdefault(var, []).append((j, i))

    sigmas = [[FR(0)] * n for _ in range(4)]
    for cells in cycles.values():
        for k, (j, i) in enumerate(cells):
            next_j, next_i = cells[(k + 1) % len(cells)]
            sigmas[j][i] = FR(next_j * n + next_i)
    return sigmas
