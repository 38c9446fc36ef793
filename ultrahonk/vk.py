"""
UltraHonk 검증 키 (Verification Key) 파서
==========================================

증명 도구가 출력한 바이너리 VK를 구조화된 VerificationKey로 해석한다.

**공통 헤더** (32바이트 빅엔디안 필드):
  0x0000 circuit_size
  0x0020 log_circuit_size
  0x0040 public_inputs_size

**본문 레이아웃** (전체 필드 수로 구분):
  ┌──────────┬────────┬──────────────────────────────────────────────┐
  │ compact  │  57    │ 헤더 + 27개 G1 점 (x, y)                      │
  │ extended │ 128    │ 헤더 + pub_inputs_offset + 누산기 인덱스 16개  │
  │          │        │ + 27개 G1 점 (136비트 limb 4개: xlo,xhi,ylo,yhi)│
  │ generic  │ 그 외  │ 헤더 + 이름 없는 (x, y) 쌍 (생성기에서 거부)    │
  └──────────┴────────┴──────────────────────────────────────────────┘

**27개 커밋먼트 순서**:
  셀렉터 13개 → 순열 σ 4개 → 룩업 테이블 4개 → 항등 순열 id 4개
  → lagrange_first, lagrange_last

VK는 신뢰된 입력이지만, 형식 오류(길이, 모듈러스 초과, 크기 불일치,
곡선 밖의 점)는 모두 오프셋과 함께 MalformedVK로 보고한다.

사용 예시:
    >>> vk = parse_vk(open("vk.bin", "rb").read())
    >>> vk.circuit_size, vk.log_circuit_size
    >>> vk.header_bytes() == raw[:96]   # True
"""

import logging
from types import MappingProxyType

from ultrahonk.curve import G1Point, is_on_curve_g1
from ultrahonk.errors import GeneratorIOError, MalformedVK
from ultrahonk.field import CURVE_ORDER, FIELD_MODULUS, WORD_SIZE, from_word, to_word

logger = logging.getLogger(__name__)


POINT_NAMES = (
    "ql", "qr", "qo", "q4", "qm", "qc",
    "q_arith", "q_delta_range", "q_elliptic", "q_aux", "q_lookup",
    "q_poseidon2_external", "q_poseidon2_internal",
    "s1", "s2", "s3", "s4",
    "t1", "t2", "t3", "t4",
    "id1", "id2", "id3", "id4",
    "lagrange_first", "lagrange_last",
)
NUM_POINTS = len(POINT_NAMES)

HEADER_FIELDS = 3
PAIRING_POINT_ACCUMULATOR_SIZE = 16
LIMB_BITS = 136
LIMB_MASK = (1 << LIMB_BITS) - 1
HIGH_LIMB_BITS = 254 - LIMB_BITS

LAYOUT_COMPACT = "compact"
LAYOUT_EXTENDED = "extended"
LAYOUT_GENERIC = "generic"

COMPACT_FIELDS = HEADER_FIELDS + 2 * NUM_POINTS
EXTENDED_FIELDS = HEADER_FIELDS + 1 + PAIRING_POINT_ACCUMULATOR_SIZE + 4 * NUM_POINTS

DEFAULT_PUB_INPUTS_OFFSET = 1


class VerificationKey:
    """파싱된 검증 키. 생성 이후 변경되지 않는다.

    속성:
        circuit_size: 회로 크기 n (= 2^log_circuit_size)
        log_circuit_size: sumcheck 라운드 수 d
        public_inputs_size: 호출자가 제공하는 공개 입력 수
        pub_inputs_offset: 공개 입력이 시작되는 행
        layout: "compact" | "extended" | "generic"
        points: ((이름, G1Point), ...) 순서 보존 튜플
        commitments: 이름 → G1Point 읽기 전용 매핑
        accumulator_indices: extended 레이아웃의 누산기 인덱스 16개
    """

    def __init__(self, circuit_size, log_circuit_size, public_inputs_size, points,
                 pub_inputs_offset=DEFAULT_PUB_INPUTS_OFFSET, layout=LAYOUT_COMPACT,
                 accumulator_indices=()):
        self.circuit_size = circuit_size
        self.log_circuit_size = log_circuit_size
        self.public_inputs_size = public_inputs_size
        self.pub_inputs_offset = pub_inputs_offset
        self.layout = layout
        self.points = tuple((name, G1Point(*point)) for name, point in points)
        self.commitments = MappingProxyType(dict(self.points))
        self.accumulator_indices = tuple(accumulator_indices)

    @property
    def num_points(self):
        return len(self.points)

    def has_standard_schema(self):
        """27개 커밋먼트가 정해진 이름/순서로 있는지."""
        return tuple(name for name, _ in self.points) == POINT_NAMES

    def header_bytes(self):
        """헤더 3개 필드를 다시 인코딩한다 (96바이트)."""
        return b"".join(to_word(v) for v in (
            self.circuit_size, self.log_circuit_size, self.public_inputs_size))

    def to_table(self):
        """생성 코드에 삽입할 순수 데이터 테이블 (dict)."""
        return {
            "circuit_size": self.circuit_size,
            "log_circuit_size": self.log_circuit_size,
            "public_inputs_size": self.public_inputs_size,
            "pub_inputs_offset": self.pub_inputs_offset,
            "layout": self.layout,
            "accumulator_indices": list(self.accumulator_indices),
            "points": [[name, point.x, point.y] for name, point in self.points],
        }

    @classmethod
    def from_table(cls, table):
        """to_table()의 역변환."""
        return cls(
            circuit_size=table["circuit_size"],
            log_circuit_size=table["log_circuit_size"],
            public_inputs_size=table["public_inputs_size"],
            points=[(name, (x, y)) for name, x, y in table["points"]],
            pub_inputs_offset=table.get("pub_inputs_offset", DEFAULT_PUB_INPUTS_OFFSET),
            layout=table.get("layout", LAYOUT_COMPACT),
            accumulator_indices=table.get("accumulator_indices", ()),
        )

    def __eq__(self, other):
        if not isinstance(other, VerificationKey):
            return NotImplemented
        return self.to_table() == other.to_table()

    def __repr__(self):
        return (f"VerificationKey(n={self.circuit_size}, log_n={self.log_circuit_size}, "
                f"public_inputs={self.public_inputs_size}, layout={self.layout!r})")


# ─────────────────────────────────────────────────────────────────────
# 파싱
# ─────────────────────────────────────────────────────────────────────

def _scalar_field(fields, index, what):
    value = fields[index]
    if value >= CURVE_ORDER:
        raise MalformedVK(f"{what} is not a scalar field element", offset=index * WORD_SIZE)
    return value


def _point(x, y, index, name):
    offset = index * WORD_SIZE
    if x >= FIELD_MODULUS:
        raise MalformedVK(f"{name}.x exceeds the base field modulus", offset=offset)
    if y >= FIELD_MODULUS:
        raise MalformedVK(f"{name}.y exceeds the base field modulus", offset=offset)
    if not is_on_curve_g1(x, y):
        raise MalformedVK(f"{name} is not on the BN254 curve", offset=offset)
    return G1Point(x, y)


def _parse_affine_points(fields, start, names):
    points = []
    for k, name in enumerate(names):
        index = start + 2 * k
        points.append((name, _point(fields[index], fields[index + 1], index, name)))
    return points


def _parse_limbed_points(fields, start):
    points = []
    for k, name in enumerate(POINT_NAMES):
        index = start + 4 * k
        x_lo, x_hi, y_lo, y_hi = fields[index:index + 4]
        for j, (limb, bits) in enumerate(((x_lo, LIMB_BITS), (x_hi, HIGH_LIMB_BITS),
                                          (y_lo, LIMB_BITS), (y_hi, HIGH_LIMB_BITS))):
            if limb >> bits:
                raise MalformedVK(f"{name} limb wider than {bits} bits",
                                  offset=(index + j) * WORD_SIZE)
        x = x_lo | (x_hi << LIMB_BITS)
        y = y_lo | (y_hi << LIMB_BITS)
        points.append((name, _point(x, y, index, name)))
    return points


def parse_vk(data):
    """VK 바이트열을 VerificationKey로 파싱한다.

    Args:
        data: VK 바이트열 (bytes, bytearray)

    Returns:
        VerificationKey

    Raises:
        MalformedVK: 길이가 32의 배수가 아니거나 헤더보다 짧을 때,
                     필드 값이 모듈러스 이상일 때,
                     circuit_size ≠ 2^log_circuit_size일 때,
                     점 좌표 개수가 맞지 않거나 점이 곡선 밖에 있을 때
    """
    data = bytes(data)
    if len(data) % WORD_SIZE:
        raise MalformedVK(f"VK length {len(data)} is not a multiple of {WORD_SIZE}",
                          offset=len(data) - len(data) % WORD_SIZE)
    num_fields = len(data) // WORD_SIZE
    if num_fields < HEADER_FIELDS:
        raise MalformedVK(f"VK has {num_fields} fields, the header needs {HEADER_FIELDS}",
                          offset=len(data))

    fields = [from_word(data, i * WORD_SIZE) for i in range(num_fields)]

    # ── 1. 헤더 ──
    circuit_size = _scalar_field(fields, 0, "circuit_size")
    log_n = _scalar_field(fields, 1, "log_circuit_size")
    public_inputs_size = _scalar_field(fields, 2, "public_inputs_size")
    if log_n >= 256 or circuit_size != 1 << log_n:
        raise MalformedVK(
            f"circuit_size {circuit_size} does not match log_circuit_size {log_n}", offset=0)

    # ── 2. 본문 ──
    if num_fields == EXTENDED_FIELDS:
        pub_inputs_offset = _scalar_field(fields, 3, "pub_inputs_offset")
        indices = [_scalar_field(fields, 4 + i, "accumulator index")
                   for i in range(PAIRING_POINT_ACCUMULATOR_SIZE)]
        start = HEADER_FIELDS + 1 + PAIRING_POINT_ACCUMULATOR_SIZE
        vk = VerificationKey(circuit_size, log_n, public_inputs_size,
                             _parse_limbed_points(fields, start),
                             pub_inputs_offset=pub_inputs_offset,
                             layout=LAYOUT_EXTENDED, accumulator_indices=indices)
    elif num_fields == COMPACT_FIELDS:
        vk = VerificationKey(circuit_size, log_n, public_inputs_size,
                             _parse_affine_points(fields, HEADER_FIELDS, POINT_NAMES))
    else:
        body = num_fields - HEADER_FIELDS
        if body % 2:
            raise MalformedVK(f"unexpected point count: {body} coordinates do not form pairs",
                              offset=(num_fields - 1) * WORD_SIZE)
        names = [f"p{k}" for k in range(body // 2)]
        vk = VerificationKey(circuit_size, log_n, public_inputs_size,
                             _parse_affine_points(fields, HEADER_FIELDS, names),
                             layout=LAYOUT_GENERIC)

    logger.debug("parsed %s VK: n=%d, public inputs=%d, points=%d",
                 vk.layout, vk.circuit_size, vk.public_inputs_size, vk.num_points)
    return vk


def encode_vk(vk):
    """VerificationKey를 원래 레이아웃의 바이트열로 다시 인코딩한다."""
    out = bytearray(vk.header_bytes())
    if vk.layout == LAYOUT_EXTENDED:
        out += to_word(vk.pub_inputs_offset)
        for index in vk.accumulator_indices:
            out += to_word(index)
        for _, point in vk.points:
            for limb in (point.x & LIMB_MASK, point.x >> LIMB_BITS,
                         point.y & LIMB_MASK, point.y >> LIMB_BITS):
                out += to_word(limb)
    else:
        for _, point in vk.points:
            out += to_word(point.x)
            out += to_word(point.y)
    return bytes(out)


def load_vk(path):
    """파일에서 VK를 읽어 파싱한다. 오류에는 파일 경로가 붙는다."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise GeneratorIOError(f"cannot read VK: {exc.strerror or exc}", path) from exc
    try:
        return parse_vk(data)
    except MalformedVK as exc:
        exc.path = str(path)
        raise
