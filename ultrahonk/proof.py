"""
UltraHonk 증명 데이터와 바이너리 인코딩
========================================

증명 바이트열은 32바이트 필드의 고정 스키마이며, 길이는 log n (= d)만의
함수이다: 32 · (58 + 11·d) 바이트.

  ┌───────────────────────────────────────┬──────────────┐
  │ w1, w2, w3                            │ G1 × 3       │
  │ lookup_read_counts, lookup_read_tags  │ G1 × 2       │
  │ w4                                    │ G1 × 1       │
  │ lookup_inverses, z_perm               │ G1 × 2       │
  │ sumcheck univariates                  │ FR × 8·d     │
  │ sumcheck evaluations                  │ FR × 40      │
  │ gemini fold commitments               │ G1 × (d-1)   │
  │ gemini negative evaluations a_l       │ FR × d       │
  │ shplonk_q, kzg_quotient               │ G1 × 2       │
  └───────────────────────────────────────┴──────────────┘

G1 점은 (x, y) 두 필드, 무한원점은 (0, 0).
"""

from ultrahonk.curve import G1Point, is_on_curve_g1
from ultrahonk.entities import BATCHED_RELATION_PARTIAL_LENGTH, NUMBER_OF_ENTITIES
from ultrahonk.errors import FieldElementOutOfRange, MalformedProof, TranscriptMismatch
from ultrahonk.field import FR, CURVE_ORDER, FIELD_MODULUS, WORD_SIZE, from_word, to_word


WITNESS_COMMITMENTS = (
    "w1", "w2", "w3",
    "lookup_read_counts", "lookup_read_tags", "w4",
    "lookup_inverses", "z_perm",
)


def proof_fields(log_n):
    """증명의 32바이트 필드 수."""
    return (2 * len(WITNESS_COMMITMENTS)
            + BATCHED_RELATION_PARTIAL_LENGTH * log_n
            + NUMBER_OF_ENTITIES
            + 2 * (log_n - 1)
            + log_n
            + 2 * 2)


def proof_size(log_n):
    """증명 바이트 길이."""
    return WORD_SIZE * proof_fields(log_n)


class Proof:
    """UltraHonk 증명 데이터 컨테이너.

    커밋먼트 (G1Point):
        w1, w2, w3, w4, z_perm,
        lookup_read_counts, lookup_read_tags, lookup_inverses
        gemini_fold_comms: d-1개
        shplonk_q, kzg_quotient

    스칼라 (FR):
        sumcheck_univariates: d × 8
        sumcheck_evaluations: 40 (Entity 순서)
        gemini_a_evaluations: d
    """

    def __init__(self):
        for name in WITNESS_COMMITMENTS:
            setattr(self, name, None)
        self.sumcheck_univariates = []
        self.sumcheck_evaluations = []
        self.gemini_fold_comms = []
        self.gemini_a_evaluations = []
        self.shplonk_q = None
        self.kzg_quotient = None

    @property
    def log_circuit_size(self):
        return len(self.sumcheck_univariates)

    def to_bytes(self):
        out = bytearray()

        def put_point(point):
            out.extend(to_word(point.x))
            out.extend(to_word(point.y))

        for name in WITNESS_COMMITMENTS:
            put_point(getattr(self, name))
        for univariate in self.sumcheck_univariates:
            for value in univariate:
                out.extend(to_word(value))
        for value in self.sumcheck_evaluations:
            out.extend(to_word(value))
        for comm in self.gemini_fold_comms:
            put_point(comm)
        for value in self.gemini_a_evaluations:
            out.extend(to_word(value))
        put_point(self.shplonk_q)
        put_point(self.kzg_quotient)
        return bytes(out)

    @classmethod
    def from_bytes(cls, data, log_n):
        """증명 바이트열을 파싱한다.

        Raises:
            MalformedProof: 길이 불일치, 곡선 밖의 점
            FieldElementOutOfRange: 좌표 ≥ q 또는 스칼라 ≥ r
        """
        data = bytes(data)
        expected = proof_size(log_n)
        if len(data) != expected:
            raise MalformedProof(f"proof is {len(data)} bytes, expected {expected} for log_n={log_n}")

        reader = _ProofReader(data)
        proof = cls()
        for name in WITNESS_COMMITMENTS:
            setattr(proof, name, reader.point(name))
        proof.sumcheck_univariates = [
            [reader.scalar(f"univariate[{k}][{i}]") for i in range(BATCHED_RELATION_PARTIAL_LENGTH)]
            for k in range(log_n)
        ]
        proof.sumcheck_evaluations = [reader.scalar(f"evaluation[{i}]")
                                      for i in range(NUMBER_OF_ENTITIES)]
        proof.gemini_fold_comms = [reader.point(f"gemini_fold[{l}]") for l in range(1, log_n)]
        proof.gemini_a_evaluations = [reader.scalar(f"gemini_a[{l}]") for l in range(log_n)]
        proof.shplonk_q = reader.point("shplonk_q")
        proof.kzg_quotient = reader.point("kzg_quotient")
        return proof


class _ProofReader:
    """증명 바이트열을 앞에서부터 순서대로 읽는다."""

    def __init__(self, data):
        self.data = data
        self.offset = 0

    def _word(self):
        value = from_word(self.data, self.offset)
        self.offset += WORD_SIZE
        return value

    def scalar(self, name):
        offset = self.offset
        value = self._word()
        if value >= CURVE_ORDER:
            raise FieldElementOutOfRange(f"{name} is not a scalar field element", offset=offset)
        return FR(value)

    def point(self, name):
        offset = self.offset
        x = self._word()
        y = self._word()
        if x >= FIELD_MODULUS or y >= FIELD_MODULUS:
            raise FieldElementOutOfRange(f"{name} coordinate exceeds the base field modulus",
                                         offset=offset)
        if not is_on_curve_g1(x, y):
            raise MalformedProof(f"{name} is not on the BN254 curve", offset=offset)
        return G1Point(x, y)


def parse_public_inputs(public_inputs, expected_count):
    """공개 입력(32바이트 워드 리스트)을 FR 리스트로 변환한다.

    Raises:
        TranscriptMismatch: 개수가 VK와 다를 때
        MalformedProof: 원소가 32바이트가 아닐 때
        FieldElementOutOfRange: 원소 ≥ r
    """
    public_inputs = list(public_inputs)
    if len(public_inputs) != expected_count:
        raise TranscriptMismatch(
            f"expected {expected_count} public inputs, got {len(public_inputs)}")
    values = []
    for i, word in enumerate(public_inputs):
        if not isinstance(word, (bytes, bytearray)) or len(word) != WORD_SIZE:
            raise MalformedProof(f"public input {i} is not a {WORD_SIZE}-byte word")
        value = from_word(word)
        if value >= CURVE_ORDER:
            raise FieldElementOutOfRange(f"public input {i} is not a scalar field element")
        values.append(FR(value))
    return values
