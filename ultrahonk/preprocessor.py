"""
UltraHonk 전처리기 (Preprocessor)
==================================

회로 구조에서 Verifier가 사용할 검증 키(VK)를 만든다.

**전처리 출력물**:
  - 27개 precomputed 테이블 (셀렉터 13, σ 4, id 4, 룩업 테이블 4, lagrange 2)
  - 각 테이블의 KZG 커밋먼트 → VerificationKey (compact 레이아웃)
  - Prover가 사용할 실행 트레이스

테이블은 다중선형 다항식의 hypercube 평가값이며, 커밋할 때는 같은 값을
단변수 다항식의 계수로 본다 (Gemini가 이 대응을 이용한다).

사용 예시:
    >>> pp = preprocess(UltraCircuit.secret_plus_one(), srs, backend)
    >>> encode_vk(pp.vk)   # 57 × 32 바이트
"""

import logging

from ultrahonk.curve import get_backend
from ultrahonk.kzg import commit
from ultrahonk.vk import POINT_NAMES, VerificationKey

logger = logging.getLogger(__name__)


class PreprocessedData:
    """전처리된 회로 데이터.

    속성:
        trace: ExecutionTrace (Prover용 테이블 원본)
        vk: VerificationKey (Verifier용 커밋먼트)
        n, log_n: 트레이스 크기
    """

    def __init__(self, trace, vk):
        self.trace = trace
        self.vk = vk
        self.n = trace.n
        self.log_n = trace.log_n


def preprocess(circuit, srs, backend=None):
    """회로를 전처리하여 검증 키를 만든다.

    Args:
        circuit: UltraCircuit
        srs: SRS (max_degree ≥ n - 1)
        backend: CurveBackend 또는 이름

    Returns:
        PreprocessedData
    """
    backend = get_backend(backend)
    trace = circuit.build_trace()
    if srs.max_degree < trace.n - 1:
        raise ValueError(f"SRS degree {srs.max_degree} is too small for n={trace.n}")

    points = [(name, commit(trace.precomputed[name], srs, backend)) for name in POINT_NAMES]
    vk = VerificationKey(
        circuit_size=trace.n,
        log_circuit_size=trace.log_n,
        public_inputs_size=len(trace.public_inputs),
        points=points,
        pub_inputs_offset=trace.pub_inputs_offset,
    )
    logger.debug("preprocessed circuit: n=%d, public inputs=%d", trace.n, len(trace.public_inputs))
    return PreprocessedData(trace, vk)
