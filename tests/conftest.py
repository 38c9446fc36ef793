import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from ultrahonk.circuit import UltraCircuit
from ultrahonk.curve import get_backend
from ultrahonk.field import to_word
from ultrahonk.preprocessor import preprocess
from ultrahonk.prover import prove
from ultrahonk.srs import SRS
from ultrahonk.vk import encode_vk


# ── 테스트 상수 ──
SECRET = 5
PUBLIC_OUTPUT = 6
SRS_SEED = 42
SRS_DEGREE = 16


@pytest.fixture(scope="session")
def backend():
    """테스트 속도를 위해 사영 좌표 백엔드를 사용한다."""
    return get_backend("optimized_bn128")


@pytest.fixture(scope="session")
def srs(backend):
    return SRS.generate(max_degree=SRS_DEGREE, seed=SRS_SEED, backend=backend)


@pytest.fixture(scope="session")
def honk_data(backend, srs):
    """secret + 1 == public_output 회로의 전체 파이프라인 데이터."""
    circuit = UltraCircuit.secret_plus_one(secret=SECRET)
    preprocessed = preprocess(circuit, srs, backend)
    proof = prove(preprocessed, srs, backend)
    return {
        "circuit": circuit,
        "preprocessed": preprocessed,
        "vk": preprocessed.vk,
        "vk_bytes": encode_vk(preprocessed.vk),
        "proof": proof,
        "proof_bytes": proof.to_bytes(),
        "public_inputs": [to_word(PUBLIC_OUTPUT)],
        "srs_g2": srs.g2_affine(),
    }
