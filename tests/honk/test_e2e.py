"""
UltraHonk End-to-End 테스트

preprocess → prove → verify 전체 파이프라인.

  - 유효한 증명 수락, 챌린지 결정성
  - 공개 입력 / 증명 길이 / 필드 범위 오류
  - 변조된 증명 거부 (fail-fast: 실패한 단계 이후는 실행되지 않음)
  - 두 번째 예제 회로, extended VK, 참조 백엔드
"""

import random

import pytest

from ultrahonk.circuit import UltraCircuit
from ultrahonk.curve import G2Point
from ultrahonk.errors import (
    FieldElementOutOfRange, MalformedProof, PairingCheckFailed, RelationCheckFailed,
    SumcheckRoundFailed, TranscriptMismatch, UnsupportedCircuitShape, VerifierError,
)
from ultrahonk.field import CURVE_ORDER, WORD_SIZE, to_word
from ultrahonk.preprocessor import preprocess
from ultrahonk.prover import prove
from ultrahonk.transcript import Transcript
from ultrahonk.verifier import HonkVerifier
from ultrahonk.vk import LAYOUT_EXTENDED, LAYOUT_GENERIC, VerificationKey, encode_vk, parse_vk

# 증명 안의 워드 인덱스 (log n = 3)
UNIVARIATE_1_0 = 16 + 8
EVALUATION_0 = 16 + 8 * 3
GEMINI_A_0 = EVALUATION_0 + 40 + 2 * 2


def tamper(data, word_index, delta=1):
    """word_index번째 32바이트 워드에 delta를 더한다."""
    start = word_index * WORD_SIZE
    value = int.from_bytes(data[start:start + WORD_SIZE], "big")
    return data[:start] + to_word((value + delta) % CURVE_ORDER) + data[start + WORD_SIZE:]


@pytest.fixture
def verifier(honk_data, backend):
    return HonkVerifier(honk_data["vk"], backend=backend, srs_g2=honk_data["srs_g2"])


class Recorder:
    """메서드 호출을 기록하고 원래 메서드로 넘긴다."""

    def __init__(self, monkeypatch, target, name, calls):
        original = getattr(target, name)

        def wrapper(*args, **kwargs):
            calls.append(name)
            return original(*args, **kwargs)

        monkeypatch.setattr(target, name, wrapper)


@pytest.fixture
def calls(verifier, monkeypatch):
    recorded = []
    Recorder(monkeypatch, verifier.relation_evaluator, "check", recorded)
    Recorder(monkeypatch, verifier.opening_verifier, "verify", recorded)
    return recorded


# =====================================================================
# 수락
# =====================================================================

class TestAccept:
    def test_valid_proof(self, verifier, honk_data):
        assert verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"]) is True

    def test_verify_order(self, verifier, honk_data, calls):
        verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"])
        assert calls == ["check", "verify"]

    def test_challenges_deterministic(self, verifier, honk_data):
        runs = []
        for _ in range(2):
            transcript = Transcript()
            verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"], transcript)
            runs.append(transcript)
        assert runs[0].challenge_values() == runs[1].challenge_values()
        # eta 2 + beta/gamma 1 + alpha 13 + gate 3 + sumcheck 3 + rho, r, nu, z
        assert len(runs[0].challenges) == 26
        labels = [label for label, _ in runs[0].challenges]
        assert labels[:3] == ["eta", "eta_three", "beta_gamma"]
        assert labels[-4:] == ["rho", "gemini_r", "shplonk_nu", "shplonk_z"]

    def test_vk_from_bytes(self, honk_data, backend):
        vk = parse_vk(honk_data["vk_bytes"])
        verifier = HonkVerifier(vk, backend=backend, srs_g2=honk_data["srs_g2"])
        assert verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"])

    def test_extended_vk(self, honk_data, backend):
        vk = honk_data["vk"]
        extended = parse_vk(encode_vk(VerificationKey(
            vk.circuit_size, vk.log_circuit_size, vk.public_inputs_size, vk.points,
            pub_inputs_offset=vk.pub_inputs_offset, layout=LAYOUT_EXTENDED,
            accumulator_indices=[0] * 16)))
        verifier = HonkVerifier(extended, backend=backend, srs_g2=honk_data["srs_g2"])
        assert verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"])

    def test_range_circuit(self, srs, backend):
        preprocessed = preprocess(UltraCircuit.range_and_multiplication(x=3, y=4), srs, backend)
        proof = prove(preprocessed, srs, backend)
        verifier = HonkVerifier(preprocessed.vk, backend=backend, srs_g2=srs.g2_affine())
        assert verifier.verify(proof.to_bytes(), [to_word(12)])
        with pytest.raises(VerifierError):
            verifier.verify(proof.to_bytes(), [to_word(13)])

    def test_reference_backend(self, honk_data):
        verifier = HonkVerifier(honk_data["vk"], backend="bn128", srs_g2=honk_data["srs_g2"])
        assert verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"])


# =====================================================================
# 입력 오류
# =====================================================================

class TestInputErrors:
    def test_wrong_public_input(self, verifier, honk_data):
        with pytest.raises(VerifierError):
            verifier.verify(honk_data["proof_bytes"], [to_word(7)])

    def test_public_input_count(self, verifier, honk_data):
        with pytest.raises(TranscriptMismatch):
            verifier.verify(honk_data["proof_bytes"], [])
        with pytest.raises(TranscriptMismatch):
            verifier.verify(honk_data["proof_bytes"], [to_word(6), to_word(6)])

    def test_short_public_input_word(self, verifier, honk_data):
        with pytest.raises(MalformedProof):
            verifier.verify(honk_data["proof_bytes"], [to_word(6)[1:]])

    def test_public_input_not_in_field(self, verifier, honk_data):
        with pytest.raises(FieldElementOutOfRange):
            verifier.verify(honk_data["proof_bytes"], [to_word(CURVE_ORDER)])

    @pytest.mark.parametrize("cut", [-WORD_SIZE, WORD_SIZE, -1])
    def test_wrong_proof_length(self, verifier, honk_data, cut):
        data = honk_data["proof_bytes"]
        data = data[:cut] if cut < 0 else data + b"\x00" * cut
        with pytest.raises(MalformedProof):
            verifier.verify(data, honk_data["public_inputs"])

    def test_scalar_not_in_field(self, verifier, honk_data):
        data = honk_data["proof_bytes"]
        start = EVALUATION_0 * WORD_SIZE
        data = data[:start] + b"\xff" * WORD_SIZE + data[start + WORD_SIZE:]
        with pytest.raises(FieldElementOutOfRange) as exc_info:
            verifier.verify(data, honk_data["public_inputs"])
        assert exc_info.value.offset == start

    def test_point_off_curve(self, verifier, honk_data):
        data = honk_data["proof_bytes"]
        data = to_word(1) + to_word(3) + data[2 * WORD_SIZE:]
        with pytest.raises(MalformedProof) as exc_info:
            verifier.verify(data, honk_data["public_inputs"])
        assert exc_info.value.offset == 0


# =====================================================================
# 변조 (fail-fast)
# =====================================================================

class TestTampering:
    def test_sumcheck_round_fails_first(self, verifier, honk_data, calls):
        data = tamper(honk_data["proof_bytes"], UNIVARIATE_1_0)
        with pytest.raises(SumcheckRoundFailed) as exc_info:
            verifier.verify(data, honk_data["public_inputs"])
        assert exc_info.value.round == 1
        assert calls == []

    def test_relation_check_before_opening(self, verifier, honk_data, calls):
        data = tamper(honk_data["proof_bytes"], EVALUATION_0)
        with pytest.raises(RelationCheckFailed):
            verifier.verify(data, honk_data["public_inputs"])
        assert calls == ["check"]

    def test_opening_evaluation(self, verifier, honk_data, calls):
        data = tamper(honk_data["proof_bytes"], GEMINI_A_0)
        with pytest.raises(PairingCheckFailed):
            verifier.verify(data, honk_data["public_inputs"])
        assert calls == ["check", "verify"]

    def test_wrong_srs(self, honk_data, backend):
        # 기본 [τ]₂ (공개 ceremony)는 테스트 SRS와 다르다
        verifier = HonkVerifier(honk_data["vk"], backend=backend)
        with pytest.raises(PairingCheckFailed):
            verifier.verify(honk_data["proof_bytes"], honk_data["public_inputs"])

    def test_random_byte_flips_rejected(self, verifier, honk_data):
        rng = random.Random(20240607)
        original = honk_data["proof_bytes"]
        for _ in range(40):
            data = bytearray(original)
            position = rng.randrange(len(data))
            data[position] ^= rng.randrange(1, 256)
            with pytest.raises(VerifierError):
                verifier.verify(bytes(data), honk_data["public_inputs"])

    @pytest.mark.parametrize("word_index", [0, 5, 14, 17, 24, 31, 39, 45, 70, 80, 83, 86, 89])
    def test_any_modification_rejected(self, verifier, honk_data, word_index):
        data = bytearray(honk_data["proof_bytes"])
        data[word_index * WORD_SIZE + WORD_SIZE - 1] ^= 1
        with pytest.raises(VerifierError):
            verifier.verify(bytes(data), honk_data["public_inputs"])


# =====================================================================
# 지원하지 않는 형태
# =====================================================================

class TestUnsupportedShape:
    def test_generic_vk(self, backend):
        vk = VerificationKey(8, 3, 1, [("p0", (1, 2))], layout=LAYOUT_GENERIC)
        with pytest.raises(UnsupportedCircuitShape):
            HonkVerifier(vk, backend=backend)

    def test_unknown_relation_set(self, honk_data, backend):
        with pytest.raises(UnsupportedCircuitShape):
            HonkVerifier(honk_data["vk"], backend=backend, relations="plonk")

    def test_off_curve_srs_g2(self, honk_data, backend):
        with pytest.raises(UnsupportedCircuitShape, match="srs_g2"):
            HonkVerifier(honk_data["vk"], backend=backend, srs_g2=G2Point((1, 2), (3, 4)))
