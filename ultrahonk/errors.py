"""
UltraHonk 오류 분류 (Error Taxonomy)
=====================================

생성 단계(VK 파싱, 코드 생성)와 실행 단계(검증)의 오류를 구분한다.

  HonkError
  ├── MalformedVK              VK 바이트열 형식 오류 (offset/path 포함)
  ├── UnsupportedCircuitShape  생성기가 지원하지 않는 회로 형태
  ├── GeneratorIOError         입출력 실패 (path 포함)
  └── VerifierError            verify() 거부 사유
      ├── MalformedProof
      ├── FieldElementOutOfRange
      ├── TranscriptMismatch
      ├── SumcheckRoundFailed(round)
      ├── RelationCheckFailed
      ├── OpeningVerificationFailed
      └── PairingCheckFailed

모든 예외는 `kind` 속성으로 분류 이름을 노출한다 (DB 기록, CLI 출력용).
"""


class HonkError(Exception):
    """UltraHonk 생성기/검증기 오류의 기반 클래스."""

    kind = "HonkError"


# ─────────────────────────────────────────────────────────────────────
# 생성 단계
# ─────────────────────────────────────────────────────────────────────

class MalformedVK(HonkError):
    """VK 바이트열을 해석할 수 없다.

    속성:
        offset: 문제가 된 필드의 바이트 오프셋 (없으면 None)
        path: VK 파일 경로 (파일에서 읽은 경우)
    """

    kind = "MalformedVK"

    def __init__(self, message, offset=None, path=None):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.path = path

    def __str__(self):
        text = self.message
        if self.offset is not None:
            text = f"{text} (offset {self.offset:#06x})"
        if self.path is not None:
            text = f"{self.path}: {text}"
        return text


class UnsupportedCircuitShape(HonkError):
    """생성기의 관계식 집합이 VK의 형태를 다루지 못한다."""

    kind = "UnsupportedCircuitShape"


class GeneratorIOError(HonkError):
    """VK 읽기 또는 산출물 쓰기 실패."""

    kind = "GeneratorIOError"

    def __init__(self, message, path):
        super().__init__(f"{path}: {message}")
        self.path = path


# ─────────────────────────────────────────────────────────────────────
# 실행 단계 (verify)
# ─────────────────────────────────────────────────────────────────────

class VerifierError(HonkError):
    """증명 거부. verify()는 거부 시 항상 이 계열의 예외를 던진다."""

    kind = "VerifierError"


class MalformedProof(VerifierError):
    """증명/공개 입력의 길이 또는 점 형식 오류."""

    kind = "MalformedProof"

    def __init__(self, message, offset=None):
        super().__init__(message if offset is None else f"{message} (offset {offset:#06x})")
        self.offset = offset


class FieldElementOutOfRange(VerifierError):
    """필드 원소가 모듈러스 이상이다."""

    kind = "FieldElementOutOfRange"

    def __init__(self, message, offset=None):
        super().__init__(message if offset is None else f"{message} (offset {offset:#06x})")
        self.offset = offset


class TranscriptMismatch(VerifierError):
    """트랜스크립트에 흡수할 입력이 VK와 맞지 않는다."""

    kind = "TranscriptMismatch"


class SumcheckRoundFailed(VerifierError):
    """sumcheck 라운드 일관성 검사 실패."""

    kind = "SumcheckRoundFailed"

    def __init__(self, round_index, message=None):
        super().__init__(message or f"sumcheck round {round_index} failed")
        self.round = round_index


class RelationCheckFailed(VerifierError):
    kind = "RelationCheckFailed"


class OpeningVerificationFailed(VerifierError):
    kind = "OpeningVerificationFailed"


class PairingCheckFailed(VerifierError):
    kind = "PairingCheckFailed"
