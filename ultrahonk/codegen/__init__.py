"""
UltraHonk 검증기 코드 생성기
=============================

VK 하나를 받아 그 회로 전용 검증기 산출물을 만든다.

  ┌──────────────┐    parse_vk     ┌────────────────┐   Jinja2    ┌─────────────────┐
  │ VK 바이트열   │ ──────────────▶ │ VerificationKey │ ──────────▶ │ verifier.py     │
  └──────────────┘                 └────────────────┘   json      │ 또는 VK 테이블   │
                                                                  └─────────────────┘

**출력 대상**:
  - python: VK 테이블을 모듈 상수로 담고 verify(proof, public_inputs)를
    제공하는 모듈. 로직은 런타임 HonkVerifier가 담당한다.
  - json: 데이터 테이블만 (키 정렬)

같은 입력이면 바이트 단위로 같은 출력을 만든다 (시각, 경로 등을 넣지 않는다).
산출물은 전체 렌더링이 끝난 뒤 임시 파일 + rename으로 기록하므로, 실패한
실행은 산출물을 남기지 않는다.

사용 예시:
    >>> source = generate(vk, target="python", srs_g2=srs.g2_affine())
    >>> generate_file("circuit.vk", "circuit_verifier.py")
"""

import json
import logging
import os
import tempfile

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ultrahonk.curve import is_on_curve_g2
from ultrahonk.entities import MAX_LOG_CIRCUIT_SIZE
from ultrahonk.errors import GeneratorIOError, UnsupportedCircuitShape
from ultrahonk.relations import RELATION_SETS
from ultrahonk.vk import LAYOUT_GENERIC, load_vk

logger = logging.getLogger(__name__)

TARGETS = ("python", "json")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")


def _hex_word(value):
    return f"{int(value):#066x}"


def _environment():
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["hex_word"] = _hex_word
    return env


def check_shape(vk, relation_set="ultra"):
    """생성기가 이 VK를 다룰 수 있는지 확인한다.

    Raises:
        UnsupportedCircuitShape: generic 레이아웃, 비표준 커밋먼트 목록,
            알 수 없는 관계식 집합, log n 범위 밖, 공개 입력이 회로를 넘침
    """
    if vk.layout == LAYOUT_GENERIC or not vk.has_standard_schema():
        raise UnsupportedCircuitShape(
            f"{vk.layout} VK with {vk.num_points} points is not an UltraHonk key")
    if relation_set not in RELATION_SETS:
        raise UnsupportedCircuitShape(f"unknown relation set {relation_set!r}")
    if not 1 <= vk.log_circuit_size <= MAX_LOG_CIRCUIT_SIZE:
        raise UnsupportedCircuitShape(
            f"log_circuit_size {vk.log_circuit_size} outside [1, {MAX_LOG_CIRCUIT_SIZE}]")
    if vk.circuit_size != 1 << vk.log_circuit_size:
        raise UnsupportedCircuitShape(
            f"circuit_size {vk.circuit_size} is not 2^{vk.log_circuit_size}")
    if vk.public_inputs_size + vk.pub_inputs_offset > vk.circuit_size:
        raise UnsupportedCircuitShape(
            f"{vk.public_inputs_size} public inputs at offset {vk.pub_inputs_offset} "
            f"do not fit in {vk.circuit_size} rows")


def check_srs_g2(srs_g2):
    """[τ]₂ 재정의 값이 G2 위의 점인지 확인한다 (None은 기본값)."""
    if srs_g2 is not None and not is_on_curve_g2(srs_g2):
        raise UnsupportedCircuitShape("srs_g2 is not a point on G2")


def build_table(vk, relation_set="ultra", srs_g2=None):
    """생성 산출물에 들어갈 순수 데이터 테이블."""
    table = vk.to_table()
    table["relation_set"] = relation_set
    if srs_g2 is not None:
        (x0, x1), (y0, y1) = srs_g2
        table["srs_g2"] = [[int(x0), int(x1)], [int(y0), int(y1)]]
    else:
        table["srs_g2"] = None
    return table


def generate(vk, target="python", relation_set="ultra", srs_g2=None):
    """VK에서 검증기 산출물(문자열)을 만든다.

    Args:
        vk: VerificationKey
        target: "python" | "json"
        relation_set: 관계식 집합 이름
        srs_g2: [τ]₂ G2Point (None이면 런타임 기본값)

    Returns:
        str: 산출물 텍스트

    Raises:
        UnsupportedCircuitShape: check_shape(), check_srs_g2() 참고
        ValueError: 알 수 없는 target
    """
    if target not in TARGETS:
        raise ValueError(f"unknown target {target!r} (known: {', '.join(TARGETS)})")
    check_shape(vk, relation_set)
    check_srs_g2(srs_g2)
    table = build_table(vk, relation_set, srs_g2)

    if target == "json":
        return json.dumps(table, sort_keys=True, indent=2) + "\n"

    template = _environment().get_template("verifier.py.j2")
    return template.render(vk=vk, table=table, relation_set=relation_set, srs_g2=table["srs_g2"])


def write_atomic(path, text):
    """text를 path에 원자적으로 기록한다 (같은 디렉터리의 임시 파일 + rename)."""
    directory = os.path.dirname(os.path.abspath(path))
    fd = None
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".honk-gen-", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            fd = None
            f.write(text)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        raise GeneratorIOError(f"cannot write artifact: {exc.strerror or exc}", path) from exc
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)


def generate_file(vk_path, output_path, target="python", relation_set="ultra", srs_g2=None):
    """VK 파일을 읽어 산출물 파일을 쓴다.

    Returns:
        VerificationKey: 파싱된 VK

    Raises:
        MalformedVK, UnsupportedCircuitShape, GeneratorIOError
    """
    vk = load_vk(vk_path)
    text = generate(vk, target=target, relation_set=relation_set, srs_g2=srs_g2)
    write_atomic(output_path, text)
    logger.info("wrote %s verifier for n=%d (%d public inputs) to %s",
                target, vk.circuit_size, vk.public_inputs_size, output_path)
    return vk
