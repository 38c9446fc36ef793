"""
UltraHonk 데이터 직렬화/역직렬화 헬퍼
======================================

TinyDB와 JSON 응답에 저장 가능한 형태로 UltraHonk 객체를 변환한다.
FR, G1Point, G2Point, VerificationKey, 제출 기록 등.
"""

import hashlib

from ultrahonk.curve import G1Point, G2Point, parse_g2_hex
from ultrahonk.field import FR, WORD_SIZE
from ultrahonk.vk import VerificationKey


# ─── hex ───

def decode_hex(s, what="value"):
    """"0x..." 또는 "..." 16진수 → bytes. 형식 오류는 ValueError."""
    if not isinstance(s, str):
        raise ValueError(f"{what} must be a hex string")
    text = s[2:] if s.startswith(("0x", "0X")) else s
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise ValueError(f"{what} is not valid hex") from None


def decode_words(values, what="public input"):
    """hex 문자열 리스트 → 32바이트 워드 리스트 (짧은 값은 왼쪽을 0으로 채운다)."""
    if not isinstance(values, list):
        raise ValueError(f"{what}s must be a list")
    words = []
    for i, value in enumerate(values):
        data = decode_hex(value, f"{what} {i}")
        if len(data) < WORD_SIZE:
            data = data.rjust(WORD_SIZE, b"\x00")
        words.append(data)
    return words


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR"""
    return FR(int(s))


# ─── G1 point ───

def serialize_g1(point):
    """G1Point → [str, str]"""
    return [str(int(point.x)), str(int(point.y))]


def deserialize_g1(data):
    """[str, str] → G1Point"""
    return G1Point(int(data[0]), int(data[1]))


# ─── G2 point ───

def serialize_g2(point):
    """G2Point → [[str,str],[str,str]] or None"""
    if point is None:
        return None
    (x0, x1), (y0, y1) = point
    return [[str(int(x0)), str(int(x1))], [str(int(y0)), str(int(y1))]]


def deserialize_g2(data):
    """[[str,str],[str,str]] or None → G2Point"""
    if data is None:
        return None
    return G2Point((int(data[0][0]), int(data[0][1])), (int(data[1][0]), int(data[1][1])))


def parse_g2_field(value):
    """요청 본문의 "x0,x1,y0,y1" 문자열 → G2Point (없으면 None)."""
    if value is None:
        return None
    return parse_g2_hex(value)


# ─── VerificationKey ───

def serialize_vk(vk):
    """VerificationKey → dict (좌표는 문자열)"""
    table = vk.to_table()
    table["points"] = [[name, str(x), str(y)] for name, x, y in table["points"]]
    return table


def deserialize_vk(data):
    """dict → VerificationKey"""
    table = dict(data)
    table["points"] = [[name, int(x), int(y)] for name, x, y in data["points"]]
    return VerificationKey.from_table(table)


def vk_header(vk):
    """응답용 VK 요약."""
    return {
        "circuit_size": vk.circuit_size,
        "log_circuit_size": vk.log_circuit_size,
        "public_inputs_size": vk.public_inputs_size,
        "pub_inputs_offset": vk.pub_inputs_offset,
        "layout": vk.layout,
        "num_points": vk.num_points,
    }


# ─── 제출 기록 ───

def proof_hash(proof):
    """증명 바이트열의 SHA-256 (hex)."""
    return hashlib.sha256(proof).hexdigest()


def serialize_submission(doc_id, record):
    """TinyDB 문서 → 응답 dict"""
    result = dict(record)
    result["id"] = doc_id
    return result
