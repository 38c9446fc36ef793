"""
VK 파서 테스트
==============

- compact(57 필드) / extended(128 필드) 레이아웃 파싱과 재인코딩
- 헤더 round-trip
- 형식 오류: 길이, 홀수 좌표, 곡선 밖의 점, 크기 불일치
- 파일 읽기 오류
"""

import pytest

from ultrahonk.curve import G1Point
from ultrahonk.errors import GeneratorIOError, MalformedVK
from ultrahonk.field import CURVE_ORDER, WORD_SIZE, to_word
from ultrahonk.vk import (
    COMPACT_FIELDS, EXTENDED_FIELDS, LAYOUT_COMPACT, LAYOUT_EXTENDED, LAYOUT_GENERIC,
    NUM_POINTS, POINT_NAMES, VerificationKey, encode_vk, load_vk, parse_vk,
)


def header(n=8, log_n=3, num_pis=1):
    return to_word(n) + to_word(log_n) + to_word(num_pis)


def extended_copy(vk):
    return VerificationKey(
        circuit_size=vk.circuit_size,
        log_circuit_size=vk.log_circuit_size,
        public_inputs_size=vk.public_inputs_size,
        points=vk.points,
        pub_inputs_offset=vk.pub_inputs_offset,
        layout=LAYOUT_EXTENDED,
        accumulator_indices=range(16),
    )


class TestCompactLayout:
    def test_field_count(self, honk_data):
        assert len(honk_data["vk_bytes"]) == COMPACT_FIELDS * WORD_SIZE == 57 * 32

    def test_parse(self, honk_data):
        vk = parse_vk(honk_data["vk_bytes"])
        assert vk.layout == LAYOUT_COMPACT
        assert vk.circuit_size == 8
        assert vk.log_circuit_size == 3
        assert vk.public_inputs_size == 1
        assert vk.pub_inputs_offset == 1
        assert vk.num_points == NUM_POINTS
        assert vk.has_standard_schema()
        assert [name for name, _ in vk.points] == list(POINT_NAMES)

    def test_roundtrip(self, honk_data):
        data = honk_data["vk_bytes"]
        vk = parse_vk(data)
        assert encode_vk(vk) == data
        assert vk == honk_data["vk"]

    def test_header_roundtrip(self, honk_data):
        data = honk_data["vk_bytes"]
        assert parse_vk(data).header_bytes() == data[:3 * WORD_SIZE]

    def test_commitments_read_only(self, honk_data):
        vk = parse_vk(honk_data["vk_bytes"])
        assert vk.commitments["lagrange_first"] == dict(vk.points)["lagrange_first"]
        with pytest.raises(TypeError):
            vk.commitments["ql"] = G1Point(1, 2)

    def test_table_roundtrip(self, honk_data):
        vk = honk_data["vk"]
        assert VerificationKey.from_table(vk.to_table()) == vk


class TestExtendedLayout:
    def test_encode_length(self, honk_data):
        data = encode_vk(extended_copy(honk_data["vk"]))
        assert len(data) == EXTENDED_FIELDS * WORD_SIZE == 128 * 32

    def test_roundtrip(self, honk_data):
        extended = extended_copy(honk_data["vk"])
        data = encode_vk(extended)
        vk = parse_vk(data)
        assert vk.layout == LAYOUT_EXTENDED
        assert vk.accumulator_indices == tuple(range(16))
        assert vk.points == honk_data["vk"].points
        assert encode_vk(vk) == data

    def test_limb_too_wide(self, honk_data):
        data = bytearray(encode_vk(extended_copy(honk_data["vk"])))
        # 첫 점의 x_hi limb (118비트)에 119번째 비트를 세운다
        index = 3 + 1 + 16 + 1
        data[index * WORD_SIZE:(index + 1) * WORD_SIZE] = to_word(1 << 118)
        with pytest.raises(MalformedVK) as exc_info:
            parse_vk(bytes(data))
        assert exc_info.value.offset == index * WORD_SIZE


class TestGenericLayout:
    def test_even_body_parses_as_generic(self):
        data = header() + to_word(1) + to_word(2) + to_word(0) + to_word(0)
        vk = parse_vk(data)
        assert vk.layout == LAYOUT_GENERIC
        assert vk.num_points == 2
        assert not vk.has_standard_schema()

    def test_odd_body_rejected(self, honk_data):
        data = honk_data["vk_bytes"] + to_word(0)
        with pytest.raises(MalformedVK) as exc_info:
            parse_vk(data)
        assert "unexpected point count" in str(exc_info.value)


class TestMalformed:
    def test_length_not_multiple_of_word(self, honk_data):
        with pytest.raises(MalformedVK) as exc_info:
            parse_vk(honk_data["vk_bytes"] + b"\x00")
        assert exc_info.value.offset == COMPACT_FIELDS * WORD_SIZE

    def test_shorter_than_header(self):
        with pytest.raises(MalformedVK):
            parse_vk(to_word(8) + to_word(3))

    def test_empty(self):
        with pytest.raises(MalformedVK):
            parse_vk(b"")

    def test_size_mismatch(self, honk_data):
        data = header(n=16, log_n=3) + honk_data["vk_bytes"][3 * WORD_SIZE:]
        with pytest.raises(MalformedVK):
            parse_vk(data)

    def test_header_field_out_of_range(self, honk_data):
        data = header()[:2 * WORD_SIZE] + to_word(CURVE_ORDER) + honk_data["vk_bytes"][3 * WORD_SIZE:]
        with pytest.raises(MalformedVK) as exc_info:
            parse_vk(data)
        assert exc_info.value.offset == 2 * WORD_SIZE

    def test_point_off_curve(self, honk_data):
        data = bytearray(honk_data["vk_bytes"])
        data[3 * WORD_SIZE:5 * WORD_SIZE] = to_word(1) + to_word(3)
        with pytest.raises(MalformedVK) as exc_info:
            parse_vk(bytes(data))
        assert exc_info.value.offset == 3 * WORD_SIZE
        assert POINT_NAMES[0] in str(exc_info.value)

    def test_coordinate_exceeds_modulus(self, honk_data):
        data = bytearray(honk_data["vk_bytes"])
        data[3 * WORD_SIZE:4 * WORD_SIZE] = b"\xff" * WORD_SIZE
        with pytest.raises(MalformedVK):
            parse_vk(bytes(data))


class TestLoadVK:
    def test_load(self, honk_data, tmp_path):
        path = tmp_path / "circuit.vk"
        path.write_bytes(honk_data["vk_bytes"])
        assert load_vk(str(path)) == honk_data["vk"]

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.vk"
        with pytest.raises(GeneratorIOError) as exc_info:
            load_vk(str(path))
        assert exc_info.value.path == str(path)

    def test_malformed_file_carries_path(self, tmp_path):
        path = tmp_path / "bad.vk"
        path.write_bytes(b"\x01" * 33)
        with pytest.raises(MalformedVK) as exc_info:
            load_vk(str(path))
        assert exc_info.value.path == str(path)
        assert str(path) in str(exc_info.value)
