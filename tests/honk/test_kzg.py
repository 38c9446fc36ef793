"""
SRS와 KZG 커밋먼트 테스트
"""

import pytest

from ultrahonk.field import FR
from ultrahonk.kzg import commit, create_witness, verify_opening
from ultrahonk.polynomial import Polynomial
from ultrahonk.srs import SRS


class TestSRS:
    def test_lengths(self, srs):
        assert len(srs.g1_powers) == srs.max_degree + 1
        assert len(srs.g2_powers) == 2
        assert srs.max_degree == 16

    def test_first_power_is_generator(self, srs, backend):
        assert srs.g1_powers[0] == backend.g1_affine(backend.g1_generator())
        assert srs.g2_powers[0] == backend.g2_affine(backend.g2_generator())

    def test_seeded_generation_is_deterministic(self, srs, backend):
        again = SRS.generate(max_degree=2, seed=42, backend=backend)
        assert again.g1_powers == srs.g1_powers[:3]
        assert again.g2_affine() == srs.g2_affine()


class TestKZG:
    def test_commit_constant(self, srs, backend):
        c = commit([FR(5)], srs, backend)
        assert c == backend.g1_affine(backend.mul(backend.g1_generator(), 5))

    def test_commit_linear(self, srs, backend):
        p = Polynomial([FR(1), FR(2), FR(3)])
        q = Polynomial([FR(4), FR(0), FR(7)])
        cp = backend.g1(commit(p, srs, backend))
        cq = backend.g1(commit(q, srs, backend))
        assert commit(p + q, srs, backend) == backend.g1_affine(backend.add(cp, cq))

    def test_trailing_zeros_ignored(self, srs, backend):
        assert commit([FR(1), FR(2), FR(0), FR(0)], srs, backend) == \
            commit([FR(1), FR(2)], srs, backend)

    def test_degree_too_large(self, srs, backend):
        with pytest.raises(ValueError):
            commit([FR(1)] * (srs.max_degree + 2), srs, backend)

    def test_opening(self, srs, backend):
        p = Polynomial([FR(3), FR(1), FR(4), FR(1), FR(5)])
        z = FR(17)
        c = commit(p, srs, backend)
        pi = create_witness(p, z, srs, backend)
        assert verify_opening(c, pi, z, p.evaluate(z), srs, backend)

    def test_opening_wrong_value(self, srs, backend):
        p = Polynomial([FR(3), FR(1), FR(4)])
        z = FR(17)
        c = commit(p, srs, backend)
        pi = create_witness(p, z, srs, backend)
        assert not verify_opening(c, pi, z, p.evaluate(z) + 1, srs, backend)
