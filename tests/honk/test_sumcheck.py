"""
Sumcheck 상태 기계 테스트 (합성 univariate 사용)
"""

import pytest

from ultrahonk.errors import SumcheckRoundFailed
from ultrahonk.field import FR
from ultrahonk.polynomial import Polynomial
from ultrahonk.sumcheck import SumcheckPhase, SumcheckVerifier
from ultrahonk.transcript import Transcript


def consistent_univariate(target, seed):
    """S(0) + S(1) == target 인 평가값 8개."""
    first = FR(seed)
    return [first, target - first] + [FR(seed * 7 + i) for i in range(6)]


class TestSumcheckVerifier:
    def test_accepts_consistent_rounds(self):
        verifier = SumcheckVerifier(log_n=3)
        transcript = Transcript()
        assert verifier.phase == SumcheckPhase.INIT
        for k in range(3):
            record = verifier.verify_round(consistent_univariate(verifier.target, k + 1), transcript)
            assert record.index == k
            assert verifier.phase == SumcheckPhase.ROUND
        outcome = verifier.finalize()
        assert verifier.phase == SumcheckPhase.FINALIZED
        assert len(outcome.point) == 3
        assert outcome.claimed_sum == outcome.rounds[-1].next_sum
        assert outcome.point == [r.challenge for r in outcome.rounds]

    def test_next_target_is_interpolated_value(self):
        p = Polynomial([FR(c) for c in (3, 1, 4, 1, 5, 9, 2, 6)])
        univariate = [p.evaluate(FR(i)) for i in range(8)]
        verifier = SumcheckVerifier(log_n=1, initial_sum=univariate[0] + univariate[1])
        record = verifier.verify_round(univariate, Transcript())
        assert record.next_sum == p.evaluate(record.challenge)
        assert verifier.target == record.next_sum

    def test_challenges_follow_transcript(self):
        univariate = consistent_univariate(FR(0), 5)
        verifier = SumcheckVerifier(log_n=1)
        record = verifier.verify_round(univariate, Transcript())

        replay = Transcript()
        replay.absorb_scalars("sumcheck_univariate_0", univariate)
        assert record.challenge == replay.challenge_lo("sumcheck_u_0")

    def test_initial_sum_defaults_to_zero(self):
        assert SumcheckVerifier(log_n=2).target == FR(0)

    def test_inconsistent_round_fails(self):
        verifier = SumcheckVerifier(log_n=3)
        transcript = Transcript()
        verifier.verify_round(consistent_univariate(verifier.target, 1), transcript)
        bad = consistent_univariate(verifier.target + 1, 2)
        with pytest.raises(SumcheckRoundFailed) as exc_info:
            verifier.verify_round(bad, transcript)
        assert exc_info.value.round == 1
        assert verifier.phase == SumcheckPhase.FAILED

    def test_no_rounds_after_failure(self):
        verifier = SumcheckVerifier(log_n=2)
        transcript = Transcript()
        with pytest.raises(SumcheckRoundFailed):
            verifier.verify_round([FR(1)] * 8, transcript)
        with pytest.raises(RuntimeError):
            verifier.verify_round(consistent_univariate(FR(0), 1), transcript)
        with pytest.raises(RuntimeError):
            verifier.finalize()

    def test_failed_round_absorbs_nothing(self):
        verifier = SumcheckVerifier(log_n=1)
        transcript = Transcript()
        with pytest.raises(SumcheckRoundFailed):
            verifier.verify_round([FR(1)] * 8, transcript)
        assert transcript.challenges == []

    def test_wrong_length(self):
        verifier = SumcheckVerifier(log_n=1)
        with pytest.raises(SumcheckRoundFailed) as exc_info:
            verifier.verify_round([FR(0)] * 7, Transcript())
        assert exc_info.value.round == 0
        assert "expected 8" in str(exc_info.value)

    def test_finalize_before_all_rounds(self):
        verifier = SumcheckVerifier(log_n=2)
        verifier.verify_round(consistent_univariate(FR(0), 1), Transcript())
        with pytest.raises(RuntimeError):
            verifier.finalize()

    def test_extra_round_rejected(self):
        verifier = SumcheckVerifier(log_n=1)
        transcript = Transcript()
        verifier.verify_round(consistent_univariate(FR(0), 1), transcript)
        with pytest.raises(RuntimeError):
            verifier.verify_round(consistent_univariate(verifier.target, 2), transcript)

    def test_run(self):
        verifier = SumcheckVerifier(log_n=1)
        outcome = verifier.run([consistent_univariate(FR(0), 4)], Transcript())
        assert len(outcome.point) == 1
        assert verifier.phase == SumcheckPhase.FINALIZED
