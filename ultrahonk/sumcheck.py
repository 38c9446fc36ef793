"""
UltraHonk Sumcheck 검증기 (유한 상태 기계)
===========================================

주장: Σ_{b ∈ {0,1}^d} pow(b) · F(b) = 0
  F는 26개 부분 관계식을 alpha로 결합한 다항식이다.

d 라운드에 걸쳐 변수를 하나씩 고정한다.

  ┌──────────┐   ┌──────────┐         ┌──────────────┐   ┌───────────┐
  │   INIT   │──▶│ ROUND(0) │── ... ─▶│ ROUND(d-1)   │──▶│ FINALIZED │
  └──────────┘   └──────────┘         └──────────────┘   └───────────┘
                      │ 실패                  │ 실패
                      ▼                       ▼
                  ┌────────┐              ┌────────┐
                  │ FAILED │              │ FAILED │
                  └────────┘              └────────┘

**라운드 k**:
  1. 라운드 다항식 S_k는 {0, ..., 7} 위의 평가값 8개 (차수 ≤ 7)
  2. S_k(0) + S_k(1) == 현재 주장값 target_k 인지 확인
  3. 트랜스크립트에 8개 평가값을 흡수하고 챌린지 u_k를 뽑는다
  4. target_{k+1} = S_k(u_k)  (무게중심 보간)

실패하면 SumcheckRoundFailed(k)를 던지고 이후 라운드는 실행되지 않는다.
종료 상태는 최종 점 u와 최종 주장값을 관계식 평가기로 넘긴다.

초기 주장값은 0이다. 공개 입력은 permutation 관계식의 δ 항으로 들어온다.
"""

import logging
from enum import Enum

from ultrahonk.entities import BATCHED_RELATION_PARTIAL_LENGTH
from ultrahonk.errors import SumcheckRoundFailed
from ultrahonk.field import FR
from ultrahonk.polynomial import barycentric_evaluate, barycentric_weights

logger = logging.getLogger(__name__)

BARYCENTRIC_WEIGHTS = barycentric_weights(BATCHED_RELATION_PARTIAL_LENGTH)


class SumcheckPhase(Enum):
    INIT = "init"
    ROUND = "round"
    FINALIZED = "finalized"
    FAILED = "failed"


class SumcheckRound:
    """완료된 한 라운드의 기록.

    속성:
        index: 라운드 번호 k
        univariate: S_k의 평가값 8개
        claimed_sum: 라운드 시작 시 주장값 target_k
        challenge: u_k
        next_sum: S_k(u_k)
    """

    def __init__(self, index, univariate, claimed_sum, challenge, next_sum):
        self.index = index
        self.univariate = list(univariate)
        self.claimed_sum = claimed_sum
        self.challenge = challenge
        self.next_sum = next_sum

    def __repr__(self):
        return f"SumcheckRound({self.index}, u={int(self.challenge):#x})"


class SumcheckOutcome:
    """종료 상태: 최종 평가점과 최종 주장값."""

    def __init__(self, point, claimed_sum, rounds):
        self.point = list(point)
        self.claimed_sum = claimed_sum
        self.rounds = list(rounds)


class SumcheckVerifier:
    """sumcheck 라운드를 하나씩 검증하는 상태 기계.

    Args:
        log_n: 라운드 수 d
        initial_sum: 라운드 0의 주장값 (기본 0)
    """

    def __init__(self, log_n, initial_sum=None):
        self.log_n = log_n
        self.target = FR(0) if initial_sum is None else initial_sum
        self.phase = SumcheckPhase.INIT
        self.round_index = 0
        self.rounds = []

    def verify_round(self, univariate, transcript):
        """라운드 하나를 검증하고 다음 상태로 전이한다.

        Args:
            univariate: FR 평가값 8개 (S_k(0), ..., S_k(7))
            transcript: Transcript

        Returns:
            SumcheckRound

        Raises:
            SumcheckRoundFailed: 차수 초과 또는 S(0) + S(1) ≠ target
        """
        if self.phase in (SumcheckPhase.FINALIZED, SumcheckPhase.FAILED):
            raise RuntimeError(f"sumcheck is {self.phase.value}; no further rounds accepted")
        if self.round_index >= self.log_n:
            raise RuntimeError("all sumcheck rounds already verified")

        k = self.round_index
        self.phase = SumcheckPhase.ROUND
        if len(univariate) != BATCHED_RELATION_PARTIAL_LENGTH:
            self.phase = SumcheckPhase.FAILED
            raise SumcheckRoundFailed(
                k, f"sumcheck round {k}: expected {BATCHED_RELATION_PARTIAL_LENGTH} evaluations, "
                   f"got {len(univariate)}")

        total = univariate[0] + univariate[1]
        if total != self.target:
            self.phase = SumcheckPhase.FAILED
            logger.debug("sumcheck round %d: S(0)+S(1)=%#x, target=%#x",
                         k, int(total), int(self.target))
            raise SumcheckRoundFailed(k)

        transcript.absorb_scalars(f"sumcheck_univariate_{k}", univariate)
        challenge = transcript.challenge_lo(f"sumcheck_u_{k}")
        next_sum = barycentric_evaluate(univariate, challenge, BARYCENTRIC_WEIGHTS)

        record = SumcheckRound(k, univariate, self.target, challenge, next_sum)
        self.rounds.append(record)
        self.target = next_sum
        self.round_index += 1
        return record

    def finalize(self):
        """모든 라운드가 끝난 뒤 종료 상태로 전이한다."""
        if self.phase == SumcheckPhase.FAILED or self.round_index != self.log_n:
            raise RuntimeError("sumcheck cannot finalize before every round has passed")
        self.phase = SumcheckPhase.FINALIZED
        return SumcheckOutcome([r.challenge for r in self.rounds], self.target, self.rounds)

    def run(self, univariates, transcript):
        """모든 라운드를 순서대로 검증하고 종료 상태를 반환한다."""
        for univariate in univariates:
            self.verify_round(univariate, transcript)
        return self.finalize()
