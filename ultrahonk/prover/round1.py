"""
UltraHonk Prover Round 1: 배선 커밋먼트
========================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: [w1], [w2], [w3]           │
  │  Verifier → Prover: eta, eta_two, eta_three    │
  └─────────────────────────────────────────────────┘

트랜스크립트는 헤더와 공개 입력을 먼저 흡수한다.

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ultrahonk.entities import Entity
from ultrahonk.transcript import absorb_header


def execute(state):
    """Round 1을 실행한다."""
    trace = state.trace
    proof = state.proof
    transcript = state.transcript

    state.tables[Entity.W_L] = trace.witness["w1"]
    state.tables[Entity.W_R] = trace.witness["w2"]
    state.tables[Entity.W_O] = trace.witness["w3"]

    proof.w1 = state.commit(state.tables[Entity.W_L])
    proof.w2 = state.commit(state.tables[Entity.W_R])
    proof.w3 = state.commit(state.tables[Entity.W_O])

    vk = state.vk
    absorb_header(transcript, vk.circuit_size, vk.public_inputs_size,
                  vk.pub_inputs_offset, state.public_inputs)
    transcript.absorb_point("w1", proof.w1)
    transcript.absorb_point("w2", proof.w2)
    transcript.absorb_point("w3", proof.w3)

    state.eta, state.eta_two = transcript.challenge_split("eta")
    state.eta_three = transcript.challenge_lo("eta_three")
