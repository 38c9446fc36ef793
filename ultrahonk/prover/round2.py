"""
UltraHonk Prover Round 2: 룩업 카운트/태그와 네 번째 배선
=========================================================

  ┌──────────────────────────────────────────────────────┐
  │  Prover → Verifier: [read_counts], [read_tags], [w4] │
  │  Verifier → Prover: beta, gamma                      │
  └──────────────────────────────────────────────────────┘

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ultrahonk.entities import Entity


def execute(state):
    """Round 2를 실행한다."""
    trace = state.trace
    proof = state.proof
    transcript = state.transcript

    state.tables[Entity.LOOKUP_READ_COUNTS] = trace.witness["lookup_read_counts"]
    state.tables[Entity.LOOKUP_READ_TAGS] = trace.witness["lookup_read_tags"]
    state.tables[Entity.W_4] = trace.witness["w4"]

    proof.lookup_read_counts = state.commit(state.tables[Entity.LOOKUP_READ_COUNTS])
    proof.lookup_read_tags = state.commit(state.tables[Entity.LOOKUP_READ_TAGS])
    proof.w4 = state.commit(state.tables[Entity.W_4])

    transcript.absorb_point("lookup_read_counts", proof.lookup_read_counts)
    transcript.absorb_point("lookup_read_tags", proof.lookup_read_tags)
    transcript.absorb_point("w4", proof.w4)

    state.beta, state.gamma = transcript.challenge_split("beta_gamma")
