"""
UltraHonk Prover Round 5: Gemini + Shplonk + KZG
=================================================

  ┌──────────────────────────────────────────────────────┐
  │  Verifier → Prover: rho                              │
  │  Prover → Verifier: [A_1], ..., [A_{d-1}]            │
  │  Verifier → Prover: r                                │
  │  Prover → Verifier: a_l = A_l(-r^{2^l}), l < d       │
  │  Verifier → Prover: nu                               │
  │  Prover → Verifier: [Q]                              │
  │  Verifier → Prover: z                                │
  │  Prover → Verifier: [W]                              │
  └──────────────────────────────────────────────────────┘

**Gemini**:
  F = Σ ρⁱ·fᵢ (unshifted 35개), G = Σ ρ^{35+j}·gⱼ (shift 대상 5개)
  A₀ 계수 = F[i] + G[i+1]   (G[0] = 0 이므로 A₀ = F + G/X)
  A_{l+1} = fold(A_l, u_l)

**Shplonk**: 2d개의 열기 주장 (f_k, z_k, v_k)
  f_0 = F + G/r   (점 r),   f_1 = F - G/r   (점 -r)
  l ≥ 1: A_l (점 -r^{2^l}),  A_l (점 r^{2^l})

    Q(X) = Σ ν^k · (f_k(X) - v_k) / (X - z_k)
    L(X) = Σ ν^k / (z - z_k) · (f_k(X) - v_k) - Q(X)     (L(z) = 0)
    W(X) = L(X) / (X - z)

사용:
    이 모듈은 직접 호출하지 않고, prover.prove()를 통해 실행된다.
"""

from ultrahonk.entities import Entity, NUMBER_OF_ENTITIES, NUMBER_UNSHIFTED, SHIFTED_SOURCES
from ultrahonk.field import FR, fr_powers
from ultrahonk.kzg import create_witness
from ultrahonk.polynomial import Polynomial, fold
from ultrahonk.shplemini import gemini_r_powers, opening_claim_points


def batch_tables(tables, rho, n):
    """(F 계수, G 계수)"""
    rho_pows = fr_powers(rho, NUMBER_OF_ENTITIES)
    unshifted = [FR(0)] * n
    for i in range(NUMBER_UNSHIFTED):
        table = tables[Entity(i)]
        weight = rho_pows[i]
        unshifted = [acc + weight * v for acc, v in zip(unshifted, table)]
    to_be_shifted = [FR(0)] * n
    for shifted, source in SHIFTED_SOURCES.items():
        weight = rho_pows[shifted]
        to_be_shifted = [acc + weight * v for acc, v in zip(to_be_shifted, tables[source])]
    return unshifted, to_be_shifted


def execute(state):
    """Round 5를 실행한다."""
    proof = state.proof
    transcript = state.transcript
    n, log_n = state.n, state.log_n

    # ── 1. rho 배치 ──
    transcript.absorb_scalars("sumcheck_evaluations", proof.sumcheck_evaluations)
    rho = transcript.challenge_lo("rho")
    f_coeffs, g_coeffs = batch_tables(state.tables, rho, n)

    # ── 2. Gemini 폴딩 ──
    a0 = [f_coeffs[i] + (g_coeffs[i + 1] if i + 1 < n else FR(0)) for i in range(n)]
    folds = [a0]
    for l in range(log_n - 1):
        folds.append(fold(folds[-1], state.point[l]))

    proof.gemini_fold_comms = [state.commit(table) for table in folds[1:]]
    for l, comm in enumerate(proof.gemini_fold_comms, 1):
        transcript.absorb_point(f"gemini_fold_{l}", comm)
    r = transcript.challenge_lo("gemini_r")
    if r == 0:
        raise ZeroDivisionError("gemini challenge r is zero")

    r_pows = gemini_r_powers(r, log_n)
    F = Polynomial(f_coeffs)
    G = Polynomial(g_coeffs)
    r_inv = FR(1) / r
    fold_polys = [Polynomial(table) for table in folds]

    # A_0(-r) = F(-r) - G(-r)/r
    a_evals = [F.evaluate(FR(0) - r) - G.evaluate(FR(0) - r) * r_inv]
    for l in range(1, log_n):
        a_evals.append(fold_polys[l].evaluate(FR(0) - r_pows[l]))
    proof.gemini_a_evaluations = a_evals
    transcript.absorb_scalars("gemini_a", a_evals)
    nu = transcript.challenge_lo("shplonk_nu")

    # ── 3. Shplonk ──
    claim_polys = [F + G * r_inv, F - G * r_inv]
    for l in range(1, log_n):
        claim_polys.extend([fold_polys[l], fold_polys[l]])
    claim_points = opening_claim_points(r_pows)

    nu_pows = fr_powers(nu, 2 * log_n)
    numerators = []
    quotient = Polynomial.zero()
    for k, (poly, z_k) in enumerate(zip(claim_polys, claim_points)):
        value = poly.evaluate(z_k)
        numerator = poly - Polynomial([value])
        q_k, _ = numerator.divide_by_linear(z_k)
        quotient = quotient + q_k * nu_pows[k]
        numerators.append(numerator)

    proof.shplonk_q = state.commit(quotient)
    transcript.absorb_point("shplonk_q", proof.shplonk_q)
    z = transcript.challenge_lo("shplonk_z")

    # ── 4. KZG ──
    batched = Polynomial.zero() - quotient
    for k, (numerator, z_k) in enumerate(zip(numerators, claim_points)):
        batched = batched + numerator * (nu_pows[k] / (z - z_k))
    proof.kzg_quotient = create_witness(batched, z, state.srs, state.backend)
