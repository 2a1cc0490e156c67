"""
Expected log-likelihood and analytical gradients for rating scale EM.

Persons are integrated over standardized quadrature nodes z_q. The location
of person j at node q is:
    L_jq = μ_j + s * z_q,   μ_j = w_j'λ
with s = σ for the RSM and s = 1 for the GRSM.

For the expected complete-data log-likelihood (posterior weights w_jq):
    Q = Σ_n Σ_q w_{j[n]q} * log P(Y_n | L_{j[n]q})

With cumulative logits C_k = α(k(L - β) - K_k), K_k = Σ_{s≤k} κ_s, and
E = Σ_k k P_k:
    ∂log P_y / ∂L   = α (y - E)
    ∂log P_y / ∂β   = -α (y - E)
    ∂log P_y / ∂α   = (y - E)(L - β) - (K_y - Σ_k K_k P_k)
    ∂log P_y / ∂κ_s = -α (I[y ≥ s] - P(Y ≥ s))

Chain rule for sum-to-zero (free params 0..n-2):
    ∂Q / ∂x_free = ∂Q / ∂x - ∂Q / ∂x_last
"""

import math

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import NDArray

from ratingscale.irt.parameters import ModelKind, RatingScaleParameters
from ratingscale.irt.regression import person_means


@njit  # type: ignore
def person_log_likelihood_kernel(
    mu: NDArray[np.float64],
    scale: float,
    nodes: NDArray[np.float64],
    items: NDArray[np.int64],
    persons: NDArray[np.int64],
    responses: NDArray[np.int64],
    difficulties: NDArray[np.float64],
    discriminations: NDArray[np.float64],
    steps: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Log-likelihood of each person's responses at each quadrature node.

    Returns:
        Array of shape (n_persons, n_quadrature).
    """
    n_persons = mu.shape[0]
    n_quad = nodes.shape[0]
    m = steps.shape[0]
    out = np.zeros((n_persons, n_quad), dtype=np.float64)
    logits = np.empty(m + 1, dtype=np.float64)

    for n in range(responses.shape[0]):
        i = items[n]
        j = persons[n]
        y = responses[n]
        a = discriminations[i]
        b = difficulties[i]
        for q in range(n_quad):
            loc = mu[j] + scale * nodes[q]
            logits[0] = 0.0
            mx = 0.0
            for k in range(m):
                logits[k + 1] = logits[k] + a * (loc - b - steps[k])
                if logits[k + 1] > mx:
                    mx = logits[k + 1]
            total = 0.0
            for k in range(m + 1):
                total += math.exp(logits[k] - mx)
            out[j, q] += logits[y] - mx - math.log(total)

    return out


@njit  # type: ignore
def expected_log_likelihood_kernel(
    mu: NDArray[np.float64],
    scale: float,
    nodes: NDArray[np.float64],
    posteriors: NDArray[np.float64],
    items: NDArray[np.int64],
    persons: NDArray[np.int64],
    responses: NDArray[np.int64],
    difficulties: NDArray[np.float64],
    discriminations: NDArray[np.float64],
    steps: NDArray[np.float64],
) -> tuple[
    float,
    NDArray[np.float64],
    float,
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
]:
    """
    Expected log-likelihood Q and its gradient w.r.t. the full parameters.

    Returns:
        Tuple (Q, dQ/dμ per person, dQ/ds, dQ/dβ per item, dQ/dα per item,
        dQ/dκ per step).
    """
    n_persons = mu.shape[0]
    n_items = difficulties.shape[0]
    n_quad = nodes.shape[0]
    m = steps.shape[0]

    g_mu = np.zeros(n_persons, dtype=np.float64)
    g_beta = np.zeros(n_items, dtype=np.float64)
    g_alpha = np.zeros(n_items, dtype=np.float64)
    g_kappa = np.zeros(m, dtype=np.float64)
    g_scale = 0.0
    value = 0.0

    cum_kappa = np.zeros(m + 1, dtype=np.float64)
    for k in range(m):
        cum_kappa[k + 1] = cum_kappa[k] + steps[k]

    logits = np.empty(m + 1, dtype=np.float64)
    probs = np.empty(m + 1, dtype=np.float64)

    for n in range(responses.shape[0]):
        i = items[n]
        j = persons[n]
        y = responses[n]
        a = discriminations[i]
        b = difficulties[i]
        for q in range(n_quad):
            w = posteriors[j, q]
            if w == 0.0:
                continue
            loc = mu[j] + scale * nodes[q]

            logits[0] = 0.0
            mx = 0.0
            for k in range(m):
                logits[k + 1] = logits[k] + a * (loc - b - steps[k])
                if logits[k + 1] > mx:
                    mx = logits[k + 1]
            total = 0.0
            for k in range(m + 1):
                probs[k] = math.exp(logits[k] - mx)
                total += probs[k]
            log_norm = mx + math.log(total)

            expected = 0.0
            expected_cum = 0.0
            for k in range(m + 1):
                probs[k] /= total
                expected += k * probs[k]
                expected_cum += cum_kappa[k] * probs[k]

            value += w * (logits[y] - log_norm)

            resid = y - expected
            g_loc = w * a * resid
            g_mu[j] += g_loc
            g_scale += g_loc * nodes[q]
            g_beta[i] -= g_loc
            g_alpha[i] += w * (
                resid * (loc - b) - (cum_kappa[y] - expected_cum)
            )

            # Tail probabilities P(Y >= s), accumulated from the top
            tail = 0.0
            for s in range(m, 0, -1):
                tail += probs[s]
                indicator = 1.0 if y >= s else 0.0
                g_kappa[s - 1] -= w * a * (indicator - tail)

    return value, g_mu, g_scale, g_beta, g_alpha, g_kappa


def location_terms(
    params: RatingScaleParameters, design: NDArray[np.float64]
) -> tuple[NDArray[np.float64], float]:
    """
    Person means μ = Wλ and the node scale s for given parameters.

    Returns:
        Tuple (mu, scale) so that L_jq = mu[j] + scale * z_q.
    """
    mu = person_means(design, params.regression)
    scale = params.sigma if params.model == ModelKind.RSM else 1.0
    return np.ascontiguousarray(mu), float(scale)


def negative_expected_log_likelihood(
    x: NDArray[np.float64],
    model: ModelKind,
    n_items: int,
    n_categories: int,
    design: NDArray[np.float64],
    nodes: NDArray[np.float64],
    posteriors: NDArray[np.float64],
    items: NDArray[np.int64],
    persons: NDArray[np.int64],
    responses: NDArray[np.int64],
    lambda_penalty: float = 0.0,
) -> tuple[float, NDArray[np.float64]]:
    """
    Objective for the M-step and its gradient w.r.t. the free parameters.

    Minimizes -Q + λ_pen * Σ (log α_i)² (penalty applies to the GRSM only).

    Args:
        x: Free parameter vector in RatingScaleParameters.to_array layout.
        model: RSM or GRSM.
        n_items: Number of items.
        n_categories: Number of response categories.
        design: Covariate matrix W, shape (n_persons, K).
        nodes: Standardized quadrature nodes, shape (n_quadrature,).
        posteriors: Posterior weights, shape (n_persons, n_quadrature).
        items: Item index per observation.
        persons: Person index per observation.
        responses: Response per observation.
        lambda_penalty: Ridge weight on log discriminations.

    Returns:
        Tuple (objective value, gradient of shape x.shape).
    """
    n_covariates = design.shape[1]
    params = RatingScaleParameters.from_array(
        x, model, n_items, n_categories, n_covariates
    )
    mu, scale = location_terms(params, design)
    alphas = params.item_discriminations()

    value, g_mu, g_scale, g_beta, g_alpha, g_kappa = (
        expected_log_likelihood_kernel(
            mu,
            scale,
            nodes,
            posteriors,
            items,
            persons,
            responses,
            np.array(params.difficulties, dtype=np.float64),
            alphas,
            np.array(params.steps, dtype=np.float64),
        )
    )

    grad_parts = [
        g_beta[:-1] - g_beta[-1],
        g_kappa[:-1] - g_kappa[-1],
        design.T @ g_mu,
    ]
    if model == ModelKind.RSM:
        # d/d log σ = σ * d/dσ
        grad_parts.append(np.array([g_scale * scale]))
    else:
        # d/d log α = α * d/dα
        grad_parts.append(g_alpha * alphas)

    grad = -np.concatenate(grad_parts)
    objective = -float(value)

    if model == ModelKind.GRSM and lambda_penalty > 0:
        log_alpha = np.log(alphas)
        objective += lambda_penalty * float(np.sum(log_alpha**2))
        grad[-n_items:] += 2.0 * lambda_penalty * log_alpha

    result: NDArray[np.float64] = grad.astype(np.float64)
    return objective, result
