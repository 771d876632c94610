# Copyright 2025 songlei
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Variational DTC (VFE) bound of a sparse GP with gaussian noise.

With Q = K_nm K_mm^-1 K_mn and r = y - m(X) the negative bound is

    0.5 log|Q + s2 I| + 0.5 r^T (Q + s2 I)^-1 r + 0.5 n log(2 pi)
        + 0.5 tr(K_nn - Q) / s2

It is evaluated through L_m = chol(K_mm + jitter I), A = L_m^-1 K_mn and
L_b = chol(s2 I + A A^T), so nothing larger than (m, n) is formed. All
reductions run in a fixed order over a fixed layout, so repeated calls on
the same inputs give identical results.
"""

import math

import torch
from attrs import define

from sparsegp.errors import DimensionMismatchError, NumericalInstabilityError
from sparsegp.utils import logging_utils, math_utils

logger = logging_utils.get_logger(__name__)


@define(frozen=True, eq=False)
class PosteriorStatistics:
    chol_mm: torch.Tensor
    proj_mn: torch.Tensor
    chol_b: torch.Tensor
    proj_residual: torch.Tensor
    residual: torch.Tensor
    noise_variance: torch.Tensor
    trace_correction: torch.Tensor


@define(frozen=True, eq=False)
class BoundAdjoints:
    """Partial derivatives of the negative bound w.r.t. its matrix inputs."""
    K_mm: torch.Tensor
    K_mn: torch.Tensor
    diag_nn: torch.Tensor
    mean: torch.Tensor
    noise_variance: torch.Tensor


def cholesky(K: torch.Tensor, name: str = 'K') -> torch.Tensor:
    chol, info = torch.linalg.cholesky_ex(K, upper=False)
    if info.item() != 0:
        logger.warning(f'Cholesky factorization of {name} ({K.shape[0]}x{K.shape[1]}) failed at minor {info.item()}')
        raise NumericalInstabilityError(
            f'{name} is not positive definite, the leading minor of order {info.item()} is not positive. '
            'Increase the inducing noise and retry'
        )
    return chol


def compute_posterior_statistics(
    K_mm: torch.Tensor,
    K_mn: torch.Tensor,
    diag_nn: torch.Tensor,
    residual: torch.Tensor,
    noise_variance: torch.Tensor,
    jitter: float
) -> PosteriorStatistics:
    if K_mm.shape[0] != K_mn.shape[0] or K_mn.shape[1] != diag_nn.shape[0] or residual.shape[0] != diag_nn.shape[0]:
        raise DimensionMismatchError(
            f'Incompatible shapes K_mm {tuple(K_mm.shape)}, K_mn {tuple(K_mn.shape)}, '
            f'diag_nn {tuple(diag_nn.shape)}, residual {tuple(residual.shape)}'
        )
    if float(noise_variance) == 0.0:
        raise ArithmeticError('Noise variance is zero, the variational bound is undefined')

    chol_mm = cholesky(math_utils.add_jitter(K_mm, jitter), 'K_mm')
    proj_mn = torch.linalg.solve_triangular(chol_mm, K_mn, upper=False)
    chol_b = cholesky(math_utils.add_jitter(proj_mn @ proj_mn.mT, noise_variance), 'B')
    proj_residual = torch.linalg.solve_triangular(chol_b, proj_mn @ residual, upper=False)
    # sum over training points of diag(K_nn) - diag(Q)
    trace_correction = torch.sum(diag_nn) - torch.sum(proj_mn ** 2)
    logger.debug(f'Factorized K_mm {tuple(K_mm.shape)} and B with n={K_mn.shape[1]}')
    return PosteriorStatistics(
        chol_mm=chol_mm,
        proj_mn=proj_mn,
        chol_b=chol_b,
        proj_residual=proj_residual,
        residual=residual,
        noise_variance=noise_variance,
        trace_correction=trace_correction
    )


def neg_log_marginal_likelihood(stats: PosteriorStatistics) -> torch.Tensor:
    n = stats.proj_mn.shape[1]
    m = stats.proj_mn.shape[0]
    s2 = stats.noise_variance
    nlml = 0.5 * (n - m) * torch.log(s2) \
        + math_utils.sum_log_diag(stats.chol_b) \
        + 0.5 * n * math.log(2 * math.pi) \
        + 0.5 * (torch.sum(stats.residual ** 2) - torch.sum(stats.proj_residual ** 2)) / s2 \
        + 0.5 * stats.trace_correction / s2
    return nlml


def neg_log_marginal_likelihood_adjoints(stats: PosteriorStatistics) -> BoundAdjoints:
    """Closed-form derivatives of the negative bound.

    With S = Q + s2 I, alpha = S^-1 r and H = S^-1 - alpha alpha^T - I / s2,
    the derivative w.r.t. Q is H / 2. Pushing it through
    Q = K_nm K_mm^-1 K_mn with P = K_mm^-1 K_mn = L_m^-T A gives

        dK_mn = P H,    dK_mm = -P H P^T / 2,

    and further dm = -alpha, d diag(K_nn) = 1 / (2 s2),
    ds2 = tr(S^-1) / 2 - alpha^T alpha / 2 - tr(K_nn - Q) / (2 s2^2).
    """
    chol_mm, A, chol_b = stats.chol_mm, stats.proj_mn, stats.chol_b
    r, s2 = stats.residual, stats.noise_variance
    n = A.shape[1]

    C = A @ A.mT
    binv_c = torch.cholesky_solve(C, chol_b, upper=False)
    binv_ar = torch.cholesky_solve(A @ r, chol_b, upper=False)
    alpha = (r - A.mT @ binv_ar) / s2
    a_alpha = A @ alpha

    # S^-1 - I / s2 = -A^T B^-1 A / s2
    h_at = -(A.mT @ binv_c) / s2 - alpha @ a_alpha.mT
    a_h_at = -(C @ binv_c) / s2 - a_alpha @ a_alpha.mT

    adj_mn = torch.linalg.solve_triangular(chol_mm.mT, h_at.mT, upper=True)
    tmp = torch.linalg.solve_triangular(chol_mm.mT, a_h_at, upper=True)
    adj_mm = -0.5 * torch.linalg.solve_triangular(chol_mm.mT, tmp.mT, upper=True)

    adj_diag = torch.full((n,), 0.5, dtype=A.dtype, device=A.device) / s2
    trace_inv_s = (n - torch.trace(binv_c)) / s2
    adj_s2 = 0.5 * trace_inv_s - 0.5 * torch.sum(alpha ** 2) - 0.5 * stats.trace_correction / s2 ** 2

    return BoundAdjoints(
        K_mm=adj_mm,
        K_mn=adj_mn,
        diag_nn=adj_diag,
        mean=-alpha,
        noise_variance=adj_s2
    )


def posterior_weights(stats: PosteriorStatistics) -> torch.Tensor:
    """(s2 K_mm + K_mn K_nm)^-1 K_mn r, so that the predictive mean is K_*m @ weights + m(X_*)."""
    tmp = torch.linalg.solve_triangular(stats.chol_b.mT, stats.proj_residual, upper=True)
    return torch.linalg.solve_triangular(stats.chol_mm.mT, tmp, upper=True)
