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

from typing import Protocol, Union

import torch

from sparsegp.errors import DimensionMismatchError


class KernelProtocol(Protocol):
    def __call__(self, X1: torch.Tensor, X2: torch.Tensor, *args, **kwargs) -> torch.Tensor:
        pass


def squared_distance(X1: torch.Tensor, X2: torch.Tensor) -> torch.Tensor:
    """Pairwise squared euclidean distances between the rows of X1 and X2.

    Differentiable at zero distance, unlike torch.cdist.
    """
    if X1.shape[-1] != X2.shape[-1]:
        raise DimensionMismatchError(
            "X1 and X2 must have the same number of columns. Got {} and {}.".format(X1.shape, X2.shape)
        )
    diff = X1.unsqueeze(-2) - X2.unsqueeze(-3)
    return torch.sum(diff ** 2, dim=-1)


# === Kernel implementations ===

def _rbf_impl(r2: torch.Tensor):
    return torch.exp(-r2)


def rbf(
    X1: torch.Tensor,
    X2: torch.Tensor,
    width: Union[float, torch.Tensor]
) -> torch.Tensor:
    return _rbf_impl(squared_distance(X1, X2) / width)


def rbf_ard(
    X1: torch.Tensor,
    X2: torch.Tensor,
    weights: Union[float, torch.Tensor]
) -> torch.Tensor:
    return _rbf_impl(0.5 * squared_distance(X1 * weights, X2 * weights))


def stationary_diag(X: torch.Tensor) -> torch.Tensor:
    """k(x, x) of a stationary kernel normalised to one."""
    return torch.ones(X.shape[:-1], dtype=X.dtype, device=X.device)
