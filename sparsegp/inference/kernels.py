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

import math

import torch
import torch.nn as nn

from sparsegp.inference import kernel_impl


class GaussianKernel(nn.Module):
    """k(x, y) = exp(-|x - y|^2 / width), with width = 2 * exp(2 * log_width).

    log_width is the log of the usual lengthscale.
    """

    def __init__(self, width: float = 2.0, dtype: torch.dtype = torch.float64):
        super(GaussianKernel, self).__init__()
        if width <= 0:
            raise ValueError(f'width must be positive. Given {width}')
        self.log_width = nn.Parameter(torch.tensor(0.5 * math.log(width / 2.0), dtype=dtype))

    @property
    def width(self) -> torch.Tensor:
        return 2.0 * torch.exp(2.0 * self.log_width)

    def forward(self, X1: torch.Tensor, X2: torch.Tensor) -> torch.Tensor:
        return kernel_impl.rbf(X1, X2, self.width)

    def diag(self, X: torch.Tensor) -> torch.Tensor:
        return kernel_impl.stationary_diag(X)


class GaussianARDKernel(nn.Module):
    """k(x, y) = exp(-0.5 * |W (x - y)|^2) with W = diag(exp(log_weights)).

    A single shared weight is used unless ard_dim is given.
    """

    def __init__(self, weights: float = 1.0, ard_dim: int | None = None, dtype: torch.dtype = torch.float64):
        super(GaussianARDKernel, self).__init__()
        if weights <= 0:
            raise ValueError(f'weights must be positive. Given {weights}')
        shape = (ard_dim,) if ard_dim is not None else ()
        self.log_weights = nn.Parameter(torch.full(shape, math.log(weights), dtype=dtype))

    @property
    def weights(self) -> torch.Tensor:
        return torch.exp(self.log_weights)

    def forward(self, X1: torch.Tensor, X2: torch.Tensor) -> torch.Tensor:
        return kernel_impl.rbf_ard(X1, X2, self.weights)

    def diag(self, X: torch.Tensor) -> torch.Tensor:
        return kernel_impl.stationary_diag(X)
