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

import pytest
import torch

from sparsegp.errors import DimensionMismatchError
from sparsegp.inference import kernels, kernel_impl

n1, n2, d = 20, 10, 3


def _naive_rbf_impl(X1, X2, lengthscale):
    K = torch.zeros(X1.shape[0], X2.shape[0], dtype=X1.dtype)
    for i in range(X1.shape[0]):
        for j in range(X2.shape[0]):
            K[i, j] = torch.exp(-0.5 * torch.sum(((X1[i] - X2[j]) / lengthscale) ** 2))
    return K


@pytest.mark.parametrize("kernel", [
    kernels.GaussianKernel(width=8.0),
    kernels.GaussianARDKernel(weights=0.5),
    kernels.GaussianARDKernel(weights=0.5, ard_dim=d),
])
class TestKernelRun:
    def test_kernel_2d(self, kernel):
        X1 = torch.randn(n1, d, dtype=torch.float64)
        X2 = torch.randn(n2, d, dtype=torch.float64)
        K = kernel(X1, X2)
        assert K.shape == (n1, n2)
        assert torch.allclose(K, _naive_rbf_impl(X1, X2, 2.0))

    def test_diag(self, kernel):
        X = torch.randn(n1, d, dtype=torch.float64)
        assert torch.allclose(kernel.diag(X), torch.diagonal(kernel(X, X)))

    def test_pd(self, kernel, num_run=20):
        for _ in range(num_run):
            X = torch.randn((n1, d), dtype=torch.float64)
            K = kernel(X, X) + 1e-6 * torch.eye(n1, dtype=torch.float64)
            _, info = torch.linalg.cholesky_ex(K)
            assert info.item() == 0


def test_gaussian_kernel_width():
    kernel = kernels.GaussianKernel(width=8.0)
    assert math.isclose(kernel.log_width.item(), math.log(2.0))
    assert math.isclose(kernel.width.item(), 8.0)
    assert len(list(kernel.parameters())) == 1


def test_ard_kernel_weights():
    kernel = kernels.GaussianARDKernel(weights=0.5, ard_dim=4)
    assert kernel.log_weights.shape == (4,)
    assert torch.allclose(kernel.weights, torch.full((4,), 0.5, dtype=torch.float64))


def test_ard_kernel_per_dimension():
    kernel = kernels.GaussianARDKernel(weights=1.0, ard_dim=2)
    with torch.no_grad():
        kernel.log_weights[1] = -1e3
    X1 = torch.tensor([[0.0, 0.0]], dtype=torch.float64)
    X2 = torch.tensor([[1.0, 100.0]], dtype=torch.float64)
    # the second dimension is switched off
    assert torch.allclose(kernel(X1, X2), torch.tensor([[math.exp(-0.5)]], dtype=torch.float64))


def test_kernel_gradient_at_zero_distance():
    kernel = kernels.GaussianKernel(width=2.0)
    X = torch.randn(5, d, dtype=torch.float64, requires_grad=True)
    kernel(X, X).sum().backward()
    assert torch.all(torch.isfinite(X.grad))
    assert torch.isfinite(kernel.log_width.grad)


def test_invalid_width():
    with pytest.raises(ValueError):
        kernels.GaussianKernel(width=0.0)
    with pytest.raises(ValueError):
        kernels.GaussianARDKernel(weights=-1.0)


def test_squared_distance_dimension_mismatch():
    with pytest.raises(DimensionMismatchError):
        kernel_impl.squared_distance(torch.zeros(3, 2), torch.zeros(3, 4))
