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

from typing import Sequence, Union

import numpy as np
import torch

from sparsegp.errors import DimensionMismatchError


def bray_curtis_distance(a: Union[Sequence[float], np.ndarray], b: Union[Sequence[float], np.ndarray]) -> float:
    """Bray-Curtis dissimilarity sum|a - b| / sum|a + b|.

    Returns 0.0 when the normalizer is exactly zero (e.g. both vectors are
    all zeros) instead of dividing by it.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatchError(f'Vectors must have equal length. Given {a.shape} and {b.shape}')
    s1 = np.sum(np.abs(a - b))
    s2 = np.sum(np.abs(a + b))
    # trap division by zero
    if s2 == 0:
        return 0.0
    return float(s1 / s2)


def sum_log_diag(chol: torch.Tensor) -> torch.Tensor:
    """Half the log-determinant of chol @ chol.T."""
    return torch.sum(torch.log(torch.diagonal(chol, dim1=-2, dim2=-1)), dim=-1)


def add_jitter(K: torch.Tensor, jitter: float) -> torch.Tensor:
    return K + jitter * torch.eye(K.shape[-1], dtype=K.dtype, device=K.device)
