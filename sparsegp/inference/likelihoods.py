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

import torch
import torch.nn as nn


class GaussianLikelihood(nn.Module):
    """Homoscedastic gaussian observation noise y = f + e, e ~ N(0, sigma^2)."""

    def __init__(self, sigma: float = 1.0, dtype: torch.dtype = torch.float64):
        super(GaussianLikelihood, self).__init__()
        if sigma < 0:
            raise ValueError(f'sigma must be non-negative. Given {sigma}')
        # sigma == 0 gives log_sigma == -inf and a zero noise variance
        self.log_sigma = nn.Parameter(torch.log(torch.tensor(sigma, dtype=dtype)))

    @property
    def sigma(self) -> torch.Tensor:
        return torch.exp(self.log_sigma)

    def noise_variance(self) -> torch.Tensor:
        return torch.exp(2.0 * self.log_sigma)
