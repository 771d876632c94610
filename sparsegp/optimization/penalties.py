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
from attrs import define, field

from sparsegp.optimization.abstractions import Penalty
from sparsegp.utils import attrs_utils


def soft_threshold(variable: torch.Tensor, threshold: float) -> None:
    """Shrink every entry towards zero by threshold, clipping at zero. In place."""
    with torch.no_grad():
        variable.copy_(torch.sign(variable) * torch.clamp(variable.abs() - threshold, min=0.0))


@define(eq=False)
class L2Penalty(Penalty):
    """0.5 * |w|^2"""

    def get_penalty(self, variable: torch.Tensor) -> float:
        return 0.5 * torch.sum(variable ** 2).item()

    def get_penalty_gradient(self, variable: torch.Tensor) -> torch.Tensor:
        return variable.detach().clone()


@define(eq=False)
class L1Penalty(Penalty):
    """|w|_1, handled by its proximal operator."""
    supports_proximal = True
    is_sparsity_inducing = True

    def get_penalty(self, variable: torch.Tensor) -> float:
        return torch.sum(variable.abs()).item()

    def get_penalty_gradient(self, variable: torch.Tensor) -> torch.Tensor:
        return torch.zeros_like(variable)

    def update_variable_for_proximity(self, variable: torch.Tensor, proximal_weight: float) -> None:
        soft_threshold(variable, proximal_weight)


@define(eq=False)
class ElasticNetPenalty(Penalty):
    """l1_ratio * |w|_1 + (1 - l1_ratio) * 0.5 * |w|^2"""
    supports_proximal = True
    is_sparsity_inducing = True

    _l1_ratio: float = field(default=0.5, converter=float, validator=attrs_utils.assert_in_unit_interval)

    def get_penalty(self, variable: torch.Tensor) -> float:
        l1 = torch.sum(variable.abs()).item()
        l2 = 0.5 * torch.sum(variable ** 2).item()
        return self._l1_ratio * l1 + (1.0 - self._l1_ratio) * l2

    def get_penalty_gradient(self, variable: torch.Tensor) -> torch.Tensor:
        return (1.0 - self._l1_ratio) * variable.detach()

    def update_variable_for_proximity(self, variable: torch.Tensor, proximal_weight: float) -> None:
        soft_threshold(variable, proximal_weight * self._l1_ratio)
