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

from sparsegp.errors import DimensionMismatchError
from sparsegp.optimization.abstractions import DescendUpdater
from sparsegp.utils import attrs_utils


@define(eq=False)
class GradientDescendUpdater(DescendUpdater):
    def get_delta(self, gradient: torch.Tensor, learning_rate: float) -> torch.Tensor:
        return learning_rate * gradient


@define(eq=False)
class MomentumDescendUpdater(DescendUpdater):
    """v <- momentum * v + learning_rate * gradient; the step is v."""
    _momentum: float = field(default=0.9, converter=float, validator=attrs_utils.assert_in_unit_interval)
    _velocity: torch.Tensor | None = field(default=None, init=False)

    @property
    def velocity(self) -> torch.Tensor | None:
        return self._velocity

    def get_delta(self, gradient: torch.Tensor, learning_rate: float) -> torch.Tensor:
        if self._velocity is None:
            self._velocity = torch.zeros_like(gradient)
        elif self._velocity.shape != gradient.shape:
            raise DimensionMismatchError(
                f'Gradient shape {tuple(gradient.shape)} differs from velocity shape {tuple(self._velocity.shape)}'
            )
        self._velocity = self._momentum * self._velocity + learning_rate * gradient
        return self._velocity
