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

import abc

import torch


class StochasticCostFunction(abc.ABC):
    """A differentiable cost visited one sample at a time.

    The minimizer updates the tensor returned by obtain_variable_reference in
    place; the cost function must read its parameters from that tensor.
    """

    @abc.abstractmethod
    def begin_sample(self) -> None:
        pass

    @abc.abstractmethod
    def next_sample(self) -> bool:
        pass

    @abc.abstractmethod
    def obtain_variable_reference(self) -> torch.Tensor:
        pass

    @abc.abstractmethod
    def get_gradient(self) -> torch.Tensor:
        pass

    @abc.abstractmethod
    def get_cost(self) -> float:
        pass


class DescendUpdater(abc.ABC):
    @abc.abstractmethod
    def get_delta(self, gradient: torch.Tensor, learning_rate: float) -> torch.Tensor:
        """Step to subtract from the variable. May update internal state."""

    def update_variable(self, variable: torch.Tensor, gradient: torch.Tensor, learning_rate: float) -> None:
        with torch.no_grad():
            variable.sub_(self.get_delta(gradient, learning_rate))


class LearningRate(abc.ABC):
    @abc.abstractmethod
    def get_learning_rate(self, iter_counter: int) -> float:
        pass


class Penalty(abc.ABC):
    """Regularizer added to the cost.

    Capabilities are declared with class flags: a proximal penalty implements
    update_variable_for_proximity, and a sparsity-inducing one needs the
    current learning rate to scale its proximal step.
    """
    supports_proximal: bool = False
    is_sparsity_inducing: bool = False

    @abc.abstractmethod
    def get_penalty(self, variable: torch.Tensor) -> float:
        pass

    @abc.abstractmethod
    def get_penalty_gradient(self, variable: torch.Tensor) -> torch.Tensor:
        """Gradient of the smooth part of the penalty."""

    def update_variable_for_proximity(self, variable: torch.Tensor, proximal_weight: float) -> None:
        raise NotImplementedError(f'{type(self).__name__} does not support proximal operations')
