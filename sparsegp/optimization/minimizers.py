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

from typing import Optional

import torch
from attrs import define, field

from sparsegp.errors import ConfigurationError
from sparsegp.optimization.abstractions import DescendUpdater, LearningRate, Penalty, StochasticCostFunction
from sparsegp.utils import attrs_utils, logging_utils

logger = logging_utils.get_logger(__name__)


@define(eq=False)
class FirstOrderStochasticMinimizer:
    """State shared by first-order minimizers that visit the data in passes.

    Unconfigured -> init_minimization() -> per-step updates -> exhausted once
    cur_passes reaches num_passes. The minimizer borrows the variable it
    updates and does not catch errors raised by the cost function.
    """
    _fun: Optional[StochasticCostFunction] = field(default=None)
    _gradient_updater: Optional[DescendUpdater] = field(default=None, init=False)
    _learning_rate: Optional[LearningRate] = field(default=None, init=False)
    _penalty: Optional[Penalty] = field(default=None, init=False)
    _penalty_weight: float = field(default=0.0, converter=float, validator=attrs_utils.assert_not_negative)
    _penalty_is_proximal: bool = field(default=False, init=False)
    _penalty_is_sparse: bool = field(default=False, init=False)
    _num_passes: int = field(default=0, init=False)
    _cur_passes: int = field(default=0, init=False)
    _iter_counter: int = field(default=0, init=False)

    @property
    def num_passes(self) -> int:
        return self._num_passes

    @property
    def cur_passes(self) -> int:
        return self._cur_passes

    @property
    def iter_counter(self) -> int:
        return self._iter_counter

    @property
    def gradient_updater(self) -> Optional[DescendUpdater]:
        return self._gradient_updater

    @property
    def learning_rate(self) -> Optional[LearningRate]:
        return self._learning_rate

    @property
    def is_exhausted(self) -> bool:
        return self._num_passes > 0 and self._cur_passes >= self._num_passes

    def set_cost_function(self, fun: StochasticCostFunction) -> None:
        if fun is None:
            raise ConfigurationError('Cost function must be set')
        self._fun = fun

    def set_gradient_updater(self, gradient_updater: DescendUpdater) -> None:
        if gradient_updater is None:
            raise ConfigurationError('Gradient updater must be set')
        # the same instance keeps its internal state
        if self._gradient_updater is not gradient_updater:
            logger.debug(f'Gradient updater set to {type(gradient_updater).__name__}')
            self._gradient_updater = gradient_updater

    def set_learning_rate(self, learning_rate: Optional[LearningRate]) -> None:
        if self._learning_rate is not learning_rate:
            logger.debug(f'Learning rate set to {type(learning_rate).__name__}')
            self._learning_rate = learning_rate

    def set_number_passes(self, num_passes: int) -> None:
        if num_passes <= 0:
            raise ConfigurationError(f'The number ({num_passes}) to go through data must be positive')
        self._num_passes = int(num_passes)

    def set_penalty_type(self, penalty: Optional[Penalty]) -> None:
        self._penalty = penalty
        self._penalty_is_proximal = penalty is not None and penalty.supports_proximal
        self._penalty_is_sparse = penalty is not None and penalty.is_sparsity_inducing

    def set_penalty_weight(self, penalty_weight: float) -> None:
        self._penalty_weight = penalty_weight

    def init_minimization(self) -> None:
        if self._fun is None:
            raise ConfigurationError('Cost function must be set')
        if self._gradient_updater is None:
            raise ConfigurationError('Gradient updater must be set')
        if self._num_passes <= 0:
            raise ConfigurationError('The number to go through data must be set')
        # iter_counter keeps counting across re-initializations
        self._cur_passes = 0

    def update_gradient(self, gradient: torch.Tensor, variable: torch.Tensor) -> torch.Tensor:
        """Add the gradient of the smooth part of the penalty."""
        if self._penalty is None:
            return gradient
        return gradient + self._penalty_weight * self._penalty.get_penalty_gradient(variable)

    def get_penalty(self, variable: torch.Tensor) -> float:
        if self._penalty is None:
            return 0.0
        return self._penalty_weight * self._penalty.get_penalty(variable)

    def do_proximal_operation(self, variable: torch.Tensor) -> None:
        if not self._penalty_is_proximal:
            return
        proximal_weight = self._penalty_weight
        if self._penalty_is_sparse:
            if self._learning_rate is None:
                raise ConfigurationError(
                    'Learning rate must be set when a sparsity-inducing penalty (e.g. L1) is used'
                )
            proximal_weight *= self._learning_rate.get_learning_rate(self._iter_counter)
        self._penalty.update_variable_for_proximity(variable, proximal_weight)


@define(eq=False)
class SGDMinimizer(FirstOrderStochasticMinimizer):
    """Plain stochastic gradient descent over num_passes passes."""

    def init_minimization(self) -> None:
        super().init_minimization()
        if self._learning_rate is None:
            raise ConfigurationError('Learning rate must be set')

    def minimize(self) -> float:
        self.init_minimization()
        variable = self._fun.obtain_variable_reference()
        cost = None
        while self._cur_passes < self._num_passes:
            self._fun.begin_sample()
            while self._fun.next_sample():
                gradient = self.update_gradient(self._fun.get_gradient(), variable)
                learning_rate = self._learning_rate.get_learning_rate(self._iter_counter)
                self._gradient_updater.update_variable(variable, gradient, learning_rate)
                self.do_proximal_operation(variable)
                self._iter_counter += 1
            self._cur_passes += 1
            cost = self._fun.get_cost() + self.get_penalty(variable)
            logger.info(f'pass {self._cur_passes}/{self._num_passes}, cost: {cost}')
        return cost
