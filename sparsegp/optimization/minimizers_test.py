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

import pytest
import torch

from sparsegp.errors import ConfigurationError, NumericalInstabilityError
from sparsegp.optimization.abstractions import StochasticCostFunction
from sparsegp.optimization.learning_rates import ConstLearningRate
from sparsegp.optimization.minimizers import FirstOrderStochasticMinimizer, SGDMinimizer
from sparsegp.optimization.penalties import ElasticNetPenalty, L1Penalty, L2Penalty
from sparsegp.optimization.updaters import GradientDescendUpdater, MomentumDescendUpdater


class QuadraticCost(StochasticCostFunction):
    """0.5 * |w - target|^2 split into one sample per coordinate."""

    def __init__(self, target):
        self.target = torch.tensor(target, dtype=torch.float64)
        self.variable = torch.zeros_like(self.target)
        self.sample = -1

    def begin_sample(self):
        self.sample = -1

    def next_sample(self):
        self.sample += 1
        return self.sample < 1

    def obtain_variable_reference(self):
        return self.variable

    def get_gradient(self):
        return self.variable - self.target

    def get_cost(self):
        return 0.5 * torch.sum((self.variable - self.target) ** 2).item()


class FailingCost(QuadraticCost):
    def get_gradient(self):
        raise NumericalInstabilityError('K_mm is not positive definite')


def _configured_minimizer(cls=FirstOrderStochasticMinimizer):
    minimizer = cls(QuadraticCost([1.0, 2.0]))
    minimizer.set_gradient_updater(GradientDescendUpdater())
    minimizer.set_number_passes(3)
    return minimizer


class TestInitMinimization:
    def test_missing_cost_function(self):
        minimizer = FirstOrderStochasticMinimizer()
        minimizer.set_gradient_updater(GradientDescendUpdater())
        minimizer.set_number_passes(1)
        with pytest.raises(ConfigurationError):
            minimizer.init_minimization()

    def test_missing_updater(self):
        minimizer = FirstOrderStochasticMinimizer(QuadraticCost([1.0]))
        minimizer.set_number_passes(1)
        with pytest.raises(ConfigurationError):
            minimizer.init_minimization()

    def test_missing_passes(self):
        minimizer = FirstOrderStochasticMinimizer(QuadraticCost([1.0]))
        minimizer.set_gradient_updater(GradientDescendUpdater())
        with pytest.raises(ConfigurationError):
            minimizer.init_minimization()

    def test_resets_cur_passes_only(self):
        minimizer = _configured_minimizer(SGDMinimizer)
        minimizer.set_learning_rate(ConstLearningRate(0.1))
        minimizer.minimize()
        assert minimizer.cur_passes == 3
        assert minimizer.iter_counter == 3
        assert minimizer.is_exhausted
        minimizer.init_minimization()
        assert minimizer.cur_passes == 0
        assert minimizer.iter_counter == 3
        assert not minimizer.is_exhausted


class TestSetters:
    def test_invalid_values(self):
        minimizer = FirstOrderStochasticMinimizer()
        with pytest.raises(ConfigurationError):
            minimizer.set_gradient_updater(None)
        with pytest.raises(ConfigurationError):
            minimizer.set_number_passes(0)
        with pytest.raises(ConfigurationError):
            minimizer.set_number_passes(-2)
        with pytest.raises(ConfigurationError):
            minimizer.set_cost_function(None)
        with pytest.raises(ConfigurationError):
            minimizer.set_penalty_weight(-1.0)

    def test_same_updater_keeps_state(self):
        minimizer = FirstOrderStochasticMinimizer()
        updater = MomentumDescendUpdater(0.9)
        minimizer.set_gradient_updater(updater)
        updater.get_delta(torch.ones(2, dtype=torch.float64), 0.1)
        velocity = updater.velocity.clone()
        minimizer.set_gradient_updater(updater)
        assert minimizer.gradient_updater is updater
        assert torch.equal(updater.velocity, velocity)

    def test_replace_updater(self):
        minimizer = FirstOrderStochasticMinimizer()
        first, second = MomentumDescendUpdater(), MomentumDescendUpdater()
        minimizer.set_gradient_updater(first)
        minimizer.set_gradient_updater(second)
        assert minimizer.gradient_updater is second

    def test_same_learning_rate(self):
        minimizer = FirstOrderStochasticMinimizer()
        learning_rate = ConstLearningRate(0.1)
        minimizer.set_learning_rate(learning_rate)
        minimizer.set_learning_rate(learning_rate)
        assert minimizer.learning_rate is learning_rate
        minimizer.set_learning_rate(None)
        assert minimizer.learning_rate is None


class TestProximalOperation:
    def test_no_penalty(self):
        minimizer = FirstOrderStochasticMinimizer()
        variable = torch.tensor([0.5, -0.2], dtype=torch.float64)
        minimizer.do_proximal_operation(variable)
        assert torch.equal(variable, torch.tensor([0.5, -0.2], dtype=torch.float64))

    def test_non_proximal_penalty(self):
        minimizer = FirstOrderStochasticMinimizer()
        minimizer.set_penalty_type(L2Penalty())
        minimizer.set_penalty_weight(1.0)
        variable = torch.tensor([0.5, -0.2], dtype=torch.float64)
        minimizer.do_proximal_operation(variable)
        assert torch.equal(variable, torch.tensor([0.5, -0.2], dtype=torch.float64))

    def test_sparse_penalty_requires_learning_rate(self):
        minimizer = FirstOrderStochasticMinimizer()
        minimizer.set_penalty_type(L1Penalty())
        minimizer.set_penalty_weight(1.0)
        with pytest.raises(ConfigurationError):
            minimizer.do_proximal_operation(torch.ones(2, dtype=torch.float64))

    def test_sparse_penalty_scaled_by_learning_rate(self):
        minimizer = FirstOrderStochasticMinimizer()
        minimizer.set_penalty_type(L1Penalty())
        minimizer.set_penalty_weight(2.0)
        minimizer.set_learning_rate(ConstLearningRate(0.1))
        variable = torch.tensor([0.5, -0.1, 0.15, -1.0], dtype=torch.float64)
        minimizer.do_proximal_operation(variable)
        expected = torch.tensor([0.3, 0.0, 0.0, -0.8], dtype=torch.float64)
        assert torch.allclose(variable, expected)

    def test_elastic_net(self):
        minimizer = FirstOrderStochasticMinimizer()
        minimizer.set_penalty_type(ElasticNetPenalty(0.5))
        minimizer.set_penalty_weight(1.0)
        minimizer.set_learning_rate(ConstLearningRate(0.2))
        variable = torch.tensor([1.0, -0.05], dtype=torch.float64)
        minimizer.do_proximal_operation(variable)
        assert torch.allclose(variable, torch.tensor([0.9, 0.0], dtype=torch.float64))


class TestSGDMinimizer:
    def test_requires_learning_rate(self):
        minimizer = _configured_minimizer(SGDMinimizer)
        with pytest.raises(ConfigurationError):
            minimizer.minimize()

    def test_converges(self):
        fun = QuadraticCost([1.0, -2.0, 3.0])
        minimizer = SGDMinimizer(fun)
        minimizer.set_gradient_updater(GradientDescendUpdater())
        minimizer.set_learning_rate(ConstLearningRate(0.5))
        minimizer.set_number_passes(50)
        cost = minimizer.minimize()
        assert cost == pytest.approx(0.0, abs=1e-12)
        assert torch.allclose(fun.variable, fun.target)
        assert minimizer.iter_counter == 50

    def test_momentum_converges(self):
        fun = QuadraticCost([1.0, -2.0])
        minimizer = SGDMinimizer(fun)
        minimizer.set_gradient_updater(MomentumDescendUpdater(0.5))
        minimizer.set_learning_rate(ConstLearningRate(0.3))
        minimizer.set_number_passes(200)
        minimizer.minimize()
        assert torch.allclose(fun.variable, fun.target, atol=1e-8)

    def test_l1_sparsity(self):
        fun = QuadraticCost([3.0, 0.05, -2.0, -0.01])
        minimizer = SGDMinimizer(fun)
        minimizer.set_gradient_updater(GradientDescendUpdater())
        minimizer.set_learning_rate(ConstLearningRate(0.1))
        minimizer.set_penalty_type(L1Penalty())
        minimizer.set_penalty_weight(0.5)
        minimizer.set_number_passes(300)
        minimizer.minimize()
        expected = torch.tensor([2.5, 0.0, -1.5, 0.0], dtype=torch.float64)
        assert torch.allclose(fun.variable, expected, atol=1e-8)
        assert fun.variable[1].item() == 0.0
        assert fun.variable[3].item() == 0.0

    def test_l2_shrinks(self):
        fun = QuadraticCost([2.0])
        minimizer = SGDMinimizer(fun)
        minimizer.set_gradient_updater(GradientDescendUpdater())
        minimizer.set_learning_rate(ConstLearningRate(0.2))
        minimizer.set_penalty_type(L2Penalty())
        minimizer.set_penalty_weight(1.0)
        minimizer.set_number_passes(200)
        cost = minimizer.minimize()
        # argmin of 0.5 (w - 2)^2 + 0.5 w^2
        assert fun.variable.item() == pytest.approx(1.0)
        assert cost == pytest.approx(1.0)

    def test_errors_propagate(self):
        minimizer = SGDMinimizer(FailingCost([1.0]))
        minimizer.set_gradient_updater(GradientDescendUpdater())
        minimizer.set_learning_rate(ConstLearningRate(0.1))
        minimizer.set_number_passes(2)
        with pytest.raises(NumericalInstabilityError):
            minimizer.minimize()
        assert minimizer.cur_passes == 0
        assert minimizer.iter_counter == 0
