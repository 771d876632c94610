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

from attrs import define, field

from sparsegp.optimization.abstractions import LearningRate
from sparsegp.utils import attrs_utils


@define(eq=False)
class ConstLearningRate(LearningRate):
    _learning_rate: float = field(converter=float, validator=attrs_utils.assert_positive)

    def get_learning_rate(self, iter_counter: int) -> float:
        return self._learning_rate


@define(eq=False)
class InverseScalingLearningRate(LearningRate):
    """initial_learning_rate / (intercept + slope * iter_counter) ** exponent"""
    _initial_learning_rate: float = field(converter=float, validator=attrs_utils.assert_positive)
    _slope: float = field(default=1.0, converter=float, validator=attrs_utils.assert_not_negative)
    _exponent: float = field(default=0.5, converter=float, validator=attrs_utils.assert_not_negative)
    _intercept: float = field(default=1.0, converter=float, validator=attrs_utils.assert_positive)

    def get_learning_rate(self, iter_counter: int) -> float:
        return self._initial_learning_rate / (self._intercept + self._slope * iter_counter) ** self._exponent
