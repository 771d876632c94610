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

from typing import Any, List, Tuple

import torch
from attrs import define, field, validators

from sparsegp.inference.gradient_dict import GradientParameterDictionary
from sparsegp.inference.var_dtc import VarDTCInference
from sparsegp.optimization.abstractions import StochasticCostFunction


@define(eq=False)
class InferenceCostFunction(StochasticCostFunction):
    """Negative log marginal likelihood of an inference method as a cost.

    The active parameters are flattened, in registration order, into one
    float64 vector. It is written back to the parameters before every
    evaluation. The whole data set is a single sample.
    """
    _inference: VarDTCInference = field(validator=validators.instance_of(VarDTCInference))
    _layout: List[Tuple[Any, str, int]] = field(factory=list, init=False)
    _variable: torch.Tensor = field(init=False)
    _pending_sample: bool = field(default=False, init=False)

    def __attrs_post_init__(self):
        gradient_dict = self._inference.build_gradient_parameter_dictionary(GradientParameterDictionary())
        values = []
        for entry in gradient_dict.entries():
            value = entry.variable.detach()
            self._layout.append((entry.owner, entry.name, value.numel()))
            values.append(value.reshape(-1).to(torch.float64))
        self._variable = torch.cat(values)

    def _write_back(self) -> None:
        offset = 0
        with torch.no_grad():
            for owner, name, numel in self._layout:
                target = getattr(owner, name)
                target.copy_(self._variable[offset:offset + numel].view_as(target))
                offset += numel

    def begin_sample(self) -> None:
        self._pending_sample = True

    def next_sample(self) -> bool:
        has_sample = self._pending_sample
        self._pending_sample = False
        return has_sample

    def obtain_variable_reference(self) -> torch.Tensor:
        return self._variable

    def get_gradient(self) -> torch.Tensor:
        self._write_back()
        gradient_dict = self._inference.build_gradient_parameter_dictionary(GradientParameterDictionary())
        self._inference.get_negative_log_marginal_likelihood_derivatives(gradient_dict)
        return torch.cat([
            gradient_dict.lookup(owner, name).reshape(-1) for owner, name, _ in self._layout
        ])

    def get_cost(self) -> float:
        self._write_back()
        return self._inference.get_negative_log_marginal_likelihood()
