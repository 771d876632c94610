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

from typing import Any, Union

import attrs
import torch

from sparsegp.errors import ConfigurationError, MisconfiguredInferenceError


def assert_not_negative(instance: Any, attribute: attrs.Attribute, value: Union[float, int]):
    if value < 0:
        raise ConfigurationError(f'{attribute.name} must be non-negative. Given {value}')


def assert_positive(instance: Any, attribute: attrs.Attribute, value: Union[float, int]):
    if value <= 0:
        raise ConfigurationError(f'{attribute.name} must be positive. Given {value}')


def assert_in_unit_interval(instance: Any, attribute: attrs.Attribute, value: float):
    if not 0 <= value <= 1:
        raise ConfigurationError(f'{attribute.name} must lie in [0, 1]. Given {value}')


def assert_not_none(instance: Any, attribute: attrs.Attribute, value: Any):
    if value is None:
        raise MisconfiguredInferenceError(f'{attribute.name} must be set')


def assert_2dtensor(instance, attribute, value):
    if not isinstance(value, torch.Tensor):
        raise TypeError(f"{attribute.name}: expected Tensor, got {type(value)}")
    if value.dim() != 2:
        raise ValueError(f"{attribute.name}: expected 2D Tensor, got {value.dim()}D Tensor")
