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

from typing import Any, Dict, Iterator, Sequence, Tuple

import torch
from attrs import define, field, validators

from sparsegp.errors import ConfigurationError, UnknownParameterError


@define(frozen=True)
class GradientEntry:
    owner: Any
    name: str = field(validator=validators.instance_of(str))
    buffer: torch.Tensor = field(validator=validators.instance_of(torch.Tensor))

    @property
    def variable(self) -> torch.Tensor:
        """The parameter tensor the gradient belongs to."""
        return getattr(self.owner, self.name)


@define
class GradientParameterDictionary:
    """Maps (owner, parameter name) to a gradient buffer of the parameter's shape.

    Owners are compared by identity, so two equal but distinct modules get
    separate entries. A buffer keeps the shape it was registered with.
    """
    _dtype: torch.dtype = field(default=torch.float64)
    _entries: Dict[Tuple[int, str], GradientEntry] = field(factory=dict, init=False)

    def register(self, owner: Any, name: str, shape: Sequence[int]) -> torch.Tensor:
        key = (id(owner), name)
        if key in self._entries:
            raise ConfigurationError(f'Parameter {name} of {type(owner).__name__} is already registered')
        buffer = torch.zeros(tuple(shape), dtype=self._dtype)
        self._entries[key] = GradientEntry(owner, name, buffer)
        return buffer

    def lookup(self, owner: Any, name: str) -> torch.Tensor:
        return self.entry(owner, name).buffer

    def entry(self, owner: Any, name: str) -> GradientEntry:
        try:
            return self._entries[(id(owner), name)]
        except KeyError:
            raise UnknownParameterError(
                f'Parameter {name} of {type(owner).__name__} is not registered'
            ) from None

    def entries(self) -> Iterator[GradientEntry]:
        return iter(self._entries.values())

    def __contains__(self, key: Tuple[Any, str]) -> bool:
        owner, name = key
        return (id(owner), name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
