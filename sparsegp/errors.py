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


class SparseGPError(Exception):
    """Base class of the errors raised by sparsegp."""


class ConfigurationError(SparseGPError, ValueError):
    """Missing or invalid setup, detected before any expensive computation."""


class MisconfiguredInferenceError(ConfigurationError):
    """A required collaborator of an inference method is missing."""


class DimensionMismatchError(SparseGPError, ValueError):
    """Two paired inputs have incompatible shapes."""


class NumericalInstabilityError(SparseGPError, ArithmeticError):
    """A factorization cannot proceed, e.g. the matrix is not positive definite."""


class UnknownParameterError(SparseGPError, KeyError):
    """Lookup of a parameter that was never registered."""
