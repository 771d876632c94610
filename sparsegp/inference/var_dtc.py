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

import math
from typing import List, Tuple

import torch
import torch.nn as nn
from attrs import define, field, validators

from sparsegp.errors import ConfigurationError, DimensionMismatchError
from sparsegp.inference import objectives
from sparsegp.inference.gradient_dict import GradientParameterDictionary
from sparsegp.utils import attrs_utils, logging_utils

logger = logging_utils.get_logger(__name__)


def _as_column(labels):
    if isinstance(labels, torch.Tensor) and labels.dim() == 1:
        return labels.unsqueeze(-1)
    return labels


@define(eq=False)
class VarDTCInference:
    """Sparse GP regression with the variational DTC (VFE) approximation.

    Feature tensors are (num_examples, num_dims); labels are (n, 1). The
    tensors are borrowed, not copied: the engine reads them on every call and
    writes inducing features only through the gradient-based update of a
    minimizer. Nothing is cached between calls.

    Kernel matrices are multiplied by exp(2 * log_scale) = scale^2 before the
    jitter (inducing noise) is added to K_mm.
    """
    _kernel: nn.Module = field(validator=attrs_utils.assert_not_none)
    _features: torch.Tensor = field(validator=validators.and_(attrs_utils.assert_not_none, attrs_utils.assert_2dtensor))
    _mean: nn.Module = field(validator=attrs_utils.assert_not_none)
    _labels: torch.Tensor = field(
        converter=_as_column,
        validator=validators.and_(attrs_utils.assert_not_none, attrs_utils.assert_2dtensor)
    )
    _likelihood: nn.Module = field(validator=attrs_utils.assert_not_none)
    _inducing_features: torch.Tensor = field(
        validator=validators.and_(attrs_utils.assert_not_none, attrs_utils.assert_2dtensor)
    )

    _inducing_noise: float = field(
        default=1e-10,
        converter=float,
        validator=attrs_utils.assert_not_negative,
        kw_only=True
    )
    _optimize_inducing_features: bool = field(default=False, converter=bool, kw_only=True)
    _log_scale: torch.Tensor = field(init=False)

    def __attrs_post_init__(self):
        if self._features.shape[1] != self._inducing_features.shape[1]:
            raise DimensionMismatchError(
                f'Training features have {self._features.shape[1]} dimensions '
                f'but inducing features have {self._inducing_features.shape[1]}'
            )
        if self._features.shape[0] != self._labels.shape[0]:
            raise DimensionMismatchError(
                f'Got {self._features.shape[0]} training examples but {self._labels.shape[0]} labels'
            )
        self._log_scale = torch.zeros((), dtype=self._features.dtype, requires_grad=True)

    # === Configuration ===

    def set_inducing_noise(self, noise: float) -> None:
        self._inducing_noise = noise

    def get_inducing_noise(self) -> float:
        return self._inducing_noise

    def set_scale(self, scale: float) -> None:
        if not scale > 0:
            raise ConfigurationError(f'scale must be positive. Given {scale}')
        with torch.no_grad():
            self._log_scale.fill_(math.log(scale))

    def get_scale(self) -> float:
        return math.exp(self._log_scale.item())

    def enable_optimizing_inducing_features(self, flag: bool) -> None:
        self._optimize_inducing_features = flag

    @property
    def log_scale(self) -> torch.Tensor:
        return self._log_scale

    @property
    def inducing_features(self) -> torch.Tensor:
        return self._inducing_features

    # === Bound ===

    def _terms(self, inducing_features: torch.Tensor) -> Tuple[torch.Tensor, ...]:
        scale = torch.exp(2.0 * self._log_scale)
        K_mm = scale * self._kernel(inducing_features, inducing_features)
        K_mn = scale * self._kernel(inducing_features, self._features)
        diag_nn = scale * self._kernel.diag(self._features)
        mean = self._mean(self._features)
        noise_variance = self._likelihood.noise_variance()
        return K_mm, K_mn, diag_nn, mean, noise_variance

    def _statistics(self, K_mm, K_mn, diag_nn, mean, noise_variance) -> objectives.PosteriorStatistics:
        return objectives.compute_posterior_statistics(
            K_mm, K_mn, diag_nn, self._labels - mean, noise_variance, self._inducing_noise
        )

    def get_posterior_statistics(self) -> objectives.PosteriorStatistics:
        with torch.no_grad():
            return self._statistics(*self._terms(self._inducing_features))

    def get_negative_log_marginal_likelihood(self) -> float:
        nlml = objectives.neg_log_marginal_likelihood(self.get_posterior_statistics())
        logger.debug(f'negative log marginal likelihood: {nlml.item()}')
        return nlml.item()

    def get_posterior_mean(self, query_X: torch.Tensor) -> torch.Tensor:
        if query_X.shape[-1] != self._features.shape[1]:
            raise DimensionMismatchError(
                f'Query features have {query_X.shape[-1]} dimensions, expected {self._features.shape[1]}'
            )
        with torch.no_grad():
            weights = objectives.posterior_weights(self.get_posterior_statistics())
            K_qm = torch.exp(2.0 * self._log_scale) * self._kernel(query_X, self._inducing_features)
            return K_qm @ weights + self._mean(query_X)

    # === Gradients ===

    def build_gradient_parameter_dictionary(self, gradient_dict: GradientParameterDictionary) -> GradientParameterDictionary:
        """Register every active parameter.

        Kernel, mean and likelihood parameters are registered under the
        module that directly holds them, skipping frozen ones. The engine
        itself owns `log_scale` and, when enabled, `inducing_features`.
        """
        for component in (self._kernel, self._mean, self._likelihood):
            for module in component.modules():
                for name, param in module.named_parameters(recurse=False):
                    if param.requires_grad:
                        gradient_dict.register(module, name, param.shape)
        gradient_dict.register(self, 'log_scale', self._log_scale.shape)
        if self._optimize_inducing_features:
            gradient_dict.register(self, 'inducing_features', self._inducing_features.shape)
        return gradient_dict

    def get_negative_log_marginal_likelihood_derivatives(
        self,
        gradient_dict: GradientParameterDictionary
    ) -> GradientParameterDictionary:
        entries = list(gradient_dict.entries())
        if len(entries) == 0:
            return gradient_dict

        inducing_features = self._inducing_features.detach().requires_grad_(True)
        inputs: List[torch.Tensor] = []
        for entry in entries:
            if entry.owner is self and entry.name == 'inducing_features':
                inputs.append(inducing_features)
            else:
                inputs.append(entry.variable)

        with torch.enable_grad():
            terms = self._terms(inducing_features)
        with torch.no_grad():
            stats = self._statistics(*(t.detach() for t in terms))
            adjoints = objectives.neg_log_marginal_likelihood_adjoints(stats)
        adjoint_list = (adjoints.K_mm, adjoints.K_mn, adjoints.diag_nn, adjoints.mean, adjoints.noise_variance)

        # chain rule: contract each adjoint with the partial derivatives of its term
        outputs, grad_outputs = [], []
        for term, adjoint in zip(terms, adjoint_list):
            if term.requires_grad:
                outputs.append(term)
                grad_outputs.append(adjoint)

        if len(outputs) == 0:
            grads = [None] * len(inputs)
        else:
            grads = torch.autograd.grad(outputs, inputs, grad_outputs=grad_outputs, allow_unused=True)
        for entry, grad in zip(entries, grads):
            if grad is None:
                entry.buffer.zero_()
            else:
                entry.buffer.copy_(grad.detach())
        return gradient_dict
