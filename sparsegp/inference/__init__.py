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

from sparsegp.inference.gradient_dict import GradientEntry, GradientParameterDictionary
from sparsegp.inference.kernel_impl import rbf, rbf_ard, squared_distance
from sparsegp.inference.kernels import GaussianKernel, GaussianARDKernel
from sparsegp.inference.likelihoods import GaussianLikelihood
from sparsegp.inference.means import ConstantMean, ZeroMean
from sparsegp.inference.var_dtc import VarDTCInference
