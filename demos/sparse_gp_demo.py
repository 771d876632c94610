import argparse
import logging

import numpy as np
import torch

from sparsegp.inference import ConstantMean, GaussianKernel, GaussianLikelihood, VarDTCInference
from sparsegp.optimization import (
    ConstLearningRate,
    GradientDescendUpdater,
    InferenceCostFunction,
    InverseScalingLearningRate,
    MomentumDescendUpdater,
    SGDMinimizer
)
from sparsegp.utils import logging_utils

parser = argparse.ArgumentParser()
parser.add_argument('--num_train', type=int, default=200)
parser.add_argument('--num_inducing', type=int, default=10)
parser.add_argument('--passes', type=int, default=200)
parser.add_argument('--lr', type=float, default=1e-4)
parser.add_argument('--updater', type=str, default='momentum', choices=['gd', 'momentum'])
parser.add_argument('--schedule', type=str, default='const', choices=['const', 'inverse'])
parser.add_argument('--optimize_inducing', action='store_true')
parser.add_argument('--seed', type=int, default=0)
parser.add_argument('--verbose', action='store_true')
args = parser.parse_args()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(filename)s [line:%(lineno)d] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__file__)
if args.verbose:
    logging_utils.set_log_level(logging.DEBUG)

# noisy sine data
rng = np.random.default_rng(args.seed)
train_X = rng.uniform(-3, 3, size=(args.num_train, 1))
train_Y = np.sin(2 * train_X) + 0.1 * rng.standard_normal(size=(args.num_train, 1))
test_X = np.linspace(-3, 3, 100).reshape(-1, 1)
test_Y = np.sin(2 * test_X)
train_X, train_Y, test_X = (torch.from_numpy(a) for a in (train_X, train_Y, test_X))
inducing_X = torch.linspace(-3, 3, args.num_inducing, dtype=torch.float64).reshape(-1, 1)

likelihood = GaussianLikelihood(0.5)
inference = VarDTCInference(
    GaussianKernel(width=1.0),
    train_X,
    ConstantMean(0.0),
    train_Y,
    likelihood,
    inducing_X,
    inducing_noise=1e-6,
    optimize_inducing_features=args.optimize_inducing
)
logger.info('initial negative log marginal likelihood: {}'.format(inference.get_negative_log_marginal_likelihood()))

minimizer = SGDMinimizer(InferenceCostFunction(inference))
if args.updater == 'gd':
    minimizer.set_gradient_updater(GradientDescendUpdater())
else:
    minimizer.set_gradient_updater(MomentumDescendUpdater(0.9))
if args.schedule == 'const':
    minimizer.set_learning_rate(ConstLearningRate(args.lr))
else:
    minimizer.set_learning_rate(InverseScalingLearningRate(args.lr))
minimizer.set_number_passes(args.passes)
cost = minimizer.minimize()

pred_Y = inference.get_posterior_mean(test_X).numpy()
rmse = np.sqrt(np.mean((pred_Y - test_Y) ** 2))
logger.info('final negative log marginal likelihood: {}'.format(cost))
logger.info('scale: {}, noise std: {}'.format(inference.get_scale(), likelihood.sigma.item()))
logger.info('test rmse: {}'.format(rmse))
