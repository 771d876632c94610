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

import logging

from sparsegp.utils import logging_utils


def test_get_logger_is_child_of_root():
    assert logging_utils.get_logger('inference.var_dtc').name == 'sparsegp.inference.var_dtc'
    assert logging_utils.get_logger('sparsegp.optimization').name == 'sparsegp.optimization'
    assert logging_utils.get_logger('other', force_name=True).name == 'other'


def test_set_log_level():
    logger = logging_utils.get_logger(__name__)
    try:
        logging_utils.set_log_level(logging.DEBUG)
        assert logger.isEnabledFor(logging.DEBUG)
        logging_utils.set_log_level(logging.WARNING)
        assert not logger.isEnabledFor(logging.INFO)
    finally:
        logging_utils.set_log_level(logging_utils.DEFAULT_LOG_LEVEL)
