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
import re

SPARSEGP_ROOT_LOGGER_NAME = 'sparsegp'
DEFAULT_LOG_LEVEL = logging.INFO


def get_logger(name: str, force_name: bool = False) -> logging.Logger:
    """Child of the sparsegp root logger; its level is inherited from the root."""
    if not force_name and not re.search(rf"^{SPARSEGP_ROOT_LOGGER_NAME}(\.|$)", name):
        name = f"{SPARSEGP_ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="[%(levelname)s %(asctime)s %(filename)s:%(lineno)d] : %(message)s",
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def build_stream_handler(level: int = DEFAULT_LOG_LEVEL) -> logging.StreamHandler:
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(_build_formatter())
    return stream_handler


def set_log_level(level: int) -> None:
    """Change the verbosity of every sparsegp logger and of the root handlers."""
    ROOT_LOGGER.setLevel(level)
    for handler in ROOT_LOGGER.handlers:
        handler.setLevel(level)


ROOT_LOGGER = logging.getLogger(SPARSEGP_ROOT_LOGGER_NAME)
ROOT_LOGGER.propagate = False
ROOT_LOGGER.setLevel(DEFAULT_LOG_LEVEL)
ROOT_LOGGER.addHandler(build_stream_handler())
