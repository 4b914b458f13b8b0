# Copyright 2025 Roger Cibrian
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

"""Console output for stratacfg.

Resolution, validation and flag evaluation report progress through one
process-wide logger. It is silent by default, so embedding stratacfg in a
service prints nothing; the ``strata`` CLI installs a DefaultLogger sized by
its ``-v``/``-d`` options.

Message kinds:

- step: ``[1/3] Building configuration layers...``; bootstrap progress
- warning: stderr; an environment value that could not be parsed
- verbose: environment selection, loaded files, validation summary
- debug: each checked path, merged layers, YAML content, HTTP sessions

Prefixes name the area a message comes from: CONFIG, MERGE, VALIDATE,
FLAGS, ENV and HTTP.

Example:
    ```python
    from stratacfg.logging import get_global_logger, get_logger, set_global_logger

    set_global_logger(get_logger(verbose=True))
    get_global_logger().verbose("CONFIG", "Applying 'staging' overlay")
    # [CONFIG] Applying 'staging' overlay
    ```
"""

from __future__ import annotations

import sys
from typing import Protocol


class Logger(Protocol):
    """What stratacfg modules call to report progress."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report bootstrap step ``step`` of ``total``."""
        ...

    def warning(self, prefix: str, message: str) -> None:
        """Report a recoverable problem, e.g. an unparsable ``PORT``."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        ...

    def debug(self, prefix: str, message: str) -> None:
        ...


class DefaultLogger:
    """Prints ``[PREFIX] message`` lines; warnings go to stderr.

    Args:
        verbose: Print verbose messages.
        debug: Print debug messages as well (implies verbose).
    """

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        self._verbose = verbose or debug
        self._debug = debug

    def step(self, step: int, total: int, message: str) -> None:
        print(f"[{step}/{total}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] WARNING: {message}", file=sys.stderr)

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            print(f"[{prefix}] {message}")


class SilentLogger:
    """Discards everything. The default until set_global_logger() is called."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a DefaultLogger for the CLI's -v / -d options."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the logger stratacfg modules report through."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the process-wide logger.

    Every stratacfg module reads it at call time, so the change applies to
    the next resolve, validation or flag check.
    """
    global _global_logger
    _global_logger = logger
