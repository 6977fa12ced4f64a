# -*- test-case-name: earl.run.test.test_command -*-

##
# See the file COPYRIGHT for copyright information.
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
##

"""
Run the Earl tool.
"""

import sys
from collections.abc import Sequence
from typing import ClassVar

from attrs import frozen
from twisted.application.runner._exit import ExitStatus, exit
from twisted.logger import (
    FilteringLogObserver,
    Logger,
    LogLevelFilterPredicate,
    globalLogBeginner,
)
from twisted.python.usage import UsageError

from earl.config import Configuration
from earl.store import StorageError
from earl.store.csv import TIMESTAMP_FORMAT

from ._options import (
    AuthorizeOptions,
    CheckOptions,
    EarlOptions,
    HashCodeOptions,
)


__all__ = ()


@frozen(kw_only=True)
class Command:
    """
    Run the Earl tool.
    """

    log: ClassVar[Logger] = Logger()

    @staticmethod
    def options(argv: Sequence[str]) -> EarlOptions:
        """
        Parse command line options.
        """
        options = EarlOptions()

        try:
            options.parseOptions(argv[1:])
        except UsageError as e:
            exit(ExitStatus.EX_USAGE, f"Error: {e}\n\n{options}")

        return options

    @staticmethod
    def startLogging(options: EarlOptions) -> None:
        predicate = LogLevelFilterPredicate(
            defaultLogLevel=options.get("logLevel", options.defaultLogLevel)
        )
        observer = FilteringLogObserver(
            options["fileLogObserverFactory"](options["logFile"]),
            [predicate],
        )
        globalLogBeginner.beginLoggingTo(
            [observer], redirectStandardIO=False
        )

    @classmethod
    def runCheck(cls, config: Configuration, options: CheckOptions) -> None:
        now = options["now"]
        out = options["stdout"]

        for user in config.directory.users:
            valid, expires = user.validity(now)
            if expires is None:
                expiresText = "never"
            else:
                expiresText = expires.strftime(TIMESTAMP_FORMAT)

            if valid:
                validity = "valid"
            else:
                validity = "INVALID"

            out.write(
                f"{user}: {validity}; expires {expiresText}; "
                f"hours {user.accessHours()}\n"
            )

    @classmethod
    def runAuthorize(
        cls, config: Configuration, options: AuthorizeOptions
    ) -> None:
        decision = config.directory.authorize(options["code"], options["now"])

        if decision.granted:
            options["stdout"].write(f"Access granted: {decision.user}\n")
        else:
            options["stdout"].write(
                f"Access denied ({decision.reason.name}): {decision.user}\n"
            )

    @classmethod
    def runHashCode(
        cls, config: Configuration, options: HashCodeOptions
    ) -> None:
        policy = config.codePolicy
        code = options["code"]

        if not policy.meetsMinimum(code):
            exit(
                ExitStatus.EX_DATAERR,
                f"Code must be at least {policy.minimumLength} characters.",
            )

        options["stdout"].write(f"{policy.hash(code)}\n")

    @classmethod
    def run(cls, options: EarlOptions) -> None:
        """
        Run the selected subcommand.
        """
        config: Configuration = options["configuration"]
        subCommand = options.subCommand
        subOptions = options.subOptions

        try:
            if subCommand == "check":
                cls.runCheck(config, subOptions)
            elif subCommand == "authorize":
                cls.runAuthorize(config, subOptions)
            elif subCommand == "hash_code":
                cls.runHashCode(config, subOptions)
            else:
                raise AssertionError(f"Unknown subcommand: {subCommand}")
        except StorageError as e:
            cls.log.critical("Unable to access users: {error}", error=e)
            exit(ExitStatus.EX_IOERR, str(e))

    @classmethod
    def main(cls, argv: Sequence[str] = sys.argv) -> None:
        """
        Executable entry point for :class:`Command`.
        """
        options = cls.options(argv)
        cls.startLogging(options)
        cls.run(options)
