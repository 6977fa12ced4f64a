# -*- test-case-name: earl.run.test.test_options -*-

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
Command line options for the Earl tool.
"""

from collections.abc import Mapping, MutableMapping, Sequence
from datetime import datetime as DateTime
from pathlib import Path
from sys import stderr, stdout
from textwrap import dedent
from typing import IO, Any, ClassVar, cast

from twisted.application.runner._exit import ExitStatus, exit
from twisted.logger import (
    InvalidLogLevelError,
    LogLevel,
    jsonFileLogObserver,
    textFileLogObserver,
)
from twisted.python.usage import Options as BaseOptions
from twisted.python.usage import UsageError

from earl import __version__ as version
from earl.config import Configuration, LogFormat
from earl.store.csv import TIMESTAMP_FORMAT


__all__ = ()


def openFile(fileName: str, mode: str) -> IO[Any]:
    """
    Open a file for writing, given a name.
    Handles "-" and "+" as stdout/stderr.
    """
    if fileName == "-":
        return stdout
    if fileName == "+":
        return stderr

    try:
        return open(fileName, mode)
    except OSError as e:
        exit(ExitStatus.EX_IOERR, f"Unable to open file {fileName!r}: {e}")


def parseTime(text: str) -> DateTime:
    try:
        return DateTime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise UsageError(f"Invalid time (use YYYY-MM-DD HH:MM): {text}") from e


class Options(BaseOptions):
    """
    Options, cleaned up
    """

    def opt_version(self) -> None:
        """
        Print version and exit.
        """
        exit(ExitStatus.EX_OK, f"{version}")


class TimedOptions(Options):
    """
    Options for commands which evaluate access at a point in time.
    """

    def opt_at(self, text: str) -> None:
        """
        Time to evaluate access at ("YYYY-MM-DD HH:MM"; default: now)
        """
        self["now"] = parseTime(text)

    def postOptions(self) -> None:
        super().postOptions()

        if "now" not in self:
            self["now"] = DateTime.now()


class CheckOptions(TimedOptions):
    """
    Command line options for the user file check tool.
    """


class AuthorizeOptions(TimedOptions):
    """
    Command line options for the access decision tool.
    """

    def parseArgs(self, code: str) -> None:  # type: ignore[override]
        """
        Handle code.
        """
        self["code"] = code


class HashCodeOptions(Options):
    """
    Command line options for the code hashing tool.
    """

    def parseArgs(self, code: str) -> None:  # type: ignore[override]
        """
        Handle code.
        """
        self["code"] = code


class EarlOptions(Options):
    """
    Command line options for all Earl commands.
    """

    defaultLogLevel: ClassVar = LogLevel.info

    subCommands: ClassVar = [
        ["check", None, CheckOptions, "Report the status of all users"],
        ["authorize", None, AuthorizeOptions, "Decide access for a code"],
        ["hash_code", None, HashCodeOptions, "Hash a code"],
    ]

    def getSynopsis(self) -> str:
        return f"{Options.getSynopsis(self)} command [command_options]"

    def opt_config(self, path: str) -> None:
        """
        Location of configuration file.
        """
        cast(MutableMapping[str, Any], self)["configFile"] = Path(path)

    def opt_log_level(self, levelName: str) -> None:
        """
        Set default log level.
        (options: {options}; default: "{default}")
        """
        try:
            self["logLevel"] = LogLevel.levelWithName(levelName)
        except InvalidLogLevelError as e:
            raise UsageError(f"Invalid log level: {levelName}") from e

    opt_log_level.__doc__ = dedent(cast(str, opt_log_level.__doc__)).format(
        options=", ".join(
            f'"{level.name}"' for level in LogLevel.iterconstants()
        ),
        default=defaultLogLevel.name,
    )

    def opt_log_file(self, fileName: str) -> None:
        """
        Log to file. ("-" for stdout, "+" for stderr; default: "+")
        """
        self["logFileName"] = fileName

    def opt_log_format(self, logFormatName: str) -> None:
        """
        Log file format.
        (options: "text", "json"; default: "text")
        """
        try:
            logFormat = LogFormat[logFormatName.lower()]
        except KeyError:
            raise UsageError(f"Invalid log format: {logFormatName}") from None

        if logFormat is LogFormat.text:
            self["fileLogObserverFactory"] = textFileLogObserver
        elif logFormat is LogFormat.json:
            self["fileLogObserverFactory"] = jsonFileLogObserver
        else:
            raise AssertionError(f"Unhandled LogFormat: {logFormat}")

        self["logFormat"] = logFormat

    opt_log_format.__doc__ = dedent(cast(str, opt_log_format.__doc__))

    def initConfig(self) -> None:
        try:
            configFile = cast(
                Path | None, cast(Mapping[str, Any], self).get("configFile")
            )

            if configFile is not None and not configFile.is_file():
                exit(ExitStatus.EX_CONFIG, "Config file not found.")

            configuration = Configuration.fromConfigFile(configFile)

            options = cast(MutableMapping[str, Any], self)

            if "logFormat" in options:
                configuration = configuration.replace(
                    logFormat=options["logFormat"]
                )
            else:
                self.opt_log_format(configuration.logFormat.name)

            if "logLevel" in options:
                configuration = configuration.replace(
                    logLevelName=options["logLevel"].name
                )
            else:
                self.opt_log_level(configuration.logLevelName)

            options["configuration"] = configuration

        except Exception as e:
            exit(ExitStatus.EX_CONFIG, str(e))

    def initLogFile(self) -> None:
        self["logFile"] = openFile(self.get("logFileName", "+"), "a")

    def parseOptions(self, options: Sequence[str] | None = None) -> None:
        super().parseOptions(options=options)

        self.initLogFile()

    def postOptions(self) -> None:
        super().postOptions()

        if self.subCommand is None:
            raise UsageError("No subcommand specified.")

        self.subOptions["stdout"] = stdout

        self.initConfig()
