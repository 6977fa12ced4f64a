# -*- test-case-name: earl.config.test.test_config -*-

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
Earl configuration
"""

import contextlib
from configparser import ConfigParser, NoOptionError, NoSectionError
from os import environ
from pathlib import Path
from typing import Any, ClassVar

from attrs import evolve, field, frozen, mutable
from twisted.logger import InvalidLogLevelError, Logger, LogLevel

from earl.auth import CodePolicy
from earl.auth._codes import DEFAULT_MINIMUM_LENGTH
from earl.ext.enum import Enum, Names, auto
from earl.store import FileUserDirectory


__all__ = ()


@mutable
class ConfigurationError(Exception):
    """
    Configuration error.
    """

    message: str


class LogFormat(Names):
    """
    Log formats.
    """

    text = auto()
    json = auto()


@frozen(kw_only=True)
class ConfigFileParser:
    """
    Configuration parser.
    """

    _log: ClassVar[Logger] = Logger()

    path: Path | None
    _configParser: ConfigParser = field(factory=ConfigParser)

    def __attrs_post_init__(self) -> None:
        if self.path is None:
            self._log.info("No configuration file specified.")
            return

        for _okFile in self._configParser.read(str(self.path)):
            self._log.info("Read configuration file: {path}", path=self.path)
            break
        else:
            self._log.error(
                "Unable to read configuration file: {path}", path=self.path
            )

    def valueFromConfig(
        self, variable: str, section: str, option: str, default: str = ""
    ) -> str:
        value = environ.get(f"EARL_{variable}")

        if not value:
            with contextlib.suppress(NoSectionError, NoOptionError):
                value = self._configParser.get(section, option)

        if value:
            return value
        return default

    def pathFromConfig(
        self, variable: str, section: str, option: str, root: Path, name: str
    ) -> Path:
        text = self.valueFromConfig(variable, section, option)

        if text:
            path = Path(text)
        else:
            path = Path(name)

        if not path.is_absolute():
            path = root.resolve() / path

        return path

    def intFromConfig(
        self, variable: str, section: str, option: str, default: int
    ) -> int:
        text = self.valueFromConfig(variable, section, option)

        if not text:
            return default

        try:
            return int(text)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid integer {text!r} for {section}.{option}"
            ) from e

    def enumFromConfig(
        self, variable: str, section: str, option: str, default: Enum
    ) -> Enum:
        name = self.valueFromConfig(variable, section, option)

        if not name:
            return default

        try:
            return type(default)[name]
        except KeyError as e:
            raise ConfigurationError(
                f"Invalid option {name!r} for {section}.{option}"
            ) from e


@frozen(kw_only=True)
class Configuration:
    """
    Configuration
    """

    _log: ClassVar[Logger] = Logger()

    @mutable(kw_only=True, eq=False)
    class _State:
        """
        Internal mutable state for :class:`Configuration`.
        """

        directory: FileUserDirectory | None = None

    @classmethod
    def fromConfigFile(cls, configFile: Path | None) -> "Configuration":
        """
        Load the configuration.
        """
        parser = ConfigFileParser(path=configFile)

        if configFile is None:
            defaultRoot = Path.cwd()
        else:
            defaultRoot = configFile.parent

        usersFile = parser.pathFromConfig(
            "USERS_FILE", "Core", "UsersFile", defaultRoot, "users.csv"
        )
        cls._log.info("Users file: {path}", path=usersFile)

        minimumCodeLength = parser.intFromConfig(
            "MINIMUM_CODE_LENGTH",
            "Codes",
            "MinimumLength",
            DEFAULT_MINIMUM_LENGTH,
        )
        if minimumCodeLength < 1:
            raise ConfigurationError(
                f"Minimum code length must be positive: {minimumCodeLength}"
            )
        cls._log.info(
            "Minimum code length: {length}", length=minimumCodeLength
        )

        codeSalt = parser.valueFromConfig("CODE_SALT", "Codes", "Salt")
        cls._log.info(
            "Code salt is set: {codeSaltIsSet}", codeSaltIsSet=bool(codeSalt)
        )

        logLevelName = parser.valueFromConfig(
            "LOG_LEVEL", "Core", "LogLevel", "info"
        )
        try:
            LogLevel.levelWithName(logLevelName)
        except InvalidLogLevelError as e:
            raise ConfigurationError(
                f"Invalid log level: {logLevelName}"
            ) from e
        cls._log.info("LogLevel: {logLevel}", logLevel=logLevelName)

        logFormat = parser.enumFromConfig(
            "LOG_FORMAT", "Core", "LogFormat", LogFormat.text
        )
        cls._log.info("LogFormat: {logFormat}", logFormat=logFormat)

        return cls(
            configFile=configFile,
            usersFile=usersFile,
            minimumCodeLength=minimumCodeLength,
            codeSalt=codeSalt,
            logLevelName=logLevelName,
            logFormat=logFormat,
        )

    configFile: Path | None
    usersFile: Path
    minimumCodeLength: int = DEFAULT_MINIMUM_LENGTH
    codeSalt: str = field(default="", repr=lambda _: "*")
    logLevelName: str = "info"
    logFormat: Enum = LogFormat.text

    _state: _State = field(factory=_State, init=False, eq=False)

    def __str__(self) -> str:
        return (
            f"Configuration file: {self.configFile}\n"
            f"\n"
            f"Core.UsersFile: {self.usersFile}\n"
            f"Core.LogLevel: {self.logLevelName}\n"
            f"Core.LogFormat: {self.logFormat.name}\n"
            f"\n"
            f"Codes.MinimumLength: {self.minimumCodeLength}\n"
        )

    def replace(self, **kwargs: Any) -> "Configuration":
        """
        Return a new configuration with the given attributes replaced.
        """
        return evolve(self, **kwargs)

    @property
    def codePolicy(self) -> CodePolicy:
        return CodePolicy(
            minimumLength=self.minimumCodeLength, salt=self.codeSalt
        )

    @property
    def directory(self) -> FileUserDirectory:
        """
        User directory.
        """
        if self._state.directory is None:
            self._state.directory = FileUserDirectory(
                path=self.usersFile, policy=self.codePolicy
            )

        return self._state.directory
