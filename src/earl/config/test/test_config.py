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
Tests for :mod:`earl.config._config`
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from os import environ
from pathlib import Path

from hypothesis import given
from hypothesis.strategies import integers, sampled_from

from earl.auth import CodePolicy
from earl.ext.trial import TestCase
from earl.store import FileUserDirectory

from .._config import (
    ConfigFileParser,
    Configuration,
    ConfigurationError,
    LogFormat,
)


__all__ = ()


@contextmanager
def testingEnvironment(environment: Mapping[str, str]) -> Iterator[None]:
    savedEnvironment = environ.copy()

    environ.clear()
    environ.update(environment)

    try:
        yield

    finally:
        environ.clear()
        environ.update(savedEnvironment)


def writeConfig(path: Path, section: str, option: str, value: str) -> None:
    value = value.replace("%", "%%")
    path.write_text(f"[{section}]\n{option} = {value}\n")


class ConfigFileParserTests(TestCase):
    """
    Tests for :class:`ConfigFileParser`
    """

    def test_init_path_none(self) -> None:
        parser = ConfigFileParser(path=None)
        self.assertEqual(parser.valueFromConfig("X", "Core", "X", "dflt"), "dflt")

    def test_init_path_missing(self) -> None:
        path = Path(self.mktemp())

        with self.capturedLogEvents() as events:
            ConfigFileParser(path=path)

        self.assertLogged(events, "Unable to read configuration file")

    def test_valueFromConfig_file(self) -> None:
        path = Path(self.mktemp())
        writeConfig(path, "Core", "UsersFile", "/x/users.csv")

        with testingEnvironment({}):
            parser = ConfigFileParser(path=path)
            self.assertEqual(
                parser.valueFromConfig("USERS_FILE", "Core", "UsersFile"),
                "/x/users.csv",
            )

    def test_valueFromConfig_environment(self) -> None:
        """
        Environment variables override the configuration file.
        """
        path = Path(self.mktemp())
        writeConfig(path, "Core", "UsersFile", "/x/users.csv")

        with testingEnvironment({"EARL_USERS_FILE": "/y/users.csv"}):
            parser = ConfigFileParser(path=path)
            self.assertEqual(
                parser.valueFromConfig("USERS_FILE", "Core", "UsersFile"),
                "/y/users.csv",
            )

    def test_pathFromConfig_relative(self) -> None:
        root = Path(self.mktemp())

        with testingEnvironment({"EARL_USERS_FILE": "data/users.csv"}):
            parser = ConfigFileParser(path=None)
            self.assertEqual(
                parser.pathFromConfig(
                    "USERS_FILE", "Core", "UsersFile", root, "users.csv"
                ),
                root.resolve() / "data" / "users.csv",
            )

    def test_pathFromConfig_default(self) -> None:
        root = Path(self.mktemp())

        with testingEnvironment({}):
            parser = ConfigFileParser(path=None)
            self.assertEqual(
                parser.pathFromConfig(
                    "USERS_FILE", "Core", "UsersFile", root, "users.csv"
                ),
                root.resolve() / "users.csv",
            )

    @given(integers(min_value=-1000, max_value=1000))
    def test_intFromConfig(self, value: int) -> None:
        with testingEnvironment({"EARL_N": str(value)}):
            parser = ConfigFileParser(path=None)
            self.assertEqual(parser.intFromConfig("N", "Core", "N", 0), value)

    def test_intFromConfig_invalid(self) -> None:
        with testingEnvironment({"EARL_N": "six"}):
            parser = ConfigFileParser(path=None)
            e = self.assertRaises(
                ConfigurationError, parser.intFromConfig, "N", "Core", "N", 0
            )
            self.assertEqual(str(e), "Invalid integer 'six' for Core.N")

    @given(sampled_from(LogFormat))
    def test_enumFromConfig(self, logFormat: LogFormat) -> None:
        with testingEnvironment({"EARL_LOG_FORMAT": logFormat.name}):
            parser = ConfigFileParser(path=None)
            self.assertIdentical(
                parser.enumFromConfig(
                    "LOG_FORMAT", "Core", "LogFormat", LogFormat.text
                ),
                logFormat,
            )

    def test_enumFromConfig_invalid(self) -> None:
        with testingEnvironment({"EARL_LOG_FORMAT": "xml"}):
            parser = ConfigFileParser(path=None)
            e = self.assertRaises(
                ConfigurationError,
                parser.enumFromConfig,
                "LOG_FORMAT",
                "Core",
                "LogFormat",
                LogFormat.text,
            )
            self.assertEqual(str(e), "Invalid option 'xml' for Core.LogFormat")


class ConfigurationTests(TestCase):
    """
    Tests for :class:`Configuration`
    """

    def test_defaults(self) -> None:
        with testingEnvironment({}):
            config = Configuration.fromConfigFile(None)

        self.assertEqual(config.usersFile, Path.cwd().resolve() / "users.csv")
        self.assertEqual(config.minimumCodeLength, 6)
        self.assertEqual(config.codeSalt, "")
        self.assertEqual(config.logLevelName, "info")
        self.assertIdentical(config.logFormat, LogFormat.text)

    def test_configFile(self) -> None:
        root = Path(self.mktemp())
        root.mkdir()
        path = root / "earl.conf"
        path.write_text(
            "[Core]\n"
            "UsersFile = members.csv\n"
            "LogLevel = warn\n"
            "LogFormat = json\n"
            "[Codes]\n"
            "MinimumLength = 8\n"
            "Salt = pepper\n"
        )

        with testingEnvironment({}):
            config = Configuration.fromConfigFile(path)

        self.assertEqual(config.usersFile, root.resolve() / "members.csv")
        self.assertEqual(config.minimumCodeLength, 8)
        self.assertEqual(config.codeSalt, "pepper")
        self.assertEqual(config.logLevelName, "warn")
        self.assertIdentical(config.logFormat, LogFormat.json)
        self.assertEqual(
            config.codePolicy, CodePolicy(minimumLength=8, salt="pepper")
        )

    def test_minimumCodeLength_invalid(self) -> None:
        with testingEnvironment({"EARL_MINIMUM_CODE_LENGTH": "0"}):
            e = self.assertRaises(
                ConfigurationError, Configuration.fromConfigFile, None
            )
        self.assertEqual(str(e), "Minimum code length must be positive: 0")

    def test_logLevel_invalid(self) -> None:
        with testingEnvironment({"EARL_LOG_LEVEL": "loud"}):
            e = self.assertRaises(
                ConfigurationError, Configuration.fromConfigFile, None
            )
        self.assertEqual(str(e), "Invalid log level: loud")

    def test_str_hidesSalt(self) -> None:
        with testingEnvironment({"EARL_CODE_SALT": "pepper"}):
            config = Configuration.fromConfigFile(None)

        self.assertNotIn("pepper", str(config))
        self.assertNotIn("pepper", repr(config))

    def test_replace(self) -> None:
        with testingEnvironment({}):
            config = Configuration.fromConfigFile(None)

        self.assertEqual(
            config.replace(minimumCodeLength=9).minimumCodeLength, 9
        )

    def test_directory(self) -> None:
        with testingEnvironment({"EARL_CODE_SALT": "pepper"}):
            config = Configuration.fromConfigFile(None)

        directory = config.directory

        self.assertIsInstance(directory, FileUserDirectory)
        self.assertEqual(directory.path, config.usersFile)
        self.assertEqual(directory.policy, config.codePolicy)
        self.assertIdentical(config.directory, directory)
