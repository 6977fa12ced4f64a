# -*- test-case-name: earl.store.test.test_directory -*-

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
User directory.
"""

from collections.abc import Iterable, Sequence
from csv import reader as CSVReader, writer as CSVWriter
from datetime import datetime as DateTime
from pathlib import Path
from time import time
from typing import ClassVar

from attrs import field, frozen, mutable
from twisted.logger import Logger

from earl.auth import CodePolicy, defaultCodePolicy
from earl.ext.enum import Names, auto
from earl.model import User

from ._exceptions import StorageError
from .csv import usersFromCSV, writeUsers


__all__ = ()


class DecisionReason(Names):
    """
    Reason for an access decision.
    """

    granted = auto()
    unknownCode = auto()
    outsideValidity = auto()
    outsideHours = auto()


@frozen(kw_only=True)
class Decision:
    """
    Access decision for a presented code.
    """

    reason: DecisionReason
    user: User | None = None

    @property
    def granted(self) -> bool:
        return self.reason is DecisionReason.granted


@mutable(kw_only=True)
class UserDirectory:
    """
    Collection of users, with lookup by code.
    """

    _log: ClassVar[Logger] = Logger()

    users: list[User] = field(converter=list, factory=list)
    policy: CodePolicy = defaultCodePolicy

    def add(self, user: User) -> None:
        self.users.append(user)

    def lookupCode(self, hashedCode: str) -> User | None:
        """
        Look up the user holding the given hashed code.
        """
        for user in self.users:
            if user.hasCode(hashedCode):
                return user

        return None

    def authorize(self, code: str, now: DateTime) -> Decision:
        """
        Decide whether the given (plaintext) code opens a door at the given
        time.
        """
        user = self.lookupCode(self.policy.hash(code))

        if user is None:
            decision = Decision(reason=DecisionReason.unknownCode)
        elif not user.inValidityPeriod(now):
            decision = Decision(
                reason=DecisionReason.outsideValidity, user=user
            )
        elif not user.accessHours().includes(now.hour):
            decision = Decision(reason=DecisionReason.outsideHours, user=user)
        else:
            decision = Decision(reason=DecisionReason.granted, user=user)

        self._log.info(
            "Access {reason} for {user}",
            reason=decision.reason.name,
            user=decision.user,
        )
        return decision


def loadUsers(path: Path) -> Sequence[User]:
    """
    Load users from a CSV file.
    """
    try:
        with path.open(newline="") as fh:
            return tuple(usersFromCSV(CSVReader(fh)))
    except OSError as e:
        raise StorageError(f"Unable to read user file {path}: {e}") from e


def saveUsers(path: Path, users: Iterable[User]) -> None:
    """
    Save users to a CSV file.
    """
    try:
        with path.open("w", newline="") as fh:
            writeUsers(CSVWriter(fh), users)
    except OSError as e:
        raise StorageError(f"Unable to write user file {path}: {e}") from e


@frozen(kw_only=True)
class FileUserDirectory:
    """
    User directory loaded from a CSV file.
    The file is re-read when it changes.
    """

    _log: ClassVar[Logger] = Logger()

    @mutable(kw_only=True, eq=False)
    class _State:
        """
        Internal mutable state for :class:`FileUserDirectory`.
        """

        directory: UserDirectory = field(factory=UserDirectory)
        lastLoadTime: float = 0.0
        lastCheckTime: float = 0.0

    path: Path
    policy: CodePolicy = defaultCodePolicy
    checkInterval: float = 1.0  # Don't restat the file more often than this

    _state: _State = field(factory=_State, init=False)

    def _reload(self) -> None:
        now = time()
        elapsed = now - self._state.lastCheckTime

        if elapsed < self.checkInterval and self._state.lastCheckTime:
            return

        self._state.lastCheckTime = now

        try:
            modified = self.path.stat().st_mtime
        except OSError as e:
            raise StorageError(
                f"Unable to read user file {self.path}: {e}"
            ) from e

        if modified > self._state.lastLoadTime:
            self._log.info("Reloading user file {path}...", path=self.path)
            users = loadUsers(self.path)
            self._state.directory = UserDirectory(
                users=users, policy=self.policy
            )
            self._state.lastLoadTime = modified
            self._log.info("Loaded {count} users", count=len(users))

    @property
    def users(self) -> Sequence[User]:
        self._reload()
        return self._state.directory.users

    def lookupCode(self, hashedCode: str) -> User | None:
        self._reload()
        return self._state.directory.lookupCode(hashedCode)

    def authorize(self, code: str, now: DateTime) -> Decision:
        self._reload()
        return self._state.directory.authorize(code, now)

    def add(self, user: User) -> None:
        self._reload()
        self._state.directory.add(user)

    def save(self) -> None:
        """
        Write all users back to the file.
        """
        self._reload()
        saveUsers(self.path, self._state.directory.users)

        try:
            self._state.lastLoadTime = self.path.stat().st_mtime
        except OSError as e:
            raise StorageError(
                f"Unable to read user file {self.path}: {e}"
            ) from e
