# -*- test-case-name: earl.store.csv.test.test_csv -*-

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
User records as CSV rows.

Each row holds the fields of a user in a fixed order:

    name, contact info, level, sponsors, valid from, valid to, codes

Sponsors and codes are semicolon-separated lists.
Timestamps have minute resolution; an empty field means no bound.
Rows whose first field starts with ``#`` are comments.
"""

from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime as DateTime
from typing import Any, Protocol

from attrs import frozen
from twisted.logger import Logger

from earl.model import User, levelFromID


__all__ = ()


log = Logger()


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
FIELD_COUNT = 7
LIST_SEPARATOR = ";"
COMMENT_MARKER = "#"
GENERATED_NAME_MARKER = "<"


class RowWriter(Protocol):
    def writerow(self, row: Iterable[Any]) -> Any: ...


@frozen
class ReadResult:
    """
    Result of reading a row.

    ``user`` is :obj:`None` if the row did not contain a user; ``done`` is
    :obj:`True` once the input is exhausted.
    """

    user: User | None
    done: bool


def _parseTimestamp(text: str) -> DateTime | None:
    if not text:
        return None
    return DateTime.strptime(text, TIMESTAMP_FORMAT)


def _formatTimestamp(dateTime: DateTime | None) -> str:
    if dateTime is None:
        return ""
    return dateTime.strftime(TIMESTAMP_FORMAT)


def _parseList(text: str) -> list[str]:
    if not text:
        return []
    return text.split(LIST_SEPARATOR)


def userFromRow(row: Sequence[str]) -> User | None:
    """
    Decode a user from a row.
    Returns :obj:`None` for comments and malformed rows.
    """
    if len(row) != FIELD_COUNT:
        return None

    if row[0].strip().startswith(COMMENT_MARKER):
        return None

    (
        name,
        contactInfo,
        levelID,
        sponsors,
        validFromText,
        validToText,
        codes,
    ) = row

    level = levelFromID(levelID)
    if level is None:
        log.warn("Got invalid level {levelID!r}", levelID=levelID)
        return None

    try:
        validFrom = _parseTimestamp(validFromText)
        validTo = _parseTimestamp(validToText)
    except ValueError as e:
        log.warn("Got invalid timestamp: {error}", error=e)
        return None

    generatedName = name.startswith(GENERATED_NAME_MARKER)
    if generatedName:
        name = name[len(GENERATED_NAME_MARKER) :]

    return User(
        name=name,
        generatedName=generatedName,
        contactInfo=contactInfo,
        level=level,
        sponsors=_parseList(sponsors),
        validFrom=validFrom,
        validTo=validTo,
        codes=_parseList(codes),
    )


def readUser(reader: Iterator[Sequence[str]]) -> ReadResult:
    """
    Read the next row from a CSV reader.
    """
    try:
        row = next(reader)
    except StopIteration:
        return ReadResult(user=None, done=True)

    return ReadResult(user=userFromRow(row), done=False)


def usersFromCSV(reader: Iterator[Sequence[str]]) -> Iterator[User]:
    """
    Read all users from a CSV reader, skipping comments and malformed rows.
    """
    while True:
        result = readUser(reader)
        if result.done:
            return
        if result.user is not None:
            yield result.user


def rowFromUser(user: User) -> list[str]:
    """
    Encode a user as a row.
    """
    if user.generatedName:
        name = GENERATED_NAME_MARKER + user.name
    else:
        name = user.name

    return [
        name,
        user.contactInfo,
        user.level.value,
        LIST_SEPARATOR.join(user.sponsors),
        _formatTimestamp(user.validFrom),
        _formatTimestamp(user.validTo),
        LIST_SEPARATOR.join(user.codes),
    ]


def writeUser(writer: RowWriter, user: User) -> None:
    """
    Write a user to a CSV writer.
    """
    writer.writerow(rowFromUser(user))


def writeUsers(writer: RowWriter, users: Iterable[User]) -> None:
    for user in users:
        writeUser(writer, user)
