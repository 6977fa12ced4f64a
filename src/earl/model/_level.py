# -*- test-case-name: earl.model.test.test_level -*-

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
Access level
"""

from attrs import frozen

from earl.ext.enum import Enum, enumFromValue, unique


__all__ = ()


levelDescriptions = dict(
    member="Member",
    user="User",
    fulltimeUser="Full-time User",
    hiatus="User on Hiatus",
    philanthropist="Philanthropist",
)


@unique
class Level(Enum):
    """
    Access level

    The level of a user determines the hours of the day during which the user
    may open doors.
    The enumerated values are the identifiers used in the user file.
    """

    # No time constraints; may add users.
    member = "member"

    # Daytime access, 11:00..21:59.
    user = "user"

    # Like a user, with less strict daytime constraints: 07:00..23:59.
    fulltimeUser = "fulltimeuser"

    # Not currently active (leave of absence, or blocked); any code is
    # inactive. This allows absent users to be kept in the file.
    hiatus = "hiatus"

    # Access at all hours, but may not add users.
    philanthropist = "philanthropist"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.name!r}]"

    def __str__(self) -> str:
        return levelDescriptions[self.name]

    @property
    def maySponsor(self) -> bool:
        """
        Whether users at this level may add other users.
        """
        return self is Level.member


def levelFromID(strValue: str) -> Level | None:
    """
    Look up a level by its identifier.
    Returns :obj:`None` for unrecognized identifiers.
    """
    return enumFromValue(Level, strValue)


@frozen
class AccessHours:
    """
    Hours of the day during which doors may be opened.

    The interval is half-open: ``start`` is included and ``end`` is excluded,
    so ``AccessHours(7, 22)`` means at or after 07:00 and before 22:00.
    """

    start: int
    end: int

    def includes(self, hour: int) -> bool:
        return self.start <= hour < self.end

    def __str__(self) -> str:
        if self.start >= self.end:
            return "no access"
        return f"{self.start:02d}:00-{self.end - 1:02d}:59"


noAccess = AccessHours(0, 0)

_accessHoursByLevel = {
    Level.member: AccessHours(0, 24),
    Level.philanthropist: AccessHours(0, 24),
    Level.fulltimeUser: AccessHours(7, 24),
    Level.user: AccessHours(11, 22),
    Level.hiatus: noAccess,
}


def accessHours(level: object) -> AccessHours:
    """
    Look up the hours during which users at the given level may open doors.
    Anything that is not a known level gets no access.
    """
    if not isinstance(level, Level):
        return noAccess

    return _accessHoursByLevel.get(level, noAccess)
