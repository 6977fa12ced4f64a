# -*- test-case-name: earl.model.test.test_user -*-

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
User
"""

from datetime import datetime as DateTime, timedelta as TimeDelta
from typing import ClassVar

from attrs import evolve, field, mutable
from twisted.logger import Logger

from earl.auth import CodePolicy, defaultCodePolicy

from ._level import AccessHours, Level, accessHours


__all__ = ()


# Cards without a name or contact info are only valid for a limited period,
# as it is otherwise hard to find the right code to revoke if it is lost or
# stolen.
# Cards registered at the door terminal have no contact info, so they need to
# be renewed regularly, or someone has to add contact info to make them valid
# permanently.
ANONYMOUS_VALIDITY = TimeDelta(days=30)

# Anonymous records missing a start date are treated as having expired this
# long ago.
MISSING_START_EXPIRY = TimeDelta(hours=24)


@mutable(kw_only=True)
class User:
    """
    User

    A User is the access record for a person or an anonymous card: who it is,
    what level of access it has, when it is valid, and which (hashed) codes
    open doors for it.
    """

    _log: ClassVar[Logger] = Logger()

    name: str = ""
    generatedName: bool = False
    contactInfo: str = ""
    level: Level
    sponsors: list[str] = field(converter=list, factory=list, repr=False)
    validFrom: DateTime | None = None
    validTo: DateTime | None = None
    codes: list[str] = field(
        converter=list, factory=list, repr=lambda _: "*"
    )

    def __str__(self) -> str:
        if self.hasContactInfo():
            return f"{self.level} {self.name}"
        if self.name:
            return f"{self.level} {self.name} (anonymous)"
        return f"{self.level} (anonymous)"

    def replace(self, **kwargs: object) -> "User":
        """
        Return a copy of this user with the given attributes replaced.
        """
        return evolve(self, **kwargs)

    def hasContactInfo(self) -> bool:
        """
        Whether this user has a usable name and a way to contact them.
        Names generated by the door terminal do not count.
        """
        return (
            bool(self.name)
            and not self.generatedName
            and bool(self.contactInfo)
        )

    def expiryDate(self, now: DateTime) -> DateTime | None:
        """
        Return when this user's codes expire, or :obj:`None` if there is no
        limit.

        Users without contact info expire :obj:`ANONYMOUS_VALIDITY` after
        :attr:`validFrom`, even if :attr:`validTo` is later or unset.
        """
        expires = self.validTo

        if not self.hasContactInfo():
            if self.validFrom is None:
                self._log.warn(
                    "No start date for anonymous user {user}; "
                    "treating as expired",
                    user=self,
                )
                return now - MISSING_START_EXPIRY

            anonymousLimit = self.validFrom + ANONYMOUS_VALIDITY
            if expires is None or anonymousLimit < expires:
                expires = anonymousLimit

        return expires

    def inValidityPeriod(self, now: DateTime) -> bool:
        """
        Whether ``now`` falls strictly between :attr:`validFrom` and the
        expiry date.
        """
        return self.validity(now)[0]

    def validity(self, now: DateTime) -> tuple[bool, DateTime | None]:
        """
        Return whether ``now`` is in the validity period, along with the
        expiry date it was checked against.
        """
        expires = self.expiryDate(now)
        valid = (self.validFrom is None or self.validFrom < now) and (
            expires is None or expires > now
        )
        return (valid, expires)

    def accessHours(self) -> AccessHours:
        """
        Hours of the day during which this user may open doors.
        """
        return accessHours(self.level)

    def mayOpen(self, now: DateTime) -> bool:
        """
        Whether this user may open a door at the given time.
        """
        return self.inValidityPeriod(now) and self.accessHours().includes(
            now.hour
        )

    def hasCode(self, hashedCode: str) -> bool:
        return hashedCode in self.codes

    def setAuthCode(
        self, code: str, policy: CodePolicy = defaultCodePolicy
    ) -> bool:
        """
        Set the code for this user, replacing any existing codes.
        Returns :obj:`False` and leaves the codes unchanged if the code does
        not meet the policy's minimal requirements.
        """
        # TODO: add-auth-code, so a user can hold more than one code
        if not policy.meetsMinimum(code):
            return False

        self.codes = [policy.hash(code)]
        return True
