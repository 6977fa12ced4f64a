# -*- test-case-name: earl.auth.test.test_codes -*-

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
Credential code hashing and strength requirements.

Codes (keypad PINs and RFID tokens) and sponsor codes are only ever stored
hashed.
Hashing is deterministic, so that a presented code can be found by its hash.
"""

from hashlib import sha256

from attrs import field, frozen


__all__ = ()


DEFAULT_MINIMUM_LENGTH = 6


def hashAuthCode(code: str, salt: str = "") -> str:
    """
    Compute the stored form of a code.
    """
    return sha256((salt + code).encode("utf-8")).hexdigest()


def hasMinimalCodeRequirements(
    code: str, minimumLength: int = DEFAULT_MINIMUM_LENGTH
) -> bool:
    """
    Determine whether a code is long enough to be accepted.
    """
    return len(code.strip()) >= minimumLength


@frozen(kw_only=True)
class CodePolicy:
    """
    Policy for accepting and storing codes.
    """

    minimumLength: int = DEFAULT_MINIMUM_LENGTH
    salt: str = field(default="", repr=lambda _: "*")

    def meetsMinimum(self, code: str) -> bool:
        return hasMinimalCodeRequirements(code, self.minimumLength)

    def hash(self, code: str) -> str:
        return hashAuthCode(code, self.salt)


defaultCodePolicy = CodePolicy()
