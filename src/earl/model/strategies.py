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
Test strategies for model data.
"""

from collections.abc import Callable
from datetime import datetime as DateTime

from hypothesis.strategies import (
    SearchStrategy,
    booleans,
    characters,
    composite,
    datetimes,
    lists,
    none,
    one_of,
    sampled_from,
    text,
)

from ._level import Level
from ._user import User


__all__ = (
    "codeHashes",
    "contactInfos",
    "levels",
    "minuteDateTimes",
    "names",
    "users",
)


def _text(minSize: int = 0) -> SearchStrategy:  # str
    return text(
        alphabet=characters(blacklist_categories=("Cs", "Cc")),
        min_size=minSize,
    )


def minuteDateTimes() -> SearchStrategy:  # DateTime
    """
    Strategy that generates naive :class:`DateTime` values with minute
    resolution.
    """
    return datetimes(
        min_value=DateTime(1970, 1, 2), max_value=DateTime(9999, 10, 31)
    ).map(lambda dt: dt.replace(second=0, microsecond=0))


def levels() -> SearchStrategy:  # Level
    """
    Strategy that generates :class:`Level` values.
    """
    return sampled_from(Level)


def names() -> SearchStrategy:  # str
    """
    Strategy that generates user names that are not generated names and that
    do not look like comments.
    """
    return _text().filter(
        lambda name: not name.startswith("<")
        and not name.strip().startswith("#")
    )


def contactInfos() -> SearchStrategy:  # str
    """
    Strategy that generates contact info.
    """
    return _text()


def codeHashes() -> SearchStrategy:  # str
    """
    Strategy that generates hashed codes.
    """
    return text(alphabet="0123456789abcdef", min_size=1, max_size=64)


@composite
def users(
    draw: Callable,
    withContactInfo: bool | None = None,
    level: Level | None = None,
) -> User:
    """
    Strategy that generates :class:`User` values.
    """
    if withContactInfo is None:
        generatedName = draw(booleans())
        name = draw(names())
        contactInfo = draw(contactInfos())
    elif withContactInfo:
        generatedName = False
        name = draw(_text(minSize=1).filter(
            lambda name: not name.startswith("<")
            and not name.strip().startswith("#")
        ))
        contactInfo = draw(_text(minSize=1))
    else:
        generatedName = draw(booleans())
        name = draw(names())
        if generatedName or not name:
            contactInfo = draw(contactInfos())
        else:
            contactInfo = ""

    if level is None:
        level = draw(levels())

    return User(
        name=name,
        generatedName=generatedName,
        contactInfo=contactInfo,
        level=level,
        sponsors=draw(lists(codeHashes(), max_size=3)),
        validFrom=draw(one_of(none(), minuteDateTimes())),
        validTo=draw(one_of(none(), minuteDateTimes())),
        codes=draw(lists(codeHashes(), max_size=3)),
    )
