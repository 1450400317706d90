# Copyright 2015 StackHut Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Conversion between the protocol's timestamp/binary types and native values
"""
import datetime as _dt
from xmlrpc.client import Binary, DateTime

import arrow
from arrow.parser import ParserError
from multipledispatch import dispatch

from .errors import NotDatetimeError

DATETIME_FORMAT = 'YYYYMMDD[T]HH:mm:ss'


def datetime(timestamp):
    """Returns a protocol datetime value for the given unix timestamp (UTC)"""
    return DateTime(arrow.get(timestamp).datetime)


def parse_datetime(value):
    """
    Returns an Arrow for a protocol datetime value.  The compact XML-RPC form is tried first,
    then ISO 8601 (dashes, 'Z' or an offset).  Raises NotDatetimeError if neither matches.
    """
    try:
        return arrow.get(value.value, DATETIME_FORMAT)
    except ParserError:
        pass
    try:
        return arrow.get(value.value)
    except (ParserError, ValueError, TypeError) as e:
        raise NotDatetimeError(dict(value=value.value)) from e


def timestamp(value):
    """
    Returns the unix timestamp for a protocol datetime value.
    Raises NotDatetimeError if the value is of any other type, or cannot be parsed.
    """
    if isinstance(value, DateTime):
        return parse_datetime(value).int_timestamp
    if isinstance(value, _dt.datetime):
        return arrow.get(value).int_timestamp
    raise NotDatetimeError(dict(type=type(value).__name__))


def binary(data):
    """Wraps raw bytes so they are sent as a base64 value"""
    return Binary(bytes(data))


def binary_data(value):
    """Returns the raw bytes of a base64 value"""
    if isinstance(value, Binary):
        return value.data
    return bytes(value)


###################################################################################################
# Auto decoding of results
@dispatch(Binary)
def auto_decode(value):
    return value.data

@dispatch(DateTime)
def auto_decode(value):
    try:
        return timestamp(value)
    except NotDatetimeError:
        # unparseable, handed back as received
        return value

@dispatch(list)
def auto_decode(value):
    return [auto_decode(v) for v in value]

@dispatch(dict)
def auto_decode(value):
    return {k: auto_decode(v) for k, v in value.items()}

@dispatch(object)
def auto_decode(value):
    return value
