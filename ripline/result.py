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
Faults and results as values, used at the dispatch boundary
"""
import collections
import xmlrpc.client

from .errors import RpcException, RemoteProcedureFault, ERR_INTERNAL


def fault(code, message):
    """
    Formats a fault as a dict with keys: 'faultCode', 'faultString'
    """
    return {'faultCode': code, 'faultString': message}


def is_fault(value):
    """
    Returns True if the given value is a fault record
    """
    return isinstance(value, dict) and 'faultCode' in value and 'faultString' in value


class RpcFault(collections.namedtuple('RpcFault', ['code', 'message'])):
    """A fault record: integer code plus human readable message"""
    __slots__ = ()

    @classmethod
    def from_dict(cls, d):
        return cls(d['faultCode'], d['faultString'])

    def to_dict(self):
        return fault(self.code, self.message)

    def to_exception(self):
        return RemoteProcedureFault(self.code, self.message)


def exc_to_fault(e):
    """Converts any exception raised by a procedure into an RpcFault"""
    if isinstance(e, RpcException):
        return RpcFault(e.code, e.msg)
    if isinstance(e, xmlrpc.client.Fault):
        return RpcFault(e.faultCode, e.faultString)
    return RpcFault(ERR_INTERNAL, '{}: {}'.format(type(e).__name__, e))


class Result(object):
    """
    Represents the outcome of a single procedure invocation.  Has the following properties:

    * `value` - Result from this call. Set to None if there was a fault.
    * `fault` - RpcFault instance. Set to None if the call was successful.
    """

    def __init__(self, value=None, fault=None):
        self.value = value
        self.fault = fault

    @classmethod
    def failure(cls, code, message):
        return cls(fault=RpcFault(code, message))

    @property
    def ok(self):
        return self.fault is None

    def unwrap(self):
        """Returns the value, or raises RemoteProcedureFault for a fault"""
        if self.fault is not None:
            raise self.fault.to_exception()
        return self.value

    def to_wire(self):
        """
        Format used inside a batch response, per the XML-RPC specification non-fault
        results are wrapped in a single item list
        """
        return [self.value] if self.ok else self.fault.to_dict()

    def __repr__(self):
        if self.ok:
            return 'Result(value={!r})'.format(self.value)
        return 'Result(fault={!r})'.format(self.fault)
