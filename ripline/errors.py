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
Ripline error codes and exceptions

Every error raised by ripline carries a small integer code, the same code that is sent
to remote callers inside a fault record.
"""

# Ripline error codes
ERR_METHOD_NOT_FOUND = -1
ERR_NOT_RIPLINE_CALL = -2
ERR_CANNOT_RECURSE = -3
ERR_CANNOT_ACCESS_URL = -4
ERR_CODEC_NOT_INSTALLED = -5
ERR_NOT_DATETIME = -6
ERR_UNKNOWN_SERVICE_TYPE = -7
ERR_NO_REQUEST = -8
ERR_INVALID_BATCH = -9
ERR_INVALID_RESPONSE = -10
ERR_INVALID_REQUEST = -11

# JSON-RPC style catch-all for errors raised by procedures themselves
ERR_INTERNAL = -32603


class RpcException(Exception):
    """
    Represents an error with a fault code.  Procedures may raise this (or a subclass)
    if they wish to communicate a specific error code back to the caller.
    """

    def __init__(self, code, msg="", data=None):
        """
        Creates a new RpcException

        :Parameters:
          code
            Integer representing the error type
          msg
            Human readable description of the error
          data
            Optional extra info about the error
        """
        super().__init__(code, msg)
        self.code = code
        self.msg = msg
        self.data = data

    def __str__(self):
        s = "{}: code={} msg={}".format(type(self).__name__, self.code, self.msg)
        if self.data:
            s += " data={}".format(self.data)
        return s


####################################################################################################
# Error handling
class ConfigurationError(RpcException):
    def __init__(self, msg, code=ERR_CODEC_NOT_INSTALLED):
        super().__init__(code, msg)

class InvalidArgumentError(RpcException):
    def __init__(self, msg, code=ERR_NOT_RIPLINE_CALL):
        super().__init__(code, msg)

class ProcedureNotFoundError(RpcException):
    def __init__(self, method):
        super().__init__(ERR_METHOD_NOT_FOUND, 'Procedure {} not found.'.format(method))
        self.method = method

class RecursiveBatchError(RpcException):
    def __init__(self, method='system.multiCall'):
        super().__init__(ERR_CANNOT_RECURSE, 'Cannot recurse {}'.format(method))

class TransportError(RpcException):
    def __init__(self, url, cause=None):
        super().__init__(ERR_CANNOT_ACCESS_URL, 'Could not access {}'.format(url),
                         dict(exception=str(cause)) if cause is not None else None)
        self.url = url
        self.cause = cause

class RemoteProcedureFault(RpcException):
    """Raised on the client for a fault record, only when raise_on_fault is set"""
    def __init__(self, code, msg):
        super().__init__(code, msg)

class NotDatetimeError(RpcException):
    def __init__(self, data=None):
        super().__init__(ERR_NOT_DATETIME, 'Variable is not of type datetime', data)

class InvalidResponseError(RpcException):
    def __init__(self, msg, data=None):
        super().__init__(ERR_INVALID_RESPONSE, 'Invalid Response - {}'.format(msg), data)

class InvalidRequestError(RpcException):
    def __init__(self, msg, data=None):
        super().__init__(ERR_INVALID_REQUEST, 'Invalid Request - {}'.format(msg), data)
