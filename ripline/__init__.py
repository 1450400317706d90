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
__version__ = '0.1.0'

from .errors import RpcException, ConfigurationError, InvalidArgumentError, ProcedureNotFoundError, \
    RecursiveBatchError, TransportError, RemoteProcedureFault, NotDatetimeError, InvalidResponseError, \
    InvalidRequestError
from .errors import ERR_METHOD_NOT_FOUND, ERR_NOT_RIPLINE_CALL, ERR_CANNOT_RECURSE, ERR_CANNOT_ACCESS_URL, \
    ERR_CODEC_NOT_INSTALLED, ERR_NOT_DATETIME, ERR_UNKNOWN_SERVICE_TYPE, ERR_NO_REQUEST, ERR_INVALID_BATCH, \
    ERR_INVALID_RESPONSE, ERR_INVALID_REQUEST, ERR_INTERNAL
from .call import Call
from .client import Client
from .server import Server
from .documentor import Documentor
from .transport import HttpTransport, InProcTransport
from .result import Result, RpcFault, fault, is_fault
from .values import datetime, timestamp, binary


def client(url, transport=None, **options):
    """
    Creates a client for the rpc server at url, see ripline.client.Client
    """
    return Client(url, transport, **options)


def server(services=None, documentor=None, **options):
    """
    Creates a server publishing the given services, see ripline.server.Server
    """
    return Server(services, documentor, **options)


def xmlrpc_client(url, transport=None, **options):
    """Creates a client that talks XML-RPC"""
    options['version'] = 'xmlrpc'
    return Client(url, transport, **options)


def soap_client(url, transport=None, **options):
    """Creates a client that talks (simplified) SOAP 1.1"""
    options['version'] = 'soap 1.1'
    return Client(url, transport, **options)
