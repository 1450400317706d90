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
Ripline client side library

Any method defined by the rpc server can be called as if it was a native method of the
client, namespaces are simply attributes:

    client = Client('http://example.com/rpc')
    score = client.film.getScore('e3dee9d19a8c3af7c92f9067d2945b59', 500)

Several calls can be sent in a single request with system.multiCall, calls made while
building its arguments are deferred and returned as Call objects:

    methods, foo = client.system.multiCall(
        client.system.listMethods(),
        client.getFoo()
    )
"""
import contextlib
from collections.abc import Mapping

from .call import Call
from .codec import get_codec
from .config import OutputOptions, CLIENT_OUTPUT_OPTIONS
from .errors import InvalidArgumentError, InvalidResponseError, RemoteProcedureFault, \
    ERR_NOT_RIPLINE_CALL
from .result import is_fault
from .transport import HttpTransport
from .utils import log, BATCH_METHOD, BATCH_METHODS
from .values import auto_decode

__all__ = ['ClientSession', 'Namespace', 'Client']

SYSTEM_NAMESPACE = 'system'


class ClientSession:
    """
    State shared by a client and all of its namespaces: the endpoint, the transport and
    codec, the batch scope counter and the diagnostic buffers
    """

    def __init__(self, url, transport=None, raise_on_fault=False, auto_decode=True, options=None):
        self.url = url
        self.output_options = OutputOptions(CLIENT_OUTPUT_OPTIONS, options)
        self.codec = get_codec(self.output_options['version'])
        self.transport = transport if transport is not None else HttpTransport()
        self.raise_on_fault = raise_on_fault
        self.auto_decode = auto_decode

        # non zero while in the system namespace, calls are then deferred for system.multiCall
        self.batch_depth = 0

        # exact request and response of the last call, for debugging purposes
        self.last_request = None
        self.last_response = None

    @property
    def in_batch_scope(self):
        return self.batch_depth > 0

    def enter_batch_scope(self):
        self.batch_depth += 1

    def leave_batch_scope(self):
        if self.batch_depth > 0:
            self.batch_depth -= 1

    def reset_batch_scope(self):
        self.batch_depth = 0

    def _execute(self, method, params):
        request = self.codec.encode_request(method, params, self.output_options)
        log.debug("Making RPC call to {} at {}".format(method, self.url))
        response = self.transport.post(self.url, request)
        self.last_request = request
        self.last_response = response

        result = self.codec.decode_response(response)
        if is_fault(result):
            log.debug("RPC fault {} - {}".format(result['faultCode'], result['faultString']))
            if self.raise_on_fault:
                raise RemoteProcedureFault(result['faultCode'], result['faultString'])
        return result

    def call(self, method, params):
        """Makes a single RPC request and returns the result"""
        result = self._execute(method, list(params))
        if self.auto_decode and not is_fault(result):
            result = auto_decode(result)
        return result

    def multicall(self, method, args):
        """
        Sends all the given calls in a single system.multiCall request and returns their
        results in the same order.  Each argument is either a Call or a mapping with a
        'methodName' and optionally 'params'; a single list of those is also accepted.
        """
        self.reset_batch_scope()
        if len(args) == 1 and isinstance(args[0], (list, tuple)):
            # multicall is called with a simple list of calls
            args = args[0]

        batch = object()
        params, enrolled = self._enroll(args)

        # Calls are only enrolled once a well-formed answer arrived, so a failed round
        # trip or a fault for the whole batch leaves them free to be sent again
        result = self._execute(method, [params])
        if is_fault(result):
            return result
        if not isinstance(result, list) or len(result) != len(params):
            raise InvalidResponseError("batch of {} calls answered with {!r}".format(len(params), result))

        values = []
        for arg, index in enrolled:
            value = result[index]
            if isinstance(value, list) and len(value) == 1:
                # XML-RPC specification says that non-fault results must be in a single item array
                value = value[0]
            if self.auto_decode:
                value = auto_decode(value)
            if isinstance(arg, Call) and arg.index is None:
                arg.enroll(batch, index)
                arg.set_result(value)
            values.append(value)
        return values

    def _enroll(self, args):
        # check everything before encoding, a bad argument must leave the Calls untouched
        for key, arg in enumerate(args):
            if isinstance(arg, Call):
                if arg.index is not None:
                    raise InvalidArgumentError(
                        "Argument {} was already sent in another batch".format(key), ERR_NOT_RIPLINE_CALL)
            elif not (isinstance(arg, Mapping) and 'methodName' in arg):
                raise InvalidArgumentError("Argument {} is not a valid call".format(key), ERR_NOT_RIPLINE_CALL)

        params = []
        enrolled = []
        # position of each Call in this batch, a Call given twice is sent once
        positions = {}
        for arg in args:
            if isinstance(arg, Call):
                if id(arg) not in positions:
                    positions[id(arg)] = len(params)
                    params.append(arg.encode())
                index = positions[id(arg)]
            else:
                index = len(params)
                call_params = arg.get('params', [])
                if call_params is None:
                    call_params = []
                elif not isinstance(call_params, (list, tuple)):
                    call_params = [call_params]
                params.append({'methodName': arg['methodName'], 'params': list(call_params)})
            enrolled.append((arg, index))
        return params, enrolled


class Namespace:
    """
    One segment of a dotted procedure name.  Attributes are child namespaces and calling
    a namespace calls the procedure of that name, see `child()` and `invoke()` for the
    explicit forms (needed when a remote name starts with an underscore or clashes with
    an attribute of the proxy).
    """

    def __init__(self, session, path=None, parent=None, name=None):
        self._session = session
        self._path = path
        self._parent = parent
        self._name = name
        self._children = {}

    def _qualify(self, name):
        return '{}.{}'.format(self._path, name) if self._path else name

    def child(self, name):
        """Returns the (cached) child namespace with the given name"""
        if name not in self._children:
            self._children[name] = Namespace(self._session, self._qualify(name), self, name)
        child = self._children[name]
        if child._path == SYSTEM_NAMESPACE:
            self._session.enter_batch_scope()
        return child

    def invoke(self, name, args=()):
        """
        Calls the remote procedure `name` in this namespace.  In batch scope a Call is
        returned instead, to be passed to system.multiCall.
        """
        method = self._qualify(name)
        session = self._session

        if session.in_batch_scope and self._path == SYSTEM_NAMESPACE:
            # this exits the batch scope when simply calling a system method, but calling
            # a system method while building a multiCall keeps the counter above zero
            session.leave_batch_scope()

        if method in BATCH_METHODS:
            return session.multicall(method, tuple(args))
        if session.in_batch_scope:
            return Call(method, args)
        return session.call(method, args)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return self.child(name)

    def __call__(self, *args):
        if self._parent is None:
            raise TypeError("'{}' object is not callable".format(type(self).__name__))
        if self._path == SYSTEM_NAMESPACE:
            # called as a procedure, not entered as a namespace
            self._session.leave_batch_scope()
        return self._parent.invoke(self._name, args)

    def __repr__(self):
        return '<{} {} at {}>'.format(type(self).__name__, self._path or '(root)', self._session.url)


class Client(Namespace):
    """
    RPC client for XML-RPC or (simplified) SOAP 1.1 servers
    """

    def __init__(self, url, transport=None, raise_on_fault=False, auto_decode=True, **options):
        """
        Creates a new Client

        :Parameters:
          url
            URL of the server endpoint
          transport
            Transport object to use, defaults to a HttpTransport
          raise_on_fault
            If True, a RemoteProcedureFault is raised when the server returns a fault, otherwise
            the fault record is returned as the result
          auto_decode
            If True, base64 and datetime values are decoded to bytes and unix timestamps
          options
            Output options, see ripline.config.OutputOptions
        Raises ConfigurationError if no codec is available for the requested version.
        """
        super().__init__(ClientSession(url, transport, raise_on_fault, auto_decode, options))

    @property
    def session(self):
        return self._session

    @property
    def last_request(self):
        return self._session.last_request

    @property
    def last_response(self):
        return self._session.last_response

    def multicall(self, *calls):
        """Same as client.system.multiCall(*calls)"""
        return self._session.multicall(BATCH_METHOD, calls)

    @contextlib.contextmanager
    def batch(self):
        """
        Defers every call made inside the block, the resulting Call objects are then sent
        with multicall().  The batch scope is always left at the end of the block.
        """
        self._session.enter_batch_scope()
        try:
            yield self
        finally:
            self._session.reset_batch_scope()
