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
Ripline server, publishes the public methods of python objects over XML-RPC or
(simplified) SOAP 1.1

    server = Server({'namespace1': MyClass(), 'namespace2': MyOtherClass()})
    server.serve('localhost', 8000)

The server is also a WSGI application.
"""
import xmlrpc.client
from xmlrpc.server import SimpleXMLRPCDispatcher

from werkzeug.wrappers import Request, Response
from werkzeug.serving import run_simple

from .codec import get_codec, sniff_codec, XmlRpcCodec
from .config import OutputOptions, SERVER_OUTPUT_OPTIONS
from .documentor import Documentor, build_manifest, introspection_xml, DEFAULT_NAME
from .errors import RpcException, InvalidRequestError, ProcedureNotFoundError, RecursiveBatchError, \
    ERR_NOT_RIPLINE_CALL, ERR_INVALID_BATCH, ERR_NO_REQUEST, ERR_INTERNAL
from .registry import MethodRegistry
from .result import Result, is_fault, exc_to_fault
from .utils import log, BATCH_METHOD, BATCH_METHODS, SYSTEM_PREFIX


class Server:
    """
    Dispatches requests to the registered methods based on method name, handles
    system.multiCall itself and leaves the other system methods to the protocol runtime
    """

    def __init__(self, services=None, documentor=None, name=None, css=None, wsdl=None, wsdl2=None,
                 root='', **options):
        """
        Creates a new Server

        :Parameters:
          services
            Optional object, or list/dict of objects, whose public methods are published.
            Non numeric dict keys are used as the namespace of the methods.
          documentor
            Optional alternative documentor, or False for no documentation page
          name, css, root
            Title, stylesheet url and root url of the default documentation page
          wsdl, wsdl2
            Optional WSDL 1.1 / 2.0 documents, served for '?wsdl' and '?wsdl2'
          options
            Output options, see ripline.config.OutputOptions
        Raises ConfigurationError if no codec is available for the requested version.
        """
        self.output_options = OutputOptions(SERVER_OUTPUT_OPTIONS, options)
        self._check_version(self.output_options['version'])

        self.registry = MethodRegistry()
        self.runtime = SimpleXMLRPCDispatcher(allow_none=True, encoding=self.output_options['encoding'])
        self.runtime.register_introspection_functions()
        self.runtime.register_function(self.describe_methods, 'system.describeMethods')
        self.runtime.register_function(self.multicall_help, BATCH_METHOD)

        self.wsdl = dict(wsdl=wsdl, wsdl2=wsdl2)
        if documentor is None:
            documentor = Documentor(name=name if name else DEFAULT_NAME, css=css, wsdl=wsdl, wsdl2=wsdl2,
                                    root=root, version=self.output_options['version'])
        self.documentor = documentor if documentor is not False else None

        if services is not None:
            self.add_services(services)

    @staticmethod
    def _check_version(version):
        if version != 'auto':
            get_codec(version)

    ###############################################################################################
    # Registration
    def add_services(self, services):
        for entry in self.registry.add_services(services):
            self._publish(entry)

    def add_service(self, service, service_name=None):
        """
        Adds the public methods of a service, optionally in the service_name namespace.
        Raises InvalidArgumentError for a service of an unknown type.
        """
        for entry in self.registry.add_service(service, service_name):
            self._publish(entry)

    def add_method(self, name, method, description=None):
        """Adds a single method, published as `name`"""
        self._publish(self.registry.add_method(name, method, description))

    def _publish(self, entry):
        # the runtime only needs to know about the method for listMethods/methodHelp
        def runtime_method(*args):
            return self.call(entry.name, list(args))
        runtime_method.__doc__ = entry.description
        self.runtime.register_function(runtime_method, entry.name)

    def describe_methods(self):
        """Returns the name and purpose of every published method"""
        if self.documentor is not None:
            return self.documentor.get_introspection()
        return build_manifest(self.registry.snapshot())

    @staticmethod
    def multicall_help(calls):
        """
        Processes an array of calls, each a struct with 'methodName' and 'params', and returns
        an array of results in the same order.  A result is a single item array holding the
        return value, or a fault struct if that call failed.
        """
        # only listed here, batches are intercepted before reaching the runtime
        raise RecursiveBatchError()

    def set_output_option(self, option, value):
        """
        Sets one of the output options after construction, returns False if the option
        is unknown.  Raises ConfigurationError for an unsupported value.
        """
        if option == 'version':
            self._check_version(value)
        return self.output_options.set_option(option, value)

    ###############################################################################################
    # Dispatch
    def call(self, method, args=None):
        """
        Calls a method by its rpc name and returns the result.
        Raises ProcedureNotFoundError if the method isn't available and RecursiveBatchError
        for system.multiCall.
        """
        args = list(args) if args else []
        entry = self.registry.get(method)
        if entry is not None:
            return entry.call(*args)

        if method.startswith(SYSTEM_PREFIX):
            if method in BATCH_METHODS:
                raise RecursiveBatchError(method)
            if method in self.runtime.funcs:
                return self._runtime_call(method, args)
        raise ProcedureNotFoundError(method)

    def _runtime_call(self, method, args):
        # system methods are handled by the protocol runtime, which only accepts encoded requests
        codec = XmlRpcCodec()
        req = codec.encode_request(method, args, self.output_options)
        result = codec.decode_response(self.runtime._marshaled_dispatch(req))
        if is_fault(result):
            raise RpcException(result['faultCode'], result['faultString'])
        return result

    def dispatch(self, method, args=None):
        """Calls a method by its rpc name and returns a Result, never raises"""
        try:
            return Result(self.call(method, args))
        except (RpcException, xmlrpc.client.Fault) as e:
            log.debug("Fault calling {} - {}".format(method, e))
            return Result(fault=exc_to_fault(e))
        except Exception as e:
            log.exception("Error processing request: {}".format(method))
            return Result(fault=exc_to_fault(e))

    def handle(self, request):
        """
        Handles the given request payload and returns the response payload
        """
        self._snapshot()
        codec = self._codec_for(request)
        try:
            method, params = codec.decode_request(request)
        except InvalidRequestError as e:
            log.error(e)
            return codec.encode_fault(e.code, e.msg, self.output_options)

        log.debug("Request: {}{}".format(method, tuple(params)))
        if method in BATCH_METHODS:
            return self._handle_batch(codec, method, params)
        return self._encode(codec, self.dispatch(method, params))

    def _handle_batch(self, codec, method, params):
        """
        Runs the calls of a system.multiCall one by one, a failing call gives a fault at its
        position without affecting the others
        """
        if not params or not isinstance(params[0], list):
            return codec.encode_fault(ERR_INVALID_BATCH, 'Illegal or no params set for {}'.format(method),
                                      self.output_options)
        calls = params[0]

        # a nested batch fails the whole request, before anything is run
        for c in calls:
            if isinstance(c, dict) and c.get('methodName') in BATCH_METHODS:
                e = RecursiveBatchError(c['methodName'])
                log.error(e)
                return codec.encode_fault(e.code, e.msg, self.output_options)

        results = [self._batch_call(i, c).to_wire() for i, c in enumerate(calls)]
        return self._encode(codec, Result(results))

    def _batch_call(self, index, c):
        if not isinstance(c, dict) or 'methodName' not in c:
            return Result.failure(ERR_NOT_RIPLINE_CALL, 'Argument {} is not a valid call'.format(index))
        args = c.get('params')
        if args is None:
            args = []
        elif not isinstance(args, list):
            args = [args]
        return self.dispatch(c['methodName'], args)

    def _encode(self, codec, result):
        try:
            return codec.encode_result(result, self.output_options)
        except (TypeError, ValueError, OverflowError) as e:
            log.exception("Cannot encode result")
            return codec.encode_fault(ERR_INTERNAL, 'Cannot encode result: {}'.format(e), self.output_options)

    def _codec_for(self, request):
        version = self.output_options['version']
        return sniff_codec(request) if version == 'auto' else get_codec(version)

    def _snapshot(self):
        if self.documentor is not None:
            self.documentor.set_method_data(self.registry.snapshot())

    ###############################################################################################
    # HTTP
    @Request.application
    def application(self, request):
        data = request.get_data()
        if data:
            return Response(self.handle(data), mimetype='text/xml')

        self._snapshot()
        query = request.query_string.decode('utf-8', 'replace')
        if self.wsdl.get(query):
            return Response(self.wsdl[query], mimetype='text/xml')
        if query == 'introspection':
            return Response(introspection_xml(self.describe_methods()), mimetype='text/xml')
        if self.documentor is not None:
            return Response(self.documentor.handle(self), mimetype='text/html')

        codec = self._codec_for(data)
        return Response(codec.encode_fault(ERR_NO_REQUEST, 'No request payload found.', self.output_options),
                        mimetype='text/xml')

    def __call__(self, environ, start_response):
        return self.application(environ, start_response)

    def serve(self, host='localhost', port=8000, **kwargs):
        """Runs a (blocking) development HTTP server for this rpc server"""
        log.info("Starting RPC server on {}:{} with {} methods".format(host, port, len(self.registry)))
        run_simple(host, port, self.application, **kwargs)
