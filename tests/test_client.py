# -*- coding: utf-8 -*-
"""
test_client
----------------------------------

Tests for the ripline client proxy, batching and transports.
"""
import unittest
import xmlrpc.client
from unittest import mock

import requests

import ripline
from ripline import errors
from ripline.call import Call
from ripline.client import Client
from ripline.server import Server
from ripline.transport import Transport, HttpTransport, InProcTransport


class RecordingTransport(Transport):
    """Records the requests and always answers with the same response"""
    def __init__(self, response=None):
        self.requests = []
        if response is None:
            response = xmlrpc.client.dumps((None,), methodresponse=True, allow_none=True).encode('utf-8')
        self.response = response

    def post(self, url, request):
        self.requests.append(request)
        return self.response


class FlakyTransport(InProcTransport):
    """Fails the first round trip, then answers from the server"""
    def __init__(self, server, failures=1):
        super().__init__(server)
        self.failures = failures

    def post(self, url, request):
        if self.failures:
            self.failures -= 1
            raise errors.TransportError(url, ConnectionError('refused'))
        return super().post(url, request)


def echo(x):
    return x


def add(a, b):
    return a + b


def make_server():
    server = Server()
    server.add_method('echo', echo)
    server.add_method('add', add)
    server.add_method('blob', lambda: ripline.binary(b'abc'))
    server.add_method('when', lambda: ripline.datetime(1000000000))
    return server


class NamespaceTest(unittest.TestCase):
    def setUp(self):
        self.transport = RecordingTransport()
        self.client = Client('http://test/rpc', self.transport)

    def sent(self, i=0):
        return xmlrpc.client.loads(self.transport.requests[i])

    def test_child_cached(self):
        self.assertIs(self.client.a, self.client.a)
        self.assertIs(self.client.a.b, self.client.a.b)
        self.assertIs(self.client.a, self.client.child('a'))

    def test_qualified_name(self):
        self.client.a.b.op(5)
        self.assertEqual(((5,), 'a.b.op'), self.sent())

    def test_explicit_invoke(self):
        self.client.invoke('_hidden', [1])
        self.client.child('ns').invoke('items', ['x'])
        self.assertEqual(((1,), '_hidden'), self.sent(0))
        self.assertEqual((('x',), 'ns.items'), self.sent(1))

    def test_private_attributes(self):
        with self.assertRaises(AttributeError):
            self.client._private

    def test_root_not_callable(self):
        with self.assertRaises(TypeError):
            self.client()

    def test_diagnostics(self):
        self.client.ping()
        self.assertEqual(self.transport.requests[-1], self.client.last_request)
        self.assertEqual(self.transport.response, self.client.last_response)


class ClientTest(unittest.TestCase):
    def setUp(self):
        self.server = make_server()
        self.client = Client('http://test/rpc', InProcTransport(self.server))

    def test_call(self):
        self.assertEqual(3, self.client.add(1, 2))
        self.assertIn(b'methodResponse', self.client.last_response)

    def test_fault_returned(self):
        self.assertEqual({'faultCode': -1, 'faultString': 'Procedure noSuchOp not found.'}, self.client.noSuchOp())

    def test_raise_on_fault(self):
        client = Client('http://test/rpc', InProcTransport(self.server), raise_on_fault=True)
        with self.assertRaises(errors.RemoteProcedureFault) as cm:
            client.noSuchOp()
        self.assertEqual(errors.ERR_METHOD_NOT_FOUND, cm.exception.code)

    def test_auto_decode(self):
        self.assertEqual(b'abc', self.client.blob())
        self.assertEqual(1000000000, self.client.when())

    def test_no_auto_decode(self):
        client = Client('http://test/rpc', InProcTransport(self.server), auto_decode=False)
        self.assertIsInstance(client.blob(), xmlrpc.client.Binary)
        self.assertEqual(1000000000, ripline.timestamp(client.when()))

    def test_iso_datetime_result(self):
        response = xmlrpc.client.dumps((xmlrpc.client.DateTime('2024-01-02T03:04:05Z'),),
                                       methodresponse=True).encode('utf-8')
        client = Client('http://test/rpc', RecordingTransport(response))
        self.assertEqual(1704164645, client.now())

    def test_system_call_not_deferred(self):
        self.assertIn('echo', self.client.system.listMethods())
        self.assertEqual(0, self.client.session.batch_depth)

    def test_soap_client(self):
        client = ripline.soap_client('http://test/rpc', InProcTransport(self.server))
        self.assertEqual('hi', client.echo('hi'))
        self.assertIn(b'Envelope', client.last_request)

    def test_unknown_version(self):
        with self.assertRaises(errors.ConfigurationError):
            Client('http://test/rpc', version='simple')


class BatchTest(unittest.TestCase):
    def setUp(self):
        self.server = make_server()
        self.client = Client('http://test/rpc', InProcTransport(self.server))

    def test_scenario(self):
        c = self.client
        res = c.system.multiCall(c.echo(1), c.noSuchOp())
        self.assertEqual([1, {'faultCode': -1, 'faultString': 'Procedure noSuchOp not found.'}], res)
        # on the wire each result is a single item list
        self.assertEqual([[1], {'faultCode': -1, 'faultString': 'Procedure noSuchOp not found.'}],
                         xmlrpc.client.loads(c.last_response)[0][0])

    def test_bound_results(self):
        c = self.client
        system = c.system
        a = c.echo('x')
        b = c.add(2, 3)
        self.assertIsInstance(a, Call)
        self.assertEqual('add', b.method)
        self.assertEqual(['x', 5], system.multiCall(a, b))
        self.assertEqual('x', a.result())
        self.assertEqual(5, b.result())
        self.assertEqual((0, 1), (a.index, b.index))
        self.assertEqual(0, c.session.batch_depth)

    def test_result_before_execution(self):
        with self.assertRaises(ValueError):
            Call('echo', [1]).result()

    def test_bind_callback(self):
        seen = []
        with self.client.batch():
            call = self.client.echo(7).bind(seen.append)
        self.client.multicall(call)
        self.assertEqual([7], seen)

    def test_batch_context(self):
        with self.client.batch() as c:
            a = c.echo(1)
            b = c.add(1, 1)
        self.assertEqual(0, self.client.session.batch_depth)
        self.assertEqual([1, 2], self.client.multicall(a, b))
        self.assertEqual(2, b.result())

    def test_deferred_system_call(self):
        c = self.client
        res = c.system.multiCall(c.echo(1), c.system.listMethods())
        self.assertEqual(1, res[0])
        self.assertIn('echo', res[1])

    def test_mapping_and_list_arguments(self):
        res = self.client.system.multiCall([
            {'methodName': 'echo', 'params': [5]},
            {'methodName': 'add', 'params': [1, 1]},
            {'methodName': 'echo', 'params': 'single'},
        ])
        self.assertEqual([5, 2, 'single'], res)

    def test_same_call_enrolled_once(self):
        with self.client.batch():
            a = self.client.echo(1)
        self.assertEqual([1, 1], self.client.multicall(a, a))
        self.assertEqual(1, len(xmlrpc.client.loads(self.client.last_request)[0][0]))

    def test_call_reused_in_another_batch(self):
        with self.client.batch():
            a = self.client.echo(1)
        self.client.multicall(a)
        with self.assertRaises(errors.InvalidArgumentError):
            self.client.multicall(a)

    def test_invalid_argument(self):
        transport = RecordingTransport()
        c = Client('http://test/rpc', transport)
        with c.batch():
            a = c.echo(1)
        with self.assertRaises(errors.InvalidArgumentError) as cm:
            c.system.multiCall(a, 'bogus')
        self.assertEqual(errors.ERR_NOT_RIPLINE_CALL, cm.exception.code)
        self.assertEqual('Argument 1 is not a valid call', cm.exception.msg)
        self.assertEqual([], transport.requests)
        self.assertIsNone(a.index)

    def test_misaligned_response(self):
        response = xmlrpc.client.dumps(([[1]],), methodresponse=True).encode('utf-8')
        c = Client('http://test/rpc', RecordingTransport(response))
        with self.assertRaises(errors.InvalidResponseError):
            c.system.multiCall(c.echo(1), c.echo(2))

    def test_batch_fault(self):
        response = xmlrpc.client.dumps(xmlrpc.client.Fault(-3, 'Cannot recurse system.multiCall'),
                                       methodresponse=True).encode('utf-8')
        c = Client('http://test/rpc', RecordingTransport(response))
        with c.batch():
            a = c.echo(1)
        self.assertEqual({'faultCode': -3, 'faultString': 'Cannot recurse system.multiCall'}, c.multicall(a))
        self.assertFalse(a.done)
        self.assertIsNone(a.index)

    def test_retry_after_batch_fault(self):
        fault_response = xmlrpc.client.dumps(xmlrpc.client.Fault(-32603, 'Internal error'),
                                             methodresponse=True).encode('utf-8')
        c = Client('http://test/rpc', RecordingTransport(fault_response))
        with c.batch():
            a = c.echo(1)
        self.assertTrue(ripline.is_fault(c.multicall(a)))

        c.session.transport = InProcTransport(self.server)
        self.assertEqual([1], c.multicall(a))
        self.assertEqual(1, a.result())

    def test_retry_after_transport_error(self):
        c = Client('http://test/rpc', FlakyTransport(self.server))
        with c.batch():
            a = c.echo(1)
            b = c.add(1, 2)
        with self.assertRaises(errors.TransportError):
            c.multicall(a, b)
        self.assertIsNone(a.index)
        self.assertFalse(a.done)

        self.assertEqual([1, 3], c.multicall(a, b))
        self.assertEqual((0, 1), (a.index, b.index))
        self.assertEqual(3, b.result())

    def test_retry_after_misaligned_response(self):
        response = xmlrpc.client.dumps(([[1]],), methodresponse=True).encode('utf-8')
        c = Client('http://test/rpc', RecordingTransport(response))
        with c.batch():
            a = c.echo(1)
            b = c.echo(2)
        with self.assertRaises(errors.InvalidResponseError):
            c.multicall(a, b)

        c.session.transport = InProcTransport(self.server)
        self.assertEqual([1, 2], c.multicall(a, b))

    def test_soap_batch(self):
        c = ripline.soap_client('http://test/rpc', InProcTransport(self.server))
        res = c.system.multiCall(c.echo(1), c.noSuchOp())
        self.assertEqual([1, {'faultCode': -1, 'faultString': 'Procedure noSuchOp not found.'}], res)


class HttpTransportTest(unittest.TestCase):
    def setUp(self):
        self.session = mock.Mock()
        self.response = mock.Mock(content=b'<methodResponse/>', headers={'Server': 'test'})
        self.session.post.return_value = self.response

    def test_post(self):
        t = HttpTransport(timeout=5, headers={'X-Foo': '1'}, session=self.session, verify=False)
        self.assertEqual(b'<methodResponse/>', t.post('http://test/rpc', b'<methodCall/>'))
        self.session.post.assert_called_once_with('http://test/rpc', data=b'<methodCall/>',
                                                  headers={'X-Foo': '1', 'Content-Type': 'text/xml'},
                                                  timeout=5, verify=False)
        self.assertEqual({'Server': 'test'}, t.response_headers)

    def test_connection_error(self):
        cause = requests.ConnectionError('refused')
        self.session.post.side_effect = cause
        with self.assertRaises(errors.TransportError) as cm:
            HttpTransport(session=self.session).post('http://test/rpc', b'')
        self.assertEqual(errors.ERR_CANNOT_ACCESS_URL, cm.exception.code)
        self.assertEqual('Could not access http://test/rpc', cm.exception.msg)
        self.assertIs(cause, cm.exception.cause)
        self.assertIs(cause, cm.exception.__cause__)

    def test_http_error(self):
        self.response.raise_for_status.side_effect = requests.HTTPError('500 Server Error')
        with self.assertRaises(errors.TransportError):
            HttpTransport(session=self.session).post('http://test/rpc', b'')

    def test_empty_response(self):
        self.response.content = b''
        with self.assertRaises(errors.TransportError):
            HttpTransport(session=self.session).post('http://test/rpc', b'')


if __name__ == '__main__':
    unittest.main()
