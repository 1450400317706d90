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
Wire codecs - encode and decode single procedure call envelopes

Two dialects are available:
* 'xmlrpc'   - XML-RPC, using the standard library marshaller
* 'soap 1.1' - a simplified SOAP 1.1 envelope, only basic value types are mapped
"""
import abc
import base64
import datetime as _dt
import xmlrpc.client
import xml.etree.ElementTree as ET
from xmlrpc.client import Binary, DateTime

from .errors import ConfigurationError, InvalidRequestError, InvalidResponseError, NotDatetimeError
from .result import fault
from .config import ESCAPE_NON_ASCII
from .values import parse_datetime


class Codec(metaclass=abc.ABCMeta):
    """Converts between procedure calls/results and payload bytes"""
    version = None

    @abc.abstractmethod
    def encode_request(self, method, params, options):
        """Returns the payload for calling `method` with the list `params`"""

    @abc.abstractmethod
    def decode_request(self, data):
        """Returns a tuple of (method, params) from a request payload"""

    @abc.abstractmethod
    def encode_response(self, value, options):
        """Returns the payload for a successful result"""

    @abc.abstractmethod
    def encode_fault(self, code, message, options):
        """Returns the payload for a fault"""

    @abc.abstractmethod
    def decode_response(self, data):
        """Returns the result value of a response payload, faults are returned as fault records"""

    @staticmethod
    def payload_encoding(options):
        """Character encoding of the payload, 'us-ascii' when non-ascii characters are escaped"""
        if ESCAPE_NON_ASCII in options.get('escaping', ()):
            return 'us-ascii'
        return options.get('encoding', 'utf-8')

    def encode_result(self, result, options):
        if result.ok:
            return self.encode_response(result.value, options)
        return self.encode_fault(result.fault.code, result.fault.message, options)


###################################################################################################
# XML-RPC
class XmlRpcCodec(Codec):
    version = 'xmlrpc'

    def encode_request(self, method, params, options):
        encoding = self.payload_encoding(options)
        req = xmlrpc.client.dumps(tuple(params), methodname=method, encoding=encoding, allow_none=True)
        return req.encode(encoding, 'xmlcharrefreplace')

    def decode_request(self, data):
        try:
            params, method = xmlrpc.client.loads(data)
        except Exception as e:
            raise InvalidRequestError('unable to parse request', dict(exception=str(e))) from e
        if method is None:
            raise InvalidRequestError('no methodName given')
        return method, list(params)

    def encode_response(self, value, options):
        encoding = self.payload_encoding(options)
        resp = xmlrpc.client.dumps((value,), methodresponse=True, encoding=encoding, allow_none=True)
        return resp.encode(encoding, 'xmlcharrefreplace')

    def encode_fault(self, code, message, options):
        encoding = self.payload_encoding(options)
        resp = xmlrpc.client.dumps(xmlrpc.client.Fault(code, message), methodresponse=True, encoding=encoding)
        return resp.encode(encoding, 'xmlcharrefreplace')

    def decode_response(self, data):
        try:
            params, _ = xmlrpc.client.loads(data)
        except xmlrpc.client.Fault as f:
            return fault(f.faultCode, f.faultString)
        except Exception as e:
            raise InvalidResponseError('unable to parse response', dict(exception=str(e))) from e
        return params[0] if params else None


###################################################################################################
# SOAP 1.1 (simplified)
SOAP_ENV = 'http://schemas.xmlsoap.org/soap/envelope/'
SOAP_ENC = 'http://schemas.xmlsoap.org/soap/encoding/'
XSI = 'http://www.w3.org/2001/XMLSchema-instance'
XSD = 'http://www.w3.org/2001/XMLSchema'

ET.register_namespace('SOAP-ENV', SOAP_ENV)
ET.register_namespace('SOAP-ENC', SOAP_ENC)
ET.register_namespace('xsi', XSI)

XSI_TYPE = '{%s}type' % XSI
XSI_NIL = '{%s}nil' % XSI
SOAP_DATETIME_FORMAT = 'YYYY-MM-DD[T]HH:mm:ss[Z]'


def _local(tag):
    """strip the {namespace} part of an element tag"""
    return tag.rsplit('}', 1)[-1]


class SoapCodec(Codec):
    version = 'soap 1.1'

    def _envelope(self):
        env = ET.Element('{%s}Envelope' % SOAP_ENV)
        env.set('{%s}encodingStyle' % SOAP_ENV, SOAP_ENC)
        env.set('xmlns:xsd', XSD)
        return env, ET.SubElement(env, '{%s}Body' % SOAP_ENV)

    def _serialize(self, env, options):
        if options.get('verbosity', 'pretty') == 'pretty':
            ET.indent(env)
        return ET.tostring(env, encoding=self.payload_encoding(options), xml_declaration=True)

    def _body(self, data, exc_type):
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise exc_type('unable to parse envelope', dict(exception=str(e))) from e
        body = root.find('{%s}Body' % SOAP_ENV)
        if _local(root.tag) != 'Envelope' or body is None or len(body) == 0:
            raise exc_type('no SOAP body found')
        return body[0]

    def dump_value(self, elem, value):
        if value is None:
            elem.set(XSI_NIL, 'true')
        elif isinstance(value, bool):
            elem.set(XSI_TYPE, 'xsd:boolean')
            elem.text = 'true' if value else 'false'
        elif isinstance(value, int):
            elem.set(XSI_TYPE, 'xsd:int')
            elem.text = str(value)
        elif isinstance(value, float):
            elem.set(XSI_TYPE, 'xsd:double')
            elem.text = repr(value)
        elif isinstance(value, str):
            elem.set(XSI_TYPE, 'xsd:string')
            elem.text = value
        elif isinstance(value, (Binary, bytes, bytearray)):
            raw = value.data if isinstance(value, Binary) else bytes(value)
            elem.set(XSI_TYPE, 'xsd:base64Binary')
            elem.text = base64.b64encode(raw).decode('ascii')
        elif isinstance(value, (DateTime, _dt.datetime)):
            dt = value if isinstance(value, DateTime) else DateTime(value)
            elem.set(XSI_TYPE, 'xsd:dateTime')
            try:
                elem.text = parse_datetime(dt).to('UTC').format(SOAP_DATETIME_FORMAT)
            except NotDatetimeError:
                raise TypeError("cannot marshal datetime {!r}".format(dt.value)) from None
        elif isinstance(value, (list, tuple)):
            elem.set(XSI_TYPE, 'SOAP-ENC:Array')
            for v in value:
                self.dump_value(ET.SubElement(elem, 'item'), v)
        elif isinstance(value, dict):
            elem.set(XSI_TYPE, 'SOAP-ENC:Struct')
            for k, v in value.items():
                self.dump_value(ET.SubElement(elem, str(k)), v)
        else:
            raise TypeError("cannot marshal {} objects".format(type(value)))

    def load_value(self, elem):
        if elem.get(XSI_NIL) in ('true', '1'):
            return None
        xsi_type = elem.get(XSI_TYPE)
        t = xsi_type.split(':')[-1] if xsi_type else None
        text = elem.text or ''

        if t == 'Array':
            return [self.load_value(c) for c in elem]
        if t == 'Struct' or (t is None and len(elem)):
            return {_local(c.tag): self.load_value(c) for c in elem}
        if t in ('int', 'integer', 'long', 'short', 'byte'):
            return int(text)
        if t in ('double', 'float', 'decimal'):
            return float(text)
        if t == 'boolean':
            return text.strip() in ('true', '1')
        if t == 'base64Binary':
            return Binary(base64.b64decode(text))
        if t == 'dateTime':
            return DateTime(text.strip())
        return text

    def encode_request(self, method, params, options):
        env, body = self._envelope()
        call = ET.SubElement(body, method)
        for i, p in enumerate(params):
            self.dump_value(ET.SubElement(call, 'param{}'.format(i)), p)
        return self._serialize(env, options)

    def decode_request(self, data):
        call = self._body(data, InvalidRequestError)
        return _local(call.tag), [self.load_value(p) for p in call]

    def encode_response(self, value, options):
        env, body = self._envelope()
        resp = ET.SubElement(body, 'Response')
        self.dump_value(ET.SubElement(resp, 'return'), value)
        return self._serialize(env, options)

    def encode_fault(self, code, message, options):
        env, body = self._envelope()
        f = ET.SubElement(body, '{%s}Fault' % SOAP_ENV)
        ET.SubElement(f, 'faultcode').text = str(code)
        ET.SubElement(f, 'faultstring').text = message
        return self._serialize(env, options)

    def decode_response(self, data):
        resp = self._body(data, InvalidResponseError)
        if _local(resp.tag) == 'Fault':
            code = resp.findtext('faultcode', '')
            try:
                code = int(code)
            except ValueError:
                pass
            return fault(code, resp.findtext('faultstring', ''))
        return self.load_value(resp[0]) if len(resp) else None


###################################################################################################
# Codec lookup
CODECS = {c.version: c for c in (XmlRpcCodec, SoapCodec)}


def get_codec(version):
    """
    Returns a codec instance for the given protocol version.
    Raises ConfigurationError if no codec implements the version.
    """
    if version not in CODECS:
        raise ConfigurationError("No codec available for protocol version '{}'".format(version))
    return CODECS[version]()


def sniff_codec(data):
    """Picks the codec that matches an incoming request, used with version 'auto'"""
    head = data[:1024] if isinstance(data, bytes) else data[:1024].encode('utf-8', 'replace')
    if b'Envelope' in head:
        return SoapCodec()
    return XmlRpcCodec()
