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
Introspection data and HTML documentation for a ripline server
"""
import abc
import inspect
import xml.etree.ElementTree as ET

from jinja2 import Environment, FileSystemLoader

from .utils import get_res_path, SYSTEM_PREFIX

template_env = Environment(loader=FileSystemLoader(get_res_path('templates')), autoescape=True)

DEFAULT_NAME = 'Ripline: Simple RPC Server'

SPECS = {
    'xmlrpc': [('XML-RPC', 'http://www.xmlrpc.com/spec')],
    'soap 1.1': [('SOAP 1.1', 'http://www.w3.org/TR/2000/NOTE-SOAP-20000508/')],
}
SPECS['auto'] = SPECS['soap 1.1'] + SPECS['xmlrpc']


def build_manifest(methods):
    """
    Returns the introspection manifest for a name -> MethodEntry mapping, a list with
    one {'name', 'purpose'} dict per method
    """
    return [dict(name=name, purpose=entry.description) for name, entry in methods.items()]


def introspection_xml(manifest):
    """The manifest as an <introspection> XML document, served for the 'introspection' query"""
    root = ET.Element('introspection', version='1.0')
    method_list = ET.SubElement(root, 'methodList')
    for m in manifest:
        desc = ET.SubElement(method_list, 'methodDescription', name=m['name'])
        ET.SubElement(desc, 'purpose').text = m['purpose']
    return ET.tostring(root, encoding='utf-8', xml_declaration=True)


def signature(call):
    try:
        return str(inspect.signature(call))
    except (TypeError, ValueError):
        return '(...)'


class DocumentorBase(metaclass=abc.ABCMeta):
    """The methods any documentor needs to implement"""

    @abc.abstractmethod
    def set_method_data(self, methods):
        """Receives the snapshot of the server's registered methods"""

    @abc.abstractmethod
    def handle(self, server):
        """Returns the HTML page served for requests without a payload"""

    @abc.abstractmethod
    def get_introspection(self):
        """Returns the introspection manifest"""


class Documentor(DocumentorBase):
    """
    The default documentor, renders a HTML page listing every method of the server
    """

    def __init__(self, name=DEFAULT_NAME, css=None, wsdl=None, wsdl2=None,
                 root='', version='auto'):
        self.name = name
        self.css = css
        self.wsdl = wsdl
        self.wsdl2 = wsdl2
        self.root = root
        self.version = version
        self.methods = None

    def set_method_data(self, methods):
        self.methods = methods

    def get_introspection(self):
        return build_manifest(self.methods or {})

    def handle(self, server):
        methods = self.methods or {}
        docs = [dict(name=name, signature=signature(entry.call),
                     paragraphs=[p for p in entry.description.split('\n\n') if p.strip()])
                for name, entry in methods.items()]

        # the built-in system methods come from the protocol runtime
        for name in server.call('system.listMethods'):
            if name.startswith(SYSTEM_PREFIX) and name not in methods:
                help_text = server.call('system.methodHelp', [name]) or ''
                docs.append(dict(name=name, signature='(...)',
                                 paragraphs=[p for p in help_text.split('\n\n') if p.strip()]))

        show_wsdl = self.version in ('auto', 'soap 1.1') and (self.wsdl or self.wsdl2)
        return template_env.get_template('documentor.html').render(
            name=self.name, css=self.css, specs=SPECS.get(self.version, []),
            show_wsdl=show_wsdl, wsdl=self.wsdl, wsdl2=self.wsdl2, root=self.root,
            methods=docs)
