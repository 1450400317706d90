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
Config used by the client and server
"""
import os
import re
import yaml

from .utils import log, CONFIGFILE
from .errors import ConfigurationError

OUTPUT_TYPES = ('xml',)
ESCAPE_MARKUP = 'markup'
ESCAPE_NON_ASCII = 'non-ascii'
ESCAPING_OPTIONS = (ESCAPE_MARKUP, ESCAPE_NON_ASCII)

CLIENT_OUTPUT_OPTIONS = dict(
    output_type='xml',
    verbosity='pretty',
    escaping=[ESCAPE_MARKUP],
    version='xmlrpc',
    encoding='utf-8',
)

# the server answers in whichever dialect the request came in
SERVER_OUTPUT_OPTIONS = dict(CLIENT_OUTPUT_OPTIONS, version='auto')


class OutputOptions(dict):
    """
    Protocol encoding options, the keys are:

    * `output_type` - 'xml' (only xml output is produced)
    * `verbosity` - 'pretty', 'newlines_only' or 'no_white_space'
    * `escaping` - list of 'markup' and 'non-ascii'. Markup is always escaped,
      'non-ascii' writes characters outside ascii as character references
    * `version` - 'xmlrpc', 'soap 1.1', or 'auto' (server only)
    * `encoding` - character encoding of the payload, default 'utf-8'

    Raises ConfigurationError for an unsupported `output_type` or `escaping` value.
    """

    def __init__(self, defaults, overrides=None):
        super().__init__(defaults)
        if overrides:
            for option, value in overrides.items():
                self[option] = self._check(option, value)

    @staticmethod
    def _check(option, value):
        if option == 'output_type' and value not in OUTPUT_TYPES:
            raise ConfigurationError("Unsupported output type '{}'".format(value))
        if option == 'escaping':
            value = [value] if isinstance(value, str) else list(value)
            unknown = [v for v in value if v not in ESCAPING_OPTIONS]
            if unknown:
                raise ConfigurationError("Unsupported escaping {}".format(', '.join(map(str, unknown))))
        return value

    def set_option(self, option, value):
        """Sets a known option, returns False for an unknown one"""
        if option in self:
            self[option] = self._check(option, value)
            return True
        return False


class ServiceCfg:
    """Service configuration file handling"""
    re_check_name = re.compile('^[A-Za-z0-9_]+$')

    def __init__(self, fname=None):
        fname = fname if fname is not None else CONFIGFILE
        if not os.path.exists(fname):
            raise AssertionError("Config file '{}' not found".format(fname))

        with open(fname, 'r') as f:
            cfg = yaml.safe_load(f) or {}
        log.debug("Loaded config from {}".format(fname))

        self.name = cfg.get('name', 'Ripline: Simple RPC Server')
        self.css = cfg.get('css', None)
        self.host = cfg.get('host', 'localhost')
        self.port = int(cfg.get('port', 8000))
        self.url = cfg.get('url', 'http://{}:{}/'.format(self.host, self.port))

        # namespace -> import path, or a plain list of import paths
        services = cfg.get('services', {})
        if isinstance(services, dict):
            for ns in services.keys():
                self.assert_valid_namespace(ns)
        self.services = services

        self.documentation = cfg.get('documentation', True)
        self.wsdl = cfg.get('wsdl', None)
        self.wsdl2 = cfg.get('wsdl2', None)

        # client side flags
        self.raise_on_fault = cfg.get('raise_on_fault', False)
        self.auto_decode = cfg.get('auto_decode', True)
        self.timeout = cfg.get('timeout', None)

        self.options = {k: cfg[k] for k in CLIENT_OUTPUT_OPTIONS if k in cfg}

    @staticmethod
    def assert_valid_namespace(name):
        if ServiceCfg.re_check_name.match(str(name)) is None:
            raise AssertionError("'{}' is not a valid namespace, must be [A-Za-z0-9_]".format(name))
