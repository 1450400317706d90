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
Basic command handling infrastructure and the ripline subcommands
"""
import abc
import os
import argparse
import pprint

import yaml

from . import utils
from .utils import log
from .config import ServiceCfg
from .client import Client
from .server import Server
from .transport import HttpTransport
from .result import is_fault


class CmdRunner:
    def __init__(self, title, version):
        self.title = title
        self.args = None
        # Parse the cmd args
        self.parser = argparse.ArgumentParser(description=title)
        self.parser.add_argument('-V', '--version', help="{} Version".format(title),
                                 action="version", version="%(prog)s {}".format(version))
        self.parser.add_argument('-v', dest='verbose', help="Verbose mode", action='store_true')

    def register_commands(self, cmds):
        metavar = '{{{}}}'.format(str.join(',', [cmd.name for cmd in cmds if cmd.visible]))
        subparsers = self.parser.add_subparsers(title="{} Commands".format(self.title), dest='command', metavar=metavar)

        for cmd in cmds:
            if cmd.visible:
                sp = subparsers.add_parser(cmd.name, help=cmd.description, description=cmd.description)
            else:
                sp = subparsers.add_parser(cmd.name)

            sp.set_defaults(func=cmd)
            cmd.register(sp)

    def start(self, argv=None):
        # parse the args
        self.args = self.parser.parse_args(argv)
        if self.args.command is None:
            self.parser.print_help()
            self.parser.exit(0, "No command given\n")

        utils.setup_logging(self.args.verbose)
        log.debug("Starting {}".format(self.title))

        try:
            # dispatch to correct cmd class - i.e. serve, call, methods
            subfunc = self.args.func(self.args)
            retval = subfunc.run()
        except Exception as e:
            if len(e.args) > 0:
                [log.error(x) for x in e.args]

            if self.args.verbose:
                raise e
            else:
                log.info("Exiting (run in verbose mode for more information)")
            return 1

        # all done
        return retval if retval else 0


###################################################################################################
# Ripline Commands Handling
class BaseCmd:
    """The Base Command implementing common func"""
    visible = True
    name = ''
    description = ""

    @staticmethod
    def register(sp):
        pass

    def __init__(self, args):
        self.args = args

    @abc.abstractmethod
    def run(self):
        """Main entry point for a command with parsed cmd args"""
        pass


class ServeCmd(BaseCmd):
    """Runs a server for the services named in the config file"""
    name = 'serve'
    description = "Serve the services listed in a ripline config file"

    @staticmethod
    def register(sp):
        sp.add_argument('--config', '-c', default=utils.CONFIGFILE, help="Service config file")
        sp.add_argument('--host', help="Interface to listen on, overrides the config file")
        sp.add_argument('--port', '-p', type=int, help="Port to listen on, overrides the config file")

    def __init__(self, args):
        super().__init__(args)
        self.cfg = ServiceCfg(args.config)

    def create_server(self):
        cfg = self.cfg
        return Server(cfg.services, documentor=None if cfg.documentation else False,
                      name=cfg.name, css=cfg.css, wsdl=cfg.wsdl, wsdl2=cfg.wsdl2, **cfg.options)

    def run(self):
        server = self.create_server()
        host = self.args.host or self.cfg.host
        port = self.args.port or self.cfg.port
        server.serve(host, port)
        return 0


class ClientCmd(BaseCmd):
    """Commands talking to a remote server"""
    @staticmethod
    def register(sp):
        sp.add_argument('--url', '-u', help="URL of the rpc server, defaults to the url in the config file")
        sp.add_argument('--config', '-c', default=utils.CONFIGFILE, help="Service config file")
        sp.add_argument('--soap', action='store_true', help="Use the SOAP 1.1 dialect")
        sp.add_argument('--timeout', type=float, default=None, help="Request timeout in seconds")

    def __init__(self, args):
        super().__init__(args)
        # the config file is optional when a url is given
        cfg = ServiceCfg(args.config) if args.url is None or os.path.exists(args.config) else None

        url = args.url if args.url else cfg.url
        timeout = args.timeout if args.timeout is not None else (cfg.timeout if cfg else None)
        options = dict(cfg.options) if cfg else {}
        if args.soap:
            options['version'] = 'soap 1.1'
        elif options.get('version') == 'auto':
            # a server setting, the client talks the default dialect
            del options['version']

        self.client = Client(url, transport=HttpTransport(timeout=timeout),
                             raise_on_fault=cfg.raise_on_fault if cfg else False,
                             auto_decode=cfg.auto_decode if cfg else True, **options)

    def output(self, result):
        print(pprint.pformat(result))
        return 1 if is_fault(result) else 0


class CallCmd(ClientCmd):
    name = 'call'
    description = "Call a remote procedure, arguments are parsed as YAML"

    @staticmethod
    def register(sp):
        ClientCmd.register(sp)
        sp.add_argument('method', help="Namespace qualified procedure name, e.g. film.getScore")
        sp.add_argument('params', nargs='*', help="Arguments, e.g. 1 'foo' '[1, 2]' '{a: 1}'")

    def run(self):
        params = [yaml.safe_load(p) for p in self.args.params]
        log.debug("Calling {} with {}".format(self.args.method, params))
        return self.output(self.client.session.call(self.args.method, params))


class MethodsCmd(ClientCmd):
    name = 'methods'
    description = "List the procedures published by a server"

    def run(self):
        result = self.client.session.call('system.listMethods', [])
        if is_fault(result):
            return self.output(result)
        for m in result:
            print(m)
        return 0


COMMANDS = [
    ServeCmd,
    CallCmd,
    MethodsCmd,
]
