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
Registry of the procedures published by a server
"""
import collections
import importlib
import inspect
import numbers

from .errors import InvalidArgumentError, ERR_UNKNOWN_SERVICE_TYPE
from .utils import log

MethodEntry = collections.namedtuple('MethodEntry', ['name', 'call', 'description'])


def _is_numeric(key):
    return isinstance(key, numbers.Number) or (isinstance(key, str) and key.isdigit())


def _unknown_service(service, service_name):
    return InvalidArgumentError("Unknown service type {} ({!r})".format(service_name or '', service),
                                ERR_UNKNOWN_SERVICE_TYPE)


def import_service(path):
    """
    Imports a service given as 'package.module:Class', 'package.module.Class' or
    'package.module'
    """
    if ':' in path:
        mod_name, attr = path.split(':', 1)
    else:
        try:
            return importlib.import_module(path)
        except ImportError:
            mod_name, _, attr = path.rpartition('.')
    if not mod_name:
        raise ImportError("No module in '{}'".format(path))
    module = importlib.import_module(mod_name)
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ImportError("'{}' has no attribute '{}'".format(mod_name, attr)) from None


def public_operations(service):
    """
    Returns a list of (name, callable) for the public operations of a service:
    * module   - the functions defined in it
    * class    - its static and class methods
    * instance - its bound methods
    Names starting with an underscore are never published.
    """
    ops = []
    if inspect.ismodule(service):
        for name, attr in inspect.getmembers(service, inspect.isroutine):
            if not name.startswith('_') and getattr(attr, '__module__', None) == service.__name__:
                ops.append((name, attr))
    elif inspect.isclass(service):
        for name in dir(service):
            if not name.startswith('_') and \
                    isinstance(inspect.getattr_static(service, name), (staticmethod, classmethod)):
                ops.append((name, getattr(service, name)))
    else:
        for name in dir(service):
            if name.startswith('_') or isinstance(inspect.getattr_static(service, name, None), property):
                continue
            attr = getattr(service, name)
            if callable(attr) and not inspect.isclass(attr):
                ops.append((name, attr))
    return ops


class MethodRegistry:
    """
    Maps public procedure names (optionally namespace prefixed) to the callables
    that implement them
    """

    def __init__(self):
        self.methods = collections.OrderedDict()

    def add_method(self, name, method, description=None):
        """
        Publishes a single callable under `name`, an existing method of the same name is
        replaced.  The description defaults to the docstring of the callable.
        """
        if not callable(method):
            raise _unknown_service(method, name)
        if description is None:
            description = inspect.getdoc(method) or ''
        entry = MethodEntry(name, method, description)
        if name in self.methods:
            log.debug("Replacing method {}".format(name))
        self.methods[name] = entry
        return entry

    def add_service(self, service, service_name=None):
        """
        Publishes the public operations of a service, the service may be an object, a class,
        a module, a callable, or an import path to one of these.  A non numeric service_name
        is used as the namespace of the operations.
        Returns the list of added entries.
        """
        prefix = '{}.'.format(service_name) if service_name and not _is_numeric(service_name) else ''

        if isinstance(service, str):
            try:
                service = import_service(service)
            except ImportError as e:
                log.error("Cannot import service {} - {}".format(service, e))
                raise _unknown_service(service, service_name) from e

        if service is None or isinstance(service, (numbers.Number, bytes, bytearray, list, tuple, set, dict)):
            raise _unknown_service(service, service_name)

        if inspect.isroutine(service):
            return [self.add_method(prefix + service.__name__, service)]

        entries = [self.add_method(prefix + name, op) for name, op in public_operations(service)]
        if not entries:
            log.warning("Service {} has no public operations".format(service_name or service))
        return entries

    def add_services(self, services):
        """Adds a single service, a list of services, or a mapping of namespace -> service"""
        entries = []
        if isinstance(services, dict):
            for service_name, service in services.items():
                entries.extend(self.add_service(service, service_name))
        elif isinstance(services, (list, tuple)):
            for service in services:
                entries.extend(self.add_service(service))
        else:
            entries.extend(self.add_service(services))
        return entries

    def get(self, name):
        return self.methods.get(name)

    def snapshot(self):
        """Returns a copy of the current name -> entry mapping"""
        return collections.OrderedDict(self.methods)

    def __contains__(self, name):
        return name in self.methods

    def __len__(self):
        return len(self.methods)
