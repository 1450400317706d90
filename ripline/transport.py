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
Transports used by the client to post request payloads
"""
import abc
import requests

from .errors import TransportError
from .utils import log


class Transport(metaclass=abc.ABCMeta):
    """The minimum interface needed for a transport used by the client"""

    @abc.abstractmethod
    def post(self, url, request):
        """
        Posts the request payload to the given url and returns the response payload.
        Raises TransportError when the url cannot be accessed.
        """


class HttpTransport(Transport):
    """
    A client transport that uses requests to post to a HTTP server.
    """
    content_type = 'text/xml'

    def __init__(self, timeout=None, headers=None, session=None, **request_options):
        """
        Creates a new HttpTransport

        :Parameters:
          timeout
            Optional connect/read timeout in seconds, or a (connect, read) tuple
          headers
            Optional dict of HTTP headers to set on requests.  Note that Content-Type will
            always be set automatically to "text/xml"
          session
            Optional requests.Session to use, e.g. with custom adapters
          request_options
            Passed through to requests, e.g. verify, cert, auth, proxies
        """
        self.timeout = timeout
        self.headers = headers if headers else {}
        self.session = session if session is not None else requests.Session()
        self.request_options = request_options
        self.response_headers = None

    def post(self, url, request):
        headers = dict(self.headers)
        headers['Content-Type'] = self.content_type
        try:
            r = self.session.post(url, data=request, headers=headers, timeout=self.timeout,
                                  **self.request_options)
            r.raise_for_status()
        except requests.RequestException as e:
            log.error("HTTP error posting to {} - {}".format(url, e))
            raise TransportError(url, e) from e

        self.response_headers = r.headers
        if not r.content:
            raise TransportError(url)
        return r.content


class InProcTransport(Transport):
    """
    A client transport that invokes calls directly against a Server instance in process.
    This is useful for quickly unit testing services without having to go over the network.
    """

    def __init__(self, server):
        self.server = server

    def post(self, url, request):
        return self.server.handle(request)
