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


class Call(object):
    """
    A deferred procedure call, returned instead of a result when a method is called
    in batch scope (i.e. while building the arguments of system.multiCall).

    Once the batch has been sent, the result is available from `result()`, or via the
    callback given to `bind()`.

    * `method` - fully qualified name of the remote procedure
    * `params` - list of positional arguments
    * `index`  - position in the batch request, None until enrolled
    * `bound`  - the result, filled in after the batch response is decoded
    """

    def __init__(self, method, params=None):
        self.method = method
        self.params = list(params) if params else []
        self.index = None
        self.bound = None
        self.done = False
        self.batch = None
        self._callbacks = []

    def bind(self, callback):
        """
        Registers a callable that receives the result of this call once it is available.
        Returns this object for chaining.
        """
        self._callbacks.append(callback)
        return self

    def encode(self):
        """Returns the format for a multiCall argument"""
        return {'methodName': self.method, 'params': list(self.params)}

    def enroll(self, batch, index):
        self.batch = batch
        self.index = index

    def set_result(self, value):
        self.bound = value
        self.done = True
        for cb in self._callbacks:
            cb(value)

    def result(self):
        if not self.done:
            raise ValueError("Call to {} has not been executed yet".format(self.method))
        return self.bound

    def __repr__(self):
        return 'Call({!r}, {!r}, index={})'.format(self.method, self.params, self.index)
