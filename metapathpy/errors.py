# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception types for MetaPathPy.

Only two failure families get their own classes. Caller misuse (reversing an
irreversible reaction, asking for a node that does not exist) uses the plain
built-in ``ValueError`` and ``KeyError``, and a query with no answer simply
returns ``None``.
"""


class ParseFailureException(ValueError):
    """Raised when query parameters or tuning values are invalid."""


class ModelFormatError(IOError):
    """Raised when a map document or input file cannot be read or parsed."""
