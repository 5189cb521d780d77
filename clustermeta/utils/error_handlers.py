__license__ = """
Copyright 2015 Parse.ly, Inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
__all__ = ["valid_int", "valid_callable"]

from ..exceptions import InvalidArgumentError


def valid_int(param, allow_zero=False, allow_negative=False):
    """Validate that param is an integer, raise an exception if not"""
    pt = param
    try:  # a very permissive integer typecheck
        pt += 1
    except TypeError:
        raise TypeError(
            "Expected integer but found argument of type '{}'".format(type(param)))
    if not allow_negative and param < 0:
        raise ValueError("Expected nonnegative number but got '{}'".format(param))
    if not allow_zero and param == 0:
        raise ValueError("Expected nonzero number but got '{}'".format(param))
    return param


def valid_callable(param):
    """Validate that param can be called, raise an exception if not"""
    if not callable(param):
        raise InvalidArgumentError(
            "Expected a callable but found argument of type '{}'".format(type(param)))
    return param
