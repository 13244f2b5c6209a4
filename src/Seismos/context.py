"""
Seismos: Multiscale Acoustic Wave Models

File: context.py
Description: Class to store the state of the simulation, the validated physical
             and method parameters, and the runtime options.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

class Context:
    """
        Context class to store global simulation state, parameters, and runtime options.

        This object is passed to all major components (grid, media, model) to access shared data.
        Components should not store references to each other: all interaction occurs through the context.
    """
    def __init__(self, state = None, params = None, options = None):
        """
        Initialize the context with the given state, parameters, and options.
        state: Dictionary containing the mutable state of the simulation (time, step, fields).
        params: Dictionary containing the physical and method parameters.
        options: Dictionary containing the runtime and output options.
        """
        self.state = ContextNamespace(state)
        self.params = ContextNamespace(params)
        self.options = ContextNamespace(options)

    def __iter__(self):
        yield self.state
        yield self.params
        yield self.options


class ContextNamespace(dict):
    """
    A dictionary-like class that allows attribute access to its keys.
    Nested dictionaries are wrapped recursively so that
    `p.method.order` works just like `p['method']['order']`.
    """
    def __init__(self, args = None):
        super().__init__()
        for key, value in dict(args or {}).items():
            self[key] = value

    def __setitem__(self, key, value):
        if isinstance(value, dict) and not isinstance(value, ContextNamespace):
            value = ContextNamespace(value)
        super().__setitem__(key, value)

    def update(self, other = None, **kwargs):
        for key, value in dict(other or {}, **kwargs).items():
            self[key] = value

    def _raise(self, key):
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{key}'")

    def __getattr__(self, key):
        if key in self:
            return self[key]
        else:
            self._raise(key)

    def __setattr__(self, key, value):
        self[key] = value

    def __delattr__(self, key):
        if key in self:
            del self[key]
        else:
            self._raise(key)
