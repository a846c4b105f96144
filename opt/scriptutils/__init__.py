"""
script-utils: one executable, many tools.

The action is picked from argv[0] or, under the generic `script-utils`
name, from the first argument.
"""

__version__ = "0.1.0"
