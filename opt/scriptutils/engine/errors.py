from __future__ import annotations


class ScriptUtilsError(Exception):
    """
    An expected, named failure.

    Raised deliberately by handlers; reported as a single line on stderr
    with exit status 1.
    """


class ConfigError(ScriptUtilsError):
    pass


class ModuleLoadError(ScriptUtilsError):
    pass


class PathTypeError(ScriptUtilsError):
    pass
