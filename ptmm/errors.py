"""
Error taxonomy:

PtmmError: base for everything raised on purpose by this package
ConfigurationError: inconsistent or non-positive request parameters
ResourceError: buffer allocation or worker creation failed (fatal, no retry)

Floating-point overflow / precision loss is not detected; IEEE-754 double
semantics apply.
"""


class PtmmError(Exception):
    pass


class ConfigurationError(PtmmError, ValueError):
    pass


class ResourceError(PtmmError, RuntimeError):
    pass
