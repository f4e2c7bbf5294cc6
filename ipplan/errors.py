# errors.py


class IpPlanError(Exception):
    """Base class for address planning failures."""


class InvalidAddressFormat(IpPlanError, ValueError):
    pass


class PoolExhausted(IpPlanError):
    """No free subnet could be found within the search limit."""


class MalformedRegistry(IpPlanError):
    """Registry file exists but cannot be read or decoded."""


class RegistryConflict(IpPlanError):
    """Registry changed between snapshot and commit."""


class InvalidCsv(IpPlanError, ValueError):
    pass
