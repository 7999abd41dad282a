# ethoscan/core/errors.py


class EthoscanError(Exception):
    """Base for everything the verifier raises on purpose."""


class InvalidAddress(EthoscanError, ValueError):
    pass


class ProviderUnavailable(EthoscanError):
    """A chain node or registry could not be reached or answered with an error."""


class VerificationTimeout(ProviderUnavailable):
    pass


class ContractCallError(EthoscanError):
    """The contract answered, but not the way the expected ABI says it should."""


def error_reason(exc: BaseException) -> str:
    """Short, human readable reason for a caught failure."""
    return str(exc).strip() or exc.__class__.__name__
