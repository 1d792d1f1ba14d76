"""
Error Taxonomy Module

Every failure raised by the token core or its host adapter derives from
TokenError. Failures are synchronous and leave ledger state untouched.
"""


class TokenError(Exception):
    """Base exception for all token ledger errors"""
    pass


class NotInitialized(TokenError):
    """Raised when an operation requires an initialized ledger"""
    pass


class AlreadyInitialized(TokenError):
    """Raised on any initialization attempt after the first successful one"""
    pass


class InsufficientDeposit(TokenError):
    """Raised when the attached value does not exceed the registration threshold"""
    pass


class InsufficientBalance(TokenError):
    """Raised when a transfer amount exceeds the sender's balance"""
    pass


class ReceiverNotRegistered(TokenError):
    """Raised when the transfer receiver has never registered"""
    pass


class SenderNotRegistered(TokenError):
    """Raised when the transfer sender holds no balance entry"""
    pass


class InvalidAmount(TokenError):
    """Raised for negative, fractional or malformed amount values"""
    pass


# Host adapter errors

class OperationNotFound(TokenError):
    """Raised when the requested operation is not in the operation table"""
    pass


class DepositNotAccepted(TokenError):
    """Raised when value is attached to a non-payable operation"""
    pass


class ViewOnlyViolation(TokenError):
    """Raised when a state-mutating operation is invoked through the view path"""
    pass


class InvalidArguments(TokenError):
    """Raised when operation arguments fail schema validation"""
    pass
