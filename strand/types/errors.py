
class StrandError(Exception):
    """ Base class for all engine (structural) errors"""
    pass

class StrandUnboundVariable(StrandError):
    """ Raised when a variable is read or written before it is declared"""
    pass

class StrandStructureError(StrandError):
    """ Raised when a node tree is malformed or a jump has no target"""

class StrandDepthError(StrandError):
    """ Raised when calls nest deeper than the configured cap"""

class StrandStateError(StrandError):
    """ Raised when a cursor is resumed after termination or while running"""

class StrandStepLimitExceeded(StrandError):
    """ Raised when a bounded run does not yield within its step budget"""

class PersistenceError(StrandError):
    """ Raised when a cursor cannot be saved or restored"""
