"""
Exceptions raised by the proxy machinery.
"""

class ProxyException(Exception):
    """
    Base class of all exceptions raised by asyncproxy itself.
    """
    pass

class ContractException(ProxyException):
    """
    Exception raised if a type cannot be proxied.
    """
    pass

class InvalidAsyncException(ProxyException):
    """
    Exception raised if a synchronous method would have to wait for an asynchronous result
    that cannot complete while the calling thread is blocked.
    """
    pass
