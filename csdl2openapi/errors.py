#! /usr/bin/env python


class CompilerError(Exception):

    """Base error for all exceptions raised by this package"""
    pass


class ServersError(CompilerError):

    """Raised when the servers override is malformed

    The servers override must be the JSON text of a non-empty array of
    OpenAPI Server Objects.  This is the only condition that aborts a
    compilation, all other problems in the input are logged and the
    affected part of the output is omitted."""
    pass


class Messages(object):

    """Human friendly messages

    The messages are defined as attributes of this object to make the
    code easier to read and to enable unit tests to check that the
    expected message was generated."""
    pass


Messages.servers_invalid = "The input server object is invalid."
Messages.servers_not_array = "The input server object should be an array."
