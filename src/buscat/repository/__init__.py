"""
Repository package for message bus access.

The rabbitmq subpackage is the only transport; the rest of buscat talks to it
through BusConnection.
"""
