"""finwise: budget tracking and savings goals.

Public exports live in :mod:`finwise.api`; the console entry point is
:data:`finwise.cli.app`. Database tables and sessions come from the sibling
``db`` library.
"""
