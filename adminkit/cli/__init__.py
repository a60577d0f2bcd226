"""
adminkit CLI.

Usage:
    adminkit schema MODULE:CLASS [--structure] [--indent N]
    adminkit routes MODULE:APP
    adminkit serve MODULE:APP [--host H] [--port P] [--reload]

``MODULE:APP`` may name an ``AdminApp`` instance or a factory returning one.
"""

__cli_name__ = "adminkit"
