"""Bundled SQL scripts.

``.sql`` files placed next to this module ship with the package and are
discovered by the SQL_SCRIPT command (``script.package``).
"""
