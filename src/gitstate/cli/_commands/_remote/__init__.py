# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
"""Remote command app for querying remote refs."""

# Import command modules to register commands with the app
from . import _list as _list
from ._app import app

__all__ = ["app"]
