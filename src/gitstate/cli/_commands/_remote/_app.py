"""Cyclopts App definition for remote commands."""

from cyclopts import App

app = App(name="remote", help="Query tags and branches of a remote", help_on_error=True)
