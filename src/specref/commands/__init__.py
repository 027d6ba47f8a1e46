"""Built-in CLI sub-commands for specref.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~specref.commands.resolve` -- follow the remote ``$ref`` pointers
  of one or more root documents.
* :mod:`~specref.commands.inspect` -- list and classify the references of
  a single document.
* :mod:`~specref.commands.config` -- view and modify global settings.
* :mod:`~specref.commands.cache` -- inspect and empty the document cache.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect``, ``config`` and ``cache``) or a
plain callback function registered directly on the root app (for
``resolve``).
"""
