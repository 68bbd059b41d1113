"""Built-in CLI sub-commands for specsync.

This package groups the Typer command modules registered on the root app:

* :mod:`~specsync.commands.inspect` -- summarise a spec: info, servers,
  security schemes, and endpoints.
* :mod:`~specsync.commands.snapshot` -- write the snapshot list a spec
  implies, used as a baseline for later diffs.
* :mod:`~specsync.commands.diff` -- reconcile a spec against stored
  snapshots and print the import plan.
* :mod:`~specsync.commands.config` -- view and modify global settings.

Single commands export a plain callback registered directly on the root
app; the ``config`` group exports a :class:`typer.Typer` sub-application.
"""
