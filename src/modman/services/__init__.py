"""Service layer — the install/uninstall engine and its CLI-facing adapter.

The validator and transaction coordinator return plans and reports;
:class:`~modman.services.modules.ModuleService` wraps them in
ServiceResult for the CLI.  Services may import from domain and
infrastructure, never from commands or output.
"""
