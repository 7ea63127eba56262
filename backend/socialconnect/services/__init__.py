"""Service layer.

Application services live in one subpackage per area (``auth``, ``users``,
``posts``, ``notifications``, ``admin``) and share the primitives under
``_shared``: :class:`~._shared.base.BaseService`, the framework-agnostic
errors, the visibility policy and the infrastructure ports.

Import services from their modules directly; this package re-exports nothing
so that adapters can import ``_shared.ports`` without pulling the Unit of Work.
"""
