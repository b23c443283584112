"""
The reconcilers of the guest clusters' sub-resources, one per resource kind.

Every reconciler is an "ops" object with the same CRUD contract
(see :class:`base.CRUDOps`), driven by the same generic :class:`base.CRUDResource`.
The kinds differ only in how they observe the current state, which fields
they compare, and how strict they are with the updates.
"""
