"""
General-purpose helpers not related to the reconciliation engine itself
(neither to the reactor nor to the resources nor to the structs),
which are used to prepare and control the runtime environment.

Helpers do not depend on anything else in the package. As a rule of thumb,
they MUST be abstracted from the engine to such an extent that they could be
extracted as reusable libraries.
"""
