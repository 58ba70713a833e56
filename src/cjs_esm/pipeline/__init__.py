"""
Pipeline Package.

Collaborators a bundler needs around the engine.

Modules:
    - ``helpers``: Runtime helpers snippet and proxy module synthesis.
    - ``filters``: Include/exclude globs and recognized extensions.
    - ``resolver``: Specifier resolution (relative, absolute, node_modules).
    - ``plugin``: The ``CommonJSPlugin`` bundler adapter.
"""
