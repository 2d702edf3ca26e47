"""MenuGate - hierarchical menu and permission resolution.

Builds a company's navigation tree, resolves what each user may see and do
on every node, and guards delegation of those permissions.
"""

__version__ = "0.1.0"

from menugate.infrastructure.api.app import app

__all__ = ["app", "__version__"]
