"""Build orchestration module.

This module handles:
- Build options and platform variable derivation
- Vendor and committed patch application
- Static content deployment
- Staging of static assets and writable directories
"""

from platformsh_build.build.options import BuildOptions
from platformsh_build.build.variables import BuildVariables

__all__ = ["BuildOptions", "BuildVariables"]

# Access stages via platformsh_build.build.service, etc.
