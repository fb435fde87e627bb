"""Platform.sh build hook - Magento 2 build orchestration for Platform.sh.

This package prepares a Magento 2 codebase for immutable deployment:
patching, DI compilation, static content deployment and staging of
writable directories before the read-only remount.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
