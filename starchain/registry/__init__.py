# starchain/registry/__init__.py
from .service import SignatureCheck, StarRegistry

__all__ = ["SignatureCheck", "StarRegistry"]
