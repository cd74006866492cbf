from .main import CoreAddon

__all__ = ["CoreAddon"]
