from .datetime import isoformat_z, utcnow

__all__ = ["isoformat_z", "utcnow"]
