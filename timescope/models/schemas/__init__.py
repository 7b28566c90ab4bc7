from timescope.models.schemas.boundary import BoundaryOptions

__all__ = ["BoundaryOptions"]
