from .datapoint_mapper import DataPointMapper

__all__ = ["DataPointMapper"]
