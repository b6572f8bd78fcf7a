"""Line item classes for spare parts and service work."""
from typing import Any, Dict, Union

Cost = Union[int, float, str, None]


class SparePart:
    """A spare part fitted during a service."""

    def __init__(self, name: str = "", cost: Cost = 0):
        self.name = name
        self.cost = cost

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "cost": self.cost}

    def __eq__(self, other):
        if not isinstance(other, SparePart):
            return NotImplemented
        return (self.name, self.cost) == (other.name, other.cost)

    def __repr__(self):
        return f"SparePart({self.name!r}, {self.cost!r})"


class ServiceItem:
    """A unit of labour (oil change, wheel alignment, ...)."""

    def __init__(self, description: str = "", cost: Cost = 0):
        self.description = description
        self.cost = cost

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "cost": self.cost}

    def __eq__(self, other):
        if not isinstance(other, ServiceItem):
            return NotImplemented
        return (self.description, self.cost) == (other.description, other.cost)

    def __repr__(self):
        return f"ServiceItem({self.description!r}, {self.cost!r})"
