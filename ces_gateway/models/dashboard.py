"""
Dashboard model for per-user monitoring dashboard configurations.
"""
from typing import Any, Optional
from dataclasses import dataclass


@dataclass
class Dashboard:
    """
    A named dashboard belonging to one user.

    Attributes:
        name: Dashboard name, unique per user
        graphs: Arbitrary JSON document describing the graphs
        user_id: Owner's identity service user ID
        id: Database ID (None until saved)
    """
    name: str
    graphs: Any = None
    user_id: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Validate dashboard fields."""
        if not isinstance(self.name, str):
            raise ValueError("name must be a string")
        if self.id is not None and (isinstance(self.id, bool) or not isinstance(self.id, int)):
            raise ValueError("id must be an integer")

    @classmethod
    def from_dict(cls, data: dict) -> 'Dashboard':
        """
        Create a Dashboard instance from a dictionary (e.g., from database or request JSON).

        Args:
            data: Dictionary containing dashboard data

        Returns:
            Dashboard instance

        Raises:
            ValueError: If required fields are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("dashboard must be a JSON object")

        return cls(
            id=data.get('id'),
            user_id=data.get('user_id'),
            name=data.get('name', ''),
            graphs=data.get('graphs')
        )

    def to_dict(self) -> dict:
        """
        Convert to the JSON shape returned to API callers.

        The owner is implied by the caller's token and is not included.

        Returns:
            Dictionary with id, name and graphs
        """
        return {
            'id': self.id,
            'name': self.name,
            'graphs': self.graphs
        }
