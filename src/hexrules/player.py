from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Player:
    id: str
    name: str
    color: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        return cls(id=data['id'], name=data.get('name', data['id']), color=data.get('color', 'gray'))
