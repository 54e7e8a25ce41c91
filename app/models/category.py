from dataclasses import dataclass

@dataclass(frozen=True)
class Category:
    category_id: str
    name: str = ""
    icon: str = ""
    color: str = ""  # hex string like "#FF5722"
