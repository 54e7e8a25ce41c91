from dataclasses import dataclass

@dataclass(frozen=True)
class User:
    user_id: str
    name: str = ""
    # resource name of the avatar, e.g. "sarah"
    profile_image: str = ""
