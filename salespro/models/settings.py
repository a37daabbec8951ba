from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Optional

from salespro.constants import DEFAULT_BRAND_TARGET, SETTINGS_KEY, THEME_DARK


@dataclass
class Settings:
    id: str = SETTINGS_KEY
    user_name: str = ""
    emp_id: str = ""
    store_name: Optional[str] = ""
    store_location: str = ""
    theme: str = THEME_DARK
    brand_website: str = ""
    demo_link: str = ""
    toll_free: str = ""
    ai_api_key: str = ""
    is_logged_in: bool = False
    brand_target: float = DEFAULT_BRAND_TARGET
    profile_photo: Optional[str] = ""
    store_lat: Optional[float] = None
    store_lng: Optional[float] = None

    @property
    def has_store_location(self) -> bool:
        return self.store_lat is not None and self.store_lng is not None

    def to_record(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "Settings":
        known = {k: v for k, v in r.items() if k in cls.field_names()}
        s = cls(**known)
        s.id = str(s.id or SETTINGS_KEY)
        s.is_logged_in = bool(s.is_logged_in)
        s.brand_target = float(s.brand_target if s.brand_target is not None else DEFAULT_BRAND_TARGET)
        s.store_lat = float(s.store_lat) if s.store_lat is not None else None
        s.store_lng = float(s.store_lng) if s.store_lng is not None else None
        for name in ("user_name", "emp_id", "store_location", "theme", "brand_website",
                     "demo_link", "toll_free", "ai_api_key"):
            if getattr(s, name) is None:
                setattr(s, name, cls.__dataclass_fields__[name].default)
        return s


def default_settings() -> Settings:
    return Settings()
