"""User settings model."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """UX settings shown in the settings panel."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    confirm_before_delete: bool = Field(True, alias="confirmBeforeDelete")
    enable_sounds: bool = Field(False, alias="enableSounds")
    show_onboarding: bool = Field(True, alias="showOnboarding")
    default_project_id: Optional[str] = Field(None, alias="defaultProjectId")

    def merged(self, patch: Dict[str, Any]) -> "Settings":
        """Return a copy with the known keys of ``patch`` applied.

        Keys may be given either by field name or by their stored alias.
        """
        updates = {}
        for name, info in Settings.model_fields.items():
            if name in patch:
                updates[name] = patch[name]
            elif info.alias in patch:
                updates[name] = patch[info.alias]
        if not updates:
            return self
        return Settings.model_validate({**self.model_dump(), **updates})

    def to_dict(self) -> dict:
        """Convert to the stored dictionary shape."""
        return self.model_dump(by_alias=True)
