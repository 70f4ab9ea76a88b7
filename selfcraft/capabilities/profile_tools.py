"""
Profile capabilities — reading and editing the user's profile.

Write capabilities return the updated record, except addAchievement, which
returns only the entry it created, and removeAchievement, which reports the
id it was asked to remove whether or not it existed.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from selfcraft.capabilities.facade import RecordFacade
from selfcraft.capabilities.registry import CapabilityArguments, CapabilityRegistry
from selfcraft.profile import (
    PROFILE_STORAGE_KEY,
    ProfileRecord,
    add_achievement,
    remove_achievement,
    sort_by_date_descending,
    update_description,
    update_title,
)


class GetProfileArguments(CapabilityArguments):
    capability_name = "getProfile"
    capability_description = "Get the current profile data."


class SetTitleArguments(CapabilityArguments):
    capability_name = "setTitle"
    capability_description = "Update the profile title."

    title: str = Field(description="The new title, e.g. 'Early riser in training'.")


class SetDescriptionArguments(CapabilityArguments):
    capability_name = "setDescription"
    capability_description = "Update the profile description."

    description: str


class AddAchievementArguments(CapabilityArguments):
    capability_name = "addAchievement"
    capability_description = (
        "Add a new achievement to the profile. Use it when the user reaches a "
        "milestone worth remembering."
    )

    title: str
    description: str


class RemoveAchievementArguments(CapabilityArguments):
    capability_name = "removeAchievement"
    capability_description = "Remove an achievement by id from the profile."

    id: str


class ListAchievementsArguments(CapabilityArguments):
    capability_name = "listAchievements"
    capability_description = "Return all achievements sorted by date (newest first)."


class ProfileCapabilities(RecordFacade[ProfileRecord]):
    category = "profile"
    storage_key = PROFILE_STORAGE_KEY
    operations = (
        GetProfileArguments,
        SetTitleArguments,
        SetDescriptionArguments,
        AddAchievementArguments,
        RemoveAchievementArguments,
        ListAchievementsArguments,
    )

    def default_record(self) -> ProfileRecord:
        return ProfileRecord()

    def _handlers(self):
        return {
            GetProfileArguments: self._get_profile,
            SetTitleArguments: self._set_title,
            SetDescriptionArguments: self._set_description,
            AddAchievementArguments: self._add_achievement,
            RemoveAchievementArguments: self._remove_achievement,
            ListAchievementsArguments: self._list_achievements,
        }

    def _get_profile(self, op: GetProfileArguments) -> dict[str, Any]:
        return self.current().to_payload()

    def _set_title(self, op: SetTitleArguments) -> dict[str, Any]:
        return self._commit_transition(lambda current: update_title(current, op.title)).to_payload()

    def _set_description(self, op: SetDescriptionArguments) -> dict[str, Any]:
        updated = self._commit_transition(
            lambda current: update_description(current, op.description)
        )
        return updated.to_payload()

    def _add_achievement(self, op: AddAchievementArguments) -> dict[str, Any]:
        updated = self._commit_transition(
            lambda current: add_achievement(current, op.title, op.description, now=self._clock())
        )
        return updated.achievements[-1].to_payload()

    def _remove_achievement(self, op: RemoveAchievementArguments) -> dict[str, Any]:
        self._commit_transition(lambda current: remove_achievement(current, op.id))
        return {"success": True, "removedId": op.id}

    def _list_achievements(self, op: ListAchievementsArguments) -> list[dict[str, Any]]:
        return [a.to_payload() for a in sort_by_date_descending(self.current().achievements)]


def register_profile_capabilities(
    registry: CapabilityRegistry, profile: ProfileCapabilities
) -> None:
    registry.register_all(profile.definitions())
