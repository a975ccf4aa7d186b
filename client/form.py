"""
Form controller for the nightly temperature profile.

Holds the editable state behind the settings form: scalar fields, the
mid-stage list, and the loading/submitting flags the view branches on.
The remote client is injected per session.

State flow: loading -> idle (new or existing profile) -> editing
-> submitting -> editing.
"""

import copy
from dataclasses import asdict, dataclass, replace

from pydantic import ValidationError

from backend.schemas import TemperatureProfileInput, field_errors
from client.api import ProfileClientError

DEFAULT_VALUES = {
    "bedTime": "22:00",
    "wakeupTime": "06:00",
    "initialSleepLevel": 0,
    "finalSleepLevel": 0,
    "timezone": {"value": "America/New_York"},
}
SCALAR_FIELDS = tuple(DEFAULT_VALUES)

SAVE_LABEL = "Save Profile"
SAVING_LABEL = "Saving..."


@dataclass(frozen=True)
class MidStageEntry:
    """One row of the mid-stage list as edited in the form."""

    time: str = "00:00"
    temperature: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class FormController:
    """Editable temperature profile bound to one remote client."""

    def __init__(self, client):
        self.client = client
        self.values = copy.deepcopy(DEFAULT_VALUES)
        # Replaced, never mutated, on every edit
        self.mid_stage_temperatures: tuple[MidStageEntry, ...] = ()
        self.is_loading = True
        self.is_existing_profile = False
        self.is_submitting = False
        self.errors: dict[str, str] = {}
        self.submit_error: str | None = None

    # -- view state --------------------------------------------------------

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and not self.is_submitting

    @property
    def submit_label(self) -> str:
        return SAVING_LABEL if self.is_submitting else SAVE_LABEL

    @property
    def heading(self) -> str:
        if self.is_existing_profile:
            return "Edit Temperature Profile"
        return "Create Temperature Profile"

    # -- loading -----------------------------------------------------------

    async def load(self) -> dict | None:
        """
        Fetch the saved profile and populate the form from it.

        An absent profile leaves the defaults in place. Transport errors
        propagate and the form stays in the loading state.
        """
        data = await self.client.get_user_temperature_profile()
        if data:
            self.is_existing_profile = True
            self.mid_stage_temperatures = tuple(
                MidStageEntry(time=m["time"], temperature=m["temperature"])
                for m in data.get("midStageTemperatures", [])
            )
            for field in SCALAR_FIELDS:
                if field in data:
                    self.values[field] = copy.deepcopy(data[field])
        self.is_loading = False
        return data

    # -- editing -----------------------------------------------------------

    def set_value(self, field: str, value):
        """Set one scalar field (bedTime, wakeupTime, levels, timezone)."""
        if field not in SCALAR_FIELDS:
            raise ValueError(f"Unknown field: {field}. Must be one of: {SCALAR_FIELDS}")
        if field == "timezone" and isinstance(value, str):
            value = {"value": value}
        self.values[field] = value

    def append_mid_stage(self) -> MidStageEntry:
        """Add a defaulted entry (00:00, 0) at the end of the list."""
        entry = MidStageEntry()
        self.mid_stage_temperatures = self.mid_stage_temperatures + (entry,)
        return entry

    def remove_mid_stage(self, index: int):
        """Drop the entry at `index`; an index outside the list changes nothing."""
        self.mid_stage_temperatures = tuple(
            entry for i, entry in enumerate(self.mid_stage_temperatures) if i != index
        )

    def update_mid_stage(self, index: int, time: str = None, temperature: int = None):
        """Replace the entry at `index` with edited time and/or temperature."""
        if not 0 <= index < len(self.mid_stage_temperatures):
            return
        changes = {}
        if time is not None:
            changes["time"] = time
        if temperature is not None:
            changes["temperature"] = temperature
        entries = list(self.mid_stage_temperatures)
        entries[index] = replace(entries[index], **changes)
        self.mid_stage_temperatures = tuple(entries)

    # -- validation & submit -----------------------------------------------

    def to_payload(self) -> dict:
        """Scalar values merged with the current mid-stage list."""
        payload = copy.deepcopy(self.values)
        payload["midStageTemperatures"] = [e.to_dict() for e in self.mid_stage_temperatures]
        return payload

    def validate(self) -> TemperatureProfileInput | None:
        """Validate the form; per-field messages land in `errors`."""
        try:
            data = TemperatureProfileInput.model_validate(self.to_payload())
        except ValidationError as e:
            self.errors = field_errors(e)
            return None
        self.errors = {}
        return data

    async def submit(self) -> bool:
        """
        Validate and send the profile as one update call.

        Returns True on success. A failed call records `submit_error` (and
        any per-field errors the server sent back); the mid-stage list is
        left as edited.
        """
        data = self.validate()
        if data is None:
            return False

        self.is_submitting = True
        self.submit_error = None
        try:
            await self.client.update_user_temperature_profile(data.to_payload())
        except ProfileClientError as e:
            self.submit_error = str(e)
            self.errors = dict(e.body.get("fields") or {})
            print(f"  [form] save failed: {e}")
            return False
        finally:
            self.is_submitting = False
        return True
