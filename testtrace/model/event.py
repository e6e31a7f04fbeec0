"""Pydantic model of one `go test -json` event record."""

import re

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

# Unpaired surrogates from JSON escapes cannot be encoded as UTF-8.
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


class TestEvent(BaseModel):
    """A decoded test event.

    Field names follow the Python convention; the wire names
    (``Time``, ``Action``, ...) are accepted through aliases. Unknown
    fields such as ``Elapsed`` are ignored. ``Test`` and ``Output`` are
    optional because the test runner omits them on package-level and
    non-output events.
    """

    __test__ = False

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    time: StrictStr = Field(..., alias="Time", description="Event timestamp")
    action: StrictStr = Field(..., alias="Action", description="Event action")
    package: StrictStr = Field(..., alias="Package", description="Package path")
    test: StrictStr = Field("", alias="Test", description="Test name, if any")
    output: StrictStr = Field("", alias="Output", description="Output text")

    @field_validator("*")
    @classmethod
    def replace_lone_surrogates(cls, v: str) -> str:
        return _LONE_SURROGATE.sub("\ufffd", v)

    @property
    def is_package_level(self) -> bool:
        return self.test == ""
