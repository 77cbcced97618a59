"""
Pydantic schemas shared by the resolution engine, the CLI and the HTTP API.

Field names are pythonic; the aliases are the wire names used by
`go list -m -u -json` and by the known licenses config file.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LicenseVerdict(BaseModel):
    """The license determination attached to a single dependency."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="Name")
    path: str = Field(default="", alias="Path")
    contents: str = Field(default="", alias="Contents")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, alias="Confidence")
    error: str = Field(default="", alias="Error")


class ModuleUpdate(BaseModel):
    """Newer version of a module, as reported by `go list -u`."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    path: str = Field(default="", alias="Path")
    version: str = Field(default="", alias="Version")
    time: Optional[str] = Field(default=None, alias="Time")


class DependencyRecord(BaseModel):
    """
    One dependency read from the input stream.

    Keys that are not modelled here are kept (extra="allow") so that they
    can be written back untouched next to the resolved license.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    path: str = Field(alias="Path", min_length=1)
    version: str = Field(default="", alias="Version")
    time: Optional[str] = Field(default=None, alias="Time")
    update: Optional[ModuleUpdate] = Field(default=None, alias="Update")
    source_dir: str = Field(default="", alias="Dir")
    go_mod: str = Field(default="", alias="GoMod")
    license: Optional[LicenseVerdict] = Field(default=None, alias="License")


class KnownLicense(BaseModel):
    """Operator supplied license for a dependency. `Path` is used verbatim."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    path: str = Field(default="", alias="Path")


class KnownLicensesDocument(BaseModel):
    """Top level shape of the known licenses config (YAML or JSON)."""

    licenses: Optional[Dict[str, KnownLicense]] = None


class LicenseMatch(BaseModel):
    """A candidate license proposed by an analyzer for one directory."""

    license: str
    file: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class AnalysisResult(BaseModel):
    """Result set for one analyzed directory, matches ordered best first."""

    arg: str
    matches: List[LicenseMatch] = Field(default_factory=list)
    error: str = ""


class ResolutionOutcome(BaseModel):
    """
    Internal result of the override check / analyzer call for one dependency.

    When `leave_path_untouched` is True the match came from the known
    licenses config and its file path must not be joined with `Dir`.
    """

    result: AnalysisResult
    leave_path_untouched: bool = False
