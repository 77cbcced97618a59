from typing import List, Optional

from fastapi import APIRouter, HTTPException

from license_finder.core.config import FinderConfig
from license_finder.core.exceptions import (
    AnalyzerContractError,
    DependencyTimeoutError,
    GlobalTimeoutError,
    KnownLicensesError,
    LicenseFinderError,
    RecordError,
)
from license_finder.models.schemas import DependencyRecord
from license_finder.services.finder_workflow import build_analyzer, perform_resolution
from license_finder.services.json_stream import record_to_dict

router = APIRouter()

_STATUS_BY_ERROR = {
    RecordError: 422,
    AnalyzerContractError: 500,
    KnownLicensesError: 500,
    DependencyTimeoutError: 504,
    GlobalTimeoutError: 504,
}


def get_config() -> FinderConfig:
    return FinderConfig.from_env()


@router.post("/resolve")
def resolve_dependencies(
    records: List[DependencyRecord],
    include_contents: Optional[bool] = None,
    error_is_fatal: Optional[bool] = None,
):
    """
    Resolves the license of every posted dependency, in order.

    Query flags override the server defaults for this request only.
    """
    config = get_config()
    overrides = {}
    if include_contents is not None:
        overrides["include_license_contents"] = include_contents
    if error_is_fatal is not None:
        overrides["error_is_fatal"] = error_is_fatal
    if overrides:
        config = config.model_copy(update=overrides)

    resolved = []
    try:
        perform_resolution(
            config,
            records,
            lambda record: resolved.append(record_to_dict(record)),
            analyzer=build_analyzer(config),
        )
    except LicenseFinderError as e:
        status = _STATUS_BY_ERROR.get(type(e), 500)
        raise HTTPException(status_code=status, detail=str(e))

    return resolved
