from .errors import (
    LOSError,
    InvalidRequest,
    InvalidCoordinate,
    InvalidParameter,
    ElevationLookupFailure,
)
from .geodesy import (
    EARTH_RADIUS_M,
    GeoPoint,
    validate_coordinate,
    great_circle_distance_m,
    initial_bearing_deg,
    intermediate_point,
    bearing_to_cardinal,
)
from .curvature import STANDARD_K_FACTOR, effective_earth_radius_m, earth_bulge_m
from .fresnel import fresnel_radius_m, clearance_ratio
from .models import (
    Classification,
    CLEAR,
    MARGINAL,
    OBSTRUCTED,
    INDETERMINATE,
    LinkRequest,
    ProfilePoint,
    LinkResult,
)
from .elevation import (
    ElevationProvider,
    CallableElevationProvider,
    OpenTopoDataProvider,
    CachedElevationProvider,
    as_provider,
)
from .sampler import ProfileSample, sample_path, lookup_elevations, build_profile
from .config import (
    ClassificationThresholds,
    EngineSettings,
    parse_settings_text,
    load_settings_from_text_file,
)
from .evaluator import validate_request, classify, find_critical_point, evaluate
from .report import profile_to_table, save_profile_csv, result_to_response, result_to_response_json

__all__ = [
    "LOSError",
    "InvalidRequest",
    "InvalidCoordinate",
    "InvalidParameter",
    "ElevationLookupFailure",
    "EARTH_RADIUS_M",
    "GeoPoint",
    "validate_coordinate",
    "great_circle_distance_m",
    "initial_bearing_deg",
    "intermediate_point",
    "bearing_to_cardinal",
    "STANDARD_K_FACTOR",
    "effective_earth_radius_m",
    "earth_bulge_m",
    "fresnel_radius_m",
    "clearance_ratio",
    "Classification",
    "CLEAR",
    "MARGINAL",
    "OBSTRUCTED",
    "INDETERMINATE",
    "LinkRequest",
    "ProfilePoint",
    "LinkResult",
    "ElevationProvider",
    "CallableElevationProvider",
    "OpenTopoDataProvider",
    "CachedElevationProvider",
    "as_provider",
    "ProfileSample",
    "sample_path",
    "lookup_elevations",
    "build_profile",
    "ClassificationThresholds",
    "EngineSettings",
    "parse_settings_text",
    "load_settings_from_text_file",
    "validate_request",
    "classify",
    "find_critical_point",
    "evaluate",
    "profile_to_table",
    "save_profile_csv",
    "result_to_response",
    "result_to_response_json",
]
