"""Read olm.maxOpenShiftVersion out of the CSV olm.properties annotation."""

from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

OLM_PROPERTIES = "olm.properties"
OLM_MAX_OCP_VERSION = "olm.maxOpenShiftVersion"

_EXPECTED_SHAPE = f"\"{OLM_PROPERTIES}\": '[{{\"type\": \"key name\", \"value\": \"key value\"}}]'"


class AnnotationParseError(ValueError):
    """Raised when olm.properties is not an array of {type, value} entries."""


class PropertyAnnotation(BaseModel):
    """A single typed entry of the olm.properties annotation."""
    type: str
    value: Any = None  # Other property types may carry objects

    model_config = ConfigDict(extra="ignore")


_PROPERTIES_ADAPTER = TypeAdapter(List[PropertyAnnotation])


def parse_properties(properties: str) -> List[PropertyAnnotation]:
    """Parse the raw olm.properties JSON string."""
    try:
        return _PROPERTIES_ADAPTER.validate_json(properties)
    except ValidationError as e:
        raise AnnotationParseError(
            f"csv.Annotations has an invalid value specified for {OLM_PROPERTIES}. "
            f"Please, check the value ({properties}) and ensure that it is an array such as: "
            f"{_EXPECTED_SHAPE}"
        ) from e


def extract_max_ocp_version(annotations: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Return the olm.maxOpenShiftVersion value declared by the CSV.

    The annotation is optional: None is returned when olm.properties is
    absent or empty, or when no entry has the max version type.

    Raises:
        AnnotationParseError: If olm.properties is present but malformed,
                              or the max version entry is not a string
    """
    properties = (annotations or {}).get(OLM_PROPERTIES)
    if not properties:
        return None

    for entry in parse_properties(properties):
        if entry.type != OLM_MAX_OCP_VERSION:
            continue
        if not isinstance(entry.value, str):
            raise AnnotationParseError(
                f"csv.Annotations has an invalid value specified for {OLM_PROPERTIES}. "
                f"The {OLM_MAX_OCP_VERSION} value must be a string, got ({entry.value!r}). "
                f"Expected an array such as: {_EXPECTED_SHAPE}"
            )
        return entry.value
    return None
