"""Extract the OCP versions label from a bundle.Dockerfile or annotations.yaml."""

from typing import Optional

# Label which configures the OCP versions where the bundle is distributed
OCP_LABEL = "com.redhat.openshift.versions"


class LabelSyntaxError(ValueError):
    """Raised when the line holding the label has no usable value."""


def clean_version_string(value: str) -> str:
    """
    Strip what surrounds a label value once split off its line.

    Quotes are removed wherever they appear, then a leading '=' (Dockerfile
    LABEL syntax) and a leading ':' (annotations.yaml syntax), then spaces.
    """
    value = value.replace("'", "").replace('"', "")
    if value.startswith("="):
        value = value[1:]
    if value.startswith(":"):
        value = value[1:]
    return value.strip()


def extract_label_from_text(content: str, label_key: str = OCP_LABEL) -> Optional[str]:
    """
    Find the first line mentioning label_key and return its cleaned value.

    Args:
        content: Text of a bundle.Dockerfile or metadata/annotations.yaml
        label_key: Label to look for

    Returns:
        The raw range value (e.g. "v4.6-v4.8"), or None if no line has the label

    Raises:
        LabelSyntaxError: If the line has neither '=' nor ':' or nothing follows the key
    """
    for line in content.split("\n"):
        if label_key not in line:
            continue
        if "=" not in line and ":" not in line:
            raise LabelSyntaxError(f"invalid syntax ({line}) for ({label_key})")

        remainder = line.split(label_key)[1]
        if not remainder:
            raise LabelSyntaxError(f"invalid syntax ({line}) for ({label_key})")
        return clean_version_string(remainder)
    return None
