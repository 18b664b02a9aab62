"""Container image reference helpers."""

import re

REPOSITORY_PATTERN = re.compile(r"^[a-z0-9]+(?:[._/-]+[a-z0-9]+)*(?::\d+/[a-z0-9]+(?:[._/-]+[a-z0-9]+)*)?$")
TAG_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")


def split_image(image: str) -> tuple[str, str]:
    """
    Split "repository:tag" into its parts.

    A colon that belongs to a registry port ("registry:5000/app") is not a tag
    separator, so "registry:5000/app" yields an empty tag.

    Returns:
        (repository, tag); tag is "" when the reference carries none
    """
    repository, sep, tag = image.rpartition(":")
    if not sep or "/" in tag:
        return image, ""
    return repository, tag
