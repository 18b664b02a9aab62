"""Resource quantity parsing.

Parses Kubernetes-style CPU and memory quantities so requests can be compared
against limits. Memory strings are never converted for output; parsing only
exists for the request <= limit comparison.
"""

import logging
import re
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)

CPU_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(m?)$")

# Docker and Kubernetes spellings: 512M, 512Mi, 512MB, 1g, 1Gi
MEMORY_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)([kKmMgGtTpPeE]?)(i?)([bB]?)$")

MEMORY_EXPONENTS = {"": 0, "k": 1, "m": 2, "g": 3, "t": 4, "p": 5, "e": 6}

# Kubernetes spellings only: lowercase "m" is milli, no "B" suffix
KUBERNETES_MEMORY_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(m|k|[MGTPE]|[KMGTPE]i)?$")

KUBERNETES_MEMORY_FACTORS = {
    None: Decimal(1),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000) ** 2,
    "G": Decimal(1000) ** 3,
    "T": Decimal(1000) ** 4,
    "P": Decimal(1000) ** 5,
    "E": Decimal(1000) ** 6,
    "Ki": Decimal(1024),
    "Mi": Decimal(1024) ** 2,
    "Gi": Decimal(1024) ** 3,
    "Ti": Decimal(1024) ** 4,
    "Pi": Decimal(1024) ** 5,
    "Ei": Decimal(1024) ** 6,
}


def parse_cpu(quantity: str) -> Decimal | None:
    """
    Parse a CPU quantity into cores.

    Args:
        quantity: e.g. "2", "0.25", "500m"

    Returns:
        Number of cores, or None if the string is not a CPU quantity
    """
    match = CPU_PATTERN.match(quantity.strip())
    if not match:
        return None

    try:
        cores = Decimal(match.group(1))
    except InvalidOperation:
        return None

    if match.group(2) == "m":
        cores = cores / 1000
    return cores


def parse_memory(quantity: str) -> Decimal | None:
    """
    Parse a memory quantity into bytes.

    A lowercase "m" is read as mega, the way Docker reads it.

    Args:
        quantity: e.g. "512Mi", "1G", "256m", "1073741824"

    Returns:
        Number of bytes, or None if the string is not a memory quantity
    """
    match = MEMORY_PATTERN.match(quantity.strip())
    if not match:
        return None

    number, suffix, binary, _ = match.groups()
    if binary and not suffix:
        return None

    base = 1024 if binary else 1000
    exponent = MEMORY_EXPONENTS[suffix.lower()]
    return Decimal(number) * (Decimal(base) ** exponent)


def cpu_to_cores(quantity: str) -> str:
    """
    Format a CPU quantity as a plain core count ("500m" -> "0.5").

    Raises:
        ValueError: If the quantity is not a CPU quantity
    """
    cores = parse_cpu(quantity)
    if cores is None:
        raise ValueError(f"Not a CPU quantity: {quantity!r}")

    text = format(cores.normalize(), "f")
    logger.debug(f"Normalized CPU quantity '{quantity}' to '{text}'")
    return text


def parse_kubernetes_memory(quantity: str) -> Decimal | None:
    """
    Parse a memory quantity the way Kubernetes reads it, into bytes.

    Unlike parse_memory, a lowercase "m" is milli ("600m" is 0.6 bytes) and
    Docker spellings such as "512MB" or "1g" are rejected.

    Returns:
        Number of bytes, or None if Kubernetes would not accept the string
    """
    match = KUBERNETES_MEMORY_PATTERN.match(quantity.strip())
    if not match:
        return None
    return Decimal(match.group(1)) * KUBERNETES_MEMORY_FACTORS[match.group(2)]
