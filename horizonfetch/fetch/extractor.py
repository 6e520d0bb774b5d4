"""VectorExtractor — position and velocity triples from Horizons text output.

A Horizons vector table row looks like::

    2460310.500000000 = A.D. 2024-Jan-01 00:00:00.0000 TDB
     X =-2.105262111032039E+07 Y =-6.640663808353403E+07 Z =-3.492446023382272E+06
     VX= 3.665298706393840E+01 VY=-1.228983810111077E+01 VZ=-4.368172898008150E+00

Only the first X/Y/Z triple and the first VX/VY/VZ triple are used. Both
must be present for a result.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from horizonfetch.models.dataset import Vector3

logger = structlog.get_logger().bind(component="fetch.extractor")

_NUM = r"([-+]?\d+\.\d+E[+-]\d\d)"

POSITION_PATTERN = re.compile(rf"X *= *{_NUM} *Y *= *{_NUM} *Z *= *{_NUM}")
VELOCITY_PATTERN = re.compile(rf"VX *= *{_NUM} *VY *= *{_NUM} *VZ *= *{_NUM}")


def _first_triple(pattern: re.Pattern[str], text: str) -> Vector3 | None:
    match = pattern.search(text)
    if match is None:
        return None
    x, y, z = (float(g) for g in match.groups())
    return (x, y, z)


def extract(text: str) -> tuple[Vector3, Vector3] | None:
    """Return ``(position, velocity)`` found in *text*, or None.

    Returns None when either triple is missing or truncated.
    """
    position = _first_triple(POSITION_PATTERN, text)
    velocity = _first_triple(VELOCITY_PATTERN, text)
    if position is None or velocity is None:
        logger.debug(
            "vectors_not_found",
            position=position is not None,
            velocity=velocity is not None,
            chars=len(text),
        )
        return None
    return position, velocity


def extract_file(path: Path) -> tuple[Vector3, Vector3] | None:
    """Run :func:`extract` over a saved Horizons response.

    A missing or unreadable file yields None, same as text without vectors.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("response_file_unreadable", path=str(path), error=str(exc))
        return None
    logger.info("parsing_response_file", path=str(path), chars=len(text))
    return extract(text)
