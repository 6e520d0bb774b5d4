"""Horizons batch command text and multipart request body.

A command is the Horizons "batch file" template with two kinds of
placeholders: a single ``OBJECT_ID`` and any number of ``OBJECT_DATE``.

Body ids follow the Horizons major-body scheme: index 1 (Mercury) → 199,
index 3 (Earth) → 399, index 9 (Pluto) → 999. Barycenter mode selects the
system barycenter instead: index 5 → 5 (Jupiter barycenter).
"""

from __future__ import annotations

from horizonfetch.errors import CommandTemplateError

OBJECT_ID_MARK = "OBJECT_ID"
OBJECT_DATE_MARK = "OBJECT_DATE"

HORIZONS_COMMAND_TEMPLATE = (
    "!$$SOF\n"
    f"COMMAND='{OBJECT_ID_MARK}'\n"
    "TABLE_TYPE='Vector'\n"
    "CENTER='@010'\n"
    "REF_PLANE='Ecliptic'\n"
    f"START_TIME='{OBJECT_DATE_MARK} 00:00:00'\n"
    f"STOP_TIME='{OBJECT_DATE_MARK} 00:00:01'\n"
)

HTTP_BOUNDARY = "affedeadbeaf"
CONTENT_TYPE = f"multipart/form-data; boundary={HTTP_BOUNDARY}"
_CRLF = "\r\n"


def body_id(body_idx: int) -> int:
    """Major-body id for a 1-based body index: ``(idx * 100 + 99) % 1000``."""
    return (body_idx * 100 + 99) % 1000


def barycenter_id(body_idx: int) -> int:
    """System barycenter id for a 1-based body index: ``idx % 10``."""
    return body_idx % 10


def resolve_body_id(body_idx: int, use_barycenter: bool) -> int:
    return barycenter_id(body_idx) if use_barycenter else body_id(body_idx)


def object_id_text(cbody_id: int, use_barycenter: bool) -> str:
    """Render an id for the COMMAND line.

    Major-body ids are zero-padded to three digits; barycenter ids are the
    bare digit, since Horizons reads ``'005'`` and ``'5'`` differently.
    """
    if use_barycenter:
        return str(cbody_id)
    return f"{cbody_id:03d}"


def build_command(
    object_id: str,
    object_date: str,
    template: str = HORIZONS_COMMAND_TEMPLATE,
) -> str:
    """Fill *template* with an object id and a date.

    The first ``OBJECT_ID`` is replaced once; every ``OBJECT_DATE`` is
    replaced.

    Raises:
        CommandTemplateError: If the template has no ``OBJECT_ID`` placeholder.
    """
    if OBJECT_ID_MARK not in template:
        raise CommandTemplateError(f"Command template lacks the {OBJECT_ID_MARK} placeholder")
    command = template.replace(OBJECT_ID_MARK, object_id, 1)
    return command.replace(OBJECT_DATE_MARK, object_date)


def build_multipart_body(command: str) -> bytes:
    """Multipart form body with ``format=text`` and the command as ``input`` file.

    Built by hand so the boundary stays the fixed token advertised in
    :data:`CONTENT_TYPE`.
    """
    sep = f"--{HTTP_BOUNDARY}"
    parts = [
        sep,
        'Content-Disposition: form-data; name="format"',
        "",
        "text",
        sep,
        'Content-Disposition: form-data; name="input"; filename="a.cmd"',
        "Content-type: application/octet-stream",
        "",
        command,
        f"{sep}--",
        "",
    ]
    return _CRLF.join(parts).encode("utf-8")
