"""Render a :class:`DatasetGrid` for downstream use.

Two formats:

``c``    — a self-contained C header declaring ``CBodyData``, ``SolarData`` and
           ``SolarDataSet`` plus a ``solarDataSet`` initializer, for embedding
           the ephemeris into native code.
``json`` — the pydantic dump of the grid, including each cell's ``valid`` flag.

Floats are printed with 16 significant digits.
"""

from __future__ import annotations

from collections.abc import Callable

from horizonfetch.models.dataset import DatasetGrid, Vector3

MAX_PRECISION = 16

_C_TYPES = """\
#include <cstdint>

struct CBodyData {{
  // Horizon celestial body ID `pidx * 100 + 99`, i.e. pidx=1 for Mercury -> id=199
  unsigned id;
  // Position on the ecliptical plane w/ units in [km]
  double position[3];
  // Velocity vector on the ecliptical plane w/ units in [km/s]
  double velocity[3];
}};
struct SolarData {{
  /// Timestamp in UTC, format YYYY-MM-DD HH:MM:SS
  const char* time_s;
  /// Seconds since Unix Epoch 1970-01-01T00:00:00.0Z in UTC
  int64_t time_u;
  CBodyData planets[{body_count}];
}};
struct SolarDataSet {{
  /// Number of SolarData entries
  unsigned setCount;
  /// Number of CBodyData entries within each SolarData entry
  unsigned planetCount;
  SolarData set[{year_count}];
}};

"""


def _num(value: float) -> str:
    return f"{value:.{MAX_PRECISION}g}"


def _vec(v: Vector3) -> str:
    return ", ".join(_num(x) for x in v)


def render_c_source(grid: DatasetGrid) -> str:
    """C header text with the whole grid as a ``SolarDataSet`` initializer."""
    lines: list[str] = [
        _C_TYPES.format(body_count=grid.body_count, year_count=grid.year_count),
        "SolarDataSet solarDataSet = {\n",
        "    /// Number of SolarData entries\n",
        f"    {grid.year_count},\n",
        "    /// Number of CBodyData entries within each SolarData entry\n",
        f"    {grid.body_count},\n",
        "    /// SolarData entries\n",
        "    {\n",
    ]
    for set_idx, time_slice in enumerate(grid.slices):
        lines.append(f"        /** SolarData [{set_idx}]: {time_slice.timestamp} */\n")
        lines.append(f'        {{ "{time_slice.timestamp}", {time_slice.epoch_seconds}, {{\n')
        for body_idx, record in enumerate(time_slice.records):
            lines.append(
                f"            /** Planet [{body_idx}], id {record.body_id} "
                f"w/ max_precision {MAX_PRECISION} */\n"
            )
            lines.append(f"            {{ {record.body_id},\n")
            lines.append(f"              {{ {_vec(record.position)}}},\n")
            lines.append(f"              {{ {_vec(record.velocity)}}}\n")
            last_body = body_idx == grid.body_count - 1
            lines.append("            }\n" if last_body else "            },\n")
        last_set = set_idx == grid.year_count - 1
        lines.append("        } }\n" if last_set else "        } },\n")
    lines.append("    }\n")
    lines.append("};\n")
    return "".join(lines)


def render_json(grid: DatasetGrid) -> str:
    """Indented JSON dump of the grid."""
    return grid.model_dump_json(indent=2) + "\n"


EMITTERS: dict[str, Callable[[DatasetGrid], str]] = {
    "c": render_c_source,
    "json": render_json,
}
