# test_chart.py
from __future__ import annotations

from typing import List

import gameplay_models


def build_test_chart_rows() -> List[gameplay_models.ChartRow]:
    """Deterministic built-in chart used when no chart file is configured."""
    step_interval_seconds = 0.6
    total_steps = 24
    lead_in_seconds = 1.0

    # Lane pattern that covers all lanes; lane index equals pitch % 4.
    lane_pattern = [
        0, 1, 2, 3,
        1, 0, 3, 2,
        0, 2, 1, 3,
        2, 3, 0, 1,
    ]
    base_pitch = 60

    rows: List[gameplay_models.ChartRow] = []
    current_time_seconds = lead_in_seconds

    for step_index in range(total_steps):
        lane = lane_pattern[step_index % len(lane_pattern)]
        pitch = base_pitch + lane + 4 * (step_index % 3)

        # Every sixth step is a held note long enough to carry a tail.
        if step_index % 6 == 5:
            duration_seconds = 1.5
        else:
            duration_seconds = 0.25

        rows.append(
            gameplay_models.ChartRow(
                user_played=True,
                instrument_name="piano",
                velocity_raw=96,
                pitch=pitch,
                start=round(current_time_seconds, 3),
                end=round(current_time_seconds + duration_seconds, 3),
            )
        )

        # Background bass on every other step, arriving with the played note.
        if step_index % 2 == 0:
            rows.append(
                gameplay_models.ChartRow(
                    user_played=False,
                    instrument_name="bass-electric",
                    velocity_raw=70,
                    pitch=36 + lane,
                    start=round(current_time_seconds, 3),
                    end=round(current_time_seconds + step_interval_seconds, 3),
                )
            )

        current_time_seconds += step_interval_seconds
        if step_index % 6 == 5:
            current_time_seconds += 1.0

    return rows


def build_test_chart_csv() -> str:
    lines = ["user_played,instrument_name,velocity,pitch,start,end"]
    for row in build_test_chart_rows():
        lines.append(
            f"{row.user_played},{row.instrument_name},{row.velocity_raw},{row.pitch},{row.start},{row.end}"
        )
    return "\n".join(lines) + "\n"
