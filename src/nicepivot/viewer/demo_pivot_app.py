# Demo app for the pivot engine
"""Demo application wiring synthetic observations through the pivot engine.

Shows:
1. Symptom-only pivot (symptom_segment x dos_date) as a raw-dump aggrid,
   a heatmap and a ranked bar chart
2. Problem-only pivot (diagnosis x dos_date) as a heatmap
3. Demographic cross-tab (HRSN indicators x age range) as a heatmap
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any

from nicegui import ui

from nicepivot.pivot_engine import (
    build_demographic_crosstab,
    build_problem_only_pivot,
    build_symptom_only_pivot,
    to_heatmap_series,
    to_ranked_list,
)
from nicepivot.pivot_engine.demographic import AGE_BANDS
from nicepivot.utils.logging import configure_logging, get_logger
from nicepivot.viewer.figures import (
    bar_figure,
    demographic_heatmap_figure,
    heatmap_figure,
)
from nicepivot.viewer.pivot_table_view import PivotTableView

logger = get_logger(__name__)

SYMPTOMS = ["Fatigue", "Headache", "Insomnia", "Nausea", "Chest pain"]
DIAGNOSES = ["Hypertension", "Type 2 diabetes", "Asthma", "Depression"]
INDICATORS = ["housing_insecurity", "food_insecurity", "veteran_status", "has_a_car", "gender"]


def make_observations(n: int = 300, *, seed: int = 0) -> list[dict[str, Any]]:
    """Synthetic observation rows in mixed key spellings and date formats."""
    rng = random.Random(seed)
    start = date(2024, 3, 1)
    rows: list[dict[str, Any]] = []
    for i in range(n):
        day = start + timedelta(days=rng.randrange(10))
        kind = rng.choice(["Symptom", "Symptom", "Problem"])
        fmt = rng.choice(["iso", "mdy", "ymd"])
        if fmt == "iso":
            dos = f"{day.isoformat()}T09:30:00Z"
        elif fmt == "mdy":
            dos = f"{day.month}/{day.day}/{day.year}"
        else:
            dos = day.isoformat()
        rec: dict[str, Any] = {"patient_id": f"P{i % 60:03d}", "symp_prob": kind}
        # half the rows come from the JSON API with camelCase keys
        date_key = "dosDate" if i % 2 else "dos_date"
        rec[date_key] = dos
        if kind == "Symptom":
            rec["symptom_segment"] = rng.choice(SYMPTOMS + [None])
            if rng.random() < 0.1:
                rec["zcode_hrsn"] = "ZCode/HRSN"
        else:
            rec["diagnosis"] = f"Problem: {rng.choice(DIAGNOSES)}"
        if rng.random() < 0.4:
            rec["mention_id"] = f"M{i}"
        rows.append(rec)
    return rows


def make_patients(n: int = 120, *, seed: int = 1) -> list[dict[str, Any]]:
    """Synthetic one-row-per-patient records for the demographic cross-tab."""
    rng = random.Random(seed)
    patients: list[dict[str, Any]] = []
    for i in range(n):
        p: dict[str, Any] = {"patient_id": f"P{i:03d}"}
        source = rng.choice(["age", "dob", "range", "none"])
        if source == "age":
            p["age"] = rng.randrange(5, 90)
        elif source == "dob":
            p["dateOfBirth"] = f"{rng.randrange(1, 13)}/{rng.randrange(1, 28)}/{rng.randrange(1940, 2010)}"
        elif source == "range":
            p["age_range"] = rng.choice(["18-29", "30-39", "40-49", "50-64"])
        p["housing_insecurity"] = rng.choice(["Yes", "No", None])
        p["food_insecurity"] = rng.random() < 0.3
        p["veteran_status"] = rng.choice(["yes", "no"])
        p["hasACar"] = rng.choice(["Yes", "No"])
        p["gender"] = rng.choice(["F", "M", "", None])
        patients.append(p)
    return patients


def main() -> None:
    """Demo entrypoint."""
    configure_logging()

    observations = make_observations()
    patients = make_patients()

    symptoms = build_symptom_only_pivot(observations, "symptom_segment", "dos_date")
    problems = build_problem_only_pivot(observations, "diagnosis", "dos_date")
    buckets = [label for _lo, _hi, label in AGE_BANDS]
    crosstab = build_demographic_crosstab(patients, INDICATORS, buckets)
    logger.info(f"demo: {symptoms.total_count()} symptom and {problems.total_count()} problem observations")

    ui.page_title("nicepivot demo")

    with ui.column().classes("w-full gap-4 p-4"):
        ui.label("Symptoms by date of service").classes("text-lg font-semibold")
        PivotTableView(
            symptoms,
            on_row_selected=lambda label, _row: ui.notify(f"{label}: {symptoms.row_total(label)} observations"),
        ).build()
        with ui.row().classes("w-full"):
            ui.plotly(heatmap_figure(to_heatmap_series(symptoms), title="Symptom heatmap")).classes("w-1/2")
            ui.plotly(bar_figure(to_ranked_list(symptoms), title="Symptom totals")).classes("w-1/3")

        ui.separator()
        ui.label("Problems by date of service").classes("text-lg font-semibold")
        ui.plotly(heatmap_figure(to_heatmap_series(problems), title="Problem heatmap")).classes("w-full")

        ui.separator()
        ui.label(f"HRSN indicators by age range ({crosstab.total_records} patients)").classes(
            "text-lg font-semibold"
        )
        ui.plotly(demographic_heatmap_figure(crosstab, title="% of age range")).classes("w-full")

    ui.run(reload=False, title="nicepivot demo")


if __name__ in {"__main__", "__mp_main__"}:
    main()
