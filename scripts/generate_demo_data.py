"""Generate simulated session payloads for testing and demos.

Creates 6 volunteers with one running session each:
- 2 clean sessions (no anomalies, no sensor gaps)
- 2 sessions with short ischemic-looking heart-rate bursts
- 2 sessions with sensor dropouts and scattered labels

Each file matches the backend's ``GET /api/sessions/{id}/`` payload, so it can
be opened in the console (JSON upload) or with ``hr-review --session``.

Usage:
    python scripts/generate_demo_data.py
"""

from __future__ import annotations

import json
import math
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Output directory
OUTPUT_DIR = Path(__file__).parent.parent / "data" / "demo"

VOLUNTEERS = [
    ("Ana", "Souza"),
    ("Ben", "Okafor"),
    ("Chen", "Li"),
    ("Dana", "Weiss"),
    ("Eli", "Haddad"),
    ("Fay", "Moreau"),
]


# ============================================================================
# Signal Generation
# ============================================================================

def generate_samples(
    duration_min: float,
    start_time: datetime,
    *,
    base_hr: float = 120,
    interval_s: int = 5,
    burst_rate: float = 0.0,
    dropout_rate: float = 0.0,
) -> list[dict]:
    """Generate one record per ``interval_s`` seconds of a run.

    Args:
        duration_min: Session duration in minutes
        base_hr: Cruising heart rate in BPM
        interval_s: Seconds between records
        burst_rate: Chance per record of starting an anomalous burst
        dropout_rate: Chance per record that the heart-rate sensor is silent

    Returns:
        List of raw per-sample records
    """
    records = []
    altitude = 20.0
    burst_left = 0
    steps = int(duration_min * 60 / interval_s)

    for step in range(steps):
        elapsed = step * interval_s
        # Warm-up ramp over the first five minutes
        warmup = min(elapsed / 300, 1.0)
        heart_rate = 80 + (base_hr - 80) * warmup
        heart_rate += 6 * math.sin(2 * math.pi * elapsed / 240) + random.gauss(0, 2)

        if burst_left == 0 and burst_rate > 0 and random.random() < burst_rate:
            burst_left = random.randint(3, 8)
        anomaly = 0
        if burst_left > 0:
            heart_rate += random.uniform(25, 40)
            anomaly = 1
            burst_left -= 1

        speed = max(0.0, 2.8 * warmup + random.gauss(0, 0.2))
        altitude += random.gauss(0, 0.4)

        record = {
            "timestamp": (start_time + timedelta(seconds=elapsed)).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "heart_rate": round(heart_rate),
            "speed": round(speed, 2),
            "cadence": round(150 + 20 * warmup + random.gauss(0, 3)),
            "altitude": round(altitude, 1),
            "anomaly": anomaly,
            "pred_ischemic": anomaly,
            "pred_arrhythmic": 1 if random.random() < 0.01 else 0,
        }
        if dropout_rate > 0 and random.random() < dropout_rate:
            record["heart_rate"] = None
        records.append(record)

    return records


def build_payload(
    session_id: int,
    volunteer_id: int,
    first_name: str,
    last_name: str,
    samples: list[dict],
    start_time: datetime,
) -> dict:
    """Wrap samples with the metadata the backend returns."""
    heart_rates = [s["heart_rate"] for s in samples if s["heart_rate"] is not None]
    flagged = sum(s["anomaly"] for s in samples)
    return {
        "id": session_id,
        "volunteer": volunteer_id,
        "volunteer_first_name": first_name,
        "volunteer_last_name": last_name,
        "session_date": start_time.date().isoformat(),
        "uploaded_at": (start_time + timedelta(hours=2)).isoformat(),
        "avg_heart_rate": round(sum(heart_rates) / len(heart_rates)) if heart_rates else None,
        "max_heart_rate": max(heart_rates) if heart_rates else None,
        "admin_label": None,
        "ml_prediction": "Ischemic Anomaly" if flagged else "Normal",
        "ml_confidence": round(random.uniform(0.6, 0.99), 2),
        "timeseries_data": samples,
    }


# ============================================================================
# Dataset Generation
# ============================================================================

def generate_all_data() -> list[dict]:
    """Write one JSON payload per volunteer; return a short description of each."""

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    base_time = datetime(2025, 3, 11, 7, 30, tzinfo=timezone.utc)
    profiles = ["clean", "clean", "bursts", "bursts", "dropouts", "dropouts"]

    generated = []
    for number, ((first, last), profile) in enumerate(zip(VOLUNTEERS, profiles), start=1):
        start_time = base_time + timedelta(days=number)
        samples = generate_samples(
            duration_min=random.uniform(20, 45),
            start_time=start_time,
            base_hr=random.uniform(115, 150),
            burst_rate=0.01 if profile == "bursts" else 0.0,
            dropout_rate=0.05 if profile == "dropouts" else 0.0,
        )
        if profile == "dropouts":
            for record in random.sample(samples, k=5):
                record["anomaly"] = 1

        payload = build_payload(100 + number, number, first, last, samples, start_time)
        path = OUTPUT_DIR / f"session_{payload['id']}.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"  [{profile:8}] {first} {last} -> {path.name} ({len(samples)} samples)")

        generated.append({"id": payload["id"], "profile": profile, "path": path})

    return generated


def main():
    """Main entry point."""
    random.seed(42)  # Reproducible

    generated = generate_all_data()

    print(f"\n{'='*60}")
    print(f"Generated {len(generated)} sessions in {OUTPUT_DIR}")
    print(f"{'='*60}")


if __name__ == "__main__":
    main()
