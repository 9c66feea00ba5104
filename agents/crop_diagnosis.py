# agents/crop_diagnosis.py

from typing import Optional
from core.models import CropDiagnosisInput, LocationData

TASK_TEMPLATE = """You are an expert plant pathologist and a friendly farming companion.
Diagnose this crop problem.

**Reported symptoms:** "{symptoms}"
{image_line}
Provide a helpful, actionable diagnosis for the farmer:
1.  **Diagnosis:** State the disease, pest or deficiency in natural language.
2.  **Symptoms:** Briefly describe what it usually looks like so the farmer can confirm.
3.  **Organic Treatment:** Biological and organic remedies first.
4.  **Chemical Treatment:** Synthetic options only as a last resort, with their soil-health risks.
5.  **Prevention:** 1-2 key preventive measures for the future.

Keep the response concise, encouraging, and easy to understand."""


def task_variables(payload: CropDiagnosisInput, location: Optional[LocationData]) -> dict:
    return {
        "symptoms": payload.symptoms.strip() or "None described, rely on the image.",
        "image_line": "A photo of the affected plant is attached. Base the diagnosis on what it shows.\n" if payload.image else "",
    }
