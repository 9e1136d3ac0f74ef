"""Body mass index classification."""

from nutrimate.domain.profiles import BodyMassResult, Unavailable

UNDERWEIGHT_BELOW = 18.5
OVERWEIGHT_FROM = 25.0
OBESITY_FROM = 30.0


def calculate_bmi(weight_kg: float | None, height_cm: float | None) -> float | None:
    """Return weight / height_m ** 2, or None without usable inputs."""
    if not weight_kg or not height_cm or height_cm <= 0 or weight_kg <= 0:
        return None
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def classify(
    weight_kg: float | None, height_cm: float | None
) -> BodyMassResult | Unavailable:
    """Classify BMI into bands; each band includes its lower edge."""
    bmi = calculate_bmi(weight_kg, height_cm)
    if bmi is None:
        return Unavailable()
    if bmi < UNDERWEIGHT_BELOW:
        return BodyMassResult(bmi=bmi, category="underweight", is_risk=True)
    if bmi < OVERWEIGHT_FROM:
        return BodyMassResult(bmi=bmi, category="normal", is_risk=False)
    if bmi < OBESITY_FROM:
        return BodyMassResult(bmi=bmi, category="overweight", is_risk=True)
    return BodyMassResult(bmi=bmi, category="obesity", is_risk=True)
