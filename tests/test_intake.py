"""Tests for same-day intake aggregation."""

from datetime import UTC, date, datetime
from itertools import permutations
from zoneinfo import ZoneInfo

from nutrimate.domain.nutrition import Micronutrients, NutrientVector
from nutrimate.domain.records import ConsumptionRecord
from nutrimate.services.intake import IntakeService, add_vectors, aggregate
from tests.conftest import TODAY, InMemoryConsumptionRepository, make_record


def _at(day: int, hour: int) -> datetime:
    return datetime(2026, 10, day, hour, 0, tzinfo=UTC)


def test_aggregate_sums_only_reference_day() -> None:
    records = [
        make_record(_at(19, 8), 300, protein_g=10, sodium_mg=200),
        make_record(_at(19, 13), 450, protein_g=20, sodium_mg=300),
        make_record(_at(18, 20), 1000, protein_g=50),
    ]

    total = aggregate(records, TODAY, ZoneInfo("UTC"))

    assert total.calories == 750
    assert total.protein_g == 30
    assert total.sodium_mg == 500


def test_aggregate_empty_is_zero() -> None:
    assert aggregate([], TODAY) == NutrientVector.zero()


def test_aggregate_ignores_record_order() -> None:
    records = [
        make_record(_at(19, 8), 300, fat_g=4),
        make_record(_at(19, 12), 450, fat_g=7),
        make_record(_at(19, 19), 125, fat_g=2),
    ]
    expected = aggregate(records, TODAY)

    for ordering in permutations(records):
        assert aggregate(ordering, TODAY) == expected


def test_aggregate_clamps_negative_fields() -> None:
    records = [
        make_record(_at(19, 8), 300, sugar_g=-5),
        make_record(_at(19, 9), -100, sugar_g=8),
    ]

    total = aggregate(records, TODAY)

    assert total.calories == 300
    assert total.sugar_g == 8


def test_aggregate_uses_local_day() -> None:
    kolkata = ZoneInfo("Asia/Kolkata")
    # 20:00 UTC on the 18th is 01:30 on the 19th in Kolkata.
    late = make_record(_at(18, 20), 200)
    # 19:00 UTC on the 19th is 00:30 on the 20th in Kolkata.
    next_day = make_record(_at(19, 19), 400)

    total = aggregate([late, next_day], TODAY, kolkata)

    assert total.calories == 200


def test_aggregate_reference_instant_is_localized() -> None:
    kolkata = ZoneInfo("Asia/Kolkata")
    records = [make_record(_at(18, 20), 200)]

    total = aggregate(records, _at(18, 21), kolkata)

    assert total.calories == 200


def test_aggregate_micronutrients_when_requested() -> None:
    records = [
        ConsumptionRecord(
            occurred_at=_at(19, 8),
            tag="label",
            name="Fortified milk",
            nutrients=NutrientVector(
                calories=120,
                micronutrients=Micronutrients(calcium_mg=300, vitamin_d_iu=100),
            ),
        ),
        make_record(_at(19, 12), 200),
        ConsumptionRecord(
            occurred_at=_at(19, 18),
            tag="food",
            name="Spinach dal",
            nutrients=NutrientVector(
                calories=250, micronutrients=Micronutrients(iron_mg=4, calcium_mg=90)
            ),
        ),
    ]

    with_micros = aggregate(records, TODAY, include_micronutrients=True)
    without = aggregate(records, TODAY)

    assert with_micros.micronutrients == Micronutrients(
        iron_mg=4, calcium_mg=390, vitamin_d_iu=100
    )
    assert with_micros.calories == 570
    assert without.micronutrients is None


def test_add_vectors_is_commutative() -> None:
    left = NutrientVector(calories=100, protein_g=3, carbs_g=20)
    right = NutrientVector(calories=50, fat_g=2, sodium_mg=90)

    assert add_vectors(left, right) == add_vectors(right, left)


def test_nutrient_vector_from_mapping_defaults_missing_fields() -> None:
    vector = NutrientVector.from_mapping(
        {"calories": 210, "proteinGrams": "7", "fatGrams": -2, "sugarGrams": None}
    )

    assert vector == NutrientVector(calories=210, protein_g=7)


def test_intake_service_today_in_user_timezone(
    consumption_repository: InMemoryConsumptionRepository,
) -> None:
    consumption_repository.add("user-1", make_record(_at(18, 20), 200))
    consumption_repository.add("user-1", make_record(_at(19, 4), 350))
    consumption_repository.add("user-1", make_record(_at(19, 19), 400))
    consumption_repository.add("user-2", make_record(_at(19, 4), 900))
    service = IntakeService(consumption_repository)

    total = service.today("user-1", "Asia/Kolkata", now=_at(19, 10))

    assert total.calories == 550


def test_intake_service_history_newest_first(
    consumption_repository: InMemoryConsumptionRepository,
) -> None:
    consumption_repository.add("user-1", make_record(_at(18, 8), 100, name="Poha"))
    consumption_repository.add("user-1", make_record(_at(19, 8), 200, name="Upma"))
    service = IntakeService(consumption_repository)

    history = service.history("user-1", limit=1)

    assert [record.name for record in history] == ["Upma"]
    assert history[0].occurred_at.date() == date(2026, 10, 19)


def test_aggregate_treats_non_finite_values_as_zero() -> None:
    records = [
        make_record(_at(19, 8), float("nan"), protein_g=float("inf")),
        make_record(_at(19, 9), 300, protein_g=12),
        ConsumptionRecord(
            occurred_at=_at(19, 10),
            tag="food",
            name="Lassi",
            nutrients=NutrientVector(
                calories=180, micronutrients=Micronutrients(calcium_mg=float("nan"))
            ),
        ),
    ]

    total = aggregate(records, TODAY, include_micronutrients=True)

    assert total.calories == 480
    assert total.protein_g == 12
    assert total.micronutrients == Micronutrients(calcium_mg=0.0)


def test_nutrient_vector_from_mapping_drops_infinite() -> None:
    vector = NutrientVector.from_mapping({"calories": "inf", "sodiumMilligrams": 90})

    assert vector == NutrientVector(sodium_mg=90)
