# tests/test_mapper.py
import json

import pytest

from conftest import listing_data
from gaadiyaan import mapper
from gaadiyaan.exceptions import ValidationError


def test_to_storage_renames_and_normalizes():
    row = mapper.to_storage(listing_data(price="500000", year="2021", fuelType="Petrol", transmission="Manual"))
    assert row["car_title"] == "Maruti Swift VXI"
    assert row["price"] == 500000.0
    assert row["year"] == 2021
    assert row["fuel_type"] == "petrol"
    assert row["transmission"] == "manual"
    assert row["registration_year"] == 2021
    assert row["kms_driven"] == 25000
    assert json.loads(row["images"]) == ["http://testserver/uploads/vehicles/a.jpg"]
    assert json.loads(row["features"]) == {"sunroof": False, "color": "red"}


def test_empty_structured_values_are_stored_as_null():
    row = mapper.to_storage(listing_data(specifications=[], features={}, images=[], description=""))
    assert row["specifications"] is None
    assert row["features"] is None
    assert row["images"] is None
    assert row["description"] is None

    row = mapper.to_storage({k: v for k, v in listing_data().items()
                             if k not in ("specifications", "features", "images", "description")})
    assert row["specifications"] is None
    assert row["images"] is None


def test_validation_names_every_offending_field():
    data = listing_data(carTitle="", price="lots", seats="five", fuelType="steam")
    del data["make"]
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage(data)
    assert set(exc.value.fields) == {"carTitle", "make", "price", "seats", "fuelType"}
    assert "Missing required fields" in exc.value.message
    assert "Invalid numeric values" in exc.value.message


def test_dealer_id_is_required():
    data = listing_data()
    del data["dealerId"]
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage(data)
    assert exc.value.fields == ["dealerId"]


def test_negative_price_and_fractional_integers_are_rejected():
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage(listing_data(price=-1, kmsDriven="12.5"))
    assert set(exc.value.fields) == {"price", "kmsDriven"}


def test_integral_float_strings_are_accepted():
    assert mapper.to_storage(listing_data(seats="5.0"))["seats"] == 5


def test_structured_values_must_have_the_right_shape():
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage(listing_data(specifications="ABS", features=["x"], images=[1, 2]))
    assert set(exc.value.fields) == {"specifications", "features", "images"}


def test_round_trip_reproduces_listing():
    original = listing_data(price=500000.0)
    row = dict(mapper.to_storage(original), id=7)
    external = mapper.from_storage(row)
    assert external.pop("id") == 7
    assert external == original


def test_malformed_images_degrade_to_empty_list():
    good = dict(mapper.to_storage(listing_data()), id=1)
    bad = dict(mapper.to_storage(listing_data()), id=2, images="[not json")
    not_a_list = dict(mapper.to_storage(listing_data()), id=3, images='{"a": 1}')
    decoded = [mapper.from_storage(r) for r in (good, bad, not_a_list)]
    assert decoded[0]["images"] == ["http://testserver/uploads/vehicles/a.jpg"]
    assert decoded[1]["images"] == []
    assert decoded[2]["images"] == []
    assert decoded[1]["carTitle"] == "Maruti Swift VXI"


def test_null_structured_columns_decode_to_empty_values():
    row = dict(mapper.to_storage(listing_data(specifications=[], features={}, images=[])), id=1)
    external = mapper.from_storage(row)
    assert external["specifications"] == []
    assert external["features"] == {}
    assert external["images"] == []


def test_partial_update_only_returns_supplied_fields():
    row = mapper.to_storage_partial({"price": "450000", "fuelType": "CNG", "description": None})
    assert row == {"price": 450000.0, "fuel_type": "cng", "description": None}


def test_partial_update_rejects_immutable_and_unknown_fields():
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage_partial({"dealerId": "GD2024009", "color": "red", "seats": "x"})
    assert set(exc.value.fields) == {"dealerId", "color", "seats"}


def test_partial_update_rejects_blank_required_and_empty_payload():
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage_partial({"make": "  "})
    assert exc.value.fields == ["make"]
    with pytest.raises(ValidationError):
        mapper.to_storage_partial({})


def test_decode_form_value():
    assert mapper.decode_form_value('["ABS"]', "specifications") == ["ABS"]
    assert mapper.decode_form_value("", "features") is None
    assert mapper.decode_form_value({"a": 1}, "features") == {"a": 1}
    with pytest.raises(ValidationError) as exc:
        mapper.decode_form_value("{broken", "features")
    assert exc.value.fields == ["features"]


def test_integers_and_price_must_fit_their_columns():
    with pytest.raises(ValidationError) as exc:
        mapper.to_storage(listing_data(kmsDriven="100000000000000000000", seats=2**31, price=1e12))
    assert set(exc.value.fields) == {"kmsDriven", "seats", "price"}

    row = mapper.to_storage(listing_data(kmsDriven=2**31 - 1, price="9999999999.99"))
    assert row["kms_driven"] == 2**31 - 1

    with pytest.raises(ValidationError) as exc:
        mapper.to_storage_partial({"year": "1e30"})
    assert exc.value.fields == ["year"]
