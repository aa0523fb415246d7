from dealership.core.result import STATUS_BY_KIND, Err, ErrorKind, Ok, and_then, is_ok, missing_fields, not_found


def test_every_kind_maps_to_a_status():
    assert set(STATUS_BY_KIND) == set(ErrorKind)
    assert Err(ErrorKind.CONFLICT, "dup").status_code == 409
    assert Err(ErrorKind.BUSINESS_RULE, "nope").status_code == 400
    assert Err(ErrorKind.INTERNAL, "boom").status_code == 500


def test_and_then_chains_ok_and_short_circuits_err():
    assert and_then(Ok(2), lambda v: Ok(v * 3)) == Ok(6)

    err = Err(ErrorKind.NOT_FOUND, "gone")
    assert and_then(err, lambda v: Ok(v)) is err
    assert is_ok(Ok(None))
    assert not is_ok(err)


def test_message_helpers():
    assert not_found("Vehicle").detail == "Vehicle not found"
    assert missing_fields(["vin", "make"]).detail == "Missing required fields: vin, make"
