from prop_parlay.util.parsing import safe_float, safe_int, safe_str


def test_safe_float_parses_numeric_inputs() -> None:
    assert safe_float(1) == 1.0
    assert safe_float(1.5) == 1.5
    assert safe_float("-2.25") == -2.25
    assert safe_float("62.5%") == 62.5
    assert safe_float(True) is None
    assert safe_float("  ") is None
    assert safe_float("abc") is None


def test_safe_float_rejects_non_finite_values() -> None:
    assert safe_float(float("nan")) is None
    assert safe_float("inf") is None
    assert safe_float(None) is None


def test_safe_int_parses_integer_like_inputs() -> None:
    assert safe_int(1) == 1
    assert safe_int(1.9) == 1
    assert safe_int("+120") == 120
    assert safe_int("-110") == -110
    assert safe_int("7.0") == 7
    assert safe_int(True) is None
    assert safe_int("") is None
    assert safe_int("x") is None


def test_safe_str_strips_scalars_and_drops_containers() -> None:
    assert safe_str("  LeBron James ") == "LeBron James"
    assert safe_str(12) == "12"
    assert safe_str(None) == ""
    assert safe_str({"a": 1}) == ""
