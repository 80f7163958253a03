import pytest

from exceptions import ConfigurationError
from generic_services.naming import DecodedNameTypes, decode_name


@pytest.mark.parametrize("name", [None, ""])
def test_no_name(name):
    assert decode_name(name).name_type == DecodedNameTypes.NO_NAME_GIVEN


def test_copy_properties():
    decoded = decode_name("CopyProperties")

    assert decoded.name_type == DecodedNameTypes.COPY_PROPERTIES


def test_ctor_with_param_count():
    decoded = decode_name("Ctor(3)")

    assert decoded.name_type == DecodedNameTypes.CTOR
    assert decoded.num_params == 3


def test_method_name():
    decoded = decode_name("add_review")

    assert decoded.name_type == DecodedNameTypes.METHOD
    assert decoded.name == "add_review"
    assert decoded.num_params is None
    assert str(decoded) == "add_review"


def test_method_name_with_param_count():
    decoded = decode_name("add_review(3)")

    assert decoded.name == "add_review"
    assert decoded.num_params == 3
    assert str(decoded) == "add_review(3)"


@pytest.mark.parametrize("name", ["add review", "add_review(", "add_review(x)", "3things", "CopyProperties(1)"])
def test_bad_names_raise(name):
    with pytest.raises(ConfigurationError):
        decode_name(name)
