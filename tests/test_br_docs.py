import pytest

from app.utils.br_docs import clean_cpf, clean_phone, format_cpf, format_phone, validate_cpf


@pytest.mark.parametrize("cpf", ["52998224725", "529.982.247-25", "111.444.777-35"])
def test_validate_cpf_accepts_valid(cpf):
    assert validate_cpf(cpf) is True


@pytest.mark.parametrize(
    "cpf",
    [
        "52998224724",  # dígito verificador errado
        "11111111111",  # repetido
        "1234567890",  # curto
        "",
    ],
)
def test_validate_cpf_rejects_invalid(cpf):
    assert validate_cpf(cpf) is False


def test_clean_helpers_keep_only_digits():
    assert clean_cpf("529.982.247-25") == "52998224725"
    assert clean_phone("(11) 91234-5678") == "11912345678"


def test_format_cpf():
    assert format_cpf("52998224725") == "529.982.247-25"
    assert format_cpf("123") == "123"


def test_format_phone_mobile_and_landline():
    assert format_phone("11912345678") == "(11) 9 1234-5678"
    assert format_phone("1133334444") == "(11) 3333-4444"
    assert format_phone("123") == "123"
    assert format_phone(None) is None
